import base64
import logging
from typing import Optional

import httpx  # type: ignore
from pydantic import BaseModel, field_validator  # type: ignore

from azwiki.config.constants.azure_devops import ContentType, HeaderName
from azwiki.config.settings import WikiClientSettings
from azwiki.sources.client.http.http_client import HTTPClient
from azwiki.sources.client.iclient import IClient


class AzureDevOpsRESTClientViaToken(HTTPClient):
    """Azure DevOps REST client via personal access token
    Azure DevOps accepts a PAT as the password half of Basic authentication:
    Authorization: Basic base64(":" + <pat>)
        organization_url: e.g. https://dev.azure.com/<organization>
        token: The personal access token
        project: Default project scope for every call
    """

    def __init__(
        self,
        organization_url: str,
        token: str,
        project: Optional[str] = None,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        encoded = base64.b64encode(f":{token}".encode("utf-8")).decode("ascii")
        super().__init__(
            organization_url,
            encoded,
            "Basic",
            timeout=timeout,
            transport=transport,
            logger=logger,
        )
        self.project = project

        self.headers.update({
            HeaderName.ACCEPT.value: ContentType.JSON.value,
        })

    def get_project(self) -> Optional[str]:
        """Get the default project"""
        return self.project


class AzureDevOpsTokenConfig(BaseModel):
    """Configuration for Azure DevOps REST client via PAT
    Args:
        organization_url: The organization URL
        token: Personal access token
        project: Default project name or id
        timeout: Request timeout in seconds
    """
    organization_url: str
    token: str
    project: Optional[str] = None
    timeout: float = 30.0

    @field_validator("organization_url")
    @classmethod
    def validate_organization_url(cls, v: str) -> str:
        """Ensure organization URL doesn't end with trailing slash."""
        return v.rstrip("/")

    def create_client(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> AzureDevOpsRESTClientViaToken:
        """Create an Azure DevOps client"""
        return AzureDevOpsRESTClientViaToken(
            self.organization_url,
            self.token,
            self.project,
            timeout=self.timeout,
            transport=transport,
        )

    def to_dict(self) -> dict:
        """Convert the configuration to a dictionary, token excluded"""
        return self.model_dump(exclude={"token"})


class AzureDevOpsClient(IClient):
    """Builder class for Azure DevOps clients"""

    def __init__(self, client: AzureDevOpsRESTClientViaToken) -> None:
        """Initialize with an Azure DevOps client object"""
        self.client = client

    def get_client(self) -> AzureDevOpsRESTClientViaToken:
        """Return the Azure DevOps client object"""
        return self.client

    def get_base_url(self) -> str:
        """Get the base URL"""
        return self.client.get_base_url()

    @classmethod
    def build_with_config(
        cls,
        config: AzureDevOpsTokenConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "AzureDevOpsClient":
        """Build AzureDevOpsClient with configuration
        Args:
            config: AzureDevOpsTokenConfig instance
            transport: Optional httpx transport
        Returns:
            AzureDevOpsClient instance
        """
        return cls(config.create_client(transport=transport))

    @classmethod
    def build_from_settings(cls, settings: WikiClientSettings) -> "AzureDevOpsClient":
        """Build AzureDevOpsClient from environment-backed settings
        Raises:
            ValueError: If the organization URL or token is missing
        """
        if not settings.organization_url or not settings.token:
            raise ValueError("Azure DevOps configuration not found: organization URL and token are required")
        config = AzureDevOpsTokenConfig(
            organization_url=settings.organization_url,
            token=settings.token,
            project=settings.project,
            timeout=settings.timeout,
        )
        return cls.build_with_config(config)

    async def close(self) -> None:
        await self.client.close()
