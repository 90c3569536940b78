"""
Client configuration settings.

Settings are loaded from environment variables (a local `.env` file is read
first when present) with sensible defaults for everything but credentials.
"""

import os
from typing import Dict, Optional

from dotenv import load_dotenv  # type: ignore
from pydantic import BaseModel, Field, field_validator  # type: ignore


class WikiClientSettings(BaseModel):
    """Connection settings for the wiki client."""

    organization_url: Optional[str] = Field(default=None, description="Organization URL, e.g. https://dev.azure.com/contoso")
    project: Optional[str] = Field(default=None, description="Default project scope")
    token: Optional[str] = Field(default=None, description="Personal access token", repr=False)
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator("organization_url")
    @classmethod
    def validate_organization_url(cls, v: Optional[str]) -> Optional[str]:
        """Ensure organization URL doesn't end with trailing slash."""
        return v.rstrip("/") if v else v

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "WikiClientSettings":
        """
        Load settings from environment variables.

        Returns:
            WikiClientSettings instance with values from environment
        """
        load_dotenv(dotenv_path)
        return cls(
            organization_url=os.getenv("AZURE_DEVOPS_ORG_URL"),
            project=os.getenv("AZURE_DEVOPS_PROJECT"),
            token=os.getenv("AZURE_DEVOPS_PAT"),
            timeout=float(os.getenv("AZURE_DEVOPS_TIMEOUT", "30")),
            log_level=os.getenv("AZURE_DEVOPS_LOG_LEVEL", "INFO"),
        )

    def to_dict(self) -> Dict:
        """Convert settings to dictionary, token excluded."""
        return self.model_dump(exclude={"token"})


# Global settings instance
_settings: Optional[WikiClientSettings] = None


def get_settings() -> WikiClientSettings:
    """
    Get settings singleton.

    Returns:
        WikiClientSettings instance
    """
    global _settings
    if _settings is None:
        _settings = WikiClientSettings.from_env()
    return _settings


def reset_settings() -> None:
    """Reset settings singleton (useful for testing)."""
    global _settings
    _settings = None
