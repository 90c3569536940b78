import logging
from typing import Dict, Optional

import httpx  # type: ignore

from azwiki.sources.client.http.http_request import BodyMode, HTTPRequest
from azwiki.sources.client.http.http_response import HTTPResponse
from azwiki.sources.client.http.pending_response import PendingResponse
from azwiki.sources.client.iclient import IClient


class HTTPClient(IClient):
    """
    Asynchronous HTTP client with authentication.

    Features:
    - Automatic Authorization header injection
    - Per-request header overrides (request headers take precedence)
    - Non-blocking dispatch: every call returns a PendingResponse whose
      headers and body can be awaited independently

    Exactly one exchange is made per dispatched request. Failed requests are
    never retried; timeouts are left to the underlying httpx client.

    Args:
        base_url: Base URL every request path is appended to
        token: Authentication token
        token_type: Token type for Authorization header (default: "Bearer")
        timeout: Request timeout in seconds (default: 30.0)
        follow_redirects: Whether to follow HTTP redirects (default: True)
        transport: Optional httpx transport, mainly for tests
        logger: Optional logger instance
    """
    def __init__(
        self,
        base_url: str,
        token: str,
        token_type: str = "Bearer",
        timeout: float = 30.0,
        follow_redirects: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        logger: Optional[logging.Logger] = None
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.headers: Dict[str, str] = {
            "Authorization": f"{token_type} {token}",
        }
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self.transport = transport
        self.logger = logger or logging.getLogger(__name__)
        self.client: Optional[httpx.AsyncClient] = None

    def get_client(self) -> "HTTPClient":
        """Get the client"""
        return self

    def get_base_url(self) -> str:
        """Get the base URL"""
        return self.base_url

    def _ensure_client(self) -> httpx.AsyncClient:
        """Ensure client is created and available."""
        if self.client is None:
            self.client = httpx.AsyncClient(
                transport=self.transport,
                timeout=self.timeout,
                follow_redirects=self.follow_redirects
            )
        return self.client

    def build_url(self, request: HTTPRequest) -> str:
        """Absolute URL for a request, query string included"""
        url = f"{self.base_url}/{request.path()}"
        query = request.query_string()
        if query:
            url = f"{url}?{query}"
        return url

    def dispatch(self, request: HTTPRequest) -> PendingResponse:
        """Start an HTTP exchange and return immediately.

        Must be called from a coroutine: the exchange is scheduled as a task
        on the running event loop.

        Args:
            request: The HTTP request to execute
        Returns:
            A PendingResponse resolving to the headers and body of the exchange
        """
        client = self._ensure_client()

        # Merge client headers with request headers (request headers take precedence)
        merged_headers = {**self.headers, **request.headers}
        url = self.build_url(request)
        http_request = client.build_request(
            request.method,
            url,
            headers=merged_headers,
            content=request.content(),
        )
        self.logger.debug("%s %s (%s)", request.method, url, request.operation)
        stream = request.body_mode == BodyMode.STREAM
        return PendingResponse(client.send(http_request, stream=stream), request, logger=self.logger)

    async def execute(self, request: HTTPRequest) -> HTTPResponse:
        """Execute an HTTP request and wait for it to complete
        Args:
            request: The HTTP request to execute
        Returns:
            A HTTPResponse object containing the response from the server
        """
        return await self.dispatch(request).response()

    async def close(self) -> None:
        """Close the client"""
        if self.client:
            await self.client.aclose()
            self.client = None

    async def __aenter__(self) -> "HTTPClient":
        """Async context manager entry"""
        self._ensure_client()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit"""
        await self.close()
