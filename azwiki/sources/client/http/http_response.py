import httpx  # type: ignore


class HTTPResponse:
    """Thin wrapper over a fully read httpx response
    Args:
        response: The httpx response, body already loaded
    """

    def __init__(self, response: httpx.Response) -> None:
        self.response = response

    @property
    def status(self) -> int:
        return self.response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.response.headers

    @property
    def url(self) -> str:
        return str(self.response.request.url)

    def text(self) -> str:
        return self.response.text

    def bytes(self) -> bytes:
        return self.response.content

    def __repr__(self) -> str:
        return f"HTTPResponse(status={self.status}, url={self.url!r})"
