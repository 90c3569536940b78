from typing import Optional, Union


class WikiClientError(Exception):
    """Base exception for wiki client errors"""

    def __init__(self, message: str, operation: str = None, details: dict = None) -> None:
        self.message = message
        self.operation = operation
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.operation:
            return f"[{self.operation}] {self.message}"
        return self.message


class WikiTransportError(WikiClientError):
    """Raised when the request could not be delivered (connection refused, timeout, ...)"""

    def __init__(
        self,
        message: str = "Transport failure",
        operation: str = None,
        details: dict = None,
    ) -> None:
        super().__init__(message, operation, details)


class WikiApiError(WikiClientError):
    """Raised when the server answers with a non-success status"""

    def __init__(
        self,
        status_code: int,
        body: Union[str, bytes, None],
        operation: str = None,
        message: Optional[str] = None,
        type_key: Optional[str] = None,
        details: dict = None,
    ) -> None:
        super().__init__(message or f"Request failed with status {status_code}", operation, details)
        self.status_code = status_code
        self.body = body
        self.type_key = type_key


class WikiDeserializationError(WikiClientError):
    """Raised when a response body does not match the expected shape"""

    def __init__(
        self,
        body: Union[str, bytes, None],
        operation: str = None,
        message: str = "Failed to deserialize response body",
        details: dict = None,
    ) -> None:
        super().__init__(message, operation, details)
        self.body = body
