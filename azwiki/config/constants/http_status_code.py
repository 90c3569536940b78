from enum import Enum


class HttpStatusCode(Enum):
    """Constants for HTTP status codes"""

    # 2xx Success
    OK = 200
    SUCCESS = 200  # Alias for OK
    CREATED = 201
    ACCEPTED = 202
    NO_CONTENT = 204

    # 4xx Client Errors
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    CONFLICT = 409
    PRECONDITION_FAILED = 412

    # 5xx Server Errors
    INTERNAL_SERVER_ERROR = 500
    UNHEALTHY = 503

    @staticmethod
    def is_success(status: int) -> bool:
        """2xx range check"""
        return HttpStatusCode.OK.value <= status < 300
