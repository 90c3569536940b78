from enum import Enum


class ApiVersion(str, Enum):
    """api-version tags sent with every wiki call"""

    WIKI = "7.1-preview.2"
    WIKI_PAGES = "7.1-preview.1"


class ContentType(str, Enum):
    JSON = "application/json"
    TEXT = "text/plain"
    OCTET_STREAM = "application/octet-stream"
    ZIP = "application/zip"


class HeaderName(str, Enum):
    ETAG = "etag"
    IF_MATCH = "If-Match"
    CONTENT_TYPE = "Content-Type"
    ACCEPT = "Accept"
    AUTHORIZATION = "Authorization"


WIKI_AREA = "wiki/wikis"
