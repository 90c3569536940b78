import json
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field  # type: ignore


class BodyMode(str, Enum):
    """How the dispatcher hands the response body back"""

    TEXT = "text"
    BINARY = "binary"
    STREAM = "stream"


class HTTPRequest(BaseModel):
    """HTTP request against an `_apis` resource area
    Args:
        method: The HTTP method to use
        area: Resource area, e.g. `wiki/wikis`
        project: Project (or collection) scope, omitted when None
        resource_id: Primary identifier appended after the area
        sub_path: Sub-resource path appended after the identifier
        api_version: Value of the `api-version` query parameter
        headers: Header overrides, merged over the client defaults
        body: The body of the request
        query_params: Already-encoded query parameters, None values are dropped
        body_mode: Expected decoding of the response body
        operation: Name reported in errors and logs
    """
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    method: str = Field(default="GET")
    area: str
    project: Optional[str] = None
    resource_id: Optional[str] = None
    sub_path: Optional[str] = None
    api_version: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    body: Union[Dict[str, Any], List[Any], BaseModel, str, bytes, None] = None
    query_params: Dict[str, Optional[str]] = Field(default_factory=dict, alias="query")
    body_mode: BodyMode = BodyMode.TEXT
    operation: str = "request"

    def path(self) -> str:
        """Relative path `{project}/_apis/{area}[/{resource_id}][/{sub_path}]`"""
        segments = []
        if self.project:
            segments.append(self.project.strip("/"))
        segments.append("_apis")
        segments.append(self.area.strip("/"))
        if self.resource_id:
            segments.append(str(self.resource_id).strip("/"))
        if self.sub_path:
            segments.append(self.sub_path.strip("/"))
        return "/".join(segments)

    def query_string(self) -> str:
        """Query string with `api-version` first and None entries removed.

        Values are joined verbatim: fields that need escaping are encoded
        before they reach the request.
        """
        pairs = []
        if self.api_version:
            pairs.append(f"api-version={self.api_version}")
        for key, value in self.query_params.items():
            if value is None:
                continue
            pairs.append(f"{key}={value}")
        return "&".join(pairs)

    def content(self) -> Optional[bytes]:
        """Serialized request body"""
        if self.body is None:
            return None
        if isinstance(self.body, bytes):
            return self.body
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        if isinstance(self.body, BaseModel):
            return self.body.model_dump_json(by_alias=True, exclude_none=True).encode("utf-8")
        return json.dumps(self.body).encode("utf-8")
