from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field  # type: ignore

# Marker read by the materializer: a field carrying it is never taken from the
# response body, it is filled from the response header of the same name.
ETAG_INJECTION = {"inject": "etag"}


class _CaseInsensitiveEnum(str, Enum):
    @classmethod
    def _missing_(cls, value: object) -> Optional["_CaseInsensitiveEnum"]:
        if isinstance(value, str):
            for member in cls:
                if member.value.lower() == value.lower() or member.name.lower() == value.lower():
                    return member
        return None


class WikiType(_CaseInsensitiveEnum):
    CODEWIKI = "codeWiki"
    PROJECTWIKI = "projectWiki"


class GitVersionType(_CaseInsensitiveEnum):
    """How the version identifier is interpreted"""
    BRANCH = "branch"
    TAG = "tag"
    COMMIT = "commit"


class GitVersionOptions(_CaseInsensitiveEnum):
    """Additional modifiers applied to a version"""
    NONE = "none"
    PREVIOUSCHANGE = "previousChange"
    FIRSTPARENT = "firstParent"


class VersionControlRecursionType(_CaseInsensitiveEnum):
    """Depth of sub-page retrieval"""
    NONE = "none"
    ONELEVEL = "oneLevel"
    ONELEVELPLUSNESTEDEMPTYFOLDERS = "oneLevelPlusNestedEmptyFolders"
    FULL = "full"


class WikiBaseModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class GitVersionDescriptor(WikiBaseModel):
    """Branch, tag or commit a wiki operation applies to"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    version: Optional[str] = Field(default=None, description="Branch/tag name or commit SHA")
    version_type: Optional[GitVersionType] = Field(default=None, alias="versionType")
    version_options: Optional[GitVersionOptions] = Field(default=None, alias="versionOptions")


class WikiV2(WikiBaseModel):
    """Wiki record"""

    id: str
    name: str
    type: Optional[WikiType] = None
    project_id: Optional[str] = Field(default=None, alias="projectId")
    repository_id: Optional[str] = Field(default=None, alias="repositoryId")
    mapped_path: Optional[str] = Field(default=None, alias="mappedPath")
    remote_url: Optional[str] = Field(default=None, alias="remoteUrl")
    url: Optional[str] = None
    is_disabled: Optional[bool] = Field(default=None, alias="isDisabled")
    properties: Optional[Dict[str, Any]] = None
    versions: List[GitVersionDescriptor] = Field(default_factory=list)


class WikiV2Collection(WikiBaseModel):
    """All wikis of a project or collection"""

    count: int
    value: List[WikiV2] = Field(default_factory=list)


class WikiPage(WikiBaseModel):
    """Wiki page record, `e_tag` comes from the response header"""

    id: Optional[int] = None
    path: str
    order: Optional[int] = None
    git_item_path: Optional[str] = Field(default=None, alias="gitItemPath")
    content: Optional[str] = None
    is_parent_page: Optional[bool] = Field(default=None, alias="isParentPage")
    is_non_conformant: Optional[bool] = Field(default=None, alias="isNonConformant")
    remote_url: Optional[str] = Field(default=None, alias="remoteUrl")
    url: Optional[str] = None
    sub_pages: List["WikiPage"] = Field(default_factory=list, alias="subPages")
    e_tag: Optional[str] = Field(default=None, alias="eTag", json_schema_extra=ETAG_INJECTION)


class WikiAttachment(WikiBaseModel):
    name: str
    path: str
    e_tag: Optional[str] = Field(default=None, alias="eTag", json_schema_extra=ETAG_INJECTION)


class WikiPageMoveParameters(WikiBaseModel):
    """Request body of a page move"""

    path: str
    new_path: Optional[str] = Field(default=None, alias="newPath")
    new_order: Optional[int] = Field(default=None, alias="newOrder")


class WikiPageMove(WikiBaseModel):
    path: str
    new_path: Optional[str] = Field(default=None, alias="newPath")
    new_order: Optional[int] = Field(default=None, alias="newOrder")
    page: Optional[WikiPage] = None
    e_tag: Optional[str] = Field(default=None, alias="eTag", json_schema_extra=ETAG_INJECTION)


class WikiPageStat(WikiBaseModel):
    day: datetime
    count: int


class WikiPageDetail(WikiBaseModel):
    """Page id and path with daily view counts"""

    id: int
    path: str
    view_stats: List[WikiPageStat] = Field(default_factory=list, alias="viewStats")


WikiPage.model_rebuild()
