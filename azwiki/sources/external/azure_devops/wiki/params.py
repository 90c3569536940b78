"""
Query-string encoding for wiki operations.

Each field has its own serialization rule because the service is not
consistent about casing:

- versionType, versionOptions and recursionLevel are sent as the enum's
  declared name (BRANCH, PREVIOUSCHANGE, ONELEVEL)
- the wiki type in a create body is sent as the lowercased value (codewiki)
- comment is free text and is percent-encoded, spaces as %20
- anything else is assumed to be URL-safe already and passed through
"""

from enum import Enum
from typing import Any, Dict, Optional, Union
from urllib.parse import quote

from azwiki.sources.external.azure_devops.wiki.models import (
    GitVersionDescriptor,
    WikiType,
)


def encode_special_with_space(value: str) -> str:
    """Percent-encode every reserved character, spaces become %20 rather than +"""
    return quote(value, safe="")


def enum_name(value: Optional[Enum]) -> Optional[str]:
    if value is None:
        return None
    return value.name


def wiki_type_value(value: Union[WikiType, str]) -> str:
    if isinstance(value, WikiType):
        return value.value.lower()
    return WikiType(value).value.lower()


def _to_query_value(value: Union[bool, int, float, str, Enum]) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return value.name
    return str(value)


def build_query(**params: Any) -> Dict[str, str]:
    """Query map with None entries removed.

    `comment` is percent-encoded, every other value is stringified as-is.
    """
    query: Dict[str, str] = {}
    for key, value in params.items():
        if value is None:
            continue
        if key == "comment":
            query[key] = encode_special_with_space(str(value))
        else:
            query[key] = _to_query_value(value)
    return query


def version_query(version: Optional[GitVersionDescriptor]) -> Dict[str, Any]:
    """Flatten a version descriptor into its three query parameters"""
    if version is None:
        return {}
    return {
        "version": version.version,
        "versionType": enum_name(version.version_type),
        "versionOptions": enum_name(version.version_options),
    }
