import json
import logging
from typing import Dict, Mapping, Optional, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError  # type: ignore

from azwiki.config.constants.azure_devops import HeaderName
from azwiki.exceptions.wiki_exceptions import WikiDeserializationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


def extract_etag(headers: Mapping[str, str], name: str = HeaderName.ETAG.value) -> Optional[str]:
    """First value of the header with every double quote removed, None when absent"""
    if hasattr(headers, "get_list"):
        # httpx joins repeated headers on plain lookup
        values = headers.get_list(name)
        value = values[0] if values else None
    else:
        value = headers.get(name)
    if value is None:
        return None
    stripped = value.replace('"', "")
    logger.debug("extracted %s header", name)
    return stripped


def injected_fields(model: Type[BaseModel]) -> Dict[str, str]:
    """Map of injection key -> body key for fields filled from response headers"""
    fields: Dict[str, str] = {}
    for field_name, field in model.model_fields.items():
        extra = field.json_schema_extra
        if isinstance(extra, dict) and "inject" in extra:
            fields[str(extra["inject"])] = field.alias or field_name
    return fields


def materialize(
    body: Union[str, bytes],
    model: Type[T],
    injected: Optional[Mapping[str, Optional[str]]] = None,
    operation: Optional[str] = None,
) -> T:
    """Parse a JSON body into `model`, filling header-derived fields from `injected`.

    Injected values are request-scoped: they apply to this call only and only to
    the top-level object. A None injected value leaves the field at its default.

    Raises:
        WikiDeserializationError: malformed JSON or a body that does not fit the model
    """
    try:
        data = json.loads(body)
    except ValueError as e:
        raise WikiDeserializationError(
            body,
            operation=operation,
            message=f"Malformed JSON for {model.__name__}: {e}",
        ) from e

    if not isinstance(data, dict):
        raise WikiDeserializationError(
            body,
            operation=operation,
            message=f"Expected a JSON object for {model.__name__}, got {type(data).__name__}",
        )

    for key, body_key in injected_fields(model).items():
        # never taken from the body
        data.pop(body_key, None)
        value = (injected or {}).get(key)
        if value is not None:
            data[body_key] = value

    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise WikiDeserializationError(
            body,
            operation=operation,
            message=f"Response does not match {model.__name__}",
            details={"errors": e.errors(include_url=False)},
        ) from e
