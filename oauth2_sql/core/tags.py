"""Column binding discovery from declarative dataclass field tags.

A tag is a string stored in dataclass field metadata, made of
semicolon-separated `key:value` tokens:

    client_id: str = field(default="", metadata={"sql": "column:client_id;size:255"})

Only the `column` key takes part in binding; other keys are ignored.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Type

from .errors import SchemaError
from .models import DataclassModel, model_fields

DEFAULT_TAG_KEY = "sql"
COLUMN_KEY = "column"


def find_tag(tag: str, key: str) -> Optional[str]:
    """Return the value of `key` inside a `key:value;...` tag string.

    Returns `None` when the key is absent or has no value.
    """

    for token in tag.split(";"):
        name, sep, value = token.partition(":")
        if name.strip() != key:
            continue
        value = value.strip()
        if sep and value:
            return value
    return None


def bind_columns(model: Type[DataclassModel], tag_key: str = DEFAULT_TAG_KEY) -> Dict[str, int]:
    """Build the column binding map for a dataclass type.

    Args:
        model: Dataclass type whose fields carry tags.
        tag_key: Field metadata key that holds the tag string.

    Returns:
        Mapping of lower-cased column name to field position. Fields without
        a `column` entry are left out. When two fields declare the same
        column, the later field wins.

    Raises:
        SchemaError: If `model` is not a dataclass type or a tag is not a string.
    """

    binding: Dict[str, int] = {}
    for position, field in enumerate(model_fields(model)):
        tag: Any = field.metadata.get(tag_key)
        if tag is None:
            continue
        if not isinstance(tag, str):
            raise SchemaError(
                f"Field {model.__name__}.{field.name} metadata {tag_key!r} must be a "
                f"string, got {type(tag).__name__}."
            )
        column = find_tag(tag, COLUMN_KEY)
        if column is not None:
            binding[column.lower()] = position
    return binding
