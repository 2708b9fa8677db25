"""Column value conversion into dataclass field types."""

from __future__ import annotations

import json
import types
from dataclasses import Field, fields
from decimal import Decimal, InvalidOperation
from enum import Enum
from functools import lru_cache
from typing import Any, Type, Union, get_args, get_origin, get_type_hints

from .errors import SchemaError
from .models import require_dataclass_model

_TRUE_TEXT = {"1", "t", "true", "y", "yes"}
_FALSE_TEXT = {"0", "f", "false", "n", "no"}


def deserialize_column_value(
    cls: Type[Any],
    field_name: str,
    value: Any,
) -> Any:
    """Convert one DB value into the annotated type of a model field.

    Raises:
        ValueError: If the value cannot be represented as the field type.
    """

    field = _model_field_map(cls).get(field_name)
    if field is None:
        return value
    annotation = _model_type_hints(cls).get(field_name, field.type)
    return _deserialize_value(
        value,
        annotation=annotation,
        codec=_field_codec(field),
        field_name=field_name,
    )


def validate_field_codec(cls: Type[Any], field_name: str) -> None:
    """Check the `codec` metadata of one model field.

    Raises:
        SchemaError: If the codec metadata is malformed or unsupported.
    """

    field = _model_field_map(cls).get(field_name)
    if field is None:
        return
    try:
        codec = _field_codec(field)
    except (TypeError, ValueError) as exc:
        raise SchemaError(str(exc)) from exc
    annotation = _model_type_hints(cls).get(field_name, field.type)
    if codec == "enum" and _enum_type(annotation) is None:
        raise SchemaError(
            f"Field {field_name!r} uses enum codec but has no Enum annotation."
        )


@lru_cache(maxsize=None)
def _model_field_map(cls: Type[Any]) -> dict[str, Field[Any]]:
    require_dataclass_model(cls)
    return {field.name: field for field in fields(cls)}


@lru_cache(maxsize=None)
def _model_type_hints(cls: Type[Any]) -> dict[str, Any]:
    require_dataclass_model(cls)
    try:
        return dict(get_type_hints(cls, include_extras=True))
    except Exception:
        return {}


def _deserialize_value(
    value: Any,
    *,
    annotation: Any,
    codec: str | None,
    field_name: str,
) -> Any:
    if value is None:
        return None

    enum_type = _enum_type(annotation)
    if enum_type is not None or codec == "enum":
        return _deserialize_enum(value, enum_type=enum_type, field_name=field_name)

    if _is_json_field(annotation, codec):
        return _deserialize_json(value, field_name=field_name)

    base = _unwrap_optional(annotation)
    converter = _SCALAR_CONVERTERS.get(base)
    if converter is None:
        return value
    try:
        return converter(value)
    except (TypeError, ValueError, InvalidOperation, UnicodeDecodeError) as exc:
        raise ValueError(
            f"Cannot convert {value!r} to {base.__name__} for field {field_name!r}."
        ) from exc


def _deserialize_enum(
    value: Any,
    *,
    enum_type: type[Enum] | None,
    field_name: str,
) -> Any:
    if enum_type is None:
        raise ValueError(
            f"Field {field_name!r} uses enum codec but has no Enum annotation."
        )
    if isinstance(value, enum_type):
        return value
    value = _as_text(value) if isinstance(value, (bytes, bytearray, memoryview)) else value
    try:
        return enum_type(value)
    except Exception as exc:
        if isinstance(value, str):
            try:
                return enum_type[value]
            except Exception:
                pass
        raise ValueError(
            f"Cannot deserialize value {value!r} to enum {enum_type.__name__} "
            f"for field {field_name!r}."
        ) from exc


def _deserialize_json(value: Any, *, field_name: str) -> Any:
    if isinstance(value, (dict, list)):
        return value
    if isinstance(value, str):
        text = value
    elif isinstance(value, (bytes, bytearray, memoryview)):
        text = _as_text(value)
    else:
        return value

    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(
            f"Cannot deserialize JSON for field {field_name!r}: {text!r}."
        ) from exc


def _as_text(value: Any) -> str:
    return bytes(value).decode("utf-8")


def _to_str(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _as_text(value)
    if isinstance(value, (bool, int, float, Decimal)):
        return str(value)
    raise TypeError(f"unsupported source type {type(value).__name__}")


def _to_int(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, Decimal):
        if value != value.to_integral_value():
            raise ValueError("fractional value")
        return int(value)
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError("fractional value")
        return int(value)
    return int(_to_str(value).strip())


def _to_float(value: Any) -> float:
    if isinstance(value, (int, float, Decimal)):
        return float(value)
    return float(_to_str(value).strip())


def _to_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, (int, float)):
        return Decimal(str(value))
    return Decimal(_to_str(value).strip())


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if value in (0, 1):
            return bool(value)
        raise ValueError("integer is not 0 or 1")
    text = _to_str(value).strip().lower()
    if text in _TRUE_TEXT:
        return True
    if text in _FALSE_TEXT:
        return False
    raise ValueError("unrecognized boolean text")


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    raise TypeError(f"unsupported source type {type(value).__name__}")


_SCALAR_CONVERTERS = {
    str: _to_str,
    int: _to_int,
    float: _to_float,
    Decimal: _to_decimal,
    bool: _to_bool,
    bytes: _to_bytes,
}


def _field_codec(field: Field[Any]) -> str | None:
    codec = field.metadata.get("codec")
    if codec is None:
        return None
    if not isinstance(codec, str):
        raise TypeError(
            f"Field {field.name!r} metadata codec must be a string, got {type(codec).__name__}."
        )
    normalized = codec.strip().lower()
    if normalized in {"json", "enum"}:
        return normalized
    raise ValueError(
        f"Unsupported codec {codec!r} on field {field.name!r}. "
        "Supported codecs: 'json', 'enum'."
    )


def _enum_type(annotation: Any) -> type[Enum] | None:
    base = _unwrap_optional(annotation)
    if isinstance(base, type) and issubclass(base, Enum):
        return base
    return None


def _is_json_field(annotation: Any, codec: str | None) -> bool:
    if codec == "json":
        return True
    if codec == "enum":
        return False

    base = _unwrap_optional(annotation)
    if base in {dict, list}:
        return True

    origin = get_origin(base)
    return origin in {dict, list}


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is None:
        return annotation

    if origin not in {Union, types.UnionType}:
        return annotation

    all_args = get_args(annotation)
    args = [arg for arg in all_args if arg is not type(None)]
    if len(args) == 1 and len(all_args) == 2:
        return args[0]
    return annotation
