"""Model utilities for dataclass destinations and the configuration model."""

from __future__ import annotations

from dataclasses import Field, dataclass, field, fields, is_dataclass
from typing import Any, ClassVar, List, Protocol, Type

from .errors import SchemaError


class DataclassModel(Protocol):
    """Protocol for supported dataclass model types."""

    __dataclass_fields__: ClassVar[dict[str, Any]]


def require_dataclass_model(cls: Any) -> None:
    """Validate that `cls` is a dataclass type (not an instance)."""

    if not isinstance(cls, type) or not is_dataclass(cls):
        name = getattr(cls, "__name__", type(cls).__name__)
        raise SchemaError(f"{name} must be a dataclass type.")


def model_fields(cls: Type[DataclassModel]) -> List[Field[Any]]:
    """Return dataclass fields for a model type, in declaration order."""

    require_dataclass_model(cls)
    return list(fields(cls))


@dataclass
class Configuration:
    """One OAuth2 client configuration row."""

    id: str = field(default="", metadata={"sql": "column:id;primary_key"})
    link: str = field(default="", metadata={"sql": "column:link"})
    client_id: str = field(default="", metadata={"sql": "column:client_id"})
    client_secret: str = field(default="", metadata={"sql": "column:client_secret"})
    scope: str = field(default="", metadata={"sql": "column:scope"})
    redirect_uri: str = field(default="", metadata={"sql": "column:redirect_uri"})
    access_token_link: str = field(default="", metadata={"sql": "column:access_token_link"})
    status: str = field(default="", metadata={"sql": "column:status"})
