"""Public core API for row mapping and configuration loading."""

from .contracts import CursorPort, DatabasePort, OAuth2UserRepository
from .errors import ExternalCallError, MappingError, NoRowsError, RowScanError, SchemaError
from .models import Configuration, DataclassModel, model_fields, require_dataclass_model
from .repository import ConfigurationRepository
from .scanner import RowErrorPolicy, cursor_columns, scan_all, scan_one
from .tags import bind_columns, find_tag

__all__ = [
    "Configuration",
    "ConfigurationRepository",
    "CursorPort",
    "DataclassModel",
    "DatabasePort",
    "ExternalCallError",
    "MappingError",
    "NoRowsError",
    "OAuth2UserRepository",
    "RowErrorPolicy",
    "RowScanError",
    "SchemaError",
    "bind_columns",
    "cursor_columns",
    "find_tag",
    "model_fields",
    "require_dataclass_model",
    "scan_all",
    "scan_one",
]
