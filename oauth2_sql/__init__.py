"""Driver-agnostic row-to-dataclass mapping for OAuth2 client configurations."""

from .core import (
    Configuration,
    ConfigurationRepository,
    ExternalCallError,
    MappingError,
    NoRowsError,
    OAuth2UserRepository,
    RowErrorPolicy,
    RowScanError,
    SchemaError,
    bind_columns,
    find_tag,
    scan_all,
    scan_one,
)
from .ports.db_api import (
    Database,
    Dialect,
    build_param,
    driver_paramstyle,
    limit_one_clause,
    register_driver,
    resolve_dialect,
)

__all__ = [
    "Configuration",
    "ConfigurationRepository",
    "Database",
    "Dialect",
    "ExternalCallError",
    "MappingError",
    "NoRowsError",
    "OAuth2UserRepository",
    "RowErrorPolicy",
    "RowScanError",
    "SchemaError",
    "bind_columns",
    "build_param",
    "driver_paramstyle",
    "find_tag",
    "limit_one_clause",
    "register_driver",
    "resolve_dialect",
    "scan_all",
    "scan_one",
]
