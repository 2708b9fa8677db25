"""DB-API adapter and dialect exports."""

from .database import Database
from .dialects import (
    Dialect,
    build_param,
    driver_identity,
    driver_paramstyle,
    limit_one_clause,
    register_driver,
    resolve_dialect,
)

__all__ = [
    "Database",
    "Dialect",
    "build_param",
    "driver_identity",
    "driver_paramstyle",
    "limit_one_clause",
    "register_driver",
    "resolve_dialect",
]
