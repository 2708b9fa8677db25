"""Public port exports for concrete adapter implementations."""

from .db_api import Database, Dialect

__all__ = [
    "Database",
    "Dialect",
]
