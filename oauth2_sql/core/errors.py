"""Error taxonomy raised by the mapping layer and the configuration repository."""

from __future__ import annotations

from typing import Any, Optional


class MappingError(Exception):
    """Base class for every error raised by `oauth2_sql`."""


class NoRowsError(MappingError, LookupError):
    """Raised when a query expected to return one row returned none."""


class SchemaError(MappingError, TypeError):
    """Raised when a destination type or result set cannot be bound.

    Covers non-dataclass destinations, malformed tag metadata and cursors
    whose columns cannot be enumerated.
    """


class RowScanError(MappingError, ValueError):
    """Raised when one result row cannot be bound to its destination."""

    def __init__(
        self,
        message: str,
        *,
        row_index: Optional[int] = None,
        column: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.row_index = row_index
        self.column = column


class ExternalCallError(MappingError, RuntimeError):
    """Raised when the token-exchange collaborator fails.

    The configuration that was loaded before the call is kept on
    `configuration` so callers can still use it.
    """

    def __init__(self, message: str, *, config_id: str, configuration: Any = None) -> None:
        super().__init__(message)
        self.config_id = config_id
        self.configuration = configuration
