"""Core port contracts used by adapters, scanner, and repository."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Any, Optional, Protocol, Sequence

from .types import QueryParams, Row


class CursorPort(Protocol):
    """DB-API cursor behavior required by the row scanner."""

    @property
    def description(self) -> Optional[Sequence[Sequence[Any]]]: ...

    def fetchone(self) -> Optional[Row]: ...

    def close(self) -> None: ...


class DatabasePort(Protocol):
    """Database adapter behavior required by `ConfigurationRepository`."""

    dialect: str
    paramstyle: Optional[str]

    def query(self, sql: str, params: QueryParams = None) -> AbstractContextManager[CursorPort]: ...


class OAuth2UserRepository(Protocol):
    """Per-client token-exchange collaborator keyed by configuration id."""

    def exchange_token(
        self,
        client_id: str,
        client_secret: str,
        *,
        context: Any = None,
    ) -> str: ...
