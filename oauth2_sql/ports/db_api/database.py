"""DB-API adapter implementation for the core database port."""

from __future__ import annotations

import contextlib
import logging
from typing import Any, Iterator, Optional

from ...core.types import QueryParams
from .dialects import Dialect, driver_paramstyle, resolve_dialect

logger = logging.getLogger(__name__)


class Database:
    """Thin DB-API wrapper that owns cursor lifetimes for read queries."""

    def __init__(self, conn: Any, dialect: Optional[Dialect] = None):
        """Create database adapter.

        Args:
            conn: DB-API connection object.
            dialect: SQL dialect; resolved from the driver when omitted.
        """

        self._closed = False
        self.conn: Any | None = conn
        self.dialect = Dialect(dialect) if dialect is not None else resolve_dialect(conn)
        self.paramstyle = driver_paramstyle(conn)

    @property
    def driver_connection(self) -> Any:
        """Underlying DB-API connection, used for driver identity checks."""

        return self.conn

    def _require_open_connection(self) -> Any:
        if self._closed or self.conn is None:
            raise RuntimeError("connection is closed")
        return self.conn

    def execute(self, sql: str, params: QueryParams = None) -> Any:
        """Execute SQL with optional parameters and return the open cursor.

        The caller owns the returned cursor and must close it.
        """

        conn = self._require_open_connection()
        cur = conn.cursor()
        logger.debug("Executing SQL: %s", sql)
        try:
            if params is None:
                cur.execute(sql)
            else:
                cur.execute(sql, params)
        except BaseException:
            _close_cursor(cur)
            raise
        return cur

    @contextlib.contextmanager
    def query(self, sql: str, params: QueryParams = None) -> Iterator[Any]:
        """Execute SQL and yield its cursor, closing it on every exit path."""

        cur = self.execute(sql, params)
        try:
            yield cur
        finally:
            _close_cursor(cur)

    def close(self) -> None:
        """Close the underlying connection."""

        if self._closed:
            return
        conn = self.conn
        self._closed = True
        self.conn = None
        close = getattr(conn, "close", None)
        if callable(close):
            close()

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()


def _close_cursor(cur: Any) -> None:
    close = getattr(cur, "close", None)
    if callable(close):
        close()
