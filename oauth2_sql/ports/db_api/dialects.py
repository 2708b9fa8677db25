"""SQL dialect detection and placeholder rendering for DB-API drivers."""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class Dialect(str, Enum):
    """SQL dialects with distinct placeholder and row-limit conventions."""

    POSTGRES = "postgres"
    MYSQL = "mysql"
    MSSQL = "mssql"
    ORACLE = "oracle"
    UNSUPPORTED = "unsupported"


# Driver identity (lower-cased root module of the connection type) -> dialect.
_DRIVER_DIALECTS: Dict[str, Dialect] = {
    "psycopg": Dialect.POSTGRES,
    "psycopg2": Dialect.POSTGRES,
    "pymysql": Dialect.MYSQL,
    "mysqldb": Dialect.MYSQL,
    "mysql": Dialect.MYSQL,
    "pymssql": Dialect.MSSQL,
    "oracledb": Dialect.ORACLE,
    "cx_oracle": Dialect.ORACLE,
}

_NUMBERED_PREFIX = {
    Dialect.POSTGRES: "$",
    Dialect.ORACLE: ":",
}


def register_driver(identity: str, dialect: Dialect) -> None:
    """Register a driver module name for dialect resolution.

    Call at startup, before any repository resolves its dialect.
    """

    if not identity:
        raise ValueError("Driver identity must be a non-empty module name.")
    _DRIVER_DIALECTS[identity.split(".", 1)[0].lower()] = Dialect(dialect)


def driver_identity(handle: Any) -> Optional[str]:
    """Return the lower-cased root module name of the handle's driver connection."""

    conn = _driver_connection(handle)
    if conn is None:
        return None
    module_name = type(conn).__module__ or ""
    return module_name.split(".", 1)[0].lower()


def resolve_dialect(handle: Any) -> Dialect:
    """Classify a connection handle into a `Dialect`.

    Unknown drivers and `None` yield `Dialect.UNSUPPORTED`.
    """

    identity = driver_identity(handle)
    if identity is None:
        return Dialect.UNSUPPORTED
    dialect = _DRIVER_DIALECTS.get(identity, Dialect.UNSUPPORTED)
    logger.debug("Resolved driver %r to dialect %s", identity, dialect.value)
    return dialect


def driver_paramstyle(handle: Any) -> Optional[str]:
    """Return the PEP 249 `paramstyle` declared by the handle's driver module."""

    conn = _driver_connection(handle)
    if conn is None:
        return None
    parts = (type(conn).__module__ or "").split(".")
    # Nearest package wins: mysql.connector declares it, mysql does not.
    for depth in range(len(parts), 0, -1):
        module = sys.modules.get(".".join(parts[:depth]))
        paramstyle = getattr(module, "paramstyle", None)
        if isinstance(paramstyle, str):
            return paramstyle
    return None


def build_param(index: int, dialect: Dialect, paramstyle: Optional[str] = None) -> str:
    """Render the placeholder for the bound parameter at 0-based `index`.

    Numbered dialects render 1-based tokens, so index 0 gives `$1` for
    Postgres and `:1` for Oracle. Other dialects render `?` for every index.

    When `paramstyle` is given, the driver's DB-API style takes precedence:
    `qmark` -> `?`, `numeric` -> `:N`, `format`/`pyformat` -> `%s`. `named`
    and unknown styles fall back to the dialect token.
    """

    if index < 0:
        raise ValueError(f"Parameter index must be non-negative, got {index}.")
    if paramstyle == "qmark":
        return "?"
    if paramstyle == "numeric":
        return f":{index + 1}"
    if paramstyle in ("format", "pyformat"):
        return "%s"

    prefix = _NUMBERED_PREFIX.get(Dialect(dialect))
    if prefix is None:
        return "?"
    return f"{prefix}{index + 1}"


def limit_one_clause(dialect: Dialect) -> str:
    """Return the trailing clause that limits a filtered query to one row."""

    if Dialect(dialect) is Dialect.ORACLE:
        return "and rownum = 1"
    return "limit 1"


def _driver_connection(handle: Any) -> Any:
    if handle is None:
        return None
    return getattr(handle, "driver_connection", handle)
