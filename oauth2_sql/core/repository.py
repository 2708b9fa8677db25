"""Read repository for OAuth2 client configurations stored in a SQL table."""

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Tuple

from ..ports.db_api.dialects import (
    Dialect,
    build_param,
    driver_paramstyle,
    limit_one_clause,
    resolve_dialect,
)
from .contracts import DatabasePort, OAuth2UserRepository
from .errors import ExternalCallError
from .models import Configuration
from .scanner import RowErrorPolicy, RowErrorPolicyInput, scan_all, scan_one
from .tags import bind_columns

logger = logging.getLogger(__name__)

DEFAULT_STATUS_COLUMN = "status"
DEFAULT_ACTIVE = "A"

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*(\.[A-Za-z_][A-Za-z0-9_$]*)*$")


class ConfigurationRepository:
    """Loads `Configuration` rows and exchanges client credentials for tokens.

    The dialect and paramstyle come from the database adapter when it
    declares them and are otherwise resolved from the driver, once, at
    construction.
    """

    def __init__(
        self,
        db: DatabasePort,
        table: str,
        user_repositories: Mapping[str, OAuth2UserRepository],
        status_column: str = DEFAULT_STATUS_COLUMN,
        active: str = DEFAULT_ACTIVE,
        *,
        on_row_error: RowErrorPolicyInput = RowErrorPolicy.SKIP,
    ):
        """Create repository.

        Args:
            db: Database adapter implementing `DatabasePort`.
            table: Table holding configuration rows.
            user_repositories: Token-exchange collaborators keyed by configuration id.
            status_column: Column compared against `active`; empty means `"status"`.
            active: Status value of active configurations; empty means `"A"`.
            on_row_error: Policy for rows that fail to scan in `get_configurations`.
        """

        status_column = status_column or DEFAULT_STATUS_COLUMN
        _require_identifier(table, "table")
        _require_identifier(status_column, "status_column")

        self.db = db
        self.table = table
        self.user_repositories = user_repositories
        self.status_column = status_column
        self.active = active or DEFAULT_ACTIVE
        self.on_row_error = RowErrorPolicy(on_row_error)
        self.dialect, self.paramstyle = _placeholder_settings(db)
        self.binding_map = MappingProxyType(bind_columns(Configuration))

    def get_configuration(self, config_id: str, context: Any = None) -> Tuple[Configuration, str]:
        """Load one configuration by id and exchange its client credentials.

        Args:
            config_id: Configuration id, also the key of its token-exchange collaborator.
            context: Opaque request context forwarded to the collaborator.

        Returns:
            The configuration and the token returned by the collaborator.

        Raises:
            NoRowsError: If no row has this id. No token exchange happens.
            ExternalCallError: If the collaborator is missing or fails. The
                loaded configuration is attached to the error.
        """

        sql = (
            f"select * from {self.table} where id = "
            f"{build_param(0, self.dialect, self.paramstyle)} {limit_one_clause(self.dialect)}"
        )
        with self.db.query(sql, [config_id]) as cursor:
            model = scan_one(cursor, Configuration(), self.binding_map)

        user_repository = self.user_repositories.get(config_id)
        if user_repository is None:
            raise ExternalCallError(
                f"No OAuth2 user repository registered for configuration {config_id!r}.",
                config_id=config_id,
                configuration=model,
            )
        try:
            token = user_repository.exchange_token(
                model.client_id, model.client_secret, context=context
            )
        except Exception as exc:
            raise ExternalCallError(
                f"Token exchange failed for configuration {config_id!r}: {exc}",
                config_id=config_id,
                configuration=model,
            ) from exc
        return model, token

    def get_configurations(self) -> List[Configuration]:
        """Load every configuration whose status column equals the active value.

        Rows that fail to scan are handled by the repository's `on_row_error`
        policy; under the default `SKIP` they are dropped from the result.
        """

        sql = (
            f"select * from {self.table} where {self.status_column} = "
            f"{build_param(0, self.dialect, self.paramstyle)}"
        )
        models: List[Configuration] = []
        with self.db.query(sql, [self.active]) as cursor:
            scan_all(
                cursor,
                models,
                Configuration,
                self.binding_map,
                on_row_error=self.on_row_error,
            )
        logger.debug("Loaded %d active configurations from %s", len(models), self.table)
        return models


def _require_identifier(value: str, name: str) -> None:
    if not isinstance(value, str) or not _IDENTIFIER.match(value):
        raise ValueError(f"{name} must be a SQL identifier, got {value!r}.")


def _placeholder_settings(db: Any) -> Tuple[Dialect, Optional[str]]:
    dialect = getattr(db, "dialect", None)
    dialect = Dialect(dialect) if dialect is not None else resolve_dialect(db)
    if hasattr(db, "paramstyle"):
        return dialect, db.paramstyle
    return dialect, driver_paramstyle(db)
