"""Load OAuth2 client configurations from SQLite with ConfigurationRepository."""

from __future__ import annotations

import sqlite3
import sys
from pathlib import Path
from typing import Any

# Allow running this script directly from repository root.
PROJECT_ROOT = next(
    (parent for parent in Path(__file__).resolve().parents if (parent / "oauth2_sql").exists()),
    None,
)
if PROJECT_ROOT and str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from oauth2_sql import ConfigurationRepository, Database, ExternalCallError, NoRowsError


class StaticTokenService:
    """Stand-in for a provider client that trades credentials for a token."""

    def __init__(self, provider: str):
        self.provider = provider

    def exchange_token(self, client_id: str, client_secret: str, *, context: Any = None) -> str:
        return f"{self.provider}:{client_id}"


def main() -> None:
    # 1) Create table and seed rows. Extra columns are ignored by the scanner.
    conn = sqlite3.connect(":memory:")
    conn.execute(
        "CREATE TABLE oauth2_configurations ("
        "id TEXT PRIMARY KEY, client_id TEXT, client_secret TEXT, status TEXT, "
        "created_at TEXT DEFAULT CURRENT_TIMESTAMP)"
    )
    conn.executemany(
        "INSERT INTO oauth2_configurations (id, client_id, client_secret, status) "
        "VALUES (?, ?, ?, ?)",
        [
            ("google", "g-client", "g-secret", "A"),
            ("github", "gh-client", "gh-secret", "A"),
            ("legacy", "l-client", "l-secret", "I"),
        ],
    )

    # 2) Wire repository with one token service per configuration id.
    db = Database(conn)
    repo = ConfigurationRepository(
        db,
        "oauth2_configurations",
        {"google": StaticTokenService("google")},
    )

    try:
        # 3) Active configurations only.
        print("Active:", [config.id for config in repo.get_configurations()])

        # 4) One configuration plus its exchanged token.
        config, token = repo.get_configuration("google")
        print("Fetched:", config.id, "token:", token)

        # 5) No token service registered: configuration is still on the error.
        try:
            repo.get_configuration("github")
        except ExternalCallError as exc:
            print("Token exchange failed, configuration kept:", exc.configuration)

        # 6) Unknown id.
        try:
            repo.get_configuration("missing")
        except NoRowsError as exc:
            print("Not found:", exc)
    finally:
        db.close()


if __name__ == "__main__":
    main()
