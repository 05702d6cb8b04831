"""CLI context management for database connections and shared state."""

import os
from dataclasses import dataclass, field

from entityforge.core.connection import DatabaseConnection
from entityforge.exceptions import ConnectionError

DATABASE_URL_ENV = "ENTITYFORGE_DATABASE_URL"
BASE_PACKAGE_ENV = "ENTITYFORGE_BASE_PACKAGE"


def get_database_url(url: str | None) -> str | None:
    """Resolve database URL from CLI arg or environment variable.

    Priority:
    1. Explicit URL argument
    2. ENTITYFORGE_DATABASE_URL environment variable
    """
    if url:
        return url
    return os.getenv(DATABASE_URL_ENV) or None


def get_base_package(package: str | None) -> str | None:
    """Resolve base package from CLI arg or ENTITYFORGE_BASE_PACKAGE."""
    if package:
        return package
    return os.getenv(BASE_PACKAGE_ENV) or None


@dataclass
class CLIContext:
    """Shared context for CLI commands.

    Manages the introspection connection lifecycle and output preferences.
    """

    database_url: str | None
    base_package: str | None
    echo: bool
    json_output: bool
    _conn: DatabaseConnection | None = field(default=None, init=False, repr=False)

    def get_connection(self) -> DatabaseConnection:
        """Get or open the database connection (lazy initialization).

        Raises:
            ConnectionError: If no database URL is configured or the database is unreachable
        """
        if self._conn is None:
            if not self.database_url:
                raise ConnectionError(
                    f"No database URL given. Pass --database or set {DATABASE_URL_ENV}.",
                    {"env": DATABASE_URL_ENV},
                )
            conn = DatabaseConnection(self.database_url, echo=self.echo)
            self._conn = conn.__enter__()
        return self._conn

    def close(self) -> None:
        """Close database connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None
