"""PostgreSQL driver adapter.

Uses ``psycopg2``.  Install the driver::

    pip install psycopg2-binary
    # or:  pip install valoa-db[postgresql]

Generated keys come back through ``INSERT ... RETURNING``; there is no
``lastrowid`` equivalent.
"""

from __future__ import annotations

from typing import Any

from valoa.core.errors import ConfigError, DatabaseConnectionError, DatabaseError

from .base import DriverAdapter
from .types import DriverConfig, DriverType


class PostgreSQLAdapter(DriverAdapter):
    """
    PostgreSQL driver adapter.

    The connection runs in autocommit mode; transactions are opened with an
    explicit ``BEGIN`` so that the facade controls their boundaries.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int | None = 5432,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        **kwargs: Any,
    ):
        config = DriverConfig(
            driver=DriverType.POSTGRESQL,
            host=host,
            port=port or 5432,
            database=database,
            username=username,
            password=password,
            options=kwargs,
        )
        super().__init__(config)

    def connect(self) -> None:
        """Connect to PostgreSQL database."""
        try:
            import psycopg2
        except ImportError:
            raise ConfigError(
                "psycopg2 is required for PostgreSQL. Install with: pip install psycopg2-binary"
            ) from None

        try:
            conn = psycopg2.connect(
                host=self._config.host,
                port=self._config.port,
                dbname=self._config.database,
                user=self._config.username,
                password=self._config.password,
                connect_timeout=self._config.connect_timeout,
            )
            conn.autocommit = True
        except psycopg2.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to PostgreSQL: {e}",
                cause=e,
            ) from e

        self._conn = conn

    def last_insert_id(self, lastrowid: Any) -> Any:
        raise DatabaseError("lastInsertID not supported with PostgreSQL, please use RETURNING id")


__all__ = [
    "PostgreSQLAdapter",
]
