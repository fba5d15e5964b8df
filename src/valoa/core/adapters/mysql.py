"""MySQL driver adapter.

Uses ``mysql.connector`` from the ``mysql-connector-python`` package.
MySQL uses **format** (``%s``) placeholder style.

Install the driver::

    pip install mysql-connector-python
    # or:  pip install valoa-db[mysql]

This adapter is import-guarded: if ``mysql.connector`` is not installed
a clear :class:`~valoa.core.errors.ConfigError` is raised at
``connect()`` time.
"""

from __future__ import annotations

from typing import Any

from valoa.core.errors import ConfigError, DatabaseConnectionError
from valoa.core.protocols import Cursor

from .base import DriverAdapter
from .types import DriverConfig, DriverType


class MySQLAdapter(DriverAdapter):
    """MySQL / MariaDB driver adapter.

    Opens one autocommit connection; :meth:`begin` switches to an explicit
    transaction through ``start_transaction()``.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int | None = 3306,
        database: str = "",
        username: str | None = None,
        password: str | None = None,
        *,
        charset: str = "utf8mb4",
        **kwargs: Any,
    ):
        config = DriverConfig(
            driver=DriverType.MYSQL,
            host=host,
            port=port or 3306,
            database=database,
            username=username,
            password=password,
            options={**(kwargs or {}), "charset": charset},
        )
        super().__init__(config)

    def connect(self) -> None:
        """Connect to MySQL database."""
        try:
            import mysql.connector
        except ImportError:
            raise ConfigError(
                "mysql-connector-python is required for MySQL. "
                "Install with: pip install mysql-connector-python"
            ) from None

        try:
            self._conn = mysql.connector.connect(
                host=self._config.host,
                port=self._config.port,
                database=self._config.database,
                user=self._config.username,
                password=self._config.password,
                charset=self._config.options.get("charset", "utf8mb4"),
                connection_timeout=self._config.connect_timeout,
                autocommit=True,
            )
        except mysql.connector.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to MySQL: {e}",
                cause=e,
            ) from e

    def cursor(self) -> Cursor:
        # Buffered so a partially read result never blocks the next statement
        return self.get_connection().cursor(buffered=True)

    def begin(self) -> None:
        self.get_connection().start_transaction()

    def commit(self) -> None:
        self.get_connection().commit()

    def rollback(self) -> None:
        self.get_connection().rollback()


__all__ = [
    "MySQLAdapter",
]
