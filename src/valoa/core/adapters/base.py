"""Driver adapter base class.

Manifesto:
    The facade needs four things from a driver: a cursor, explicit
    transaction control, the id of the last insert and a clean shutdown.
    ``DriverAdapter`` pins those down so :class:`valoa.db.connection.Db`
    never branches on the driver module.

Features:
    - Abstract ``connect()``, ``disconnect()``, ``cursor()``
    - Explicit ``begin()`` / ``commit()`` / ``rollback()`` (drivers run in
      autocommit mode outside a transaction)
    - ``last_insert_id(lastrowid)`` defaulting to the PEP 249 ``lastrowid``
    - Context-manager protocol for connection lifecycle

Tags:
    valoa-db, database, abstract-base, adapter-pattern

Doc-Types:
    api-reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from valoa.core.dialect import Dialect, get_dialect
from valoa.core.errors import DatabaseError
from valoa.core.protocols import Cursor, DriverConnection

from .types import DriverConfig, DriverType


class DriverAdapter(ABC):
    """
    Abstract base class for driver adapters.

    Subclasses open exactly one connection; there is no pooling.
    """

    def __init__(self, config: DriverConfig):
        self._config = config
        self._conn: DriverConnection | None = None
        self._dialect: Dialect = get_dialect(config.driver.value)

    @property
    def dialect(self) -> Dialect:
        """SQL dialect for this adapter's driver."""
        return self._dialect

    @property
    def driver(self) -> DriverType:
        """Driver type."""
        return self._config.driver

    @property
    def config(self) -> DriverConfig:
        return self._config

    @property
    def is_connected(self) -> bool:
        """Whether the adapter holds an open connection."""
        return self._conn is not None

    @abstractmethod
    def connect(self) -> None:
        """Open the connection."""
        ...

    def disconnect(self) -> None:
        """Close the connection."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def get_connection(self) -> DriverConnection:
        """Get the live connection, connecting on first use."""
        if self._conn is None:
            self.connect()
        return self._conn

    def cursor(self) -> Cursor:
        """Open a cursor on the live connection."""
        return self.get_connection().cursor()

    def run(self, sql: str) -> None:
        """Execute a parameterless control statement (``BEGIN``, ``COMMIT``)."""
        cur = self.cursor()
        try:
            cur.execute(sql)
        finally:
            cur.close()

    def begin(self) -> None:
        """Start an engine transaction."""
        self.run("BEGIN")

    def commit(self) -> None:
        """Commit the engine transaction."""
        self.run("COMMIT")

    def rollback(self) -> None:
        """Roll back the engine transaction."""
        self.run("ROLLBACK")

    def last_insert_id(self, lastrowid: Any) -> Any:
        """Identifier generated by the last INSERT, given the cursor's ``lastrowid``."""
        if lastrowid is None:
            raise DatabaseError("Unable to retrieve identifier for last insert query.")
        return lastrowid

    def __enter__(self) -> DriverAdapter:
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.disconnect()


__all__ = [
    "DriverAdapter",
]
