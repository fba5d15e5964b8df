"""Connection facade: one live connection with its statements and transactions.

``Db`` is the object every other part of valoa-db is handed.  It owns a
single driver connection (through a :class:`~valoa.core.adapters.DriverAdapter`),
exposes the driver identity as read-only ``properties`` and offers the
statement primitives the mapper layer is written against.

Usage
-----
::

    from valoa.db import Db

    db = Db("mysql", "localhost", "app", "secret", "appdb")
    stmt = db.prepare("SELECT * FROM users WHERE id = ?")
    stmt.bind(7)
    row = stmt.execute().fetch_one()

    with db.transaction():
        db.exec("UPDATE users SET active = 0")

Transactions
------------
Transactions are reference counted, not truly nested::

    IDLE ──begin──▶ ACTIVE(1) ──begin──▶ ACTIVE(2)
      ▲                │  ▲                 │
      │             commit└──────commit─────┘
      └────────────────┘
    rollback at any depth  ──▶ engine ROLLBACK, IDLE
    commit at IDLE         ──▶ no-op
    rollback at IDLE       ──▶ ProgrammingError

Only the outermost ``begin_transaction`` opens an engine transaction and
only the matching outermost ``commit`` commits it.

The facade is not thread-safe; use one ``Db`` per concurrent task.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from enum import Enum
from types import MappingProxyType
from typing import Any

from valoa.core.adapters import DriverAdapter, get_adapter
from valoa.core.dialect import Dialect
from valoa.core.errors import ConfigError, DatabaseError, ProgrammingError, ValoaError
from valoa.core.logging import get_logger
from valoa.core.settings import DatabaseSettings, normalize_driver

from .statement import Statement

logger = get_logger(__name__)


class TransactionState(str, Enum):
    """Whether the facade currently holds an engine transaction."""

    IDLE = "idle"
    ACTIVE = "active"


class Db:
    """Database connection facade.

    Args:
        driver: ``mysql``, ``sqlite`` or ``postgresql`` (``postgres`` /
            ``pgsql`` accepted).
        host: Server host (ignored for SQLite).
        user: Login name.
        password: Login password.
        database: Database name; for SQLite the file path.
        port: Server port, driver default when ``None``.
        init_query: Statement executed once right after connecting.
        adapter: Pre-built adapter, bypassing the registry.
    """

    def __init__(
        self,
        driver: str = "mysql",
        host: str = "localhost",
        user: str | None = None,
        password: str | None = None,
        database: str = "",
        *,
        port: int | None = None,
        init_query: str | None = None,
        adapter: DriverAdapter | None = None,
    ):
        if adapter is None:
            adapter = self._build_adapter(normalize_driver(driver), host, user, password, database, port)

        self._adapter = adapter
        self._depth = 0
        self._query_count = 0
        self._last_rowid: Any = None
        self._properties = MappingProxyType(
            {
                "db_server": adapter.dialect.name,
                "db_host": host,
                "db_user": user,
                "db_db": database,
            }
        )

        if not adapter.is_connected:
            adapter.connect()

        logger.debug(
            "db_connected",
            driver=adapter.dialect.name,
            host=host,
            database=database,
        )

        if init_query:
            self.exec(init_query)

    @staticmethod
    def _build_adapter(
        driver: str,
        host: str,
        user: str | None,
        password: str | None,
        database: str,
        port: int | None,
    ) -> DriverAdapter:
        if driver == "sqlite":
            return get_adapter("sqlite", path=database or ":memory:")
        return get_adapter(
            driver,
            host=host,
            port=port,
            database=database,
            username=user,
            password=password,
        )

    # -- Identity ----------------------------------------------------------

    @property
    def properties(self) -> Mapping[str, Any]:
        """Read-only ``db_server`` / ``db_host`` / ``db_user`` / ``db_db`` bag."""
        return self._properties

    @property
    def dialect(self) -> Dialect:
        return self._adapter.dialect

    @property
    def adapter(self) -> DriverAdapter:
        return self._adapter

    @property
    def query_count(self) -> int:
        """Number of statements executed through this facade."""
        return self._query_count

    # -- Statements --------------------------------------------------------

    @staticmethod
    def _require_query(query: str) -> None:
        if not query or not query.strip():
            raise ConfigError("Empty SQL query can't be executed.")

    def prepare(self, query: str) -> Statement:
        """Prepare ``query`` (``?`` placeholders) without executing it."""
        self._require_query(query)
        return Statement(self, query)

    def execute(self, query: str) -> Statement:
        """Execute an unparameterised query and return it for iteration."""
        self._require_query(query)
        return Statement(self, query).execute()

    def exec(self, query: str) -> int:
        """Execute a non-SELECT statement and return the affected row count."""
        self._require_query(query)
        stmt = Statement(self, query).execute()
        affected = stmt.rowcount
        stmt.close()
        return affected

    def last_insert_id(self) -> int:
        """Identifier generated by the last INSERT run through this facade."""
        return int(self._adapter.last_insert_id(self._last_rowid))

    def _record_execution(self, stmt: Statement) -> None:
        self._query_count += 1
        if stmt.sql.lstrip()[:7].upper() in ("INSERT ", "REPLACE"):
            self._last_rowid = stmt.lastrowid

    # -- Transactions ------------------------------------------------------

    @property
    def transaction_depth(self) -> int:
        return self._depth

    @property
    def state(self) -> TransactionState:
        return TransactionState.ACTIVE if self._depth > 0 else TransactionState.IDLE

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0

    def begin_transaction(self) -> None:
        """Open a transaction, or join the one already open."""
        if self._depth == 0:
            try:
                self._adapter.begin()
            except ValoaError:
                raise
            except Exception as e:
                raise DatabaseError("Could not start database transaction.", cause=e) from e
        self._depth += 1

    def commit(self, commit_transaction: bool = True) -> None:
        """Leave one transaction level; the outermost level commits.

        With ``commit_transaction=False`` the outermost level rolls back
        instead.  A commit while idle is a no-op.
        """
        if self._depth < 1:
            return

        if self._depth == 1:
            try:
                if commit_transaction:
                    self._adapter.commit()
                else:
                    self._adapter.rollback()
            except ValoaError:
                raise
            except Exception as e:
                raise DatabaseError("Could not commit database transaction.", cause=e) from e

        self._depth -= 1

    def rollback(self) -> None:
        """Roll back the engine transaction and return to IDLE."""
        if self._depth < 1:
            raise ProgrammingError("Program attempted to cancel transaction without starting one.")

        try:
            self._adapter.rollback()
        except ValoaError:
            raise
        except Exception as e:
            raise DatabaseError("Could not roll back database transaction.", cause=e) from e

        self._depth = 0

    # Short aliases
    begin_trans = begin_transaction
    commit_trans = commit
    rollback_trans = rollback

    @contextmanager
    def transaction(self) -> Iterator[Db]:
        """Run a block inside a transaction; roll back if it raises."""
        self.begin_transaction()
        try:
            yield self
        except BaseException:
            if self.in_transaction:
                self.rollback()
            raise
        self.commit()

    # -- Lifecycle ---------------------------------------------------------

    def close(self) -> None:
        self._adapter.disconnect()

    def __enter__(self) -> Db:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Db(driver={self.dialect.name!r}, database={self._properties['db_db']!r})"


def connect(settings: DatabaseSettings | None = None) -> Db:
    """Build a :class:`Db` from ``DatabaseSettings`` (environment by default)."""
    settings = settings or DatabaseSettings()
    return Db(
        settings.driver,
        settings.host,
        settings.user,
        settings.password_value(),
        settings.database,
        port=settings.port,
        init_query=settings.init_query,
    )


__all__ = [
    "Db",
    "TransactionState",
    "connect",
]
