"""SQL dialect abstraction.

The mapper and constraint code write their SQL once, with ``?`` positional
placeholders and the identifier quoting shown in the generated-SQL table
below.  A ``Dialect`` supplies the few fragments that differ between
engines: the driver's placeholder token, identifier quoting and whether the
engine can hand back a generated key through ``RETURNING``.

Architecture::

    Domain Code:
    ┌────────────────────────────────────────────────────────────────┐
    │  sql = f"INSERT INTO {t} ({d.quote('name')}) VALUES (?)"       │
    │  if d.supports_returning: sql += f" RETURNING {pk}"            │
    │  db.prepare(sql)   # ? -> d.placeholder                        │
    └────────────────────────────────────────────────────────────────┘
                              │
                              ▼
    ┌──────────────┐  ┌──────────────┐  ┌──────────────────┐
    │ MySQL        │  │ SQLite       │  │ PostgreSQL       │
    │ %s, `col`    │  │ ?, `col`     │  │ %s, "col"        │
    │ lastrowid    │  │ lastrowid    │  │ RETURNING        │
    └──────────────┘  └──────────────┘  └──────────────────┘

Examples:
    >>> from valoa.core.dialect import get_dialect
    >>> d = get_dialect("mysql")
    >>> d.quote("name")
    '`name`'
    >>> d.supports_returning
    False

Guardrails:
    ❌ DON'T: Write ``%s`` into mapper SQL
    ✅ DO: Write ``?`` and let ``Db.prepare`` translate it

Tags:
    dialect, sql, portability, valoa-db

Doc-Types:
    - API Reference
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from valoa.core.errors import ConfigError


@runtime_checkable
class Dialect(Protocol):
    """SQL dialect contract."""

    @property
    def name(self) -> str:
        """Canonical driver name (``'mysql'``, ``'sqlite'``, ``'postgresql'``)."""
        ...

    @property
    def placeholder(self) -> str:
        """Positional placeholder token understood by the DB-API driver."""
        ...

    @property
    def escape_percent(self) -> bool:
        """Whether the driver reads ``%%`` as a literal ``%`` in parameterised SQL."""
        ...

    @property
    def supports_returning(self) -> bool:
        """Whether ``INSERT ... RETURNING <pk>`` yields the generated key."""
        ...

    @property
    def supports_alter_foreign_key(self) -> bool:
        """Whether ``ALTER TABLE ... ADD FOREIGN KEY`` is valid DDL."""
        ...

    def quote(self, identifier: str) -> str:
        """Quote a column identifier for INSERT/UPDATE column lists."""
        ...


# =========================================================================
# Concrete Dialect Implementations
# =========================================================================


class MySQLDialect:
    """MySQL / MariaDB - ``%s`` placeholders (mysql-connector), backtick quoting."""

    @property
    def name(self) -> str:
        return "mysql"

    @property
    def placeholder(self) -> str:
        return "%s"

    @property
    def escape_percent(self) -> bool:
        # mysql-connector only substitutes %s and sends %% through verbatim
        return False

    @property
    def supports_returning(self) -> bool:
        return False

    @property
    def supports_alter_foreign_key(self) -> bool:
        return True

    def quote(self, identifier: str) -> str:
        return "`" + identifier.replace("`", "``") + "`"


class SQLiteDialect:
    """SQLite - ``?`` placeholders, backtick quoting (accepted for MySQL compatibility).

    SQLite cannot add a foreign key to an existing table; constraint DDL is
    still attempted so the failure is reported per candidate.
    """

    @property
    def name(self) -> str:
        return "sqlite"

    @property
    def placeholder(self) -> str:
        return "?"

    @property
    def escape_percent(self) -> bool:
        return False

    @property
    def supports_returning(self) -> bool:
        return False

    @property
    def supports_alter_foreign_key(self) -> bool:
        return False

    def quote(self, identifier: str) -> str:
        return "`" + identifier.replace("`", "``") + "`"


class PostgreSQLDialect:
    """PostgreSQL - ``%s`` placeholders (psycopg2), double-quote quoting, ``RETURNING``."""

    @property
    def name(self) -> str:
        return "postgresql"

    @property
    def placeholder(self) -> str:
        return "%s"

    @property
    def escape_percent(self) -> bool:
        return True

    @property
    def supports_returning(self) -> bool:
        return True

    @property
    def supports_alter_foreign_key(self) -> bool:
        return True

    def quote(self, identifier: str) -> str:
        return '"' + identifier.replace('"', '""') + '"'


# =========================================================================
# Registry / Factory
# =========================================================================

# Dialects are stateless
_DIALECTS: dict[str, Dialect] = {
    "mysql": MySQLDialect(),
    "sqlite": SQLiteDialect(),
    "postgresql": PostgreSQLDialect(),
}


def get_dialect(driver: str) -> Dialect:
    """Get a dialect by canonical driver name.

    Raises:
        ConfigError: If ``driver`` has no registered dialect.
    """
    key = driver.lower()
    if key not in _DIALECTS:
        raise ConfigError(
            f"Unsupported database type '{driver}'. Supported: {sorted(_DIALECTS)}"
        )
    return _DIALECTS[key]


def register_dialect(name: str, dialect: Dialect) -> None:
    """Register a custom dialect implementation (third-party drivers, test doubles)."""
    _DIALECTS[name.lower()] = dialect


__all__ = [
    # Protocol
    "Dialect",
    # Implementations
    "MySQLDialect",
    "SQLiteDialect",
    "PostgreSQLDialect",
    # Factory
    "get_dialect",
    "register_dialect",
]
