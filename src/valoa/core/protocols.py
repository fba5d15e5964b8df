"""
Canonical protocol definitions for valoa-db.

The facade talks to drivers only through the DB-API 2.0 shapes below, so any
PEP 249 driver (``sqlite3``, ``mysql.connector``, ``psycopg2``) or a test
double with the same methods can sit underneath it.

Architecture:
    ::

        protocols.py
        ├── Cursor            - PEP 249 cursor subset used by Statement
        └── DriverConnection  - PEP 249 connection subset used by adapters

Guardrails:
    ❌ DON'T: Import sqlite3 / psycopg2 types in db/ modules
    ✅ DO: Type against these protocols

Tags:
    protocol, connection, cursor, dbapi, valoa-db
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Cursor(Protocol):
    """
    Minimal PEP 249 cursor interface.

    ``description`` is ``None`` after statements that return no rows and a
    sequence of 7-item column descriptions otherwise; only the first item
    (the column name) is used.
    """

    description: Sequence[Sequence[Any]] | None
    rowcount: int
    lastrowid: Any

    def execute(self, sql: str, params: Sequence[Any] = ()) -> Any:
        """Execute one statement with positional parameters."""
        ...

    def fetchone(self) -> Sequence[Any] | None:
        """Fetch the next row, or ``None`` when exhausted."""
        ...

    def fetchall(self) -> list[Sequence[Any]]:
        """Fetch all remaining rows."""
        ...

    def close(self) -> None:
        """Release the cursor."""
        ...


@runtime_checkable
class DriverConnection(Protocol):
    """Minimal PEP 249 connection interface."""

    def cursor(self) -> Cursor:
        """Open a new cursor."""
        ...

    def close(self) -> None:
        """Close the connection."""
        ...


__all__ = [
    "Cursor",
    "DriverConnection",
]
