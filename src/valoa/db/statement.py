"""Prepared statements and result iteration.

A :class:`Statement` is what :meth:`valoa.db.connection.Db.prepare` hands
back: SQL written with ``?`` placeholders, a list of positional bindings
filled by :meth:`Statement.bind` in call order, and - once executed - a
cursor whose rows are exposed as plain ``dict`` records.

Usage::

    stmt = db.prepare("SELECT * FROM users WHERE id = ?")
    stmt.bind(7)
    stmt.execute()
    row = stmt.fetch_one()          # {"id": 7, "name": "x"} or None

    for row in db.prepare("SELECT name FROM users").execute():
        print(row["name"])
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TYPE_CHECKING, Any

from valoa.core.errors import IntegrityError, QueryError
from valoa.core.logging import get_logger
from valoa.core.protocols import Cursor

if TYPE_CHECKING:
    from valoa.db.connection import Db

logger = get_logger(__name__)

_QUOTES = ("'", '"', "`")


def translate_placeholders(sql: str, placeholder: str, escape_percent: bool = False) -> str:
    """Rewrite ``?`` placeholders into the driver's paramstyle token.

    Question marks inside quoted literals or quoted identifiers are left
    alone.  With ``escape_percent`` every literal ``%`` is doubled, for
    drivers such as psycopg2 that interpolate the whole statement and read
    ``%%`` back as ``%``.  mysql-connector only substitutes ``%s`` tokens, so
    its literal ``%`` is sent as written.

    >>> translate_placeholders("SELECT * FROM t WHERE a = ? AND b = '?'", "%s")
    "SELECT * FROM t WHERE a = %s AND b = '?'"
    """
    if placeholder == "?":
        return sql

    out: list[str] = []
    quote: str | None = None
    for ch in sql:
        if ch == "%" and escape_percent:
            out.append("%%")
            continue
        if quote is not None:
            out.append(ch)
            if ch == quote:
                quote = None
            continue
        if ch in _QUOTES:
            quote = ch
            out.append(ch)
        elif ch == "?":
            out.append(placeholder)
        else:
            out.append(ch)
    return "".join(out)


class Statement:
    """A prepared SQL statement bound to one :class:`~valoa.db.connection.Db`.

    Not thread-safe; one statement belongs to one caller.
    """

    def __init__(self, db: Db, sql: str):
        self._db = db
        self._sql = sql
        self._params: list[Any] = []
        self._cursor: Cursor | None = None
        self._columns: list[str] = []

    # -- Binding -----------------------------------------------------------

    @property
    def sql(self) -> str:
        """Statement text as written (``?`` placeholders)."""
        return self._sql

    @property
    def params(self) -> tuple[Any, ...]:
        """Values bound so far, in placeholder order."""
        return tuple(self._params)

    def bind(self, value: Any) -> Statement:
        """Bind the next positional parameter."""
        self._params.append(value)
        return self

    def bind_many(self, values: Iterable[Any]) -> Statement:
        """Bind several positional parameters in order."""
        self._params.extend(values)
        return self

    def reset(self) -> Statement:
        """Drop bindings and the current result so the SQL can run again."""
        self.close()
        self._params = []
        return self

    # -- Execution ---------------------------------------------------------

    def execute(self) -> Statement:
        """Run the statement with the bound parameters."""
        self.close()
        cursor = self._db.adapter.cursor()
        dialect = self._db.dialect

        try:
            if self._params:
                driver_sql = translate_placeholders(
                    self._sql, dialect.placeholder, dialect.escape_percent
                )
                cursor.execute(driver_sql, tuple(self._params))
            else:
                cursor.execute(self._sql)
        except Exception as e:
            cursor.close()
            error_cls = IntegrityError if type(e).__name__ == "IntegrityError" else QueryError
            raise error_cls("SQL query failed.", cause=e).with_context(
                sql=self._sql, driver=dialect.name
            ) from e

        self._cursor = cursor
        self._columns = [desc[0] for desc in cursor.description or ()]
        self._db._record_execution(self)

        logger.debug(
            "statement_executed",
            sql=" ".join(self._sql.split()),
            params=len(self._params),
            rowcount=cursor.rowcount,
        )
        return self

    # -- Results -----------------------------------------------------------

    @property
    def cursor(self) -> Cursor | None:
        return self._cursor

    @property
    def columns(self) -> list[str]:
        """Result column names, empty for statements without a result set."""
        return list(self._columns)

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount if self._cursor is not None else -1

    @property
    def lastrowid(self) -> Any:
        return self._cursor.lastrowid if self._cursor is not None else None

    def _require_cursor(self) -> Cursor:
        if self._cursor is None:
            raise QueryError("Statement has not been executed.").with_context(sql=self._sql)
        return self._cursor

    def _as_record(self, row: Any) -> dict[str, Any]:
        return dict(zip(self._columns, row, strict=False))

    def fetch_one(self) -> dict[str, Any] | None:
        """Next row as ``{column: value}``, or ``None`` when exhausted."""
        if not self._columns:
            return None
        row = self._require_cursor().fetchone()
        return None if row is None else self._as_record(row)

    def fetch_all(self) -> list[dict[str, Any]]:
        """All remaining rows."""
        if not self._columns:
            return []
        return [self._as_record(row) for row in self._require_cursor().fetchall()]

    def fetch_scalar(self) -> Any:
        """First column of the next row, or ``None``."""
        if not self._columns:
            return None
        row = self._require_cursor().fetchone()
        return None if row is None else row[0]

    def __iter__(self) -> Iterator[dict[str, Any]]:
        while True:
            record = self.fetch_one()
            if record is None:
                return
            yield record

    def close(self) -> None:
        """Release the cursor; bindings are kept."""
        if self._cursor is not None:
            self._cursor.close()
            self._cursor = None
            self._columns = []

    def __repr__(self) -> str:
        return f"Statement({self._sql!r}, params={len(self._params)})"


__all__ = [
    "Statement",
    "translate_placeholders",
]
