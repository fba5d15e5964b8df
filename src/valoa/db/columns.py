"""Column discovery from the database catalog.

:class:`Columns` asks the engine's metadata catalog which columns a table has
and which one is the primary key.  The answer is an ordered mapping
``column name -> None`` (catalog order) plus the primary-key column name,
defaulting to ``"id"`` when the catalog marks none.

Catalog queries are chosen by driver identity (``db.properties["db_server"]``):

==============  ==========================================================
Driver          Catalog source
==============  ==========================================================
(default)       ``information_schema.columns`` filtered by table + database
``sqlite``      ``pragma_table_info(table)``
``postgresql``  ``information_schema.columns`` + primary-key constraint
==============  ==========================================================

Other engines plug in through :func:`register_column_discovery`; a builder
returns ``(sql, params)`` for a query yielding ``column_name``,
``data_type`` and ``column_key`` (``'PRI'`` marks the primary key).
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

from valoa.core.logging import get_logger

from .connection import Db

logger = get_logger(__name__)

DEFAULT_PRIMARY_KEY = "id"

CatalogQuery = Callable[[Db, str], tuple[str, tuple[Any, ...]]]


def _information_schema_query(db: Db, table: str) -> tuple[str, tuple[Any, ...]]:
    sql = (
        "SELECT column_name, data_type, column_key "
        "FROM information_schema.columns "
        "WHERE table_name = ? AND table_schema = ?"
    )
    return sql, (table, db.properties["db_db"])


def _sqlite_query(db: Db, table: str) -> tuple[str, tuple[Any, ...]]:
    sql = (
        "SELECT name AS column_name, type AS data_type, "
        "CASE WHEN pk > 0 THEN 'PRI' ELSE '' END AS column_key "
        "FROM pragma_table_info(?) ORDER BY cid"
    )
    return sql, (table,)


def _postgresql_query(db: Db, table: str) -> tuple[str, tuple[Any, ...]]:
    sql = (
        "SELECT c.column_name, c.data_type, "
        "CASE WHEN k.column_name IS NOT NULL THEN 'PRI' ELSE '' END AS column_key "
        "FROM information_schema.columns c "
        "LEFT JOIN information_schema.table_constraints t "
        "ON t.table_schema = c.table_schema AND t.table_name = c.table_name "
        "AND t.constraint_type = 'PRIMARY KEY' "
        "LEFT JOIN information_schema.key_column_usage k "
        "ON k.constraint_name = t.constraint_name AND k.table_schema = t.table_schema "
        "AND k.table_name = c.table_name AND k.column_name = c.column_name "
        "WHERE c.table_name = ? AND c.table_schema = current_schema() "
        "ORDER BY c.ordinal_position"
    )
    return sql, (table,)


_CATALOG_QUERIES: dict[str, CatalogQuery] = {
    "sqlite": _sqlite_query,
    "postgresql": _postgresql_query,
}


def register_column_discovery(driver: str, builder: CatalogQuery) -> None:
    """Add or replace the catalog query used for ``driver``."""
    _CATALOG_QUERIES[driver.lower()] = builder


def catalog_query(db: Db, table: str) -> tuple[str, tuple[Any, ...]]:
    """The ``(sql, params)`` column-discovery query for ``db``'s driver."""
    builder = _CATALOG_QUERIES.get(db.properties["db_server"], _information_schema_query)
    return builder(db, table)


def _lower_keys(row: dict[str, Any]) -> dict[str, Any]:
    # MySQL 8 labels information_schema columns in upper case
    return {key.lower(): value for key, value in row.items()}


def discover_columns(db: Db, table: str) -> tuple[dict[str, Any], str, dict[str, str]]:
    """Query the catalog for ``table``.

    Returns:
        ``(columns, primary_key, data_types)`` where ``columns`` maps every
        column name to ``None`` in catalog order.  An unknown table yields an
        empty mapping, not an error.
    """
    sql, params = catalog_query(db, table)
    stmt = db.prepare(sql).bind_many(params).execute()

    columns: dict[str, Any] = {}
    data_types: dict[str, str] = {}
    primary_key = DEFAULT_PRIMARY_KEY

    for row in stmt:
        record = _lower_keys(row)
        name = record["column_name"]
        columns[name] = None
        data_types[name] = record.get("data_type") or ""

        if record.get("column_key") == "PRI":
            primary_key = name

    stmt.close()

    logger.debug("columns_discovered", table=table, count=len(columns), primary_key=primary_key)
    return columns, primary_key, data_types


class Columns:
    """Column set of one table, fetched once at construction.

    Examples:
        >>> cols = Columns(db, "users")
        >>> cols.get_columns()
        {'id': None, 'name': None, 'org_id': None}
        >>> cols.get_primary_key_column()
        'id'
    """

    def __init__(self, db: Db, table: str):
        self._db = db
        self._table = table
        self._columns, self._primary_key, self._data_types = discover_columns(db, table)

    @property
    def table(self) -> str:
        return self._table

    @property
    def primary_key(self) -> str:
        return self._primary_key

    @property
    def names(self) -> list[str]:
        return list(self._columns)

    @property
    def data_types(self) -> dict[str, str]:
        return dict(self._data_types)

    def get_primary_key_column(self) -> str:
        """Primary-key column name (``"id"`` unless the catalog says otherwise)."""
        return self._primary_key

    def get_columns(self) -> dict[str, Any]:
        """Fresh ``{column: None}`` mapping; callers may mutate their copy."""
        return dict(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __contains__(self, name: object) -> bool:
        return name in self._columns

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __repr__(self) -> str:
        return f"Columns({self._table!r}, columns={self.names!r}, primary_key={self._primary_key!r})"


__all__ = [
    "Columns",
    "DEFAULT_PRIMARY_KEY",
    "catalog_query",
    "discover_columns",
    "register_column_discovery",
]
