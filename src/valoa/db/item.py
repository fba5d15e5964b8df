"""Generic row mapper.

An :class:`Item` is one row of one table, shaped by the catalog rather than
by a declared model.  Fields are read with :meth:`Item.get` and written with
:meth:`Item.set`; only a write that actually changes a value marks the item
modified, and :meth:`Item.save` turns the current field map into an INSERT
or an UPDATE depending on whether the primary key holds a numeric value.

Usage::

    user = Item(db, "users")
    user.set("name", "x")
    user_id = user.save()               # INSERT, returns the new id

    again = Item(db, "users", user_id)  # SELECT * ... WHERE id = ?
    again.get("name")                   # 'x'
    again.get("primaryKey")             # 'id' (the column *name*)
    again.delete()

Lifecycle::

    EMPTY ──load_by_id──▶ LOADED ──set(change)──▶ MODIFIED ──save──▶ LOADED
      │                                                              │
      └──────────────────────────── delete ──────────────────────────┴──▶ DELETED
"""

from __future__ import annotations

import re
from decimal import Decimal
from typing import Any

from valoa.core.errors import NotFoundError
from valoa.core.logging import get_logger

from .columns import Columns
from .connection import Db

logger = get_logger(__name__)

NOT_PERSISTED = -1
"""Returned by :meth:`Item.save` when nothing was modified."""

PRIMARY_KEY_FIELD = "primaryKey"
"""Virtual field: ``item.get("primaryKey")`` returns the key column's name."""

_NUMERIC_RE = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?\s*$")


def is_numeric(value: Any) -> bool:
    """True for numbers and numeric strings (``5``, ``"5"``, ``" 1.5e3"``).

    Booleans, ``None`` and other strings are not numeric.
    """
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, Decimal)):
        return True
    if isinstance(value, str):
        return _NUMERIC_RE.match(value) is not None
    return False


def as_int(value: Any) -> int:
    """Integer form of a numeric value (``"12"`` -> 12, ``"1.9"`` -> 1)."""
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        return int(Decimal(value.strip()))
    return int(value)


def _differs(new: Any, current: Any) -> bool:
    # Strict comparison: "1" and 1 are different values
    return type(new) is not type(current) or new != current


class Item:
    """One table row with dirty tracking.

    Args:
        db: Connection facade.
        table: Target table name.
        id: When given and positive, the row is loaded immediately.

    Raises:
        NotFoundError: If ``id`` is given and no such row exists.
    """

    def __init__(self, db: Db, table: str, id: int | None = None):
        self._db = db
        self._table = table
        self._columns = Columns(db, table)
        self._primary_key = self._columns.get_primary_key_column()
        self._fields: dict[str, Any] = self._columns.get_columns()
        self._modified = False
        self._deleted = False

        if id is not None and id > 0:
            self.load_by_id(id)

    # -- Introspection -----------------------------------------------------

    @property
    def table(self) -> str:
        return self._table

    @property
    def primary_key(self) -> str:
        """Primary-key column name."""
        return self._primary_key

    def get_primary_key_column(self) -> str:
        return self._primary_key

    @property
    def modified(self) -> bool:
        return self._modified

    @property
    def deleted(self) -> bool:
        """Whether :meth:`delete` removed the backing row."""
        return self._deleted

    @property
    def fields(self) -> dict[str, Any]:
        """Copy of the current field map, in column order."""
        return dict(self._fields)

    def to_dict(self) -> dict[str, Any]:
        return dict(self._fields)

    def __contains__(self, field: object) -> bool:
        return field in self._fields

    # -- Field access ------------------------------------------------------

    def get(self, field: str) -> Any:
        """Current value of ``field``, ``None`` when unset or unknown.

        ``"primaryKey"`` is reserved and returns the primary-key column name.
        """
        if field == PRIMARY_KEY_FIELD:
            return self._primary_key
        return self._fields.get(field)

    def set(self, field: str, value: Any) -> None:
        """Assign ``value`` to a known field, marking the item modified on change.

        The primary-key column is never written through here and unknown
        fields are ignored.
        """
        if field == self._primary_key or field not in self._fields:
            return

        if _differs(value, self._fields[field]):
            self._fields[field] = value
            self._modified = True

    # -- Persistence -------------------------------------------------------

    def load_by_id(self, id: int) -> int:
        """Replace the field map with the row whose primary key is ``id``."""
        stmt = self._db.prepare(f"SELECT * FROM {self._table} WHERE {self._primary_key} = ?")
        row = stmt.bind(id).execute().fetch_one()
        stmt.close()

        if row is None:
            raise NotFoundError("Selected row does not exist.").with_context(
                table=self._table, row_id=id
            )

        # SELECT * decides the field set, not the catalog snapshot
        self._fields = dict(row)
        self._modified = False
        self._deleted = False

        logger.debug("item_loaded", table=self._table, row_id=id)
        return id

    def save(self) -> int:
        """INSERT or UPDATE the row; returns its id, or ``NOT_PERSISTED``."""
        if not self._modified:
            return NOT_PERSISTED

        self._fields.setdefault(self._primary_key, None)
        key_value = self._fields[self._primary_key]

        if is_numeric(key_value):
            row_id = self._update(as_int(key_value))
            action = "update"
        else:
            row_id = self._insert()
            self._fields[self._primary_key] = row_id
            action = "insert"

        self._modified = False
        logger.debug("item_saved", table=self._table, action=action, row_id=row_id)
        return row_id

    def _insert(self) -> int:
        dialect = self._db.dialect
        names = list(self._fields)
        values: list[Any] = []
        placeholders: list[str] = []

        for name in names:
            value = self._fields[name]
            if name == self._primary_key and value is None and dialect.supports_returning:
                # Let the sequence fill the key; NULL would violate NOT NULL
                placeholders.append("DEFAULT")
                continue
            placeholders.append("?")
            values.append(value)

        sql = (
            f"INSERT INTO {self._table} ({','.join(dialect.quote(n) for n in names)}) "
            f"VALUES ({','.join(placeholders)})"
        )
        if dialect.supports_returning:
            sql += f" RETURNING {self._primary_key}"

        stmt = self._db.prepare(sql).bind_many(values).execute()
        if dialect.supports_returning:
            new_id = stmt.fetch_scalar()
        else:
            new_id = self._db.last_insert_id()
        stmt.close()

        return as_int(new_id)

    def _update(self, row_id: int) -> int:
        dialect = self._db.dialect
        assignments = ",".join(f"{dialect.quote(name)} = ?" for name in self._fields)
        sql = f"UPDATE {self._table} SET {assignments} WHERE {self._primary_key} = ?"

        stmt = self._db.prepare(sql).bind_many(self._fields.values()).bind(row_id)
        stmt.execute().close()
        return row_id

    def delete(self) -> None:
        """DELETE the backing row; no-op without a numeric primary key.

        The field map is left as it was, including the key.
        """
        key_value = self._fields.get(self._primary_key)
        if not is_numeric(key_value):
            return

        row_id = as_int(key_value)
        stmt = self._db.prepare(f"DELETE FROM {self._table} WHERE {self._primary_key} = ?")
        stmt.bind(row_id).execute().close()
        self._deleted = True

        logger.debug("item_deleted", table=self._table, row_id=row_id)

    def __repr__(self) -> str:
        return f"Item({self._table!r}, {self._primary_key}={self._fields.get(self._primary_key)!r})"


__all__ = [
    "Item",
    "NOT_PERSISTED",
    "PRIMARY_KEY_FIELD",
    "as_int",
    "is_numeric",
]
