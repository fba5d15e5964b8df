"""Data-access layer: connection facade, statements, columns, rows, constraints.

Dependency order (each module only imports the ones above it)::

    statement.py     Statement, translate_placeholders
    connection.py    Db, TransactionState, connect
    columns.py       Columns, discover_columns, register_column_discovery
    item.py          Item, NOT_PERSISTED, is_numeric
    constraints.py   Constraints, ConstraintReport, ConstraintStatus
"""

from valoa.db.columns import Columns, discover_columns, register_column_discovery
from valoa.db.connection import Db, TransactionState, connect
from valoa.db.constraints import (
    ConstraintQueries,
    ConstraintReport,
    ConstraintResult,
    Constraints,
    ConstraintStatus,
    register_constraint_queries,
)
from valoa.db.item import NOT_PERSISTED, Item, is_numeric
from valoa.db.statement import Statement, translate_placeholders

__all__ = [
    "Columns",
    "ConstraintQueries",
    "ConstraintReport",
    "ConstraintResult",
    "ConstraintStatus",
    "Constraints",
    "Db",
    "Item",
    "NOT_PERSISTED",
    "Statement",
    "TransactionState",
    "connect",
    "discover_columns",
    "is_numeric",
    "register_column_discovery",
    "register_constraint_queries",
    "translate_placeholders",
]
