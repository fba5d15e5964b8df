"""
valoa-db - a thin relational data-access layer.

One connection facade over MySQL, SQLite and PostgreSQL, a catalog-driven
row mapper with dirty tracking, and a helper that turns ``<table>_id``
column names into foreign-key constraints.

Quick start::

    from valoa import Db, Item

    db = Db("sqlite", database="app.db")
    user = Item(db, "users")
    user.set("name", "x")
    user_id = user.save()
"""

__version__ = "0.1.0"

from valoa.db import Columns, Constraints, Db, Item, Statement, connect  # noqa: E402

__all__ = [
    "Columns",
    "Constraints",
    "Db",
    "Item",
    "Statement",
    "__version__",
    "connect",
]
