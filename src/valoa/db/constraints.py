"""Naming-convention foreign keys.

A column called ``<table>_<pk>`` is taken to reference ``<table>(<pk>)``.
:class:`Constraints` finds such columns in one table, checks the catalog for
foreign keys that already exist, adds the missing ones with
``ON DELETE RESTRICT ON UPDATE RESTRICT`` and answers the reverse question
of which columns elsewhere reference the table.

Creation is best-effort and idempotent: existing keys are detected and
skipped, a failing ``ALTER TABLE`` is recorded in the report and the
remaining candidates still run, and nothing is ever dropped or altered.

Usage::

    constraints = Constraints(db, "users")
    candidates = constraints.discover_candidates()   # ['org'] from org_id
    report = constraints.apply_constraints(candidates)
    report.created                                   # 1, then 0 on a re-run
    constraints.list_references()                    # ['orders.users_id']

Candidate discovery keeps the historical rule by default: any column
*containing* ``_<pk>`` yields a candidate with the last three characters
removed, which is only right for a three-character suffix such as ``_id``.
``exact_suffix=True`` matches the suffix at the end of the name and strips
exactly its length.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from valoa.core.errors import DatabaseError
from valoa.core.logging import get_logger

from .columns import DEFAULT_PRIMARY_KEY, Columns
from .connection import Db

logger = get_logger(__name__)

RESERVED_CANDIDATES = frozenset({"parent"})
"""Candidates never turned into foreign keys (``parent_id`` is a self-reference)."""

LEGACY_STRIP = 3


# =========================================================================
# Catalog queries per driver
# =========================================================================


@dataclass(frozen=True)
class ConstraintQueries:
    """Catalog SQL for one driver.

    ``existing`` takes ``(table, referenced_table)`` and yields
    ``column_name``, ``referenced_table_name``, ``referenced_column_name``.
    ``references`` takes ``(referenced_table,)`` and yields ``table_name``,
    ``column_name``.
    """

    existing: str
    references: str


_INFORMATION_SCHEMA = ConstraintQueries(
    existing=(
        "SELECT COLUMN_NAME, CONSTRAINT_NAME, REFERENCED_COLUMN_NAME, REFERENCED_TABLE_NAME "
        "FROM information_schema.KEY_COLUMN_USAGE "
        "WHERE TABLE_NAME = ? AND REFERENCED_TABLE_NAME = ?"
    ),
    references=(
        "SELECT COLUMN_NAME, TABLE_NAME "
        "FROM information_schema.KEY_COLUMN_USAGE "
        "WHERE REFERENCED_TABLE_NAME = ?"
    ),
)

_SQLITE = ConstraintQueries(
    existing=(
        'SELECT "from" AS column_name, "table" AS referenced_table_name, '
        '"to" AS referenced_column_name '
        'FROM pragma_foreign_key_list(?) WHERE "table" = ?'
    ),
    references=(
        'SELECT m.name AS table_name, f."from" AS column_name '
        "FROM sqlite_master m JOIN pragma_foreign_key_list(m.name) f "
        "WHERE m.type = 'table' AND f.\"table\" = ? ORDER BY m.name, f.id"
    ),
)

_POSTGRESQL = ConstraintQueries(
    existing=(
        "SELECT kcu.column_name, tc.constraint_name, "
        "ccu.column_name AS referenced_column_name, ccu.table_name AS referenced_table_name "
        "FROM information_schema.table_constraints tc "
        "JOIN information_schema.key_column_usage kcu "
        "ON kcu.constraint_name = tc.constraint_name AND kcu.table_schema = tc.table_schema "
        "JOIN information_schema.constraint_column_usage ccu "
        "ON ccu.constraint_name = tc.constraint_name AND ccu.table_schema = tc.table_schema "
        "WHERE tc.constraint_type = 'FOREIGN KEY' AND tc.table_name = ? AND ccu.table_name = ?"
    ),
    references=(
        "SELECT kcu.table_name, kcu.column_name "
        "FROM information_schema.table_constraints tc "
        "JOIN information_schema.key_column_usage kcu "
        "ON kcu.constraint_name = tc.constraint_name AND kcu.table_schema = tc.table_schema "
        "JOIN information_schema.constraint_column_usage ccu "
        "ON ccu.constraint_name = tc.constraint_name AND ccu.table_schema = tc.table_schema "
        "WHERE tc.constraint_type = 'FOREIGN KEY' AND ccu.table_name = ?"
    ),
)

_CONSTRAINT_QUERIES: dict[str, ConstraintQueries] = {
    "sqlite": _SQLITE,
    "postgresql": _POSTGRESQL,
}


def register_constraint_queries(driver: str, queries: ConstraintQueries) -> None:
    """Add or replace the constraint catalog queries used for ``driver``."""
    _CONSTRAINT_QUERIES[driver.lower()] = queries


def constraint_queries(db: Db) -> ConstraintQueries:
    return _CONSTRAINT_QUERIES.get(db.properties["db_server"], _INFORMATION_SCHEMA)


# =========================================================================
# Report types
# =========================================================================


class ConstraintStatus(str, Enum):
    """Outcome for one candidate."""

    CREATED = "created"
    EXISTS = "exists"
    RESERVED = "reserved"
    FAILED = "failed"


@dataclass(frozen=True)
class ConstraintResult:
    """What happened to one candidate referenced table."""

    candidate: str
    status: ConstraintStatus
    column: str
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result = {
            "candidate": self.candidate,
            "column": self.column,
            "status": self.status.value,
        }
        if self.reason is not None:
            result["reason"] = self.reason
        return result


@dataclass
class ConstraintReport:
    """Per-candidate results of one :meth:`Constraints.apply_constraints` run."""

    table: str
    results: list[ConstraintResult] = field(default_factory=list)

    def _count(self, status: ConstraintStatus) -> int:
        return sum(1 for r in self.results if r.status is status)

    @property
    def created(self) -> int:
        return self._count(ConstraintStatus.CREATED)

    @property
    def existing(self) -> int:
        return self._count(ConstraintStatus.EXISTS)

    @property
    def failed(self) -> list[ConstraintResult]:
        return [r for r in self.results if r.status is ConstraintStatus.FAILED]

    def __iter__(self) -> Iterator[ConstraintResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "table": self.table,
            "created": self.created,
            "results": [r.to_dict() for r in self.results],
        }


# =========================================================================
# Inspector
# =========================================================================


class Constraints:
    """Foreign-key discovery and creation for one table.

    Args:
        db: Connection facade.
        table: Referencing table.
        exact_suffix: Match ``_<pk>`` at the end of column names and strip
            exactly its length, instead of the historical substring match
            with a fixed three-character strip.
    """

    def __init__(self, db: Db, table: str, *, exact_suffix: bool = False):
        self._db = db
        self._table = table
        self._primary_key = DEFAULT_PRIMARY_KEY
        self._exact_suffix = exact_suffix

    @property
    def table(self) -> str:
        return self._table

    @property
    def primary_key(self) -> str:
        return self._primary_key

    def set_primary_key_column(self, column: str) -> None:
        """Primary-key name used on both sides of the naming convention."""
        self._primary_key = column

    def column_for(self, candidate: str) -> str:
        """Referencing column name for ``candidate`` (``org`` -> ``org_id``)."""
        return f"{candidate}_{self._primary_key}"

    # -- Discovery ---------------------------------------------------------

    def discover_candidates(self) -> list[str]:
        """Referenced-table names implied by this table's column names."""
        lookup = f"_{self._primary_key}"
        candidates: list[str] = []

        for column in Columns(self._db, self._table):
            if self._exact_suffix:
                if not column.endswith(lookup):
                    continue
                candidate = column[: -len(lookup)]
            else:
                if lookup not in column:
                    continue
                candidate = column[:-LEGACY_STRIP]

            if candidate:
                candidates.append(candidate)

        return candidates

    def has_constraint(self, candidate: str) -> bool:
        """Whether ``<candidate>_<pk>`` already references ``<candidate>(<pk>)``."""
        sql = constraint_queries(self._db).existing
        stmt = self._db.prepare(sql).bind(self._table).bind(candidate).execute()
        expected_column = self.column_for(candidate)

        found = False
        for row in stmt:
            record = {key.lower(): value for key, value in row.items()}
            # SQLite leaves "to" NULL when the parent's primary key is implied
            referenced_column = record.get("referenced_column_name") or self._primary_key
            if (
                record.get("referenced_table_name") == candidate
                and referenced_column == self._primary_key
                and record.get("column_name") == expected_column
            ):
                found = True
        stmt.close()

        return found

    def list_references(self) -> list[str]:
        """``table.column`` for every foreign key pointing at this table."""
        sql = constraint_queries(self._db).references
        stmt = self._db.prepare(sql).bind(self._table).execute()

        references = []
        for row in stmt:
            record = {key.lower(): value for key, value in row.items()}
            references.append(f"{record['table_name']}.{record['column_name']}")
        stmt.close()

        return references

    # -- Creation ----------------------------------------------------------

    def constraint_sql(self, candidate: str) -> str:
        pk = self._primary_key
        return (
            f"ALTER TABLE {self._table} ADD FOREIGN KEY ({candidate}_{pk}) "
            f"REFERENCES {candidate}({pk}) ON DELETE RESTRICT ON UPDATE RESTRICT"
        )

    def apply_constraints(self, candidates: Iterable[str]) -> ConstraintReport:
        """Create the missing foreign keys, one result per candidate."""
        report = ConstraintReport(table=self._table)

        for candidate in candidates:
            column = self.column_for(candidate)

            if self.has_constraint(candidate):
                logger.info("constraint_exists", table=self._table, candidate=candidate)
                report.results.append(ConstraintResult(candidate, ConstraintStatus.EXISTS, column))
                continue

            if candidate in RESERVED_CANDIDATES:
                report.results.append(ConstraintResult(candidate, ConstraintStatus.RESERVED, column))
                continue

            try:
                self._db.exec(self.constraint_sql(candidate))
            except DatabaseError as e:
                reason = str(e.cause) if e.cause is not None else e.message
                logger.warning(
                    "constraint_failed",
                    table=self._table,
                    candidate=candidate,
                    error=reason,
                )
                report.results.append(
                    ConstraintResult(candidate, ConstraintStatus.FAILED, column, reason=reason)
                )
                continue

            logger.info("constraint_created", table=self._table, candidate=candidate, column=column)
            report.results.append(ConstraintResult(candidate, ConstraintStatus.CREATED, column))

        return report

    def create_constraints(self, candidates: Iterable[str]) -> int:
        """Create the missing foreign keys and return how many were added."""
        return self.apply_constraints(candidates).created

    def sync(self) -> ConstraintReport:
        """Discover candidates and create whatever is missing."""
        return self.apply_constraints(self.discover_candidates())


__all__ = [
    "ConstraintQueries",
    "ConstraintReport",
    "ConstraintResult",
    "ConstraintStatus",
    "Constraints",
    "RESERVED_CANDIDATES",
    "register_constraint_queries",
]
