"""
Shared pytest fixtures for valoa-db tests.

This module provides:
- An in-memory SQLite ``Db`` and a small ``org`` / ``users`` schema on it
- A SQLite file with the same schema for CLI tests
- ``mysql`` / ``postgresql`` facades over the scripted driver in
  ``tests._support.fake_driver``

Usage:
    def test_insert_shape(mysql):
        db, adapter = mysql
        adapter.script("information_schema.columns", users_catalog())
        ...
        assert adapter.executed[-1] == ("INSERT ...", (None, "x", None))
"""

from __future__ import annotations

from pathlib import Path

import pytest
import structlog

from tests._support.fake_driver import FakeAdapter
from valoa.core.adapters.types import DriverType
from valoa.db.connection import Db


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Mark every test without an explicit marker as a unit test."""
    for item in items:
        markers = {mark.name for mark in item.iter_markers()}
        if not markers.intersection({"unit", "integration"}):
            item.add_marker(pytest.mark.unit)


@pytest.fixture(autouse=True)
def _reset_logging():
    """Undo any structlog configuration a test (or a CLI command) applied."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


SCHEMA = (
    "CREATE TABLE org (id INTEGER PRIMARY KEY, name TEXT)",
    "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, org_id INTEGER)",
)


# =============================================================================
# SQLite fixtures
# =============================================================================


@pytest.fixture
def db():
    """Fresh in-memory SQLite connection facade."""
    database = Db("sqlite", database=":memory:")
    yield database
    database.close()


@pytest.fixture
def schema_db(db):
    """``db`` with ``org(id, name)`` and ``users(id, name, org_id)``."""
    for ddl in SCHEMA:
        db.exec(ddl)
    return db


@pytest.fixture
def sqlite_file(tmp_path: Path) -> str:
    """Path of a SQLite file holding the ``org`` / ``users`` schema."""
    path = str(tmp_path / "valoa.db")
    with Db("sqlite", database=path) as database:
        for ddl in SCHEMA:
            database.exec(ddl)
    return path


# =============================================================================
# Scripted driver fixtures
# =============================================================================


@pytest.fixture
def mysql() -> tuple[Db, FakeAdapter]:
    adapter = FakeAdapter(DriverType.MYSQL)
    return Db("mysql", "dbhost", "app", "secret", "appdb", adapter=adapter), adapter


@pytest.fixture
def postgresql() -> tuple[Db, FakeAdapter]:
    adapter = FakeAdapter(DriverType.POSTGRESQL)
    return Db("postgresql", "dbhost", "app", "secret", "appdb", adapter=adapter), adapter
