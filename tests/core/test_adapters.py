"""Tests for ``valoa.core.adapters``: registry, SQLite, MySQL and PostgreSQL adapters."""

from __future__ import annotations

import sqlite3
import sys
from unittest.mock import MagicMock, patch

import pytest

from valoa.core.adapters import (
    AdapterRegistry,
    DriverType,
    MySQLAdapter,
    PostgreSQLAdapter,
    SQLiteAdapter,
    get_adapter,
    register_adapter,
)
from valoa.core.errors import ConfigError, DatabaseConnectionError, DatabaseError


class TestAdapterRegistry:
    def test_defaults(self):
        assert AdapterRegistry().list_adapters() == ["mysql", "postgresql", "sqlite"]

    def test_create_sqlite(self):
        adapter = get_adapter("sqlite", path=":memory:")
        assert isinstance(adapter, SQLiteAdapter)
        assert adapter.driver is DriverType.SQLITE

    def test_create_with_enum(self):
        assert isinstance(get_adapter(DriverType.SQLITE), SQLiteAdapter)

    @pytest.mark.parametrize("alias", ["postgres", "pgsql", "PostgreSQL"])
    def test_postgres_aliases(self, alias):
        adapter = get_adapter(alias, host="db", database="app")
        assert isinstance(adapter, PostgreSQLAdapter)
        assert adapter.dialect.name == "postgresql"

    def test_unknown_driver(self):
        with pytest.raises(ConfigError, match="Unsupported database type"):
            get_adapter("oracle")

    def test_register_adapter(self):
        class MemoryAdapter(SQLiteAdapter):
            pass

        register_adapter("memory-test", MemoryAdapter)
        try:
            assert isinstance(get_adapter("memory-test"), MemoryAdapter)
        finally:
            from valoa.core.adapters import adapter_registry

            adapter_registry._factories.pop("memory-test")


class TestSQLiteAdapter:
    def test_not_connected_until_connect(self):
        adapter = SQLiteAdapter()
        assert adapter.is_connected is False
        adapter.connect()
        assert adapter.is_connected is True
        adapter.disconnect()
        assert adapter.is_connected is False

    def test_disconnect_when_not_connected(self):
        SQLiteAdapter().disconnect()

    def test_foreign_keys_enabled(self):
        with SQLiteAdapter() as adapter:
            cur = adapter.cursor()
            cur.execute("PRAGMA foreign_keys")
            assert cur.fetchone()[0] == 1

    def test_explicit_transaction(self):
        with SQLiteAdapter() as adapter:
            adapter.run("CREATE TABLE t (x INTEGER)")
            adapter.begin()
            adapter.run("INSERT INTO t VALUES (1)")
            adapter.rollback()
            cur = adapter.cursor()
            cur.execute("SELECT COUNT(*) FROM t")
            assert cur.fetchone()[0] == 0

    def test_last_insert_id(self):
        adapter = SQLiteAdapter()
        assert adapter.last_insert_id(5) == 5
        with pytest.raises(DatabaseError):
            adapter.last_insert_id(None)

    @patch("sqlite3.connect", side_effect=sqlite3.OperationalError("unable to open database"))
    def test_connect_failure_raises(self, mock_connect):
        adapter = SQLiteAdapter(path="/nonexistent/path.db")
        with pytest.raises(DatabaseConnectionError):
            adapter.connect()

    def test_unreadable_file(self, tmp_path):
        path = tmp_path / "locked.db"
        path.write_bytes(b"")
        with patch("os.access", return_value=False):
            with pytest.raises(ConfigError, match="not readable"):
                SQLiteAdapter(path=str(path)).connect()


class TestMySQLAdapter:
    def test_config(self):
        adapter = MySQLAdapter(host="db", database="app", username="u", password="p")
        assert adapter.config.port == 3306
        assert adapter.dialect.name == "mysql"

    def test_missing_driver(self):
        adapter = MySQLAdapter(database="app")
        with patch.dict(sys.modules, {"mysql": None, "mysql.connector": None}):
            with pytest.raises(ConfigError, match="mysql-connector-python"):
                adapter.connect()

    def test_connect_uses_autocommit(self):
        connector = MagicMock()
        fake_mysql = MagicMock(connector=connector)
        adapter = MySQLAdapter(host="db", database="app", username="u", password="p")
        with patch.dict(sys.modules, {"mysql": fake_mysql, "mysql.connector": connector}):
            adapter.connect()
        kwargs = connector.connect.call_args.kwargs
        assert kwargs["autocommit"] is True
        assert kwargs["database"] == "app"
        assert adapter.is_connected


class TestPostgreSQLAdapter:
    def test_config(self):
        adapter = PostgreSQLAdapter(host="db", database="app")
        assert adapter.config.port == 5432
        assert adapter.dialect.supports_returning is True

    def test_last_insert_id_unsupported(self):
        with pytest.raises(DatabaseError, match="RETURNING"):
            PostgreSQLAdapter().last_insert_id(5)

    def test_missing_driver(self):
        with patch.dict(sys.modules, {"psycopg2": None}):
            with pytest.raises(ConfigError, match="psycopg2"):
                PostgreSQLAdapter().connect()
