"""Tests for ``valoa.db.columns``: catalog-driven column discovery."""

from __future__ import annotations

from tests._support.fake_driver import FakeResult, users_catalog
from valoa.db import columns as columns_module
from valoa.db.columns import Columns, catalog_query, discover_columns, register_column_discovery


class TestSQLiteCatalog:
    def test_columns_in_catalog_order(self, schema_db):
        cols = Columns(schema_db, "users")
        assert cols.get_columns() == {"id": None, "name": None, "org_id": None}
        assert list(cols) == ["id", "name", "org_id"]
        assert cols.get_primary_key_column() == "id"
        assert cols.data_types["id"] == "INTEGER"

    def test_custom_primary_key(self, db):
        db.exec("CREATE TABLE accounts (label TEXT, account_no INTEGER PRIMARY KEY)")
        cols = Columns(db, "accounts")
        assert cols.primary_key == "account_no"
        assert cols.names == ["label", "account_no"]

    def test_no_primary_key_defaults_to_id(self, db):
        db.exec("CREATE TABLE log (message TEXT)")
        assert Columns(db, "log").get_primary_key_column() == "id"

    def test_composite_key_last_wins(self, db):
        db.exec("CREATE TABLE link (a INTEGER, b INTEGER, PRIMARY KEY (a, b))")
        assert Columns(db, "link").primary_key == "b"

    def test_unknown_table_is_empty(self, db):
        cols = Columns(db, "nope")
        assert cols.get_columns() == {}
        assert len(cols) == 0
        assert cols.primary_key == "id"

    def test_get_columns_returns_a_copy(self, schema_db):
        cols = Columns(schema_db, "users")
        copy = cols.get_columns()
        copy["name"] = "changed"
        copy["extra"] = 1
        assert cols.get_columns() == {"id": None, "name": None, "org_id": None}

    def test_membership(self, schema_db):
        cols = Columns(schema_db, "users")
        assert "org_id" in cols
        assert "missing" not in cols


class TestInformationSchemaCatalog:
    def test_mysql_query_shape(self, mysql):
        db, adapter = mysql
        adapter.script("information_schema.columns", users_catalog())
        Columns(db, "users")
        assert adapter.executed[-1] == (
            "SELECT column_name, data_type, column_key FROM information_schema.columns "
            "WHERE table_name = %s AND table_schema = %s",
            ("users", "appdb"),
        )

    def test_upper_case_labels(self, mysql):
        db, adapter = mysql
        adapter.script("information_schema.columns", users_catalog())
        columns, primary_key, data_types = discover_columns(db, "users")
        assert list(columns) == ["id", "name", "org_id"]
        assert primary_key == "id"
        assert data_types["name"] == "varchar"

    def test_postgresql_query(self, postgresql):
        db, adapter = postgresql
        sql, params = catalog_query(db, "users")
        assert "current_schema()" in sql
        assert params == ("users",)

        adapter.script(
            "information_schema.columns",
            FakeResult(
                columns=["column_name", "data_type", "column_key"],
                rows=[("user_no", "integer", "PRI"), ("name", "text", "")],
            ),
        )
        assert Columns(db, "users").primary_key == "user_no"


class TestRegisterColumnDiscovery:
    def test_custom_builder(self, mysql):
        db, adapter = mysql

        def builder(db, table):
            return "SELECT name AS column_name FROM custom_catalog WHERE t = ?", (table,)

        register_column_discovery("mysql", builder)
        try:
            adapter.script("custom_catalog", FakeResult(columns=["column_name"], rows=[("code",)]))
            cols = Columns(db, "things")
        finally:
            columns_module._CATALOG_QUERIES.pop("mysql")

        assert cols.names == ["code"]
        assert cols.primary_key == "id"
        assert adapter.executed[-1] == ("SELECT name AS column_name FROM custom_catalog WHERE t = %s", ("things",))
