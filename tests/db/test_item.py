"""Tests for ``valoa.db.item``: the catalog-driven row mapper."""

from __future__ import annotations

from decimal import Decimal

import pytest

from tests._support.fake_driver import FakeResult, users_catalog
from valoa.core.errors import IntegrityError, NotFoundError
from valoa.db.item import NOT_PERSISTED, Item, as_int, is_numeric


class TestIsNumeric:
    @pytest.mark.parametrize("value", [5, 0, -3, 1.5, Decimal("2"), "5", " 12 ", "-1", "1.5", ".5", "1e3"])
    def test_numeric(self, value):
        assert is_numeric(value) is True

    @pytest.mark.parametrize("value", [None, True, False, "", "abc", "1a", "0x1A", [], "1.2.3"])
    def test_not_numeric(self, value):
        assert is_numeric(value) is False

    def test_as_int(self):
        assert as_int(7) == 7
        assert as_int("12") == 12
        assert as_int(" 3 ") == 3
        assert as_int(Decimal("4")) == 4


class TestItemFields:
    def test_new_item_has_all_columns_unset(self, schema_db):
        item = Item(schema_db, "users")
        assert item.fields == {"id": None, "name": None, "org_id": None}
        assert item.modified is False
        assert item.table == "users"
        assert item.primary_key == "id"

    def test_primary_key_virtual_field(self, schema_db):
        item = Item(schema_db, "users")
        assert item.get("primaryKey") == "id"
        assert item.get_primary_key_column() == "id"

    def test_unknown_field_reads_none(self, schema_db):
        assert Item(schema_db, "users").get("nope") is None

    def test_set_marks_modified(self, schema_db):
        item = Item(schema_db, "users")
        item.set("name", "x")
        assert item.get("name") == "x"
        assert item.modified is True

    def test_set_same_value_is_not_a_change(self, schema_db):
        item = Item(schema_db, "users")
        item.set("name", None)
        assert item.modified is False
        assert item.save() == NOT_PERSISTED

    def test_set_is_strict_about_type(self, schema_db):
        org = Item(schema_db, "org")
        org.set("name", "a")
        org.save()
        item = Item(schema_db, "users")
        item.set("org_id", 1)
        item.save()

        loaded = Item(schema_db, "users", 1)
        loaded.set("org_id", "1")
        assert loaded.modified is True

    def test_set_ignores_primary_key(self, schema_db):
        item = Item(schema_db, "users")
        item.set("id", 99)
        assert item.get("id") is None
        assert item.modified is False

    def test_set_ignores_unknown_field(self, schema_db):
        item = Item(schema_db, "users")
        item.set("nickname", "x")
        assert "nickname" not in item
        assert item.modified is False

    def test_fields_is_a_copy(self, schema_db):
        item = Item(schema_db, "users")
        item.fields["name"] = "x"
        assert item.get("name") is None


class TestItemPersistenceOnSQLite:
    def test_save_without_changes(self, schema_db):
        assert Item(schema_db, "users").save() == NOT_PERSISTED

    def test_insert_then_load(self, schema_db):
        item = Item(schema_db, "users")
        item.set("name", "x")
        new_id = item.save()

        assert new_id == 1
        assert item.get("id") == 1
        assert item.modified is False

        loaded = Item(schema_db, "users", new_id)
        assert loaded.get("name") == "x"
        assert loaded.get("org_id") is None
        assert loaded.modified is False

    def test_save_after_insert_updates(self, schema_db):
        item = Item(schema_db, "users")
        item.set("name", "x")
        first = item.save()
        item.set("name", "y")
        assert item.save() == first

        assert schema_db.execute("SELECT COUNT(*) FROM users").fetch_scalar() == 1
        assert Item(schema_db, "users", first).get("name") == "y"

    def test_second_save_without_changes(self, schema_db):
        item = Item(schema_db, "users")
        item.set("name", "x")
        item.save()
        assert item.save() == NOT_PERSISTED

    def test_load_missing_row(self, schema_db):
        with pytest.raises(NotFoundError, match="Selected row does not exist.") as exc_info:
            Item(schema_db, "users", 42)
        assert exc_info.value.context.table == "users"
        assert exc_info.value.context.row_id == 42

    @pytest.mark.parametrize("row_id", [None, 0, -1])
    def test_non_positive_id_does_not_load(self, schema_db, row_id):
        assert Item(schema_db, "users", row_id).get("id") is None

    def test_load_by_id_resets_modified(self, schema_db):
        schema_db.exec("INSERT INTO users (name) VALUES ('a')")
        item = Item(schema_db, "users")
        item.set("name", "b")
        item.load_by_id(1)
        assert item.modified is False
        assert item.get("name") == "a"

    def test_delete(self, schema_db):
        item = Item(schema_db, "users")
        item.set("name", "x")
        row_id = item.save()
        item.delete()

        assert item.deleted is True
        assert schema_db.execute("SELECT COUNT(*) FROM users").fetch_scalar() == 0
        with pytest.raises(NotFoundError):
            Item(schema_db, "users", row_id)

    def test_save_after_delete_updates_nothing(self, schema_db):
        item = Item(schema_db, "users")
        item.set("name", "x")
        row_id = item.save()
        item.delete()

        item.set("name", "y")
        assert item.save() == row_id
        assert item.get("id") == row_id
        assert item.deleted is True
        assert schema_db.execute("SELECT COUNT(*) FROM users").fetch_scalar() == 0

    def test_delete_unsaved_is_noop(self, schema_db):
        schema_db.exec("INSERT INTO users (name) VALUES ('a')")
        before = schema_db.query_count
        item = Item(schema_db, "users")
        item.delete()
        assert item.deleted is False
        assert schema_db.query_count == before + 1  # only the catalog query
        assert schema_db.execute("SELECT COUNT(*) FROM users").fetch_scalar() == 1

    def test_restrict_violation_surfaces(self, db):
        db.exec("CREATE TABLE org (id INTEGER PRIMARY KEY, name TEXT)")
        db.exec(
            "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, "
            "org_id INTEGER REFERENCES org(id) ON DELETE RESTRICT)"
        )
        org = Item(db, "org")
        org.set("name", "acme")
        org_id = org.save()
        user = Item(db, "users")
        user.set("org_id", org_id)
        user.save()

        with pytest.raises(IntegrityError):
            org.delete()
        assert org.deleted is False

    def test_custom_primary_key(self, db):
        db.exec("CREATE TABLE accounts (account_no INTEGER PRIMARY KEY, label TEXT)")
        acc = Item(db, "accounts")
        acc.set("label", "main")
        account_no = acc.save()
        assert acc.get("account_no") == account_no
        assert Item(db, "accounts", account_no).get("label") == "main"


class TestItemSQLShapes:
    def test_mysql_insert(self, mysql):
        db, adapter = mysql
        adapter.script("information_schema.columns", users_catalog())
        adapter.script("INSERT INTO users", FakeResult(rowcount=1, lastrowid=7))

        item = Item(db, "users")
        item.set("name", "x")
        assert item.save() == 7
        assert adapter.executed[-1] == (
            "INSERT INTO users (`id`,`name`,`org_id`) VALUES (%s,%s,%s)",
            (None, "x", None),
        )
        assert item.get("id") == 7

    def test_mysql_update(self, mysql):
        db, adapter = mysql
        adapter.script("information_schema.columns", users_catalog())
        adapter.script(
            "SELECT * FROM users",
            FakeResult(columns=["id", "name", "org_id"], rows=[(5, "x", None)]),
        )

        item = Item(db, "users", 5)
        assert adapter.executed[-1] == ("SELECT * FROM users WHERE id = %s", (5,))

        item.set("name", "y")
        assert item.save() == 5
        assert adapter.executed[-1] == (
            "UPDATE users SET `id` = %s,`name` = %s,`org_id` = %s WHERE id = %s",
            (5, "y", None, 5),
        )

    def test_mysql_delete(self, mysql):
        db, adapter = mysql
        adapter.script("information_schema.columns", users_catalog())
        adapter.script(
            "SELECT * FROM users",
            FakeResult(columns=["id", "name", "org_id"], rows=[("5", "x", None)]),
        )

        item = Item(db, "users", 5)
        item.delete()
        assert adapter.executed[-1] == ("DELETE FROM users WHERE id = %s", (5,))

    def test_mysql_save_after_delete_is_an_update(self, mysql):
        db, adapter = mysql
        adapter.script("information_schema.columns", users_catalog())
        adapter.script("INSERT INTO users", FakeResult(rowcount=1, lastrowid=7))

        item = Item(db, "users")
        item.set("name", "x")
        item.save()
        item.delete()
        item.set("name", "y")

        assert item.save() == 7
        assert adapter.executed[-1] == (
            "UPDATE users SET `id` = %s,`name` = %s,`org_id` = %s WHERE id = %s",
            (7, "y", None, 7),
        )
        assert adapter.statements[-2] == "DELETE FROM users WHERE id = %s"

    def test_postgresql_insert_uses_returning(self, postgresql):
        db, adapter = postgresql
        adapter.script(
            "information_schema.columns",
            FakeResult(
                columns=["column_name", "data_type", "column_key"],
                rows=[("id", "integer", "PRI"), ("name", "text", "")],
            ),
        )
        adapter.script("INSERT INTO users", FakeResult(columns=["id"], rows=[(42,)]))

        item = Item(db, "users")
        item.set("name", "x")
        assert item.save() == 42
        assert adapter.executed[-1] == (
            'INSERT INTO users ("id","name") VALUES (DEFAULT,%s) RETURNING id',
            ("x",),
        )
