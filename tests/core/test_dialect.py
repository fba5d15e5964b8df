"""Tests for valoa.core.dialect."""

from __future__ import annotations

import pytest

from valoa.core.dialect import (
    Dialect,
    MySQLDialect,
    PostgreSQLDialect,
    SQLiteDialect,
    get_dialect,
    register_dialect,
)
from valoa.core.errors import ConfigError


class TestDialects:
    def test_mysql(self):
        d = get_dialect("mysql")
        assert isinstance(d, MySQLDialect)
        assert d.placeholder == "%s"
        assert d.quote("name") == "`name`"
        assert d.escape_percent is False
        assert d.supports_returning is False
        assert d.supports_alter_foreign_key is True

    def test_sqlite(self):
        d = get_dialect("sqlite")
        assert isinstance(d, SQLiteDialect)
        assert d.placeholder == "?"
        assert d.escape_percent is False
        assert d.quote("name") == "`name`"
        assert d.supports_returning is False
        assert d.supports_alter_foreign_key is False

    def test_postgresql(self):
        d = get_dialect("postgresql")
        assert isinstance(d, PostgreSQLDialect)
        assert d.placeholder == "%s"
        assert d.quote("name") == '"name"'
        assert d.escape_percent is True
        assert d.supports_returning is True

    def test_quote_escapes_quote_char(self):
        assert get_dialect("mysql").quote("a`b") == "`a``b`"
        assert get_dialect("postgresql").quote('a"b') == '"a""b"'

    def test_lookup_is_case_insensitive(self):
        assert get_dialect("MySQL").name == "mysql"

    def test_protocol(self):
        for name in ("mysql", "sqlite", "postgresql"):
            assert isinstance(get_dialect(name), Dialect)


class TestRegistry:
    def test_unknown_driver(self):
        with pytest.raises(ConfigError, match="Unsupported database type"):
            get_dialect("oracle")

    def test_register_custom_dialect(self):
        class MariaDialect(MySQLDialect):
            @property
            def name(self) -> str:
                return "maria-test"

        register_dialect("maria-test", MariaDialect())
        assert get_dialect("maria-test").name == "maria-test"
