"""Driver adapter registry and factory.

Manifesto:
    Consumers should never hard-code adapter class names.  The registry
    maps driver names to adapter classes and ``get_adapter()`` builds a
    configured instance.

Features:
    - ``AdapterRegistry`` singleton with pre-registered defaults
    - ``register()`` for custom / third-party drivers
    - ``get_adapter()`` factory: driver name + kwargs -> adapter

Tags:
    valoa-db, database, registry, factory, singleton

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

from valoa.core.errors import ConfigError
from valoa.core.settings import normalize_driver

from .base import DriverAdapter
from .mysql import MySQLAdapter
from .postgresql import PostgreSQLAdapter
from .sqlite import SQLiteAdapter
from .types import DriverType


class AdapterRegistry:
    """
    Registry for driver adapter factories.

    Pre-registered adapters:
    - ``mysql``: :class:`MySQLAdapter`
    - ``sqlite``: :class:`SQLiteAdapter`
    - ``postgresql``: :class:`PostgreSQLAdapter` (``postgres`` / ``pgsql`` via aliases)
    """

    def __init__(self):
        self._factories: dict[str, type[DriverAdapter]] = {}
        self._register_defaults()

    def _register_defaults(self) -> None:
        self._factories["mysql"] = MySQLAdapter
        self._factories["sqlite"] = SQLiteAdapter
        self._factories["postgresql"] = PostgreSQLAdapter

    def register(self, name: str, adapter_class: type[DriverAdapter]) -> None:
        """Register an adapter factory."""
        self._factories[normalize_driver(name)] = adapter_class

    def create(self, name: str, **kwargs: Any) -> DriverAdapter:
        """Create an adapter by driver name."""
        key = normalize_driver(name)
        if key not in self._factories:
            raise ConfigError("Unsupported database type. Can't create database connection.").with_context(
                driver=name
            )
        return self._factories[key](**kwargs)

    def list_adapters(self) -> list[str]:
        """List registered driver names."""
        return sorted(self._factories.keys())


# Global registry
adapter_registry = AdapterRegistry()


def get_adapter(driver: DriverType | str, **kwargs: Any) -> DriverAdapter:
    """
    Get a driver adapter by name.

    Usage:
        adapter = get_adapter(DriverType.SQLITE, path="data.db")
        adapter = get_adapter("mysql", host="localhost", database="app")
    """
    name = driver.value if isinstance(driver, DriverType) else driver
    return adapter_registry.create(name, **kwargs)


def register_adapter(name: str, adapter_class: type[DriverAdapter]) -> None:
    """Register an adapter class on the global registry."""
    adapter_registry.register(name, adapter_class)


__all__ = [
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
    "register_adapter",
]
