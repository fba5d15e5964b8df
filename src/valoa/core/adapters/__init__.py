"""Driver adapters -- one live connection per supported engine.

Each adapter is **import-guarded**: the database driver is only required at
``connect()`` time, not at import time.  Install the corresponding extra::

    pip install valoa-db[mysql]        # mysql-connector-python
    pip install valoa-db[postgresql]   # psycopg2-binary

Architecture::

    DriverAdapter (base.py)          Abstract base: connect/cursor/begin/commit
        |-- SQLiteAdapter            stdlib sqlite3 (always available)
        |-- MySQLAdapter             mysql.connector (optional)
        |-- PostgreSQLAdapter        psycopg2 (optional)

    AdapterRegistry (registry.py)    driver name -> adapter class
    DriverConfig (types.py)          Connection parameters
    DriverType (types.py)            Enum of supported drivers

Guardrails:
    ❌ Importing optional drivers at module scope
    ✅ Import-guarded at ``connect()`` time with clear ``ConfigError``
    ❌ ``adapter = MySQLAdapter(...)`` in application code
    ✅ ``adapter = get_adapter("mysql", host=..., database=...)``
"""

from .base import DriverAdapter
from .mysql import MySQLAdapter
from .postgresql import PostgreSQLAdapter
from .registry import AdapterRegistry, adapter_registry, get_adapter, register_adapter
from .sqlite import SQLiteAdapter
from .types import DriverConfig, DriverType

__all__ = [
    # Types
    "DriverType",
    "DriverConfig",
    # Base class
    "DriverAdapter",
    # Implementations
    "SQLiteAdapter",
    "MySQLAdapter",
    "PostgreSQLAdapter",
    # Registry
    "AdapterRegistry",
    "adapter_registry",
    "get_adapter",
    "register_adapter",
]
