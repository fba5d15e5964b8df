"""SQLite driver adapter (stdlib ``sqlite3``)."""

from __future__ import annotations

import os
import sqlite3
from typing import Any

from valoa.core.errors import ConfigError, DatabaseConnectionError

from .base import DriverAdapter
from .types import DriverConfig, DriverType


class SQLiteAdapter(DriverAdapter):
    """
    SQLite driver adapter.

    The connection runs with ``isolation_level=None`` so every statement
    autocommits unless :meth:`begin` opened an explicit transaction.
    Foreign keys are enforced (``PRAGMA foreign_keys = ON``).
    """

    def __init__(
        self,
        path: str = ":memory:",
        *,
        timeout: float = 60.0,
        **kwargs: Any,
    ):
        config = DriverConfig(
            driver=DriverType.SQLITE,
            database=path,
            options=kwargs,
        )
        super().__init__(config)
        self._timeout = timeout

    def connect(self) -> None:
        """Connect to the SQLite file (or ``:memory:``)."""
        path = self._config.database or ":memory:"

        if path != ":memory:" and os.path.exists(path) and not os.access(path, os.R_OK):
            raise ConfigError(
                "Selected SQLite database is not readable. Please check your database settings."
            ).with_context(driver="sqlite", path=path)

        uri = path.startswith("file:")

        try:
            conn = sqlite3.connect(
                path,
                timeout=self._timeout,
                isolation_level=None,
                check_same_thread=False,
                uri=uri,
            )
            conn.execute("PRAGMA foreign_keys = ON")
        except sqlite3.Error as e:
            raise DatabaseConnectionError(
                f"Failed to connect to SQLite: {e}",
                cause=e,
            ) from e

        self._conn = conn


__all__ = [
    "SQLiteAdapter",
]
