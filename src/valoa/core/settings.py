"""Connection settings for valoa-db.

``DatabaseSettings`` mirrors the arguments of :class:`valoa.db.connection.Db`
so that a connection can be described entirely by environment variables
(``VALOA_DB_DRIVER``, ``VALOA_DB_HOST``, ...) or a ``.env`` file.

Examples:
    >>> from valoa.core.settings import DatabaseSettings
    >>> settings = DatabaseSettings(driver="sqlite", database=":memory:")
    >>> settings.driver
    'sqlite'

Tags:
    settings, configuration, pydantic, environment, valoa-db

Doc-Types:
    - API Reference
    - Configuration Guide
"""

from __future__ import annotations

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DRIVER_ALIASES = {
    "postgres": "postgresql",
    "pgsql": "postgresql",
    "mariadb": "mysql",
    "sqlite3": "sqlite",
}


def normalize_driver(driver: str) -> str:
    """Map driver aliases to the canonical name (``pgsql`` -> ``postgresql``)."""
    key = driver.strip().lower()
    return DRIVER_ALIASES.get(key, key)


class DatabaseSettings(BaseSettings):
    """Connection parameters read from ``VALOA_DB_*`` environment variables.

    Fields
    ──────
    driver      : ``mysql``, ``sqlite`` or ``postgresql`` (aliases accepted)
    host        : Server host (ignored for SQLite)
    port        : Server port, ``None`` for the driver default
    user        : Login name
    password    : Login password
    database    : Database / schema name, or file path for SQLite
    init_query  : Statement run once right after connecting
    log_level   : Structlog log level for the CLI
    log_json    : Force JSON (True) or console (False) log output
    """

    model_config = SettingsConfigDict(
        env_prefix="VALOA_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Connection ───────────────────────────────────────────────
    driver: str = "sqlite"
    host: str = "localhost"
    port: int | None = None
    user: str | None = None
    password: SecretStr | None = None
    database: str = Field(
        default=":memory:",
        description="Database name, or the file path for SQLite",
    )
    init_query: str | None = None

    # ── Observability ────────────────────────────────────────────
    log_level: str = "WARNING"
    log_json: bool | None = None

    @field_validator("driver")
    @classmethod
    def _normalize_driver(cls, value: str) -> str:
        return normalize_driver(value)

    def password_value(self) -> str | None:
        """Plain-text password for the driver, or ``None``."""
        return self.password.get_secret_value() if self.password else None


__all__ = [
    "DatabaseSettings",
    "normalize_driver",
]
