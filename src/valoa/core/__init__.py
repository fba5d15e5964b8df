"""Valoa Core -- errors, logging, settings, dialects and driver adapters.

Architecture::

    errors.py          Structured error hierarchy (ValoaError and subclasses)
    logging.py         structlog configuration and context helpers
    settings.py        DatabaseSettings (VALOA_DB_* environment variables)
    dialect.py         Placeholder, quoting and RETURNING per engine
    protocols.py       DB-API cursor and connection protocols
    adapters/          One live connection per driver (sqlite, mysql, postgresql)

Nothing here knows about tables or rows; that lives in :mod:`valoa.db`.
"""

from valoa.core.dialect import Dialect, get_dialect, register_dialect
from valoa.core.errors import (
    ConfigError,
    DatabaseConnectionError,
    DatabaseError,
    ErrorCategory,
    ErrorContext,
    IntegrityError,
    NotFoundError,
    ProgrammingError,
    QueryError,
    ValoaError,
)
from valoa.core.settings import DatabaseSettings

__all__ = [
    "ConfigError",
    "DatabaseConnectionError",
    "DatabaseError",
    "DatabaseSettings",
    "Dialect",
    "ErrorCategory",
    "ErrorContext",
    "IntegrityError",
    "NotFoundError",
    "ProgrammingError",
    "QueryError",
    "ValoaError",
    "get_dialect",
    "register_dialect",
]
