"""
Structured error types for valoa-db.

Every failure raised by the access layer is a :class:`ValoaError` carrying a
category, a retry hint, structured context and the chained driver exception.
Callers can branch on the class (``NotFoundError`` vs ``QueryError``) or on
``error.category`` when routing logs and alerts.

Manifesto:
    - **Typed hierarchy:** One class per failure kind the caller can act on
    - **Explicit retry semantics:** Connection failures are retryable, the rest are not
    - **Rich context:** Table, id and SQL travel with the error, never parameter values
    - **Error chaining:** The driver exception is always kept as ``cause``

Architecture:
    ::

        ValoaError  (category, retryable, context, cause)
        ├── DatabaseConnectionError   DATABASE, retryable   connect/network failure
        ├── ConfigError               CONFIG                bad driver, empty query
        ├── DatabaseError             DATABASE              statement failed
        │   ├── QueryError
        │   └── IntegrityError
        ├── NotFoundError             NOT_FOUND             row lookup found nothing
        └── ProgrammingError          INTERNAL              caller misuse

Guardrails:
    ❌ DON'T: Raise bare ``Exception`` from the access layer
    ✅ DO: Raise the matching ValoaError subclass with ``cause=``

    ❌ DON'T: Put bound parameter values into ``context``
    ✅ DO: Record table names, ids and SQL text only

Tags:
    error-handling, exception-hierarchy, valoa-db

Doc-Types:
    - API Reference
    - Error Handling Guide
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        NETWORK: Socket, DNS, connection refused
        DATABASE: Driver, statement or transaction failure
        NOT_FOUND: Requested row does not exist
        CONFIG: Unsupported driver, empty query, unreadable file
        INTERNAL: Caller misuse, unexpected state
        UNKNOWN: Uncategorized errors
    """

    NETWORK = "NETWORK"
    DATABASE = "DATABASE"
    NOT_FOUND = "NOT_FOUND"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Only non-None fields end up in :meth:`to_dict`, so an error raised while
    loading a row reports ``{"table": "users", "row_id": 7}`` and nothing
    else.

    Attributes:
        table: Target table of the failing operation
        row_id: Primary-key value involved, if any
        sql: Statement text (never the bound values)
        driver: Normalised driver name (``mysql``, ``sqlite``, ``postgresql``)
        metadata: Additional key-value pairs
    """

    table: str | None = None
    row_id: Any = None
    sql: str | None = None
    driver: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["table", "row_id", "sql", "driver"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class ValoaError(Exception):
    """
    Base exception for all valoa-db errors.

    Subclasses set ``default_category`` and ``default_retryable`` so that
    call sites only pass a message and, when wrapping a driver failure,
    the original exception as ``cause``.

    Examples:
        >>> error = ValoaError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.with_context(table="users").context.table
        'users'
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ValoaError:
        """
        Add context to this error (fluent API).

        Usage:
            raise NotFoundError("Selected row does not exist.").with_context(
                table="users", row_id=7
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }

        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict

        if self.cause is not None:
            result["cause"] = str(self.cause)

        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# CONNECTION ERRORS (Retryable)
# =============================================================================


class DatabaseConnectionError(ValoaError):
    """Could not open or keep the database connection."""

    default_category = ErrorCategory.DATABASE
    default_retryable = True


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(ValoaError):
    """
    Configuration error.

    Never retryable - the call site or the settings must be fixed. Raised for
    unsupported drivers, a missing optional driver package, empty query text
    and unreadable SQLite files.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


# =============================================================================
# DATABASE ERRORS
# =============================================================================


class DatabaseError(ValoaError):
    """Database statement or transaction error."""

    default_category = ErrorCategory.DATABASE
    default_retryable = False


class QueryError(DatabaseError):
    """SQL statement failed in the driver."""

    pass


class IntegrityError(DatabaseError):
    """Database integrity constraint violation (e.g. ``ON DELETE RESTRICT``)."""

    pass


# =============================================================================
# LOOKUP / USAGE ERRORS
# =============================================================================


class NotFoundError(ValoaError):
    """Row lookup matched nothing. Recoverable: the caller decides."""

    default_category = ErrorCategory.NOT_FOUND
    default_retryable = False


class ProgrammingError(ValoaError):
    """The caller used the API out of order (e.g. rollback without begin)."""

    default_category = ErrorCategory.INTERNAL
    default_retryable = False


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, ValoaError):
        return error.retryable
    retryable_types = (
        ConnectionError,
        ConnectionResetError,
        ConnectionRefusedError,
        BrokenPipeError,
    )
    return isinstance(error, retryable_types)


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, ValoaError):
        return error.category
    if isinstance(error, (ConnectionError, OSError)):
        return ErrorCategory.NETWORK
    if isinstance(error, LookupError):
        return ErrorCategory.NOT_FOUND
    return ErrorCategory.UNKNOWN


__all__ = [
    # Category enum
    "ErrorCategory",
    # Context
    "ErrorContext",
    # Base
    "ValoaError",
    # Connection
    "DatabaseConnectionError",
    # Config
    "ConfigError",
    # Database
    "DatabaseError",
    "QueryError",
    "IntegrityError",
    # Lookup / usage
    "NotFoundError",
    "ProgrammingError",
    # Utilities
    "is_retryable",
    "categorize_error",
]
