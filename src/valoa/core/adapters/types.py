"""Driver types and connection configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DriverType(str, Enum):
    """Supported database drivers."""

    MYSQL = "mysql"
    SQLITE = "sqlite"
    POSTGRESQL = "postgresql"


@dataclass
class DriverConfig:
    """
    Configuration for one driver connection.

    Different fields are used by different drivers; SQLite only reads
    ``database`` (the file path).
    """

    driver: DriverType = DriverType.SQLITE

    host: str = "localhost"
    port: int | None = None
    database: str = ""
    username: str | None = None
    password: str | None = None

    connect_timeout: int = 10

    # Extra options (driver-specific)
    options: dict[str, Any] = field(default_factory=dict)


__all__ = [
    "DriverType",
    "DriverConfig",
]
