"""
CLI utility helpers: output formatting and connection management.
"""

from __future__ import annotations

import json
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from valoa.core.errors import ValoaError
from valoa.core.logging import configure_logging
from valoa.core.settings import DatabaseSettings
from valoa.db.connection import Db, connect

console = Console()
err_console = Console(stderr=True)


# ── Connection helper ────────────────────────────────────────────────────


def load_settings(**overrides: Any) -> DatabaseSettings:
    """``DatabaseSettings`` from the environment, with non-None CLI overrides applied."""
    return DatabaseSettings(**{k: v for k, v in overrides.items() if v is not None})


def open_db(**overrides: Any) -> Db:
    """Configure logging and open a connection for a CLI command."""
    settings = load_settings(**overrides)
    configure_logging(level=settings.log_level, json_format=settings.log_json)
    return connect(settings)


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn a ``ValoaError`` into a red error line and exit code 1."""
    try:
        yield
    except ValoaError as e:
        err_console.print(f"[bold red]Error[/bold red] ({e.category.value}): {escape(e.message)}")
        if e.cause is not None:
            err_console.print(f"  [dim]{escape(str(e.cause))}[/dim]")
        raise typer.Exit(code=1) from e


# ── Output helpers ───────────────────────────────────────────────────────


def output_json(payload: Any) -> None:
    console.print_json(json.dumps(payload, default=str))


def print_table(rows: list[dict[str, Any]], *, title: str = "") -> None:
    """Render a list of dicts as a Rich table."""
    if not rows:
        console.print("[dim]No items.[/dim]")
        return
    table = Table(title=title or None, show_lines=False, pad_edge=False)
    for col in rows[0]:
        table.add_column(col, overflow="fold")
    for row in rows:
        table.add_row(*("" if v is None else str(v) for v in row.values()))
    console.print(table)


def print_dict(data: dict[str, Any], *, title: str = "") -> None:
    """Render a single dict as key-value pairs."""
    if title:
        console.print(f"[bold]{title}[/bold]")
    for k, v in data.items():
        console.print(f"  [cyan]{k}[/cyan]: {v}")
