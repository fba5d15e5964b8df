"""
CLI layer for valoa-db.

Provides a Typer application that inspects a live database through
:mod:`valoa.db`.  All database logic lives there; this package handles
only terminal transport: argument parsing, coloured output, and table
formatting.

Entry point::

    valoa-db --help
"""

from valoa.cli.app import app

__all__ = ["app"]
