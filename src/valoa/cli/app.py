"""
Root Typer application for the valoa-db CLI.

Every command opens one connection from ``VALOA_DB_*`` settings, overridden
by the connection options given on the command line.
"""

from __future__ import annotations

import typer
from typer import Typer

from valoa.cli.utils import console, handle_errors, open_db, output_json, print_dict, print_table
from valoa.db.columns import DEFAULT_PRIMARY_KEY, Columns
from valoa.db.constraints import Constraints

app = Typer(
    name="valoa-db",
    help="valoa-db - inspect columns and naming-convention foreign keys.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# ── Version callback ─────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        from valoa import __version__

        typer.echo(f"valoa-db {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """valoa-db CLI: columns, constraints and references of a table."""


# ── Commands ─────────────────────────────────────────────────────────────


@app.command()
def columns(
    table: str = typer.Argument(..., help="Table to inspect"),
    driver: str | None = typer.Option(None, "--driver", help="mysql, sqlite or postgresql"),
    host: str | None = typer.Option(None, "--host"),
    user: str | None = typer.Option(None, "--user", "-u"),
    password: str | None = typer.Option(None, "--password", "-p"),
    database: str | None = typer.Option(None, "--database", "-d", help="Database name or SQLite path"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List a table's columns in catalog order and its primary key."""
    with handle_errors():
        with open_db(driver=driver, host=host, user=user, password=password, database=database) as db:
            cols = Columns(db, table)
            data_types = cols.data_types

    if json_out:
        output_json(
            {
                "table": table,
                "primary_key": cols.primary_key,
                "columns": [{"name": n, "type": data_types.get(n, "")} for n in cols],
            }
        )
        return

    print_dict({"table": table, "primary_key": cols.primary_key})
    rows = [
        {"column": n, "type": data_types.get(n, ""), "key": "PRI" if n == cols.primary_key else ""}
        for n in cols
    ]
    print_table(rows, title=f"Columns of {table}")


@app.command()
def constraints(
    table: str = typer.Argument(..., help="Referencing table"),
    primary_key: str = typer.Option(DEFAULT_PRIMARY_KEY, "--primary-key", help="Primary-key column name"),
    exact_suffix: bool = typer.Option(False, "--exact-suffix", help="Match _<pk> at the end of names only"),
    create: bool = typer.Option(False, "--create", help="Add the missing foreign keys"),
    driver: str | None = typer.Option(None, "--driver", help="mysql, sqlite or postgresql"),
    host: str | None = typer.Option(None, "--host"),
    user: str | None = typer.Option(None, "--user", "-u"),
    password: str | None = typer.Option(None, "--password", "-p"),
    database: str | None = typer.Option(None, "--database", "-d", help="Database name or SQLite path"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """Show foreign-key candidates; with --create, add the missing ones."""
    with handle_errors():
        with open_db(driver=driver, host=host, user=user, password=password, database=database) as db:
            inspector = Constraints(db, table, exact_suffix=exact_suffix)
            inspector.set_primary_key_column(primary_key)
            candidates = inspector.discover_candidates()
            report = inspector.apply_constraints(candidates) if create else None

    if report is None:
        if json_out:
            output_json({"table": table, "candidates": candidates})
            return
        print_table(
            [{"candidate": c, "column": inspector.column_for(c)} for c in candidates],
            title=f"Foreign-key candidates of {table}",
        )
        return

    if json_out:
        output_json(report.to_dict())
        return

    print_table(
        [{"candidate": r.candidate, "status": r.status.value, "reason": r.reason} for r in report],
        title=f"Foreign keys of {table}",
    )
    console.print(f"\n[green]{report.created}[/green] created")


@app.command()
def references(
    table: str = typer.Argument(..., help="Referenced table"),
    driver: str | None = typer.Option(None, "--driver", help="mysql, sqlite or postgresql"),
    host: str | None = typer.Option(None, "--host"),
    user: str | None = typer.Option(None, "--user", "-u"),
    password: str | None = typer.Option(None, "--password", "-p"),
    database: str | None = typer.Option(None, "--database", "-d", help="Database name or SQLite path"),
    json_out: bool = typer.Option(False, "--json", help="JSON output"),
) -> None:
    """List the columns in other tables that reference TABLE."""
    with handle_errors():
        with open_db(driver=driver, host=host, user=user, password=password, database=database) as db:
            refs = Constraints(db, table).list_references()

    if json_out:
        output_json({"table": table, "references": refs})
        return

    print_table([{"reference": r} for r in refs], title=f"References to {table}")
