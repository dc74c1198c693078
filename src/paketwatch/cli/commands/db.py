"""
Database management commands.
"""

from __future__ import annotations

import os

import typer
from rich.console import Console

from ..state import get_config

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Database operations",
    no_args_is_help=True,
)


def _alembic_config(ctx: typer.Context):
    """Alembic config pointed at the configured database."""
    from alembic.config import Config

    config = get_config(ctx)
    alembic_cfg = Config("alembic.ini")
    if not os.environ.get("DATABASE_URL"):
        alembic_cfg.set_main_option("sqlalchemy.url", config.database.url)
    return alembic_cfg


@app.command("init")
def init_database(
    ctx: typer.Context,
    drop_existing: bool = typer.Option(
        False,
        "--drop",
        help="Drop existing tables before creating",
    ),
) -> None:
    """Initialize the database schema.

    Creates all tables. Use --drop to reset the database.
    """
    from paketwatch.persistence.db import drop_db, init_db

    config = get_config(ctx)

    if drop_existing:
        if not typer.confirm("This will DELETE ALL DATA. Continue?", default=False):
            raise typer.Abort()

        console.print("[yellow]Dropping existing tables...[/yellow]")
        drop_db(config.database.url)

    console.print("Creating database schema...")
    init_db(config.database.url, echo=config.database.echo)

    console.print("[green]OK[/green] Database initialized")


@app.command("migrate")
def run_migrations(
    ctx: typer.Context,
    revision: str = typer.Option(
        "head",
        "--revision",
        "-r",
        help="Target revision (default: head)",
    ),
) -> None:
    """Run database migrations."""
    from alembic import command

    alembic_cfg = _alembic_config(ctx)

    console.print(f"Running migrations to: {revision}")

    try:
        command.upgrade(alembic_cfg, revision)
        console.print("[green]OK[/green] Migrations complete")
    except Exception as e:
        err_console.print(f"[red]Migration failed:[/red] {e}")
        raise typer.Exit(1)


@app.command("current")
def show_current(ctx: typer.Context) -> None:
    """Show current database revision."""
    from alembic import command

    console.print("[bold]Current database revision:[/bold]")
    command.current(_alembic_config(ctx), verbose=True)


@app.command("history")
def show_history(ctx: typer.Context) -> None:
    """Show migration history."""
    from alembic import command

    console.print("[bold]Migration history:[/bold]")
    command.history(_alembic_config(ctx), indicate_current=True)
