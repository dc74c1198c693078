"""
Paketwatch CLI - Main entry point.

A terminal-first tracker for regional procurement packages: import
Tender and Swakelola exports, maintain packages, and report on budget
absorption.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.traceback import install as install_rich_traceback

from paketwatch import __app_name__, __version__

# Load environment variables from .env (if present)
load_dotenv()

# Install rich traceback for better error display
install_rich_traceback(show_locals=False, width=120)

# Force UTF-8 on Windows to avoid encoding issues
if sys.platform == "win32":
    os.environ.setdefault("PYTHONIOENCODING", "utf-8")
    for stream in (sys.stdout, sys.stderr):
        if hasattr(stream, "reconfigure"):
            try:
                stream.reconfigure(encoding="utf-8", errors="replace")
            except (AttributeError, OSError):
                pass

console = Console()
err_console = Console(stderr=True)

# Create main app
app = typer.Typer(
    name=__app_name__,
    help="Terminal-first tracker for regional procurement packages",
    rich_markup_mode="rich",
    no_args_is_help=True,
    pretty_exceptions_show_locals=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold cyan]{__app_name__}[/bold cyan] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    config_path: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to app.yaml (default: $PAKETWATCH_CONFIG or configs/app.yaml)",
    ),
) -> None:
    """Paketwatch - Procurement package dashboard for the terminal."""
    from paketwatch.core.config.loader import ConfigError, load_app_config
    from paketwatch.core.logging import setup_logging

    try:
        config = load_app_config(config_path)
    except ConfigError as e:
        err_console.print(f"[red]Configuration error:[/red] {escape(str(e))}")
        if e.details:
            err_console.print(escape(e.details), style="dim")
        raise typer.Exit(1)

    setup_logging(
        level=config.logging.level,
        log_file=config.logging.file,
        json_format=config.logging.json_format,
        rich_console=config.logging.rich_console,
    )

    ctx.obj = config
    ctx.meta["config_path"] = config_path


# =============================================================================
# Import and register subcommand modules
# =============================================================================

from .commands import db, ingest, logs, packages, report  # noqa: E402

app.add_typer(packages.app, name="packages", help="View and edit procurement packages")
app.add_typer(ingest.app, name="import", help="Import Tender and Swakelola CSV exports")
app.add_typer(report.app, name="report", help="Dashboard statistics")
app.add_typer(db.app, name="db", help="Database operations")
app.command("logs")(logs.show_logs)


# =============================================================================
# Init Command
# =============================================================================


@app.command()
def init(
    ctx: typer.Context,
    force: bool = typer.Option(
        False,
        "--force",
        "-f",
        help="Overwrite existing configuration",
    ),
) -> None:
    """Initialize Paketwatch database and configuration.

    Creates required directories, a default configuration file,
    and the database schema.
    """
    from paketwatch.core.config.loader import resolve_config_path
    from paketwatch.persistence.db import init_db

    from .state import get_config

    config = get_config(ctx)
    config.ensure_directories()

    app_config_path = resolve_config_path(ctx.meta.get("config_path"))
    created_config = False
    if not app_config_path.exists() or force:
        _create_default_app_config(app_config_path)
        created_config = True

    init_db(config.database.url, echo=config.database.echo)

    console.print()
    console.print(Panel.fit(
        "[bold green]OK - Paketwatch initialized successfully![/bold green]\n\n"
        f"Configuration: [cyan]{app_config_path}[/cyan]"
        f"{' (created)' if created_config else ''}\n"
        f"Database: [cyan]{config.database.url}[/cyan]\n\n"
        "Next steps:\n"
        "  1. Import an export: [yellow]paketwatch import csv <file>[/yellow]\n"
        "  2. Browse packages: [yellow]paketwatch packages list[/yellow]\n"
        "  3. See the totals: [yellow]paketwatch report summary[/yellow]",
        title="[bold]Initialization Complete[/bold]",
        border_style="green",
    ))


def _create_default_app_config(path: Path) -> None:
    """Create default app.yaml configuration."""
    default_config = """\
# Paketwatch Configuration

# Directory paths
config_dir: configs
data_dir: data

# Database settings
database:
  url: ${DATABASE_URL:-sqlite:///data/paketwatch.db}
  echo: false

# Logging settings
logging:
  level: INFO
  file: logs/paketwatch.log
  json_format: true
  rich_console: true

# CSV normalization defaults
normalizer:
  province: Nusa Tenggara Barat
  placeholder_name: Tanpa Nama
  bounding_box:
    min_lat: -9.0
    max_lat: -8.1
    min_lon: 115.7
    max_lon: 119.2
  safe_point:
    lat: -8.58
    lon: 116.12
"""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(default_config, encoding="utf-8")


# =============================================================================
# Status Command
# =============================================================================


@app.command()
def status(ctx: typer.Context) -> None:
    """Show package counts by status and type."""
    from rich.table import Table

    from paketwatch.persistence.db import get_session
    from paketwatch.persistence.repo import PackageRepository

    from .state import get_config, require_database

    config = get_config(ctx)
    require_database(config)

    console.print()
    console.print("[bold]Paketwatch Status[/bold]")
    console.print()

    with get_session() as session:
        repo = PackageRepository(session)
        total = repo.count()

        if not total:
            console.print("[dim]No packages yet. Import one with:[/dim] paketwatch import csv <file>")
            return

        console.print(f"Total packages: [bold]{total}[/bold]")
        console.print()

        for title, counts in (
            ("Packages by Status", repo.count_by_status()),
            ("Packages by Type", repo.count_by_type()),
        ):
            table = Table(title=title, show_header=True, header_style="bold magenta")
            table.add_column("Label", style="cyan")
            table.add_column("Count", justify="right")

            for label, count in sorted(counts.items()):
                table.add_row(label, str(count))

            console.print(table)


# =============================================================================
# Entry Point
# =============================================================================


def run() -> None:
    """Run the CLI application."""
    app()


if __name__ == "__main__":
    run()
