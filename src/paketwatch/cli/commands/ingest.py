"""
CSV import commands.
"""

from __future__ import annotations

import random
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..state import get_config, require_database

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="Import Tender and Swakelola CSV exports",
    no_args_is_help=True,
)


def _rng(seed: int | None) -> random.Random | None:
    return random.Random(seed) if seed is not None else None


@app.command("csv")
def import_csv(
    ctx: typer.Context,
    file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="CSV export to import",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Normalize only, don't write to the database",
    ),
    seed: Optional[int] = typer.Option(
        None,
        "--seed",
        help="Seed for generated map coordinates (reproducible imports)",
    ),
) -> None:
    """Import a procurement export into the package table.

    The whole file is rejected when it is empty or not a known export;
    otherwise each package is stored independently.
    """
    from paketwatch.core.errors import ImportFormatError
    from paketwatch.core.importer import PackageImporter
    from paketwatch.persistence.db import get_session

    config = get_config(ctx)
    require_database(config)

    try:
        with get_session() as session:
            importer = PackageImporter(
                session,
                config.normalizer,
                rng=_rng(seed),
                dry_run=dry_run,
            )
            stats = importer.import_file(file)
    except ImportFormatError as e:
        err_console.print(f"[red]Import failed:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    table = Table(title=f"Import: {file.name}", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Format", stats.format.value if stats.format else "-")
    table.add_row("Rows read", str(stats.rows_read))
    table.add_row("Skipped (no name)", str(stats.skipped_unnamed))
    if dry_run:
        table.add_row("Would import", str(stats.built))
    else:
        table.add_row("Imported", f"[green]{stats.imported}[/green]")
        table.add_row("Failed", f"[red]{stats.failed}[/red]" if stats.failed else "0")

    console.print(table)

    for error in stats.errors[:10]:
        err_console.print(f"[yellow]![/yellow] {escape(error)}")

    if dry_run:
        console.print("[dim]Dry run: nothing was written.[/dim]")
    else:
        console.print(f"[green]OK[/green] Imported {stats.imported} package(s)")


@app.command("preview")
def preview_csv(
    ctx: typer.Context,
    file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        readable=True,
        help="CSV export to preview",
    ),
    limit: int = typer.Option(
        10,
        "--limit",
        "-n",
        help="Maximum packages to show",
    ),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for generated map coordinates"),
) -> None:
    """Show how an export would be normalized, without a database."""
    from paketwatch.core.errors import ImportFormatError
    from paketwatch.core.importer import read_csv_file
    from paketwatch.core.normalize import normalize_csv
    from paketwatch.core.report import format_rupiah

    config = get_config(ctx)

    try:
        batch = normalize_csv(
            read_csv_file(file),
            config=config.normalizer,
            rng=_rng(seed),
            source=file.name,
        )
    except ImportFormatError as e:
        err_console.print(f"[red]Import failed:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(
        f"Format: [bold]{batch.format.value}[/bold]  "
        f"rows: {batch.rows_read}  packages: {len(batch.packages)}  "
        f"skipped (no name): {batch.skipped_unnamed}"
    )

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim")
    table.add_column("Name", max_width=40)
    table.add_column("Type")
    table.add_column("Status")
    table.add_column("OPD", max_width=25)
    table.add_column("Pagu", justify="right")
    table.add_column("Progress", justify="right")

    for index, package in enumerate(batch.packages[:limit], start=1):
        table.add_row(
            str(index),
            escape(package.name),
            package.type.value,
            package.status.value,
            escape(package.opd_name),
            format_rupiah(package.budget),
            f"{package.progress}%",
        )

    console.print(table)
