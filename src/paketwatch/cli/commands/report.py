"""
Dashboard report commands.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from paketwatch.core.config.models import PackageType

from ..state import get_config, parse_choice, require_database

console = Console()

app = typer.Typer(
    help="Dashboard statistics",
    no_args_is_help=True,
)


def _load(ctx: typer.Context, search: str | None, opd: str | None, package_type: str | None):
    """Return (filtered packages, total package count)."""
    from paketwatch.core.report import filter_packages
    from paketwatch.persistence.db import get_session
    from paketwatch.persistence.repo import PackageRepository

    config = get_config(ctx)
    type_filter = parse_choice(PackageType, package_type, "--type")
    require_database(config)

    with get_session() as session:
        packages = list(PackageRepository(session).list_packages(limit=None))

    return filter_packages(packages, search=search, opd_name=opd, package_type=type_filter), len(packages)


def _emit_json(data) -> None:
    import json

    typer.echo(json.dumps(data, ensure_ascii=False, indent=2))


@app.command("summary")
def summary(
    ctx: typer.Context,
    search: Optional[str] = typer.Option(None, "--search", "-q", help="Match on name or location"),
    opd: Optional[str] = typer.Option(None, "--opd", help="Filter by OPD name"),
    package_type: Optional[str] = typer.Option(None, "--type", "-t", help="Filter by type"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Totals for pagu, HPS and realization, with budget absorption."""
    from paketwatch.core.report import format_rupiah, summarize

    packages, total = _load(ctx, search, opd, package_type)
    result = summarize(packages, total_count=total)

    if json_output:
        _emit_json(result.to_dict())
        return

    table = Table(title="Dashboard Summary", show_header=False)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    count_label = str(result.total_packages)
    if result.is_filtered:
        count_label = f"{result.total_packages} of {total}"

    table.add_row("Packages", count_label)
    table.add_row("Total Pagu", format_rupiah(result.total_budget))
    table.add_row("Total HPS", format_rupiah(result.total_hps))
    table.add_row("Total Realization", format_rupiah(result.total_realization))
    table.add_row("Absorption", f"{result.completion_percentage:.1f}%")

    console.print(table)


@app.command("breakdown")
def breakdown(
    ctx: typer.Context,
    search: Optional[str] = typer.Option(None, "--search", "-q", help="Match on name or location"),
    opd: Optional[str] = typer.Option(None, "--opd", help="Filter by OPD name"),
    package_type: Optional[str] = typer.Option(None, "--type", "-t", help="Filter by type"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
) -> None:
    """Package counts by status and by type."""
    from paketwatch.core.report import breakdown_by_status, breakdown_by_type

    packages, _ = _load(ctx, search, opd, package_type)
    by_status = breakdown_by_status(packages)
    by_type = breakdown_by_type(packages)

    if json_output:
        _emit_json({
            "status": [vars(item) for item in by_status],
            "type": [vars(item) for item in by_type],
        })
        return

    if not packages:
        console.print("[dim]No data to report.[/dim]")
        return

    for title, items in (("By Status", by_status), ("By Type", by_type)):
        table = Table(title=title, show_header=True, header_style="bold magenta")
        table.add_column("Label", style="cyan")
        table.add_column("Count", justify="right")
        table.add_column("Share", justify="right")
        for item in items:
            table.add_row(item.label, str(item.count), f"{item.percentage:.1f}%")
        console.print(table)


@app.command("opds")
def opds(ctx: typer.Context) -> None:
    """List OPD names that own at least one package."""
    from paketwatch.core.report import opd_options

    packages, _ = _load(ctx, None, None, None)
    for name in opd_options(packages):
        typer.echo(name)


@app.command("top")
def top(
    ctx: typer.Context,
    limit: int = typer.Option(5, "--limit", "-n", help="Number of packages"),
) -> None:
    """Largest packages by pagu that have an image (dashboard highlights)."""
    from paketwatch.core.report import format_rupiah, top_by_budget

    packages, _ = _load(ctx, None, None, None)
    highlights = top_by_budget(packages, limit=limit)

    if not highlights:
        console.print("[dim]No packages with images yet.[/dim]")
        return

    table = Table(title="Top Packages", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Name", max_width=40)
    table.add_column("OPD", max_width=25)
    table.add_column("Pagu", justify="right")

    for p in highlights:
        table.add_row(str(p.id), escape(p.name), escape(p.opd_name), format_rupiah(p.budget))

    console.print(table)
