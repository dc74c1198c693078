"""
Package viewing and editing commands.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from paketwatch.core.config.models import PackageStatus, PackageType

from ..state import get_config, parse_choice, require_database

console = Console()
err_console = Console(stderr=True)

app = typer.Typer(
    help="View and edit procurement packages",
    no_args_is_help=True,
)

STATUS_STYLES = {
    PackageStatus.COMPLETED.value: "green",
    PackageStatus.IN_PROGRESS.value: "blue",
    PackageStatus.PLANNING.value: "yellow",
    PackageStatus.SUSPENDED.value: "dim",
    PackageStatus.AT_RISK.value: "red",
}


def _truncate(text: str | None, width: int) -> str:
    if not text:
        return "[dim]-[/dim]"
    return escape((text[: width - 3] + "...") if len(text) > width else text)


@app.command("list")
def list_packages(
    ctx: typer.Context,
    search: Optional[str] = typer.Option(
        None,
        "--search",
        "-q",
        help="Case-insensitive match on name or location",
    ),
    opd: Optional[str] = typer.Option(
        None,
        "--opd",
        help="Filter by OPD (owning unit) name",
    ),
    package_type: Optional[str] = typer.Option(
        None,
        "--type",
        "-t",
        help="Filter by type (Tender, Non-Tender, Swakelola)",
    ),
    status: Optional[str] = typer.Option(
        None,
        "--status",
        "-s",
        help="Filter by status (Perencanaan, Dalam Proses, Selesai, Ditunda, Beresiko)",
    ),
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        help="Maximum results to show",
    ),
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format (table, json, csv)",
    ),
) -> None:
    """List packages with filters, newest first.

    Examples:
        paketwatch packages list --status selesai
        paketwatch packages list --search mataram --format json
    """
    from paketwatch.core.report import format_rupiah
    from paketwatch.persistence.db import get_session
    from paketwatch.persistence.repo import PackageRepository

    config = get_config(ctx)
    type_filter = parse_choice(PackageType, package_type, "--type")
    status_filter = parse_choice(PackageStatus, status, "--status")
    require_database(config)

    with get_session() as session:
        repo = PackageRepository(session)
        packages = repo.list_packages(
            search=search,
            opd_name=opd,
            package_type=type_filter,
            status=status_filter,
            limit=limit,
        )

        if format == "json":
            import json

            typer.echo(json.dumps([p.to_dict() for p in packages], ensure_ascii=False, indent=2))
            return

        if format == "csv":
            import csv
            import sys

            writer = csv.writer(sys.stdout)
            writer.writerow([
                "id", "name", "type", "status", "opd_name", "location",
                "budget", "hps", "realization", "progress",
            ])
            for p in packages:
                writer.writerow([
                    p.id, p.name, p.package_type, p.status, p.opd_name, p.location,
                    p.budget, p.hps, p.realization, p.progress,
                ])
            return

        if not packages:
            console.print("[dim]No packages found matching criteria.[/dim]")
            return

        table = Table(title=f"Packages ({len(packages)} shown)", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Name", max_width=40)
        table.add_column("Type")
        table.add_column("Status", justify="center")
        table.add_column("OPD", max_width=25)
        table.add_column("Pagu", justify="right")
        table.add_column("Progress", justify="right")

        for p in packages:
            style = STATUS_STYLES.get(p.status, "yellow")
            table.add_row(
                str(p.id),
                _truncate(p.name, 40),
                p.package_type,
                f"[{style}]{p.status}[/{style}]",
                _truncate(p.opd_name, 25),
                format_rupiah(p.budget),
                f"{p.progress}%",
            )

        console.print(table)


@app.command("show")
def show_package(
    ctx: typer.Context,
    id: int = typer.Argument(..., help="Package ID"),
) -> None:
    """Show detailed information about a package."""
    from rich.panel import Panel

    from paketwatch.core.report import format_rupiah
    from paketwatch.persistence.db import get_session
    from paketwatch.persistence.repo import PackageRepository

    require_database(get_config(ctx))

    with get_session() as session:
        p = PackageRepository(session).get_by_id(id)

        if not p:
            err_console.print(f"[red]Package not found:[/red] {id}")
            raise typer.Exit(1)

        details = f"""[bold]Name:[/bold] {escape(p.name)}
[bold]Type:[/bold] {p.package_type}
[bold]Status:[/bold] {p.status}
[bold]OPD:[/bold] {escape(p.opd_name)}
[bold]Location:[/bold] {escape(p.location)}
[bold]Coordinates:[/bold] {p.latitude}, {p.longitude}

[bold]Pagu:[/bold] {format_rupiah(p.budget)}
[bold]HPS:[/bold] {format_rupiah(p.hps)}
[bold]Realization:[/bold] {format_rupiah(p.realization)}
[bold]Progress:[/bold] {p.progress}%

[bold]Provider:[/bold] {escape(p.provider_name or '-')}
[bold]Provider Address:[/bold] {escape(p.provider_address or '-')}

[bold]Image:[/bold] {escape(p.image_url or '-')}
[bold]Source:[/bold] {escape(p.source or '-')}
[bold]Created:[/bold] {p.created_at:%Y-%m-%d %H:%M}"""

        console.print()
        console.print(Panel.fit(details, title=f"[bold cyan]Package #{p.id}[/bold cyan]", border_style="cyan"))


@app.command("add")
def add_package(
    ctx: typer.Context,
    name: str = typer.Option(..., "--name", help="Package name"),
    package_type: str = typer.Option(..., "--type", "-t", help="Tender, Non-Tender or Swakelola"),
    location: str = typer.Option(..., "--location", help="Location"),
    coordinates: str = typer.Option(..., "--coordinates", help='Map position as "lat, lon"'),
    budget: float = typer.Option(..., "--budget", help="Pagu (Rp)"),
    hps: float = typer.Option(..., "--hps", help="HPS (Rp)"),
    realization: float = typer.Option(..., "--realization", help="Realization (Rp)"),
    status: str = typer.Option(..., "--status", "-s", help="Package status"),
    provider_name: str = typer.Option(..., "--provider-name", help="Provider / contractor name"),
    provider_address: str = typer.Option(..., "--provider-address", help="Provider address"),
    opd: str = typer.Option(..., "--opd", help="OPD (owning unit) name"),
    image_url: Optional[str] = typer.Option(None, "--image-url", help="Image URL (optional)"),
) -> None:
    """Add a package by hand."""
    from paketwatch.core.config.models import ActivityAction
    from paketwatch.core.errors import PackageValidationError
    from paketwatch.core.validation import manual_package
    from paketwatch.persistence.db import get_session
    from paketwatch.persistence.repo import ActivityLogRepository, PackageRepository

    config = get_config(ctx)

    try:
        value = manual_package(
            name=name,
            type=parse_choice(PackageType, package_type, "--type"),
            location=location,
            coordinates=coordinates,
            budget=budget,
            hps=hps,
            realization=realization,
            status=parse_choice(PackageStatus, status, "--status"),
            provider_name=provider_name,
            provider_address=provider_address,
            opd_name=opd,
            image_url=image_url,
        )
    except PackageValidationError as e:
        err_console.print(f"[red]Invalid package:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    require_database(config)

    try:
        with get_session() as session:
            package = PackageRepository(session).create(value, source="manual")
            ActivityLogRepository(session).record(
                ActivityAction.ADD,
                description=f"Added package '{package.name}'",
                package_id=package.id,
            )
            package_id = package.id
    except PackageValidationError as e:
        err_console.print(f"[red]Invalid package:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"[green]OK[/green] Package #{package_id} added ({value.progress}% progress)")


@app.command("edit")
def edit_package(
    ctx: typer.Context,
    id: int = typer.Argument(..., help="Package ID"),
    name: Optional[str] = typer.Option(None, "--name"),
    package_type: Optional[str] = typer.Option(None, "--type", "-t"),
    location: Optional[str] = typer.Option(None, "--location"),
    coordinates: Optional[str] = typer.Option(None, "--coordinates", help='Map position as "lat, lon"'),
    budget: Optional[float] = typer.Option(None, "--budget"),
    hps: Optional[float] = typer.Option(None, "--hps"),
    realization: Optional[float] = typer.Option(None, "--realization"),
    status: Optional[str] = typer.Option(None, "--status", "-s"),
    provider_name: Optional[str] = typer.Option(None, "--provider-name"),
    provider_address: Optional[str] = typer.Option(None, "--provider-address"),
    opd: Optional[str] = typer.Option(None, "--opd"),
    image_url: Optional[str] = typer.Option(None, "--image-url", help='Image URL ("" clears it)'),
) -> None:
    """Change fields of a package. Progress is recomputed."""
    from paketwatch.core.config.models import ActivityAction
    from paketwatch.core.errors import PackageNotFoundError, PackageValidationError
    from paketwatch.core.validation import validate_changes
    from paketwatch.persistence.db import get_session
    from paketwatch.persistence.repo import ActivityLogRepository, PackageRepository

    config = get_config(ctx)

    provided = {
        "name": name,
        "type": parse_choice(PackageType, package_type, "--type"),
        "location": location,
        "coordinates": coordinates,
        "budget": budget,
        "hps": hps,
        "realization": realization,
        "status": parse_choice(PackageStatus, status, "--status"),
        "provider_name": provider_name,
        "provider_address": provider_address,
        "opd_name": opd,
        "image_url": image_url,
    }
    provided = {field: value for field, value in provided.items() if value is not None}

    if not provided:
        err_console.print("[red]Nothing to change.[/red] Pass at least one field option.")
        raise typer.Exit(1)

    try:
        changes = validate_changes(provided)
    except PackageValidationError as e:
        err_console.print(f"[red]Invalid package:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    require_database(config)

    try:
        with get_session() as session:
            package = PackageRepository(session).update(id, **changes)
            ActivityLogRepository(session).record(
                ActivityAction.EDIT,
                description=f"Edited package '{package.name}': {', '.join(sorted(changes))}",
                package_id=package.id,
            )
            progress = package.progress
    except PackageNotFoundError as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    except PackageValidationError as e:
        err_console.print(f"[red]Invalid package:[/red] {escape(str(e))}")
        raise typer.Exit(1)

    console.print(f"[green]OK[/green] Package #{id} updated ({progress}% progress)")


@app.command("delete")
def delete_package(
    ctx: typer.Context,
    id: int = typer.Argument(..., help="Package ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a package."""
    from paketwatch.core.config.models import ActivityAction
    from paketwatch.persistence.db import get_session
    from paketwatch.persistence.repo import ActivityLogRepository, PackageRepository

    require_database(get_config(ctx))

    with get_session() as session:
        repo = PackageRepository(session)
        package = repo.get_by_id(id)

        if not package:
            err_console.print(f"[red]Package not found:[/red] {id}")
            raise typer.Exit(1)

        name = package.name
        if not yes and not typer.confirm(f"Delete package #{id} '{name}'?", default=False):
            raise typer.Abort()

        repo.delete(id)
        ActivityLogRepository(session).record(
            ActivityAction.DELETE,
            description=f"Deleted package #{id} '{name}'",
        )

    console.print(f"[green]OK[/green] Package #{id} deleted")
