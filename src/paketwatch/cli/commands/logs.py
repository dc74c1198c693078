"""
Activity log command.
"""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from paketwatch.core.config.models import ActivityAction

from ..state import get_config, parse_choice, require_database

console = Console()


def show_logs(
    ctx: typer.Context,
    limit: int = typer.Option(
        20,
        "--limit",
        "-n",
        help="Number of entries to show",
    ),
    action: Optional[str] = typer.Option(
        None,
        "--action",
        "-a",
        help="Filter by action (ADD, EDIT, DELETE, IMPORT)",
    ),
) -> None:
    """Show recent activity, newest first."""
    from paketwatch.persistence.db import get_session
    from paketwatch.persistence.repo import ActivityLogRepository

    config = get_config(ctx)
    action_filter = parse_choice(ActivityAction, action, "--action")
    require_database(config)

    with get_session() as session:
        entries = ActivityLogRepository(session).recent(limit=limit, action=action_filter)

        if not entries:
            console.print("[dim]No activity recorded yet.[/dim]")
            return

        table = Table(title="Activity", show_header=True, header_style="bold magenta")
        table.add_column("Date", style="dim")
        table.add_column("Action", style="cyan")
        table.add_column("Package", justify="right")
        table.add_column("Description")

        for entry in entries:
            table.add_row(
                entry.created_at.strftime("%Y-%m-%d %H:%M"),
                entry.action,
                str(entry.package_id) if entry.package_id else "-",
                escape(entry.description or ""),
            )

        console.print(table)
