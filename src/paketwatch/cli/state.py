"""
Shared helpers for CLI commands.

The root callback stores the loaded AppConfig on the Typer context;
subcommands fetch it here and bind the database engine on demand.
"""

from __future__ import annotations

from enum import Enum
from typing import TypeVar

import typer
from rich.console import Console

from paketwatch.core.config.models import AppConfig

err_console = Console(stderr=True)

E = TypeVar("E", bound=Enum)


def get_config(ctx: typer.Context) -> AppConfig:
    """Return the AppConfig loaded by the root callback."""
    config = ctx.find_object(AppConfig)
    if config is None:
        from paketwatch.core.config.loader import load_app_config

        config = load_app_config()
        ctx.obj = config
    return config


def bind_engine(config: AppConfig):
    """Create (or reuse) the engine for the configured database."""
    from paketwatch.persistence.db import get_engine

    return get_engine(
        config.database.url,
        echo=config.database.echo,
        pool_size=config.database.pool_size,
    )


def require_database(config: AppConfig) -> None:
    """Exit with an error unless the schema exists."""
    from sqlalchemy import inspect

    engine = bind_engine(config)
    if not inspect(engine).has_table("packages"):
        err_console.print("[red]Paketwatch not initialized. Run:[/red] paketwatch init")
        raise typer.Exit(1)


def parse_choice(enum_cls: type[E], value: str | None, option: str) -> E | None:
    """Match an enum by value or name, case-insensitively."""
    if value is None:
        return None

    wanted = value.strip().casefold()
    for member in enum_cls:
        if wanted in (str(member.value).casefold(), member.name.casefold()):
            return member

    allowed = ", ".join(str(member.value) for member in enum_cls)
    raise typer.BadParameter(f"'{value}' is not one of: {allowed}", param_hint=option)
