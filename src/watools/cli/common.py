"""Helpers shared by the CLI commands."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import TypeVar

import anyio
import typer
from rich.console import Console

from watools.errors import CascadeDeleteError, NotFound, ValidationError

console = Console()

T = TypeVar("T")


def run(func: Callable[[], Awaitable[T]]) -> T:
    """Run an async command body, turning domain errors into a clean exit."""
    try:
        return anyio.run(func)
    except NotFound as exc:
        console.print(f"[red]{exc.kind.capitalize()} not found:[/red] {exc.entity_id}")
        raise typer.Exit(code=1) from exc
    except ValidationError as exc:
        console.print(f"[red]Invalid data:[/red] {exc}")
        raise typer.Exit(code=1) from exc
    except CascadeDeleteError as exc:
        console.print(f"[red]Delete incomplete:[/red] {exc}")
        raise typer.Exit(code=1) from exc


def format_date(value: datetime | None) -> str:
    """Format a timestamp for tables."""
    if value is None:
        return "-"
    return value.strftime("%Y-%m-%d")
