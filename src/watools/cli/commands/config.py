"""Configuration management commands."""

import typer
from rich.table import Table

from watools.cli.common import console
from watools.config import (
    get_cache_db_path,
    get_config_file,
    load_config,
    set_config_value,
)

config_app = typer.Typer(
    name="config",
    help="Manage client configuration",
)

# Keys whose values are written as numbers
_NUMERIC_KEYS = {"timeout"}


@config_app.command("show")
def config_show() -> None:
    """Display current configuration."""
    config = load_config()

    if not config:
        console.print("[yellow]No configuration found.[/yellow]")
        console.print(f"Config file: [dim]{get_config_file()}[/dim]")
        return

    table = Table(title="WAtools Configuration", show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    for key, value in sorted(config.items()):
        shown = "********" if key == "api_key" else str(value)
        table.add_row(key, shown)

    console.print(table)
    console.print(f"\nConfig file: [dim]{get_config_file()}[/dim]")
    console.print(f"Cache database: [dim]{get_cache_db_path()}[/dim]")


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Configuration key to set"),
    value: str = typer.Argument(..., help="Value to set"),
) -> None:
    """Set a configuration value.

    Examples:
        watools config set server_url http://localhost:8000
        watools config set timeout 5
    """
    if key in _NUMERIC_KEYS:
        try:
            set_config_value(key, float(value))
        except ValueError as exc:
            console.print(f"[red]{key} must be a number.[/red]")
            raise typer.Exit(code=1) from exc
    else:
        set_config_value(key, value)
    console.print(f"[green]✓[/green] Set [cyan]{key}[/cyan] = [green]{value}[/green]")
    console.print(f"Config file: [dim]{get_config_file()}[/dim]")
