"""Main CLI application using Typer."""

import logging

import typer
from rich.logging import RichHandler

from watools import __version__
from watools.cli.commands.config import config_app
from watools.cli.commands.jobs import jobs_app
from watools.cli.commands.sync import sync_app
from watools.cli.commands.tools import tools_app
from watools.cli.common import console, run
from watools.seed import seed_catalog
from watools.workspace import open_workspace

app = typer.Typer(
    name="watools",
    help="WAtools - Job and tool catalog that keeps working offline",
    add_completion=False,
)

# Register subcommands
app.add_typer(config_app, name="config")
app.add_typer(jobs_app, name="jobs")
app.add_typer(tools_app, name="tools")
app.add_typer(sync_app, name="sync")


def version_callback(value: bool) -> None:
    """Show version information."""
    if value:
        console.print(f"WAtools version {__version__}")
        raise typer.Exit()


def configure_logging(verbose: bool) -> None:
    """Route library logging through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show sync diagnostics"
    ),
) -> None:
    """WAtools CLI - Jobs and tools, online or offline."""
    configure_logging(verbose)


@app.command("seed")
def seed() -> None:
    """Create the starter catalog if no jobs or tools exist."""
    result = run(_seed_async)
    if result:
        console.print("[green]✓[/green] Starter catalog created.")
    else:
        console.print("[yellow]Catalog already has data; nothing seeded.[/yellow]")


async def _seed_async() -> bool:
    async with open_workspace() as workspace:
        result = await seed_catalog(workspace)
    return result.seeded


if __name__ == "__main__":
    app()
