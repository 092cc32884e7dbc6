"""Sync CLI commands for inspecting and replaying deferred writes."""

from collections import Counter
from functools import partial

import typer
from rich.table import Table

from watools.cli.common import console, run
from watools.config import get_server_url
from watools.models import PendingAction
from watools.remote.client import is_online
from watools.sync.replay import ReplayResult
from watools.workspace import open_workspace

sync_app = typer.Typer(name="sync", help="Manage synchronization")
FORCE_OPTION = typer.Option(
    False, "--force", "-f", help="Replay even if the health check fails"
)


def _render_pending(actions: list[PendingAction]) -> None:
    """Render pending changes table."""
    if not actions:
        console.print("[green]No pending changes.[/green]")
        return

    table = Table(title="Pending Changes", show_header=True, header_style="bold yellow")
    table.add_column("#", style="dim", no_wrap=True)
    table.add_column("Action", style="cyan")
    table.add_column("Collection", style="white")
    table.add_column("Target", style="white")
    table.add_column("Queued", style="dim")

    for action in actions:
        table.add_row(
            str(action.id),
            action.kind.value,
            action.collection.value,
            action.target_id or "-",
            action.enqueued_at.strftime("%Y-%m-%d %H:%M:%S"),
        )

    console.print(table)
    totals = Counter(action.collection.value for action in actions)
    summary = ", ".join(f"{name}: {count}" for name, count in sorted(totals.items()))
    console.print(f"\n[yellow]Total pending changes: {len(actions)}[/yellow] [dim]({summary})[/dim]")


def _render_replay(result: ReplayResult) -> None:
    if result.attempted == 0:
        console.print("[green]No changes to replay.[/green]")
        return

    console.print(f"[green]✓ Replayed {result.replayed} changes.[/green]")
    if result.failed or result.skipped:
        console.print(
            f"[yellow]{result.failed} failed and {result.skipped} held back; "
            "they stay queued for the next replay.[/yellow]"
        )
    if result.discarded:
        console.print(f"[red]{result.discarded} changes were rejected and discarded.[/red]")
    for error in result.errors:
        console.print(f"[dim]{error}[/dim]")


@sync_app.command("status")
def sync_status() -> None:
    """Show connectivity and pending changes."""
    run(_sync_status_async)


async def _sync_status_async() -> None:
    if await is_online():
        console.print(f"[green]Server: {get_server_url()}[/green]")
        console.print("[green]Status: Online[/green]\n")
    else:
        console.print(f"[red]Unable to reach server at {get_server_url()}.[/red]")
        console.print("[yellow]Status: Offline[/yellow]\n")

    async with open_workspace() as workspace:
        actions = workspace.coordinator.pending_actions()
    _render_pending(actions)


@sync_app.command("replay")
def sync_replay(force: bool = FORCE_OPTION) -> None:
    """Replay pending changes against the server."""
    result = run(partial(_sync_replay_async, force))
    if not result.success:
        raise typer.Exit(code=1)


async def _sync_replay_async(force: bool) -> ReplayResult:
    if not force and not await is_online():
        console.print(f"[red]Unable to reach server at {get_server_url()}.[/red]")
        console.print("Pending changes stay queued until the server is reachable.")
        raise typer.Exit(code=1)

    console.print("[cyan]Replaying pending changes...[/cyan]")
    async with open_workspace() as workspace:
        result = await workspace.coordinator.replay()
    _render_replay(result)
    return result
