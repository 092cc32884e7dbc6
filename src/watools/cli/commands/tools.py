"""Tool CLI commands."""

from functools import partial

import typer
from rich.table import Table

from watools.cli.common import console, format_date, run
from watools.models import Tool, ToolSearchFilters, ToolWithJobs
from watools.workspace import open_workspace

tools_app = typer.Typer(name="tools", help="Browse the tool inventory")


def _render_tools_table(tools: list[Tool]) -> None:
    if not tools:
        console.print("[yellow]No tools found.[/yellow]")
        return

    table = Table(title="Tools", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="green")
    table.add_column("Type", style="yellow")
    table.add_column("Specifications", style="white")
    table.add_column("Variations", style="dim")

    for tool in tools:
        table.add_row(
            tool.id,
            tool.name,
            "Complex" if tool.is_robust else "Simple",
            tool.complex_description or "-",
            ", ".join(tool.variations or []) or "-",
        )

    console.print(table)


def _render_tool(tool: ToolWithJobs) -> None:
    kind = "complex" if tool.is_robust else "simple"
    console.print(f"[bold]{tool.name}[/bold] [dim]({kind})[/dim]")
    if tool.complex_description:
        console.print(f"Specifications: {tool.complex_description}")
    if tool.notes:
        console.print(f"Notes: {tool.notes}")

    if not tool.usage_history:
        console.print("Not used by any job.")
        return

    table = Table(title="Used By", show_header=True, header_style="bold magenta")
    table.add_column("Job", style="cyan")
    table.add_column("Serial", style="green")
    table.add_column("Quantity", style="yellow", justify="right")
    table.add_column("Since", style="dim")

    for entry in tool.usage_history:
        table.add_row(
            entry.job.title,
            entry.job.serial_number,
            str(entry.quantity),
            format_date(entry.usage_date),
        )

    console.print(table)


@tools_app.command("list")
def list_tools(
    query: str = typer.Argument("", help="Text to match in name, specifications or notes"),
) -> None:
    """List tools sorted by name."""
    run(partial(_list_tools_async, ToolSearchFilters(query=query)))


async def _list_tools_async(filters: ToolSearchFilters) -> None:
    async with open_workspace() as workspace:
        tools = await workspace.tools.search_tools(filters)
    _render_tools_table(tools)


@tools_app.command("show")
def show_tool(tool_id: str = typer.Argument(..., help="Tool ID")) -> None:
    """Show a tool and the jobs that use it."""
    run(partial(_show_tool_async, tool_id))


async def _show_tool_async(tool_id: str) -> None:
    async with open_workspace() as workspace:
        tool = await workspace.tools.get_tool_with_jobs(tool_id)
    _render_tool(tool)
