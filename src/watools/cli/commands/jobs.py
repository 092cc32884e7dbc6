"""Job CLI commands."""

from functools import partial

import typer
from rich.table import Table

from watools.cli.common import console, format_date, run
from watools.models import Job, JobWithTools, SearchFilters
from watools.workspace import open_workspace

jobs_app = typer.Typer(name="jobs", help="Browse and manage jobs")
SERIAL_OPTION = typer.Option(None, "--serial", "-s", help="Serial number substring")
YES_OPTION = typer.Option(False, "--yes", "-y", help="Skip confirmation")


def _render_jobs_table(jobs: list[Job], title: str = "Jobs") -> None:
    if not jobs:
        console.print("[yellow]No jobs found.[/yellow]")
        return

    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Serial", style="green")
    table.add_column("Title", style="white")
    table.add_column("Created", style="dim")

    for job in jobs:
        table.add_row(job.id, job.serial_number, job.title, format_date(job.created_at))

    console.print(table)


def _render_job(job: JobWithTools) -> None:
    console.print(f"[bold]{job.title}[/bold] [dim]({job.serial_number})[/dim]")
    if job.description:
        console.print(job.description)

    if not job.tools:
        console.print("No tools assigned.")
        return

    table = Table(title="Tools", show_header=True, header_style="bold magenta")
    table.add_column("Tool", style="cyan")
    table.add_column("Variation", style="green")
    table.add_column("Quantity", style="yellow", justify="right")
    table.add_column("Notes", style="dim")

    for entry in job.tools:
        table.add_row(
            entry.tool.name,
            entry.variation or "-",
            str(entry.quantity),
            entry.notes or "-",
        )

    console.print(table)


@jobs_app.command("list")
def list_jobs() -> None:
    """List jobs, newest first."""
    run(_list_jobs_async)


async def _list_jobs_async() -> None:
    async with open_workspace() as workspace:
        jobs = await workspace.jobs.list_jobs()
    _render_jobs_table(jobs)


@jobs_app.command("search")
def search_jobs(
    query: str = typer.Argument("", help="Text to match in title, serial or description"),
    serial: str | None = SERIAL_OPTION,
) -> None:
    """Search jobs by text and serial number."""
    run(partial(_search_jobs_async, SearchFilters(query=query, serial_number=serial)))


async def _search_jobs_async(filters: SearchFilters) -> None:
    async with open_workspace() as workspace:
        jobs = await workspace.jobs.search_jobs(filters)
    _render_jobs_table(jobs, title="Search Results")


@jobs_app.command("show")
def show_job(job_id: str = typer.Argument(..., help="Job ID")) -> None:
    """Show a job with its tools."""
    run(partial(_show_job_async, job_id))


async def _show_job_async(job_id: str) -> None:
    async with open_workspace() as workspace:
        job = await workspace.jobs.get_job_with_tools(job_id)
    _render_job(job)


@jobs_app.command("delete")
def delete_job(
    job_id: str = typer.Argument(..., help="Job ID"),
    yes: bool = YES_OPTION,
) -> None:
    """Delete a job and its tool usages."""
    if not yes:
        typer.confirm(f"Delete job {job_id} and all its tool usages?", abort=True)
    run(partial(_delete_job_async, job_id))
    console.print(f"[green]✓[/green] Deleted job [cyan]{job_id}[/cyan]")


async def _delete_job_async(job_id: str) -> None:
    async with open_workspace() as workspace:
        await workspace.jobs.delete_job(job_id)
