"""Tests for job CLI commands."""

from contextlib import asynccontextmanager
from unittest.mock import patch

from typer.testing import CliRunner

from watools.cli import app
from watools.models import Collection

runner = CliRunner()


def _opener(workspace):
    @asynccontextmanager
    async def _open_workspace(*args, **kwargs):
        yield workspace

    return _open_workspace


def _seed_job(remote, title: str = "Pitch", serial: str = "JOB-1") -> str:
    return remote.seed(Collection.JOBS, title=title, serial_number=serial)


def test_jobs_list(workspace, remote) -> None:
    """List jobs via CLI."""
    _seed_job(remote, "Pitch", "JOB-1")
    _seed_job(remote, "Palas", "JOB-2")

    with patch("watools.cli.commands.jobs.open_workspace", _opener(workspace)):
        result = runner.invoke(app, ["jobs", "list"])

    assert result.exit_code == 0
    assert "JOB-1" in result.stdout
    assert "JOB-2" in result.stdout


def test_jobs_list_empty(workspace) -> None:
    """An empty catalog says so."""
    with patch("watools.cli.commands.jobs.open_workspace", _opener(workspace)):
        result = runner.invoke(app, ["jobs", "list"])

    assert result.exit_code == 0
    assert "No jobs found" in result.stdout


def test_jobs_search(workspace, remote) -> None:
    """Search filters by text and serial number."""
    _seed_job(remote, "Pitch", "JOB-1")
    _seed_job(remote, "Palas", "JOB-2")

    with patch("watools.cli.commands.jobs.open_workspace", _opener(workspace)):
        result = runner.invoke(app, ["jobs", "search", "pitch"])
        by_serial = runner.invoke(app, ["jobs", "search", "--serial", "2"])

    assert result.exit_code == 0
    assert "JOB-1" in result.stdout
    assert "JOB-2" not in result.stdout
    assert "JOB-2" in by_serial.stdout
    assert "JOB-1" not in by_serial.stdout


def test_jobs_show(workspace, remote) -> None:
    """Show a job with its tools."""
    job_id = _seed_job(remote)
    tool_id = remote.seed(Collection.TOOLS, name="Llave", variations=["8mm"])
    remote.seed(
        Collection.JOB_TOOL_USAGES, job_id=job_id, tool_id=tool_id, variation="8mm", quantity=2
    )

    with patch("watools.cli.commands.jobs.open_workspace", _opener(workspace)):
        result = runner.invoke(app, ["jobs", "show", job_id])

    assert result.exit_code == 0
    assert "Pitch" in result.stdout
    assert "Llave" in result.stdout
    assert "8mm" in result.stdout


def test_jobs_show_missing(workspace) -> None:
    """Unknown job IDs exit with an error."""
    with patch("watools.cli.commands.jobs.open_workspace", _opener(workspace)):
        result = runner.invoke(app, ["jobs", "show", "ghost"])

    assert result.exit_code == 1
    assert "not found" in result.stdout


def test_jobs_delete_with_yes(workspace, remote) -> None:
    """Delete removes the job and its usages."""
    job_id = _seed_job(remote)
    tool_id = remote.seed(Collection.TOOLS, name="Llave")
    remote.seed(Collection.JOB_TOOL_USAGES, job_id=job_id, tool_id=tool_id, quantity=1)

    with patch("watools.cli.commands.jobs.open_workspace", _opener(workspace)):
        result = runner.invoke(app, ["jobs", "delete", job_id, "--yes"])

    assert result.exit_code == 0
    assert "Deleted job" in result.stdout
    assert remote.data[Collection.JOBS] == {}
    assert remote.data[Collection.JOB_TOOL_USAGES] == {}


def test_jobs_delete_aborted(workspace, remote) -> None:
    """Declining the confirmation keeps the job."""
    job_id = _seed_job(remote)

    with patch("watools.cli.commands.jobs.open_workspace", _opener(workspace)):
        result = runner.invoke(app, ["jobs", "delete", job_id], input="n\n")

    assert result.exit_code == 1
    assert job_id in remote.data[Collection.JOBS]
