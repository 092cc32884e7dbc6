"""Tests for the top-level CLI."""

from contextlib import asynccontextmanager
from unittest.mock import patch

from typer.testing import CliRunner

from watools import __version__
from watools.cli import app
from watools.models import Collection

runner = CliRunner()


def _opener(workspace):
    @asynccontextmanager
    async def _open_workspace(*args, **kwargs):
        yield workspace

    return _open_workspace


def test_version() -> None:
    """--version prints the package version."""
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_seed_command(workspace, remote) -> None:
    """seed fills an empty catalog."""
    with patch("watools.cli.app.open_workspace", _opener(workspace)):
        result = runner.invoke(app, ["seed"])

    assert result.exit_code == 0
    assert "Starter catalog created" in result.stdout
    assert len(remote.data[Collection.JOBS]) == 1


def test_seed_command_skips_existing(workspace, remote) -> None:
    """seed leaves an existing catalog alone."""
    remote.seed(Collection.JOBS, title="Pitch", serial_number="S")

    with patch("watools.cli.app.open_workspace", _opener(workspace)):
        result = runner.invoke(app, ["--verbose", "seed"])

    assert result.exit_code == 0
    assert "nothing seeded" in result.stdout
    assert len(remote.data[Collection.JOBS]) == 1
