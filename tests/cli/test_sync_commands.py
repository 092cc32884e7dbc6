"""Tests for sync CLI commands."""

import asyncio
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from watools.cli import app
from watools.models import Collection, JobCreate

runner = CliRunner()


def _opener(workspace):
    @asynccontextmanager
    async def _open_workspace(*args, **kwargs):
        yield workspace

    return _open_workspace


def _queue_offline_job(workspace, remote) -> None:
    remote.online = False
    asyncio.run(
        workspace.coordinator.create(Collection.JOBS, JobCreate(title="Pitch", serial_number="S"))
    )
    remote.online = True


def test_sync_status_online_no_changes(workspace) -> None:
    """Test sync status with no pending changes."""
    with (
        patch("watools.cli.commands.sync.is_online", new_callable=AsyncMock) as mock_online,
        patch("watools.cli.commands.sync.open_workspace", _opener(workspace)),
    ):
        mock_online.return_value = True

        result = runner.invoke(app, ["sync", "status"])

    assert result.exit_code == 0
    assert "Online" in result.stdout
    assert "No pending changes" in result.stdout


def test_sync_status_offline_with_changes(workspace, remote) -> None:
    """Test sync status lists queued changes while offline."""
    _queue_offline_job(workspace, remote)

    with (
        patch("watools.cli.commands.sync.is_online", new_callable=AsyncMock) as mock_online,
        patch("watools.cli.commands.sync.open_workspace", _opener(workspace)),
    ):
        mock_online.return_value = False

        result = runner.invoke(app, ["sync", "status"])

    assert result.exit_code == 0
    assert "Offline" in result.stdout
    assert "create" in result.stdout
    assert "Total pending changes: 1" in result.stdout


def test_sync_replay_offline_refuses(workspace, remote) -> None:
    """Replay does nothing when the server is unreachable."""
    _queue_offline_job(workspace, remote)

    with (
        patch("watools.cli.commands.sync.is_online", new_callable=AsyncMock) as mock_online,
        patch("watools.cli.commands.sync.open_workspace", _opener(workspace)),
    ):
        mock_online.return_value = False

        result = runner.invoke(app, ["sync", "replay"])

    assert result.exit_code == 1
    assert "Unable to reach server" in result.stdout
    assert workspace.coordinator.log.count() == 1


def test_sync_replay_online(workspace, remote) -> None:
    """Replay sends queued changes and reports the count."""
    _queue_offline_job(workspace, remote)

    with (
        patch("watools.cli.commands.sync.is_online", new_callable=AsyncMock) as mock_online,
        patch("watools.cli.commands.sync.open_workspace", _opener(workspace)),
    ):
        mock_online.return_value = True

        result = runner.invoke(app, ["sync", "replay"])

    assert result.exit_code == 0
    assert "Replayed 1 changes" in result.stdout
    assert len(remote.data[Collection.JOBS]) == 1
    assert workspace.coordinator.log.count() == 0


def test_sync_replay_nothing_queued(workspace) -> None:
    """Replay with an empty log says so."""
    with (
        patch("watools.cli.commands.sync.is_online", new_callable=AsyncMock) as mock_online,
        patch("watools.cli.commands.sync.open_workspace", _opener(workspace)),
    ):
        mock_online.return_value = True

        result = runner.invoke(app, ["sync", "replay"])

    assert result.exit_code == 0
    assert "No changes to replay" in result.stdout


def test_sync_replay_partial_failure_exits_nonzero(workspace, remote) -> None:
    """Entries that still fail keep the command from succeeding."""
    _queue_offline_job(workspace, remote)
    remote.down.add(Collection.JOBS)

    with (
        patch("watools.cli.commands.sync.is_online", new_callable=AsyncMock) as mock_online,
        patch("watools.cli.commands.sync.open_workspace", _opener(workspace)),
    ):
        mock_online.return_value = False

        result = runner.invoke(app, ["sync", "replay", "--force"])

    assert result.exit_code == 1
    assert "stay queued" in result.stdout
    assert workspace.coordinator.log.count() == 1
