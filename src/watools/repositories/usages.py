"""Repository for job/tool usages."""

from __future__ import annotations

from functools import partial
from typing import Any, cast

from watools.errors import CascadeDeleteError, NotFound, ValidationError
from watools.models import (
    Collection,
    JobToolUsage,
    Tool,
    UsageCreate,
    split_variations,
)
from watools.repositories.base import EntityRepository
from watools.sync.coordinator import SyncCoordinator
from watools.sync.saga import Saga


def _by_creation(usages: list[JobToolUsage]) -> list[JobToolUsage]:
    return sorted(usages, key=lambda usage: usage.created_at)


class UsageRepository(EntityRepository[JobToolUsage]):
    """Repository for the job/tool usage edges."""

    def __init__(self, coordinator: SyncCoordinator) -> None:
        """Initialize the usage repository."""
        super().__init__(coordinator, Collection.JOB_TOOL_USAGES)

    async def _query(self, **filters: str) -> list[JobToolUsage]:
        outcome = await self.coordinator.query(self.collection, filters)
        return _by_creation(cast(list[JobToolUsage], outcome.value))

    async def list_usages_for_job(self, job_id: str) -> list[JobToolUsage]:
        """Get the usages of a job, oldest first."""
        return await self._query(job_id=job_id)

    async def list_usages_for_tool(self, tool_id: str) -> list[JobToolUsage]:
        """Get the usages of a tool, oldest first."""
        return await self._query(tool_id=tool_id)

    async def create_usage(self, data: UsageCreate | dict[str, Any]) -> JobToolUsage:
        """Link a tool to a job.

        Args:
            data: Usage fields; ``variation`` must only name variations of the tool

        Returns:
            The created usage

        Raises:
            ValidationError: If the data is invalid
            NotFound: If the job or tool does not exist
        """
        usage = self.validate(UsageCreate, data)

        job = await self.coordinator.get(Collection.JOBS, usage.job_id)
        if job.value is None:
            raise NotFound(Collection.JOBS.entity_name, usage.job_id)
        tool = await self.coordinator.get(Collection.TOOLS, usage.tool_id)
        if tool.value is None:
            raise NotFound(Collection.TOOLS.entity_name, usage.tool_id)
        self._check_variation(cast(Tool, tool.value), usage.variation)

        return await self._create(usage)

    def _check_variation(self, tool: Tool, variation: str | None) -> None:
        labels = split_variations(variation)
        if not labels:
            return
        known = tool.variations or []
        unknown = [label for label in labels if label not in known]
        if unknown:
            raise ValidationError(
                f"variation: {', '.join(unknown)} not offered by tool '{tool.name}'"
            )

    async def delete_usage(self, usage_id: str) -> None:
        """Delete a usage; deleting one that is already gone is not an error."""
        try:
            await self._delete(usage_id)
        except NotFound:
            pass

    async def add_delete_steps(self, saga: Saga, job_id: str) -> int:
        """Append one saga step per usage of a job.

        Usages created offline and still queued count too, even when a remote
        read has already dropped them from the cache.

        Returns:
            Number of steps added
        """
        usages = await self.list_usages_for_job(job_id)
        known = {usage.id for usage in usages}
        usages += [
            cast(JobToolUsage, usage)
            for usage in self.coordinator.queued_creates(self.collection, job_id=job_id)
            if usage.id not in known
        ]
        for usage in usages:
            saga.add_step(f"delete usage {usage.id}", partial(self.delete_usage, usage.id))
        return len(usages)

    async def delete_usages_for_job(self, job_id: str) -> int:
        """Delete every usage of a job, one usage at a time.

        Returns:
            Number of deleted usages

        Raises:
            CascadeDeleteError: If a delete failed; the saga on the error resumes it
        """
        saga = Saga(f"delete usages of job {job_id}")
        count = await self.add_delete_steps(saga, job_id)
        result = await saga.run()
        if not result.ok:
            raise CascadeDeleteError(saga, result.error or RuntimeError("incomplete"))
        return count
