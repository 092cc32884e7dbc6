"""Repository for jobs."""

from __future__ import annotations

import logging
from typing import Any, cast

from watools.errors import CascadeDeleteError, NotFound
from watools.models import (
    Collection,
    Job,
    JobCreate,
    JobPatch,
    JobToolEntry,
    JobWithTools,
    SearchFilters,
    Tool,
)
from watools.repositories.base import EntityRepository
from watools.repositories.usages import UsageRepository
from watools.sync.coordinator import SyncCoordinator
from watools.sync.saga import Saga

logger = logging.getLogger(__name__)


def matches_job(job: Job, filters: SearchFilters) -> bool:
    """Check a job against search filters.

    ``query`` matches title, serial number or description case-insensitively;
    ``serial_number`` must additionally be a substring of the serial number.
    """
    query = filters.query.strip().casefold()
    if query:
        haystacks = (job.title, job.serial_number, job.description or "")
        if not any(query in text.casefold() for text in haystacks):
            return False
    if filters.serial_number:
        if filters.serial_number.strip().casefold() not in job.serial_number.casefold():
            return False
    return True


class JobRepository(EntityRepository[Job]):
    """Repository for work-order templates."""

    def __init__(self, coordinator: SyncCoordinator, usages: UsageRepository) -> None:
        """Initialize the job repository.

        Args:
            coordinator: Shared sync coordinator
            usages: Usage repository used for cascading deletes and tool views
        """
        super().__init__(coordinator, Collection.JOBS)
        self.usages = usages

    async def list_jobs(self) -> list[Job]:
        """Get all jobs, newest first."""
        jobs = await self._all()
        return sorted(jobs, key=lambda job: job.created_at, reverse=True)

    async def get_job(self, job_id: str) -> Job:
        """Get a job by ID.

        Raises:
            NotFound: If the job exists in neither store
        """
        return await self._get(job_id)

    async def create_job(self, data: JobCreate | dict[str, Any]) -> Job:
        """Create a job."""
        job = self.validate(JobCreate, data)
        return await self._create(job)

    async def update_job(self, job_id: str, patch: JobPatch | dict[str, Any]) -> Job:
        """Update the fields set on the patch."""
        job_patch = self.validate(JobPatch, patch)
        return await self._update(job_id, job_patch)

    async def search_jobs(self, filters: SearchFilters | dict[str, Any]) -> list[Job]:
        """Search jobs, newest first."""
        search = self.validate(SearchFilters, filters)
        return [job for job in await self.list_jobs() if matches_job(job, search)]

    async def delete_job(self, job_id: str) -> None:
        """Delete a job after deleting every usage that references it.

        Raises:
            NotFound: If the job exists in neither store
            CascadeDeleteError: If a step failed; ``error.saga.run()`` resumes
        """
        await self.get_job(job_id)

        saga = Saga(f"delete job {job_id}")
        count = await self.usages.add_delete_steps(saga, job_id)
        saga.add_step(f"delete job {job_id}", lambda: self._delete_job(job_id))

        logger.debug("Deleting job %s with %d usages", job_id, count)
        result = await saga.run()
        if not result.ok:
            raise CascadeDeleteError(saga, result.error or RuntimeError("incomplete"))

    async def _delete_job(self, job_id: str) -> None:
        try:
            await self._delete(job_id)
        except NotFound:
            pass

    async def get_job_with_tools(self, job_id: str) -> JobWithTools:
        """Get a job with its resolved tools.

        Usages whose tool no longer exists are left out.
        """
        job = await self.get_job(job_id)
        usages = await self.usages.list_usages_for_job(job_id)
        tools_outcome = await self.coordinator.get_all(Collection.TOOLS)
        tools = {tool.id: cast(Tool, tool) for tool in tools_outcome.value}

        entries = [
            JobToolEntry(
                tool=tools[usage.tool_id],
                quantity=usage.quantity,
                notes=usage.notes,
                variation=usage.variation,
            )
            for usage in usages
            if usage.tool_id in tools
        ]
        return JobWithTools(**job.model_dump(), tools=entries)
