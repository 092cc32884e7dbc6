"""Repository for tools."""

from __future__ import annotations

from typing import Any, cast

from watools.models import (
    Collection,
    Job,
    Tool,
    ToolCreate,
    ToolPatch,
    ToolSearchFilters,
    ToolUsageEntry,
    ToolWithJobs,
)
from watools.repositories.base import EntityRepository
from watools.repositories.usages import UsageRepository
from watools.sync.coordinator import SyncCoordinator


def matches_tool(tool: Tool, filters: ToolSearchFilters) -> bool:
    """Check a tool against search filters."""
    query = filters.query.strip().casefold()
    if not query:
        return True
    haystacks = (tool.name, tool.complex_description or "", tool.notes or "")
    return any(query in text.casefold() for text in haystacks)


class ToolRepository(EntityRepository[Tool]):
    """Repository for tool-inventory items."""

    def __init__(self, coordinator: SyncCoordinator, usages: UsageRepository) -> None:
        """Initialize the tool repository."""
        super().__init__(coordinator, Collection.TOOLS)
        self.usages = usages

    async def list_tools(self) -> list[Tool]:
        """Get all tools sorted by name."""
        tools = await self._all()
        return sorted(tools, key=lambda tool: tool.name.casefold())

    async def get_tool(self, tool_id: str) -> Tool:
        """Get a tool by ID.

        Raises:
            NotFound: If the tool exists in neither store
        """
        return await self._get(tool_id)

    async def create_tool(self, data: ToolCreate | dict[str, Any]) -> Tool:
        """Create a tool; robust tools need a complex description."""
        tool = self.validate(ToolCreate, data)
        return await self._create(tool)

    async def update_tool(self, tool_id: str, patch: ToolPatch | dict[str, Any]) -> Tool:
        """Update the fields set on the patch.

        The tool as it would look after the patch is validated first, so a
        robust tool keeps a complex description.

        Raises:
            ValidationError: If the patch or the patched tool is invalid
            NotFound: If the tool exists in neither store
        """
        tool_patch = self.validate(ToolPatch, patch)
        current = await self.get_tool(tool_id)
        merged = {
            **current.model_dump(include=set(ToolCreate.model_fields)),
            **tool_patch.model_dump(exclude_unset=True),
        }
        self.validate(ToolCreate, merged)
        return await self._update(tool_id, tool_patch)

    async def delete_tool(self, tool_id: str) -> None:
        """Delete a tool.

        Usages that reference it are kept and filtered out when read.
        """
        await self._delete(tool_id)

    async def search_tools(self, filters: ToolSearchFilters | dict[str, Any]) -> list[Tool]:
        """Search tools by name, specifications and notes."""
        search = self.validate(ToolSearchFilters, filters)
        return [tool for tool in await self.list_tools() if matches_tool(tool, search)]

    async def get_tool_with_jobs(self, tool_id: str) -> ToolWithJobs:
        """Get a tool with the jobs that use it, oldest usage first."""
        tool = await self.get_tool(tool_id)
        usages = await self.usages.list_usages_for_tool(tool_id)
        jobs_outcome = await self.coordinator.get_all(Collection.JOBS)
        jobs = {job.id: cast(Job, job) for job in jobs_outcome.value}

        history = [
            ToolUsageEntry(
                job=jobs[usage.job_id],
                quantity=usage.quantity,
                notes=usage.notes,
                usage_date=usage.created_at,
            )
            for usage in usages
            if usage.job_id in jobs
        ]
        return ToolWithJobs(**tool.model_dump(), usage_history=history)
