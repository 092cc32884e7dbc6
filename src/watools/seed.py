"""Starter catalog for an empty installation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from watools.models import Job, JobCreate, Tool, ToolCreate
from watools.workspace import Workspace

logger = logging.getLogger(__name__)

SEED_TOOLS = [
    ToolCreate(
        name="Llave dinamométrica",
        is_robust=True,
        complex_description="Par 40–200 Nm",
        notes="Verificar calibración antes de uso",
    ),
    ToolCreate(
        name="Bomba hidráulica",
        is_robust=True,
        complex_description="Capacidad 700 bar",
        notes="Revisión mensual obligatoria",
    ),
    ToolCreate(
        name="Eslinga 1t",
        notes="Inspección visual antes de cada uso",
    ),
    ToolCreate(
        name="Llave inglesa",
        variations=["8mm", "10mm", "12mm", "14mm", "17mm", "19mm"],
        notes="Disponible en diferentes medidas",
    ),
]

SEED_JOB = JobCreate(
    title="Cambio de pitch cylinder",
    serial_number="JOB-2025-001",
    description="Modelo estándar para sustitución de cilindro de pitch.",
)


@dataclass
class SeedResult:
    """What the seeding created."""

    jobs: list[Job] = field(default_factory=list)
    tools: list[Tool] = field(default_factory=list)
    usages: int = 0

    @property
    def seeded(self) -> bool:
        """Check if anything was created."""
        return bool(self.jobs or self.tools)


async def seed_catalog(workspace: Workspace) -> SeedResult:
    """Create the starter tools, job and usages when the catalog is empty.

    Everything goes through the repositories, so offline seeding is queued
    for replay like any other write.
    """
    result = SeedResult()
    if await workspace.jobs.list_jobs() or await workspace.tools.list_tools():
        logger.debug("Catalog not empty, skipping seed")
        return result

    for tool_data in SEED_TOOLS:
        result.tools.append(await workspace.tools.create_tool(tool_data))
    job = await workspace.jobs.create_job(SEED_JOB)
    result.jobs.append(job)

    for tool in result.tools:
        await workspace.usages.create_usage({"job_id": job.id, "tool_id": tool.id, "quantity": 1})
        result.usages += 1

    logger.info("Seeded %d tools, %d job, %d usages", len(result.tools), 1, result.usages)
    return result
