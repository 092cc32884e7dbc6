"""Entity repositories over the sync coordinator."""

from watools.repositories.base import EntityRepository
from watools.repositories.jobs import JobRepository
from watools.repositories.tools import ToolRepository
from watools.repositories.usages import UsageRepository

__all__ = [
    "EntityRepository",
    "JobRepository",
    "ToolRepository",
    "UsageRepository",
]
