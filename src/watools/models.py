"""Domain models, input schemas and patch types."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, TypeVar

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from watools.errors import ValidationError

# Joins the selected variation labels of a tool in a usage row
VARIATION_SEPARATOR = " / "

SchemaT = TypeVar("SchemaT", bound=BaseModel)


class Collection(str, Enum):
    """Named entity collections shared by both stores."""

    JOBS = "jobs"
    TOOLS = "tools"
    JOB_TOOL_USAGES = "job_tool_usages"

    @property
    def entity_name(self) -> str:
        """Singular name used in ids and error messages."""
        return _ENTITY_NAMES[self]


_ENTITY_NAMES = {
    Collection.JOBS: "job",
    Collection.TOOLS: "tool",
    Collection.JOB_TOOL_USAGES: "usage",
}


class ActionKind(str, Enum):
    """Kind of mutation stored in the pending action log."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


# Entities


class Job(BaseModel):
    """Work-order template."""

    id: str = Field(..., description="Job ID")
    title: str = Field(..., description="Job title")
    serial_number: str = Field(..., description="Serial number")
    description: str | None = Field(None, description="Description")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime | None = Field(None, description="Last update timestamp")


class Tool(BaseModel):
    """Tool-inventory item."""

    id: str = Field(..., description="Tool ID")
    name: str = Field(..., description="Tool name")
    is_robust: bool = Field(False, description="Complex/robust tool flag")
    complex_description: str | None = Field(None, description="Specifications of a robust tool")
    variations: list[str] | None = Field(None, description="Ordered variation labels")
    notes: str | None = Field(None, description="Notes")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime | None = Field(None, description="Last update timestamp")


class JobToolUsage(BaseModel):
    """Edge recording that a job requires a quantity of a tool."""

    id: str = Field(..., description="Usage ID")
    job_id: str = Field(..., description="Referenced job ID")
    tool_id: str = Field(..., description="Referenced tool ID")
    variation: str | None = Field(None, description="Selected variations joined by ' / '")
    quantity: int = Field(1, ge=1, description="Required quantity")
    notes: str | None = Field(None, description="Usage notes")
    created_at: datetime = Field(..., description="Creation timestamp")


Entity = Job | Tool | JobToolUsage

ENTITY_TYPES: dict[Collection, type[Job] | type[Tool] | type[JobToolUsage]] = {
    Collection.JOBS: Job,
    Collection.TOOLS: Tool,
    Collection.JOB_TOOL_USAGES: JobToolUsage,
}


def collection_of(entity: Entity) -> Collection:
    """Return the collection an entity instance belongs to."""
    for collection, entity_type in ENTITY_TYPES.items():
        if isinstance(entity, entity_type):
            return collection
    raise TypeError(f"Unsupported entity type: {type(entity).__name__}")


class PendingAction(BaseModel):
    """A mutation awaiting replay against the remote store."""

    id: int = Field(..., description="Monotonic log ID")
    kind: ActionKind = Field(..., description="Mutation kind")
    collection: Collection = Field(..., description="Target collection")
    payload: dict[str, Any] = Field(default_factory=dict, description="Entity or patch")
    enqueued_at: datetime = Field(..., description="Enqueue timestamp")

    @property
    def target_id(self) -> str | None:
        """ID of the entity the action targets."""
        value = self.payload.get("id")
        return None if value is None else str(value)


# Input and patch types


def _require_text(value: str, field: str) -> str:
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field} is required")
    return stripped


def _clean_variations(values: list[str] | None) -> list[str] | None:
    if values is None:
        return None
    cleaned: list[str] = []
    for value in values:
        label = value.strip()
        if label and label not in cleaned:
            cleaned.append(label)
    return cleaned or None


class JobCreate(BaseModel):
    """Data for a new job."""

    title: str = Field(..., description="Job title")
    serial_number: str = Field(..., description="Serial number")
    description: str | None = Field(None, description="Description")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Reject blank titles."""
        return _require_text(v, "title")

    @field_validator("serial_number")
    @classmethod
    def validate_serial_number(cls, v: str) -> str:
        """Reject blank serial numbers."""
        return _require_text(v, "serial_number")


class JobPatch(BaseModel):
    """Partial update of a job. Only explicitly set fields are applied."""

    title: str | None = Field(None, description="Job title")
    serial_number: str | None = Field(None, description="Serial number")
    description: str | None = Field(None, description="Description")

    @field_validator("title", "serial_number")
    @classmethod
    def validate_required_text(cls, v: str | None) -> str:
        """Required fields may be changed but not cleared."""
        if v is None:
            raise ValueError("field cannot be cleared")
        return _require_text(v, "field")


class ToolCreate(BaseModel):
    """Data for a new tool."""

    name: str = Field(..., description="Tool name")
    is_robust: bool = Field(False, description="Complex/robust tool flag")
    complex_description: str | None = Field(None, description="Specifications of a robust tool")
    variations: list[str] | None = Field(None, description="Ordered variation labels")
    notes: str | None = Field(None, description="Notes")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject blank names."""
        return _require_text(v, "name")

    @field_validator("variations")
    @classmethod
    def validate_variations(cls, v: list[str] | None) -> list[str] | None:
        """Strip labels and drop blanks and duplicates."""
        return _clean_variations(v)

    @model_validator(mode="after")
    def validate_robust_description(self) -> ToolCreate:
        """Robust tools must describe their specifications."""
        if self.is_robust and not (self.complex_description or "").strip():
            raise ValueError("complex_description is required for robust tools")
        return self


class ToolPatch(BaseModel):
    """Partial update of a tool. Only explicitly set fields are applied.

    The robust-tool rule depends on the stored tool, so it is checked by
    the repository against the merged result.
    """

    name: str | None = Field(None, description="Tool name")
    is_robust: bool | None = Field(None, description="Complex/robust tool flag")
    complex_description: str | None = Field(None, description="Specifications of a robust tool")
    variations: list[str] | None = Field(None, description="Ordered variation labels")
    notes: str | None = Field(None, description="Notes")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str:
        """The name may be changed but not cleared."""
        if v is None:
            raise ValueError("name cannot be cleared")
        return _require_text(v, "name")

    @field_validator("variations")
    @classmethod
    def validate_variations(cls, v: list[str] | None) -> list[str] | None:
        """Strip labels and drop blanks and duplicates."""
        return _clean_variations(v)


class UsageCreate(BaseModel):
    """Data for a new job/tool usage."""

    job_id: str = Field(..., description="Referenced job ID")
    tool_id: str = Field(..., description="Referenced tool ID")
    variation: str | None = Field(None, description="Selected variations joined by ' / '")
    quantity: int = Field(1, ge=1, description="Required quantity")
    notes: str | None = Field(None, description="Usage notes")

    @field_validator("variation")
    @classmethod
    def validate_variation(cls, v: str | None) -> str | None:
        """Normalize spacing around separators; blank means no variation."""
        labels = split_variations(v)
        return join_variations(labels) if labels else None


# Views and filters


class JobToolEntry(BaseModel):
    """A resolved tool requirement of a job."""

    tool: Tool
    quantity: int
    notes: str | None = None
    variation: str | None = None


class JobWithTools(Job):
    """Job with its resolved tool requirements."""

    tools: list[JobToolEntry] = Field(default_factory=list)


class ToolUsageEntry(BaseModel):
    """A resolved job that uses a tool."""

    job: Job
    quantity: int
    notes: str | None = None
    usage_date: datetime


class ToolWithJobs(Tool):
    """Tool with the jobs that use it."""

    usage_history: list[ToolUsageEntry] = Field(default_factory=list)


class SearchFilters(BaseModel):
    """Job search filters; both parts must match."""

    query: str = Field("", description="Matches title, serial number and description")
    serial_number: str | None = Field(None, description="Substring of the serial number")


class ToolSearchFilters(BaseModel):
    """Tool search filters."""

    query: str = Field("", description="Matches name, specifications and notes")


def split_variations(value: str | None) -> list[str]:
    """Split a joined variation label into its parts."""
    if not value:
        return []
    return [part.strip() for part in value.split(VARIATION_SEPARATOR.strip()) if part.strip()]


def join_variations(labels: list[str]) -> str:
    """Join variation labels the way usage rows store them."""
    return VARIATION_SEPARATOR.join(labels)


def validate_input(schema: type[SchemaT], data: SchemaT | dict[str, Any]) -> SchemaT:
    """Validate caller data against a schema, raising the domain ValidationError."""
    if isinstance(data, schema):
        return data
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError.from_pydantic(exc) from exc
