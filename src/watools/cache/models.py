"""Local cache models for offline operation."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, ClassVar

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy import Enum as SqlEnum
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from watools.models import ActionKind, Collection


class CacheBase(DeclarativeBase):
    """Base class for all cache SQLAlchemy models."""

    # Type annotation map for common types
    type_annotation_map: ClassVar[dict[type, Any]] = {
        datetime: DateTime(timezone=True),
    }


class CachedJob(CacheBase):
    """Cached job entry."""

    __tablename__ = "jobs"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    serial_number: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class CachedTool(CacheBase):
    """Cached tool entry."""

    __tablename__ = "tools"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    is_robust: Mapped[bool] = mapped_column(default=False, nullable=False)
    complex_description: Mapped[str | None] = mapped_column(Text, nullable=True)
    variations: Mapped[str | None] = mapped_column(Text, nullable=True)  # JSON array as string
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    def get_variations_list(self) -> list[str] | None:
        """Parse variations JSON string to list."""
        if self.variations:
            try:
                result = json.loads(self.variations)
                return [str(item) for item in result] if isinstance(result, list) else None
            except json.JSONDecodeError:
                return None
        return None

    def set_variations_list(self, variations: list[str] | None) -> None:
        """Convert variations list to JSON string."""
        self.variations = json.dumps(variations) if variations is not None else None


class CachedUsage(CacheBase):
    """Cached job/tool usage entry."""

    __tablename__ = "job_tool_usages"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    # Plain columns: usages may outlive their tool and are filtered at read time
    job_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    tool_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    variation: Mapped[str | None] = mapped_column(String(255), nullable=True)
    quantity: Mapped[int] = mapped_column(default=1, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class CachedPendingAction(CacheBase):
    """Queued mutation awaiting replay."""

    __tablename__ = "pending_actions"
    __table_args__ = (Index("ix_pending_actions_enqueued_at", "enqueued_at"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    kind: Mapped[ActionKind] = mapped_column(
        SqlEnum(
            ActionKind,
            name="action_kind",
            values_callable=lambda obj: [item.value for item in obj],
        ),
        nullable=False,
    )
    collection: Mapped[Collection] = mapped_column(
        SqlEnum(
            Collection,
            name="collection",
            values_callable=lambda obj: [item.value for item in obj],
        ),
        nullable=False,
        index=True,
    )
    payload: Mapped[str] = mapped_column(Text, nullable=False)  # JSON object as string
    enqueued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    def get_payload_dict(self) -> dict[str, Any]:
        """Parse payload JSON string to dict."""
        try:
            result = json.loads(self.payload)
        except json.JSONDecodeError:
            return {}
        return result if isinstance(result, dict) else {}

    def set_payload_dict(self, payload: dict[str, Any]) -> None:
        """Convert payload dict to JSON string."""
        self.payload = json.dumps(payload)


CACHE_MODELS: dict[Collection, type[CachedJob] | type[CachedTool] | type[CachedUsage]] = {
    Collection.JOBS: CachedJob,
    Collection.TOOLS: CachedTool,
    Collection.JOB_TOOL_USAGES: CachedUsage,
}
