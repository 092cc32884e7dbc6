"""Error taxonomy for the sync engine and repositories."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import ValidationError as PydanticValidationError

if TYPE_CHECKING:
    from watools.sync.saga import Saga


class WatoolsError(Exception):
    """Base class for all watools errors."""


class RemoteUnavailable(WatoolsError):
    """The remote store could not be reached or failed to answer.

    Absorbed by the sync coordinator, which switches to the degraded path.
    """


class NotFound(WatoolsError):
    """A referenced entity is absent from both stores."""

    def __init__(self, kind: str, entity_id: str) -> None:
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind} not found: {entity_id}")


class ValidationError(WatoolsError, ValueError):
    """Caller-supplied data violates a required-field or domain rule."""

    def __init__(self, message: str, errors: list[dict[str, object]] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)

    @classmethod
    def from_pydantic(cls, exc: PydanticValidationError) -> ValidationError:
        """Build from a pydantic error, keeping the first message readable."""
        details = [
            {"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()
        ]
        first = details[0] if details else {"loc": [], "msg": str(exc)}
        location = ".".join(str(part) for part in first["loc"])  # type: ignore[union-attr]
        message = f"{location}: {first['msg']}" if location else str(first["msg"])
        return cls(message, details)


class CascadeDeleteError(WatoolsError):
    """A compound delete stopped part-way; the saga can be resumed."""

    def __init__(self, saga: Saga, cause: BaseException) -> None:
        self.saga = saga
        self.cause = cause
        remaining = ", ".join(step.name for step in saga.pending_steps)
        super().__init__(f"{saga.name} incomplete (remaining: {remaining}): {cause}")
