"""Ordered, resumable multi-step operations.

A saga runs its steps strictly in order and stops at the first failure.
Completed steps are remembered, so running it again resumes at the step
that failed. Each step must be safe to retry on its own.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

StepAction = Callable[[], Awaitable[Any]]


@dataclass
class SagaStep:
    """A single named step."""

    name: str
    action: StepAction
    done: bool = False


@dataclass
class SagaResult:
    """Outcome of one saga run."""

    completed: list[str] = field(default_factory=list)
    remaining: list[str] = field(default_factory=list)
    error: BaseException | None = None

    @property
    def ok(self) -> bool:
        """Check if every step has completed."""
        return self.error is None and not self.remaining


class Saga:
    """Ordered list of independently retryable steps."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.steps: list[SagaStep] = []

    def add_step(self, name: str, action: StepAction) -> None:
        """Append a step to run after all steps added before it."""
        self.steps.append(SagaStep(name=name, action=action))

    @property
    def pending_steps(self) -> list[SagaStep]:
        """Steps that have not completed yet."""
        return [step for step in self.steps if not step.done]

    @property
    def is_complete(self) -> bool:
        """Check if every step has completed."""
        return not self.pending_steps

    async def run(self) -> SagaResult:
        """Run pending steps in order, stopping at the first failure."""
        result = SagaResult()
        for step in self.steps:
            if step.done:
                continue
            try:
                await step.action()
            except Exception as exc:
                logger.warning("%s: step %s failed: %s", self.name, step.name, exc)
                result.error = exc
                break
            step.done = True
            result.completed.append(step.name)

        result.remaining = [step.name for step in self.pending_steps]
        return result
