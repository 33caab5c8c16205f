"""
Compensating-transaction runner.

The store only gives per-call atomicity, so multi-step provisioning flows are
written as an ordered list of steps, each an action with an optional undo.
When an action raises, the undos of the steps that already completed run in
reverse order and the original error is re-raised. An undo that itself fails
is logged and skipped; the leftover row is for an operator to clean up.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

logger = logging.getLogger(__name__)

Action = Callable[[dict], Any]
Compensation = Callable[[dict], None]


@dataclass(frozen=True)
class SagaStep:
    name: str
    action: Action
    compensation: Compensation | None = None


@dataclass
class Saga:
    name: str
    steps: list[SagaStep] = field(default_factory=list)

    def step(self, name: str, action: Action, compensation: Compensation | None = None) -> "Saga":
        self.steps.append(SagaStep(name, action, compensation))
        return self

    def run(self, ctx: dict | None = None) -> dict:
        ctx = {} if ctx is None else ctx
        completed: list[SagaStep] = []
        for step in self.steps:
            try:
                step.action(ctx)
            except Exception as exc:
                logger.warning(
                    "saga step failed, compensating",
                    extra={"saga": self.name, "step": step.name, "error": str(exc)},
                )
                self._compensate(completed, ctx)
                raise
            completed.append(step)
        return ctx

    def _compensate(self, completed: list[SagaStep], ctx: dict) -> None:
        for step in reversed(completed):
            if step.compensation is None:
                continue
            try:
                step.compensation(ctx)
            except Exception:
                logger.exception(
                    "saga compensation failed; manual cleanup required",
                    extra={"saga": self.name, "step": step.name},
                )
