"""Workflow definition: an ordered saga of forward steps with compensations.

A definition names its steps (each an async execute plus an optional
rollback that compensates it), and pure builders that turn the collected
step results into cascades, audit events, notifications and the output.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from app.application.dtos.audit import AuditEvent
    from app.application.dtos.cascade import CascadeEffect
    from app.application.dtos.notification import NotificationPayload
    from app.application.dtos.service_result import ServiceResult
    from app.application.dtos.workflow import WorkflowContext

StepResults = dict[str, Any]

StepExecute = Callable[["WorkflowContext", Any, StepResults], Awaitable["ServiceResult[Any]"]]
StepRollback = Callable[["WorkflowContext", Any, Any], Awaitable[None]]


@dataclass(frozen=True)
class WorkflowStepDefinition:
    """One forward action and its optional compensating action.

    Optional steps may fail without failing the workflow; their name is then
    missing from the results mapping, so later steps must use .get().
    """

    name: str
    execute: StepExecute
    rollback: StepRollback | None = None
    optional: bool = False


@dataclass(frozen=True)
class WorkflowDefinition[TInput, TOutput]:
    """Named, ordered sequence of steps run as one user-triggered operation."""

    name: str
    steps: tuple[WorkflowStepDefinition, ...]
    build_output: Callable[[StepResults], TOutput]
    cascades: Callable[[WorkflowContext, TInput, StepResults], list[CascadeEffect]] | None = None
    audit_events: Callable[[WorkflowContext, TInput, StepResults], list[AuditEvent]] | None = None
    notifications: (
        Callable[[WorkflowContext, TInput, StepResults], list[NotificationPayload]] | None
    ) = None

    def __post_init__(self) -> None:
        names = [s.name for s in self.steps]
        if len(names) != len(set(names)):
            raise ValueError(f"Workflow {self.name!r} has duplicate step names: {names}")
