"""DTOs for workflow runs: context, step records, options and result."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from app.application.dtos.service_result import ServiceError
from app.shared.enums import ActorType, WorkflowStepStatus


@dataclass
class WorkflowStep:
    """Execution record of one step. Finalized when the step resolves."""

    id: str
    name: str
    status: WorkflowStepStatus
    started_at: datetime
    completed_at: datetime | None = None
    result: Any = None
    error: ServiceError | None = None


@dataclass
class WorkflowContext:
    """Identifies one workflow run. Mutated as steps are appended; never persisted."""

    workflow_id: str
    workflow_type: str
    actor_id: str
    actor_type: ActorType
    workspace_id: str
    started_at: datetime
    steps: list[WorkflowStep] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def completed_steps(self) -> list[WorkflowStep]:
        return [s for s in self.steps if s.status == WorkflowStepStatus.COMPLETED]


@dataclass(frozen=True)
class WorkflowOptions:
    """Per-call switches. System-triggered runs skip user-facing side effects."""

    skip_audit: bool = False
    skip_notifications: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class WorkflowResult[T]:
    """Aggregate outcome of a workflow run.

    steps_completed <= steps_total always holds. On failure, errors holds the
    failing step's error and no cascades, audit or notifications have run.
    """

    success: bool
    workflow_id: str
    steps_completed: int
    steps_total: int
    data: T | None = None
    errors: tuple[ServiceError, ...] = ()
    audit_events: tuple[str, ...] = ()
    notifications_sent: tuple[str, ...] = ()
    failed_optional_steps: tuple[str, ...] = ()
    cascades_failed: int = 0

    @property
    def error(self) -> ServiceError | None:
        """First error, for callers that surface a single message."""
        return self.errors[0] if self.errors else None
