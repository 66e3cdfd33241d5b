"""Workflow result envelope returned by every workflow-backed route."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from app.application.dtos.service_result import ServiceError
from app.application.dtos.workflow import WorkflowResult

T = TypeVar("T", bound=BaseModel)


class ServiceErrorResponse(BaseModel):
    """One workflow error: stable code plus human message."""

    code: str
    message: str
    field: str | None = None
    details: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_error(cls, error: ServiceError) -> "ServiceErrorResponse":
        return cls(
            code=error.code.value,
            message=error.message,
            field=error.field,
            details=error.details,
        )


class WorkflowResultResponse(BaseModel, Generic[T]):
    """Aggregate outcome of one workflow run; data is set only on success."""

    model_config = ConfigDict(from_attributes=True)

    success: bool
    workflow_id: str
    steps_completed: int
    steps_total: int
    data: T | None = None
    errors: list[ServiceErrorResponse] = Field(default_factory=list)
    audit_events: list[str] = Field(default_factory=list)
    notifications_sent: list[str] = Field(default_factory=list)
    failed_optional_steps: list[str] = Field(default_factory=list)
    cascades_failed: int = 0

    @classmethod
    def from_result(
        cls, result: WorkflowResult[Any], data_model: type[T]
    ) -> "WorkflowResultResponse[T]":
        """Build the envelope, validating result.data into data_model."""
        return cls(
            success=result.success,
            workflow_id=result.workflow_id,
            steps_completed=result.steps_completed,
            steps_total=result.steps_total,
            data=data_model.model_validate(result.data) if result.data is not None else None,
            errors=[ServiceErrorResponse.from_error(e) for e in result.errors],
            audit_events=list(result.audit_events),
            notifications_sent=list(result.notifications_sent),
            failed_optional_steps=list(result.failed_optional_steps),
            cascades_failed=result.cascades_failed,
        )
