"""Workflow engine: run a workflow definition as an ordered saga.

Steps run one at a time in declaration order. When a required step fails,
the steps that already completed are compensated in reverse order and the
run fails with no side effects. When every required step succeeds the
engine applies cascades, then audit events, then notifications; failures in
those three are logged and counted but never fail the run.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

from sqlalchemy.exc import DBAPIError

from app.application.dtos.audit import AuditEvent
from app.application.dtos.notification import NotificationPayload
from app.application.dtos.service_result import ErrorCode, ServiceError, ServiceResult
from app.application.dtos.workflow import (
    WorkflowContext,
    WorkflowOptions,
    WorkflowResult,
    WorkflowStep,
)
from app.application.interfaces.services import (
    IAuditService,
    ICascadeApplier,
    INotificationService,
)
from app.application.services.audit_service import create_audit_event
from app.domain.entities.workflow import (
    StepResults,
    WorkflowDefinition,
    WorkflowStepDefinition,
)
from app.infrastructure.exceptions import describe_db_error
from app.shared.context import ActorContext
from app.shared.enums import ActorType, AuditAction, EntityType, WorkflowStepStatus
from app.shared.telemetry.logging import get_logger
from app.shared.telemetry.tracing import TracedOperation, add_span_event
from app.shared.utils.datetime import utc_now
from app.shared.utils.generators import generate_workflow_id


def create_workflow_context(
    workflow_type: str,
    actor_id: str,
    actor_type: ActorType,
    workspace_id: str,
    metadata: Mapping[str, Any] | None = None,
) -> WorkflowContext:
    """Return a fresh context with a unique workflow id and no steps."""
    return WorkflowContext(
        workflow_id=generate_workflow_id(),
        workflow_type=workflow_type,
        actor_id=actor_id,
        actor_type=actor_type,
        workspace_id=workspace_id,
        started_at=utc_now(),
        metadata=dict(metadata or {}),
    )


class WorkflowEngine:
    """Executes workflow definitions and single audited operations."""

    def __init__(
        self,
        audit_service: IAuditService,
        notification_service: INotificationService,
        cascade_applier: ICascadeApplier | None = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.audit_service = audit_service
        self.notification_service = notification_service
        self.cascade_applier = cascade_applier
        self._logger = logger or get_logger(__name__)

    async def execute_step(
        self,
        context: WorkflowContext,
        step: WorkflowStepDefinition,
        input: Any,
        results: StepResults,
    ) -> ServiceResult[Any]:
        """Run one step, record it on context.steps, and never raise.

        A database error from the step is mapped by describe_db_error (for
        example a unique violation becomes DUPLICATE_ENTRY); any other
        exception becomes a WORKFLOW_STEP_FAILED error whose cause is the
        exception.
        """
        record = WorkflowStep(
            id=f"step_{len(context.steps) + 1}",
            name=step.name,
            status=WorkflowStepStatus.IN_PROGRESS,
            started_at=utc_now(),
        )
        context.steps.append(record)
        try:
            result = await step.execute(context, input, results)
        except DBAPIError as exc:
            self._logger.warning(
                "Workflow %s step %s hit a database error",
                context.workflow_id,
                step.name,
                exc_info=True,
            )
            result = ServiceResult.fail(describe_db_error(exc, f"run step {step.name}"))
        except Exception as exc:
            self._logger.exception(
                "Workflow %s step %s raised", context.workflow_id, step.name
            )
            result = ServiceResult.fail(
                ErrorCode.WORKFLOW_STEP_FAILED,
                f'Step "{step.name}" failed with exception',
                cause=exc,
            )
        record.completed_at = utc_now()
        if result.success:
            record.status = WorkflowStepStatus.COMPLETED
            record.result = result.data
        else:
            record.status = WorkflowStepStatus.FAILED
            record.error = result.error
        return result

    async def execute_workflow[TInput, TOutput](
        self,
        definition: WorkflowDefinition[TInput, TOutput],
        input: TInput,
        actor_id: str,
        actor_type: ActorType,
        workspace_id: str,
        options: WorkflowOptions | None = None,
    ) -> WorkflowResult[TOutput]:
        """Run definition against input on behalf of the actor in workspace_id."""
        options = options or WorkflowOptions()
        context = create_workflow_context(
            definition.name, actor_id, actor_type, workspace_id, options.metadata
        )
        steps_total = len(definition.steps)
        results: StepResults = {}
        completed: list[tuple[WorkflowStepDefinition, Any]] = []
        failed_optional: list[str] = []

        span_attrs = {
            "workflow.type": definition.name,
            "workflow.id": context.workflow_id,
            "workspace.id": workspace_id,
        }
        async with TracedOperation("workflow.execute", span_attrs):
            self._logger.info(
                "Workflow %s started (%s, workspace_id=%s, actor=%s:%s)",
                definition.name,
                context.workflow_id,
                workspace_id,
                actor_type.value,
                actor_id,
            )

            for step in definition.steps:
                result = await self.execute_step(context, step, input, results)
                if result.success:
                    results[step.name] = result.data
                    completed.append((step, result.data))
                    add_span_event("workflow.step.completed", {"step": step.name})
                    continue

                error = result.error or ServiceError(
                    ErrorCode.WORKFLOW_STEP_FAILED, f'Step "{step.name}" failed'
                )
                if step.optional:
                    self._logger.warning(
                        "Workflow %s optional step %s failed: %s",
                        context.workflow_id,
                        step.name,
                        error.message,
                    )
                    failed_optional.append(step.name)
                    add_span_event(
                        "workflow.step.skipped",
                        {"step": step.name, "error.code": error.code.value},
                    )
                    continue

                self._logger.error(
                    "Workflow %s step %s failed (%s): %s",
                    context.workflow_id,
                    step.name,
                    error.code.value,
                    error.message,
                )
                add_span_event(
                    "workflow.step.failed",
                    {"step": step.name, "error.code": error.code.value},
                )
                await self._rollback(context, input, completed)
                return WorkflowResult(
                    success=False,
                    workflow_id=context.workflow_id,
                    steps_completed=len(completed),
                    steps_total=steps_total,
                    errors=(error,),
                    failed_optional_steps=tuple(failed_optional),
                )

            try:
                output = definition.build_output(results)
            except Exception as exc:
                self._logger.exception(
                    "Workflow %s failed building output", context.workflow_id
                )
                await self._rollback(context, input, completed)
                return WorkflowResult(
                    success=False,
                    workflow_id=context.workflow_id,
                    steps_completed=len(completed),
                    steps_total=steps_total,
                    errors=(
                        ServiceError(
                            ErrorCode.UNKNOWN_ERROR,
                            "Failed to build workflow output",
                            cause=exc,
                        ),
                    ),
                    failed_optional_steps=tuple(failed_optional),
                )

            cascades_failed = await self._apply_cascades(definition, context, input, results)

            audit_ids: list[str] = []
            if not options.skip_audit:
                audit_ids = await self._log_audit(definition, context, input, results)

            notification_ids: list[str] = []
            if not options.skip_notifications:
                notification_ids = await self._send_notifications(
                    definition, context, input, results
                )

            self._logger.info(
                "Workflow %s completed (%s): %d/%d steps, %d audit events, %d notifications",
                definition.name,
                context.workflow_id,
                len(completed),
                steps_total,
                len(audit_ids),
                len(notification_ids),
            )
            return WorkflowResult(
                success=True,
                workflow_id=context.workflow_id,
                steps_completed=len(completed),
                steps_total=steps_total,
                data=output,
                audit_events=tuple(audit_ids),
                notifications_sent=tuple(notification_ids),
                failed_optional_steps=tuple(failed_optional),
                cascades_failed=cascades_failed,
            )

    async def _rollback(
        self,
        context: WorkflowContext,
        input: Any,
        completed: list[tuple[WorkflowStepDefinition, Any]],
    ) -> None:
        """Compensate completed steps newest first; a failing rollback does not stop the rest."""
        for step, step_result in reversed(completed):
            if step.rollback is None:
                continue
            try:
                await step.rollback(context, input, step_result)
                self._logger.info("Workflow %s rolled back %s", context.workflow_id, step.name)
            except Exception:
                self._logger.exception(
                    "Workflow %s rollback of %s failed", context.workflow_id, step.name
                )
                add_span_event("workflow.rollback.failed", {"step": step.name})

    async def _apply_cascades(
        self,
        definition: WorkflowDefinition[Any, Any],
        context: WorkflowContext,
        input: Any,
        results: StepResults,
    ) -> int:
        """Apply cascade effects in order; return how many failed."""
        if definition.cascades is None:
            return 0
        try:
            effects = definition.cascades(context, input, results)
        except Exception:
            self._logger.exception("Workflow %s failed building cascades", context.workflow_id)
            return 1
        if effects and self.cascade_applier is None:
            self._logger.warning(
                "Workflow %s has %d cascades but no cascade applier; skipped",
                context.workflow_id,
                len(effects),
            )
            return len(effects)

        failed = 0
        for effect in effects:
            try:
                result = await self.cascade_applier.apply(effect, context.workspace_id)
            except Exception:
                self._logger.exception(
                    "Workflow %s cascade %s %s on %s raised",
                    context.workflow_id,
                    effect.action.value,
                    effect.entity_type.value,
                    effect.entity_id,
                )
                failed += 1
                continue
            if not result.success:
                self._logger.warning(
                    "Workflow %s cascade %s %s on %s failed: %s",
                    context.workflow_id,
                    effect.action.value,
                    effect.entity_type.value,
                    effect.entity_id,
                    result.error.message if result.error else "unknown error",
                )
                failed += 1
        if failed:
            add_span_event("workflow.cascades.failed", {"count": failed})
        return failed

    async def _log_audit(
        self,
        definition: WorkflowDefinition[Any, Any],
        context: WorkflowContext,
        input: Any,
        results: StepResults,
    ) -> list[str]:
        if definition.audit_events is None:
            return []
        try:
            events = definition.audit_events(context, input, results)
        except Exception:
            self._logger.exception("Workflow %s failed building audit events", context.workflow_id)
            return []
        try:
            result = await self.audit_service.log_audit_events(events)
        except Exception:
            self._logger.exception("Workflow %s audit logging raised", context.workflow_id)
            return []
        if not result.success:
            self._logger.error(
                "Workflow %s audit logging failed: %s",
                context.workflow_id,
                result.error.message if result.error else "unknown error",
            )
            logged = result.error.details.get("logged", []) if result.error else []
            return list(logged)
        return list(result.data or [])

    async def _send_notifications(
        self,
        definition: WorkflowDefinition[Any, Any],
        context: WorkflowContext,
        input: Any,
        results: StepResults,
    ) -> list[str]:
        if definition.notifications is None:
            return []
        try:
            payloads = definition.notifications(context, input, results)
        except Exception:
            self._logger.exception(
                "Workflow %s failed building notifications", context.workflow_id
            )
            return []
        if not payloads:
            return []
        try:
            result = await self.notification_service.send_notifications(payloads)
        except Exception:
            self._logger.exception("Workflow %s notification dispatch raised", context.workflow_id)
            return []
        sent = list(result.data or []) if result.success else []
        if len(sent) < len(payloads):
            self._logger.warning(
                "Workflow %s sent %d of %d notifications",
                context.workflow_id,
                len(sent),
                len(payloads),
            )
        return sent

    async def wrap_operation[T](
        self,
        operation: Callable[[], Awaitable[ServiceResult[T]]],
        *,
        entity_type: EntityType,
        entity_id: str,
        action: AuditAction,
        actor: ActorContext,
        before: Mapping[str, Any] | None = None,
        after: Mapping[str, Any] | None = None,
        metadata: Mapping[str, Any] | None = None,
        notifications: list[NotificationPayload] | None = None,
        options: WorkflowOptions | None = None,
    ) -> ServiceResult[T]:
        """Run a single operation and, when it succeeds, audit it and notify.

        When after is omitted and the operation returns a mapping, that
        mapping is the after snapshot.
        """
        options = options or WorkflowOptions()
        try:
            result = await operation()
        except Exception as exc:
            self._logger.exception(
                "Operation %s on %s %s raised", action.value, entity_type.value, entity_id
            )
            return ServiceResult.fail(
                ErrorCode.UNKNOWN_ERROR, f"Failed to {action.value} {entity_type.value}", cause=exc
            )
        if not result.success:
            return result

        if not options.skip_audit:
            if after is None and isinstance(result.data, Mapping):
                after = result.data
            event: AuditEvent = create_audit_event(
                entity_type,
                entity_id,
                action,
                actor,
                before=before,
                after=after,
                metadata={**options.metadata, **(metadata or {})},
                logger=self._logger,
            )
            try:
                audit_result = await self.audit_service.log_audit_event(event)
            except Exception:
                self._logger.exception(
                    "Audit logging raised for %s %s", entity_type.value, entity_id
                )
            else:
                if not audit_result.success:
                    self._logger.error(
                        "Audit logging failed for %s %s", entity_type.value, entity_id
                    )

        if not options.skip_notifications and notifications:
            try:
                await self.notification_service.send_notifications(notifications)
            except Exception:
                self._logger.exception(
                    "Notification dispatch raised for %s %s", entity_type.value, entity_id
                )

        return result
