"""WorkflowEngine unit tests with mocked audit, notification and cascade collaborators."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import IntegrityError

from app.application.dtos import ErrorCode, ServiceResult, WorkflowOptions
from app.application.dtos.cascade import RoomCascade, RoomFields
from app.domain.entities.workflow import WorkflowDefinition, WorkflowStepDefinition
from app.domain.enums import RoomStatus
from app.infrastructure.services import WorkflowEngine, create_workflow_context
from app.shared.context import ActorContext
from app.shared.enums import ActorType, AuditAction, CascadeAction, EntityType, WorkflowStepStatus


def _ok(value):
    async def step(context, input, results):
        return ServiceResult.ok(value)

    return step


def _fail(code=ErrorCode.VALIDATION_ERROR, message="nope"):
    async def step(context, input, results):
        return ServiceResult.fail(code, message)

    return step


def _recording_rollback(calls: list[str], name: str):
    async def rollback(context, input, step_result):
        calls.append(name)

    return rollback


@pytest.fixture
def collaborators():
    audit = AsyncMock()
    audit.log_audit_events = AsyncMock(return_value=ServiceResult.ok(["a1", "a2"]))
    audit.log_audit_event = AsyncMock(return_value=ServiceResult.ok("a1"))
    notifications = AsyncMock()
    notifications.send_notifications = AsyncMock(return_value=ServiceResult.ok(["n1"]))
    cascades = AsyncMock()
    cascades.apply = AsyncMock(return_value=ServiceResult.ok(None))
    return audit, notifications, cascades


@pytest.fixture
def engine(collaborators) -> WorkflowEngine:
    audit, notifications, cascades = collaborators
    return WorkflowEngine(audit, notifications, cascades)


def _definition(steps, **builders) -> WorkflowDefinition:
    return WorkflowDefinition(
        name="test_flow",
        steps=tuple(steps),
        build_output=builders.pop("build_output", lambda results: dict(results)),
        **builders,
    )


async def _run(engine: WorkflowEngine, definition, options=None):
    return await engine.execute_workflow(
        definition, {"x": 1}, "owner_1", ActorType.OWNER, "ws_1", options
    )


async def test_successful_run_collects_results_and_side_effects(engine, collaborators) -> None:
    audit, notifications, cascades = collaborators
    definition = _definition(
        [
            WorkflowStepDefinition("first", _ok(1)),
            WorkflowStepDefinition("second", _ok(2)),
        ],
        cascades=lambda ctx, inp, res: [
            RoomCascade("room_1", CascadeAction.UPDATE, RoomFields(status=RoomStatus.AVAILABLE))
        ],
        audit_events=lambda ctx, inp, res: ["event"],
        notifications=lambda ctx, inp, res: ["payload"],
    )

    result = await _run(engine, definition)

    assert result.success
    assert result.data == {"first": 1, "second": 2}
    assert result.steps_completed == result.steps_total == 2
    assert result.workflow_id.startswith("wf_")
    assert result.audit_events == ("a1", "a2")
    assert result.notifications_sent == ("n1",)
    assert result.cascades_failed == 0
    cascades.apply.assert_awaited_once()
    audit.log_audit_events.assert_awaited_once_with(["event"])
    notifications.send_notifications.assert_awaited_once_with(["payload"])


async def test_later_steps_see_earlier_results(engine) -> None:
    seen = {}

    async def second(context, input, results):
        seen.update(results)
        return ServiceResult.ok("done")

    result = await _run(
        engine,
        _definition([WorkflowStepDefinition("first", _ok("a")), WorkflowStepDefinition("second", second)]),
    )
    assert result.success
    assert seen == {"first": "a"}


async def test_required_failure_rolls_back_in_reverse_and_skips_side_effects(
    engine, collaborators
) -> None:
    audit, notifications, cascades = collaborators
    calls: list[str] = []
    definition = _definition(
        [
            WorkflowStepDefinition("a", _ok(1), rollback=_recording_rollback(calls, "a")),
            WorkflowStepDefinition("b", _ok(2)),
            WorkflowStepDefinition("c", _ok(3), rollback=_recording_rollback(calls, "c")),
            WorkflowStepDefinition("d", _fail(ErrorCode.ROOM_AT_CAPACITY, "full")),
            WorkflowStepDefinition("e", _ok(5), rollback=_recording_rollback(calls, "e")),
        ],
        audit_events=lambda ctx, inp, res: ["event"],
        notifications=lambda ctx, inp, res: ["payload"],
    )

    result = await _run(engine, definition)

    assert not result.success
    assert result.steps_completed == 3
    assert result.steps_total == 5
    assert result.error.code == ErrorCode.ROOM_AT_CAPACITY
    assert result.error.message == "full"
    assert calls == ["c", "a"]
    audit.log_audit_events.assert_not_awaited()
    notifications.send_notifications.assert_not_awaited()
    cascades.apply.assert_not_awaited()


async def test_first_step_failure_runs_no_rollback(engine) -> None:
    calls: list[str] = []
    result = await _run(
        engine,
        _definition([
            WorkflowStepDefinition("a", _fail(), rollback=_recording_rollback(calls, "a")),
        ]),
    )
    assert not result.success
    assert result.steps_completed == 0
    assert calls == []


async def test_step_exception_becomes_step_failed_error(engine) -> None:
    boom = RuntimeError("db down")

    async def explode(context, input, results):
        raise boom

    result = await _run(engine, _definition([WorkflowStepDefinition("explode", explode)]))

    assert not result.success
    assert result.error.code == ErrorCode.WORKFLOW_STEP_FAILED
    assert result.error.message == 'Step "explode" failed with exception'
    assert result.error.cause is boom


class _UniqueViolation(Exception):
    sqlstate = "23505"


async def test_unique_violation_in_step_is_duplicate_entry(engine) -> None:
    calls: list[str] = []

    async def insert(context, input, results):
        raise IntegrityError("INSERT INTO payments", {}, _UniqueViolation("duplicate key"))

    result = await _run(
        engine,
        _definition([
            WorkflowStepDefinition("validate", _ok({})),
            WorkflowStepDefinition(
                "number", _ok("RCP-000002"), rollback=_recording_rollback(calls, "n")
            ),
            WorkflowStepDefinition("insert", insert),
        ]),
    )

    assert not result.success
    assert result.error.code == ErrorCode.DUPLICATE_ENTRY
    assert result.error.message == "A record with these details already exists"
    assert result.error.details == {"sqlstate": "23505"}
    assert result.steps_completed == 2
    assert calls == ["n"]


async def test_optional_failure_is_recorded_and_run_continues(engine) -> None:
    result = await _run(
        engine,
        _definition([
            WorkflowStepDefinition("a", _ok(1)),
            WorkflowStepDefinition("maybe", _fail(), optional=True),
            WorkflowStepDefinition("c", _ok(3)),
        ]),
    )
    assert result.success
    assert result.failed_optional_steps == ("maybe",)
    assert result.steps_completed == 2
    assert "maybe" not in result.data


async def test_rollback_exception_does_not_stop_other_rollbacks(engine) -> None:
    calls: list[str] = []

    async def broken_rollback(context, input, step_result):
        raise RuntimeError("cannot undo")

    result = await _run(
        engine,
        _definition([
            WorkflowStepDefinition("a", _ok(1), rollback=_recording_rollback(calls, "a")),
            WorkflowStepDefinition("b", _ok(2), rollback=broken_rollback),
            WorkflowStepDefinition("c", _fail()),
        ]),
    )
    assert not result.success
    assert calls == ["a"]


async def test_rollback_receives_its_own_step_result(engine) -> None:
    received = []

    async def rollback(context, input, step_result):
        received.append(step_result)

    await _run(
        engine,
        _definition([
            WorkflowStepDefinition("a", _ok({"id": "row_1"}), rollback=rollback),
            WorkflowStepDefinition("b", _fail()),
        ]),
    )
    assert received == [{"id": "row_1"}]


async def test_skip_options_suppress_audit_and_notifications(engine, collaborators) -> None:
    audit, notifications, _ = collaborators
    definition = _definition(
        [WorkflowStepDefinition("a", _ok(1))],
        audit_events=lambda ctx, inp, res: ["event"],
        notifications=lambda ctx, inp, res: ["payload"],
    )
    result = await _run(
        engine, definition, WorkflowOptions(skip_audit=True, skip_notifications=True)
    )
    assert result.success
    assert result.audit_events == ()
    assert result.notifications_sent == ()
    audit.log_audit_events.assert_not_awaited()
    notifications.send_notifications.assert_not_awaited()


async def test_failed_cascade_is_counted_but_run_succeeds(engine, collaborators) -> None:
    _, _, cascades = collaborators
    cascades.apply = AsyncMock(
        side_effect=[
            ServiceResult.fail(ErrorCode.NOT_FOUND, "room not found"),
            ServiceResult.ok(None),
        ]
    )
    definition = _definition(
        [WorkflowStepDefinition("a", _ok(1))],
        cascades=lambda ctx, inp, res: [
            RoomCascade("room_1", CascadeAction.UPDATE),
            RoomCascade("room_2", CascadeAction.UPDATE),
        ],
    )
    result = await _run(engine, definition)
    assert result.success
    assert result.cascades_failed == 1
    assert cascades.apply.await_count == 2


async def test_audit_failure_does_not_fail_run(engine, collaborators) -> None:
    audit, _, _ = collaborators
    audit.log_audit_events = AsyncMock(
        return_value=ServiceResult.fail(
            ErrorCode.UNKNOWN_ERROR, "Failed to log audit events", details={"logged": ["a1"]}
        )
    )
    result = await _run(
        engine,
        _definition(
            [WorkflowStepDefinition("a", _ok(1))],
            audit_events=lambda ctx, inp, res: ["e1", "e2"],
        ),
    )
    assert result.success
    assert result.audit_events == ("a1",)


async def test_audit_exception_does_not_escape(engine, collaborators) -> None:
    audit, _, _ = collaborators
    audit.log_audit_events = AsyncMock(side_effect=RuntimeError("audit store down"))
    result = await _run(
        engine,
        _definition(
            [WorkflowStepDefinition("a", _ok(1))],
            audit_events=lambda ctx, inp, res: ["e1"],
        ),
    )
    assert result.success is True
    assert result.audit_events == ()


async def test_failed_notification_dispatch_does_not_fail_run(engine, collaborators) -> None:
    _, notifications, _ = collaborators
    notifications.send_notifications = AsyncMock(
        return_value=ServiceResult.fail(ErrorCode.UNKNOWN_ERROR, "No channel accepted")
    )
    result = await _run(
        engine,
        _definition(
            [WorkflowStepDefinition("a", _ok(1))],
            notifications=lambda ctx, inp, res: ["payload"],
        ),
    )
    assert result.success is True
    assert result.notifications_sent == ()


async def test_notification_exception_does_not_escape(engine, collaborators) -> None:
    _, notifications, _ = collaborators
    notifications.send_notifications = AsyncMock(side_effect=RuntimeError("queue down"))
    result = await _run(
        engine,
        _definition(
            [WorkflowStepDefinition("a", _ok(1))],
            notifications=lambda ctx, inp, res: ["payload"],
        ),
    )
    assert result.success is True
    assert result.notifications_sent == ()
    assert result.data == {"a": 1}


async def test_wrap_operation_side_effect_exceptions_do_not_escape(
    engine, collaborators
) -> None:
    audit, notifications, _ = collaborators
    audit.log_audit_event = AsyncMock(side_effect=RuntimeError("audit store down"))
    notifications.send_notifications = AsyncMock(side_effect=RuntimeError("queue down"))

    async def operation():
        return ServiceResult.ok({"name": "New"})

    result = await engine.wrap_operation(
        operation,
        entity_type=EntityType.TENANT,
        entity_id="t1",
        action=AuditAction.UPDATE,
        actor=ActorContext("owner_1", ActorType.OWNER, "ws_1"),
        notifications=["payload"],
    )
    assert result.success
    assert result.data == {"name": "New"}


async def test_build_output_error_rolls_back(engine) -> None:
    calls: list[str] = []

    def bad_output(results):
        raise KeyError("missing")

    result = await _run(
        engine,
        _definition(
            [WorkflowStepDefinition("a", _ok(1), rollback=_recording_rollback(calls, "a"))],
            build_output=bad_output,
        ),
    )
    assert not result.success
    assert result.error.code == ErrorCode.UNKNOWN_ERROR
    assert calls == ["a"]


async def test_execute_step_records_step_on_context(engine) -> None:
    context = create_workflow_context("test_flow", "owner_1", ActorType.OWNER, "ws_1")
    step = WorkflowStepDefinition("only", _ok("v"))

    result = await engine.execute_step(context, step, None, {})

    assert result.success
    assert len(context.steps) == 1
    record = context.steps[0]
    assert record.id == "step_1"
    assert record.name == "only"
    assert record.status == WorkflowStepStatus.COMPLETED
    assert record.result == "v"
    assert record.completed_at >= record.started_at


async def test_create_workflow_context_ids_are_unique() -> None:
    a = create_workflow_context("t", "u", ActorType.OWNER, "ws", {"k": "v"})
    b = create_workflow_context("t", "u", ActorType.OWNER, "ws")
    assert a.workflow_id != b.workflow_id
    assert a.metadata == {"k": "v"}
    assert a.steps == []


async def test_wrap_operation_audits_successful_operation(engine, collaborators) -> None:
    audit, notifications, _ = collaborators
    actor = ActorContext("owner_1", ActorType.OWNER, "ws_1")

    async def operation():
        return ServiceResult.ok({"name": "New"})

    result = await engine.wrap_operation(
        operation,
        entity_type=EntityType.TENANT,
        entity_id="t1",
        action=AuditAction.UPDATE,
        actor=actor,
        before={"name": "Old"},
        notifications=["payload"],
    )

    assert result.success
    event = audit.log_audit_event.await_args.args[0]
    assert event.after == {"name": "New"}
    assert event.fields_changed == ("name",)
    notifications.send_notifications.assert_awaited_once_with(["payload"])


async def test_wrap_operation_failure_skips_audit(engine, collaborators) -> None:
    audit, _, _ = collaborators
    actor = ActorContext("owner_1", ActorType.OWNER, "ws_1")

    async def operation():
        raise ValueError("bad")

    result = await engine.wrap_operation(
        operation,
        entity_type=EntityType.TENANT,
        entity_id="t1",
        action=AuditAction.UPDATE,
        actor=actor,
    )
    assert not result.success
    assert result.error.code == ErrorCode.UNKNOWN_ERROR
    audit.log_audit_event.assert_not_awaited()
