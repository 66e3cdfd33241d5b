"""Pytest configuration and fixtures for managekar.

Workflow tests run against in-memory repositories that follow the
repository protocols (workspace-scoped, equality filters, rows as dicts).
HTTP tests use app.main:app with the write-path dependencies overridden by
the same in-memory stores.
"""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_BACKEND", "memory")

from copy import deepcopy
from datetime import date
from decimal import Decimal
from typing import Any

import pytest
from httpx import ASGITransport, AsyncClient

from app.api.v1.dependencies import (
    get_audit_service,
    get_entity_repository,
    get_notification_service_for_write,
    get_workflow_engine,
)
from app.application.dtos import AuditEvent, AuditEventRecord, AuditQuery, NotificationPayload
from app.application.services.audit_service import AuditService
from app.application.services.notification_service import NotificationService
from app.application.use_cases.workflows import (
    ApprovalWorkflows,
    ExitWorkflows,
    PaymentWorkflows,
    TenantWorkflows,
)
from app.core.config import get_settings
from app.infrastructure.persistence import database
from app.infrastructure.persistence.repositories import CascadeApplier
from app.infrastructure.services import WorkflowEngine, build_channel_senders
from app.main import app
from app.shared.context import ActorContext
from app.shared.enums import ActorType, EntityType, NotificationChannel
from app.shared.utils.generators import generate_cuid

WORKSPACE_ID = "ws_test"
OWNER_ID = "owner_1"


class InMemoryEntityRepository:
    """Entity rows keyed by (entity type, workspace); returns copies like a database would."""

    def __init__(self) -> None:
        self.tables: dict[EntityType, dict[str, dict[str, Any]]] = {}
        self.fail_on: set[tuple[str, EntityType]] = set()

    def _table(self, entity_type: EntityType) -> dict[str, dict[str, Any]]:
        return self.tables.setdefault(entity_type, {})

    def _check(self, op: str, entity_type: EntityType) -> None:
        if (op, entity_type) in self.fail_on:
            raise RuntimeError(f"{op} {entity_type.value} failed")

    @staticmethod
    def _matches(row: dict[str, Any], workspace_id: str, filters: dict[str, Any] | None) -> bool:
        if row.get("workspace_id") != workspace_id:
            return False
        for key, expected in (filters or {}).items():
            if isinstance(expected, (list, tuple)):
                if row.get(key) not in expected:
                    return False
            elif row.get(key) != expected:
                return False
        return True

    def seed(self, entity_type: EntityType, workspace_id: str = WORKSPACE_ID, **values: Any) -> dict:
        row = {"id": values.pop("id", None) or generate_cuid(), "workspace_id": workspace_id, **values}
        self._table(entity_type)[row["id"]] = row
        return deepcopy(row)

    def row(self, entity_type: EntityType, entity_id: str) -> dict[str, Any] | None:
        return self._table(entity_type).get(entity_id)

    async def get(self, entity_type, entity_id, workspace_id):
        self._check("get", entity_type)
        row = self._table(entity_type).get(entity_id)
        if row is None or row.get("workspace_id") != workspace_id:
            return None
        return deepcopy(row)

    async def find(self, entity_type, workspace_id, filters=None, *, limit=None):
        self._check("find", entity_type)
        rows = [
            deepcopy(r)
            for r in self._table(entity_type).values()
            if self._matches(r, workspace_id, filters)
        ]
        return rows[:limit] if limit is not None else rows

    async def count(self, entity_type, workspace_id, filters=None):
        self._check("count", entity_type)
        return sum(1 for r in self._table(entity_type).values() if self._matches(r, workspace_id, filters))

    async def insert(self, entity_type, workspace_id, values):
        self._check("insert", entity_type)
        row = {**values, "workspace_id": workspace_id}
        row["id"] = row.get("id") or generate_cuid()
        self._table(entity_type)[row["id"]] = row
        return deepcopy(row)

    async def update(self, entity_type, entity_id, workspace_id, values):
        self._check("update", entity_type)
        row = self._table(entity_type).get(entity_id)
        if row is None or row.get("workspace_id") != workspace_id:
            return None
        row.update(values)
        return deepcopy(row)

    async def delete(self, entity_type, entity_id, workspace_id):
        self._check("delete", entity_type)
        row = self._table(entity_type).get(entity_id)
        if row is None or row.get("workspace_id") != workspace_id:
            return False
        del self._table(entity_type)[entity_id]
        return True


class InMemoryAuditEventRepository:
    """Append-only list of events; list() filters like the SQL repository."""

    def __init__(self) -> None:
        self.events: list[tuple[str, AuditEvent]] = []

    async def create(self, event: AuditEvent) -> str:
        event_id = f"audit_{len(self.events) + 1}"
        self.events.append((event_id, event))
        return event_id

    def _matching(self, query: AuditQuery) -> list[AuditEventRecord]:
        records = []
        for event_id, e in self.events:
            if e.workspace_id != query.workspace_id:
                continue
            if query.entity_type and e.entity_type != query.entity_type:
                continue
            if query.entity_id and e.entity_id != query.entity_id:
                continue
            if query.actor_id and e.actor_id != query.actor_id:
                continue
            if query.action and e.action != query.action:
                continue
            records.append(
                AuditEventRecord(
                    id=event_id,
                    entity_type=e.entity_type.value,
                    entity_id=e.entity_id,
                    action=e.action.value,
                    actor_id=e.actor_id,
                    actor_type=e.actor_type.value,
                    workspace_id=e.workspace_id,
                    before=e.before,
                    after=e.after,
                    fields_changed=list(e.fields_changed),
                    metadata=e.metadata,
                    ip_address=e.ip_address,
                    user_agent=e.user_agent,
                    occurred_at=e.occurred_at,
                )
            )
        return list(reversed(records))

    async def list(self, query: AuditQuery) -> list[AuditEventRecord]:
        return self._matching(query)[query.offset : query.offset + query.limit]

    async def count(self, query: AuditQuery) -> int:
        return len(self._matching(query))

    def for_entity(self, entity_type: EntityType, entity_id: str) -> list[AuditEvent]:
        return [e for _, e in self.events if e.entity_type == entity_type and e.entity_id == entity_id]


class InMemoryNotificationRepository:
    def __init__(self) -> None:
        self.queued: list[tuple[NotificationChannel, NotificationPayload, dict[str, Any]]] = []
        self.in_app: list[NotificationPayload] = []

    async def enqueue(self, channel, payload, extra=None) -> str:
        self.queued.append((channel, payload, dict(extra or {})))
        return f"queue_{len(self.queued)}"

    async def create_in_app(self, payload) -> str:
        self.in_app.append(payload)
        return f"inapp_{len(self.in_app)}"


@pytest.fixture
def entities() -> InMemoryEntityRepository:
    return InMemoryEntityRepository()


@pytest.fixture
def audit_repo() -> InMemoryAuditEventRepository:
    return InMemoryAuditEventRepository()


@pytest.fixture
def notification_repo() -> InMemoryNotificationRepository:
    return InMemoryNotificationRepository()


@pytest.fixture
def notification_service(notification_repo) -> NotificationService:
    return NotificationService(build_channel_senders(notification_repo))


@pytest.fixture
def engine(entities, audit_repo, notification_service) -> WorkflowEngine:
    return WorkflowEngine(AuditService(audit_repo), notification_service, CascadeApplier(entities))


@pytest.fixture
def actor() -> ActorContext:
    return ActorContext(
        actor_id=OWNER_ID,
        actor_type=ActorType.OWNER,
        workspace_id=WORKSPACE_ID,
        ip_address="10.0.0.1",
        user_agent="pytest",
    )


@pytest.fixture
def tenant_workflows(engine, entities) -> TenantWorkflows:
    return TenantWorkflows(engine, entities)


@pytest.fixture
def payment_workflows(engine, entities) -> PaymentWorkflows:
    return PaymentWorkflows(engine, entities)


@pytest.fixture
def exit_workflows(engine, entities) -> ExitWorkflows:
    return ExitWorkflows(engine, entities)


@pytest.fixture
def approval_workflows(engine, entities, tenant_workflows) -> ApprovalWorkflows:
    return ApprovalWorkflows(engine, entities, tenants=tenant_workflows)


@pytest.fixture
def pg(entities) -> dict[str, dict]:
    """One property with a two-bed room (one bed free) and an empty single room."""
    prop = entities.seed(
        EntityType.PROPERTY,
        name="Sunrise PG",
        address="12 MG Road, Bengaluru",
        owner_name="Ravi",
        owner_phone="9876543210",
    )
    room = entities.seed(
        EntityType.ROOM,
        property_id=prop["id"],
        room_number="101",
        total_beds=2,
        occupied_beds=1,
        status="partially_occupied",
    )
    single = entities.seed(
        EntityType.ROOM,
        property_id=prop["id"],
        room_number="102",
        total_beds=1,
        occupied_beds=0,
        status="available",
    )
    bed = entities.seed(
        EntityType.BED, room_id=room["id"], bed_number="B", status="available", current_tenant_id=None
    )
    return {"property": prop, "room": room, "single": single, "bed": bed}


@pytest.fixture
def resident(entities, pg) -> dict:
    """Active tenant in room 101 with a 10,000 deposit."""
    return entities.seed(
        EntityType.TENANT,
        property_id=pg["property"]["id"],
        room_id=pg["room"]["id"],
        bed_id=None,
        user_id="user_tenant_1",
        name="Asha Rao",
        phone="9123456780",
        email="asha@example.com",
        status="active",
        check_in_date=date(2025, 1, 1),
        monthly_rent=Decimal("8000"),
        security_deposit=Decimal("10000"),
        advance_balance=Decimal("0"),
    )


@pytest.fixture
async def client(entities, audit_repo, engine, notification_service) -> AsyncClient:
    """Async HTTP client against the FastAPI app with in-memory stores."""
    app.dependency_overrides[get_entity_repository] = lambda: entities
    app.dependency_overrides[get_workflow_engine] = lambda: engine
    app.dependency_overrides[get_notification_service_for_write] = lambda: notification_service
    app.dependency_overrides[get_audit_service] = lambda: AuditService(audit_repo)
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def owner_headers() -> dict[str, str]:
    return {"X-Workspace-ID": WORKSPACE_ID, "X-Actor-ID": OWNER_ID, "X-Actor-Type": "owner"}


@pytest.fixture
async def db_session():
    """Database session for repository integration tests. Rolls back after test.

    Requires DATABASE_BACKEND=postgres and DATABASE_URL; skips otherwise.
    Run without DB via: pytest -m 'not requires_db'.
    """
    if get_settings().database_backend != "postgres":
        pytest.skip("Postgres not configured: set DATABASE_BACKEND=postgres and DATABASE_URL")
    db_engine = database.get_engine()
    async with db_engine.begin() as conn:
        await conn.run_sync(database.Base.metadata.create_all)

    async with database.AsyncSessionLocal() as session:
        yield session
        await session.rollback()
