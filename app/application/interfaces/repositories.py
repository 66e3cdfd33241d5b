"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
Every call takes the workspace_id that scopes it; implementations never read
or write rows outside that workspace.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from app.shared.enums import EntityType, NotificationChannel

if TYPE_CHECKING:
    from app.application.dtos.audit import AuditEvent, AuditEventRecord, AuditQuery
    from app.application.dtos.notification import NotificationPayload


Row = dict[str, Any]


# Entity repository interface
class IEntityRepository(Protocol):
    """Workspace-scoped reads and writes over entity tables, keyed by EntityType.

    Filters are equality matches; a list or tuple value matches any of its items.
    Rows are plain dicts of column name to value.
    """

    async def get(self, entity_type: EntityType, entity_id: str, workspace_id: str) -> Row | None:
        """Return one row by id, or None."""

    async def find(
        self,
        entity_type: EntityType,
        workspace_id: str,
        filters: dict[str, Any] | None = None,
        *,
        limit: int | None = None,
    ) -> list[Row]:
        """Return rows matching filters, oldest first."""

    async def count(
        self,
        entity_type: EntityType,
        workspace_id: str,
        filters: dict[str, Any] | None = None,
    ) -> int:
        """Return number of rows matching filters."""

    async def insert(self, entity_type: EntityType, workspace_id: str, values: Row) -> Row:
        """Insert a row (id generated when absent) and return it."""

    async def update(
        self, entity_type: EntityType, entity_id: str, workspace_id: str, values: Row
    ) -> Row | None:
        """Update columns on one row; return the updated row or None if missing."""

    async def delete(self, entity_type: EntityType, entity_id: str, workspace_id: str) -> bool:
        """Delete one row; return whether it existed."""


# Audit event repository interface
class IAuditEventRepository(Protocol):
    """Append-only audit event store. No update or delete."""

    async def create(self, event: AuditEvent) -> str:
        """Append one event; return its id."""

    async def list(self, query: AuditQuery) -> list[AuditEventRecord]:
        """Return events for query.workspace_id (newest first)."""

    async def count(self, query: AuditQuery) -> int:
        """Return number of events matching query (ignores limit/offset)."""


# Notification repository interface
class INotificationRepository(Protocol):
    """Outbound notification queue and in-app inbox."""

    async def enqueue(
        self,
        channel: NotificationChannel,
        payload: NotificationPayload,
        extra: dict[str, Any] | None = None,
    ) -> str:
        """Insert a pending notification_queue row for one channel; return its id."""

    async def create_in_app(self, payload: NotificationPayload) -> str:
        """Insert an unread notifications row for the recipient; return its id."""
