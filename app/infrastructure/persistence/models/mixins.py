"""SQLAlchemy mixins for common model patterns (DRY).

Provides: CuidMixin, WorkspaceMixin, TimestampMixin, and the combined
WorkspaceModel used by every entity table, plus
status_check for enum-backed status columns.
"""

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from app.shared.utils.generators import generate_cuid


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class WorkspaceMixin:
    """Mixin for workspace-scoped models.

    Workspaces are owned by the authentication collaborator, so workspace_id
    is an indexed plain column rather than a foreign key.
    """

    @declared_attr
    def workspace_id(cls) -> Mapped[str]:
        return mapped_column(String, nullable=False, index=True)


class TimestampMixin:
    """Mixin for created_at and updated_at (server defaults, timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class WorkspaceModel(CuidMixin, WorkspaceMixin, TimestampMixin):
    """Combined mixin: CUID + workspace_id + created_at/updated_at."""

    __abstract__ = True


def status_check(table: str, values: list[str], column: str = "status") -> CheckConstraint:
    """CHECK constraint restricting column to values (e.g. an enum's .values())."""
    allowed = ", ".join("'{}'".format(v.replace("'", "''")) for v in values)
    return CheckConstraint(f"{column} IN ({allowed})", name=f"{table}_{column}_check")
