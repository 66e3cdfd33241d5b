"""Domain layer: workflow definitions, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from app.domain.entities import WorkflowDefinition, WorkflowStepDefinition
from app.domain.enums import (
    ApprovalStatus,
    ApprovalType,
    BillStatus,
    ExitClearanceStatus,
    RoomStatus,
    TenantStatus,
)
from app.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ManageKarException,
    ResourceNotFoundException,
    UnknownEntityTypeException,
    ValidationException,
    WorkspaceContextMissingException,
)

__all__ = [
    # Entities
    "WorkflowDefinition",
    "WorkflowStepDefinition",
    # Enums
    "ApprovalStatus",
    "ApprovalType",
    "BillStatus",
    "ExitClearanceStatus",
    "RoomStatus",
    "TenantStatus",
    # Exceptions
    "AuthenticationException",
    "AuthorizationException",
    "ManageKarException",
    "ResourceNotFoundException",
    "UnknownEntityTypeException",
    "ValidationException",
    "WorkspaceContextMissingException",
]
