"""Service result and error taxonomy shared by every service call.

Services never raise across their boundary; they return a ServiceResult
that is either ok (data) or failed (ServiceError with a stable code).
"""

from dataclasses import dataclass
from dataclasses import field as dataclass_field
from enum import Enum
from typing import Any

from app.shared.enums import _ValuesMixin


class ErrorCode(_ValuesMixin, str, Enum):
    """Stable error codes the UI maps to user-facing copy."""

    # Generic
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"

    # Tenant
    TENANT_HAS_DUES = "TENANT_HAS_DUES"
    TENANT_ALREADY_EXITED = "TENANT_ALREADY_EXITED"
    ROOM_AT_CAPACITY = "ROOM_AT_CAPACITY"
    TENANT_STATUS_INVALID = "TENANT_STATUS_INVALID"
    ROOM_TRANSFER_INVALID = "ROOM_TRANSFER_INVALID"

    # Payment
    PAYMENT_EXCEEDS_DUE = "PAYMENT_EXCEEDS_DUE"
    INVALID_PAYMENT_METHOD = "INVALID_PAYMENT_METHOD"
    BILL_ALREADY_PAID = "BILL_ALREADY_PAID"
    BILL_AMOUNT_MISMATCH = "BILL_AMOUNT_MISMATCH"
    ADVANCE_BALANCE_INSUFFICIENT = "ADVANCE_BALANCE_INSUFFICIENT"
    REFUND_EXCEEDS_BALANCE = "REFUND_EXCEEDS_BALANCE"
    REFUND_ALREADY_PROCESSED = "REFUND_ALREADY_PROCESSED"
    SECURITY_DEPOSIT_INVALID = "SECURITY_DEPOSIT_INVALID"

    # Exit
    EXIT_ALREADY_INITIATED = "EXIT_ALREADY_INITIATED"
    EXIT_INCOMPLETE = "EXIT_INCOMPLETE"
    PENDING_DUES = "PENDING_DUES"
    CLEARANCE_CHECKLIST_INCOMPLETE = "CLEARANCE_CHECKLIST_INCOMPLETE"

    # Workflow
    WORKFLOW_STEP_FAILED = "WORKFLOW_STEP_FAILED"
    WORKFLOW_CANCELLED = "WORKFLOW_CANCELLED"
    WORKFLOW_TIMEOUT = "WORKFLOW_TIMEOUT"

    # Approval
    APPROVAL_EXPIRED = "APPROVAL_EXPIRED"
    APPROVAL_ALREADY_PROCESSED = "APPROVAL_ALREADY_PROCESSED"
    APPROVAL_INVALID_STATE = "APPROVAL_INVALID_STATE"

    # Concurrency
    CONCURRENT_MODIFICATION = "CONCURRENT_MODIFICATION"


@dataclass(frozen=True)
class ServiceError:
    """Stable error tag plus human message and optional originating exception."""

    code: ErrorCode
    message: str
    field: str | None = None
    details: dict[str, Any] = dataclass_field(default_factory=dict)
    cause: BaseException | None = dataclass_field(default=None, compare=False, repr=False)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"code": self.code.value, "message": self.message}
        if self.field:
            out["field"] = self.field
        if self.details:
            out["details"] = self.details
        return out


@dataclass(frozen=True)
class ServiceResult[T]:
    """Either {success: True, data} or {success: False, error}."""

    success: bool
    data: T | None = None
    error: ServiceError | None = None

    @classmethod
    def ok(cls, data: T | None = None) -> "ServiceResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(
        cls,
        code: ErrorCode | ServiceError,
        message: str = "",
        *,
        field: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> "ServiceResult[T]":
        """Build a failed result from a ServiceError or from its parts."""
        if isinstance(code, ServiceError):
            return cls(success=False, error=code)
        return cls(
            success=False,
            error=ServiceError(
                code=code,
                message=message,
                field=field,
                details=details or {},
                cause=cause,
            ),
        )
