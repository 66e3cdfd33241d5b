"""Domain enumerations for PG/hostel entities (statuses and kinds)."""

from enum import Enum

from app.shared.enums import _ValuesMixin


class TenantStatus(_ValuesMixin, str, Enum):
    """Tenant lifecycle from move-in to checkout."""

    ACTIVE = "active"
    NOTICE_PERIOD = "notice_period"
    CHECKED_OUT = "checked_out"


class RoomStatus(_ValuesMixin, str, Enum):
    """Room availability derived from occupied vs total beds."""

    AVAILABLE = "available"
    PARTIALLY_OCCUPIED = "partially_occupied"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class BedStatus(_ValuesMixin, str, Enum):
    AVAILABLE = "available"
    OCCUPIED = "occupied"


class BillStatus(_ValuesMixin, str, Enum):
    """Bill payment state. PENDING, PARTIAL and OVERDUE count as dues."""

    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"

    @classmethod
    def unpaid(cls) -> tuple["BillStatus", ...]:
        """Statuses whose balance still counts towards tenant dues."""
        return (cls.PENDING, cls.PARTIAL, cls.OVERDUE)


class PaymentStatus(_ValuesMixin, str, Enum):
    COMPLETED = "completed"
    REFUNDED = "refunded"
    PARTIALLY_REFUNDED = "partially_refunded"


class PaymentMethod(_ValuesMixin, str, Enum):
    """Accepted payment methods and their receipt labels."""

    CASH = "cash"
    UPI = "upi"
    BANK_TRANSFER = "bank_transfer"
    CARD = "card"
    CHEQUE = "cheque"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _PAYMENT_METHOD_LABELS.get(self, self.value)


_PAYMENT_METHOD_LABELS = {
    PaymentMethod.CASH: "Cash",
    PaymentMethod.UPI: "UPI",
    PaymentMethod.BANK_TRANSFER: "Bank Transfer",
    PaymentMethod.CHEQUE: "Cheque",
    PaymentMethod.CARD: "Card",
}


class RefundStatus(_ValuesMixin, str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class ExitClearanceStatus(_ValuesMixin, str, Enum):
    """Exit clearance progress for a tenant leaving the property."""

    INITIATED = "initiated"
    PENDING_PAYMENT = "pending_payment"
    CLEARED = "cleared"
    COMPLETED = "completed"

    @classmethod
    def open(cls) -> tuple["ExitClearanceStatus", ...]:
        """Statuses that block a second clearance for the same tenant."""
        return (cls.INITIATED, cls.PENDING_PAYMENT, cls.CLEARED)


class SettlementType(_ValuesMixin, str, Enum):
    REFUND = "refund"
    ADDITIONAL_PAYMENT = "additional_payment"


class TenantStayStatus(_ValuesMixin, str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class ApprovalStatus(_ValuesMixin, str, Enum):
    """Tenant request review state."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalType(_ValuesMixin, str, Enum):
    """Kinds of tenant requests and their display labels."""

    NAME_CHANGE = "name_change"
    ADDRESS_CHANGE = "address_change"
    PHONE_CHANGE = "phone_change"
    EMAIL_CHANGE = "email_change"
    ROOM_CHANGE = "room_change"
    COMPLAINT = "complaint"
    BILL_DISPUTE = "bill_dispute"
    PAYMENT_DISPUTE = "payment_dispute"
    TENANCY_ISSUE = "tenancy_issue"
    ROOM_ISSUE = "room_issue"
    OTHER = "other"

    @property
    def label(self) -> str:
        return _APPROVAL_TYPE_LABELS[self]


_APPROVAL_TYPE_LABELS = {
    ApprovalType.NAME_CHANGE: "Name Change",
    ApprovalType.ADDRESS_CHANGE: "Address Change",
    ApprovalType.PHONE_CHANGE: "Phone Change",
    ApprovalType.EMAIL_CHANGE: "Email Change",
    ApprovalType.ROOM_CHANGE: "Room Transfer",
    ApprovalType.COMPLAINT: "Complaint Resolution",
    ApprovalType.BILL_DISPUTE: "Bill Dispute",
    ApprovalType.PAYMENT_DISPUTE: "Payment Dispute",
    ApprovalType.TENANCY_ISSUE: "Tenancy Issue",
    ApprovalType.ROOM_ISSUE: "Room Issue",
    ApprovalType.OTHER: "Other Request",
}


class ComplaintStatus(_ValuesMixin, str, Enum):
    OPEN = "open"
    ACKNOWLEDGED = "acknowledged"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"
    CLOSED = "closed"
