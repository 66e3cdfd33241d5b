"""Notification templates: NotificationType → subject/title/body/action (Jinja)."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from jinja2 import Environment, Template

from app.application.dtos.notification import RenderedNotification
from app.shared.enums import NotificationType


@dataclass(frozen=True)
class NotificationTemplate:
    subject: str
    title: str
    body: str
    action_url: str | None = None
    action_label: str | None = None


# Context: data (builder-supplied values, already display-formatted)
_DEFAULT_TEMPLATES: dict[NotificationType, NotificationTemplate] = {
    NotificationType.BILL_GENERATED: NotificationTemplate(
        subject="New Bill Generated - {{ data.bill_number }}",
        title="New Bill Generated",
        body=(
            "Your bill #{{ data.bill_number }} for {{ data.month }} has been generated. "
            "Amount: {{ data.amount }}"
        ),
        action_url="/tenant/bills/{{ data.bill_id }}",
        action_label="View Bill",
    ),
    NotificationType.PAYMENT_RECEIVED: NotificationTemplate(
        subject="Payment Received - {{ data.amount }}",
        title="Payment Confirmed",
        body=(
            "We received your payment of {{ data.amount }} for bill "
            "#{{ data.bill_number }}. Thank you!"
        ),
        action_url="/tenant/payments/{{ data.payment_id }}",
        action_label="View Receipt",
    ),
    NotificationType.PAYMENT_REMINDER: NotificationTemplate(
        subject="Payment Reminder - {{ data.amount }} due",
        title="Payment Reminder",
        body=(
            "Your payment of {{ data.amount }} for bill #{{ data.bill_number }} is due on "
            "{{ data.due_date }}. Please pay to avoid late fees."
        ),
        action_url="/tenant/bills/{{ data.bill_id }}",
        action_label="Pay Now",
    ),
    NotificationType.COMPLAINT_UPDATE: NotificationTemplate(
        subject="Complaint Update - {{ data.complaint_title }}",
        title="Complaint Status Updated",
        body=(
            'Your complaint "{{ data.complaint_title }}" status has been updated to: '
            "{{ data.new_status }}"
        ),
        action_url="/tenant/complaints/{{ data.complaint_id }}",
        action_label="View Details",
    ),
    NotificationType.APPROVAL_REQUIRED: NotificationTemplate(
        subject="Approval Required - {{ data.request_type }}",
        title="New Approval Request",
        body=(
            "{{ data.tenant_name }} has requested a {{ data.request_type }}. "
            "Please review and approve/reject."
        ),
        action_url="/approvals/{{ data.approval_id }}",
        action_label="Review Request",
    ),
    NotificationType.APPROVAL_DECISION: NotificationTemplate(
        subject="Request {{ data.decision }} - {{ data.request_type }}",
        title="Request {{ data.decision }}",
        body=(
            "Your {{ data.request_type }} request has been {{ data.decision | lower }}. "
            "{{ data.notes or '' }}"
        ),
        action_url="/tenant/approvals/{{ data.approval_id }}",
        action_label="View Details",
    ),
    NotificationType.EXIT_CLEARANCE_INITIATED: NotificationTemplate(
        subject="Exit Clearance Initiated - {{ data.tenant_name }}",
        title="Exit Clearance Started",
        body=(
            "Exit clearance has been initiated for {{ data.tenant_name }}. "
            "Expected exit: {{ data.exit_date }}"
        ),
        action_url="/exit-clearance/{{ data.clearance_id }}",
        action_label="View Clearance",
    ),
    NotificationType.EXIT_CLEARANCE_COMPLETED: NotificationTemplate(
        subject="Exit Clearance Completed - {{ data.tenant_name }}",
        title="Exit Clearance Complete",
        body=(
            "Exit clearance for {{ data.tenant_name }} has been completed. "
            "Final settlement: {{ data.settlement_amount }}"
        ),
        action_url="/exit-clearance/{{ data.clearance_id }}",
        action_label="View Summary",
    ),
    NotificationType.WELCOME: NotificationTemplate(
        subject="Welcome to {{ data.property_name }}!",
        title="Welcome!",
        body=(
            "Welcome to {{ data.property_name }}! Your tenant portal is now active. "
            "You can view bills, raise complaints, and more."
        ),
        action_url="/tenant/dashboard",
        action_label="Get Started",
    ),
    NotificationType.INVITATION: NotificationTemplate(
        subject="You're invited to join {{ data.workspace_name }}",
        title="Invitation",
        body=(
            "{{ data.inviter_name }} has invited you to join {{ data.workspace_name }} "
            "as a {{ data.role }}. Click below to accept."
        ),
        action_url="/accept-invite?token={{ data.token }}",
        action_label="Accept Invitation",
    ),
}


class NotificationTemplateRenderer:
    """Renders subject, title, body and call to action for a notification type."""

    def __init__(
        self,
        templates: dict[NotificationType, NotificationTemplate] | None = None,
    ) -> None:
        """Initialize with optional template dict; falls back to _DEFAULT_TEMPLATES."""
        self._templates = templates or _DEFAULT_TEMPLATES
        self._env = Environment(autoescape=False)
        self._compiled: dict[NotificationType, tuple[Template | None, ...]] = {}
        for key, tpl in self._templates.items():
            self._compiled[key] = tuple(
                self._env.from_string(part) if part is not None else None
                for part in (tpl.subject, tpl.title, tpl.body, tpl.action_url)
            )

    def render(
        self, notification_type: NotificationType, data: dict[str, Any]
    ) -> RenderedNotification:
        """Render the template for notification_type. Raises KeyError if unknown."""
        if notification_type not in self._compiled:
            raise KeyError(f"Unknown notification template: {notification_type}")
        subject_tpl, title_tpl, body_tpl, url_tpl = self._compiled[notification_type]
        ctx = {"data": data}
        return RenderedNotification(
            subject=subject_tpl.render(**ctx),
            title=title_tpl.render(**ctx),
            body=body_tpl.render(**ctx).strip(),
            action_url=url_tpl.render(**ctx) if url_tpl is not None else None,
            action_label=self._templates[notification_type].action_label,
        )


@lru_cache
def get_template_renderer() -> NotificationTemplateRenderer:
    """Return the shared renderer with the default templates."""
    return NotificationTemplateRenderer()
