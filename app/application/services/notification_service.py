"""Notification service: payload builders and channel dispatch.

Builders return fully rendered, immutable payloads. NotificationService
hands each payload to the sender registered for every requested channel;
a channel without a sender is logged and skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from app.application.dtos.notification import NotificationPayload
from app.application.dtos.service_result import ErrorCode, ServiceResult
from app.application.interfaces.services import INotificationChannelSender
from app.application.services.notification_templates import get_template_renderer
from app.shared.enums import (
    NotificationChannel,
    NotificationPriority,
    NotificationType,
    RecipientType,
)
from app.shared.telemetry.logging import get_logger

EMAIL_AND_IN_APP = (NotificationChannel.EMAIL, NotificationChannel.IN_APP)
EMAIL_WHATSAPP_AND_IN_APP = (
    NotificationChannel.EMAIL,
    NotificationChannel.WHATSAPP,
    NotificationChannel.IN_APP,
)


def build_notification(
    notification_type: NotificationType,
    recipient_id: str,
    recipient_type: RecipientType,
    channels: tuple[NotificationChannel, ...],
    data: Mapping[str, Any],
    *,
    priority: NotificationPriority = NotificationPriority.NORMAL,
    contact: str | None = None,
    workspace_id: str | None = None,
) -> NotificationPayload:
    """Render the template for notification_type and wrap it in a payload."""
    values = {k: v for k, v in data.items() if v is not None}
    return NotificationPayload(
        type=notification_type,
        recipient_id=recipient_id,
        recipient_type=recipient_type,
        channels=channels,
        content=get_template_renderer().render(notification_type, values),
        data=values,
        priority=priority,
        recipient_contact=contact,
        workspace_id=workspace_id,
    )


def build_bill_notification(
    tenant_id: str,
    *,
    bill_id: str,
    bill_number: str,
    amount: str,
    month: str,
    contact: str | None = None,
    workspace_id: str | None = None,
) -> NotificationPayload:
    return build_notification(
        NotificationType.BILL_GENERATED,
        tenant_id,
        RecipientType.TENANT,
        EMAIL_AND_IN_APP,
        {"bill_id": bill_id, "bill_number": bill_number, "amount": amount, "month": month},
        contact=contact,
        workspace_id=workspace_id,
    )


def build_payment_notification(
    tenant_id: str,
    *,
    payment_id: str,
    amount: str,
    bill_number: str,
    whatsapp_message: str | None = None,
    contact: str | None = None,
    workspace_id: str | None = None,
) -> NotificationPayload:
    """Payment confirmation on email, WhatsApp and in-app.

    whatsapp_message, when given, replaces the rendered body on the WhatsApp
    channel (the full receipt text).
    """
    return build_notification(
        NotificationType.PAYMENT_RECEIVED,
        tenant_id,
        RecipientType.TENANT,
        EMAIL_WHATSAPP_AND_IN_APP,
        {
            "payment_id": payment_id,
            "amount": amount,
            "bill_number": bill_number,
            "whatsapp_message": whatsapp_message,
        },
        contact=contact,
        workspace_id=workspace_id,
    )


def build_payment_reminder_notification(
    tenant_id: str,
    *,
    bill_id: str,
    bill_number: str,
    amount: str,
    due_date: str,
    whatsapp_message: str | None = None,
    contact: str | None = None,
    workspace_id: str | None = None,
) -> NotificationPayload:
    return build_notification(
        NotificationType.PAYMENT_REMINDER,
        tenant_id,
        RecipientType.TENANT,
        EMAIL_WHATSAPP_AND_IN_APP,
        {
            "bill_id": bill_id,
            "bill_number": bill_number,
            "amount": amount,
            "due_date": due_date,
            "whatsapp_message": whatsapp_message,
        },
        contact=contact,
        workspace_id=workspace_id,
    )


def build_complaint_update_notification(
    tenant_id: str,
    *,
    complaint_id: str,
    complaint_title: str,
    new_status: str,
    workspace_id: str | None = None,
) -> NotificationPayload:
    return build_notification(
        NotificationType.COMPLAINT_UPDATE,
        tenant_id,
        RecipientType.TENANT,
        (NotificationChannel.IN_APP,),
        {
            "complaint_id": complaint_id,
            "complaint_title": complaint_title,
            "new_status": new_status,
        },
        workspace_id=workspace_id,
    )


def build_approval_request_notification(
    owner_id: str,
    *,
    approval_id: str,
    tenant_name: str,
    request_type: str,
    priority: NotificationPriority = NotificationPriority.HIGH,
    workspace_id: str | None = None,
) -> NotificationPayload:
    return build_notification(
        NotificationType.APPROVAL_REQUIRED,
        owner_id,
        RecipientType.OWNER,
        EMAIL_AND_IN_APP,
        {"approval_id": approval_id, "tenant_name": tenant_name, "request_type": request_type},
        priority=priority,
        workspace_id=workspace_id,
    )


def build_approval_decision_notification(
    tenant_id: str,
    *,
    approval_id: str,
    request_type: str,
    approved: bool,
    notes: str | None = None,
    workspace_id: str | None = None,
) -> NotificationPayload:
    return build_notification(
        NotificationType.APPROVAL_DECISION,
        tenant_id,
        RecipientType.TENANT,
        EMAIL_AND_IN_APP,
        {
            "approval_id": approval_id,
            "request_type": request_type,
            "decision": "Approved" if approved else "Rejected",
            "notes": notes,
        },
        priority=NotificationPriority.HIGH,
        workspace_id=workspace_id,
    )


def build_exit_clearance_notification(
    recipient_id: str,
    recipient_type: RecipientType,
    *,
    completed: bool,
    clearance_id: str,
    tenant_name: str,
    exit_date: str | None = None,
    settlement_amount: str | None = None,
    workspace_id: str | None = None,
) -> NotificationPayload:
    """Exit clearance notice; completed selects the completion template."""
    return build_notification(
        NotificationType.EXIT_CLEARANCE_COMPLETED
        if completed
        else NotificationType.EXIT_CLEARANCE_INITIATED,
        recipient_id,
        recipient_type,
        EMAIL_AND_IN_APP,
        {
            "clearance_id": clearance_id,
            "tenant_name": tenant_name,
            "exit_date": exit_date,
            "settlement_amount": settlement_amount,
        },
        priority=NotificationPriority.HIGH,
        workspace_id=workspace_id,
    )


def build_welcome_notification(
    tenant_id: str,
    *,
    property_name: str,
    tenant_name: str,
    contact: str | None = None,
    workspace_id: str | None = None,
) -> NotificationPayload:
    return build_notification(
        NotificationType.WELCOME,
        tenant_id,
        RecipientType.TENANT,
        EMAIL_AND_IN_APP,
        {"property_name": property_name, "tenant_name": tenant_name},
        contact=contact,
        workspace_id=workspace_id,
    )


class NotificationService:
    """Dispatches payloads to per-channel senders (implements INotificationService)."""

    def __init__(
        self,
        senders: Mapping[NotificationChannel, INotificationChannelSender],
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self._senders = dict(senders)
        self._logger = logger or get_logger(__name__)

    async def send_notification(self, payload: NotificationPayload) -> ServiceResult[str]:
        """Send on every requested channel; return the dispatch ids joined by ','.

        A channel that fails is logged and left out of the ids.
        """
        ids: list[str] = []
        try:
            for channel in payload.channels:
                sender = self._senders.get(channel)
                if sender is None:
                    self._logger.warning(
                        "No sender registered for channel %s; skipping %s to %s",
                        channel.value,
                        payload.type.value,
                        payload.recipient_id,
                    )
                    continue
                result = await sender.send(payload)
                if result.success and result.data:
                    ids.append(result.data)
                else:
                    self._logger.warning(
                        "Notification %s to %s not sent on %s: %s",
                        payload.type.value,
                        payload.recipient_id,
                        channel.value,
                        result.error.message if result.error else "no dispatch id",
                    )
        except Exception as exc:
            self._logger.exception(
                "Exception sending notification %s to %s",
                payload.type.value,
                payload.recipient_id,
            )
            return ServiceResult.fail(
                ErrorCode.UNKNOWN_ERROR, "Exception sending notification", cause=exc
            )
        return ServiceResult.ok(",".join(ids))

    async def send_notifications(
        self, payloads: list[NotificationPayload]
    ) -> ServiceResult[list[str]]:
        """Send payloads in order; return the ids of those that went out."""
        sent: list[str] = []
        for payload in payloads:
            result = await self.send_notification(payload)
            if result.success and result.data:
                sent.append(result.data)
        return ServiceResult.ok(sent)
