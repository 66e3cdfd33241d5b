"""Notification channel senders: queued email/push, WhatsApp link, in-app inbox."""

from __future__ import annotations

import logging

from app.application.dtos.notification import NotificationPayload
from app.application.dtos.service_result import ErrorCode, ServiceResult
from app.application.interfaces.repositories import INotificationRepository
from app.application.services.whatsapp import (
    DEFAULT_COUNTRY_CODE,
    WHATSAPP_LINK_BASE,
    generate_whatsapp_link,
)
from app.shared.enums import NotificationChannel
from app.shared.telemetry.logging import get_logger

QUEUED_FALLBACK_ID = "queued-fallback"
IN_APP_FALLBACK_ID = "inapp-fallback"


class QueuedChannelSender:
    """Queues the payload for a channel with no live provider (email, push).

    Nothing is delivered from here; a worker outside this service drains
    notification_queue. Queue insert failures are logged and reported as
    QUEUED_FALLBACK_ID.
    """

    def __init__(
        self,
        repository: INotificationRepository,
        channel: NotificationChannel,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.repository = repository
        self.channel = channel
        self._logger = logger or get_logger(__name__)

    async def send(self, payload: NotificationPayload) -> ServiceResult[str]:
        subject_preview = (payload.content.subject or "")[:80]
        self._logger.info(
            "Notify %s: queueing %s for %s (subject=%r)",
            self.channel.value,
            payload.type.value,
            payload.recipient_id,
            subject_preview,
        )
        try:
            queue_id = await self.repository.enqueue(self.channel, payload)
        except Exception:
            self._logger.warning(
                "Queue insert failed for %s on %s; continuing",
                payload.type.value,
                self.channel.value,
                exc_info=True,
            )
            return ServiceResult.ok(QUEUED_FALLBACK_ID)
        return ServiceResult.ok(queue_id)


class WhatsAppLinkChannelSender:
    """Builds a click-to-chat link and queues it for the user to open.

    No delivery guarantee and no receipt: the message only goes out if a
    person clicks the link. The message text is data["whatsapp_message"]
    when the builder supplied one, else the rendered title and body.
    """

    def __init__(
        self,
        repository: INotificationRepository,
        *,
        link_base: str = WHATSAPP_LINK_BASE,
        country_code: str = DEFAULT_COUNTRY_CODE,
        logger: logging.Logger | None = None,
    ) -> None:
        self.repository = repository
        self.link_base = link_base
        self.country_code = country_code
        self._logger = logger or get_logger(__name__)

    def message_for(self, payload: NotificationPayload) -> str:
        custom = payload.data.get("whatsapp_message")
        if custom:
            return str(custom)
        return f"*{payload.content.title}*\n\n{payload.content.body}"

    async def send(self, payload: NotificationPayload) -> ServiceResult[str]:
        if not payload.recipient_contact:
            return ServiceResult.fail(
                ErrorCode.VALIDATION_ERROR,
                "No phone number for WhatsApp notification",
                field="recipient_contact",
            )
        link = generate_whatsapp_link(
            payload.recipient_contact,
            self.message_for(payload),
            base_url=self.link_base,
            country_code=self.country_code,
        )
        self._logger.debug("WhatsApp link for %s: %s", payload.recipient_id, link)
        try:
            queue_id = await self.repository.enqueue(
                NotificationChannel.WHATSAPP, payload, {"whatsapp_link": link}
            )
        except Exception:
            self._logger.warning(
                "Queue insert failed for WhatsApp %s; continuing",
                payload.type.value,
                exc_info=True,
            )
            return ServiceResult.ok(QUEUED_FALLBACK_ID)
        return ServiceResult.ok(queue_id)


class InAppChannelSender:
    """Writes an unread row to the recipient's in-app inbox."""

    def __init__(
        self,
        repository: INotificationRepository,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        self.repository = repository
        self._logger = logger or get_logger(__name__)

    async def send(self, payload: NotificationPayload) -> ServiceResult[str]:
        try:
            notification_id = await self.repository.create_in_app(payload)
        except Exception:
            self._logger.warning(
                "In-app notification failed for %s to %s",
                payload.type.value,
                payload.recipient_id,
                exc_info=True,
            )
            return ServiceResult.ok(IN_APP_FALLBACK_ID)
        return ServiceResult.ok(notification_id)


def build_channel_senders(
    repository: INotificationRepository,
    *,
    link_base: str = WHATSAPP_LINK_BASE,
    country_code: str = DEFAULT_COUNTRY_CODE,
) -> dict[NotificationChannel, QueuedChannelSender | WhatsAppLinkChannelSender | InAppChannelSender]:
    """Return the default sender for every channel, all backed by repository."""
    return {
        NotificationChannel.EMAIL: QueuedChannelSender(repository, NotificationChannel.EMAIL),
        NotificationChannel.PUSH: QueuedChannelSender(repository, NotificationChannel.PUSH),
        NotificationChannel.WHATSAPP: WhatsAppLinkChannelSender(
            repository, link_base=link_base, country_code=country_code
        ),
        NotificationChannel.IN_APP: InAppChannelSender(repository),
    }
