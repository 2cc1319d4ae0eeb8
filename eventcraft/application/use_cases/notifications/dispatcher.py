"""Creation and multi-channel delivery of notifications."""

from __future__ import annotations

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from concurrent.futures import TimeoutError as FuturesTimeoutError
from datetime import datetime

from sqlalchemy.orm import Session

from eventcraft.config import Settings
from eventcraft.domain.entities import (
    CHANNEL_EMAIL,
    CHANNEL_IN_APP,
    CHANNEL_SMS,
    NOTIFICATION_CATEGORIES,
    NOTIFICATION_PRIORITIES,
    NOTIFICATION_STATUS_PENDING,
    NOTIFICATION_STATUS_SENT,
    Event,
    Notification,
    NotificationPage,
    User,
    determine_channels,
)
from eventcraft.infrastructure.channels import (
    ChannelMessage,
    ChannelResult,
    DeliveryChannel,
    SendGridEmailChannel,
    TwilioSmsChannel,
)
from eventcraft.infrastructure.realtime import NotificationPublisher, notification_publisher
from eventcraft.infrastructure.repositories import (
    EventRepository,
    NotificationRepository,
    UserRepository,
)
from eventcraft.utils import ensure_app_timezone, now_in_app_timezone

from .errors import NotificationNotFoundError, NotificationValidationError
from .inputs import BulkNotificationInput, NotificationInput
from .templates import render_email, render_sms

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Single entry point used by domain code to originate notifications.

    The dispatcher resolves the channels a recipient can be reached on,
    persists the record and fans the delivery out to the email and SMS
    providers. Provider calls run concurrently on worker threads, each one
    bounded by ``Settings.channel_timeout_seconds``; every database write
    happens on the caller's thread with the caller's session.
    """

    def __init__(
        self,
        session: Session,
        settings: Settings,
        *,
        email_channel: DeliveryChannel | None = None,
        sms_channel: DeliveryChannel | None = None,
        publisher: NotificationPublisher | None = None,
    ) -> None:
        self.session = session
        self.settings = settings
        self.notifications = NotificationRepository(session)
        self.users = UserRepository(session)
        self.events = EventRepository(session)
        self.email_channel = email_channel or SendGridEmailChannel(settings)
        self.sms_channel = sms_channel or TwilioSmsChannel(settings)
        self.publisher = publisher or notification_publisher
        self.channel_timeout = settings.channel_timeout_seconds

    def create_notification(self, data: NotificationInput) -> Notification:
        """Persist a notification and deliver it now unless it is scheduled later."""

        self._validate(data)

        recipient = self.users.get(data.recipient_id)
        if recipient is None:
            raise NotificationNotFoundError("Recipient not found")

        channels = determine_channels(
            recipient.preferences, data.channels, recipient.has_phone
        )
        now = now_in_app_timezone()
        scheduled_for = ensure_app_timezone(data.scheduled_for)
        notification = Notification(
            id=None,
            recipient_id=recipient.id,
            title=data.title.strip(),
            message=data.message.strip(),
            category=data.category,
            status=(
                NOTIFICATION_STATUS_PENDING
                if channels.enabled_names()
                else NOTIFICATION_STATUS_SENT
            ),
            channels=channels,
            related_event_id=data.related_event_id,
            related_ticket_id=data.related_ticket_id,
            action=data.action,
            metadata=dict(data.metadata or {}),
            priority=data.priority,
            expires_at=ensure_app_timezone(data.expires_at),
            scheduled_for=scheduled_for or now,
            created_at=now,
        )
        saved = self.notifications.create(notification)
        logger.info(
            "Created %s notification %s for user %s (channels: %s)",
            saved.category,
            saved.id,
            saved.recipient_id,
            ", ".join(saved.channels.enabled_names()) or "none",
        )

        if scheduled_for is None or scheduled_for <= now:
            return self.send_notification(saved.id)
        return saved

    def send_notification(self, notification_id: int) -> Notification:
        """Attempt delivery on every enabled channel that has not been sent yet.

        Channel failures are recorded on the notification and logged; they are
        never raised to the caller.
        """

        notification = self.notifications.get(notification_id)
        if notification is None:
            raise NotificationNotFoundError("Notification not found")

        recipient = self.users.get(notification.recipient_id)
        event = (
            self.events.get(notification.related_event_id)
            if notification.related_event_id is not None
            else None
        )

        if notification.channels.in_app.enabled and not notification.channels.in_app.sent:
            self._deliver_in_app(notification)

        pending: dict[str, tuple[DeliveryChannel, ChannelMessage]] = {}
        for name in (CHANNEL_EMAIL, CHANNEL_SMS):
            state = notification.channels.get(name)
            if not state.enabled or state.sent:
                continue
            if recipient is None:
                self._record_outcome(
                    notification.id, name, ChannelResult.failed("Recipient not found")
                )
                continue
            pending[name] = self._build_delivery(name, notification, recipient, event)

        if pending:
            results = self._send_concurrently(pending)
            for name, result in results.items():
                self._record_outcome(notification.id, name, result)

        refreshed = self.notifications.get(notification.id)
        if refreshed is None:
            raise NotificationNotFoundError("Notification not found")
        return refreshed

    def list_notifications(
        self,
        user_id: int,
        *,
        page: int = 1,
        limit: int = 20,
        category: str | None = None,
        is_read: bool | None = None,
        priority: str | None = None,
    ) -> NotificationPage:
        return self.notifications.list_for_user(
            user_id,
            page=page,
            limit=limit,
            category=category,
            is_read=is_read,
            priority=priority,
        )

    def count_unread(self, user_id: int) -> int:
        return self.notifications.count_unread(user_id)

    def mark_as_read(self, notification_id: int, user_id: int) -> Notification:
        notification = self.notifications.get_for_recipient(notification_id, user_id)
        if notification is None:
            raise NotificationNotFoundError("Notification not found")
        updated = self.notifications.mark_read(notification.id)
        if updated is None:
            raise NotificationNotFoundError("Notification not found")
        return updated

    def mark_all_as_read(self, user_id: int) -> int:
        return self.notifications.mark_all_read(user_id)

    def delete_notification(self, notification_id: int, user_id: int) -> int:
        return self.notifications.delete_owned_by(notification_id, user_id)

    def process_scheduled_notifications(self, now: datetime | None = None) -> int:
        """Deliver every pending notification whose scheduled time has passed."""

        due = self.notifications.list_due(now or now_in_app_timezone())
        if due:
            logger.info("Processing %s scheduled notifications", len(due))

        delivered = 0
        for notification in due:
            try:
                self.send_notification(notification.id)
            except Exception:
                self.session.rollback()
                logger.exception(
                    "Error sending scheduled notification %s", notification.id
                )
                continue
            delivered += 1
        return delivered

    def create_bulk_notifications(self, data: BulkNotificationInput) -> list[Notification]:
        """Create one notification per recipient, skipping recipients that fail."""

        created: list[Notification] = []
        for recipient_id in data.recipient_ids:
            try:
                created.append(self.create_notification(data.for_recipient(recipient_id)))
            except Exception:
                self.session.rollback()
                logger.exception(
                    "Failed to create notification for user %s", recipient_id
                )
        logger.info(
            "Bulk notification created %s of %s records",
            len(created),
            len(data.recipient_ids),
        )
        return created

    @staticmethod
    def _validate(data: NotificationInput) -> None:
        if data.recipient_id is None:
            raise NotificationValidationError(
                "Recipient ID is required (use 'recipient_id')"
            )
        if not (data.title or "").strip():
            raise NotificationValidationError("Notification title is required")
        if not (data.message or "").strip():
            raise NotificationValidationError("Notification message is required")
        if data.category not in NOTIFICATION_CATEGORIES:
            raise NotificationValidationError(
                f"Unsupported notification type '{data.category}'"
            )
        if data.priority not in NOTIFICATION_PRIORITIES:
            raise NotificationValidationError(
                f"Unsupported notification priority '{data.priority}'"
            )

    def _deliver_in_app(self, notification: Notification) -> None:
        self.notifications.mark_channel_sent(notification.id, CHANNEL_IN_APP)
        logger.info(
            "In-app notification %s sent to user %s",
            notification.id,
            notification.recipient_id,
        )
        try:
            self.publisher.dispatch(notification)
        except Exception:
            logger.exception("Realtime push failed for notification %s", notification.id)

    def deliver(self, channel: str, message: ChannelMessage) -> ChannelResult:
        """Send one message on ``channel`` without persisting a notification.

        Used for direct messages such as the imminent-start reminder and
        organizer broadcasts; bounded by the same timeout as regular fan-out.
        """

        return self._send_concurrently(
            {channel: (self._channel_for(channel), message)}
        )[channel]

    def _channel_for(self, channel: str) -> DeliveryChannel:
        if channel == CHANNEL_EMAIL:
            return self.email_channel
        if channel == CHANNEL_SMS:
            return self.sms_channel
        raise ValueError(f"Channel '{channel}' has no external provider")

    def _build_delivery(
        self,
        channel: str,
        notification: Notification,
        recipient: User,
        event: Event | None,
    ) -> tuple[DeliveryChannel, ChannelMessage]:
        if channel == CHANNEL_EMAIL:
            subject, html_content = render_email(
                notification, recipient, event, base_url=self.settings.app_base_url
            )
            return self.email_channel, ChannelMessage(
                to=recipient.email, subject=subject, body=html_content
            )
        return self.sms_channel, ChannelMessage(
            to=recipient.phone or "", body=render_sms(notification, event)
        )

    def _send_concurrently(
        self, deliveries: dict[str, tuple[DeliveryChannel, ChannelMessage]]
    ) -> dict[str, ChannelResult]:
        executor = ThreadPoolExecutor(
            max_workers=len(deliveries), thread_name_prefix="notification-channel"
        )
        futures: dict[Future[ChannelResult], str] = {
            executor.submit(channel.send, message): name
            for name, (channel, message) in deliveries.items()
        }
        results: dict[str, ChannelResult] = {}
        try:
            for future in as_completed(futures, timeout=self.channel_timeout):
                name = futures[future]
                results[name] = self._result_of(name, future)
        except FuturesTimeoutError:
            for future, name in futures.items():
                if name in results:
                    continue
                if future.done():
                    results[name] = self._result_of(name, future)
                else:
                    results[name] = ChannelResult.failed(
                        f"Delivery timed out after {self.channel_timeout} seconds"
                    )
        finally:
            # A hung provider call must not hold up the caller.
            executor.shutdown(wait=False, cancel_futures=True)
        return results

    @staticmethod
    def _result_of(channel: str, future: Future[ChannelResult]) -> ChannelResult:
        try:
            return future.result()
        except Exception as exc:
            logger.exception("Channel %s raised while sending", channel)
            return ChannelResult.failed(str(exc) or exc.__class__.__name__)

    def _record_outcome(
        self, notification_id: int, channel: str, result: ChannelResult
    ) -> None:
        if result.success:
            self.notifications.mark_channel_sent(notification_id, channel)
            logger.info(
                "Notification %s delivered via %s (provider id: %s)",
                notification_id,
                channel,
                result.provider_id,
            )
        else:
            self.notifications.mark_channel_failed(notification_id, channel)
            logger.warning(
                "Notification %s failed via %s: %s",
                notification_id,
                channel,
                result.error,
            )


__all__ = ["NotificationDispatcher"]
