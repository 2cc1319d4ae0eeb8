"""Organizer broadcast to the attendees of an event."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from eventcraft.domain.entities import CHANNEL_EMAIL, CHANNEL_SMS, Event, User
from eventcraft.infrastructure.channels import ChannelMessage
from eventcraft.infrastructure.channels.email import build_attendee_broadcast_email
from eventcraft.infrastructure.channels.sms import build_attendee_broadcast_sms

from .dispatcher import NotificationDispatcher
from .errors import NotificationNotFoundError, NotificationValidationError

logger = logging.getLogger(__name__)

BROADCAST_EMAIL = "email"
BROADCAST_SMS = "sms"
BROADCAST_BOTH = "both"
BROADCAST_CHANNELS = (BROADCAST_EMAIL, BROADCAST_SMS, BROADCAST_BOTH)


@dataclass(frozen=True)
class BroadcastSummary:
    email_count: int = 0
    sms_count: int = 0

    @property
    def total_recipients(self) -> int:
        return self.email_count + self.sms_count


def _wants_category(user: User, event: Event) -> bool:
    # An empty category list means the user receives everything.
    return not user.event_categories or event.category in user.event_categories


def notify_event_attendees(
    dispatcher: NotificationDispatcher,
    *,
    event_id: int,
    sender: User,
    title: str,
    message: str,
    channel: str = BROADCAST_BOTH,
    send_to_all: bool = False,
) -> BroadcastSummary:
    """Email and/or text every attendee of ``event_id`` on behalf of ``sender``.

    Only the event's organizer or an administrator may broadcast. Unless
    ``send_to_all`` is set, attendees whose category preferences exclude the
    event are skipped. Each attendee's own email and SMS toggles still apply.
    The summary counts successful sends only.
    """

    if not (title or "").strip() or not (message or "").strip():
        raise NotificationValidationError("Title and message are required")
    if channel not in BROADCAST_CHANNELS:
        raise NotificationValidationError(f"Unsupported notification type '{channel}'")

    event = dispatcher.events.get(event_id)
    if event is None:
        raise NotificationNotFoundError("Event not found")
    if not sender.is_admin() and event.organizer_id != sender.id:
        raise PermissionError(
            "You do not have permission to send notifications for this event"
        )

    users = dispatcher.users.get_map_by_ids(
        [attendee.user_id for attendee in event.attendees]
    )
    email_count = 0
    sms_count = 0
    for attendee in event.attendees:
        user = users.get(attendee.user_id)
        if user is None:
            continue
        if not send_to_all and not _wants_category(user, event):
            continue

        if channel in (BROADCAST_EMAIL, BROADCAST_BOTH) and user.notify_email:
            subject, html_content = build_attendee_broadcast_email(title, message, event)
            result = dispatcher.deliver(
                CHANNEL_EMAIL,
                ChannelMessage(to=user.email, subject=subject, body=html_content),
            )
            if result.success:
                email_count += 1

        if channel in (BROADCAST_SMS, BROADCAST_BOTH) and user.notify_sms and user.has_phone:
            result = dispatcher.deliver(
                CHANNEL_SMS,
                ChannelMessage(
                    to=user.phone or "",
                    body=build_attendee_broadcast_sms(title, message, event),
                ),
            )
            if result.success:
                sms_count += 1

    summary = BroadcastSummary(email_count=email_count, sms_count=sms_count)
    logger.info(
        "Broadcast for event %s by user %s: %s emails, %s texts",
        event_id,
        sender.id,
        summary.email_count,
        summary.sms_count,
    )
    return summary


__all__ = [
    "BROADCAST_BOTH",
    "BROADCAST_CHANNELS",
    "BROADCAST_EMAIL",
    "BROADCAST_SMS",
    "BroadcastSummary",
    "notify_event_attendees",
]
