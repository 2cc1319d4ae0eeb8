"""Time-driven reminders for upcoming events."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta

from eventcraft.domain.entities import CHANNEL_EMAIL, CHANNEL_SMS, ChannelRequest, Event
from eventcraft.infrastructure.channels import ChannelMessage
from eventcraft.infrastructure.channels.email import build_starting_soon_email
from eventcraft.infrastructure.channels.sms import build_starting_soon_sms
from eventcraft.utils import day_window, ensure_app_timezone, now_in_app_timezone

from .dispatcher import NotificationDispatcher
from .inputs import NotificationInput
from .templates import TEMPLATE_DAILY_REMINDER

logger = logging.getLogger(__name__)

IMMINENT_WINDOW = timedelta(hours=1)


def send_daily_event_reminders(
    dispatcher: NotificationDispatcher, now: datetime | None = None
) -> int:
    """Remind every attendee of a published event taking place tomorrow.

    Tomorrow is ``[tomorrow 00:00, day after 00:00)`` in the app timezone.
    Returns the number of notifications created.
    """

    current = ensure_app_timezone(now) or now_in_app_timezone()
    start, end = day_window(current)
    events = dispatcher.events.list_published_between(start, end)
    logger.info("Found %s events happening tomorrow", len(events))

    created = 0
    for event in events:
        for attendee in event.attendees:
            try:
                dispatcher.create_notification(_daily_reminder_input(event, attendee.user_id))
            except Exception:
                dispatcher.session.rollback()
                logger.exception(
                    "Failed to send reminder for event %s to user %s",
                    event.id,
                    attendee.user_id,
                )
                continue
            created += 1
    return created


def _daily_reminder_input(event: Event, user_id: int) -> NotificationInput:
    return NotificationInput(
        recipient_id=user_id,
        title="Event Reminder 📅",
        message=f"{event.title} is happening tomorrow at {event.location}.",
        category="event_reminder",
        channels=ChannelRequest(in_app=True, email=True, sms=True),
        related_event_id=event.id,
        metadata={"template": TEMPLATE_DAILY_REMINDER},
        priority="high",
    )


def send_imminent_event_reminders(
    dispatcher: NotificationDispatcher, now: datetime | None = None
) -> int:
    """Send one "starting soon" message per attendee of events starting within the hour.

    SMS is preferred when the attendee has a phone and texts enabled; email
    is the fallback. The event's ``hour_reminder_sent`` flag is set after all
    attendees were attempted, so an event is only handled once. Returns the
    number of messages delivered.
    """

    current = ensure_app_timezone(now) or now_in_app_timezone()
    events = dispatcher.events.list_published_between(
        current, current + IMMINENT_WINDOW, exclude_hour_reminded=True
    )
    logger.info("Found %s events starting within the next hour", len(events))

    delivered = 0
    for event in events:
        users = dispatcher.users.get_map_by_ids(
            [attendee.user_id for attendee in event.attendees]
        )
        for attendee in event.attendees:
            user = users.get(attendee.user_id)
            if user is None:
                continue
            if user.has_phone and user.notify_sms:
                result = dispatcher.deliver(
                    CHANNEL_SMS,
                    ChannelMessage(to=user.phone or "", body=build_starting_soon_sms(event)),
                )
            elif user.notify_email:
                subject, html_content = build_starting_soon_email(user, event)
                result = dispatcher.deliver(
                    CHANNEL_EMAIL,
                    ChannelMessage(to=user.email, subject=subject, body=html_content),
                )
            else:
                continue
            if result.success:
                delivered += 1
            else:
                logger.warning(
                    "Starting-soon reminder for event %s to user %s failed: %s",
                    event.id,
                    user.id,
                    result.error,
                )

        dispatcher.events.mark_hour_reminder_sent(event.id)
    return delivered


__all__ = [
    "IMMINENT_WINDOW",
    "send_daily_event_reminders",
    "send_imminent_event_reminders",
]
