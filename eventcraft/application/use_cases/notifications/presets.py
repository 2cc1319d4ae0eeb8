"""Ready-made notifications originated by event and ticket workflows."""

from __future__ import annotations

from datetime import timedelta

from eventcraft.domain.entities import ChannelRequest, Notification, NotificationAction
from eventcraft.utils import now_in_app_timezone

from .dispatcher import NotificationDispatcher
from .inputs import NotificationInput
from .templates import (
    TEMPLATE_EVENT_APPROVED,
    TEMPLATE_REGISTRATION_CONFIRMATION,
    TEMPLATE_TICKET_CHECKIN,
    TEMPLATE_TICKET_PURCHASE,
)

DEFAULT_REMINDER_LEAD_HOURS = 24


def _view_event(event_id: int) -> NotificationAction:
    return NotificationAction(text="View Event", url=f"/event/{event_id}", type="internal")


def send_event_registration_confirmation(
    dispatcher: NotificationDispatcher, user_id: int, event_id: int, ticket_id: int
) -> Notification:
    return dispatcher.create_notification(
        NotificationInput(
            recipient_id=user_id,
            title="Event Registration Confirmed! 🎉",
            message=(
                "Your event registration has been confirmed. "
                "We're excited to see you there!"
            ),
            category="ticket_confirmation",
            channels=ChannelRequest(in_app=True, email=True),
            related_event_id=event_id,
            related_ticket_id=ticket_id,
            action=NotificationAction(
                text="View Ticket", url=f"/ticket/{ticket_id}", type="internal"
            ),
            metadata={"template": TEMPLATE_REGISTRATION_CONFIRMATION},
            priority="high",
        )
    )


def send_ticket_purchase_confirmation(
    dispatcher: NotificationDispatcher,
    user_id: int,
    event_id: int,
    ticket_id: int,
    ticket_type: str,
) -> Notification:
    return dispatcher.create_notification(
        NotificationInput(
            recipient_id=user_id,
            title="Ticket Confirmed",
            message=f"Your {ticket_type} ticket has been confirmed.",
            category="ticket_confirmation",
            channels=ChannelRequest(in_app=True, email=True, sms=True),
            related_event_id=event_id,
            related_ticket_id=ticket_id,
            action=NotificationAction(
                text="View Ticket", url=f"/ticket/{ticket_id}", type="internal"
            ),
            metadata={"template": TEMPLATE_TICKET_PURCHASE, "ticket_type": ticket_type},
            priority="high",
        )
    )


def send_event_reminder(
    dispatcher: NotificationDispatcher,
    user_id: int,
    event_id: int,
    hours_before_event: int = DEFAULT_REMINDER_LEAD_HOURS,
) -> Notification:
    """Queue a reminder so it goes out ``hours_before_event`` ahead of a day-out event.

    The reminder is scheduled ``24 - hours_before_event`` hours from now, so
    the default lead time delivers immediately.
    """

    delay = timedelta(hours=DEFAULT_REMINDER_LEAD_HOURS - hours_before_event)
    return dispatcher.create_notification(
        NotificationInput(
            recipient_id=user_id,
            title="Event Reminder 📅",
            message=(
                f"Your event is starting in {hours_before_event} hours. "
                "Don't forget to attend!"
            ),
            category="event_reminder",
            channels=ChannelRequest(in_app=True, email=True, sms=True),
            related_event_id=event_id,
            action=_view_event(event_id),
            priority="high",
            scheduled_for=now_in_app_timezone() + delay,
        )
    )


def send_event_cancellation(
    dispatcher: NotificationDispatcher, user_id: int, event_id: int
) -> Notification:
    return dispatcher.create_notification(
        NotificationInput(
            recipient_id=user_id,
            title="Event Cancelled ❌",
            message=(
                "Unfortunately, this event has been cancelled. "
                "You will receive a full refund."
            ),
            category="event_update",
            channels=ChannelRequest(in_app=True, email=True, sms=True),
            related_event_id=event_id,
            priority="urgent",
        )
    )


def send_event_update(
    dispatcher: NotificationDispatcher,
    user_id: int,
    event_id: int,
    update_type: str,
    details: str,
) -> Notification:
    return dispatcher.create_notification(
        NotificationInput(
            recipient_id=user_id,
            title=f"Event Updated: {update_type} 📝",
            message=f"There has been an update to your event. {details}",
            category="event_update",
            channels=ChannelRequest(in_app=True, email=True),
            related_event_id=event_id,
            action=_view_event(event_id),
            priority="normal",
        )
    )


def send_event_approved(
    dispatcher: NotificationDispatcher, organizer_id: int, event_id: int, event_title: str
) -> Notification:
    return dispatcher.create_notification(
        NotificationInput(
            recipient_id=organizer_id,
            title="Event Approved",
            message=f'Your event "{event_title}" has been approved and is now live!',
            category="event_approved",
            channels=ChannelRequest(in_app=True, email=True, sms=True),
            related_event_id=event_id,
            action=_view_event(event_id),
            metadata={"template": TEMPLATE_EVENT_APPROVED},
            priority="high",
        )
    )


def send_event_rejected(
    dispatcher: NotificationDispatcher,
    organizer_id: int,
    event_id: int,
    event_title: str,
    reason: str | None = None,
) -> Notification:
    message = f'Your event "{event_title}" was not approved.'
    if reason:
        message += f" Reason: {reason}"
    return dispatcher.create_notification(
        NotificationInput(
            recipient_id=organizer_id,
            title="Event Rejected",
            message=message,
            category="event_rejected",
            channels=ChannelRequest(in_app=True, email=True),
            related_event_id=event_id,
            metadata={"reason": reason} if reason else {},
            priority="high",
        )
    )


def send_ticket_checkin(
    dispatcher: NotificationDispatcher,
    user_id: int,
    event_id: int,
    ticket_id: int,
    event_title: str,
) -> Notification:
    return dispatcher.create_notification(
        NotificationInput(
            recipient_id=user_id,
            title="Successfully Checked In",
            message=f'You have been checked in to "{event_title}". Enjoy the event!',
            category="ticket_checkin",
            related_event_id=event_id,
            related_ticket_id=ticket_id,
            metadata={"template": TEMPLATE_TICKET_CHECKIN},
            priority="low",
        )
    )


__all__ = [
    "DEFAULT_REMINDER_LEAD_HOURS",
    "send_event_approved",
    "send_event_cancellation",
    "send_event_registration_confirmation",
    "send_event_rejected",
    "send_event_reminder",
    "send_event_update",
    "send_ticket_checkin",
    "send_ticket_purchase_confirmation",
]
