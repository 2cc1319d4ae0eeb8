"""Notification use cases."""

from .broadcast import BroadcastSummary, notify_event_attendees
from .dispatcher import NotificationDispatcher
from .errors import NotificationNotFoundError, NotificationValidationError
from .inputs import BulkNotificationInput, NotificationInput, channel_request_from_mapping
from .presets import (
    send_event_approved,
    send_event_cancellation,
    send_event_registration_confirmation,
    send_event_rejected,
    send_event_reminder,
    send_event_update,
    send_ticket_checkin,
    send_ticket_purchase_confirmation,
)
from .reminders import send_daily_event_reminders, send_imminent_event_reminders

__all__ = [
    "BroadcastSummary",
    "BulkNotificationInput",
    "NotificationDispatcher",
    "NotificationInput",
    "NotificationNotFoundError",
    "NotificationValidationError",
    "channel_request_from_mapping",
    "notify_event_attendees",
    "send_daily_event_reminders",
    "send_event_approved",
    "send_event_cancellation",
    "send_event_registration_confirmation",
    "send_event_rejected",
    "send_event_reminder",
    "send_event_update",
    "send_imminent_event_reminders",
    "send_ticket_checkin",
    "send_ticket_purchase_confirmation",
]
