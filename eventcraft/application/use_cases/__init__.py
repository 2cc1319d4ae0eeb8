"""Aggregate application use cases."""

from .notifications import (
    NotificationDispatcher,
    notify_event_attendees,
    send_daily_event_reminders,
    send_imminent_event_reminders,
)

__all__ = [
    "NotificationDispatcher",
    "notify_event_attendees",
    "send_daily_event_reminders",
    "send_imminent_event_reminders",
]
