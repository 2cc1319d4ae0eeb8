"""ORM models used by the application infrastructure."""

from .user import UserModel
from .event import EventAttendeeModel, EventModel
from .notification import NotificationModel

__all__ = [
    "EventAttendeeModel",
    "EventModel",
    "NotificationModel",
    "UserModel",
]
