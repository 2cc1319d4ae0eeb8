"""Domain entities exposed by the application."""

from .event import (
    EVENT_STATUS_CANCELLED,
    EVENT_STATUS_COMPLETED,
    EVENT_STATUS_DRAFT,
    EVENT_STATUS_PENDING_APPROVAL,
    EVENT_STATUS_PUBLISHED,
    EVENT_STATUS_REJECTED,
    Attendee,
    Event,
)
from .notification import (
    CHANNEL_EMAIL,
    CHANNEL_IN_APP,
    CHANNEL_NAMES,
    CHANNEL_SMS,
    DEFAULT_NOTIFICATION_CATEGORY,
    DEFAULT_NOTIFICATION_PRIORITY,
    DELIVERY_STATUS_DELIVERED,
    DELIVERY_STATUS_FAILED,
    NOTIFICATION_CATEGORIES,
    NOTIFICATION_PRIORITIES,
    NOTIFICATION_STATUSES,
    NOTIFICATION_STATUS_DELIVERED,
    NOTIFICATION_STATUS_FAILED,
    NOTIFICATION_STATUS_PENDING,
    NOTIFICATION_STATUS_READ,
    NOTIFICATION_STATUS_SENT,
    UNREAD_COUNTABLE_STATUSES,
    ChannelRequest,
    ChannelSet,
    ChannelState,
    Notification,
    NotificationAction,
    NotificationPage,
    NotificationPreferences,
    determine_channels,
)
from .user import USER_ROLE_ADMIN, USER_ROLE_ATTENDEE, USER_ROLE_ORGANIZER, User

__all__ = [
    "Attendee",
    "CHANNEL_EMAIL",
    "CHANNEL_IN_APP",
    "CHANNEL_NAMES",
    "CHANNEL_SMS",
    "ChannelRequest",
    "ChannelSet",
    "ChannelState",
    "DEFAULT_NOTIFICATION_CATEGORY",
    "DEFAULT_NOTIFICATION_PRIORITY",
    "DELIVERY_STATUS_DELIVERED",
    "DELIVERY_STATUS_FAILED",
    "EVENT_STATUS_CANCELLED",
    "EVENT_STATUS_COMPLETED",
    "EVENT_STATUS_DRAFT",
    "EVENT_STATUS_PENDING_APPROVAL",
    "EVENT_STATUS_PUBLISHED",
    "EVENT_STATUS_REJECTED",
    "Event",
    "NOTIFICATION_CATEGORIES",
    "NOTIFICATION_PRIORITIES",
    "NOTIFICATION_STATUSES",
    "NOTIFICATION_STATUS_DELIVERED",
    "NOTIFICATION_STATUS_FAILED",
    "NOTIFICATION_STATUS_PENDING",
    "NOTIFICATION_STATUS_READ",
    "NOTIFICATION_STATUS_SENT",
    "Notification",
    "NotificationAction",
    "NotificationPage",
    "NotificationPreferences",
    "UNREAD_COUNTABLE_STATUSES",
    "USER_ROLE_ADMIN",
    "USER_ROLE_ATTENDEE",
    "USER_ROLE_ORGANIZER",
    "User",
    "determine_channels",
]
