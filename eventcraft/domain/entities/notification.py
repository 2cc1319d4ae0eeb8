"""Domain entities describing notifications and their delivery channels."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterator

NOTIFICATION_STATUS_PENDING = "pending"
NOTIFICATION_STATUS_SENT = "sent"
NOTIFICATION_STATUS_DELIVERED = "delivered"
NOTIFICATION_STATUS_READ = "read"
NOTIFICATION_STATUS_FAILED = "failed"

NOTIFICATION_STATUSES = (
    NOTIFICATION_STATUS_PENDING,
    NOTIFICATION_STATUS_SENT,
    NOTIFICATION_STATUS_DELIVERED,
    NOTIFICATION_STATUS_READ,
    NOTIFICATION_STATUS_FAILED,
)

# Statuses that still count towards the unread badge.
UNREAD_COUNTABLE_STATUSES = (
    NOTIFICATION_STATUS_PENDING,
    NOTIFICATION_STATUS_SENT,
    NOTIFICATION_STATUS_DELIVERED,
)

NOTIFICATION_CATEGORIES = (
    "info",
    "success",
    "warning",
    "error",
    "event_reminder",
    "event_update",
    "event_registered",
    "event_approved",
    "event_rejected",
    "event_updated",
    "event_cancelled",
    "ticket_confirmation",
    "ticket_cancelled",
    "ticket_checkin",
    "system",
    "system_announcement",
)
DEFAULT_NOTIFICATION_CATEGORY = "info"

NOTIFICATION_PRIORITIES = ("low", "normal", "medium", "high", "urgent")
DEFAULT_NOTIFICATION_PRIORITY = "normal"

CHANNEL_IN_APP = "in_app"
CHANNEL_EMAIL = "email"
CHANNEL_SMS = "sms"
CHANNEL_NAMES = (CHANNEL_IN_APP, CHANNEL_EMAIL, CHANNEL_SMS)

DELIVERY_STATUS_DELIVERED = "delivered"
DELIVERY_STATUS_FAILED = "failed"


@dataclass
class ChannelState:
    """Delivery state of a notification on a single channel."""

    enabled: bool = False
    sent: bool = False
    sent_at: datetime | None = None
    delivery_status: str | None = None


@dataclass
class ChannelSet:
    """Per-channel delivery state for the three supported channels."""

    in_app: ChannelState = field(default_factory=lambda: ChannelState(enabled=True))
    email: ChannelState = field(default_factory=ChannelState)
    sms: ChannelState = field(default_factory=ChannelState)

    def get(self, channel: str) -> ChannelState:
        if channel not in CHANNEL_NAMES:
            raise ValueError(f"Unknown notification channel '{channel}'")
        return getattr(self, channel)

    def items(self) -> Iterator[tuple[str, ChannelState]]:
        for name in CHANNEL_NAMES:
            yield name, getattr(self, name)

    def enabled_names(self) -> list[str]:
        return [name for name, state in self.items() if state.enabled]

    def all_enabled_sent(self) -> bool:
        """Return ``True`` when every enabled channel has been sent.

        A set with no enabled channels satisfies this vacuously.
        """

        return all(state.sent for _, state in self.items() if state.enabled)


@dataclass(frozen=True)
class ChannelRequest:
    """Channels requested by the caller creating a notification.

    ``None`` means the caller expressed no preference for that channel.
    """

    in_app: bool | None = None
    email: bool | None = None
    sms: bool | None = None


@dataclass(frozen=True)
class NotificationPreferences:
    """Recipient toggles consulted when resolving delivery channels."""

    email: bool | None = True
    sms: bool | None = False


def determine_channels(
    preferences: NotificationPreferences,
    requested: ChannelRequest,
    has_phone: bool,
) -> ChannelSet:
    """Intersect the caller's request with the recipient's preferences.

    In-app is enabled unless the caller explicitly disables it. Email needs an
    explicit request and a preference that is not explicitly ``False``. SMS
    needs an explicit request, an explicit ``True`` preference and a phone.
    """

    return ChannelSet(
        in_app=ChannelState(enabled=requested.in_app is not False),
        email=ChannelState(
            enabled=requested.email is True and preferences.email is not False
        ),
        sms=ChannelState(
            enabled=requested.sms is True and preferences.sms is True and has_phone
        ),
    )


@dataclass
class NotificationAction:
    """Optional call to action rendered alongside a notification."""

    text: str
    url: str
    type: str | None = None


@dataclass
class Notification:
    """A message destined for one recipient, with its delivery tracking."""

    id: int | None
    recipient_id: int
    title: str
    message: str
    category: str = DEFAULT_NOTIFICATION_CATEGORY
    status: str = NOTIFICATION_STATUS_PENDING
    is_read: bool = False
    read_at: datetime | None = None
    channels: ChannelSet = field(default_factory=ChannelSet)
    related_event_id: int | None = None
    related_ticket_id: int | None = None
    action: NotificationAction | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    priority: str = DEFAULT_NOTIFICATION_PRIORITY
    expires_at: datetime | None = None
    scheduled_for: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class NotificationPage:
    """A page of notifications returned by a filtered listing."""

    items: list[Notification]
    total: int
    page: int
    pages: int


__all__ = [
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
    "determine_channels",
]
