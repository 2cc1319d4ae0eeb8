"""Input objects accepted by the notification dispatcher."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any

from eventcraft.domain.entities import (
    DEFAULT_NOTIFICATION_CATEGORY,
    DEFAULT_NOTIFICATION_PRIORITY,
    ChannelRequest,
    NotificationAction,
)


@dataclass
class NotificationInput:
    """Everything needed to originate a notification for one recipient."""

    recipient_id: int | None
    title: str
    message: str
    category: str = DEFAULT_NOTIFICATION_CATEGORY
    channels: ChannelRequest = field(default_factory=ChannelRequest)
    related_event_id: int | None = None
    related_ticket_id: int | None = None
    action: NotificationAction | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    priority: str = DEFAULT_NOTIFICATION_PRIORITY
    expires_at: datetime | None = None
    scheduled_for: datetime | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "NotificationInput":
        """Build an input from a loosely shaped payload.

        Older callers identify the recipient with ``user`` or ``recipientId``
        and use camelCase keys; both spellings are accepted here and nowhere
        else.
        """

        extra = data.get("data") or data.get("metadata") or {}
        return cls(
            recipient_id=_first(data, "recipient_id", "recipientId", "user"),
            title=data.get("title") or "",
            message=data.get("message") or "",
            category=_first(data, "category", "type") or DEFAULT_NOTIFICATION_CATEGORY,
            channels=channel_request_from_mapping(data.get("channels")),
            related_event_id=_first(data, "related_event_id", "relatedEvent")
            or extra.get("eventId"),
            related_ticket_id=_first(data, "related_ticket_id", "relatedTicket")
            or extra.get("ticketId"),
            action=_action_from_mapping(data.get("action")),
            metadata=dict(extra),
            priority=data.get("priority") or DEFAULT_NOTIFICATION_PRIORITY,
            expires_at=_first(data, "expires_at", "expiresAt"),
            scheduled_for=_first(data, "scheduled_for", "scheduledFor"),
        )


@dataclass
class BulkNotificationInput:
    """Shared content sent to several recipients."""

    recipient_ids: list[int]
    title: str
    message: str
    category: str = DEFAULT_NOTIFICATION_CATEGORY
    channels: ChannelRequest = field(default_factory=ChannelRequest)
    related_event_id: int | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    priority: str = DEFAULT_NOTIFICATION_PRIORITY
    scheduled_for: datetime | None = None

    def for_recipient(self, recipient_id: int) -> NotificationInput:
        return NotificationInput(
            recipient_id=recipient_id,
            title=self.title,
            message=self.message,
            category=self.category,
            channels=replace(self.channels),
            related_event_id=self.related_event_id,
            metadata=dict(self.metadata),
            priority=self.priority,
            scheduled_for=self.scheduled_for,
        )


def channel_request_from_mapping(channels: Mapping[str, Any] | None) -> ChannelRequest:
    if not channels:
        return ChannelRequest()
    return ChannelRequest(
        in_app=_first(channels, "in_app", "inApp"),
        email=channels.get("email"),
        sms=channels.get("sms"),
    )


def _first(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = data.get(key)
        if value is not None:
            return value
    return None


def _action_from_mapping(action: Any) -> NotificationAction | None:
    if isinstance(action, NotificationAction):
        return action
    if not isinstance(action, Mapping) or not action.get("url"):
        return None
    return NotificationAction(
        text=str(action.get("text") or "View"),
        url=str(action["url"]),
        type=action.get("type"),
    )


__all__ = [
    "BulkNotificationInput",
    "NotificationInput",
    "channel_request_from_mapping",
]
