"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from eventcraft.domain.entities import Notification


class ChannelStateRead(BaseModel):
    enabled: bool
    sent: bool
    sent_at: datetime | None = None
    delivery_status: str | None = None


class ChannelsRead(BaseModel):
    in_app: ChannelStateRead
    email: ChannelStateRead
    sms: ChannelStateRead


class NotificationActionSchema(BaseModel):
    text: str = "View"
    url: str
    type: str | None = None


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: int
    recipient_id: int
    title: str
    message: str
    type: str
    status: str
    priority: str
    is_read: bool
    read_at: datetime | None = None
    channels: ChannelsRead
    related_event_id: int | None = None
    related_ticket_id: int | None = None
    action: NotificationActionSchema | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    expires_at: datetime | None = None
    scheduled_for: datetime | None = None
    created_at: datetime | None = None

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationRead":
        return cls(
            id=notification.id or 0,
            recipient_id=notification.recipient_id,
            title=notification.title,
            message=notification.message,
            type=notification.category,
            status=notification.status,
            priority=notification.priority,
            is_read=notification.is_read,
            read_at=notification.read_at,
            channels=ChannelsRead(
                **{
                    name: ChannelStateRead(
                        enabled=state.enabled,
                        sent=state.sent,
                        sent_at=state.sent_at,
                        delivery_status=state.delivery_status,
                    )
                    for name, state in notification.channels.items()
                }
            ),
            related_event_id=notification.related_event_id,
            related_ticket_id=notification.related_ticket_id,
            action=(
                NotificationActionSchema(
                    text=notification.action.text,
                    url=notification.action.url,
                    type=notification.action.type,
                )
                if notification.action
                else None
            ),
            metadata=notification.metadata or {},
            expires_at=notification.expires_at,
            scheduled_for=notification.scheduled_for,
            created_at=notification.created_at,
        )


class NotificationPageRead(BaseModel):
    notifications: list[NotificationRead]
    total: int
    page: int
    pages: int


class UnreadCountRead(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    modified_count: int


class ChannelRequestSchema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    in_app: bool | None = Field(default=None, validation_alias=AliasChoices("in_app", "inApp"))
    email: bool | None = None
    sms: bool | None = None


class NotificationCreate(BaseModel):
    """Payload accepted by the admin create endpoint.

    ``recipientId`` and the legacy ``user`` key are accepted for the recipient.
    """

    model_config = ConfigDict(populate_by_name=True)

    recipient_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices("recipient_id", "recipientId", "user"),
    )
    title: str = ""
    message: str = ""
    type: str = Field(default="info", validation_alias=AliasChoices("type", "category"))
    channels: ChannelRequestSchema | None = None
    related_event_id: int | None = Field(
        default=None, validation_alias=AliasChoices("related_event_id", "relatedEvent")
    )
    related_ticket_id: int | None = Field(
        default=None, validation_alias=AliasChoices("related_ticket_id", "relatedTicket")
    )
    action: NotificationActionSchema | None = None
    data: dict[str, Any] = Field(
        default_factory=dict, validation_alias=AliasChoices("data", "metadata")
    )
    priority: str = "normal"
    expires_at: datetime | None = Field(
        default=None, validation_alias=AliasChoices("expires_at", "expiresAt")
    )
    scheduled_for: datetime | None = Field(
        default=None, validation_alias=AliasChoices("scheduled_for", "scheduledFor")
    )


class TestNotificationRequest(BaseModel):
    __test__ = False

    title: str = "Test Notification"
    message: str = "This is a test notification from EventCraft."


class NotificationPreferencesRead(BaseModel):
    email: bool
    sms: bool
    event_categories: list[str] = Field(default_factory=list)


class NotificationPreferencesUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: bool | None = None
    sms: bool | None = None
    event_categories: list[str] | None = Field(
        default=None, validation_alias=AliasChoices("event_categories", "eventTypes")
    )


class BroadcastRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    event_id: int = Field(validation_alias=AliasChoices("event_id", "eventId"))
    title: str
    message: str
    notification_type: Literal["email", "sms", "both"] = Field(
        default="both",
        validation_alias=AliasChoices("notification_type", "notificationType"),
    )
    send_to_all: bool = Field(
        default=False, validation_alias=AliasChoices("send_to_all", "sendToAll")
    )


class BroadcastSummaryRead(BaseModel):
    email_count: int
    sms_count: int
    total_recipients: int


class BroadcastResponse(BaseModel):
    message: str
    stats: BroadcastSummaryRead


__all__ = [
    "BroadcastRequest",
    "BroadcastResponse",
    "BroadcastSummaryRead",
    "ChannelRequestSchema",
    "MarkAllReadResponse",
    "NotificationActionSchema",
    "NotificationCreate",
    "NotificationPageRead",
    "NotificationPreferencesRead",
    "NotificationPreferencesUpdate",
    "NotificationRead",
    "TestNotificationRequest",
    "UnreadCountRead",
]
