from .notification import (
    BroadcastRequest,
    BroadcastResponse,
    BroadcastSummaryRead,
    ChannelRequestSchema,
    MarkAllReadResponse,
    NotificationActionSchema,
    NotificationCreate,
    NotificationPageRead,
    NotificationPreferencesRead,
    NotificationPreferencesUpdate,
    NotificationRead,
    TestNotificationRequest,
    UnreadCountRead,
)

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
