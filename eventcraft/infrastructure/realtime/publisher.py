"""Push in-app notifications to websocket subscribers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from eventcraft.domain.entities import Notification

from .manager import NotificationConnectionManager, notification_manager

logger = logging.getLogger(__name__)


class NotificationPublisher:
    """Serialize notifications and schedule their delivery on the server loop.

    Dispatch happens from request worker threads and from the scheduler
    thread, so the publisher keeps a reference to the loop that owns the
    websockets and hands coroutines over with ``run_coroutine_threadsafe``.
    """

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager
        self._loop: asyncio.AbstractEventLoop | None = None

    def bind_loop(self, loop: asyncio.AbstractEventLoop | None) -> None:
        self._loop = loop

    def dispatch(self, notification: Notification) -> bool:
        """Schedule ``notification`` for delivery; return ``False`` if nobody listens."""

        if not self._manager.is_connected(notification.recipient_id):
            return False

        message = {"type": "notification", "data": serialize_notification(notification)}
        coroutine = self._manager.send_to_user(notification.recipient_id, message)
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is not None:
            running.create_task(coroutine)
            return True
        if self._loop is not None and self._loop.is_running():
            asyncio.run_coroutine_threadsafe(coroutine, self._loop)
            return True

        coroutine.close()
        logger.debug(
            "No event loop bound; skipping realtime push for notification %s",
            notification.id,
        )
        return False


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the websocket payload representation for ``notification``."""

    return {
        "id": notification.id,
        "recipient_id": notification.recipient_id,
        "type": notification.category,
        "title": notification.title,
        "message": notification.message,
        "priority": notification.priority,
        "status": notification.status,
        "is_read": notification.is_read,
        "related_event_id": notification.related_event_id,
        "related_ticket_id": notification.related_ticket_id,
        "action": (
            {
                "text": notification.action.text,
                "url": notification.action.url,
                "type": notification.action.type,
            }
            if notification.action
            else None
        ),
        "created_at": notification.created_at.isoformat()
        if notification.created_at
        else None,
        "read_at": notification.read_at.isoformat() if notification.read_at else None,
    }


notification_publisher = NotificationPublisher(notification_manager)


__all__ = [
    "NotificationPublisher",
    "notification_publisher",
    "serialize_notification",
]
