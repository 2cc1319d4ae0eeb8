"""Registry of open notification websockets, keyed by user id."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Track which users have a live notification socket.

    The event loop adds and removes sockets while request and scheduler
    threads ask ``is_connected`` before pushing, so the registry is guarded
    by a plain lock and never held across an ``await``.
    """

    def __init__(self) -> None:
        self._sockets: dict[int, list[WebSocket]] = {}
        self._lock = threading.Lock()

    async def connect(self, user_id: int, websocket: WebSocket) -> int:
        """Accept ``websocket`` and return how many sockets ``user_id`` now has open."""

        await websocket.accept()
        with self._lock:
            sockets = self._sockets.setdefault(user_id, [])
            sockets.append(websocket)
            count = len(sockets)
        logger.info("User %s connected to notifications (%s open)", user_id, count)
        return count

    def disconnect(self, user_id: int, websocket: WebSocket) -> None:
        with self._lock:
            sockets = self._sockets.get(user_id, [])
            if websocket in sockets:
                sockets.remove(websocket)
            if not sockets:
                self._sockets.pop(user_id, None)

    def is_connected(self, user_id: int) -> bool:
        with self._lock:
            return bool(self._sockets.get(user_id))

    async def send_to_user(self, user_id: int, message: dict[str, Any]) -> int:
        """Push ``message`` to every socket of ``user_id``; return how many accepted it.

        Sockets that fail to send are treated as closed and dropped.
        """

        with self._lock:
            sockets = list(self._sockets.get(user_id, ()))
        if not sockets:
            return 0

        results = await asyncio.gather(
            *(socket.send_json(message) for socket in sockets), return_exceptions=True
        )
        delivered = 0
        for socket, result in zip(sockets, results):
            if isinstance(result, Exception):
                logger.debug("Dropping closed websocket for user %s: %s", user_id, result)
                self.disconnect(user_id, socket)
            else:
                delivered += 1
        return delivered


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
