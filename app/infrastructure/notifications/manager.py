"""Connection management helpers for notification websockets."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Any, DefaultDict, Set

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Manage active websocket connections grouped by user."""

    def __init__(self) -> None:
        self._connections: DefaultDict[int, Set[WebSocket]] = defaultdict(set)

    async def connect(self, user_id: int, websocket: WebSocket) -> None:
        """Accept the websocket connection and register it for ``user_id``."""

        await websocket.accept()
        self._connections[user_id].add(websocket)

    def disconnect(self, user_id: int, websocket: WebSocket) -> None:
        """Remove ``websocket`` from the pool for ``user_id``."""

        connections = self._connections.get(user_id)
        if connections is None:
            return
        connections.discard(websocket)
        if not connections:
            self._connections.pop(user_id, None)

    def connection_count(self, user_id: int) -> int:
        return len(self._connections.get(user_id, ()))

    async def send_to_user(self, user_id: int, message: dict[str, Any]) -> int:
        """Send ``message`` to every active connection for ``user_id``.

        Returns the number of connections that accepted the message; broken
        connections are dropped from the pool.
        """

        delivered = 0
        connections = list(self._connections.get(user_id, set()))
        for connection in connections:
            try:
                await connection.send_json(message)
            except Exception as exc:  # noqa: BLE001 - a dead socket must not stop the others
                logger.debug("Dropping websocket of user %s: %s", user_id, exc)
                self.disconnect(user_id, connection)
            else:
                delivered += 1
        return delivered


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
