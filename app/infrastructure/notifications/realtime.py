"""Push gateway relaying notifications to connected websocket clients."""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import asdict

from anyio.from_thread import BlockingPortal

from app.infrastructure.channels.push import (
    PERMISSION_DEFAULT,
    PERMISSION_DENIED,
    PERMISSION_GRANTED,
    PushGateway,
    PushHandle,
    PushOptions,
)

from .manager import NotificationConnectionManager, notification_manager

logger = logging.getLogger(__name__)

_VALID_STATES = {PERMISSION_GRANTED, PERMISSION_DENIED, PERMISSION_DEFAULT}


class RealtimePushGateway(PushGateway):
    """Track per-user push permission and show notifications over websockets.

    The websocket handler records the permission state reported by the client.
    ``display`` is called from delivery worker threads, so messages are handed
    to the event loop through the portal bound with :meth:`bind_portal`.
    """

    def __init__(
        self,
        manager: NotificationConnectionManager,
        *,
        send_timeout_seconds: float = 5.0,
    ) -> None:
        self._manager = manager
        self._send_timeout = send_timeout_seconds
        self._permissions: dict[int, str] = {}
        self._lock = threading.Lock()
        self._portal: BlockingPortal | None = None

    def bind_portal(self, portal: BlockingPortal | None) -> None:
        self._portal = portal

    def set_permission(self, user_id: int, state: str) -> None:
        if state not in _VALID_STATES:
            raise ValueError(f"Unknown push permission state: {state!r}")
        with self._lock:
            self._permissions[user_id] = state

    def permission_state(self, user_id: int) -> str:
        with self._lock:
            return self._permissions.get(user_id, PERMISSION_DEFAULT)

    def request_permission(self, user_id: int) -> str:
        """Ask connected clients for permission; the answer arrives asynchronously."""

        state = self.permission_state(user_id)
        if state == PERMISSION_DEFAULT:
            self._schedule(user_id, {"type": "push.permission-request", "data": {}}, wait=False)
        return state

    def display(
        self, user_id: int, title: str, body: str, options: PushOptions
    ) -> PushHandle | None:
        handle_id = f"push_{uuid.uuid4().hex[:12]}"
        message = {
            "type": "push",
            "data": {"id": handle_id, "title": title, "body": body, **asdict(options)},
        }
        delivered = self._schedule(user_id, message)
        if delivered is None:
            return None
        return PushHandle(id=handle_id, tag=options.tag, delivered_connections=delivered)

    def _schedule(self, user_id: int, message: dict, *, wait: bool = True) -> int | None:
        portal = self._portal
        if portal is None:
            logger.warning("Push gateway is not bound to an event loop; dropping message for %s", user_id)
            return None

        future = portal.start_task_soon(self._manager.send_to_user, user_id, message)
        if not wait:
            return None
        return future.result(timeout=self._send_timeout)


realtime_push_gateway = RealtimePushGateway(notification_manager)


__all__ = ["RealtimePushGateway", "realtime_push_gateway"]
