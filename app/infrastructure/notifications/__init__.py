"""Realtime notification helpers for the infrastructure layer."""

from .manager import NotificationConnectionManager, notification_manager
from .realtime import RealtimePushGateway, realtime_push_gateway

__all__ = [
    "NotificationConnectionManager",
    "notification_manager",
    "RealtimePushGateway",
    "realtime_push_gateway",
]
