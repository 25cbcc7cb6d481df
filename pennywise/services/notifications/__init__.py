"""Notification and navigation services package."""

from pennywise.services.notifications.interface import Navigator, NotificationSink
from pennywise.services.notifications.queue import NotificationQueue, RouteState

__all__ = [
    "Navigator",
    "NotificationQueue",
    "NotificationSink",
    "RouteState",
]
