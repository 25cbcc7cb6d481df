"""
In-Process Notification Queue and Router

Streamlit re-runs the whole script on every interaction, so notifications
raised during one run are queued and drained as toasts by the next render.
The router just remembers where the user was sent.
"""

from pennywise.models.notification import Notification
from pennywise.services.notifications.interface import Navigator, NotificationSink


class NotificationQueue(NotificationSink):
    """FIFO of notifications waiting to be shown."""

    def __init__(self):
        self._pending: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self._pending.append(notification)

    @property
    def pending(self) -> list[Notification]:
        return list(self._pending)

    def drain(self) -> list[Notification]:
        """Return every pending notification, oldest first, and empty the queue."""
        drained, self._pending = self._pending, []
        return drained


class RouteState(Navigator):
    """Navigator that records the current path and the history of moves."""

    def __init__(self, initial_path: str = "/"):
        self.current_path = initial_path
        self.history: list[str] = [initial_path]

    def go_to(self, path: str) -> None:
        self.current_path = path
        self.history.append(path)
