"""
Notification and Navigation Interfaces

The flows report outcomes and move the user between views through
these two interfaces. Both are fire-and-forget: nothing is returned
and nothing a sink does can fail the user action that triggered it.
"""

from abc import ABC, abstractmethod

from pennywise.models.notification import Notification


class NotificationSink(ABC):
    """Where user-visible notifications go (toasts, banners, ...)."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        pass


class Navigator(ABC):
    """Side-effecting route changes."""

    @abstractmethod
    def go_to(self, path: str) -> None:
        pass
