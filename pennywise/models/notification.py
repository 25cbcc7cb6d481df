"""
Notification Models for PennyWise

Every outcome of a user action (success or failure) is reported to the
user as a short notification: a title, a description and a severity.

DESIGN DECISION: All user-facing wording lives in NotificationBuilder.
Flows never format messages inline, so the text stays consistent.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field


class NotificationSeverity(str, Enum):
    """How the notification should be shown."""
    DEFAULT = "default"
    DESTRUCTIVE = "destructive"


class Notification(BaseModel):
    """A single user-visible message."""

    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="")
    severity: NotificationSeverity = Field(default=NotificationSeverity.DEFAULT)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_error(self) -> bool:
        return self.severity == NotificationSeverity.DESTRUCTIVE


class NotificationBuilder:
    """
    Helper class to build notifications for common outcomes.

    Usage:
        notifier.notify(NotificationBuilder.transaction_added())
        notifier.notify(NotificationBuilder.add_failed("quota exceeded"))
    """

    @staticmethod
    def _error(title: str, description: str) -> Notification:
        return Notification(
            title=title,
            description=description,
            severity=NotificationSeverity.DESTRUCTIVE,
        )

    # Loading

    @staticmethod
    def data_format_error() -> Notification:
        return NotificationBuilder._error(
            "Data format error!",
            "Could not process the transaction data.",
        )

    @staticmethod
    def load_failed() -> Notification:
        return NotificationBuilder._error(
            "Loading failed!",
            "Could not load your transactions.",
        )

    # Adding

    @staticmethod
    def add_unauthenticated() -> Notification:
        return NotificationBuilder._error(
            "Error",
            "Please sign in to add a transaction.",
        )

    @staticmethod
    def transaction_added() -> Notification:
        return Notification(
            title="Success!",
            description="Your transaction has been recorded.",
        )

    @staticmethod
    def add_failed(detail: str) -> Notification:
        return NotificationBuilder._error(
            "Error!",
            f"Could not add the transaction: {detail}",
        )

    @staticmethod
    def add_failed_unknown() -> Notification:
        return NotificationBuilder.add_failed("Unknown error.")

    # Deleting

    @staticmethod
    def delete_unauthenticated() -> Notification:
        return NotificationBuilder._error(
            "Error",
            "Please sign in to delete a transaction.",
        )

    @staticmethod
    def invalid_transaction_id() -> Notification:
        return NotificationBuilder._error(
            "Error!",
            "Invalid transaction ID.",
        )

    @staticmethod
    def transaction_deleted() -> Notification:
        return Notification(
            title="Success!",
            description="Transaction deleted.",
        )

    @staticmethod
    def delete_failed(detail: str) -> Notification:
        return NotificationBuilder._error(
            "Error!",
            detail or "Could not delete the transaction.",
        )

    @staticmethod
    def delete_failed_unknown() -> Notification:
        return NotificationBuilder._error(
            "Error!",
            "Could not delete the transaction: Unknown error.",
        )

    @staticmethod
    def delete_error() -> Notification:
        return NotificationBuilder._error(
            "Error!",
            "Something went wrong while deleting.",
        )

    # Session

    @staticmethod
    def signed_in(email: str) -> Notification:
        return Notification(
            title="Welcome!",
            description=f"Signed in as {email}.",
        )

    @staticmethod
    def sign_in_failed(detail: str) -> Notification:
        return NotificationBuilder._error("Sign-in error", detail)

    @staticmethod
    def signed_out() -> Notification:
        return Notification(
            title="You have signed out",
            description="See you soon!",
        )

    @staticmethod
    def sign_out_failed(detail: str) -> Notification:
        return NotificationBuilder._error("Sign-out error", detail)
