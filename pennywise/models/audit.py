"""
Audit Models for PennyWise

Every user action and every remote outcome is logged for audit purposes.
This provides:
1. Traceability of every add, delete, load and sign-out
2. Debugging information when the data service misbehaves
3. Ability to reconstruct what the user saw and when

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """
    Types of events we audit.

    Each outcome of a user action has its own event type.
    """
    # Loading
    TRANSACTIONS_LOADED = "transactions_loaded"
    TRANSACTIONS_LOAD_FAILED = "transactions_load_failed"
    DATA_FORMAT_ERROR = "data_format_error"

    # Mutations
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_ADD_FAILED = "transaction_add_failed"
    TRANSACTION_DELETED = "transaction_deleted"
    TRANSACTION_DELETE_FAILED = "transaction_delete_failed"
    INVALID_TRANSACTION_ID = "invalid_transaction_id"
    UNAUTHENTICATED_ACTION = "unauthenticated_action"

    # Session
    USER_SIGNED_IN = "user_signed_in"
    USER_SIGNED_OUT = "user_signed_out"
    SIGN_OUT_FAILED = "sign_out_failed"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'session')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )
    user_email: Optional[str] = Field(
        default=None,
        description="Identity that triggered the event, if any"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events in one user action)"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_message: Optional[str] = None

    # User action tracking
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_email": self.user_email,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         user_email, correlation_id, description, details_json, error_message,
         is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            self.user_email or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.transaction_added(transaction_id, email, amount, correlation_id)
        event = AuditEventBuilder.user_signed_out(email, correlation_id)
    """

    @staticmethod
    def transactions_loaded(
        user_email: str,
        received: int,
        kept: int,
        skipped: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_LOADED,
            entity_type="session",
            user_email=user_email,
            correlation_id=correlation_id,
            description=f"Loaded {kept} transactions ({received} received)",
            details={
                "received": received,
                "kept": kept,
                "skipped_malformed": skipped,
            },
        )

    @staticmethod
    def transactions_load_failed(
        user_email: Optional[str],
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTIONS_LOAD_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="session",
            user_email=user_email,
            correlation_id=correlation_id,
            description="Failed to load transactions",
            error_message=error_message,
        )

    @staticmethod
    def data_format_error(
        user_email: Optional[str],
        received_type: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATA_FORMAT_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="session",
            user_email=user_email,
            correlation_id=correlation_id,
            description=f"Data service returned {received_type} instead of a list",
            details={
                "received_type": received_type,
            },
        )

    @staticmethod
    def transaction_added(
        transaction_id: int,
        user_email: str,
        amount: float,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            user_email=user_email,
            correlation_id=correlation_id,
            description=f"Transaction added: {amount:.2f}",
            details={
                "amount": amount,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_add_failed(
        user_email: Optional[str],
        reason: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADD_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            user_email=user_email,
            correlation_id=correlation_id,
            description=f"Transaction add failed: {reason}",
            error_message=error_message,
            details={
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: int,
        user_email: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            entity_type="transaction",
            entity_id=str(transaction_id),
            user_email=user_email,
            correlation_id=correlation_id,
            description=f"Transaction deleted: {transaction_id}",
            is_user_action=True,
        )

    @staticmethod
    def transaction_delete_failed(
        transaction_id: Optional[int],
        user_email: Optional[str],
        reason: str,
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=str(transaction_id) if transaction_id is not None else None,
            user_email=user_email,
            correlation_id=correlation_id,
            description=f"Transaction delete failed: {reason}",
            error_message=error_message,
            details={
                "reason": reason,
            },
            is_user_action=True,
        )

    @staticmethod
    def invalid_transaction_id(
        raw_id: Any,
        user_email: Optional[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVALID_TRANSACTION_ID,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            user_email=user_email,
            correlation_id=correlation_id,
            description="Rejected a non-numeric transaction id",
            details={
                "raw_id": repr(raw_id),
            },
            is_user_action=True,
        )

    @staticmethod
    def unauthenticated_action(
        action: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UNAUTHENTICATED_ACTION,
            severity=AuditSeverity.WARNING,
            entity_type="session",
            correlation_id=correlation_id,
            description=f"Attempted '{action}' without a signed-in user",
            details={
                "action": action,
            },
            is_user_action=True,
        )

    @staticmethod
    def user_signed_in(
        user_email: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_IN,
            entity_type="session",
            user_email=user_email,
            correlation_id=correlation_id,
            description=f"User signed in: {user_email}",
            is_user_action=True,
        )

    @staticmethod
    def user_signed_out(
        user_email: Optional[str],
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.USER_SIGNED_OUT,
            entity_type="session",
            user_email=user_email,
            correlation_id=correlation_id,
            description="User signed out",
            is_user_action=True,
        )

    @staticmethod
    def sign_out_failed(
        user_email: Optional[str],
        error_message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SIGN_OUT_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="session",
            user_email=user_email,
            correlation_id=correlation_id,
            description="Sign-out failed",
            error_message=error_message,
            is_user_action=True,
        )
