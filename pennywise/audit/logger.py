"""
Audit Logger

DESIGN DECISION: Every user action and remote outcome is logged.
This provides:
1. Complete traceability
2. Debugging capability when the data service misbehaves
3. A history the user can inspect

The audit logger:
- Is async, like the flows that call it
- Gracefully handles failures (doesn't crash the app if logging fails)
- Supports correlation IDs to trace related events
"""

import logging
from typing import Any, Optional
from uuid import UUID, uuid4

import structlog

from pennywise.models.audit import AuditEvent, AuditEventBuilder
from pennywise.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def configure_logging(level: str = "INFO") -> None:
    """Route structlog output through the stdlib root logger at ``level``."""
    logging.basicConfig(format="%(message)s", level=level.upper())


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence and user visibility)
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_transactions_loaded(
        self,
        user_email: str,
        received: int,
        kept: int,
        skipped: int,
        correlation_id: UUID,
    ) -> None:
        """Log a completed refresh."""
        await self.log(AuditEventBuilder.transactions_loaded(
            user_email=user_email,
            received=received,
            kept=kept,
            skipped=skipped,
            correlation_id=correlation_id,
        ))

    async def log_load_failed(
        self,
        user_email: Optional[str],
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a refresh that raised."""
        await self.log(AuditEventBuilder.transactions_load_failed(
            user_email=user_email,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_data_format_error(
        self,
        user_email: Optional[str],
        received_type: str,
        correlation_id: UUID,
    ) -> None:
        """Log a list result that wasn't a sequence."""
        await self.log(AuditEventBuilder.data_format_error(
            user_email=user_email,
            received_type=received_type,
            correlation_id=correlation_id,
        ))

    async def log_transaction_added(
        self,
        transaction_id: int,
        user_email: str,
        amount: float,
        correlation_id: UUID,
    ) -> None:
        """Log a confirmed add."""
        await self.log(AuditEventBuilder.transaction_added(
            transaction_id=transaction_id,
            user_email=user_email,
            amount=amount,
            correlation_id=correlation_id,
        ))

    async def log_add_failed(
        self,
        user_email: Optional[str],
        reason: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a rejected or failed add."""
        await self.log(AuditEventBuilder.transaction_add_failed(
            user_email=user_email,
            reason=reason,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_transaction_deleted(
        self,
        transaction_id: int,
        user_email: str,
        correlation_id: UUID,
    ) -> None:
        """Log a confirmed delete."""
        await self.log(AuditEventBuilder.transaction_deleted(
            transaction_id=transaction_id,
            user_email=user_email,
            correlation_id=correlation_id,
        ))

    async def log_delete_failed(
        self,
        transaction_id: Optional[int],
        user_email: Optional[str],
        reason: str,
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a rejected or failed delete."""
        await self.log(AuditEventBuilder.transaction_delete_failed(
            transaction_id=transaction_id,
            user_email=user_email,
            reason=reason,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    async def log_invalid_transaction_id(
        self,
        raw_id: Any,
        user_email: Optional[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.invalid_transaction_id(
            raw_id=raw_id,
            user_email=user_email,
            correlation_id=correlation_id,
        ))

    async def log_unauthenticated_action(
        self,
        action: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.unauthenticated_action(
            action=action,
            correlation_id=correlation_id,
        ))

    async def log_user_signed_in(
        self,
        user_email: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.user_signed_in(
            user_email=user_email,
            correlation_id=correlation_id,
        ))

    async def log_user_signed_out(
        self,
        user_email: Optional[str],
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.user_signed_out(
            user_email=user_email,
            correlation_id=correlation_id,
        ))

    async def log_sign_out_failed(
        self,
        user_email: Optional[str],
        error_message: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.sign_out_failed(
            user_email=user_email,
            error_message=error_message,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new user action (e.g., adding a transaction).
    Pass it through all subsequent operations.
    """
    return uuid4()
