"""
Data Models Package

This package contains all Pydantic models used in PennyWise.
All data crossing a boundary (data service, identity provider, UI)
must conform to these schemas.
"""

from pennywise.models.transaction import (
    CategorySpending,
    Identity,
    NewTransaction,
    Transaction,
    TransactionCategory,
)
from pennywise.models.notification import (
    Notification,
    NotificationBuilder,
    NotificationSeverity,
)
from pennywise.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "CategorySpending",
    "Identity",
    "NewTransaction",
    "Transaction",
    "TransactionCategory",
    # Notification models
    "Notification",
    "NotificationBuilder",
    "NotificationSeverity",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
