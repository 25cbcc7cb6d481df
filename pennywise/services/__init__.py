"""Services package."""

from pennywise.services.identity import (
    IdentityError,
    IdentityProvider,
    LocalIdentityProvider,
    SignInError,
    SignOutError,
)
from pennywise.services.notifications import (
    Navigator,
    NotificationQueue,
    NotificationSink,
    RouteState,
)
from pennywise.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsTransactionService,
    InMemoryAuditStorage,
    InMemoryTransactionService,
    StorageError,
    TransactionDataService,
)

__all__ = [
    # Identity services
    "IdentityError",
    "IdentityProvider",
    "LocalIdentityProvider",
    "SignInError",
    "SignOutError",
    # Notification services
    "Navigator",
    "NotificationQueue",
    "NotificationSink",
    "RouteState",
    # Storage services
    "AuditStorageInterface",
    "ConnectionError",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsTransactionService",
    "InMemoryAuditStorage",
    "InMemoryTransactionService",
    "StorageError",
    "TransactionDataService",
]
