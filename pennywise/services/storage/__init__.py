"""
Storage Services Package

Provides abstract interfaces and concrete implementations for the
remote transaction data service and the audit log.
Google Sheets is the hosted backend; the in-memory one serves tests
and offline development.
"""

from pennywise.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    StorageError,
    TransactionDataService,
)
from pennywise.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsTransactionService,
)
from pennywise.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryTransactionService,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "TransactionDataService",
    # Exceptions
    "ConnectionError",
    "StorageError",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsTransactionService",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryTransactionService",
]
