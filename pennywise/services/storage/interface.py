"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for the data service.
This allows us to:
1. Swap Google Sheets for a hosted database later
2. Use in-memory storage for testing and offline development
3. Keep the store and flows decoupled from storage implementation

The interface mirrors the remote data service contract exactly,
including its loosely-typed records and result dictionaries.
Normalization of those shapes is the gateway's job, not the backend's.
"""

from abc import ABC, abstractmethod
from typing import Any

from pennywise.models.audit import AuditEvent


class TransactionDataService(ABC):
    """
    Abstract interface for the remote transaction data service.

    Records use the wire shape:
        {"id", "userEmail", "amount", "date", "description", "category"}
    with amount and date as loosely-typed values.
    """

    @abstractmethod
    async def list(self) -> Any:
        """
        List every stored transaction record.

        NOTE: Records for all users are returned. Ownership filtering
        happens on the client.

        Returns:
            A sequence of record dictionaries

        Raises:
            StorageError: If the backend can't be reached
        """
        pass

    @abstractmethod
    async def create(self, payload: dict) -> dict:
        """
        Create a transaction record.

        Args:
            payload: {"amount", "date" (ISO string), "userEmail", ...}

        Returns:
            The stored record including its new "id",
            or {"error": "<reason>"} if the backend rejected it

        Raises:
            StorageError: If the backend can't be reached
        """
        pass

    @abstractmethod
    async def delete(self, transaction_id: int, owner_email: str) -> dict:
        """
        Delete a transaction record owned by ``owner_email``.

        Returns:
            {"success": True} if deleted,
            {"success": False, "error": "<reason>"} otherwise

        Raises:
            StorageError: If the backend can't be reached
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
