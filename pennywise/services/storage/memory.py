"""
In-Memory Storage Implementation

Used by the test suite and as the fallback backend when Google Sheets
isn't configured. Follows the same contract as the Sheets backend,
so records come back with string dates just like a real remote service.
"""

import copy
from typing import Optional

from pennywise.models.audit import AuditEvent
from pennywise.services.storage.interface import (
    AuditStorageInterface,
    TransactionDataService,
)


class InMemoryTransactionService(TransactionDataService):
    """Dictionary-backed transaction data service."""

    def __init__(self, records: Optional[list[dict]] = None):
        self._records: list[dict] = [dict(r) for r in records or []]

    def _next_id(self) -> int:
        ids = []
        for record in self._records:
            try:
                ids.append(int(record.get("id")))
            except (TypeError, ValueError):
                continue
        return max(ids, default=0) + 1

    async def list(self) -> list[dict]:
        """Return copies of every record, all users included."""
        return copy.deepcopy(self._records)

    async def create(self, payload: dict) -> dict:
        if not payload.get("userEmail"):
            return {"error": "userEmail is required"}
        if payload.get("amount") is None or payload.get("date") is None:
            return {"error": "amount and date are required"}

        record = dict(payload)
        record["id"] = self._next_id()
        self._records.append(record)
        return dict(record)

    async def delete(self, transaction_id: int, owner_email: str) -> dict:
        for idx, record in enumerate(self._records):
            if str(record.get("id")) == str(transaction_id) and record.get("userEmail") == owner_email:
                del self._records[idx]
                return {"success": True}
        return {"success": False, "error": "not found"}


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True
