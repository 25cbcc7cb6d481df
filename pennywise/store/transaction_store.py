"""
Transaction Store

The in-memory, ordered list of the signed-in user's transactions.

LIFECYCLE:
1. Identity appears      -> refresh(): full fetch, replaces everything
2. Add confirmed         -> insert(): local patch, re-sorted by date
3. Delete confirmed      -> remove(): local patch, order preserved
4. Identity changes/ends -> cleared before anything else happens

DESIGN DECISION: Local patches after confirmed mutations instead of
re-fetching. The accepted risk is drift: a transaction deleted from
another device stays visible here until the next refresh.

SECURITY NOTE: The data service returns every user's records and the
store keeps only those whose ``userEmail`` matches. That is a display
filter, not an access control boundary.
"""

from collections.abc import Mapping
from typing import Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from pennywise.audit import AuditLogger, create_correlation_id
from pennywise.gateway import DataFormatError, TransactionGateway
from pennywise.models.notification import NotificationBuilder
from pennywise.models.transaction import Identity, Transaction
from pennywise.services.notifications import NotificationSink


def sort_by_date_desc(transactions: list[Transaction]) -> list[Transaction]:
    """Newest first. Stable, so equal dates keep their relative order."""
    return sorted(transactions, key=lambda t: t.date, reverse=True)


class TransactionStore:
    """
    Local mirror of the current user's transactions.

    INVARIANTS:
    - Every held transaction belongs to ``owner`` (email equality)
    - Sorted by date descending after every insert and refresh
    - ``loading`` is cleared whenever a refresh finishes, however it ends
    """

    def __init__(
        self,
        gateway: TransactionGateway,
        notifier: NotificationSink,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._gateway = gateway
        self._notifier = notifier
        self._audit_logger = audit_logger
        self._logger = structlog.get_logger(__name__)

        self._transactions: list[Transaction] = []
        self._loading = True
        self._owner: Optional[Identity] = None
        self._synced = False
        # Bumped whenever the contents are invalidated, so an in-flight
        # refresh can tell its result is stale.
        self._generation = 0

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def transactions(self) -> list[Transaction]:
        return list(self._transactions)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def owner(self) -> Optional[Identity]:
        return self._owner

    def __len__(self) -> int:
        return len(self._transactions)

    def needs_refresh(self, user: Optional[Identity]) -> bool:
        """True when ``user`` is signed in but the store doesn't hold their data yet."""
        return user is not None and (user != self._owner or not self._synced)

    # ------------------------------------------------------------------
    # Identity changes
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Drop everything. Used on logout and anonymous identity."""
        self._generation += 1
        self._transactions = []
        self._owner = None
        self._synced = False
        self._loading = False

    def on_identity_changed(self, user: Optional[Identity]) -> None:
        """
        Listener for the session observer.

        Discards data as soon as the identity differs from the owner.
        A new user leaves the store loading until refresh() runs.
        """
        if user == self._owner:
            return
        self._generation += 1
        self._transactions = []
        self._owner = user
        self._synced = False
        self._loading = user is not None

    # ------------------------------------------------------------------
    # Fetch & filter
    # ------------------------------------------------------------------

    async def refresh(
        self,
        user: Optional[Identity],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """
        Replace the contents with ``user``'s transactions from the data service.

        Never raises: failures empty the store and notify the user.
        """
        if user is None:
            self.clear()
            return

        correlation_id = correlation_id or create_correlation_id()
        if user != self._owner:
            self.on_identity_changed(user)

        self._generation += 1
        generation = self._generation
        self._loading = True

        try:
            records = await self._gateway.list_records()
            if generation != self._generation:
                self._logger.info("stale_refresh_discarded", email=user.email)
                return

            kept, skipped = self._filter_for_owner(records, user.email)
            self._transactions = sort_by_date_desc(kept)

            if self._audit_logger:
                await self._audit_logger.log_transactions_loaded(
                    user_email=user.email,
                    received=len(records),
                    kept=len(kept),
                    skipped=skipped,
                    correlation_id=correlation_id,
                )
        except DataFormatError as e:
            if generation != self._generation:
                return
            self._logger.error(
                "transactions_data_format_error",
                received_type=e.received_type,
            )
            self._transactions = []
            self._notifier.notify(NotificationBuilder.data_format_error())
            if self._audit_logger:
                await self._audit_logger.log_data_format_error(
                    user_email=user.email,
                    received_type=e.received_type,
                    correlation_id=correlation_id,
                )
        except Exception as e:
            if generation != self._generation:
                return
            self._logger.error("transactions_load_failed", error=str(e))
            self._notifier.notify(NotificationBuilder.load_failed())
            self._transactions = []
            if self._audit_logger:
                await self._audit_logger.log_load_failed(
                    user_email=user.email,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
        finally:
            if generation == self._generation:
                self._loading = False
                self._synced = True

    def _filter_for_owner(
        self,
        records: list,
        email: Optional[str],
    ) -> tuple[list[Transaction], int]:
        """
        Keep records owned by ``email`` and coerce them.

        Returns (transactions, number_of_owned_records_that_failed_coercion).
        """
        if not email:
            return [], 0

        kept = []
        skipped = 0
        for record in records:
            if not isinstance(record, Mapping) or record.get("userEmail") != email:
                continue
            try:
                kept.append(Transaction.from_remote(record))
            except ValidationError as e:
                skipped += 1
                self._logger.warning(
                    "malformed_transaction_skipped",
                    record_id=str(record.get("id")),
                    errors=e.error_count(),
                )
        return kept, skipped

    # ------------------------------------------------------------------
    # Local patches (after confirmed remote mutations)
    # ------------------------------------------------------------------

    def insert(self, transaction: Transaction) -> bool:
        """
        Add a confirmed transaction and re-sort.

        An existing entry with the same id is replaced, since the remote id
        is authoritative. Returns False (and changes nothing) if the
        transaction belongs to someone other than the current owner.
        """
        if self._owner is not None and transaction.user_email != self._owner.email:
            self._logger.warning(
                "foreign_transaction_ignored",
                transaction_id=transaction.id,
            )
            return False

        remaining = [t for t in self._transactions if t.id != transaction.id]
        self._transactions = sort_by_date_desc([*remaining, transaction])
        return True

    def remove(self, transaction_id: int) -> bool:
        """Remove by id, keeping the order of everything else. Returns True if found."""
        remaining = [t for t in self._transactions if t.id != transaction_id]
        removed = len(remaining) != len(self._transactions)
        self._transactions = remaining
        return removed
