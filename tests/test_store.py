"""Tests for the transaction store (refresh, filter, local patches)."""

import asyncio
from datetime import date
from unittest.mock import AsyncMock

import pytest

from pennywise.audit import AuditLogger
from pennywise.gateway import TransactionGateway
from pennywise.models.audit import AuditEventType
from pennywise.models.transaction import Transaction
from pennywise.store import TransactionStore, sort_by_date_desc
from tests.helpers import ALICE, BOB, run, sample_records


def make_store(service, notifications, audit_storage=None) -> TransactionStore:
    audit_logger = AuditLogger(audit_storage) if audit_storage is not None else None
    return TransactionStore(TransactionGateway(service), notifications, audit_logger)


def make_tx(tx_id: int, day: int, email: str = "a@x.com", amount: float = 1) -> Transaction:
    return Transaction(id=tx_id, user_email=email, amount=amount, date=date(2024, 1, day))


class TestInitialState:
    """Tests for a freshly created store."""

    def test_store_starts_loading_and_empty(self, notifications):
        store = make_store(AsyncMock(), notifications)
        assert store.loading
        assert store.transactions == []
        assert store.owner is None


class TestRefresh:
    """Tests for refresh()."""

    def test_refresh_keeps_only_owned_records(self, data_service, notifications):
        store = make_store(data_service, notifications)
        run(store.refresh(ALICE))

        assert [t.id for t in store.transactions] == [2, 1]  # newest first
        assert all(t.user_email == "a@x.com" for t in store.transactions)
        assert not store.loading
        assert store.owner == ALICE
        assert notifications.pending == []

    def test_refresh_for_other_user(self, data_service, notifications):
        store = make_store(data_service, notifications)
        run(store.refresh(BOB))
        assert [t.id for t in store.transactions] == [7]

    def test_refresh_without_user_clears(self, data_service, notifications):
        store = make_store(data_service, notifications)
        run(store.refresh(ALICE))
        run(store.refresh(None))

        assert store.transactions == []
        assert not store.loading
        assert store.owner is None

    def test_refresh_without_user_makes_no_call(self, notifications):
        service = AsyncMock()
        store = make_store(service, notifications)
        run(store.refresh(None))
        service.list.assert_not_called()

    def test_refresh_skips_malformed_records(self, notifications, audit_storage):
        records = sample_records() + [
            {"id": "x", "userEmail": "a@x.com", "amount": 1, "date": "2024-01-05"},
            {"id": 9, "userEmail": "a@x.com", "amount": "lots", "date": "2024-01-05"},
            "not a record",
            None,
        ]
        service = AsyncMock()
        service.list.return_value = records
        store = make_store(service, notifications, audit_storage)

        run(store.refresh(ALICE))

        assert [t.id for t in store.transactions] == [2, 1]
        loaded = audit_storage.events[-1]
        assert loaded.event_type == AuditEventType.TRANSACTIONS_LOADED
        assert loaded.details == {"received": 7, "kept": 2, "skipped_malformed": 2}

    def test_refresh_data_format_error(self, notifications, audit_storage):
        service = AsyncMock()
        service.list.return_value = {"error": "oops"}
        store = make_store(service, notifications, audit_storage)

        run(store.refresh(ALICE))

        assert store.transactions == []
        assert not store.loading
        [notification] = notifications.drain()
        assert notification.title == "Data format error!"
        assert notification.is_error
        assert audit_storage.events[-1].event_type == AuditEventType.DATA_FORMAT_ERROR

    def test_refresh_list_failure(self, notifications, audit_storage):
        service = AsyncMock()
        service.list.side_effect = RuntimeError("network down")
        store = make_store(service, notifications, audit_storage)

        run(store.refresh(ALICE))

        assert store.transactions == []
        assert not store.loading
        [notification] = notifications.drain()
        assert notification.title == "Loading failed!"
        assert audit_storage.events[-1].event_type == AuditEventType.TRANSACTIONS_LOAD_FAILED

    def test_failed_refresh_discards_previous_contents(self, notifications):
        service = AsyncMock()
        service.list.side_effect = [sample_records(), RuntimeError("boom")]
        store = make_store(service, notifications)
        run(store.refresh(ALICE))
        assert len(store) == 2

        run(store.refresh(ALICE))
        assert len(store) == 0

    def test_refresh_sorts_newest_first(self, notifications):
        service = AsyncMock()
        service.list.return_value = [
            {"id": 1, "userEmail": "a@x.com", "amount": 1, "date": "2024-01-01"},
            {"id": 3, "userEmail": "a@x.com", "amount": 1, "date": "2024-01-03"},
            {"id": 2, "userEmail": "a@x.com", "amount": 1, "date": "2024-01-02T12:00:00+02:00"},
        ]
        store = make_store(service, notifications)
        run(store.refresh(ALICE))
        assert [t.id for t in store.transactions] == [3, 2, 1]

    def test_stale_refresh_is_discarded(self, notifications):
        """A refresh that finishes after the identity changed must not repopulate."""
        events = {}

        async def slow_list():
            events["started"].set()
            await events["release"].wait()
            return sample_records()

        service = AsyncMock()
        service.list.side_effect = slow_list
        store = make_store(service, notifications)

        async def scenario():
            events["started"] = asyncio.Event()
            events["release"] = asyncio.Event()
            task = asyncio.create_task(store.refresh(ALICE))
            await events["started"].wait()
            store.on_identity_changed(None)  # logout while the fetch is in flight
            events["release"].set()
            await task

        run(scenario())

        assert store.transactions == []
        assert store.owner is None
        assert not store.loading


class TestIdentityChanges:
    """Tests for clearing on identity changes."""

    def test_identity_change_discards_data(self, data_service, notifications):
        store = make_store(data_service, notifications)
        run(store.refresh(ALICE))

        store.on_identity_changed(BOB)

        assert store.transactions == []
        assert store.owner == BOB
        assert store.loading
        assert store.needs_refresh(BOB)

    def test_same_identity_keeps_data(self, data_service, notifications):
        store = make_store(data_service, notifications)
        run(store.refresh(ALICE))
        store.on_identity_changed(ALICE)
        assert len(store) == 2
        assert not store.needs_refresh(ALICE)

    def test_logout_clears_without_loading(self, data_service, notifications):
        store = make_store(data_service, notifications)
        run(store.refresh(ALICE))
        store.on_identity_changed(None)
        assert store.transactions == []
        assert not store.loading
        assert not store.needs_refresh(None)


class TestLocalPatches:
    """Tests for insert() and remove()."""

    @pytest.fixture
    def store(self, data_service, notifications):
        store = make_store(data_service, notifications)
        run(store.refresh(ALICE))
        return store

    def test_insert_keeps_date_order(self, store):
        assert store.insert(make_tx(3, day=3))
        assert [t.id for t in store.transactions] == [3, 2, 1]

        assert store.insert(make_tx(4, day=1))
        assert [t.id for t in store.transactions][0] == 3
        assert {t.id for t in store.transactions} == {1, 2, 3, 4}

    def test_insert_replaces_same_id(self, store):
        store.insert(make_tx(2, day=2, amount=-99))
        assert len(store) == 2
        assert [t.amount for t in store.transactions if t.id == 2] == [-99]

    def test_insert_ignores_foreign_owner(self, store):
        assert not store.insert(make_tx(8, day=5, email="b@x.com"))
        assert len(store) == 2

    def test_remove_preserves_order(self, store):
        store.insert(make_tx(3, day=3))
        assert store.remove(2)
        assert [t.id for t in store.transactions] == [3, 1]

    def test_remove_missing_id(self, store):
        assert not store.remove(99)
        assert len(store) == 2

    def test_transactions_property_is_a_copy(self, store):
        store.transactions.clear()
        assert len(store) == 2


class TestSortByDate:
    """Tests for sort_by_date_desc."""

    def test_equal_dates_keep_relative_order(self):
        transactions = [make_tx(1, day=1), make_tx(2, day=1), make_tx(3, day=2)]
        assert [t.id for t in sort_by_date_desc(transactions)] == [3, 1, 2]
