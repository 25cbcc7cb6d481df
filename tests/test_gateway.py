"""Tests for the transaction mutation gateway."""

import asyncio
from datetime import date
from unittest.mock import AsyncMock

import pytest

from pennywise.gateway import (
    DataFormatError,
    InvalidTransactionIdError,
    RemoteMalformedError,
    RemoteRejectionError,
    TransactionGateway,
    TransportError,
    UnauthenticatedError,
    coerce_transaction_id,
)
from pennywise.models.transaction import Identity, NewTransaction
from pennywise.services.storage import InMemoryTransactionService
from tests.helpers import ALICE, run, sample_records


def new_payload(amount: float = 50) -> NewTransaction:
    return NewTransaction(amount=amount, date=date(2024, 1, 3), description="Refund")


class TestCoerceTransactionId:
    """Tests for turning UI identifiers into numbers."""

    @pytest.mark.parametrize("raw,expected", [
        (12, 12),
        ("12", 12),
        (" 12 ", 12),
        ("12.0", 12),
        (12.0, 12),
        ("-3", -3),
    ])
    def test_numeric_ids(self, raw, expected):
        assert coerce_transaction_id(raw) == expected

    @pytest.mark.parametrize("raw", ["abc", "", "  ", None, True, 1.5, "1.5", "nan", float("inf"), [1]])
    def test_invalid_ids(self, raw):
        with pytest.raises(InvalidTransactionIdError) as exc_info:
            coerce_transaction_id(raw)
        assert exc_info.value.raw_id is raw


class TestGatewayList:
    """Tests for list_records."""

    def test_list_returns_all_records(self):
        gateway = TransactionGateway(InMemoryTransactionService(sample_records()))
        records = run(gateway.list_records())
        assert len(records) == 3

    def test_list_accepts_tuple(self):
        service = AsyncMock()
        service.list.return_value = ({"id": 1},)
        assert run(TransactionGateway(service).list_records()) == [{"id": 1}]

    def test_list_rejects_non_sequence(self):
        service = AsyncMock()
        service.list.return_value = {"error": "boom"}
        with pytest.raises(DataFormatError) as exc_info:
            run(TransactionGateway(service).list_records())
        assert exc_info.value.received_type == "dict"

    def test_list_wraps_service_errors(self):
        service = AsyncMock()
        service.list.side_effect = RuntimeError("network down")
        with pytest.raises(TransportError):
            run(TransactionGateway(service).list_records())

    def test_list_times_out(self):
        async def hang():
            await asyncio.sleep(10)

        service = AsyncMock()
        service.list.side_effect = hang
        gateway = TransactionGateway(service, timeout_seconds=0.01)
        with pytest.raises(TransportError, match="timed out"):
            run(gateway.list_records())


class TestGatewayAdd:
    """Tests for add."""

    def test_add_returns_confirmed_transaction(self):
        service = InMemoryTransactionService(sample_records())
        transaction = run(TransactionGateway(service).add(ALICE, new_payload()))

        assert transaction.id == 8  # next after the highest existing id
        assert transaction.user_email == "a@x.com"
        assert transaction.amount == 50
        assert transaction.description == "Refund"

    def test_add_sends_owner_email(self):
        service = AsyncMock()
        service.create.return_value = {"id": 3}
        run(TransactionGateway(service).add(ALICE, new_payload()))

        body = service.create.await_args.args[0]
        assert body["userEmail"] == "a@x.com"
        assert "id" not in body

    def test_add_merges_partial_echo(self):
        """Fields the remote doesn't echo come from what was sent."""
        service = AsyncMock()
        service.create.return_value = {"id": "3"}
        transaction = run(TransactionGateway(service).add(ALICE, new_payload(-12)))
        assert transaction.id == 3
        assert transaction.amount == -12

    @pytest.mark.parametrize("user", [None, Identity(uid="anon")])
    def test_add_without_email_makes_no_call(self, user):
        service = AsyncMock()
        with pytest.raises(UnauthenticatedError):
            run(TransactionGateway(service).add(user, new_payload()))
        service.create.assert_not_called()

    def test_add_rejection(self):
        service = AsyncMock()
        service.create.return_value = {"error": "quota exceeded"}
        with pytest.raises(RemoteRejectionError) as exc_info:
            run(TransactionGateway(service).add(ALICE, new_payload()))
        assert exc_info.value.detail == "quota exceeded"

    @pytest.mark.parametrize("response", [{}, {"ok": True}, None, [1, 2], "created"])
    def test_add_malformed(self, response):
        service = AsyncMock()
        service.create.return_value = response
        with pytest.raises(RemoteMalformedError):
            run(TransactionGateway(service).add(ALICE, new_payload()))

    def test_add_with_invalid_echoed_id_is_malformed(self):
        service = AsyncMock()
        service.create.return_value = {"id": "not-a-number"}
        with pytest.raises(RemoteMalformedError):
            run(TransactionGateway(service).add(ALICE, new_payload()))

    def test_add_echoing_another_owner_is_malformed(self):
        service = AsyncMock()
        service.create.return_value = {"id": 3, "userEmail": "b@x.com"}
        with pytest.raises(RemoteMalformedError):
            run(TransactionGateway(service).add(ALICE, new_payload()))

    def test_add_wraps_service_errors(self):
        service = AsyncMock()
        service.create.side_effect = RuntimeError("boom")
        with pytest.raises(TransportError):
            run(TransactionGateway(service).add(ALICE, new_payload()))


class TestGatewayDelete:
    """Tests for delete."""

    def test_delete_returns_numeric_id(self):
        service = InMemoryTransactionService(sample_records())
        assert run(TransactionGateway(service).delete(ALICE, "2")) == 2

    def test_delete_passes_owner(self):
        service = AsyncMock()
        service.delete.return_value = {"success": True}
        run(TransactionGateway(service).delete(ALICE, 2))
        service.delete.assert_awaited_once_with(2, "a@x.com")

    def test_delete_invalid_id_makes_no_call(self):
        service = AsyncMock()
        with pytest.raises(InvalidTransactionIdError):
            run(TransactionGateway(service).delete(ALICE, "abc"))
        service.delete.assert_not_called()

    def test_delete_without_identity_makes_no_call(self):
        service = AsyncMock()
        with pytest.raises(UnauthenticatedError):
            run(TransactionGateway(service).delete(None, 2))
        service.delete.assert_not_called()

    def test_delete_of_foreign_record_is_rejected(self):
        """b@x.com's record can't be deleted by a@x.com."""
        service = InMemoryTransactionService(sample_records())
        with pytest.raises(RemoteRejectionError) as exc_info:
            run(TransactionGateway(service).delete(ALICE, 7))
        assert exc_info.value.detail == "not found"

    @pytest.mark.parametrize("response", [{}, {"success": False}, None, "ok", {"success": 0, "error": ""}])
    def test_delete_malformed(self, response):
        service = AsyncMock()
        service.delete.return_value = response
        with pytest.raises(RemoteMalformedError):
            run(TransactionGateway(service).delete(ALICE, 2))

    def test_delete_wraps_service_errors(self):
        service = AsyncMock()
        service.delete.side_effect = RuntimeError("boom")
        with pytest.raises(TransportError):
            run(TransactionGateway(service).delete(ALICE, 2))
