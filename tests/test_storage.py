"""
Tests for the storage backends.

The Google Sheets backend is exercised against a mocked worksheet;
no real API calls are made.
"""

import threading
import time
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from pennywise.gateway import TransactionGateway, TransportError
from pennywise.models.audit import AuditEventBuilder
from pennywise.services.storage import (
    GoogleSheetsAuditStorage,
    GoogleSheetsTransactionService,
    InMemoryTransactionService,
    StorageError,
)
from pennywise.services.storage.google_sheets import TRANSACTION_COLUMNS
from tests.helpers import run, sample_records


HEADER = list(TRANSACTION_COLUMNS)


@pytest.fixture
def worksheet():
    sheet = MagicMock()
    sheet.get_all_values.return_value = [
        HEADER,
        ["1", "a@x.com", "100", "2024-01-01T00:00:00.000Z", "Salary", "salary"],
        ["2", "a@x.com", "-30", "2024-01-02T00:00:00.000Z", "Groceries", "food"],
        [],
        ["7", "b@x.com", "5"],
    ]
    return sheet


@pytest.fixture
def sheets_client(worksheet):
    client = MagicMock()
    client.get_transactions_sheet.return_value = worksheet
    client.get_audit_sheet.return_value = worksheet
    return client


class TestInMemoryTransactionService:
    """Tests for the in-memory data service."""

    def test_list_returns_copies(self):
        service = InMemoryTransactionService(sample_records())
        records = run(service.list())
        records[0]["amount"] = 0
        assert run(service.list())[0]["amount"] == 100

    def test_create_assigns_next_id(self):
        service = InMemoryTransactionService(sample_records())
        created = run(service.create({"userEmail": "a@x.com", "amount": 1, "date": "2024-01-05"}))
        assert created["id"] == 8
        assert len(run(service.list())) == 4

    def test_create_requires_owner(self):
        service = InMemoryTransactionService()
        assert run(service.create({"amount": 1, "date": "2024-01-05"})) == {
            "error": "userEmail is required"
        }

    def test_delete_only_own_records(self):
        service = InMemoryTransactionService(sample_records())
        assert run(service.delete(7, "a@x.com")) == {"success": False, "error": "not found"}
        assert run(service.delete(7, "b@x.com")) == {"success": True}
        assert len(run(service.list())) == 2


class TestGoogleSheetsTransactionService:
    """Tests for the Sheets-backed data service."""

    def test_list_skips_header_and_empty_rows(self, sheets_client):
        records = run(GoogleSheetsTransactionService(sheets_client).list())
        assert [r["id"] for r in records] == ["1", "2", "7"]
        assert records[0] == {
            "id": "1",
            "userEmail": "a@x.com",
            "amount": "100",
            "date": "2024-01-01T00:00:00.000Z",
            "description": "Salary",
            "category": "salary",
        }

    def test_list_pads_short_rows(self, sheets_client):
        records = run(GoogleSheetsTransactionService(sheets_client).list())
        assert records[2]["date"] == ""
        assert records[2]["category"] == ""

    def test_create_appends_row(self, sheets_client, worksheet):
        payload = {
            "amount": 50.0,
            "date": "2024-01-03T00:00:00.000+00:00",
            "description": "Refund",
            "category": "other",
            "userEmail": "a@x.com",
        }
        created = run(GoogleSheetsTransactionService(sheets_client).create(payload))

        assert created["id"] == 8
        worksheet.append_row.assert_called_once_with(
            ["8", "a@x.com", "50.0", "2024-01-03T00:00:00.000+00:00", "Refund", "other"],
            value_input_option="RAW",
        )

    @pytest.mark.parametrize("payload,error", [
        ({"amount": 1, "date": "2024-01-01"}, "userEmail is required"),
        ({"userEmail": "a@x.com", "date": "2024-01-01"}, "amount is not a number: None"),
        ({"userEmail": "a@x.com", "amount": 1}, "date is required"),
    ])
    def test_create_rejects_incomplete_payload(self, sheets_client, worksheet, payload, error):
        result = run(GoogleSheetsTransactionService(sheets_client).create(payload))
        assert result == {"error": error}
        worksheet.append_row.assert_not_called()

    def test_delete_own_row(self, sheets_client, worksheet):
        result = run(GoogleSheetsTransactionService(sheets_client).delete(2, "a@x.com"))
        assert result == {"success": True}
        worksheet.delete_rows.assert_called_once_with(3)  # header is row 1

    def test_delete_other_users_row(self, sheets_client, worksheet):
        result = run(GoogleSheetsTransactionService(sheets_client).delete(7, "a@x.com"))
        assert result == {"success": False, "error": "not found"}
        worksheet.delete_rows.assert_not_called()

    def test_append_that_landed_before_failing_is_not_repeated(self, sheets_client, worksheet):
        rows = worksheet.get_all_values.return_value

        def land_then_fail(row, value_input_option):
            rows.append(row)
            raise TimeoutError("response lost")

        worksheet.append_row.side_effect = land_then_fail
        payload = {"userEmail": "a@x.com", "amount": 5, "date": "2024-01-04", "category": "food"}

        created = run(GoogleSheetsTransactionService(sheets_client).create(payload))

        assert created["id"] == 8
        assert worksheet.append_row.call_count == 1
        assert [row[0] for row in rows[1:] if row].count("8") == 1

    def test_append_that_never_landed_is_reported(self, sheets_client, worksheet):
        worksheet.append_row.side_effect = TimeoutError("no response")
        payload = {"userEmail": "a@x.com", "amount": 5, "date": "2024-01-04"}

        with pytest.raises(StorageError):
            run(GoogleSheetsTransactionService(sheets_client).create(payload))
        assert worksheet.append_row.call_count == 1

    def test_delete_that_landed_before_failing_succeeds(self, sheets_client, worksheet):
        rows = worksheet.get_all_values.return_value

        def remove_then_fail(idx):
            del rows[idx - 1]
            raise TimeoutError("response lost")

        worksheet.delete_rows.side_effect = remove_then_fail

        result = run(GoogleSheetsTransactionService(sheets_client).delete(2, "a@x.com"))

        assert result == {"success": True}
        worksheet.delete_rows.assert_called_once_with(3)

    def test_slow_sheet_does_not_block_gateway_timeout(self, sheets_client, worksheet):
        release = threading.Event()

        def slow_read():
            release.wait(timeout=5)
            return [HEADER]

        worksheet.get_all_values.side_effect = slow_read
        gateway = TransactionGateway(
            GoogleSheetsTransactionService(sheets_client),
            timeout_seconds=0.1,
        )

        async def list_with_timer():
            started = time.monotonic()
            try:
                with pytest.raises(TransportError, match="timed out"):
                    await gateway.list_records()
                return time.monotonic() - started
            finally:
                # Let the worker thread finish so the loop can shut down
                release.set()

        assert run(list_with_timer()) < 2


class TestGoogleSheetsAuditStorage:
    """Tests for the Sheets-backed audit log."""

    def test_append_event(self, sheets_client, worksheet):
        event = AuditEventBuilder.user_signed_out(user_email="a@x.com", correlation_id=uuid4())
        assert run(GoogleSheetsAuditStorage(sheets_client).append_event(event))
        worksheet.append_row.assert_called_once_with(
            event.to_sheets_row(),
            value_input_option="RAW",
        )
