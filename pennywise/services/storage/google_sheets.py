"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the remote data store because:
1. Users can view and export their data directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions or sequences (ids are max(id) + 1, last writer wins)
- Every cell comes back as a string; the gateway coerces types

The implementation follows the abstract interface, so the store and
flows don't change if the backend does.
"""

import asyncio
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from pennywise.config import get_settings
from pennywise.models.audit import AuditEvent
from pennywise.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    StorageError,
    TransactionDataService,
)


# Column mappings for Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "userEmail",
    "amount",
    "date",
    "description",
    "category",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "entity_type",
    "entity_id",
    "user_email",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        return self._get_or_create_sheet(
            self._settings.transactions_sheet_name,
            TRANSACTION_COLUMNS,
            rows=1000,
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name,
            AUDIT_COLUMNS,
            rows=5000,  # More rows for audit log
        )


class GoogleSheetsTransactionService(TransactionDataService):
    """
    Google Sheets implementation of the transaction data service.

    One transaction per row. Values are returned exactly as Sheets
    stores them (strings), like any loosely-typed remote API.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _row_to_record(row: list) -> dict:
        """Convert a spreadsheet row to a wire record (missing cells become "")."""
        padded = list(row) + [""] * (len(TRANSACTION_COLUMNS) - len(row))
        return dict(zip(TRANSACTION_COLUMNS, padded))

    @staticmethod
    def _record_to_row(record: dict) -> list:
        """Convert a wire record to a spreadsheet row."""
        return [
            "" if record.get(column) is None else str(record.get(column))
            for column in TRANSACTION_COLUMNS
        ]

    @staticmethod
    def _next_id(rows: list[list]) -> int:
        ids = []
        for row in rows:
            try:
                ids.append(int(row[0]))
            except (IndexError, ValueError):
                continue
        return max(ids, default=0) + 1

    @staticmethod
    def _find_row(rows: list[list], transaction_id: int, owner_email: str) -> Optional[int]:
        """Sheet row number (header is row 1) of the owner's transaction, if any."""
        for idx, row in enumerate(rows, start=2):
            record = GoogleSheetsTransactionService._row_to_record(row)
            if record["id"] == str(transaction_id) and record["userEmail"] == owner_email:
                return idx
        return None

    # gspread is synchronous. The methods below do the blocking work and
    # are always run through asyncio.to_thread so the event loop (and the
    # gateway's timeout) keeps running while Sheets answers.

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def _read_rows(self) -> list[list]:
        """Every row below the header. Reads are safe to retry."""
        sheet = self._client.get_transactions_sheet()
        return sheet.get_all_values()[1:]

    def _append_record(self, payload: dict) -> dict:
        record = dict(payload)
        record["id"] = self._next_id(self._read_rows())
        row = self._record_to_row(record)

        sheet = self._client.get_transactions_sheet()
        try:
            sheet.append_row(row, value_input_option="RAW")
        except Exception:
            # Writes are not retried. The append may still have landed
            # (e.g. the response timed out), so look before giving up.
            written = self._row_to_record(row)
            if any(self._row_to_record(r) == written for r in self._read_rows()):
                return record
            raise
        return record

    def _delete_record(self, transaction_id: int, owner_email: str) -> bool:
        idx = self._find_row(self._read_rows(), transaction_id, owner_email)
        if idx is None:
            return False

        sheet = self._client.get_transactions_sheet()
        try:
            sheet.delete_rows(idx)
        except Exception:
            if self._find_row(self._read_rows(), transaction_id, owner_email) is None:
                return True
            raise
        return True

    async def list(self) -> list[dict]:
        """List every transaction record (all users)."""
        try:
            all_rows = await asyncio.to_thread(self._read_rows)
        except Exception as e:
            raise StorageError(f"Failed to list transactions: {e}")
        return [
            self._row_to_record(row)
            for row in all_rows
            if row and row[0]  # Skip empty rows
        ]

    async def create(self, payload: dict) -> dict:
        """Append a transaction row with the next free id."""
        if not payload.get("userEmail"):
            return {"error": "userEmail is required"}
        try:
            float(payload.get("amount"))
        except (TypeError, ValueError):
            return {"error": f"amount is not a number: {payload.get('amount')!r}"}
        if not payload.get("date"):
            return {"error": "date is required"}

        try:
            return await asyncio.to_thread(self._append_record, payload)
        except Exception as e:
            raise StorageError(f"Failed to save transaction: {e}")

    async def delete(self, transaction_id: int, owner_email: str) -> dict:
        """
        Delete the row with this id, but only if it belongs to ``owner_email``.

        A row owned by someone else is reported as "not found" so the
        response doesn't reveal other users' ids.
        """
        try:
            deleted = await asyncio.to_thread(
                self._delete_record, transaction_id, owner_email
            )
        except Exception as e:
            raise StorageError(f"Failed to delete transaction: {e}")

        if deleted:
            return {"success": True}
        return {"success": False, "error": "not found"}


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _write_row(self, row: list) -> None:
        sheet = self._client.get_audit_sheet()
        sheet.append_row(row, value_input_option="RAW")

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            await asyncio.to_thread(self._write_row, event.to_sheets_row())
            return True
        except Exception as e:
            raise StorageError(f"Failed to write audit event: {e}")
