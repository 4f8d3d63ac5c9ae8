"""
Google Sheets Storage Implementation

Expenses are stored one per row in an "Expenses" worksheet; audit events
are appended to an "AuditLog" worksheet.

TRADEOFFS:
- Not suitable for high-volume data (one user's expenses fit comfortably)
- No transactions (every write touches exactly one row)
- Limited query capabilities (owner filtering happens in Python)

This backend plays the role of the document database: it assigns ids and
creation timestamps, and returns rows as plain documents that the store
decodes at the boundary.
"""

import json
from datetime import date, datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

import gspread
from google.oauth2.service_account import Credentials
from gspread.utils import rowcol_to_a1
from tenacity import retry, stop_after_attempt, wait_exponential

from fintrax.config import get_settings
from fintrax.errors import NotFoundError
from fintrax.models.audit import (
    AUDIT_COLUMNS,
    AuditEvent,
    AuditEventType,
    AuditSeverity,
)
from fintrax.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    Document,
    ExpenseRepositoryInterface,
    StorageError,
)


# Column mappings for Expenses sheet
EXPENSE_COLUMNS = [
    "id",
    "owner_id",
    "created_at",
    "title",
    "amount",
    "category",
    "date",
    "notes",
]


def _cell(value: Any) -> str:
    """Serialize a field value into a sheet cell."""
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and retries connecting and opening the
    spreadsheet. Row writes are never retried.
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

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
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

    def _get_or_create_sheet(self, title: str, columns: list[str], rows: int) -> gspread.Worksheet:
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

    def get_expenses_sheet(self) -> gspread.Worksheet:
        """Get or create the Expenses worksheet."""
        return self._get_or_create_sheet(
            self._settings.expenses_sheet_name, EXPENSE_COLUMNS, rows=1000
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


class GoogleSheetsExpenseRepository(ExpenseRepositoryInterface):
    """
    Google Sheets implementation of the expense collection.

    Rows are returned as documents of strings; decode_expense() turns them
    into typed Expense objects.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _row_to_document(row: list) -> Document:
        """Convert a spreadsheet row to a document."""
        padded = list(row) + [""] * (len(EXPENSE_COLUMNS) - len(row))
        return dict(zip(EXPENSE_COLUMNS, padded))

    @staticmethod
    def _document_to_row(document: Document) -> list[str]:
        """Convert a document to a spreadsheet row."""
        return [_cell(document.get(column)) for column in EXPENSE_COLUMNS]

    def _find_row(self, sheet: gspread.Worksheet, expense_id: str) -> tuple[Optional[int], Optional[list]]:
        """Locate a row by id. Returns (1-based row index, row) or (None, None)."""
        all_rows = sheet.get_all_values()
        # Start from 2 (row 1 is header)
        for idx, row in enumerate(all_rows[1:], start=2):
            if row and row[0] == expense_id:
                return idx, row
        return None, None

    async def insert(self, owner_id: str, fields: dict[str, Any]) -> Document:
        """
        Append a new expense row.

        The append is never repeated: if it fails, the sheet is checked for
        the row's id, since the write may have landed before the error.
        """
        document = {
            **fields,
            "id": uuid4().hex,
            "owner_id": owner_id,
            "created_at": datetime.now(timezone.utc),
        }
        row = self._document_to_row(document)
        try:
            sheet = self._client.get_expenses_sheet()
        except Exception as e:
            raise StorageError(f"Failed to save expense: {e}")

        try:
            sheet.append_row(row, value_input_option="RAW")
        except Exception as e:
            try:
                _, stored = self._find_row(sheet, document["id"])
            except Exception:
                raise StorageError(f"Failed to save expense: {e}") from e
            if stored is None:
                raise StorageError(f"Failed to save expense: {e}") from e
        return self._row_to_document(row)

    async def query_by_owner(self, owner_id: str) -> list[Document]:
        """Every row owned by owner_id, in sheet order."""
        try:
            sheet = self._client.get_expenses_sheet()
            all_rows = sheet.get_all_values()[1:]  # Skip header
        except Exception as e:
            raise StorageError(f"Failed to load expenses: {e}")

        return [
            self._row_to_document(row)
            for row in all_rows
            if row and row[0] and len(row) > 1 and row[1] == owner_id
        ]

    async def get(self, expense_id: str) -> Optional[Document]:
        """Retrieve an expense row by id."""
        try:
            sheet = self._client.get_expenses_sheet()
            _, row = self._find_row(sheet, expense_id)
        except Exception as e:
            raise StorageError(f"Failed to get expense: {e}")
        return self._row_to_document(row) if row else None

    async def update(self, expense_id: str, fields: dict[str, Any]) -> Document:
        """Rewrite an existing row with the patched fields."""
        try:
            sheet = self._client.get_expenses_sheet()
            idx, row = self._find_row(sheet, expense_id)
            if idx is None:
                raise NotFoundError(f"Expense not found: {expense_id}")

            document = self._row_to_document(row)
            # id, owner_id and created_at are never rewritten
            for key, value in fields.items():
                if key in EXPENSE_COLUMNS[3:]:
                    document[key] = value

            new_row = self._document_to_row(document)
            end_cell = rowcol_to_a1(idx, len(EXPENSE_COLUMNS))
            sheet.update(range_name=f"A{idx}:{end_cell}", values=[new_row])
            return self._row_to_document(new_row)
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to update expense: {e}")

    async def delete(self, expense_id: str) -> None:
        """Delete an expense row by id."""
        try:
            sheet = self._client.get_expenses_sheet()
            idx, _ = self._find_row(sheet, expense_id)
            if idx is None:
                raise NotFoundError(f"Expense not found: {expense_id}")
            sheet.delete_rows(idx)
        except NotFoundError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to delete expense: {e}")


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    @staticmethod
    def _row_to_event(row: list) -> AuditEvent:
        """Convert a spreadsheet row to an AuditEvent."""
        def safe_get(index: int, default: str = "") -> str:
            try:
                return row[index] if row[index] else default
            except IndexError:
                return default

        return AuditEvent(
            event_id=UUID(safe_get(0)),
            timestamp=datetime.fromisoformat(safe_get(1)),
            event_type=AuditEventType(safe_get(2)),
            severity=AuditSeverity(safe_get(3)),
            actor_id=safe_get(4) or None,
            entity_type=safe_get(5) or None,
            entity_id=safe_get(6) or None,
            description=safe_get(7),
            details=json.loads(safe_get(8)) if safe_get(8) else {},
            error_message=safe_get(9) or None,
            is_user_action=safe_get(10).lower() == "true",
        )

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        sheet = self._client.get_audit_sheet()
        sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
        return True

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get recent events."""
        try:
            sheet = self._client.get_audit_sheet()
            all_rows = sheet.get_all_values()[1:]
        except Exception as e:
            raise StorageError(f"Failed to get audit events: {e}")

        events = []
        for row in all_rows:
            if not row or not row[0]:
                continue
            try:
                events.append(self._row_to_event(row))
            except (ValueError, KeyError):
                continue  # Skip malformed rows

        # Sort newest first
        events.sort(key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
