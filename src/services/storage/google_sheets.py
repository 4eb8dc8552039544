"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is used as the ledger backend because:
1. Users can view and export their ledger directly in Sheets
2. No database setup required
3. Appending a row is the only write we need

TRADEOFFS:
- Not suitable for high-volume data (fine for a personal ledger)
- No transactions (the ledger is append-only, so we don't need them)
- No server-side filtering (the ledger engine filters in Python)

gspread is synchronous. Every call runs in a worker thread so one slow
request does not stall messages from other senders.
"""

import asyncio
import threading
from typing import Any, Callable, Optional, Sequence

import gspread
import structlog
from google.auth.exceptions import GoogleAuthError, TransportError
from google.oauth2.service_account import Credentials
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.config import GoogleSheetsSettings, get_settings
from src.models.audit import AuditEvent
from src.services.storage.interface import (
    LEDGER_COLUMNS,
    AuditStorageInterface,
    LedgerStoreInterface,
    StoreError,
    StoreUnavailable,
)


# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "sender_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
    "is_user_action",
]

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


logger = structlog.get_logger(__name__)


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication, worksheet lookup and retry logic for connecting.
    Only the connection is retried; writes are never retried here.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._worksheets: dict[str, gspread.Worksheet] = {}
        self._settings = settings or get_settings().google_sheets
        self._lock = threading.Lock()

    @retry(
        retry=retry_if_exception_type(StoreUnavailable),
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
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=SCOPES,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise StoreError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except (TransportError, OSError) as e:
                raise StoreUnavailable(f"Failed to connect to Google Sheets: {e}")
            except (GoogleAuthError, ValueError) as e:
                raise StoreError(f"Invalid Google credentials: {e}")
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
                raise StoreError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def get_or_create_worksheet(
        self,
        title: str,
        columns: list[str],
        rows: int = 1000,
    ) -> gspread.Worksheet:
        """
        Get a worksheet by title, creating it with a header row if missing.

        Safe to call repeatedly: an existing worksheet is reused and the
        header is only written when the first row is empty.
        """
        with self._lock:
            sheet = self._worksheets.get(title)
            if sheet is None:
                spreadsheet = self.get_spreadsheet()
                try:
                    sheet = spreadsheet.worksheet(title)
                except gspread.WorksheetNotFound:
                    sheet = spreadsheet.add_worksheet(
                        title=title,
                        rows=rows,
                        cols=len(columns),
                    )
                    logger.info("worksheet_created", title=title)

                header = sheet.row_values(1)
                if not any(cell.strip() for cell in header):
                    sheet.append_row(columns, value_input_option="RAW")
                elif [cell.strip().lower() for cell in header[:len(columns)]] != columns:
                    logger.warning(
                        "worksheet_header_mismatch",
                        title=title,
                        found=header,
                        expected=columns,
                    )
                self._worksheets[title] = sheet
            return sheet

    def get_transactions_sheet(self) -> gspread.Worksheet:
        """Get or create the Transactions worksheet."""
        return self.get_or_create_worksheet(
            self._settings.transactions_sheet_name,
            LEDGER_COLUMNS,
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self.get_or_create_worksheet(
            self._settings.audit_sheet_name,
            AUDIT_COLUMNS,
            rows=5000,  # More rows for audit log
        )


async def _run_sheets_call(operation: str, func: Callable[..., Any], *args: Any) -> Any:
    """
    Run a blocking gspread call in a worker thread and map its failures.

    APIError (the backend answered with an error) becomes StoreError;
    network-level failures become StoreUnavailable.
    """
    try:
        return await asyncio.to_thread(func, *args)
    except StoreError:
        raise
    except gspread.exceptions.APIError as e:
        raise StoreError(f"Google Sheets rejected {operation}: {e}") from e
    except (TransportError, OSError) as e:
        raise StoreUnavailable(f"Google Sheets unreachable during {operation}: {e}") from e
    except Exception as e:
        raise StoreError(f"Failed to {operation}: {e}") from e


class GoogleSheetsLedgerStore(LedgerStoreInterface):
    """
    Google Sheets implementation of the ledger store.

    One transaction per row, columns [date, kind, amount, description].
    Values are written RAW so Sheets does not reformat amounts or dates.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    async def ensure_schema(self) -> None:
        await _run_sheets_call("ensure schema", self._client.get_transactions_sheet)

    def _append(self, row: list[str]) -> None:
        sheet = self._client.get_transactions_sheet()
        sheet.append_row(row, value_input_option="RAW")

    def _read(self) -> list[list[str]]:
        sheet = self._client.get_transactions_sheet()
        return sheet.get_all_values()

    async def append_row(self, row: Sequence[str]) -> None:
        await _run_sheets_call("append row", self._append, list(row))

    async def read_all_rows(self) -> list[list[str]]:
        rows = await _run_sheets_call("read rows", self._read)
        return rows or []


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """
    Google Sheets implementation of audit log storage.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    def _append(self, row: list) -> None:
        sheet = self._client.get_audit_sheet()
        sheet.append_row(row, value_input_option="RAW")

    async def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event."""
        try:
            await _run_sheets_call("append audit event", self._append, event.to_sheets_row())
            return True
        except StoreError as e:
            # Don't raise - audit logging should not break the main flow
            logger.warning(
                "audit_event_write_failed",
                error=str(e),
                event_id=str(event.event_id),
            )
            return False
