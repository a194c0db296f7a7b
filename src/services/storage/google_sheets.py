"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is the remote store because:
1. Family members can view the ledger directly in Sheets
2. No database setup required
3. Built-in backup (Google's infrastructure)
4. Easy to export/migrate later

Each collection is a worksheet acting as a table, with a header row naming
the columns. Columns are located by header name, not position, so a sheet
that was edited by hand keeps working as long as the headers are intact.
A sheet missing an expected column raises a PersistenceError that names
the column, which the app turns into a "schema mismatch" hint.

TRADEOFFS:
- Not suitable for high-volume data (we're fine for a household)
- No transactions (the ledger store rolls back local state instead)
- Limited query capabilities (we filter in Python)
"""

import json
from typing import Any, Optional, Sequence

import gspread
from gspread.utils import rowcol_to_a1
from google.oauth2.service_account import Credentials
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from src.config import GoogleSheetsSettings, get_settings
from src.log import get_logger
from src.models.ledger import Category, SubCategory, Transaction
from src.services.storage.defaults import default_categories
from src.services.storage.interface import (
    LedgerStorageInterface,
    NotFoundError,
    PersistenceError,
    StorageConnectionError,
)


# Column mappings for the Categories sheet
CATEGORY_COLUMNS = [
    "id",
    "name",
    "color",
    "type",
    "sub_categories_json",
]

# Column mappings for the Transactions sheet
TRANSACTION_COLUMNS = [
    "id",
    "date",
    "description",
    "amount",
    "type",
    "status",
    "category_id",
    "sub_category_id",
    "installment_current",
    "installment_total",
]

# Sheets created before the status column existed still load;
# their rows default to COMPLETED. Writing to them requires the column.
OPTIONAL_READ_COLUMNS = {"status"}

logger = get_logger(__name__)

SUB_CATEGORIES = TypeAdapter(list[SubCategory])


def _column_index(
    header: list[str],
    expected: list[str],
    sheet_name: str,
    optional: frozenset[str] = frozenset(),
) -> dict[str, int]:
    """
    Map column names to positions.

    Raises:
        PersistenceError: If a required column is absent from the header
    """
    positions = {name.strip(): idx for idx, name in enumerate(header)}
    missing = [col for col in expected if col not in positions and col not in optional]
    if missing:
        raise PersistenceError(
            f"Sheet '{sheet_name}' is missing column(s): {', '.join(missing)}"
        )
    return {col: positions[col] for col in expected if col in positions}


def _cell(row: list[str], index: dict[str, int], column: str) -> Optional[str]:
    position = index.get(column)
    if position is None or position >= len(row):
        return None
    return row[position].strip() or None


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for API calls.
    """

    def __init__(self, settings: Optional[GoogleSheetsSettings] = None):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = settings or get_settings().google_sheets

    @property
    def settings(self) -> GoogleSheetsSettings:
        return self._settings

    @retry(
        retry=retry_if_exception_type(StorageConnectionError),
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
            except FileNotFoundError as e:
                raise PersistenceError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                ) from e
            except Exception as e:
                raise StorageConnectionError(f"Failed to connect to Google Sheets: {e}") from e

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound as e:
                raise PersistenceError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                ) from e
        return self._spreadsheet

    def get_worksheet(self, title: str, columns: list[str]) -> gspread.Worksheet:
        """Get or create a worksheet, writing the header row on creation."""
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            logger.info("creating_worksheet", title=title)
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=1000,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_categories_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.categories_sheet_name, CATEGORY_COLUMNS)

    def get_transactions_sheet(self) -> gspread.Worksheet:
        return self.get_worksheet(self._settings.transactions_sheet_name, TRANSACTION_COLUMNS)


class GoogleSheetsLedgerStorage(LedgerStorageInterface):
    """
    Google Sheets implementation of ledger storage.

    One row per category / transaction.
    Sub-categories are JSON-serialized into a single column.
    """

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    # -------------------------------------------------------------------------
    # Row conversion
    # -------------------------------------------------------------------------

    @staticmethod
    def _category_values(category: Category) -> dict[str, str]:
        return {
            "id": category.id,
            "name": category.name,
            "color": category.color,
            "type": category.type.value,
            "sub_categories_json": json.dumps(
                [sub.model_dump() for sub in category.sub_categories],
                ensure_ascii=False,
            ),
        }

    @staticmethod
    def _transaction_values(transaction: Transaction) -> dict[str, str]:
        return {
            "id": transaction.id,
            "date": transaction.date.isoformat(),
            "description": transaction.description,
            "amount": str(transaction.amount),
            "type": transaction.type.value,
            "status": transaction.status.value,
            "category_id": transaction.category_id,
            "sub_category_id": transaction.sub_category_id or "",
            "installment_current": (
                str(transaction.installment_current)
                if transaction.installment_current is not None else ""
            ),
            "installment_total": (
                str(transaction.installment_total)
                if transaction.installment_total is not None else ""
            ),
        }

    @staticmethod
    def _to_row(values: dict[str, str], header: list[str], index: dict[str, int]) -> list[str]:
        """Lay values out in the sheet's own column order."""
        row = [""] * len(header)
        for column, value in values.items():
            row[index[column]] = value
        return row

    @staticmethod
    def _row_to_category(row: list[str], index: dict[str, int]) -> Category:
        subs_json = _cell(row, index, "sub_categories_json")
        return Category(
            id=_cell(row, index, "id"),
            name=_cell(row, index, "name"),
            color=_cell(row, index, "color") or "#94a3b8",
            type=_cell(row, index, "type"),
            sub_categories=SUB_CATEGORIES.validate_json(subs_json) if subs_json else [],
        )

    @staticmethod
    def _row_to_transaction(row: list[str], index: dict[str, int]) -> Transaction:
        data: dict[str, Any] = {
            column: _cell(row, index, column)
            for column in TRANSACTION_COLUMNS
        }
        if data["status"] is None:
            del data["status"]
        return Transaction.model_validate(data)

    def _read_sheet(
        self,
        sheet: gspread.Worksheet,
        columns: list[str],
        optional: frozenset[str] = frozenset(),
    ) -> tuple[list[str], dict[str, int], list[list[str]]]:
        all_rows = sheet.get_all_values()
        header = all_rows[0] if all_rows else []
        index = _column_index(header, columns, sheet.title, optional)
        return header, index, all_rows[1:]

    @staticmethod
    def _find_row(rows: list[list[str]], index: dict[str, int], entity_id: str) -> Optional[int]:
        """1-based sheet row number of the entity, header included."""
        id_position = index["id"]
        for offset, row in enumerate(rows, start=2):
            if len(row) > id_position and row[id_position] == entity_id:
                return offset
        return None

    @staticmethod
    def _overwrite_row(sheet: gspread.Worksheet, row_number: int, row: list[str]) -> None:
        cells = sheet.range(
            f"{rowcol_to_a1(row_number, 1)}:{rowcol_to_a1(row_number, len(row))}"
        )
        for cell, value in zip(cells, row):
            cell.value = value
        sheet.update_cells(cells, value_input_option="RAW")

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self) -> list[Category]:
        try:
            sheet = self._client.get_categories_sheet()
            _, index, rows = self._read_sheet(sheet, CATEGORY_COLUMNS)
        except PersistenceError:
            raise
        except gspread.exceptions.APIError as e:
            raise StorageConnectionError(f"Google Sheets API error while listing categories: {e}") from e
        except Exception as e:
            raise PersistenceError(f"Failed to list categories: {e}") from e

        categories = []
        for row in rows:
            if not _cell(row, index, "id"):  # Skip empty rows
                continue
            try:
                categories.append(self._row_to_category(row, index))
            except (PydanticValidationError, ValueError) as e:
                logger.warning("skipping_malformed_category_row", row=row, error=str(e))
        return categories

    async def seed_default_categories(self) -> None:
        try:
            sheet = self._client.get_categories_sheet()
            header, index, _ = self._read_sheet(sheet, CATEGORY_COLUMNS)
            rows = [
                self._to_row(self._category_values(category), header, index)
                for category in default_categories(fresh_ids=True)
            ]
            sheet.append_rows(rows, value_input_option="RAW")
            logger.info("seeded_default_categories", backend="google_sheets", count=len(rows))
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to seed default categories: {e}") from e

    async def upsert_category(self, category: Category) -> None:
        try:
            sheet = self._client.get_categories_sheet()
            header, index, rows = self._read_sheet(sheet, CATEGORY_COLUMNS)
            row = self._to_row(self._category_values(category), header, index)
            row_number = self._find_row(rows, index, category.id)
            if row_number is None:
                sheet.append_row(row, value_input_option="RAW")
            else:
                self._overwrite_row(sheet, row_number, row)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to save category: {e}") from e

    async def delete_category(self, category_id: str) -> None:
        try:
            sheet = self._client.get_categories_sheet()
            _, index, rows = self._read_sheet(sheet, CATEGORY_COLUMNS)
            row_number = self._find_row(rows, index, category_id)
            if row_number is not None:
                sheet.delete_rows(row_number)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to delete category: {e}") from e

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def list_transactions(self) -> list[Transaction]:
        try:
            sheet = self._client.get_transactions_sheet()
            _, index, rows = self._read_sheet(
                sheet, TRANSACTION_COLUMNS, frozenset(OPTIONAL_READ_COLUMNS)
            )
        except PersistenceError:
            raise
        except gspread.exceptions.APIError as e:
            raise StorageConnectionError(f"Google Sheets API error while listing transactions: {e}") from e
        except Exception as e:
            raise PersistenceError(f"Failed to list transactions: {e}") from e

        transactions = []
        for row in rows:
            if not _cell(row, index, "id"):
                continue
            try:
                transactions.append(self._row_to_transaction(row, index))
            except PydanticValidationError as e:
                logger.warning("skipping_malformed_transaction_row", row=row, error=str(e))
        return transactions

    async def create_transactions(self, transactions: Sequence[Transaction]) -> None:
        if not transactions:
            return
        try:
            sheet = self._client.get_transactions_sheet()
            header, index, _ = self._read_sheet(sheet, TRANSACTION_COLUMNS)
            rows = [
                self._to_row(self._transaction_values(t), header, index)
                for t in transactions
            ]
            sheet.append_rows(rows, value_input_option="RAW")
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to save transactions: {e}") from e

    async def update_transaction(self, transaction: Transaction) -> None:
        try:
            sheet = self._client.get_transactions_sheet()
            header, index, rows = self._read_sheet(sheet, TRANSACTION_COLUMNS)
            row_number = self._find_row(rows, index, transaction.id)
            if row_number is None:
                raise NotFoundError(f"Transaction not found: {transaction.id}")
            self._overwrite_row(
                sheet,
                row_number,
                self._to_row(self._transaction_values(transaction), header, index),
            )
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to update transaction: {e}") from e

    async def delete_transaction(self, transaction_id: str) -> None:
        try:
            sheet = self._client.get_transactions_sheet()
            _, index, rows = self._read_sheet(
                sheet, TRANSACTION_COLUMNS, frozenset(OPTIONAL_READ_COLUMNS)
            )
            row_number = self._find_row(rows, index, transaction_id)
            if row_number is not None:
                sheet.delete_rows(row_number)
        except PersistenceError:
            raise
        except Exception as e:
            raise PersistenceError(f"Failed to delete transaction: {e}") from e
