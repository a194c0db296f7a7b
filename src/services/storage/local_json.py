"""
Local JSON-File Storage Implementation

The offline fallback for the remote store. Each collection lives in its
own JSON file inside a data directory:

    <data_dir>/categories.json
    <data_dir>/transactions.json

TRADEOFFS:
- Every mutation rewrites the whole collection (fine for a household ledger)
- Single process only, no file locking
- Writes go to a temp file first and are renamed into place, so a crash
  never leaves a half-written file behind
"""

import json
import os
from pathlib import Path
from typing import Optional, Sequence, TypeVar

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from src.config import LocalStorageSettings, get_settings
from src.log import get_logger
from src.models.ledger import Category, Transaction
from src.services.storage.defaults import default_categories
from src.services.storage.interface import (
    LedgerStorageInterface,
    NotFoundError,
    PersistenceError,
)


CATEGORIES_FILE = "categories.json"
TRANSACTIONS_FILE = "transactions.json"

ModelT = TypeVar("ModelT", bound=BaseModel)

logger = get_logger(__name__)


class LocalJsonLedgerStorage(LedgerStorageInterface):
    """
    JSON-file implementation of ledger storage.

    Collections are read fully, changed in memory and written back.
    """

    def __init__(
        self,
        data_dir: Optional[Path] = None,
        settings: Optional[LocalStorageSettings] = None,
    ):
        if data_dir is None:
            settings = settings or get_settings().local_storage
            data_dir = Path(settings.data_dir)
        self._data_dir = Path(data_dir)
        self._categories_adapter = TypeAdapter(list[Category])
        self._transactions_adapter = TypeAdapter(list[Transaction])

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    def _read(self, filename: str, adapter: TypeAdapter) -> list:
        path = self._data_dir / filename
        if not path.exists():
            return []
        try:
            return adapter.validate_json(path.read_bytes())
        except PydanticValidationError as e:
            raise PersistenceError(
                f"Stored data in {path} does not match the expected schema: {e}"
            )
        except OSError as e:
            raise PersistenceError(f"Failed to read {path}: {e}")

    def _write(self, filename: str, items: Sequence[ModelT]) -> None:
        path = self._data_dir / filename
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        payload = [item.model_dump(mode="json") for item in items]
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps(payload, ensure_ascii=False, indent=2),
                encoding="utf-8",
            )
            os.replace(tmp_path, path)
        except OSError as e:
            raise PersistenceError(f"Failed to write {path}: {e}")

    async def list_categories(self) -> list[Category]:
        return self._read(CATEGORIES_FILE, self._categories_adapter)

    async def list_transactions(self) -> list[Transaction]:
        return self._read(TRANSACTIONS_FILE, self._transactions_adapter)

    async def seed_default_categories(self) -> None:
        logger.info("seeding_default_categories", backend="local_json")
        self._write(CATEGORIES_FILE, default_categories())

    async def upsert_category(self, category: Category) -> None:
        categories = await self.list_categories()
        for idx, existing in enumerate(categories):
            if existing.id == category.id:
                categories[idx] = category
                break
        else:
            categories.append(category)
        self._write(CATEGORIES_FILE, categories)

    async def delete_category(self, category_id: str) -> None:
        categories = await self.list_categories()
        self._write(
            CATEGORIES_FILE,
            [c for c in categories if c.id != category_id],
        )

    async def create_transactions(self, transactions: Sequence[Transaction]) -> None:
        stored = await self.list_transactions()
        self._write(TRANSACTIONS_FILE, [*stored, *transactions])

    async def update_transaction(self, transaction: Transaction) -> None:
        stored = await self.list_transactions()
        for idx, existing in enumerate(stored):
            if existing.id == transaction.id:
                stored[idx] = transaction
                self._write(TRANSACTIONS_FILE, stored)
                return
        raise NotFoundError(f"Transaction not found: {transaction.id}")

    async def delete_transaction(self, transaction_id: str) -> None:
        stored = await self.list_transactions()
        self._write(
            TRANSACTIONS_FILE,
            [t for t in stored if t.id != transaction_id],
        )
