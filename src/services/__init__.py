"""Services package."""

from src.services.storage import (
    DEFAULT_CATEGORIES,
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    LedgerStorageInterface,
    LocalJsonLedgerStorage,
    NotFoundError,
    PersistenceError,
    StorageConnectionError,
    default_categories,
)

__all__ = [
    "DEFAULT_CATEGORIES",
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStorage",
    "LedgerStorageInterface",
    "LocalJsonLedgerStorage",
    "NotFoundError",
    "PersistenceError",
    "StorageConnectionError",
    "default_categories",
]
