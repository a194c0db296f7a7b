"""
Storage Services Package

Provides the abstract persistence port and its concrete implementations.
Google Sheets is the remote store, JSON files the local fallback.
"""

from src.services.storage.interface import (
    LedgerStorageInterface,
    NotFoundError,
    PersistenceError,
    StorageConnectionError,
)
from src.services.storage.defaults import DEFAULT_CATEGORIES, default_categories
from src.services.storage.google_sheets import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
)
from src.services.storage.local_json import LocalJsonLedgerStorage

__all__ = [
    # Interface
    "LedgerStorageInterface",
    # Exceptions
    "NotFoundError",
    "PersistenceError",
    "StorageConnectionError",
    # Default data
    "DEFAULT_CATEGORIES",
    "default_categories",
    # Google Sheets implementation
    "GoogleSheetsClient",
    "GoogleSheetsLedgerStorage",
    # Local implementation
    "LocalJsonLedgerStorage",
]
