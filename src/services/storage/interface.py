"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for ledger persistence.
This allows us to:
1. Use Google Sheets as the remote store
2. Fall back to local JSON files when offline
3. Use in-memory storage for testing
4. Keep the ledger store decoupled from any backend

The port is selected once at process start and passed in by construction.
There is no module-level storage singleton.

The interface is intentionally simple - the two collections and the
mutations the ledger store issues, nothing more.
"""

from abc import ABC, abstractmethod
from typing import Sequence

from src.models.ledger import Category, Transaction


class LedgerStorageInterface(ABC):
    """
    Abstract interface for ledger storage operations.

    Any storage implementation (Google Sheets, local files, etc.)
    must implement these methods. Every method raises PersistenceError
    on transport, auth or data-shape failures.
    """

    @abstractmethod
    async def list_categories(self) -> list[Category]:
        """
        Read every category, in stored order.

        Raises:
            PersistenceError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def list_transactions(self) -> list[Transaction]:
        """
        Read every transaction, in stored order.

        Raises:
            PersistenceError: If the store cannot be read
        """
        pass

    @abstractmethod
    async def seed_default_categories(self) -> None:
        """
        Populate the Default Category Set.

        Called once, when list_categories() returned nothing.
        """
        pass

    @abstractmethod
    async def upsert_category(self, category: Category) -> None:
        """
        Create the category, or replace the stored one with the same id.

        Raises:
            PersistenceError: If the write fails
        """
        pass

    @abstractmethod
    async def delete_category(self, category_id: str) -> None:
        """
        Delete a category by id. Transactions referencing it are untouched.

        Raises:
            PersistenceError: If the delete fails
        """
        pass

    @abstractmethod
    async def create_transactions(self, transactions: Sequence[Transaction]) -> None:
        """
        Bulk-insert new transactions (e.g. a whole installment series).

        Raises:
            PersistenceError: If the insert fails
        """
        pass

    @abstractmethod
    async def update_transaction(self, transaction: Transaction) -> None:
        """
        Replace the stored transaction with the same id.

        Raises:
            PersistenceError: If the update fails
            NotFoundError: If the transaction doesn't exist
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: str) -> None:
        """
        Delete a transaction by id. Sibling installments are untouched.

        Raises:
            PersistenceError: If the delete fails
        """
        pass


class PersistenceError(Exception):
    """Base exception for storage operations. Carries a human-readable message."""
    pass


class NotFoundError(PersistenceError):
    """Entity not found in storage."""
    pass


class StorageConnectionError(PersistenceError):
    """Could not connect to storage backend."""
    pass
