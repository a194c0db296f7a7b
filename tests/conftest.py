"""
Shared fixtures.

No real API calls in tests: storage is an in-memory fake with
failure injection, the advisor model is a stub.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional, Sequence

import pytest

from src.models.ledger import (
    Category,
    SubCategory,
    Transaction,
    TransactionStatus,
    TransactionType,
)
from src.services.storage import (
    LedgerStorageInterface,
    NotFoundError,
    PersistenceError,
    default_categories,
)


class FakeLedgerStorage(LedgerStorageInterface):
    """
    In-memory storage that records every call.

    fail_on maps a method name to the 1-based call number that should
    raise (e.g. {"upsert_category": 2} fails the second upsert).
    """

    def __init__(
        self,
        categories: Sequence[Category] = (),
        transactions: Sequence[Transaction] = (),
        fail_on: Optional[dict[str, int]] = None,
        error_message: str = "network unreachable",
    ):
        self.categories = list(categories)
        self.transactions = list(transactions)
        self.fail_on = fail_on or {}
        self.error_message = error_message
        self.calls: list[tuple] = []

    def _record(self, method: str, *args) -> None:
        self.calls.append((method, *args))
        count = sum(1 for call in self.calls if call[0] == method)
        if self.fail_on.get(method) == count:
            raise PersistenceError(self.error_message)

    def calls_to(self, method: str) -> list[tuple]:
        return [call for call in self.calls if call[0] == method]

    async def list_categories(self) -> list[Category]:
        self._record("list_categories")
        return list(self.categories)

    async def list_transactions(self) -> list[Transaction]:
        self._record("list_transactions")
        return list(self.transactions)

    async def seed_default_categories(self) -> None:
        self._record("seed_default_categories")
        self.categories = default_categories()

    async def upsert_category(self, category: Category) -> None:
        self._record("upsert_category", category.id)
        self.categories = [c for c in self.categories if c.id != category.id] + [category]

    async def delete_category(self, category_id: str) -> None:
        self._record("delete_category", category_id)
        self.categories = [c for c in self.categories if c.id != category_id]

    async def create_transactions(self, transactions: Sequence[Transaction]) -> None:
        self._record("create_transactions", len(transactions))
        self.transactions.extend(transactions)

    async def update_transaction(self, transaction: Transaction) -> None:
        self._record("update_transaction", transaction.id)
        for idx, existing in enumerate(self.transactions):
            if existing.id == transaction.id:
                self.transactions[idx] = transaction
                return
        raise NotFoundError(f"Transaction not found: {transaction.id}")

    async def delete_transaction(self, transaction_id: str) -> None:
        self._record("delete_transaction", transaction_id)
        self.transactions = [t for t in self.transactions if t.id != transaction_id]


def make_transaction(
    id: str,
    date: str,
    amount: str,
    type: TransactionType = TransactionType.EXPENSE,
    status: TransactionStatus = TransactionStatus.COMPLETED,
    category_id: str = "cat1",
    **extra,
) -> Transaction:
    return Transaction(
        id=id,
        date=dt.date.fromisoformat(date),
        description=extra.pop("description", f"Transaction {id}"),
        amount=Decimal(amount),
        type=type,
        status=status,
        category_id=category_id,
        **extra,
    )


@pytest.fixture
def food_category() -> Category:
    return Category(
        id="cat1",
        name="Food",
        color="#f97316",
        type=TransactionType.EXPENSE,
        sub_categories=[
            SubCategory(id="sub1", name="Groceries"),
            SubCategory(id="sub2", name="Restaurants"),
        ],
    )


@pytest.fixture
def salary_category() -> Category:
    return Category(
        id="cat2",
        name="Salary",
        color="#22c55e",
        type=TransactionType.INCOME,
    )


@pytest.fixture
def categories(food_category, salary_category) -> list[Category]:
    return [food_category, salary_category]


@pytest.fixture
def march_transactions() -> list[Transaction]:
    return [
        make_transaction("t1", "2024-03-05", "100", status=TransactionStatus.COMPLETED),
        make_transaction("t2", "2024-03-20", "50", status=TransactionStatus.PENDING),
        make_transaction("t3", "2024-04-01", "999"),
    ]


@pytest.fixture
def storage(categories) -> FakeLedgerStorage:
    return FakeLedgerStorage(categories=categories)


@pytest.fixture
def tx():
    """Factory for transactions: tx("t1", "2024-03-05", "100")."""
    return make_transaction


@pytest.fixture
def make_storage():
    """Factory for FakeLedgerStorage with custom contents or failures."""
    return FakeLedgerStorage
