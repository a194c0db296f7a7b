"""Ledger package: installment expansion and the optimistic-sync store."""

from src.ledger.errors import (
    PersistenceErrorKind,
    TransactionNotFoundError,
    classify_persistence_error,
    user_message_for,
)
from src.ledger.installments import add_months, expand_installments
from src.ledger.optimistic import OptimisticCollection
from src.ledger.store import LedgerStore

__all__ = [
    "LedgerStore",
    "OptimisticCollection",
    "PersistenceErrorKind",
    "TransactionNotFoundError",
    "add_months",
    "classify_persistence_error",
    "expand_installments",
    "user_message_for",
]
