"""
Data Models Package

This package contains all Pydantic models used in the Family Ledger system.
All data flowing through the system must conform to these schemas.
"""

from src.models.ledger import (
    Category,
    SubCategory,
    Transaction,
    TransactionDraft,
    TransactionStatus,
    TransactionType,
    TransactionUpdate,
    check_installment_fields,
    new_id,
)
from src.models.period import MonthRef
from src.models.summary import (
    UNKNOWN_CATEGORY_COLOR,
    UNKNOWN_CATEGORY_NAME,
    CategoryTotal,
    FinancialSummary,
)

__all__ = [
    # Ledger models
    "Category",
    "SubCategory",
    "Transaction",
    "TransactionDraft",
    "TransactionStatus",
    "TransactionType",
    "TransactionUpdate",
    "check_installment_fields",
    "new_id",
    # Periods
    "MonthRef",
    # Summary models
    "CategoryTotal",
    "FinancialSummary",
    "UNKNOWN_CATEGORY_COLOR",
    "UNKNOWN_CATEGORY_NAME",
]
