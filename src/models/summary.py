"""
Derived summary models.

A FinancialSummary is never persisted. It is recomputed from the ledger
whenever it is needed and has no identity of its own.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, computed_field

from src.models.ledger import Transaction


UNKNOWN_CATEGORY_NAME = "Unknown"
UNKNOWN_CATEGORY_COLOR = "#cbd5e1"


class CategoryTotal(BaseModel):
    """One slice of the per-category expense breakdown."""
    model_config = ConfigDict(frozen=True)

    name: str
    value: Decimal
    color: str


class FinancialSummary(BaseModel):
    """
    Month-scoped totals.

    "Planned" totals include every in-scope transaction regardless of
    status, "realized" totals only those marked COMPLETED.
    """
    model_config = ConfigDict(frozen=True)

    total_income: Decimal = Decimal("0")
    total_expense: Decimal = Decimal("0")
    realized_income: Decimal = Decimal("0")
    realized_expense: Decimal = Decimal("0")

    by_category: list[CategoryTotal] = Field(default_factory=list)
    transactions: list[Transaction] = Field(default_factory=list)

    @computed_field
    @property
    def balance(self) -> Decimal:
        return self.total_income - self.total_expense

    @computed_field
    @property
    def realized_balance(self) -> Decimal:
        return self.realized_income - self.realized_expense

    @property
    def is_empty(self) -> bool:
        return not self.transactions
