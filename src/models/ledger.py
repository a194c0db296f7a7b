"""
Core Ledger Models for Family Ledger

These models define the strict schemas for the two persisted collections,
categories and transactions. They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be serializable for storage and logging

DESIGN DECISION: Models are frozen. A transaction is only ever "edited" by
replacing the whole record by id, and frozen records make the snapshots
taken for optimistic rollback safe to share.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


def new_id() -> str:
    """Globally unique id for a category, sub-category or transaction."""
    return str(uuid4())


def check_installment_fields(
    current: Optional[int],
    total: Optional[int],
) -> None:
    """
    Installment metadata is either fully absent or a valid position
    in a series of at least two.

    Raises:
        ValueError: If the pair is inconsistent
    """
    if current is None and total is None:
        return
    if current is None or total is None:
        raise ValueError(
            "installment_current and installment_total must be set together"
        )
    if total < 2:
        raise ValueError("installment_total must be at least 2")
    if not 1 <= current <= total:
        raise ValueError(
            f"installment_current must be between 1 and {total}, got {current}"
        )


# =============================================================================
# ENUMS
# =============================================================================

class TransactionType(str, Enum):
    """Direction of money flow. Shared by categories and transactions."""
    EXPENSE = "EXPENSE"
    INCOME = "INCOME"


class TransactionStatus(str, Enum):
    """
    Settlement status.

    PENDING is planned money, COMPLETED has actually cleared.
    """
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


# =============================================================================
# CATEGORIES
# =============================================================================

class SubCategory(BaseModel):
    """A sub-category, owned by exactly one Category."""
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(default_factory=new_id, min_length=1)
    name: str = Field(..., min_length=1, max_length=100)


class Category(BaseModel):
    """
    A user-defined category.

    `color` is a display hint and is not validated. Changing `type` later
    does not revalidate transactions that already reference the category.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: str = Field(default_factory=new_id, min_length=1)
    name: str = Field(..., min_length=1, max_length=100)
    color: str = Field(default="#94a3b8")
    type: TransactionType
    sub_categories: list[SubCategory] = Field(default_factory=list)

    @model_validator(mode='after')
    def validate_sub_category_ids(self) -> 'Category':
        seen = set()
        for sub in self.sub_categories:
            if sub.id in seen:
                raise ValueError(
                    f"Duplicate sub-category id '{sub.id}' in category '{self.name}'"
                )
            seen.add(sub.id)
        return self

    def find_sub_category(self, sub_category_id: Optional[str]) -> Optional[SubCategory]:
        if not sub_category_id:
            return None
        for sub in self.sub_categories:
            if sub.id == sub_category_id:
                return sub
        return None


# =============================================================================
# TRANSACTIONS
# =============================================================================

class TransactionDraft(BaseModel):
    """
    A transaction as entered by the user, before ids are assigned and
    before installment expansion.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    date: dt.date = Field(
        ...,
        description="Calendar date of the (first) transaction"
    )
    description: str = Field(..., min_length=1, max_length=200)
    amount: Decimal = Field(..., ge=0)
    type: TransactionType
    status: TransactionStatus = Field(default=TransactionStatus.COMPLETED)
    category_id: str = Field(..., min_length=1)
    sub_category_id: Optional[str] = None

    @field_validator('amount')
    @classmethod
    def validate_finite_amount(cls, v: Decimal) -> Decimal:
        if not v.is_finite():
            raise ValueError("Amount must be a finite number")
        return v

    @field_validator('sub_category_id')
    @classmethod
    def empty_sub_category_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class Transaction(TransactionDraft):
    """
    A persisted ledger entry.

    `category_id` and `sub_category_id` are weak references: the category
    may have been deleted since.
    """

    id: str = Field(default_factory=new_id, min_length=1)
    installment_current: Optional[int] = Field(default=None, ge=1)
    installment_total: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode='after')
    def validate_installments(self) -> 'Transaction':
        check_installment_fields(self.installment_current, self.installment_total)
        return self

    @property
    def is_installment(self) -> bool:
        return self.installment_total is not None

    @property
    def installment_label(self) -> Optional[str]:
        """Display label such as "2/3", or None outside a series."""
        if not self.is_installment:
            return None
        return f"{self.installment_current}/{self.installment_total}"


class TransactionUpdate(BaseModel):
    """
    Partial edit of a transaction.

    Only fields that were explicitly set are merged onto the stored record;
    everything omitted keeps its prior value.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str = Field(..., min_length=1)
    date: Optional[dt.date] = None
    description: Optional[str] = None
    amount: Optional[Decimal] = None
    type: Optional[TransactionType] = None
    status: Optional[TransactionStatus] = None
    category_id: Optional[str] = None
    sub_category_id: Optional[str] = None
    installment_current: Optional[int] = None
    installment_total: Optional[int] = None

    def changes(self) -> dict:
        """Explicitly set fields, without the id."""
        return self.model_dump(exclude_unset=True, exclude={"id"})
