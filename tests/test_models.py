"""
Tests for Family Ledger

Test strategy:
1. Unit tests for individual components (models, validators, aggregator)
2. Integration tests for flows (with an in-memory storage fake)
3. No real API calls in tests (use fakes and stubs)
"""

import datetime as dt
from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from src.models import (
    Category,
    CategoryTotal,
    FinancialSummary,
    MonthRef,
    SubCategory,
    Transaction,
    TransactionDraft,
    TransactionStatus,
    TransactionType,
    TransactionUpdate,
)


class TestCategoryModels:
    """Tests for category-related Pydantic models."""

    def test_category_creation(self):
        category = Category(
            name="Housing",
            color="#ef4444",
            type=TransactionType.EXPENSE,
            sub_categories=[SubCategory(name="Rent")],
        )
        assert category.id
        assert category.sub_categories[0].id
        assert category.sub_categories[0].id != category.id

    def test_category_strips_whitespace(self):
        category = Category(name="  Food  ", type=TransactionType.EXPENSE)
        assert category.name == "Food"

    def test_category_default_color(self):
        category = Category(name="Misc", type=TransactionType.EXPENSE)
        assert category.color == "#94a3b8"

    def test_category_rejects_duplicate_sub_category_ids(self):
        with pytest.raises(PydanticValidationError):
            Category(
                name="Food",
                type=TransactionType.EXPENSE,
                sub_categories=[
                    SubCategory(id="s1", name="Groceries"),
                    SubCategory(id="s1", name="Restaurants"),
                ],
            )

    def test_find_sub_category(self, food_category):
        assert food_category.find_sub_category("sub2").name == "Restaurants"
        assert food_category.find_sub_category("missing") is None
        assert food_category.find_sub_category(None) is None

    def test_category_is_frozen(self, food_category):
        with pytest.raises(PydanticValidationError):
            food_category.name = "Other"


class TestTransactionModels:
    """Tests for transaction models."""

    def test_draft_defaults_to_completed(self):
        draft = TransactionDraft(
            date=dt.date(2024, 3, 5),
            description="Groceries",
            amount=Decimal("42.50"),
            type=TransactionType.EXPENSE,
            category_id="cat1",
        )
        assert draft.status == TransactionStatus.COMPLETED
        assert draft.sub_category_id is None

    def test_draft_rejects_negative_amount(self):
        with pytest.raises(PydanticValidationError):
            TransactionDraft(
                date=dt.date(2024, 3, 5),
                description="Refund",
                amount=Decimal("-1"),
                type=TransactionType.EXPENSE,
                category_id="cat1",
            )

    def test_draft_rejects_blank_description(self):
        with pytest.raises(PydanticValidationError):
            TransactionDraft(
                date=dt.date(2024, 3, 5),
                description="   ",
                amount=Decimal("1"),
                type=TransactionType.EXPENSE,
                category_id="cat1",
            )

    def test_empty_sub_category_becomes_none(self, tx):
        transaction = tx("t1", "2024-03-05", "10", sub_category_id="")
        assert transaction.sub_category_id is None

    def test_zero_amount_is_allowed(self, tx):
        assert tx("t1", "2024-03-05", "0").amount == Decimal("0")

    def test_installment_label(self, tx):
        transaction = tx("t1", "2024-03-05", "10", installment_current=2, installment_total=3)
        assert transaction.is_installment
        assert transaction.installment_label == "2/3"

    def test_plain_transaction_has_no_label(self, tx):
        transaction = tx("t1", "2024-03-05", "10")
        assert not transaction.is_installment
        assert transaction.installment_label is None

    @pytest.mark.parametrize("current,total", [
        (1, None),
        (None, 3),
        (4, 3),
        (1, 1),
    ])
    def test_inconsistent_installments_rejected(self, tx, current, total):
        with pytest.raises(PydanticValidationError):
            tx("t1", "2024-03-05", "10", installment_current=current, installment_total=total)

    def test_transaction_serializes_date_as_iso(self, tx):
        data = tx("t1", "2024-03-05", "10").model_dump(mode="json")
        assert data["date"] == "2024-03-05"
        assert data["type"] == "EXPENSE"

    def test_update_changes_only_set_fields(self):
        update = TransactionUpdate(id="t1", amount=Decimal("12"))
        assert update.changes() == {"amount": Decimal("12")}


class TestSummaryModel:
    """Tests for the derived summary."""

    def test_empty_summary(self):
        summary = FinancialSummary()
        assert summary.balance == Decimal("0")
        assert summary.realized_balance == Decimal("0")
        assert summary.is_empty

    def test_balances_are_derived(self):
        summary = FinancialSummary(
            total_income=Decimal("1000"),
            total_expense=Decimal("300"),
            realized_income=Decimal("800"),
            realized_expense=Decimal("100"),
            by_category=[CategoryTotal(name="Food", value=Decimal("300"), color="#f97316")],
        )
        assert summary.balance == Decimal("700")
        assert summary.realized_balance == Decimal("700")
        assert summary.model_dump()["balance"] == Decimal("700")


class TestMonthRef:
    """Tests for month navigation."""

    def test_shift_across_year_boundaries(self):
        assert MonthRef(year=2024, month=12).shift(1) == MonthRef(year=2025, month=1)
        assert MonthRef(year=2024, month=1).shift(-1) == MonthRef(year=2023, month=12)
        assert MonthRef(year=2024, month=3).shift(-15) == MonthRef(year=2022, month=12)

    def test_parse_and_str(self):
        month = MonthRef.parse("2024-03")
        assert month == MonthRef(year=2024, month=3)
        assert str(month) == "2024-03"
        assert month.label == "March 2024"

    def test_parse_rejects_garbage(self):
        with pytest.raises(ValueError):
            MonthRef.parse("March")

    def test_contains_uses_calendar_date(self):
        month = MonthRef(year=2024, month=3)
        assert month.contains(dt.date(2024, 3, 31))
        assert not month.contains(dt.date(2024, 4, 1))

    def test_current(self):
        assert MonthRef.current(dt.date(2024, 2, 29)) == MonthRef(year=2024, month=2)
