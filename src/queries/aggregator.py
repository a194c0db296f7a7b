"""
Monthly Aggregator

DESIGN DECISION: The summary is DETERMINISTIC.
summarize() is a pure function of (transactions, categories, month):
the same inputs always produce the same summary, down to ordering.

Month membership is decided on the transaction's calendar date
components. A transaction dated 2024-04-01 is in April, whatever the
local time zone of the machine computing the summary.
"""

from decimal import Decimal
from typing import Iterable, Sequence

from src.models.ledger import Category, Transaction, TransactionStatus, TransactionType
from src.models.period import MonthRef
from src.models.summary import (
    UNKNOWN_CATEGORY_COLOR,
    UNKNOWN_CATEGORY_NAME,
    CategoryTotal,
    FinancialSummary,
)


def filter_month(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> list[Transaction]:
    """Transactions whose date falls in (year, month), in ledger order."""
    return [
        t for t in transactions
        if t.date.year == year and t.date.month == month
    ]


def _total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), Decimal("0"))


def _by_category(
    expenses: Sequence[Transaction],
    categories: Sequence[Category],
) -> list[CategoryTotal]:
    # dicts keep first-encountered order, sorted() is stable
    totals: dict[str, Decimal] = {}
    for t in expenses:
        totals[t.category_id] = totals.get(t.category_id, Decimal("0")) + t.amount

    lookup = {c.id: c for c in categories}
    breakdown = []
    for category_id, value in totals.items():
        category = lookup.get(category_id)
        breakdown.append(CategoryTotal(
            name=category.name if category else UNKNOWN_CATEGORY_NAME,
            value=value,
            color=category.color if category else UNKNOWN_CATEGORY_COLOR,
        ))
    return sorted(breakdown, key=lambda c: c.value, reverse=True)


def summarize(
    transactions: Sequence[Transaction],
    categories: Sequence[Category],
    year: int,
    month: int,
) -> FinancialSummary:
    """
    Compute the planned vs. realized summary of one month.

    Args:
        transactions: The whole ledger (any month)
        categories: Used only to resolve display names and colours
        year: Reference year
        month: Reference month (1-12)
    """
    in_scope = filter_month(transactions, year, month)

    income = [t for t in in_scope if t.type == TransactionType.INCOME]
    expense = [t for t in in_scope if t.type == TransactionType.EXPENSE]

    def completed(items: Iterable[Transaction]) -> list[Transaction]:
        return [t for t in items if t.status == TransactionStatus.COMPLETED]

    return FinancialSummary(
        total_income=_total(income),
        total_expense=_total(expense),
        realized_income=_total(completed(income)),
        realized_expense=_total(completed(expense)),
        by_category=_by_category(expense, categories),
        transactions=sorted(in_scope, key=lambda t: t.date, reverse=True),
    )


def summarize_month(
    transactions: Sequence[Transaction],
    categories: Sequence[Category],
    month: MonthRef,
) -> FinancialSummary:
    return summarize(transactions, categories, month.year, month.month)
