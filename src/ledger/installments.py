"""
Installment Expander

Turns one draft into the dated transactions of an installment series.

Month-length rule: every installment is computed from the BASE date,
keeping its day-of-month and clamping to the last day of shorter months.
Clamping is never chained, so a series starting on the 31st returns to
the 31st whenever the month allows it:

    2024-01-31 x3 -> 2024-01-31, 2024-02-29, 2024-03-31

All arithmetic is on (year, month, day) integers.
"""

import calendar
import datetime as dt

from src.models.ledger import (
    Transaction,
    TransactionDraft,
    TransactionStatus,
    new_id,
)


def add_months(base: dt.date, months: int) -> dt.date:
    """Shift by whole calendar months, clamping the day to the target month."""
    total_months = base.month - 1 + months
    year = base.year + total_months // 12
    month = total_months % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return dt.date(year, month, min(base.day, last_day))


def expand_installments(draft: TransactionDraft, count: int) -> list[Transaction]:
    """
    Expand a draft into `count` transactions, one per calendar month.

    Only the first installment keeps the requested status; later ones
    haven't happened yet and are always PENDING.

    Raises:
        ValueError: If count < 1
    """
    if count < 1:
        raise ValueError(f"Installment count must be at least 1, got {count}")

    # A Transaction is also a draft; its id and series fields are not carried over
    fields = draft.model_dump(include=set(TransactionDraft.model_fields))

    if count == 1:
        return [Transaction(id=new_id(), **fields)]

    series = []
    for i in range(count):
        series.append(Transaction(
            **{
                **fields,
                "id": new_id(),
                "date": add_months(draft.date, i),
                "status": draft.status if i == 0 else TransactionStatus.PENDING,
                "installment_current": i + 1,
                "installment_total": count,
            }
        ))
    return series
