"""
Draft Validation

DESIGN DECISION: Validation happens BEFORE any optimistic update.
A draft that fails here never touches the ledger, so no rollback
is ever needed for a validation failure.

Two checks, mirroring what the entry form enforces:

STAGE 1 - FIELD VALIDATION (build_draft):
- Amount parses to a finite, non-negative number
- Description is non-empty after trimming
- A category was chosen
- Date is a calendar date

STAGE 2 - REFERENCE VALIDATION (check_category_reference):
- The category exists at validation time
- The sub-category belongs to that category
- The category's type matches the transaction type

Validation NEVER silently fixes issues. It reports them.
"""

import datetime as dt
from decimal import Decimal, InvalidOperation
from typing import Optional, Sequence, Union

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError

from src.models.ledger import (
    Category,
    TransactionDraft,
    TransactionStatus,
    TransactionType,
)


class ValidationIssue(BaseModel):
    """A single validation issue found."""

    field: str = Field(
        ...,
        description="Field with the issue"
    )
    issue_type: str = Field(
        ...,
        description="Type of issue (e.g., 'missing', 'invalid_value', 'unknown_reference')"
    )
    message: str = Field(
        ...,
        description="Human-readable description of the issue"
    )


class ValidationError(Exception):
    """A draft was rejected before reaching the ledger."""

    def __init__(self, issues: list[ValidationIssue]):
        self.issues = issues
        super().__init__("; ".join(issue.message for issue in issues))

    @property
    def fields(self) -> list[str]:
        return [issue.field for issue in self.issues]


def _parse_amount(raw: Union[str, int, float, Decimal, None]) -> tuple[Optional[Decimal], Optional[ValidationIssue]]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None, ValidationIssue(
            field="amount",
            issue_type="missing",
            message="Amount is required",
        )
    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation:
        return None, ValidationIssue(
            field="amount",
            issue_type="invalid_value",
            message=f"Amount '{raw}' is not a number",
        )
    if not amount.is_finite():
        return None, ValidationIssue(
            field="amount",
            issue_type="invalid_value",
            message="Amount must be a finite number",
        )
    if amount < 0:
        return None, ValidationIssue(
            field="amount",
            issue_type="invalid_value",
            message="Amount cannot be negative",
        )
    return amount, None


def _parse_date(raw: Union[str, dt.date, None]) -> tuple[Optional[dt.date], Optional[ValidationIssue]]:
    if isinstance(raw, dt.date):
        return raw, None
    if not raw or not str(raw).strip():
        return None, ValidationIssue(
            field="date",
            issue_type="missing",
            message="Date is required",
        )
    try:
        # Plain YYYY-MM-DD components, never a timestamp
        return dt.date.fromisoformat(str(raw).strip()), None
    except ValueError:
        return None, ValidationIssue(
            field="date",
            issue_type="invalid_format",
            message=f"Date '{raw}' is not a YYYY-MM-DD calendar date",
        )


def build_draft(
    date: Union[str, dt.date, None],
    description: Optional[str],
    amount: Union[str, int, float, Decimal, None],
    type: Union[str, TransactionType],
    category_id: Optional[str],
    sub_category_id: Optional[str] = None,
    status: Union[str, TransactionStatus] = TransactionStatus.COMPLETED,
) -> TransactionDraft:
    """
    Turn raw form input into a TransactionDraft.

    Raises:
        ValidationError: With every issue found, not just the first
    """
    issues = []

    parsed_date, issue = _parse_date(date)
    if issue:
        issues.append(issue)

    parsed_amount, issue = _parse_amount(amount)
    if issue:
        issues.append(issue)

    if not description or not description.strip():
        issues.append(ValidationIssue(
            field="description",
            issue_type="missing",
            message="Description is required",
        ))

    if not category_id or not category_id.strip():
        issues.append(ValidationIssue(
            field="category_id",
            issue_type="missing",
            message="Please choose a category",
        ))

    if issues:
        raise ValidationError(issues)

    try:
        return TransactionDraft(
            date=parsed_date,
            description=description,
            amount=parsed_amount,
            type=type,
            status=status,
            category_id=category_id,
            sub_category_id=sub_category_id,
        )
    except PydanticValidationError as e:
        raise ValidationError(issues_from_pydantic(e)) from e


def issues_from_pydantic(error: PydanticValidationError) -> list[ValidationIssue]:
    """Convert pydantic's error list into ValidationIssues."""
    return [
        ValidationIssue(
            field=".".join(str(part) for part in err["loc"]) or "record",
            issue_type=err["type"],
            message=err["msg"],
        )
        for err in error.errors()
    ]


def check_category_reference(
    draft: TransactionDraft,
    categories: Sequence[Category],
) -> Category:
    """
    Check the draft's category and sub-category exist and fit.

    Returns the referenced category.

    Raises:
        ValidationError: If the reference is dangling or inconsistent
    """
    category = next((c for c in categories if c.id == draft.category_id), None)
    if category is None:
        raise ValidationError([ValidationIssue(
            field="category_id",
            issue_type="unknown_reference",
            message=f"Category '{draft.category_id}' does not exist",
        )])

    issues = []
    if category.type != draft.type:
        issues.append(ValidationIssue(
            field="category_id",
            issue_type="type_mismatch",
            message=(
                f"Category '{category.name}' is for {category.type.value.lower()} "
                f"transactions, not {draft.type.value.lower()}"
            ),
        ))

    if draft.sub_category_id and category.find_sub_category(draft.sub_category_id) is None:
        issues.append(ValidationIssue(
            field="sub_category_id",
            issue_type="unknown_reference",
            message=(
                f"Sub-category '{draft.sub_category_id}' does not belong "
                f"to category '{category.name}'"
            ),
        ))

    if issues:
        raise ValidationError(issues)
    return category


def validate_installment_count(count: int, maximum: int = 120) -> int:
    """
    Raises:
        ValidationError: Unless 1 <= count <= maximum
    """
    if isinstance(count, bool) or not isinstance(count, int):
        raise ValidationError([ValidationIssue(
            field="installments",
            issue_type="invalid_value",
            message="Number of installments must be a whole number",
        )])
    if not 1 <= count <= maximum:
        raise ValidationError([ValidationIssue(
            field="installments",
            issue_type="out_of_range",
            message=f"Number of installments must be between 1 and {maximum}",
        )])
    return count
