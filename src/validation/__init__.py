"""Draft validation package."""

from src.models.ledger import check_installment_fields
from src.validation.validator import (
    ValidationError,
    ValidationIssue,
    build_draft,
    issues_from_pydantic,
    check_category_reference,
    validate_installment_count,
)

__all__ = [
    "ValidationError",
    "ValidationIssue",
    "build_draft",
    "issues_from_pydantic",
    "check_category_reference",
    "check_installment_fields",
    "validate_installment_count",
]
