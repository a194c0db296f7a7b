"""
Ledger error types and the persistence-error classifier.

classify_persistence_error() is a HEURISTIC. It looks for schema-related
keywords in an error message to offer an actionable hint ("your sheet is
missing a column") instead of a generic failure message. It is not an
authoritative classification; anything unrecognised is GENERIC.
"""

from enum import Enum
from typing import Union

from src.config import ConfigurationError
from src.services.storage.interface import PersistenceError
from src.validation import ValidationError


class TransactionNotFoundError(LookupError):
    """An edit referenced a transaction id that isn't in the ledger."""

    def __init__(self, transaction_id: str):
        self.transaction_id = transaction_id
        super().__init__(f"Transaction not found: {transaction_id}")


class PersistenceErrorKind(str, Enum):
    GENERIC = "generic"
    LIKELY_SCHEMA_MISMATCH = "likely_schema_mismatch"


SCHEMA_MISMATCH_KEYWORDS = (
    "column",
    "schema",
    "header",
    "relation",
    "does not exist",
)

GENERIC_FAILURE_MESSAGE = (
    "Could not save your changes. They have been undone. "
    "Check your connection and try again."
)
SCHEMA_MISMATCH_MESSAGE = (
    "Could not save your changes because the storage layout is out of date "
    "(a column seems to be missing). They have been undone. "
    "Make sure the sheet headers match the expected columns."
)


def classify_persistence_error(message: str) -> PersistenceErrorKind:
    lowered = (message or "").lower()
    if any(keyword in lowered for keyword in SCHEMA_MISMATCH_KEYWORDS):
        return PersistenceErrorKind.LIKELY_SCHEMA_MISMATCH
    return PersistenceErrorKind.GENERIC


def user_message_for(
    error: Union[PersistenceError, ValidationError, ConfigurationError, TransactionNotFoundError],
) -> str:
    """The message a person should see for a failed operation."""
    if isinstance(error, PersistenceError):
        kind = classify_persistence_error(str(error))
        if kind == PersistenceErrorKind.LIKELY_SCHEMA_MISMATCH:
            return f"{SCHEMA_MISMATCH_MESSAGE} ({error})"
        return GENERIC_FAILURE_MESSAGE
    if isinstance(error, ValidationError):
        return "Please fix the following: " + "; ".join(
            issue.message for issue in error.issues
        )
    if isinstance(error, ConfigurationError):
        return f"Setup required: {error}"
    return str(error)
