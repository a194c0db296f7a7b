"""Tests for error classification and user-facing messages."""

import pytest

from src.config import ConfigurationError
from src.ledger import PersistenceErrorKind, TransactionNotFoundError, classify_persistence_error, user_message_for
from src.ledger.errors import GENERIC_FAILURE_MESSAGE, SCHEMA_MISMATCH_MESSAGE
from src.services.storage import NotFoundError, PersistenceError
from src.validation import ValidationError, ValidationIssue


class TestClassifyPersistenceError:

    @pytest.mark.parametrize("message", [
        "Sheet 'Transactions' is missing column(s): status",
        "column \"status\" of relation \"transactions\" does not exist",
        "Stored data does not match the expected SCHEMA",
        "bad header row",
    ])
    def test_schema_keywords(self, message):
        assert classify_persistence_error(message) == PersistenceErrorKind.LIKELY_SCHEMA_MISMATCH

    @pytest.mark.parametrize("message", ["network unreachable", "", "HTTP 503"])
    def test_everything_else_is_generic(self, message):
        assert classify_persistence_error(message) == PersistenceErrorKind.GENERIC

    def test_none_is_generic(self):
        assert classify_persistence_error(None) == PersistenceErrorKind.GENERIC


class TestUserMessageFor:

    def test_generic_persistence_failure(self):
        assert user_message_for(PersistenceError("timeout")) == GENERIC_FAILURE_MESSAGE

    def test_schema_hint_names_the_problem(self):
        message = user_message_for(NotFoundError("Sheet 'Categories' is missing column(s): color"))
        assert message.startswith(SCHEMA_MISMATCH_MESSAGE)
        assert "color" in message

    def test_validation_lists_issues(self):
        error = ValidationError([
            ValidationIssue(field="amount", issue_type="missing", message="Amount is required"),
            ValidationIssue(field="description", issue_type="missing", message="Description is required"),
        ])
        assert user_message_for(error) == (
            "Please fix the following: Amount is required; Description is required"
        )

    def test_configuration(self):
        message = user_message_for(ConfigurationError("Set: GOOGLE_SHEETS_SPREADSHEET_ID"))
        assert message == "Setup required: Set: GOOGLE_SHEETS_SPREADSHEET_ID"

    def test_not_found(self):
        assert user_message_for(TransactionNotFoundError("t9")) == "Transaction not found: t9"
