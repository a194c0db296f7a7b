"""
Main Orchestrator for Family Ledger

This module ties together all the components and defines the
application-level flows a UI drives:
1. Startup (configuration check -> load ledger -> seed if empty)
2. Month navigation and summaries
3. Mutations (validate -> optimistic apply -> sync -> report)
4. Advisor insights for the selected month

DESIGN DECISION: The orchestrator is the caller that reports failures
to the user. The ledger store restores state and raises; here every
expected failure becomes a MutationOutcome with a readable message.
Unexpected exceptions still propagate.
"""

import datetime as dt
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from src.agents import AdvisorInterface, GeminiFinancialAdvisor
from src.config import (
    AppSettings,
    ConfigurationError,
    Settings,
    StorageBackend,
    get_settings,
    require_storage_configured,
    validate_all_settings,
)
from src.ledger import (
    LedgerStore,
    TransactionNotFoundError,
    classify_persistence_error,
    user_message_for,
)
from src.log import configure_logging, get_logger
from src.models.ledger import (
    Category,
    Transaction,
    TransactionDraft,
    TransactionStatus,
    TransactionType,
    TransactionUpdate,
)
from src.models.period import MonthRef
from src.models.summary import UNKNOWN_CATEGORY_COLOR, UNKNOWN_CATEGORY_NAME, FinancialSummary
from src.services.storage import (
    GoogleSheetsClient,
    GoogleSheetsLedgerStorage,
    LedgerStorageInterface,
    LocalJsonLedgerStorage,
    PersistenceError,
)
from src.validation import (
    ValidationError,
    build_draft,
    check_category_reference,
    issues_from_pydantic,
    validate_installment_count,
)


logger = get_logger(__name__)

NOT_LOADED_MESSAGE = "The ledger has not been loaded yet"


class AppStatus(str, Enum):
    """What the UI should show."""
    NOT_STARTED = "not_started"
    NEEDS_CONFIGURATION = "needs_configuration"
    READY = "ready"
    LOAD_FAILED = "load_failed"


class MutationOutcome(BaseModel):
    """Result of a user action, ready to be shown."""

    success: bool
    message: str
    error_kind: Optional[str] = Field(
        default=None,
        description="validation, not_found, configuration, generic or likely_schema_mismatch"
    )
    transactions: list[Transaction] = Field(default_factory=list)


class TransactionRow(BaseModel):
    """One line of the monthly transaction table."""
    model_config = ConfigDict(frozen=True)

    transaction: Transaction
    category_name: str
    category_color: str
    sub_category_name: Optional[str] = None
    installment_label: Optional[str] = None


def _failure(error: Exception) -> MutationOutcome:
    if isinstance(error, PersistenceError):
        kind = classify_persistence_error(str(error)).value
    elif isinstance(error, ValidationError):
        kind = "validation"
    elif isinstance(error, TransactionNotFoundError):
        kind = "not_found"
    else:
        kind = "configuration"
    return MutationOutcome(success=False, message=user_message_for(error), error_kind=kind)


def _merged_draft(existing: Transaction, changes: dict) -> TransactionDraft:
    """The edited record as a draft, for reference checks before saving."""
    installment_fields = {"id", "installment_current", "installment_total"}
    try:
        return TransactionDraft.model_validate({
            **existing.model_dump(exclude=installment_fields),
            **{k: v for k, v in changes.items() if k not in installment_fields},
        })
    except PydanticValidationError as e:
        raise ValidationError(issues_from_pydantic(e)) from e


class FinanceTracker:
    """
    Application facade over the ledger store.

    Constructed with an already-selected storage port. When storage could
    not be configured, pass configuration_error instead; start() then
    reports NEEDS_CONFIGURATION rather than attempting to load.
    """

    def __init__(
        self,
        storage: Optional[LedgerStorageInterface],
        advisor: Optional[AdvisorInterface] = None,
        app_settings: Optional[AppSettings] = None,
        configuration_error: Optional[ConfigurationError] = None,
        today: Optional[dt.date] = None,
    ):
        if storage is None and configuration_error is None:
            configuration_error = ConfigurationError("No storage backend was provided")

        self._storage = storage
        self._store = LedgerStore(storage) if storage is not None else None
        self._advisor = advisor
        self._app_settings = app_settings or AppSettings()
        self._configuration_error = configuration_error
        self._selected_month = MonthRef.current(today)

        self.status = AppStatus.NOT_STARTED
        self.status_message: Optional[str] = None

    # -------------------------------------------------------------------------
    # Startup
    # -------------------------------------------------------------------------

    async def start(self) -> AppStatus:
        if self._configuration_error is not None:
            self.status = AppStatus.NEEDS_CONFIGURATION
            self.status_message = user_message_for(self._configuration_error)
            logger.warning("storage_not_configured", error=str(self._configuration_error))
            return self.status

        try:
            await self._store.load()
        except PersistenceError as e:
            self.status = AppStatus.LOAD_FAILED
            self.status_message = (
                "Could not connect to the ledger storage. "
                "Check your connection and credentials."
            )
            logger.error("ledger_load_failed", error=str(e))
            return self.status

        self.status = AppStatus.READY
        self.status_message = None
        return self.status

    @property
    def store(self) -> Optional[LedgerStore]:
        return self._store

    def _not_ready_reason(self) -> str:
        if self._configuration_error is not None:
            return str(self._configuration_error)
        if self.status == AppStatus.LOAD_FAILED:
            return self.status_message
        return NOT_LOADED_MESSAGE

    def _require_ready(self) -> LedgerStore:
        if self.status != AppStatus.READY or self._store is None:
            raise ConfigurationError(self._not_ready_reason())
        return self._store

    # -------------------------------------------------------------------------
    # Month navigation
    # -------------------------------------------------------------------------

    @property
    def selected_month(self) -> MonthRef:
        return self._selected_month

    def select_month(self, month: MonthRef) -> MonthRef:
        self._selected_month = month
        return month

    def next_month(self) -> MonthRef:
        return self.select_month(self._selected_month.shift(1))

    def previous_month(self) -> MonthRef:
        return self.select_month(self._selected_month.shift(-1))

    # -------------------------------------------------------------------------
    # Read side
    # -------------------------------------------------------------------------

    @property
    def categories(self) -> list[Category]:
        return self._store.categories if self._store else []

    def categories_for_type(self, transaction_type: TransactionType) -> list[Category]:
        """Categories the entry form offers for a given type."""
        return [c for c in self.categories if c.type == transaction_type]

    def summary(self) -> FinancialSummary:
        return self._require_ready().summary(self._selected_month)

    def transaction_rows(self) -> list[TransactionRow]:
        """The selected month's transactions, newest first, with display names."""
        lookup = {c.id: c for c in self.categories}
        rows = []
        for t in self.summary().transactions:
            category = lookup.get(t.category_id)
            sub = category.find_sub_category(t.sub_category_id) if category else None
            rows.append(TransactionRow(
                transaction=t,
                category_name=category.name if category else UNKNOWN_CATEGORY_NAME,
                category_color=category.color if category else UNKNOWN_CATEGORY_COLOR,
                sub_category_name=sub.name if sub else None,
                installment_label=t.installment_label,
            ))
        return rows

    async def insights(self) -> str:
        """Advisor text for the selected month. Never raises."""
        if self._advisor is None:
            return "The financial advisor is not available."
        if self.status != AppStatus.READY:
            return self.status_message or NOT_LOADED_MESSAGE
        return await self._advisor.generate_insights(
            self.summary(),
            self.categories,
            self._selected_month.label,
        )

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    async def add_transaction(
        self,
        date,
        description: Optional[str],
        amount,
        type: TransactionType,
        category_id: Optional[str],
        sub_category_id: Optional[str] = None,
        status: TransactionStatus = TransactionStatus.COMPLETED,
        installments: int = 1,
    ) -> MutationOutcome:
        """
        Validate form input and add it (possibly as an installment series).
        """
        try:
            store = self._require_ready()
            draft = build_draft(
                date=date,
                description=description,
                amount=amount,
                type=type,
                category_id=category_id,
                sub_category_id=sub_category_id,
                status=status,
            )
            check_category_reference(draft, store.categories)
            validate_installment_count(installments, self._app_settings.max_installments)
            created = await store.add_transactions([draft], installments)
        except (ValidationError, PersistenceError, ConfigurationError) as e:
            return _failure(e)

        message = (
            f"Added {len(created)} installments"
            if len(created) > 1
            else "Transaction added"
        )
        return MutationOutcome(success=True, message=message, transactions=created)

    async def update_transaction(self, update: TransactionUpdate) -> MutationOutcome:
        """Edit a transaction; omitted fields keep their values."""
        try:
            store = self._require_ready()
            changes = update.changes()
            existing = store.get_transaction(update.id)
            if existing is not None and changes.keys() & {"category_id", "sub_category_id", "type"}:
                check_category_reference(_merged_draft(existing, changes), store.categories)
            updated = await store.update_transaction(update)
        except (ValidationError, PersistenceError, ConfigurationError, TransactionNotFoundError) as e:
            return _failure(e)

        return MutationOutcome(success=True, message="Transaction updated", transactions=[updated])

    async def delete_transaction(self, transaction_id: str) -> MutationOutcome:
        try:
            deleted = await self._require_ready().delete_transaction(transaction_id)
        except (PersistenceError, ConfigurationError) as e:
            return _failure(e)

        if not deleted:
            return MutationOutcome(success=True, message="Nothing to delete")
        return MutationOutcome(success=True, message="Transaction deleted")

    async def update_categories(self, categories: Sequence[Category]) -> MutationOutcome:
        """Save the edited category list (adds, edits and removals at once)."""
        try:
            await self._require_ready().replace_categories(categories)
        except (ValidationError, PersistenceError, ConfigurationError) as e:
            return _failure(e)

        return MutationOutcome(success=True, message="Categories saved")


def create_storage(settings: Optional[Settings] = None) -> LedgerStorageInterface:
    """
    Build the persistence port selected by configuration.

    Raises:
        ConfigurationError: If the remote store is selected but unconfigured
    """
    settings = settings or get_settings()
    backend = require_storage_configured(settings.app, settings.google_sheets)
    if backend == StorageBackend.LOCAL:
        return LocalJsonLedgerStorage(Path(settings.local_storage.data_dir))
    return GoogleSheetsLedgerStorage(GoogleSheetsClient(settings.google_sheets))


def create_app_components(
    settings: Optional[Settings] = None,
    today: Optional[dt.date] = None,
) -> FinanceTracker:
    """
    Factory function to create the application.

    Storage misconfiguration does not raise here: the tracker is built
    without storage and start() reports NEEDS_CONFIGURATION.
    """
    settings = settings or get_settings()
    app_settings = settings.app
    configure_logging(app_settings.log_level, app_settings.log_format)
    logger.info("startup_checks", **validate_all_settings(settings))

    storage = None
    configuration_error = None
    try:
        storage = create_storage(settings)
    except ConfigurationError as e:
        configuration_error = e

    return FinanceTracker(
        storage=storage,
        advisor=GeminiFinancialAdvisor(settings.gemini),
        app_settings=app_settings,
        configuration_error=configuration_error,
        today=today,
    )
