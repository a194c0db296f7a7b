"""
Ledger Store (Sync Controller)

Owns the in-memory categories and transactions and keeps them in sync
with the persistence port.

Every mutation follows the same three steps:
1. Apply the change to local state immediately (optimistic)
2. Issue the remote call(s) through the port
3. On any failure, restore local state to the snapshot taken in step 1
   and re-raise, so the caller can tell the user

CONCURRENCY: mutations run on one asyncio control flow and only suspend
inside port calls. Local apply and rollback never interleave with each
other, so no locking is needed. Two operations may still be in flight
together (say a delete and an add); each rolls back to its own snapshot,
which can discard the local effect of the other if it completed in
between. This is an accepted trade-off of local-first state.

There is no cancellation and no timeout here. Timeouts belong to the port.
"""

import asyncio
from typing import Optional, Sequence, Union

from pydantic import ValidationError as PydanticValidationError

from src.ledger.errors import TransactionNotFoundError, classify_persistence_error
from src.ledger.installments import expand_installments
from src.ledger.optimistic import OptimisticCollection
from src.log import create_correlation_id, get_logger
from src.models.ledger import Category, Transaction, TransactionDraft, TransactionUpdate
from src.models.period import MonthRef
from src.models.summary import FinancialSummary
from src.queries.aggregator import summarize_month
from src.services.storage.interface import LedgerStorageInterface, PersistenceError
from src.validation import ValidationError, ValidationIssue, issues_from_pydantic


class LedgerStore:
    """
    In-memory ledger with optimistic sync.

    The store is the single source of truth for the running app;
    summaries are always derived from it, never stored.
    """

    def __init__(
        self,
        storage: LedgerStorageInterface,
        categories: Sequence[Category] = (),
        transactions: Sequence[Transaction] = (),
    ):
        self._storage = storage
        self._categories: OptimisticCollection[Category] = OptimisticCollection(categories)
        self._transactions: OptimisticCollection[Transaction] = OptimisticCollection(transactions)
        self._logger = get_logger(__name__)

    @property
    def categories(self) -> list[Category]:
        return self._categories.items

    @property
    def transactions(self) -> list[Transaction]:
        return self._transactions.items

    def get_category(self, category_id: str) -> Optional[Category]:
        return next((c for c in self._categories.items if c.id == category_id), None)

    def get_transaction(self, transaction_id: str) -> Optional[Transaction]:
        return next((t for t in self._transactions.items if t.id == transaction_id), None)

    def summary(self, month: MonthRef) -> FinancialSummary:
        return summarize_month(self._transactions.items, self._categories.items, month)

    def _operation_logger(self, operation: str):
        return self._logger.bind(
            operation=operation,
            correlation_id=str(create_correlation_id()),
        )

    @staticmethod
    def _log_rollback(log, error: Exception) -> None:
        kind = (
            classify_persistence_error(str(error)).value
            if isinstance(error, PersistenceError)
            else "unexpected"
        )
        log.error(
            "ledger_sync_failed",
            error=str(error),
            error_type=type(error).__name__,
            error_kind=kind,
            rolled_back=True,
        )

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    async def load(self) -> None:
        """
        Read both collections from the port.

        A ledger with no categories is new: seed the Default Category
        Set once and read the categories again.

        Raises:
            PersistenceError: If either collection cannot be read
        """
        log = self._operation_logger("load")
        categories, transactions = await asyncio.gather(
            self._storage.list_categories(),
            self._storage.list_transactions(),
        )

        if not categories:
            log.info("ledger_empty_seeding_defaults")
            await self._storage.seed_default_categories()
            categories = await self._storage.list_categories()

        self._categories.replace(categories)
        self._transactions.replace(transactions)
        log.info(
            "ledger_loaded",
            categories=len(categories),
            transactions=len(transactions),
        )

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    async def add_transactions(
        self,
        drafts: Union[TransactionDraft, Sequence[TransactionDraft]],
        installment_count: int = 1,
    ) -> list[Transaction]:
        """
        Expand drafts into transactions, append them and bulk-create them.

        Returns:
            The transactions that were added

        Raises:
            ValueError: If installment_count < 1 (nothing is applied)
            PersistenceError: If the bulk create fails (local state restored)
        """
        if isinstance(drafts, TransactionDraft):
            drafts = [drafts]

        created: list[Transaction] = []
        for draft in drafts:
            created.extend(expand_installments(draft, installment_count))
        if not created:
            return []

        log = self._operation_logger("add_transactions")
        try:
            await self._transactions.apply(
                [*self._transactions.items, *created],
                lambda: self._storage.create_transactions(created),
            )
        except Exception as e:
            self._log_rollback(log, e)
            raise

        log.info(
            "transactions_added",
            count=len(created),
            installments=installment_count,
        )
        return created

    async def update_transaction(
        self,
        update: Union[TransactionUpdate, Transaction],
    ) -> Transaction:
        """
        Merge the explicitly set fields of `update` onto the stored record.

        Omitted fields keep their prior values.

        Returns:
            The merged transaction

        Raises:
            TransactionNotFoundError: If no transaction has that id
            ValidationError: If the merged record is invalid
            PersistenceError: If the update fails (local state restored)
        """
        existing = self.get_transaction(update.id)
        if existing is None:
            raise TransactionNotFoundError(update.id)

        changes = (
            update.changes()
            if isinstance(update, TransactionUpdate)
            else update.model_dump(exclude_unset=True, exclude={"id"})
        )
        try:
            merged = Transaction.model_validate({**existing.model_dump(), **changes})
        except PydanticValidationError as e:
            raise ValidationError(issues_from_pydantic(e)) from e

        log = self._operation_logger("update_transaction").bind(transaction_id=merged.id)
        try:
            await self._transactions.apply(
                [merged if t.id == merged.id else t for t in self._transactions.items],
                lambda: self._storage.update_transaction(merged),
            )
        except Exception as e:
            self._log_rollback(log, e)
            raise

        log.info("transaction_updated", fields=sorted(changes))
        return merged

    async def delete_transaction(self, transaction_id: str) -> bool:
        """
        Remove one transaction. Sibling installments are untouched.

        An unknown id is a no-op: nothing changes locally and no
        persistence call is made.

        Returns:
            True if a transaction was deleted

        Raises:
            PersistenceError: If the delete fails (local state restored)
        """
        if self.get_transaction(transaction_id) is None:
            self._logger.debug("delete_unknown_transaction", transaction_id=transaction_id)
            return False

        log = self._operation_logger("delete_transaction").bind(transaction_id=transaction_id)
        try:
            await self._transactions.apply(
                [t for t in self._transactions.items if t.id != transaction_id],
                lambda: self._storage.delete_transaction(transaction_id),
            )
        except Exception as e:
            self._log_rollback(log, e)
            raise

        log.info("transaction_deleted")
        return True

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def replace_categories(self, new_categories: Sequence[Category]) -> None:
        """
        Replace the whole category list.

        A plain list replace can't tell "added" from "edited", so:
        - every id present before and absent now gets a delete call
        - every category in the new list gets an upsert call

        Transactions referencing a deleted category keep their dangling
        reference. If any call fails, the WHOLE category list reverts to
        what it was before this call, not just the failed item.

        Raises:
            ValidationError: If the new list repeats an id (nothing applied)
            PersistenceError: If any call fails (local state restored)
        """
        new_categories = list(new_categories)
        ids = [c.id for c in new_categories]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValidationError([ValidationIssue(
                field="categories",
                issue_type="duplicate_id",
                message=f"Category ids must be unique: {', '.join(duplicates)}",
            )])

        new_ids = set(ids)
        deleted_ids = [c.id for c in self._categories.items if c.id not in new_ids]

        async def commit() -> None:
            for category_id in deleted_ids:
                await self._storage.delete_category(category_id)
            for category in new_categories:
                await self._storage.upsert_category(category)

        log = self._operation_logger("replace_categories")
        try:
            await self._categories.apply(new_categories, commit)
        except Exception as e:
            self._log_rollback(log, e)
            raise

        log.info(
            "categories_replaced",
            upserted=len(new_categories),
            deleted=len(deleted_ids),
        )
