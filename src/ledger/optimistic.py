"""
Optimistic apply.

The local collection is updated first so the UI reflects the change
immediately; the remote effect runs afterwards. If it fails, the
collection is restored to the snapshot taken just before this update.

A snapshot only covers its own operation. Two operations in flight at
once each restore their own snapshot, so a rollback can undo the local
effect of another operation that completed in between. That is the known
race of local-first state; see LedgerStore.
"""

from typing import Any, Awaitable, Callable, Generic, Iterable, TypeVar

T = TypeVar("T")


class OptimisticCollection(Generic[T]):
    """An ordered collection with snapshot/apply/rollback."""

    def __init__(self, items: Iterable[T] = ()):
        self._items: list[T] = list(items)

    @property
    def items(self) -> list[T]:
        """A copy; callers can't mutate the collection through it."""
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def replace(self, items: Iterable[T]) -> None:
        """Set the contents without a remote effect (e.g. after loading)."""
        self._items = list(items)

    async def apply(
        self,
        updated: Iterable[T],
        commit: Callable[[], Awaitable[Any]],
    ) -> None:
        """
        Replace the contents with `updated`, then await `commit()`.

        Raises:
            Whatever commit() raised, after restoring the snapshot
        """
        snapshot = self._items
        self._items = list(updated)
        try:
            await commit()
        except Exception:
            self._items = snapshot
            raise
