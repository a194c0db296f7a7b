"""
Default Category Set

Seeded once, when a new ledger has no categories. The local store keeps
these fixed ids; the remote store replaces them with fresh ids so two
ledgers never share category ids.
"""

from src.models.ledger import Category, SubCategory, TransactionType, new_id


DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(
        id="1",
        name="Housing",
        color="#ef4444",
        type=TransactionType.EXPENSE,
        sub_categories=[
            SubCategory(id="s1", name="Rent"),
            SubCategory(id="s2", name="Utilities"),
            SubCategory(id="s3", name="Internet"),
        ],
    ),
    Category(
        id="2",
        name="Food",
        color="#f97316",
        type=TransactionType.EXPENSE,
        sub_categories=[
            SubCategory(id="s4", name="Groceries"),
            SubCategory(id="s5", name="Restaurants"),
        ],
    ),
    Category(
        id="3",
        name="Transport",
        color="#eab308",
        type=TransactionType.EXPENSE,
        sub_categories=[
            SubCategory(id="s6", name="Fuel"),
            SubCategory(id="s7", name="Maintenance"),
            SubCategory(id="s8", name="Taxi"),
        ],
    ),
    Category(
        id="4",
        name="Salary",
        color="#22c55e",
        type=TransactionType.INCOME,
        sub_categories=[
            SubCategory(id="s9", name="Monthly"),
            SubCategory(id="s10", name="Bonus"),
        ],
    ),
    Category(
        id="5",
        name="Investments",
        color="#3b82f6",
        type=TransactionType.INCOME,
        sub_categories=[
            SubCategory(id="s11", name="Dividends"),
        ],
    ),
)


def default_categories(fresh_ids: bool = False) -> list[Category]:
    """The starter categories, optionally re-keyed with new unique ids."""
    if not fresh_ids:
        return list(DEFAULT_CATEGORIES)
    return [
        category.model_copy(update={
            "id": new_id(),
            "sub_categories": [
                sub.model_copy(update={"id": new_id()})
                for sub in category.sub_categories
            ],
        })
        for category in DEFAULT_CATEGORIES
    ]
