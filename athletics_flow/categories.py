# athletics_flow/categories.py
from __future__ import annotations
from enum import Enum


class Category(Enum):
    """Sport/program columns of the athletics table, in anchor stacking order.

    The value is the exact column label used for lookups in input records.
    """

    FOOTBALL = "Football"
    MENS_BASKETBALL = "Men's Basketball"
    WOMENS_BASKETBALL = "Women's Basketball"
    OTHER_SPORTS = "Other sports"
    NON_PROGRAM = "Non-Program Specific"

    @property
    def label(self) -> str:
        return self.value

    @property
    def slug(self) -> str:
        return "-".join(self.value.lower().split())

    @property
    def title(self) -> str:
        text = self.value.lower()
        return text[:1].upper() + text[1:]

    @property
    def source_name(self) -> str:
        return f"source-{self.slug}"

    @property
    def target_name(self) -> str:
        return f"target-{self.slug}"


# Immutable ordering; never modify at runtime.
CATEGORIES: tuple[Category, ...] = tuple(Category)


def category_for(label: str) -> Category | None:
    """Exact-match lookup of a column label; None when it is not a known category."""
    try:
        return Category(label)
    except ValueError:
        return None
