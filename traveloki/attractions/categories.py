from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from ..errors import NotFound, ValidationError


class Category(str, Enum):
    food = "food"
    fun = "fun"
    hotels = "hotels"


# Search priority and default tie-break order.
PRIORITY_ORDER: tuple[Category, ...] = (Category.food, Category.fun, Category.hotels)


@dataclass(frozen=True)
class CategoryConfig:
    """Storage identifiers assigned by the directory schema."""

    ids: dict[Category, int] = field(
        default_factory=lambda: {Category.food: 1, Category.fun: 2, Category.hotels: 3}
    )
    fallback_id: int = 1


DEFAULT_CATEGORY_CONFIG = CategoryConfig()


@dataclass(frozen=True)
class CategoryStyle:
    label: str
    color: str
    emoji: str


CATEGORY_STYLES: dict[Category, CategoryStyle] = {
    Category.food: CategoryStyle(label="Food", color="#ef4444", emoji="🍜"),
    Category.fun: CategoryStyle(label="Entertainment", color="#8b5cf6", emoji="🎡"),
    Category.hotels: CategoryStyle(label="Hotels", color="#0ea5e9", emoji="🏨"),
}

assert set(CATEGORY_STYLES) == set(Category)


def priority_order() -> list[Category]:
    return list(PRIORITY_ORDER)


def _lookup(name: str) -> Category | None:
    try:
        return Category(str(name).strip().lower())
    except ValueError:
        return None


def resolve_category_id(name: str, config: CategoryConfig = DEFAULT_CATEGORY_CONFIG) -> int:
    """Map a category name to its storage id, case-insensitively.

    Unknown names resolve to ``config.fallback_id``; the mapping never fails.
    """
    category = _lookup(name)
    if category is None:
        return config.fallback_id
    return config.ids.get(category, config.fallback_id)


def parse_category(name: str) -> Category:
    """Strict variant of the lookup, for inputs that must name a real category."""
    category = _lookup(name)
    if category is None:
        raise ValidationError(f"Unknown category: {name!r}")
    return category


def category_for_id(category_id: int, config: CategoryConfig = DEFAULT_CATEGORY_CONFIG) -> Category:
    for category in PRIORITY_ORDER:
        if config.ids.get(category) == category_id:
            return category
    raise NotFound(f"Unknown category id: {category_id}")


def describe_categories(config: CategoryConfig = DEFAULT_CATEGORY_CONFIG) -> list[dict]:
    return [
        {
            "name": c.value,
            "id": config.ids[c],
            "priority": i,
            "label": CATEGORY_STYLES[c].label,
            "color": CATEGORY_STYLES[c].color,
            "emoji": CATEGORY_STYLES[c].emoji,
        }
        for i, c in enumerate(PRIORITY_ORDER)
    ]
