from __future__ import annotations

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .categories import PRIORITY_ORDER, Category, parse_category


class Attraction(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    description: str
    address: str = ""
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)
    category: Category
    rating: float | None = None
    image: str | None = None


class AttractionIn(BaseModel):
    """Payload shared by user submissions and direct admin creation."""

    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    address: str = ""
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)
    category: str = Category.food.value
    rating: float | None = None
    image: str | None = None


class ActiveCategorySet:
    """User-controlled filter over the fixed categories.

    Instances are immutable; ``activate`` and ``toggle`` return new sets.
    """

    __slots__ = ("_flags",)

    def __init__(self, flags: Mapping[Category, bool] | None = None) -> None:
        flags = flags or {}
        self._flags = {c: bool(flags.get(c, False)) for c in PRIORITY_ORDER}

    @classmethod
    def all_on(cls) -> ActiveCategorySet:
        return cls({c: True for c in PRIORITY_ORDER})

    @classmethod
    def none_on(cls) -> ActiveCategorySet:
        return cls()

    @classmethod
    def from_names(cls, names: Iterable[str]) -> ActiveCategorySet:
        return cls({parse_category(n): True for n in names})

    def is_active(self, category: Category) -> bool:
        return self._flags[category]

    def active(self) -> list[Category]:
        """Active categories in priority order."""
        return [c for c in PRIORITY_ORDER if self._flags[c]]

    def activate(self, category: Category) -> ActiveCategorySet:
        if self._flags[category]:
            return self
        return ActiveCategorySet({**self._flags, category: True})

    def toggle(self, category: Category) -> ActiveCategorySet:
        return ActiveCategorySet({**self._flags, category: not self._flags[category]})

    def as_dict(self) -> dict[str, bool]:
        return {c.value: self._flags[c] for c in PRIORITY_ORDER}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ActiveCategorySet):
            return NotImplemented
        return self._flags == other._flags

    def __hash__(self) -> int:
        return hash(tuple(self._flags[c] for c in PRIORITY_ORDER))

    def __repr__(self) -> str:
        return f"ActiveCategorySet({self.as_dict()})"
