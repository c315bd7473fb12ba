"""
Directory Store: published attractions partitioned by category.

The core only depends on the ``DirectoryStore`` protocol. ``InMemoryDirectory``
is the implementation the service runs with; it is seeded from a CSV file and
makes every single-record insert or delete atomic.
"""
from __future__ import annotations

import threading
import uuid
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

import pandas as pd

from ..config import DEFAULT_APP_CONFIG
from ..errors import NotFound
from .categories import PRIORITY_ORDER, Category, parse_category
from .models import Attraction

SEED_COLUMNS = ["id", "name", "description", "address", "lat", "lng", "category", "rating", "image"]


class DirectoryStore(Protocol):
    def list_category(self, category: Category) -> list[Attraction]: ...

    def get(self, attraction_id: str) -> Attraction | None: ...

    def insert(self, attraction: Attraction) -> Attraction: ...

    def delete(self, attraction_id: str) -> Attraction: ...


class InMemoryDirectory:
    def __init__(self, attractions: Iterable[Attraction] = ()) -> None:
        self._lock = threading.Lock()
        self._by_category: dict[Category, list[Attraction]] = {c: [] for c in PRIORITY_ORDER}
        self._by_id: dict[str, Attraction] = {}
        for attraction in attractions:
            self.insert(attraction)

    def list_category(self, category: Category) -> list[Attraction]:
        """Attractions of one category in insertion order (a snapshot copy)."""
        with self._lock:
            return list(self._by_category[category])

    def by_categories(self, categories: Iterable[Category]) -> dict[Category, list[Attraction]]:
        wanted = set(categories)
        with self._lock:
            return {c: list(self._by_category[c]) for c in PRIORITY_ORDER if c in wanted}

    def snapshot(self) -> dict[str, list[Attraction]]:
        """All attractions keyed by category name, in the ``{food, fun, hotels}`` shape."""
        with self._lock:
            return {c.value: list(self._by_category[c]) for c in PRIORITY_ORDER}

    def get(self, attraction_id: str) -> Attraction | None:
        with self._lock:
            return self._by_id.get(attraction_id)

    def insert(self, attraction: Attraction) -> Attraction:
        with self._lock:
            if attraction.id in self._by_id:
                raise ValueError(f"Attraction with id '{attraction.id}' already exists")
            self._by_id[attraction.id] = attraction
            self._by_category[attraction.category].append(attraction)
        return attraction

    def delete(self, attraction_id: str) -> Attraction:
        with self._lock:
            attraction = self._by_id.pop(attraction_id, None)
            if attraction is None:
                raise NotFound(f"Attraction '{attraction_id}' not found")
            self._by_category[attraction.category].remove(attraction)
        return attraction

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)


def new_attraction_id() -> str:
    return uuid.uuid4().hex[:12]


def _optional(value):
    return None if pd.isna(value) else value


def load_seed(path: Path) -> list[Attraction]:
    """Read seed attractions from a CSV file with ``SEED_COLUMNS``."""
    df = pd.read_csv(path, dtype={"id": str})
    df["category"] = df["category"].fillna("").str.strip().str.lower()
    df["address"] = df["address"].fillna("")

    attractions: list[Attraction] = []
    for _, row in df.iterrows():
        rating = _optional(row.get("rating"))
        attractions.append(Attraction(
            id=str(row["id"]),
            name=row["name"],
            description=row["description"],
            address=row["address"],
            lat=float(row["lat"]),
            lng=float(row["lng"]),
            category=parse_category(row["category"]),
            rating=float(rating) if rating is not None else None,
            image=_optional(row.get("image")),
        ))
    return attractions


_directory: InMemoryDirectory | None = None


def get_directory() -> InMemoryDirectory:
    """Return the process-wide directory, seeding it on first call."""
    global _directory
    if _directory is None:
        seed_csv = DEFAULT_APP_CONFIG.seed_csv
        _directory = InMemoryDirectory(load_seed(seed_csv) if seed_csv.exists() else ())
    return _directory


def reset_directory() -> None:
    global _directory
    _directory = None
