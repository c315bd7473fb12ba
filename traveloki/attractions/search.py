"""
Search engine over the attraction directory.

Text search is first-match-wins in category priority order; proximity search
uses the haversine distance. All functions are pure reads over the directory
passed in.
"""
from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np

from ..errors import ValidationError
from ..location.models import Position
from .categories import PRIORITY_ORDER, Category
from .directory import DirectoryStore
from .geo import haversine_many
from .models import ActiveCategorySet, Attraction


@dataclass(frozen=True)
class SearchOutcome:
    attraction: Attraction
    category: Category
    # Active set after the search; the result's category is always active.
    active: ActiveCategorySet
    activated: bool


@dataclass(frozen=True)
class NearbyResult:
    attraction: Attraction
    distance_m: float


def search_by_text(
    query: str,
    active: ActiveCategorySet,
    directory: DirectoryStore,
) -> SearchOutcome | None:
    """Return the first attraction whose name contains ``query``.

    Every category is scanned, active or not, so a hit can reveal a hidden
    category. Returns ``None`` for a blank query or when nothing matches.
    """
    needle = (query or "").strip().lower()
    if not needle:
        return None

    for category in PRIORITY_ORDER:
        for attraction in directory.list_category(category):
            if needle in attraction.name.lower():
                activated = not active.is_active(category)
                return SearchOutcome(
                    attraction=attraction,
                    category=category,
                    active=active.activate(category),
                    activated=activated,
                )
    return None


def _eligible(active: ActiveCategorySet, directory: DirectoryStore) -> list[Attraction]:
    """Attractions of active categories in priority order, then directory order."""
    candidates: list[Attraction] = []
    for category in active.active():
        candidates.extend(directory.list_category(category))
    return candidates


def _distances(position: Position, candidates: list[Attraction]) -> np.ndarray:
    lats = np.array([a.lat for a in candidates], dtype=float)
    lngs = np.array([a.lng for a in candidates], dtype=float)
    return haversine_many(position.lat, position.lng, lats, lngs)


def nearest_to(
    position: Position,
    active: ActiveCategorySet,
    directory: DirectoryStore,
) -> Attraction | None:
    candidates = _eligible(active, directory)
    if not candidates:
        return None
    # argmin returns the first minimum, which is the required tie-break.
    return candidates[int(np.argmin(_distances(position, candidates)))]


def within_radius(
    position: Position,
    radius_km: float,
    active: ActiveCategorySet,
    directory: DirectoryStore,
) -> list[NearbyResult]:
    if not (math.isfinite(radius_km) and radius_km > 0):
        raise ValidationError(f"Radius must be positive, got {radius_km}")

    candidates = _eligible(active, directory)
    if not candidates:
        return []

    distances = _distances(position, candidates)
    order = np.argsort(distances, kind="stable")
    limit_m = radius_km * 1000.0
    return [
        NearbyResult(attraction=candidates[i], distance_m=float(distances[i]))
        for i in order
        if distances[i] <= limit_m
    ]
