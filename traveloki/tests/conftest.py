from __future__ import annotations

import pytest

from traveloki.analytics.store import clear_events
from traveloki.attractions.categories import Category
from traveloki.attractions.directory import InMemoryDirectory, reset_directory
from traveloki.attractions.models import Attraction
from traveloki.auth.models import Identity, Role
from traveloki.moderation.workflow import reset_workflow


@pytest.fixture(autouse=True)
def fresh_state():
    """Every test starts from the seeded directory and an empty queue."""
    reset_directory()
    reset_workflow()
    clear_events()
    yield
    reset_directory()
    reset_workflow()


def _attraction(id, name, lat, lng, category, **extra) -> Attraction:
    return Attraction(
        id=id,
        name=name,
        description=extra.pop("description", f"About {name}"),
        lat=lat,
        lng=lng,
        category=category,
        **extra,
    )


@pytest.fixture
def directory() -> InMemoryDirectory:
    return InMemoryDirectory([
        _attraction("f1", "Warung Enak", 3.59, 98.67, Category.food),
        _attraction("f2", "Sate Padang Enak", 3.60, 98.68, Category.food),
        _attraction("u1", "Istana Maimun", 3.5752, 98.6837, Category.fun),
        _attraction("u2", "Enak Karaoke", 3.58, 98.69, Category.fun),
        _attraction("h1", "Hotel Grand Aston", 3.5916, 98.6770, Category.hotels),
    ])


@pytest.fixture
def admin() -> Identity:
    return Identity(username="admin", role=Role.admin)


@pytest.fixture
def user() -> Identity:
    return Identity(username="budi", role=Role.user)
