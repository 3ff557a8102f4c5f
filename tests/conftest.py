"""
Pytest configuration and fixtures for recipeshare tests.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure project root is on sys.path so `recipeshare` imports without an install
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))  # noqa: E402

from recipeshare.engine import InteractionEngine  # noqa: E402
from recipeshare.schemas import Recipe  # noqa: E402
from recipeshare.store import RecipeStore  # noqa: E402


FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def build_recipe(**overrides) -> Recipe:
    data = {
        "id": "r1",
        "title": "Doro Wat",
        "description": "Spicy chicken stew",
        "imageUrl": "https://example.com/doro.jpg",
        "prepTime": 20,
        "cookTime": 60,
        "servings": 4,
        "difficulty": "hard",
        "ingredients": [
            {"id": "1", "name": "chicken", "amount": "1", "unit": "kg"},
            {"id": "2", "name": "berbere", "amount": "1/4", "unit": "cup"},
        ],
        "steps": [
            {"id": "1", "description": "Caramelize onions"},
            {"id": "2", "description": "Simmer with chicken"},
        ],
        "region": "Amhara",
        "tags": ["Doro Wat", "stew"],
        "authorId": "author",
        "authorName": "Selam",
        "authorAvatar": "",
        "createdAt": "2024-01-01T00:00:00Z",
        "likes": 0,
        "rating": 0,
        "ratingCount": 0,
        "comments": [],
    }
    data.update(overrides)
    return Recipe.model_validate(data)


@pytest.fixture
def make_recipe():
    """Factory for valid recipes; keyword overrides use the camelCase keys."""
    return build_recipe


@pytest.fixture
def now():
    return FIXED_NOW


@pytest.fixture
def store():
    return RecipeStore()


@pytest.fixture
def engine(store):
    ids = iter(f"id-{n}" for n in range(1, 1000))
    return InteractionEngine(store, clock=lambda: FIXED_NOW, id_factory=lambda: next(ids))
