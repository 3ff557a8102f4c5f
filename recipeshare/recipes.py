import json
import logging
from pathlib import Path
from typing import List

from .schemas import Category, Recipe
from .store import RecipeStore

logger = logging.getLogger(__name__)


def _read_json_list(path):
    p = Path(path)
    if not p.exists():
        logger.warning(f"Seed file {p} not found")
        return []
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_recipes(path) -> List[Recipe]:
    """Load recipes from a JSON file.

    Args:
        path (str or Path): Path to a JSON list of recipe objects, using the
            camelCase keys of the mobile app.

    Returns:
        list: validated Recipe records, in file order. A missing file
        yields an empty list.
    """
    return [Recipe.model_validate(r) for r in _read_json_list(path)]


def load_categories(path) -> List[Category]:
    return [Category.model_validate(c) for c in _read_json_list(path)]


def seed_store(store: RecipeStore, recipes) -> int:
    added = 0
    for recipe in recipes:
        store.upsert(recipe)
        added += 1
    logger.info(f"Seeded {added} recipes")
    return added
