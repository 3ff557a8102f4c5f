from enum import Enum
from typing import Iterable, List, Optional

from .normalize import contains_text, is_tag_match
from .schemas import Category, Recipe


class FilterMode(str, Enum):
    tag = "tag"
    region = "region"


def filter_recipes(
    recipes: Iterable[Recipe],
    selected: Optional[Category],
    mode: FilterMode = FilterMode.tag,
) -> List[Recipe]:
    """Return the recipes matching ``selected``, in their original order.

    With no selection every recipe is returned. In tag mode a recipe matches
    when one of its tags equals the category name, ignoring case. In region
    mode the recipe's region must equal the category name exactly. A
    category nothing matches simply yields an empty list.
    """
    recipes = list(recipes)
    if selected is None:
        return recipes
    mode = FilterMode(mode)
    if mode is FilterMode.region:
        return [r for r in recipes if r.region is not None and r.region == selected.name]
    return [r for r in recipes if is_tag_match(r.tags, selected.name)]


def search_recipes(recipes: Iterable[Recipe], query: Optional[str]) -> List[Recipe]:
    recipes = list(recipes)
    if not query or not query.strip():
        return recipes
    q = query.strip()
    results = []
    for r in recipes:
        fields = [r.title, r.description, r.region or ""] + list(r.tags)
        if any(contains_text(f, q) for f in fields):
            results.append(r)
    return results


def find_category(categories: Iterable[Category], key: str) -> Category:
    """Match ``key`` against category ids, then names (ignoring case)."""
    categories = list(categories)
    for c in categories:
        if c.id == key:
            return c
    for c in categories:
        if c.name.casefold() == key.casefold():
            return c
    # unknown categories still filter; they just match nothing
    return Category(id=key, name=key)
