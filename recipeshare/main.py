import argparse

from .config import configure_logging, settings
from .engine import InteractionEngine
from .filters import FilterMode, find_category
from .recipes import load_categories, load_recipes, seed_store
from .store import RecipeStore


def main(argv=None):
    parser = argparse.ArgumentParser(description="List the seeded recipes.")
    parser.add_argument("--recipes", default=settings.SEED_RECIPES_FILE)
    parser.add_argument("--categories", default=settings.SEED_CATEGORIES_FILE)
    parser.add_argument("--category", help="category id or name to filter by")
    parser.add_argument(
        "--by",
        choices=[m.value for m in FilterMode],
        default=settings.DEFAULT_FILTER_MODE,
    )
    parser.add_argument("--query", "-q", help="free-text search")
    args = parser.parse_args(argv)

    configure_logging("WARNING")
    store = RecipeStore()
    seed_store(store, load_recipes(args.recipes))
    engine = InteractionEngine(store)

    category = None
    if args.category:
        category = find_category(load_categories(args.categories), args.category)
    recipes = engine.browse(category=category, mode=FilterMode(args.by), query=args.query)

    print(f"Loaded {len(store)} recipe(s), showing {len(recipes)}.")
    for r in recipes:
        print(f"- {r.title} ({r.total_time} min, {r.rating:.1f}/5, {r.likes} likes)")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
