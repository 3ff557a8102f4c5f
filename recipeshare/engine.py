"""
Interaction Engine

Turns user actions (like, save, rate, comment, publish, edit, delete) into
RecipeStore calls. This is the only layer that knows who the current user
is. Every operation fails closed: an unknown recipe raises NotFound first,
then invalid input raises InvalidRating / InvalidComment, and in both cases
nothing is changed.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional
from uuid import uuid4

from .errors import NotAuthorized
from .filters import FilterMode, filter_recipes, search_recipes
from .schemas import Category, Comment, Recipe, RecipeDraft, Viewer
from .store import RecipeStore

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid4().hex


class InteractionEngine:
    def __init__(
        self,
        store: RecipeStore,
        clock: Optional[Callable[[], datetime]] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.store = store
        self._clock = clock or _utcnow
        self._new_id = id_factory or _new_id

    # likes / saves ------------------------------------------------------

    def _set_like(self, recipe_id: str, user_id: str, like: bool) -> Recipe:
        current = self.store.get(recipe_id, viewer_id=user_id)
        if current.is_liked == like:
            return current
        return self.store.apply_like_delta(recipe_id, user_id, like)

    def like(self, recipe_id: str, user_id: str) -> Recipe:
        return self._set_like(recipe_id, user_id, True)

    def unlike(self, recipe_id: str, user_id: str) -> Recipe:
        return self._set_like(recipe_id, user_id, False)

    def _set_save(self, recipe_id: str, user_id: str, save: bool) -> Recipe:
        current = self.store.get(recipe_id, viewer_id=user_id)
        if current.is_saved == save:
            return current
        return self.store.apply_save_delta(recipe_id, user_id, save)

    def save(self, recipe_id: str, user_id: str) -> Recipe:
        return self._set_save(recipe_id, user_id, True)

    def unsave(self, recipe_id: str, user_id: str) -> Recipe:
        return self._set_save(recipe_id, user_id, False)

    # ratings / comments -------------------------------------------------

    def rate(self, recipe_id: str, user_id: str, value) -> Recipe:
        """Record ``user_id``'s rating, replacing any rating they gave before.

        An unknown recipe is reported as NotFound before the value is checked.
        """
        return self.store.add_rating(recipe_id, value, user_id=user_id)

    def comment(
        self,
        recipe_id: str,
        viewer: Viewer,
        text: str,
        comment_id: Optional[str] = None,
    ) -> Recipe:
        # the store reports NotFound first, then an empty or misdirected comment
        comment = Comment(
            id=comment_id or self._new_id(),
            user_id=viewer.id,
            user_name=viewer.name,
            user_avatar=viewer.avatar,
            text=(text or "").strip(),
            created_at=self._clock(),
            recipe_id=recipe_id,
        )
        return self.store.append_comment(recipe_id, comment)

    def comments(self, recipe_id: str) -> List[Comment]:
        return self.store.comments(recipe_id)

    # authoring ----------------------------------------------------------

    def publish(self, draft: RecipeDraft, author: Viewer) -> Recipe:
        recipe = Recipe(
            **draft.model_dump(),
            id=self._new_id(),
            author_id=author.id,
            author_name=author.name,
            author_avatar=author.avatar,
            created_at=self._clock(),
        )
        logger.info(f"Publishing recipe {recipe.id} ({recipe.title!r}) by {author.id}")
        return self.store.upsert(recipe)

    def _check_author(self, recipe_id: str, user_id: str, action: str) -> None:
        recipe = self.store.get(recipe_id)
        if recipe.author_id != user_id:
            logger.warning(f"User {user_id} tried to {action} recipe {recipe_id} owned by {recipe.author_id}")
            raise NotAuthorized(f"Only the author can {action} this recipe")

    def update(self, recipe_id: str, draft: RecipeDraft, user_id: str) -> Recipe:
        """Replace the authored content, keeping likes, ratings and comments."""
        self._check_author(recipe_id, user_id, "edit")
        self.store.update_content(recipe_id, draft)
        return self.store.get(recipe_id, viewer_id=user_id)

    def delete(self, recipe_id: str, user_id: str) -> None:
        self._check_author(recipe_id, user_id, "delete")
        self.store.delete(recipe_id)

    # browsing -----------------------------------------------------------

    def get(self, recipe_id: str, viewer_id: Optional[str] = None) -> Recipe:
        return self.store.get(recipe_id, viewer_id=viewer_id)

    def browse(
        self,
        viewer_id: Optional[str] = None,
        category: Optional[Category] = None,
        mode: FilterMode = FilterMode.tag,
        query: Optional[str] = None,
    ) -> List[Recipe]:
        recipes = self.store.list(viewer_id=viewer_id)
        recipes = filter_recipes(recipes, category, mode)
        return search_recipes(recipes, query)
