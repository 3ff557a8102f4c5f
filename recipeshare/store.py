"""
Recipe Aggregate Store

Authoritative in-memory set of recipes keyed by id, together with the
per-user relations the interaction fields are derived from:

    - likers: users counted in ``likes``
    - savers: users who bookmarked the recipe
    - ratings: each user's active rating, so a re-rate replaces the old one

Mutations on one recipe id are serialized by a lock owned by that id;
different ids never contend. Every mutation computes the next ``Recipe``
and swaps it in whole, and every read hands back a deep copy, so callers
never see (or cause) a half-updated aggregate.

``is_liked`` and ``is_saved`` on returned recipes are projected for the
``viewer_id`` passed in; the stored record keeps them False.
"""

import logging
import math
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Set

from .errors import InvalidComment, InvalidRating, NotFound
from .schemas import Comment, Recipe, RecipeDraft

logger = logging.getLogger(__name__)

MIN_RATING = 0.0
MAX_RATING = 5.0


@dataclass
class _Entry:
    recipe: Recipe
    likers: Set[str] = field(default_factory=set)
    savers: Set[str] = field(default_factory=set)
    ratings: Dict[str, float] = field(default_factory=dict)


def check_rating(value) -> float:
    """Return ``value`` as a float, raising InvalidRating if it is unusable."""
    if isinstance(value, bool):
        raise InvalidRating(value)
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise InvalidRating(value) from None
    if math.isnan(v) or v < MIN_RATING or v > MAX_RATING:
        raise InvalidRating(value)
    return v


def _clamp(rating: float) -> float:
    return min(MAX_RATING, max(MIN_RATING, rating))


def check_comment_text(text: Optional[str]) -> None:
    if not text or not text.strip():
        raise InvalidComment("Comment text must not be empty")


class RecipeStore:
    def __init__(self):
        self._entries: Dict[str, _Entry] = {}
        self._locks: Dict[str, threading.Lock] = {}
        # guards the two dicts above; never held while waiting on an id lock
        self._registry_lock = threading.Lock()

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._entries)

    def __contains__(self, recipe_id) -> bool:
        with self._registry_lock:
            return recipe_id in self._entries

    def _lock_for(self, recipe_id: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(recipe_id)
            if lock is None:
                lock = self._locks[recipe_id] = threading.Lock()
            return lock

    @contextmanager
    def _id_lock(self, recipe_id: str) -> Iterator[None]:
        # delete() retires an id's lock; anyone who queued on the retired
        # lock goes round again and picks up the current one
        while True:
            lock = self._lock_for(recipe_id)
            with lock:
                with self._registry_lock:
                    current = self._locks.get(recipe_id) is lock
                if current:
                    yield
                    return

    @contextmanager
    def _locked(self, recipe_id: str) -> Iterator[_Entry]:
        with self._id_lock(recipe_id):
            with self._registry_lock:
                entry = self._entries.get(recipe_id)
            if entry is None:
                raise NotFound(recipe_id)
            yield entry

    @staticmethod
    def _project(entry: _Entry, viewer_id: Optional[str]) -> Recipe:
        return entry.recipe.model_copy(
            deep=True,
            update={
                "is_liked": viewer_id is not None and viewer_id in entry.likers,
                "is_saved": viewer_id is not None and viewer_id in entry.savers,
            },
        )

    # ------------------------------------------------------------------
    # reads

    def get(self, recipe_id: str, viewer_id: Optional[str] = None) -> Recipe:
        with self._locked(recipe_id) as entry:
            return self._project(entry, viewer_id)

    def list(self, viewer_id: Optional[str] = None) -> List[Recipe]:
        with self._registry_lock:
            ids = list(self._entries)
        results = []
        for recipe_id in ids:
            try:
                results.append(self.get(recipe_id, viewer_id))
            except NotFound:
                # deleted after the id snapshot was taken
                continue
        return results

    def comments(self, recipe_id: str) -> List[Comment]:
        with self._locked(recipe_id) as entry:
            return [c.model_copy(deep=True) for c in entry.recipe.comments]

    # ------------------------------------------------------------------
    # load / remove

    def upsert(self, recipe: Recipe, viewer_id: Optional[str] = None) -> Recipe:
        """Insert ``recipe`` or replace the stored aggregate with the same id.

        On replace, the likers, savers and rating ledger already recorded
        for the id are kept, so users stay counted exactly once. The
        record's ``is_liked``/``is_saved`` flags are attributed to
        ``viewer_id`` when one is given and dropped otherwise. ``likes``
        never drops below the number of known likers.
        """
        seen = set()
        for c in recipe.comments:
            if c.recipe_id != recipe.id:
                raise InvalidComment(
                    f"Comment {c.id!r} belongs to {c.recipe_id!r}, not {recipe.id!r}"
                )
            if c.id in seen:
                raise InvalidComment(f"Duplicate comment id {c.id!r}")
            seen.add(c.id)

        with self._id_lock(recipe.id):
            with self._registry_lock:
                previous = self._entries.get(recipe.id)

            likers = set(previous.likers) if previous else set()
            savers = set(previous.savers) if previous else set()
            ratings = dict(previous.ratings) if previous else {}
            if viewer_id is not None:
                if recipe.is_liked:
                    likers.add(viewer_id)
                else:
                    likers.discard(viewer_id)
                if recipe.is_saved:
                    savers.add(viewer_id)
                else:
                    savers.discard(viewer_id)
            if len(ratings) > recipe.rating_count:
                # the ledger no longer fits inside the incoming aggregate
                ratings = {}

            entry = _Entry(
                recipe=recipe.model_copy(
                    deep=True,
                    update={
                        "likes": max(recipe.likes, len(likers)),
                        "is_liked": False,
                        "is_saved": False,
                    },
                ),
                likers=likers,
                savers=savers,
                ratings=ratings,
            )
            with self._registry_lock:
                self._entries[recipe.id] = entry
            result = self._project(entry, viewer_id)
        logger.info(f"{'Replaced' if previous else 'Loaded'} recipe {recipe.id}")
        return result

    def update_content(self, recipe_id: str, draft: RecipeDraft) -> Recipe:
        """Swap in the authored fields of ``draft``.

        Identity, authorship and all interaction state are left alone.
        """
        draft = draft.model_copy(deep=True)
        content = {name: getattr(draft, name) for name in RecipeDraft.model_fields}
        with self._locked(recipe_id) as entry:
            entry.recipe = entry.recipe.model_copy(update=content)
            logger.info(f"Updated content of recipe {recipe_id}")
            return self._project(entry, None)

    def delete(self, recipe_id: str) -> None:
        """Remove the whole aggregate, its comments and relations included."""
        with self._locked(recipe_id):
            with self._registry_lock:
                del self._entries[recipe_id]
                del self._locks[recipe_id]
        logger.info(f"Deleted recipe {recipe_id}")

    # ------------------------------------------------------------------
    # interaction deltas

    def apply_like_delta(self, recipe_id: str, user_id: str, like: bool) -> Recipe:
        with self._locked(recipe_id) as entry:
            if (user_id in entry.likers) == like:
                logger.debug(f"Like for {user_id} on {recipe_id} already {like}")
                return self._project(entry, user_id)
            if like:
                entry.likers.add(user_id)
                likes = entry.recipe.likes + 1
            else:
                entry.likers.discard(user_id)
                likes = max(0, entry.recipe.likes - 1)
            entry.recipe = entry.recipe.model_copy(update={"likes": likes})
            logger.info(f"{'Liked' if like else 'Unliked'} recipe {recipe_id} by {user_id} ({likes} likes)")
            return self._project(entry, user_id)

    def apply_save_delta(self, recipe_id: str, user_id: str, save: bool) -> Recipe:
        with self._locked(recipe_id) as entry:
            if save:
                entry.savers.add(user_id)
            else:
                entry.savers.discard(user_id)
            return self._project(entry, user_id)

    def add_rating(self, recipe_id: str, value, user_id: Optional[str] = None) -> Recipe:
        """Fold ``value`` into the running mean.

        If ``user_id`` already has a rating on this recipe, that rating is
        swapped for the new one and ``rating_count`` stays the same.
        """
        with self._locked(recipe_id) as entry:
            value = check_rating(value)
            r = entry.recipe
            count = r.rating_count
            total = r.rating * count
            previous = entry.ratings.get(user_id) if user_id is not None else None
            if previous is None:
                total += value
                count += 1
            else:
                total += value - previous
            rating = _clamp(total / count)
            if user_id is not None:
                entry.ratings[user_id] = value
            entry.recipe = r.model_copy(update={"rating": rating, "rating_count": count})
            logger.info(f"Rated recipe {recipe_id} {value} -> {rating:.2f} over {count}")
            return self._project(entry, user_id)

    def append_comment(self, recipe_id: str, comment: Comment) -> Recipe:
        with self._locked(recipe_id) as entry:
            if comment.recipe_id != recipe_id:
                raise InvalidComment(
                    f"Comment targets {comment.recipe_id!r}, not {recipe_id!r}"
                )
            check_comment_text(comment.text)
            if any(c.id == comment.id for c in entry.recipe.comments):
                logger.debug(f"Comment {comment.id} already on {recipe_id}")
                return self._project(entry, comment.user_id)
            comments = list(entry.recipe.comments) + [comment.model_copy(deep=True)]
            entry.recipe = entry.recipe.model_copy(update={"comments": comments})
            logger.info(f"Comment {comment.id} added to recipe {recipe_id}")
            return self._project(entry, comment.user_id)
