"""
Repositories for recipes and the recipe rating log.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime, timezone
from typing import Optional

from meal_plan_organizer.db.repositories.base import BaseRepository, placeholders
from meal_plan_organizer.models.recipe import Recipe, RecipeRating
from meal_plan_organizer.taxonomy.frequency import parse_frequency_preference

logger = logging.getLogger(__name__)


class RecipeRepository(BaseRepository):
    """Read/write access to the ``recipes`` table."""

    def insert(self, recipe: Recipe) -> int:
        """Insert a new recipe.

        Args:
            recipe: The ``Recipe`` to persist.

        Returns:
            The newly assigned ``recipe_id``.
        """
        return self.execute_insert(
            """
            INSERT INTO recipes (
                slug, title, description, image_url, cuisine_type,
                prep_time_minutes, cook_time_minutes, servings
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?);
            """,
            (
                recipe.slug,
                recipe.title,
                recipe.description,
                recipe.image_url,
                recipe.cuisine_type,
                recipe.prep_time_minutes,
                recipe.cook_time_minutes,
                recipe.servings,
            ),
        )

    def get_by_id(self, recipe_id: int) -> Optional[Recipe]:
        row = self.fetchone("SELECT * FROM recipes WHERE recipe_id = ?;", (recipe_id,))
        return _row_to_recipe(row) if row else None

    def get_by_slug(self, slug: str) -> Optional[Recipe]:
        row = self.fetchone("SELECT * FROM recipes WHERE slug = ?;", (slug,))
        return _row_to_recipe(row) if row else None

    def list_all(self) -> list[Recipe]:
        """Return every recipe in stable insertion order."""
        rows = self.fetchall("SELECT * FROM recipes ORDER BY recipe_id;")
        return [_row_to_recipe(r) for r in rows]

    def exists(self, recipe_id: int) -> bool:
        row = self.fetchone("SELECT 1 FROM recipes WHERE recipe_id = ?;", (recipe_id,))
        return row is not None

    def total(self) -> int:
        """Return total number of saved recipes."""
        return self.count("recipes")


class RecipeRatingRepository(BaseRepository):
    """Append-only access to the ``recipe_ratings`` log.

    Ratings are never updated in place: a new rating by the same user for the
    same recipe is a new row.  Reads return rows oldest-first so callers can
    rely on a stable, time-ordered iteration.
    """

    def add(self, rating: RecipeRating) -> int:
        """Append a rating to the log.

        Args:
            rating: The validated ``RecipeRating``.

        Returns:
            The newly assigned ``rating_id``.
        """
        return self.execute_insert(
            """
            INSERT INTO recipe_ratings (
                recipe_id, user_id, rating, comments, frequency_preference, rated_at
            ) VALUES (?, ?, ?, ?, ?, ?);
            """,
            (
                rating.recipe_id,
                rating.user_id,
                rating.rating,
                rating.comments,
                rating.frequency_preference.value if rating.frequency_preference else None,
                _utc_iso(rating.rated_at),
            ),
        )

    def list_for_recipe(self, recipe_id: int) -> list[RecipeRating]:
        """Return all ratings for one recipe, oldest first."""
        rows = self.fetchall(
            """
            SELECT * FROM recipe_ratings
            WHERE recipe_id = ?
            ORDER BY rated_at, rating_id;
            """,
            (recipe_id,),
        )
        return [_row_to_rating(r) for r in rows]

    def list_for_recipes(self, recipe_ids: list[int]) -> list[RecipeRating]:
        """Return all ratings for the given recipes, oldest first.

        Args:
            recipe_ids: Recipe PKs.  An empty list returns no rows.

        Returns:
            List of ``RecipeRating`` ordered by ``rated_at`` then ``rating_id``.
        """
        if not recipe_ids:
            return []
        rows = self.fetchall(
            f"""
            SELECT * FROM recipe_ratings
            WHERE recipe_id IN ({placeholders(recipe_ids)})
            ORDER BY rated_at, rating_id;
            """,
            tuple(recipe_ids),
        )
        return [_row_to_rating(r) for r in rows]

    def list_for_user(self, user_id: str, limit: int = 50) -> list[RecipeRating]:
        """Return a user's rating history, most recent first."""
        rows = self.fetchall(
            """
            SELECT * FROM recipe_ratings
            WHERE user_id = ?
            ORDER BY rated_at DESC, rating_id DESC
            LIMIT ?;
            """,
            (user_id, limit),
        )
        return [_row_to_rating(r) for r in rows]

    def average_for_recipe(self, recipe_id: int) -> tuple[float, int]:
        """Return ``(average rounded to 1 decimal, count)`` for one recipe."""
        row = self.fetchone(
            """
            SELECT AVG(rating) AS avg_rating, COUNT(*) AS n
            FROM recipe_ratings WHERE recipe_id = ?;
            """,
            (recipe_id,),
        )
        assert row is not None
        n = int(row["n"])
        return (round(float(row["avg_rating"]), 1) if n else 0.0), n

    def total(self) -> int:
        return self.count("recipe_ratings")


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_recipe(row: sqlite3.Row) -> Recipe:
    return Recipe(
        recipe_id=row["recipe_id"],
        slug=row["slug"],
        title=row["title"],
        description=row["description"],
        image_url=row["image_url"],
        cuisine_type=row["cuisine_type"],
        prep_time_minutes=row["prep_time_minutes"],
        cook_time_minutes=row["cook_time_minutes"],
        servings=row["servings"],
        created_at=_parse_ts(row["created_at"]),
    )


def _row_to_rating(row: sqlite3.Row) -> RecipeRating:
    # Stored preference strings outside the allow-list read back as "unset".
    return RecipeRating(
        rating_id=row["rating_id"],
        recipe_id=row["recipe_id"],
        user_id=row["user_id"],
        rating=row["rating"],
        comments=row["comments"],
        frequency_preference=parse_frequency_preference(row["frequency_preference"]),
        rated_at=_parse_ts(row["rated_at"]),
    )


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _utc_iso(value: datetime) -> str:
    # rated_at is ordered as text, so every row is stored with a +00:00 offset.
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()
