"""
SQLite-backed ``RecipeSnapshotSource`` for the recommendation service.

Wraps the recipe, rating and meal-plan repositories over one open
connection, so a single ``recommend()`` call reads a consistent snapshot.
"""

from __future__ import annotations

import sqlite3

from meal_plan_organizer.db.repositories.meal_plan_repo import MealPlanRepository
from meal_plan_organizer.db.repositories.recipe_repo import (
    RecipeRatingRepository,
    RecipeRepository,
)
from meal_plan_organizer.models.meal_plan import MealPlanAssignment
from meal_plan_organizer.models.recipe import Recipe, RecipeRating


class SqliteSnapshotSource:
    """Read-only view over the recipe store.

    Attributes:
        conn: The open ``sqlite3.Connection`` (caller-managed).
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self._recipes = RecipeRepository(conn)
        self._ratings = RecipeRatingRepository(conn)
        self._plans = MealPlanRepository(conn)

    def list_recipes(self) -> list[Recipe]:
        return self._recipes.list_all()

    def list_ratings_for(self, recipe_ids: list[int]) -> list[RecipeRating]:
        return self._ratings.list_for_recipes(recipe_ids)

    def list_assignments(self) -> list[MealPlanAssignment]:
        return self._plans.list_assignments()
