"""
Recommendation service: the single entry point callers use.

``RecommendationService.recommend(week_start_date)`` reads one snapshot of
recipes, ratings and assignments from a ``RecipeSnapshotSource`` and runs
the three pure stages (aggregate → score → rank).  Every call recomputes
from scratch; there is no cache.

Storage failures raised by the source propagate unchanged — the engine is
never invoked with partial data.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Protocol

from meal_plan_organizer.models.meal_plan import MealPlanAssignment
from meal_plan_organizer.models.recipe import Recipe, RecipeRating
from meal_plan_organizer.models.recommendation import RecommendationList
from meal_plan_organizer.recommendations.ranker import (
    ScoredRecipe,
    build_recommendation_list,
    build_scored_recipes,
    rank_recipes,
)
from meal_plan_organizer.recommendations.signals import aggregate_signals

logger = logging.getLogger(__name__)


class RecipeSnapshotSource(Protocol):
    """Read-only storage collaborator consumed by the service."""

    def list_recipes(self) -> list[Recipe]: ...

    def list_ratings_for(self, recipe_ids: list[int]) -> list[RecipeRating]: ...

    def list_assignments(self) -> list[MealPlanAssignment]: ...


class RecommendationService:
    """Rank saved recipes for a planning week.

    Attributes:
        source: Storage collaborator providing the snapshot.
    """

    def __init__(self, source: RecipeSnapshotSource) -> None:
        self.source = source

    def recommend(self, week_start_date: date) -> RecommendationList:
        """Return every saved recipe, ranked for ``week_start_date``."""
        ranked = self.score_all(week_start_date)
        result = build_recommendation_list(ranked, week_start_date)
        logger.info(
            "Generated %d recommendation(s) for week starting %s",
            result.total_recipes, week_start_date,
        )
        return result

    def score_all(self, week_start_date: date) -> list[ScoredRecipe]:
        """Fetch the snapshot and return ranked ScoredRecipe objects.

        Exposes the component breakdown for reports; ``recommend()`` is the
        public shape.
        """
        logger.debug("Loading recommendation snapshot for week %s", week_start_date)
        recipes = self.source.list_recipes()
        recipe_ids = [r.recipe_id for r in recipes if r.recipe_id is not None]
        ratings = self.source.list_ratings_for(recipe_ids)
        assignments = self.source.list_assignments()

        logger.debug(
            "Snapshot: %d recipe(s), %d rating(s), %d assignment(s)",
            len(recipes), len(ratings), len(assignments),
        )

        signals = aggregate_signals(recipes, ratings, assignments)
        scored = build_scored_recipes(recipes, signals, week_start_date)
        return rank_recipes(scored)
