"""
Recommendation ranker: couples recipes with their signals and scores, orders
them, and builds the RecommendationList returned to callers.

Usage flow
----------
1. build_scored_recipes(recipes, signals, week_start_date)
   -> list[ScoredRecipe]  (one per recipe with a signal, input order)

2. rank_recipes(scored)
   -> list[ScoredRecipe]  (score desc, then average_rating desc)

3. build_recommendation_list(ranked, week_start_date)
   -> RecommendationList  (frozen output model)

Ordering
--------
``sorted()`` is stable, so recipes tied on both score and average rating keep
the order in which storage listed them.  No filtering happens here: recipes
scored 0 (e.g. marked "Never") are still returned, at the bottom.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from meal_plan_organizer.models.recipe import Recipe
from meal_plan_organizer.models.recommendation import (
    RecommendationList,
    RecommendedRecipe,
)
from meal_plan_organizer.recommendations.scorer import ScoreBreakdown, score_signal
from meal_plan_organizer.recommendations.signals import RecipeSignal


@dataclass
class ScoredRecipe:
    """Intermediate object coupling a Recipe with its signal and score.

    Attributes:
        recipe:     The underlying Recipe.
        signal:     Aggregated rating/assignment signals.
        breakdown:  Detailed score components and reason codes.
    """

    recipe:    Recipe
    signal:    RecipeSignal
    breakdown: ScoreBreakdown

    @property
    def score(self) -> float:
        return self.breakdown.score

    @property
    def average_rating(self) -> float:
        return self.signal.average_rating

    @property
    def reason_codes(self) -> list[str]:
        return self.breakdown.reason_codes


def build_scored_recipes(
    recipes:         list[Recipe],
    signals:         dict[int, RecipeSignal],
    week_start_date: date,
) -> list[ScoredRecipe]:
    """Score every recipe that has a signal.

    Recipes are matched to signals by ``recipe_id``; recipes without a signal
    (not persisted, or filtered out upstream) are skipped.

    Args:
        recipes:         Candidate recipes, in storage order.
        signals:         Output of ``aggregate_signals()``.
        week_start_date: Monday of the week being planned.

    Returns:
        List of ScoredRecipe in ``recipes`` order.
    """
    scored: list[ScoredRecipe] = []
    for recipe in recipes:
        signal = signals.get(recipe.recipe_id) if recipe.recipe_id is not None else None
        if signal is None:
            continue
        scored.append(
            ScoredRecipe(
                recipe=recipe,
                signal=signal,
                breakdown=score_signal(signal, week_start_date),
            )
        )
    return scored


def rank_recipes(scored: list[ScoredRecipe]) -> list[ScoredRecipe]:
    """Order by score descending, then average rating descending (stable)."""
    return sorted(scored, key=lambda s: (-s.score, -s.average_rating))


def build_recommendation_list(
    ranked:          list[ScoredRecipe],
    week_start_date: date,
) -> RecommendationList:
    """Convert ranked ScoredRecipe objects into the frozen output model."""
    entries = [
        RecommendedRecipe(
            recipe_id=s.recipe.recipe_id,
            title=s.recipe.title,
            image_url=s.recipe.image_url,
            cuisine_type=s.recipe.cuisine_type,
            prep_time_minutes=s.recipe.prep_time_minutes,
            cook_time_minutes=s.recipe.cook_time_minutes,
            score=s.score,
            average_rating=s.average_rating,
            rating_count=s.signal.rating_count,
            last_cooked_date=s.signal.last_assigned_day,
            frequency_preference=(
                s.signal.dominant_frequency_preference.value
                if s.signal.dominant_frequency_preference is not None
                else None
            ),
            reason_codes=tuple(s.reason_codes),
        )
        for s in ranked
    ]
    return RecommendationList(
        week_start_date=week_start_date,
        total_recipes=len(entries),
        recipes=tuple(entries),
    )
