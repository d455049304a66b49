"""
Signal aggregation: folds the raw rating log and meal-plan assignments into
one ``RecipeSignal`` per recipe.

Signals
-------
average_rating (0.0–5.0):
    Arithmetic mean of every rating value for the recipe, rounded to one
    decimal.  The rounded value is both displayed and scored.  0.0 when the
    recipe has no ratings.

rating_count:
    Number of ratings in the log for the recipe (all raters, all history).

dominant_frequency_preference:
    Mode of the stated frequency preferences.  Ratings without a preference
    do not vote.  Ties go to the value encountered first in the ratings'
    iteration order (storage returns them oldest-first).

last_assigned_day:
    Latest meal-plan day the recipe was placed on; ``None`` if never planned.

All functions are pure — no DB or I/O, inputs are never mutated.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from typing import Optional

from meal_plan_organizer.models.meal_plan import MealPlanAssignment
from meal_plan_organizer.models.recipe import Recipe, RecipeRating
from meal_plan_organizer.taxonomy.frequency import (
    FrequencyPreference,
    parse_frequency_preference,
)


@dataclass(frozen=True)
class RecipeSignal:
    """Per-recipe aggregate derived from ratings and assignments.

    Attributes:
        average_rating:                Mean star rating, one decimal (0.0 if unrated).
        rating_count:                  Number of ratings.
        dominant_frequency_preference: Most frequently stated preference, or ``None``.
        last_assigned_day:             Latest assignment day, or ``None``.
    """

    average_rating:                float
    rating_count:                  int
    dominant_frequency_preference: Optional[FrequencyPreference]
    last_assigned_day:             Optional[date]


def build_signal(
    ratings:         Iterable[RecipeRating],
    assignment_days: Iterable[date],
) -> RecipeSignal:
    """Aggregate one recipe's ratings and assignment days into a signal."""
    values: list[int] = []
    preferences: list[FrequencyPreference] = []
    for r in ratings:
        values.append(r.rating)
        pref = parse_frequency_preference(r.frequency_preference)
        if pref is not None:
            preferences.append(pref)

    average = round(sum(values) / len(values), 1) if values else 0.0
    last_day = max(assignment_days, default=None)

    return RecipeSignal(
        average_rating=average,
        rating_count=len(values),
        dominant_frequency_preference=dominant_preference(preferences),
        last_assigned_day=last_day,
    )


def dominant_preference(
    preferences: list[FrequencyPreference],
) -> Optional[FrequencyPreference]:
    """Return the most common preference; first-encountered wins a tie."""
    if not preferences:
        return None
    # Counter preserves insertion order, and max() keeps the first maximum.
    counts = Counter(preferences)
    return max(counts, key=lambda p: counts[p])


def aggregate_signals(
    recipes:     list[Recipe],
    ratings:     list[RecipeRating],
    assignments: list[MealPlanAssignment],
) -> dict[int, RecipeSignal]:
    """Build a ``RecipeSignal`` for every recipe.

    Ratings and assignments referencing recipes outside ``recipes`` are
    ignored.  Recipes without a ``recipe_id`` (not yet persisted) are skipped.

    Args:
        recipes:     Candidate recipes.
        ratings:     Full rating log, in stable (oldest-first) order.
        assignments: All meal-plan assignments.

    Returns:
        Dict mapping recipe_id -> RecipeSignal, in ``recipes`` order.
    """
    ratings_by_recipe: dict[int, list[RecipeRating]] = defaultdict(list)
    for r in ratings:
        ratings_by_recipe[r.recipe_id].append(r)

    days_by_recipe: dict[int, list[date]] = defaultdict(list)
    for a in assignments:
        days_by_recipe[a.recipe_id].append(a.day)

    signals: dict[int, RecipeSignal] = {}
    for recipe in recipes:
        if recipe.recipe_id is None:
            continue
        signals[recipe.recipe_id] = build_signal(
            ratings_by_recipe.get(recipe.recipe_id, []),
            days_by_recipe.get(recipe.recipe_id, []),
        )
    return signals
