"""
Tests for meal_plan_organizer/recommendations/signals.py.

What we test
------------
build_signal():
  - Mean rating rounded to one decimal; 0.0 and count 0 when unrated.
  - Preferences vote by mode; unset preferences do not vote.
  - Mode ties go to the first preference encountered.
  - last_assigned_day is the latest day, None when never planned.

aggregate_signals():
  - One signal per persisted recipe, in recipe order.
  - Ratings/assignments for unknown recipes are ignored.
  - Inputs are not mutated.
"""

from __future__ import annotations

from datetime import date

from conftest import make_assignment, make_rating, make_recipe

from meal_plan_organizer.recommendations.signals import (
    aggregate_signals,
    build_signal,
    dominant_preference,
)
from meal_plan_organizer.taxonomy.frequency import FrequencyPreference as F


class TestBuildSignal:
    def test_unrated_recipe(self):
        s = build_signal([], [])
        assert s.average_rating == 0.0
        assert s.rating_count == 0
        assert s.dominant_frequency_preference is None
        assert s.last_assigned_day is None

    def test_average_rounded_to_one_decimal(self):
        ratings = [make_rating(rating=4), make_rating(rating=5), make_rating(rating=5)]
        s = build_signal(ratings, [])
        assert s.average_rating == 4.7
        assert s.rating_count == 3

    def test_unset_preferences_do_not_vote(self):
        ratings = [
            make_rating(frequency=None),
            make_rating(frequency=None),
            make_rating(frequency=F.YEARLY),
        ]
        assert build_signal(ratings, []).dominant_frequency_preference == F.YEARLY

    def test_mode_wins(self):
        ratings = [
            make_rating(frequency=F.ONCE_A_MONTH),
            make_rating(frequency=F.ONCE_A_WEEK),
            make_rating(frequency=F.ONCE_A_WEEK),
        ]
        assert build_signal(ratings, []).dominant_frequency_preference == F.ONCE_A_WEEK

    def test_tie_goes_to_first_encountered(self):
        ratings = [
            make_rating(frequency=F.YEARLY),
            make_rating(frequency=F.ONCE_A_WEEK),
            make_rating(frequency=F.ONCE_A_WEEK),
            make_rating(frequency=F.YEARLY),
        ]
        assert build_signal(ratings, []).dominant_frequency_preference == F.YEARLY

    def test_last_assigned_day_is_max(self):
        days = [date(2026, 1, 6), date(2026, 2, 3), date(2026, 1, 20)]
        assert build_signal([], days).last_assigned_day == date(2026, 2, 3)


class TestDominantPreference:
    def test_empty_is_none(self):
        assert dominant_preference([]) is None

    def test_single_value(self):
        assert dominant_preference([F.NEVER]) == F.NEVER


class TestAggregateSignals:
    def test_one_signal_per_recipe_in_order(self):
        recipes = [make_recipe(3, "c"), make_recipe(1, "a"), make_recipe(2, "b")]
        signals = aggregate_signals(recipes, [], [])
        assert list(signals) == [3, 1, 2]

    def test_unsaved_recipes_skipped(self):
        signals = aggregate_signals([make_recipe(None, "draft")], [], [])
        assert signals == {}

    def test_ratings_grouped_by_recipe(self):
        recipes = [make_recipe(1, "a"), make_recipe(2, "b")]
        ratings = [
            make_rating(recipe_id=1, rating=2),
            make_rating(recipe_id=2, rating=5),
            make_rating(recipe_id=1, rating=4),
        ]
        signals = aggregate_signals(recipes, ratings, [])
        assert signals[1].average_rating == 3.0
        assert signals[1].rating_count == 2
        assert signals[2].average_rating == 5.0

    def test_orphan_rows_ignored(self):
        recipes = [make_recipe(1, "a")]
        ratings = [make_rating(recipe_id=99, rating=1)]
        assignments = [make_assignment(recipe_id=99, day=date(2026, 2, 1))]
        signals = aggregate_signals(recipes, ratings, assignments)
        assert set(signals) == {1}
        assert signals[1].rating_count == 0
        assert signals[1].last_assigned_day is None

    def test_assignments_grouped_by_recipe(self):
        recipes = [make_recipe(1, "a"), make_recipe(2, "b")]
        assignments = [
            make_assignment(recipe_id=1, day=date(2026, 1, 5)),
            make_assignment(recipe_id=1, day=date(2026, 2, 2)),
        ]
        signals = aggregate_signals(recipes, [], assignments)
        assert signals[1].last_assigned_day == date(2026, 2, 2)
        assert signals[2].last_assigned_day is None

    def test_inputs_not_mutated(self):
        recipes = [make_recipe(1, "a")]
        ratings = [make_rating(recipe_id=1)]
        assignments = [make_assignment(recipe_id=1)]
        before = (list(recipes), list(ratings), list(assignments))
        aggregate_signals(recipes, ratings, assignments)
        assert (recipes, ratings, assignments) == before
