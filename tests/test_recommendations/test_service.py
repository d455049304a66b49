"""
Tests for meal_plan_organizer/recommendations/service.py.

Uses an in-memory fake ``RecipeSnapshotSource`` so the engine is exercised
without SQLite.
"""

from __future__ import annotations

import sqlite3
from datetime import date, datetime, timedelta, timezone

import pytest

from conftest import make_assignment, make_rating, make_recipe

from meal_plan_organizer.recommendations.service import RecommendationService
from meal_plan_organizer.taxonomy.frequency import FrequencyPreference as F

WEEK = date(2026, 2, 16)


class FakeSource:
    def __init__(self, recipes=(), ratings=(), assignments=()):
        self.recipes = list(recipes)
        self.ratings = list(ratings)
        self.assignments = list(assignments)
        self.requested_ids: list[list[int]] = []

    def list_recipes(self):
        return list(self.recipes)

    def list_ratings_for(self, recipe_ids):
        self.requested_ids.append(list(recipe_ids))
        return [r for r in self.ratings if r.recipe_id in recipe_ids]

    def list_assignments(self):
        return list(self.assignments)


class FailingSource(FakeSource):
    def list_ratings_for(self, recipe_ids):
        raise sqlite3.OperationalError("database is locked")


@pytest.fixture
def household_source() -> FakeSource:
    recipes = [
        make_recipe(1, "weekly-favourite"),
        make_recipe(2, "banned-dish"),
        make_recipe(3, "untried"),
        make_recipe(4, "recent-meh"),
    ]
    t0 = datetime(2026, 1, 1, 18, 0, tzinfo=timezone.utc)
    ratings = [
        make_rating(1, 5, F.ONCE_A_WEEK, rated_at=t0),
        make_rating(1, 4, F.ONCE_A_WEEK, rated_at=t0 + timedelta(days=1)),
        make_rating(2, 5, F.NEVER, rated_at=t0),
        make_rating(4, 2, None, rated_at=t0),
    ]
    assignments = [
        make_assignment(1, WEEK - timedelta(days=14)),
        make_assignment(4, WEEK - timedelta(days=2)),
    ]
    return FakeSource(recipes, ratings, assignments)


class TestRecommend:
    def test_every_recipe_returned(self, household_source):
        result = RecommendationService(household_source).recommend(WEEK)
        assert result.total_recipes == 4
        assert {r.recipe_id for r in result.recipes} == {1, 2, 3, 4}

    def test_ranking(self, household_source):
        result = RecommendationService(household_source).recommend(WEEK)
        # 1: 26.25 (avg 4.5) + 40 + 15 = 81.25 → 81.2 (round half to even)
        # 3: 15 + 20 + 30 = 65
        # 4: 7.5 + 20 + 3 = 30.5
        # 2: marked never → 0
        assert [r.recipe_id for r in result.recipes] == [1, 3, 4, 2]
        assert [r.score for r in result.recipes] == [81.2, 65.0, 30.5, 0.0]

    def test_marked_never_entry(self, household_source):
        result = RecommendationService(household_source).recommend(WEEK)
        banned = next(r for r in result.recipes if r.recipe_id == 2)
        assert banned.reason_codes == ("MarkedNever",)
        assert banned.average_rating == 5.0
        assert banned.frequency_preference == "Never"

    def test_week_echoed(self, household_source):
        assert RecommendationService(household_source).recommend(WEEK).week_start_date == WEEK

    def test_idempotent(self, household_source):
        service = RecommendationService(household_source)
        assert service.recommend(WEEK) == service.recommend(WEEK)

    def test_requests_ratings_for_listed_recipes(self, household_source):
        RecommendationService(household_source).recommend(WEEK)
        assert household_source.requested_ids == [[1, 2, 3, 4]]

    def test_empty_store(self):
        result = RecommendationService(FakeSource()).recommend(WEEK)
        assert result.total_recipes == 0
        assert result.recipes == ()

    def test_already_planned_this_week_ranks_last(self):
        recipes = [make_recipe(1, "planned-wednesday"), make_recipe(2, "cooked-monday")]
        ratings = [make_rating(1, 3, F.ONCE_A_WEEK), make_rating(2, 3, F.ONCE_A_WEEK)]
        assignments = [
            make_assignment(1, WEEK + timedelta(days=2)),
            make_assignment(2, WEEK),
        ]
        result = RecommendationService(FakeSource(recipes, ratings, assignments)).recommend(WEEK)
        # 1: 15 - (2/7)*40 + 3 = 6.57… → 6.6;  2: 15 + 0 + 3 = 18
        assert [r.recipe_id for r in result.recipes] == [2, 1]
        assert [r.score for r in result.recipes] == [18.0, 6.6]

    def test_storage_errors_propagate(self):
        with pytest.raises(sqlite3.OperationalError, match="locked"):
            RecommendationService(FailingSource([make_recipe(1, "a")])).recommend(WEEK)


class TestScoreAll:
    def test_exposes_breakdown(self, household_source):
        ranked = RecommendationService(household_source).score_all(WEEK)
        top = ranked[0]
        assert top.recipe.recipe_id == 1
        assert top.breakdown.frequency_component == pytest.approx(40.0)
        assert top.breakdown.recency_component == pytest.approx(15.0)
