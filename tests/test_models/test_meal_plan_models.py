"""Tests for MealPlan and MealPlanAssignment."""

from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from meal_plan_organizer.models.meal_plan import MealPlan, MealPlanAssignment


class TestMealPlan:
    def test_valid(self, sample_meal_plan):
        assert sample_meal_plan.status == "Draft"
        assert sample_meal_plan.meal_plan_id is None

    def test_end_before_start_rejected(self):
        with pytest.raises(ValidationError, match="end_date"):
            MealPlan(name="Bad", start_date=date(2026, 2, 9), end_date=date(2026, 2, 8))

    def test_single_day_plan_allowed(self):
        plan = MealPlan(name="One", start_date=date(2026, 2, 9), end_date=date(2026, 2, 9))
        assert plan.covers(date(2026, 2, 9))

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError, match="name"):
            MealPlan(name="  ", start_date=date(2026, 2, 9), end_date=date(2026, 2, 15))

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            MealPlan(
                name="X", start_date=date(2026, 2, 9), end_date=date(2026, 2, 15),
                status="Archived",
            )

    def test_covers_inclusive_window(self, sample_meal_plan):
        assert sample_meal_plan.covers(date(2026, 2, 9))
        assert sample_meal_plan.covers(date(2026, 2, 15))
        assert not sample_meal_plan.covers(date(2026, 2, 8))
        assert not sample_meal_plan.covers(date(2026, 2, 16))


class TestMealPlanAssignment:
    def test_valid(self):
        a = MealPlanAssignment(meal_plan_id=1, recipe_id=2, day=date(2026, 2, 10))
        assert a.assignment_id is None

    def test_iso_string_day_coerced(self):
        a = MealPlanAssignment(meal_plan_id=1, recipe_id=2, day="2026-02-10")
        assert a.day == date(2026, 2, 10)
