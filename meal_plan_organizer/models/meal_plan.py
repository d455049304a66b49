"""
Meal plan models.

``MealPlan`` is a named week (Monday through Sunday by convention) owned by a
household. ``MealPlanAssignment`` records that a recipe was placed on one day
of a plan; the recommender only cares about the latest such day per recipe.

Only dinner is tracked, so there is at most one meal slot per day.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, model_validator

MealPlanStatus = Literal["Draft", "Active", "Complete"]


class MealPlan(BaseModel):
    """A weekly meal plan.

    Attributes:
        meal_plan_id: Auto-assigned DB PK; ``None`` before insertion.
        name: Display name, e.g. ``"Week of Feb 10"``.
        start_date: First day of the plan.
        end_date: Last day of the plan (inclusive).
        created_by: Display name or email of the creator.
        status: ``"Draft"``, ``"Active"`` or ``"Complete"``.
        created_at: UTC datetime of creation.
    """

    model_config = ConfigDict(frozen=True)

    meal_plan_id: Optional[int] = None
    name: str
    start_date: date
    end_date: date
    created_by: Optional[str] = None
    status: MealPlanStatus = "Draft"
    created_at: Optional[datetime] = None

    @model_validator(mode="after")
    def validate_date_window(self) -> "MealPlan":
        if not self.name.strip():
            raise ValueError("name must not be empty.")
        if self.end_date < self.start_date:
            raise ValueError(
                f"end_date ({self.end_date}) must be >= start_date ({self.start_date})."
            )
        return self

    def covers(self, day: date) -> bool:
        """Return ``True`` if ``day`` falls inside this plan's window."""
        return self.start_date <= day <= self.end_date


class MealPlanAssignment(BaseModel):
    """A recipe placed on a specific calendar day of a meal plan.

    Attributes:
        assignment_id: Auto-assigned DB PK; ``None`` before insertion.
        meal_plan_id: FK to ``meal_plans.meal_plan_id``.
        recipe_id: FK to ``recipes.recipe_id``.
        day: The calendar day the recipe is planned for.
    """

    model_config = ConfigDict(frozen=True)

    assignment_id: Optional[int] = None
    meal_plan_id: int
    recipe_id: int
    day: date
