"""
Repository for meal plans and their day-by-day recipe assignments.
"""

from __future__ import annotations

import logging
import sqlite3
from datetime import date, datetime
from typing import Optional

from meal_plan_organizer.db.repositories.base import BaseRepository
from meal_plan_organizer.models.meal_plan import MealPlan, MealPlanAssignment

logger = logging.getLogger(__name__)


class MealPlanRepository(BaseRepository):
    """Read/write access to ``meal_plans`` and ``meal_plan_recipes``."""

    def insert(self, plan: MealPlan) -> int:
        """Insert a new meal plan and return its ``meal_plan_id``."""
        return self.execute_insert(
            """
            INSERT INTO meal_plans (name, start_date, end_date, created_by, status)
            VALUES (?, ?, ?, ?, ?);
            """,
            (
                plan.name,
                plan.start_date.isoformat(),
                plan.end_date.isoformat(),
                plan.created_by,
                plan.status,
            ),
        )

    def get_by_id(self, meal_plan_id: int) -> Optional[MealPlan]:
        row = self.fetchone(
            "SELECT * FROM meal_plans WHERE meal_plan_id = ?;", (meal_plan_id,)
        )
        return _row_to_plan(row) if row else None

    def list_plans(self) -> list[MealPlan]:
        """Return all meal plans, most recent week first."""
        rows = self.fetchall(
            "SELECT * FROM meal_plans ORDER BY start_date DESC, meal_plan_id DESC;"
        )
        return [_row_to_plan(r) for r in rows]

    def assign_recipe(self, meal_plan_id: int, recipe_id: int, day: date) -> int:
        """Place a recipe on a day of a meal plan.

        A day holds a single dinner: assigning to an occupied day replaces
        the previous recipe.

        Args:
            meal_plan_id: Target plan.
            recipe_id:    Recipe to place.
            day:          Calendar day; must fall inside the plan's window.

        Returns:
            The ``assignment_id`` of the inserted or replaced row.

        Raises:
            LookupError: If the meal plan does not exist.
            ValueError:  If ``day`` is outside the plan's date window.
        """
        plan = self.get_by_id(meal_plan_id)
        if plan is None:
            raise LookupError(f"Meal plan {meal_plan_id} not found.")
        if not plan.covers(day):
            raise ValueError(
                f"Day must be between {plan.start_date.isoformat()} "
                f"and {plan.end_date.isoformat()}, got {day.isoformat()}."
            )

        self.execute(
            """
            INSERT INTO meal_plan_recipes (meal_plan_id, recipe_id, day)
            VALUES (?, ?, ?)
            ON CONFLICT (meal_plan_id, day) DO UPDATE SET
                recipe_id  = excluded.recipe_id,
                created_at = strftime('%Y-%m-%dT%H:%M:%SZ', 'now');
            """,
            (meal_plan_id, recipe_id, day.isoformat()),
        )
        row = self.fetchone(
            "SELECT assignment_id FROM meal_plan_recipes WHERE meal_plan_id = ? AND day = ?;",
            (meal_plan_id, day.isoformat()),
        )
        assert row is not None
        logger.info(
            "Assigned recipe %d to meal plan %d on %s", recipe_id, meal_plan_id, day
        )
        return int(row["assignment_id"])

    def remove_assignment(self, meal_plan_id: int, day: date) -> bool:
        """Clear a day of a meal plan.  Returns ``True`` if a row was removed."""
        cursor = self.execute(
            "DELETE FROM meal_plan_recipes WHERE meal_plan_id = ? AND day = ?;",
            (meal_plan_id, day.isoformat()),
        )
        return cursor.rowcount > 0

    def list_assignments(self, meal_plan_id: Optional[int] = None) -> list[MealPlanAssignment]:
        """Return assignments, optionally restricted to one plan, ordered by day."""
        if meal_plan_id is not None:
            rows = self.fetchall(
                """
                SELECT * FROM meal_plan_recipes
                WHERE meal_plan_id = ?
                ORDER BY day, assignment_id;
                """,
                (meal_plan_id,),
            )
        else:
            rows = self.fetchall(
                "SELECT * FROM meal_plan_recipes ORDER BY day, assignment_id;"
            )
        return [_row_to_assignment(r) for r in rows]


# ── Private helpers ────────────────────────────────────────────────────────────

def _row_to_plan(row: sqlite3.Row) -> MealPlan:
    return MealPlan(
        meal_plan_id=row["meal_plan_id"],
        name=row["name"],
        start_date=date.fromisoformat(row["start_date"]),
        end_date=date.fromisoformat(row["end_date"]),
        created_by=row["created_by"],
        status=row["status"],
        created_at=(
            datetime.fromisoformat(row["created_at"].replace("Z", "+00:00"))
            if row["created_at"] else None
        ),
    )


def _row_to_assignment(row: sqlite3.Row) -> MealPlanAssignment:
    return MealPlanAssignment(
        assignment_id=row["assignment_id"],
        meal_plan_id=row["meal_plan_id"],
        recipe_id=row["recipe_id"],
        day=date.fromisoformat(row["day"]),
    )
