"""
Shared pytest fixtures for the Meal Plan Organizer test suite.

Provides:
  - ``in_memory_db``: A fresh in-memory SQLite connection with the full
    schema and all migrations applied. Created anew for each test.
  - ``app_config``: An ``AppConfig`` pointing at a temp DB and output dir.
  - Sample domain object factories for use in multiple test modules.
"""

from __future__ import annotations

import sqlite3
from datetime import date, datetime, timezone
from typing import Generator

import pytest

from meal_plan_organizer.config import (
    AppConfig,
    DatabaseConfig,
    DataConfig,
    LoggingConfig,
)
from meal_plan_organizer.db.migrations import initialize_database
from meal_plan_organizer.models.meal_plan import MealPlan, MealPlanAssignment
from meal_plan_organizer.models.recipe import Recipe, RecipeRating
from meal_plan_organizer.taxonomy.frequency import FrequencyPreference

WEEK_START = date(2026, 2, 16)  # a Monday


# ── Database fixture ──────────────────────────────────────────────────────────

@pytest.fixture
def in_memory_db() -> Generator[sqlite3.Connection, None, None]:
    """Yield a fresh in-memory SQLite connection with schema + migrations.

    Foreign key enforcement is ON. Connection is closed after the test.
    """
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    initialize_database(conn)
    yield conn
    conn.close()


@pytest.fixture
def app_config(tmp_path) -> AppConfig:
    """AppConfig writing its DB and reports under ``tmp_path``; no log file."""
    return AppConfig(
        database=DatabaseConfig(db_path=str(tmp_path / "test.db"), wal_mode=False),
        data=DataConfig(
            seed_file=str(tmp_path / "seed.json"),
            output_dir=str(tmp_path / "outputs"),
        ),
        logging=LoggingConfig(level="DEBUG", log_file=""),
    )


# ── Sample domain object factories ────────────────────────────────────────────

def make_recipe(recipe_id: int | None = 1, slug: str = "chicken-tikka", **kwargs) -> Recipe:
    defaults = dict(
        title=slug.replace("-", " ").title(),
        cuisine_type="Indian",
        prep_time_minutes=20,
        cook_time_minutes=35,
    )
    defaults.update(kwargs)
    return Recipe(recipe_id=recipe_id, slug=slug, **defaults)


def make_rating(
    recipe_id: int = 1,
    rating: int = 4,
    frequency: FrequencyPreference | str | None = None,
    rated_at: datetime | None = None,
    **kwargs,
) -> RecipeRating:
    return RecipeRating(
        recipe_id=recipe_id,
        rating=rating,
        frequency_preference=frequency,
        rated_at=rated_at or datetime(2026, 1, 10, 19, 0, tzinfo=timezone.utc),
        **kwargs,
    )


def make_assignment(recipe_id: int = 1, day: date = date(2026, 2, 9), meal_plan_id: int = 1) -> MealPlanAssignment:
    return MealPlanAssignment(meal_plan_id=meal_plan_id, recipe_id=recipe_id, day=day)


@pytest.fixture
def sample_recipe() -> Recipe:
    """A valid, unsaved ``Recipe``."""
    return make_recipe(recipe_id=None)


@pytest.fixture
def sample_rating() -> RecipeRating:
    """A valid 5-star weekly rating for recipe 1."""
    return make_rating(rating=5, frequency=FrequencyPreference.ONCE_A_WEEK)


@pytest.fixture
def sample_meal_plan() -> MealPlan:
    """A valid Monday-to-Sunday ``MealPlan``."""
    return MealPlan(
        name="Week of Feb 9",
        start_date=date(2026, 2, 9),
        end_date=date(2026, 2, 15),
        created_by="alex",
    )
