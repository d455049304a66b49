"""
Seed recipe loader: JSON → validated models → SQLite.

Loads a household's saved recipes, their rating history and past meal plans
from one JSON document, e.g. ``config/seed/sample_recipes.json``::

    {
      "recipes":    [{"slug": "chicken-tikka", "title": "Chicken Tikka", ...}],
      "ratings":    [{"recipe_slug": "chicken-tikka", "rating": 5,
                      "frequency_preference": "OnceAWeek",
                      "rated_at": "2026-01-10T19:00:00Z"}],
      "meal_plans": [{"name": "Week of Jan 5", "start_date": "2026-01-05",
                      "assignments": [{"recipe_slug": "chicken-tikka",
                                       "day": "2026-01-06"}]}]
    }

Validation rules
----------------
- Duplicate recipe slugs in the input are rejected.
- Ratings and assignments must reference a slug in the file or the database.
- Every record is validated through its pydantic model before any insert.
  Rating range, comment length and frequency allow-list are enforced there.
- ``end_date`` defaults to ``start_date + 6`` days.

Re-running the loader is safe: recipes whose slug already exists are left
untouched (their ratings in the file are skipped), and meal plans with an
existing (name, start_date) pair are skipped.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from dataclasses import dataclass
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any

from meal_plan_organizer.db.repositories.meal_plan_repo import MealPlanRepository
from meal_plan_organizer.db.repositories.recipe_repo import (
    RecipeRatingRepository,
    RecipeRepository,
)
from meal_plan_organizer.models.meal_plan import MealPlan
from meal_plan_organizer.models.recipe import Recipe, RecipeRating
from meal_plan_organizer.utils.time_utils import parse_iso_date, week_end

log = logging.getLogger(__name__)


@dataclass
class SeedLoadResult:
    """Row counts written by one ``load_seed_file`` call."""

    recipes:          int = 0
    recipes_skipped:  int = 0
    ratings:          int = 0
    meal_plans:       int = 0
    assignments:      int = 0

    @property
    def total_rows(self) -> int:
        return self.recipes + self.ratings + self.meal_plans + self.assignments


# ── Validation ────────────────────────────────────────────────────────────────

def _validate_recipes(records: list[dict[str, Any]]) -> list[Recipe]:
    """Parse recipe records, rejecting duplicate slugs."""
    seen: set[str] = set()
    recipes: list[Recipe] = []
    for i, rec in enumerate(records):
        slug = rec.get("slug")
        if not slug:
            raise ValueError(f"Recipe at index {i} is missing 'slug' field.")
        if slug in seen:
            raise ValueError(f"Duplicate recipe slug '{slug}' at index {i}.")
        seen.add(slug)
        recipes.append(Recipe(**{k: v for k, v in rec.items() if k != "recipe_id"}))
    return recipes


def _require_known_slug(kind: str, index: int, slug: Any, known: set[str]) -> str:
    if not slug:
        raise ValueError(f"{kind} at index {index} is missing 'recipe_slug'.")
    if slug not in known:
        raise ValueError(f"{kind} at index {index} references unknown recipe slug '{slug}'.")
    return slug


def _validate_references(
    ratings: list[dict[str, Any]],
    plans: list[dict[str, Any]],
    known_slugs: set[str],
) -> None:
    """Raise ValueError if any rating or assignment points at an unknown recipe."""
    for i, rec in enumerate(ratings):
        _require_known_slug("Rating", i, rec.get("recipe_slug"), known_slugs)
    for p, plan in enumerate(plans):
        for a, assignment in enumerate(plan.get("assignments", [])):
            _require_known_slug(
                f"Meal plan {p} assignment", a, assignment.get("recipe_slug"), known_slugs
            )


def _build_plan(rec: dict[str, Any]) -> MealPlan:
    start = parse_iso_date(rec["start_date"])
    end = parse_iso_date(rec["end_date"]) if rec.get("end_date") else week_end(start)
    return MealPlan(
        name=rec.get("name", ""),
        start_date=start,
        end_date=end,
        created_by=rec.get("created_by"),
        status=rec.get("status", "Draft"),
    )


def _parse_rated_at(value: Any) -> datetime:
    if not value:
        return datetime.now(tz=timezone.utc)
    parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# ── Loader ────────────────────────────────────────────────────────────────────

def load_seed_data(conn: sqlite3.Connection, payload: dict[str, Any]) -> SeedLoadResult:
    """Validate and insert a parsed seed document.

    All validation runs before the first insert, so a malformed document
    writes nothing.

    Args:
        conn:    Open connection with schema and migrations applied.
        payload: Parsed JSON document (see module docstring).

    Returns:
        ``SeedLoadResult`` with per-table row counts.

    Raises:
        ValueError: On duplicate slugs or dangling recipe references.
        pydantic.ValidationError: On records that fail model validation.
    """
    recipe_repo = RecipeRepository(conn)
    rating_repo = RecipeRatingRepository(conn)
    plan_repo = MealPlanRepository(conn)

    recipe_records = payload.get("recipes", [])
    rating_records = payload.get("ratings", [])
    plan_records = payload.get("meal_plans", [])

    recipes = _validate_recipes(recipe_records)
    existing_slugs = {r.slug for r in recipe_repo.list_all()}
    known_slugs = existing_slugs | {r.slug for r in recipes}
    _validate_references(rating_records, plan_records, known_slugs)
    plans = [_build_plan(p) for p in plan_records]

    # Ratings are validated against a placeholder id; real ids are bound below.
    ratings = [
        RecipeRating(
            recipe_id=0,
            user_id=rec.get("user_id", "system"),
            rating=rec["rating"],
            comments=rec.get("comments"),
            frequency_preference=rec.get("frequency_preference"),
            rated_at=_parse_rated_at(rec.get("rated_at")),
        )
        for rec in rating_records
    ]

    result = SeedLoadResult()
    slug_to_id: dict[str, int] = {
        r.slug: r.recipe_id for r in recipe_repo.list_all() if r.recipe_id is not None
    }

    for recipe in recipes:
        if recipe.slug in existing_slugs:
            result.recipes_skipped += 1
            log.debug("Recipe '%s' already present; skipping.", recipe.slug)
            continue
        slug_to_id[recipe.slug] = recipe_repo.insert(recipe)
        result.recipes += 1

    for rec, rating in zip(rating_records, ratings):
        slug = rec["recipe_slug"]
        if slug in existing_slugs:
            continue
        rating_repo.add(rating.model_copy(update={"recipe_id": slug_to_id[slug]}))
        result.ratings += 1

    existing_plans = {(p.name, p.start_date) for p in plan_repo.list_plans()}
    for rec, plan in zip(plan_records, plans):
        if (plan.name, plan.start_date) in existing_plans:
            log.debug("Meal plan '%s' (%s) already present; skipping.", plan.name, plan.start_date)
            continue
        plan_id = plan_repo.insert(plan)
        result.meal_plans += 1
        for assignment in rec.get("assignments", []):
            plan_repo.assign_recipe(
                plan_id,
                slug_to_id[assignment["recipe_slug"]],
                parse_iso_date(assignment["day"]),
            )
            result.assignments += 1

    log.info(
        "Seed load: %d recipe(s) (%d skipped), %d rating(s), %d plan(s), %d assignment(s)",
        result.recipes, result.recipes_skipped, result.ratings,
        result.meal_plans, result.assignments,
    )
    return result


def load_seed_file(conn: sqlite3.Connection, path: Path) -> SeedLoadResult:
    """Read a seed JSON file and load it via ``load_seed_data``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file is not a JSON object, or fails validation.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Seed file not found: {path}")

    payload = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(payload, dict):
        raise ValueError(f"Seed file {path} must contain a JSON object at the top level.")

    log.info("Loading seed data from %s", path)
    return load_seed_data(conn, payload)
