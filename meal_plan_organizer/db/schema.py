"""
Base tables and indexes for the meal plan organizer.

Every statement is ``CREATE ... IF NOT EXISTS``, so ``apply_schema()`` can
run against a database that is already set up. Tables are created parents
first:

  1. recipes
  2. recipe_ratings     (FK recipes)
  3. meal_plans
  4. meal_plan_recipes  (FK meal_plans, recipes)
  5. run_metadata

``recipe_ratings`` is an append-only log with no UNIQUE constraint on
(recipe_id, user_id).
"""

from __future__ import annotations

import logging
import sqlite3

logger = logging.getLogger(__name__)

# ── DDL statements ─────────────────────────────────────────────────────────────

_DDL_RECIPES = """
CREATE TABLE IF NOT EXISTS recipes (
    recipe_id           INTEGER PRIMARY KEY AUTOINCREMENT,
    slug                TEXT    NOT NULL UNIQUE,
    title               TEXT    NOT NULL,
    description         TEXT,
    image_url           TEXT,
    cuisine_type        TEXT,
    prep_time_minutes   INTEGER,
    cook_time_minutes   INTEGER,
    servings            INTEGER,
    created_at          TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_RECIPE_RATINGS = """
CREATE TABLE IF NOT EXISTS recipe_ratings (
    rating_id       INTEGER PRIMARY KEY AUTOINCREMENT,
    recipe_id       INTEGER NOT NULL REFERENCES recipes(recipe_id) ON DELETE CASCADE,
    user_id         TEXT    NOT NULL,
    rating          INTEGER NOT NULL CHECK (rating BETWEEN 1 AND 5),
    comments        TEXT,
    rated_at        TEXT    NOT NULL
);
"""

_DDL_RECIPE_RATINGS_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_ratings_recipe_time
    ON recipe_ratings(recipe_id, rated_at);

CREATE INDEX IF NOT EXISTS idx_ratings_user
    ON recipe_ratings(user_id, rated_at DESC);
"""

_DDL_MEAL_PLANS = """
CREATE TABLE IF NOT EXISTS meal_plans (
    meal_plan_id    INTEGER PRIMARY KEY AUTOINCREMENT,
    name            TEXT    NOT NULL,
    start_date      TEXT    NOT NULL,
    end_date        TEXT    NOT NULL,
    created_by      TEXT,
    status          TEXT    NOT NULL DEFAULT 'Draft',
    created_at      TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""

_DDL_MEAL_PLAN_RECIPES = """
CREATE TABLE IF NOT EXISTS meal_plan_recipes (
    assignment_id   INTEGER PRIMARY KEY AUTOINCREMENT,
    meal_plan_id    INTEGER NOT NULL REFERENCES meal_plans(meal_plan_id) ON DELETE CASCADE,
    recipe_id       INTEGER NOT NULL REFERENCES recipes(recipe_id) ON DELETE CASCADE,
    day             TEXT    NOT NULL,
    created_at      TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now')),
    UNIQUE (meal_plan_id, day)
);
"""

_DDL_MEAL_PLAN_RECIPES_INDEXES = """
CREATE INDEX IF NOT EXISTS idx_assignments_recipe_day
    ON meal_plan_recipes(recipe_id, day DESC);
"""

_DDL_RUN_METADATA = """
CREATE TABLE IF NOT EXISTS run_metadata (
    run_id          INTEGER PRIMARY KEY AUTOINCREMENT,
    run_slug        TEXT    NOT NULL UNIQUE,
    pipeline_stage  TEXT    NOT NULL,
    status          TEXT    NOT NULL DEFAULT 'started',
    week_start_date TEXT,
    config_snapshot TEXT    NOT NULL,
    rows_processed  INTEGER NOT NULL DEFAULT 0,
    error_message   TEXT,
    started_at      TEXT    NOT NULL,
    finished_at     TEXT
);
"""

_ALL_DDL = [
    _DDL_RECIPES,
    _DDL_RECIPE_RATINGS,
    _DDL_RECIPE_RATINGS_INDEXES,
    _DDL_MEAL_PLANS,
    _DDL_MEAL_PLAN_RECIPES,
    _DDL_MEAL_PLAN_RECIPES_INDEXES,
    _DDL_RUN_METADATA,
]

# Base tables only; migrations add more.
ALL_TABLE_NAMES = [
    "recipes",
    "recipe_ratings",
    "meal_plans",
    "meal_plan_recipes",
    "run_metadata",
]


def apply_schema(conn: sqlite3.Connection) -> None:
    """Create any missing base table or index, then commit."""
    statements = [s for ddl in _ALL_DDL for s in _split_ddl(ddl)]
    for statement in statements:
        conn.execute(statement)
    conn.commit()
    logger.debug("Base schema checked: %d statements", len(statements))


def _split_ddl(ddl: str) -> list[str]:
    return [part.strip() for part in ddl.split(";") if part.strip()]


def _sqlite_master_names(conn: sqlite3.Connection, kind: str) -> list[str]:
    rows = conn.execute(
        "SELECT name FROM sqlite_master WHERE type = ? ORDER BY name;", (kind,)
    ).fetchall()
    return [row[0] for row in rows]


def get_existing_tables(conn: sqlite3.Connection) -> list[str]:
    """Table names in the database, sorted."""
    return _sqlite_master_names(conn, "table")


def get_existing_indexes(conn: sqlite3.Connection) -> list[str]:
    """Index names in the database (including autoindexes), sorted."""
    return _sqlite_master_names(conn, "index")
