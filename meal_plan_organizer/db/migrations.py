"""
Forward-only schema migrations.

``schema.py`` creates the base tables. Later changes are plain functions
registered in ``MIGRATIONS`` under an ordered version id (``"NNNN_name"``);
``run_migrations()`` applies the ones missing from ``schema_versions`` in
registry order and records each as it succeeds. There are no down steps.

To add one, write ``migration_NNNN_what(conn)`` and register it at the end
of ``MIGRATIONS``.
"""

from __future__ import annotations

import logging
import sqlite3
from collections.abc import Callable
from typing import NamedTuple

logger = logging.getLogger(__name__)

_VERSION_TABLE_DDL = """
CREATE TABLE IF NOT EXISTS schema_versions (
    version_id  TEXT NOT NULL PRIMARY KEY,
    description TEXT,
    applied_at  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
);
"""


class Migration(NamedTuple):
    apply: Callable[[sqlite3.Connection], None]
    description: str


def _table_columns(conn: sqlite3.Connection, table: str) -> set[str]:
    return {row[1] for row in conn.execute(f"PRAGMA table_info({table});")}


def migration_0001_bootstrap(conn: sqlite3.Connection) -> None:
    """Baseline marker; nothing to change."""


def migration_0002_rating_frequency_preference(conn: sqlite3.Connection) -> None:
    if "frequency_preference" not in _table_columns(conn, "recipe_ratings"):
        conn.execute("ALTER TABLE recipe_ratings ADD COLUMN frequency_preference TEXT;")


def migration_0003_recommendation_snapshots(conn: sqlite3.Connection) -> None:
    """One row per ranked recipe per recommend run."""
    conn.executescript("""
        CREATE TABLE IF NOT EXISTS recommendation_snapshots (
            snapshot_id          INTEGER PRIMARY KEY AUTOINCREMENT,
            run_id               INTEGER NOT NULL REFERENCES run_metadata(run_id),
            week_start_date      TEXT    NOT NULL,
            rank                 INTEGER NOT NULL,
            recipe_id            INTEGER NOT NULL REFERENCES recipes(recipe_id) ON DELETE CASCADE,
            score                REAL    NOT NULL,
            average_rating       REAL    NOT NULL,
            rating_count         INTEGER NOT NULL,
            last_cooked_date     TEXT,
            frequency_preference TEXT,
            reason_codes         TEXT    NOT NULL,
            created_at           TEXT    NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))
        );
        CREATE INDEX IF NOT EXISTS idx_rec_snapshots_run
            ON recommendation_snapshots(run_id, rank);
        CREATE INDEX IF NOT EXISTS idx_rec_snapshots_week
            ON recommendation_snapshots(week_start_date);
    """)


MIGRATIONS: dict[str, Migration] = {
    "0001_bootstrap": Migration(
        migration_0001_bootstrap, "Baseline version marker"
    ),
    "0002_rating_frequency_preference": Migration(
        migration_0002_rating_frequency_preference, "recipe_ratings.frequency_preference column"
    ),
    "0003_recommendation_snapshots": Migration(
        migration_0003_recommendation_snapshots, "recommendation_snapshots table"
    ),
}


def run_migrations(conn: sqlite3.Connection) -> int:
    """Apply every registered migration not yet in ``schema_versions``.

    Returns the number applied by this call. A failing migration is rolled
    back and its exception propagates; earlier ones stay recorded.
    """
    conn.execute(_VERSION_TABLE_DDL)
    conn.commit()
    done = {row[0] for row in conn.execute("SELECT version_id FROM schema_versions;")}

    pending = [(vid, m) for vid, m in MIGRATIONS.items() if vid not in done]
    for version_id, migration in pending:
        logger.info("Migrating schema to %s (%s)", version_id, migration.description)
        try:
            migration.apply(conn)
            conn.execute(
                "INSERT INTO schema_versions(version_id, description) VALUES (?, ?);",
                (version_id, migration.description),
            )
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            logger.error("Migration %s failed: %s", version_id, exc)
            raise

    logger.debug("%d migration(s) applied, %d already present", len(pending), len(done))
    return len(pending)


def initialize_database(conn: sqlite3.Connection) -> int:
    """Create the base schema, then migrate. Returns migrations applied."""
    from meal_plan_organizer.db.schema import apply_schema

    apply_schema(conn)
    return run_migrations(conn)
