"""
Repositories for pipeline run metadata and persisted recommendation snapshots.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import date, datetime
from typing import Any, Optional

from meal_plan_organizer.db.repositories.base import BaseRepository
from meal_plan_organizer.models.meta import RunMetadata
from meal_plan_organizer.models.recommendation import RecommendationList

logger = logging.getLogger(__name__)

_SNAPSHOT_FIELDS = (
    "rank",
    "recipe_id",
    "score",
    "average_rating",
    "rating_count",
    "last_cooked_date",
    "frequency_preference",
    "reason_codes",
)


def _iso(value: date | datetime | None) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _run_params(run: RunMetadata) -> dict[str, Any]:
    return {
        "run_id": run.run_id,
        "run_slug": run.run_slug,
        "pipeline_stage": run.pipeline_stage,
        "status": run.status,
        "week_start_date": _iso(run.week_start_date),
        "config_snapshot": json.dumps(run.config_snapshot, default=str),
        "rows_processed": run.rows_processed,
        "error_message": run.error_message,
        "started_at": _iso(run.started_at),
        "finished_at": _iso(run.finished_at),
    }


class RunMetadataRepository(BaseRepository):
    """Audit rows written by ``PipelineStage.run()``."""

    def insert_run(self, run: RunMetadata) -> int:
        return self.execute_insert(
            """
            INSERT INTO run_metadata (
                run_slug, pipeline_stage, status, week_start_date, config_snapshot,
                rows_processed, error_message, started_at, finished_at
            ) VALUES (
                :run_slug, :pipeline_stage, :status, :week_start_date, :config_snapshot,
                :rows_processed, :error_message, :started_at, :finished_at
            );
            """,
            _run_params(run),
        )

    def update_run(self, run: RunMetadata) -> None:
        """Save status, week, row count, error and finish time of a stored run.

        Raises:
            ValueError: The run has never been inserted.
        """
        if run.run_id is None:
            raise ValueError(f"Run {run.run_slug} has no run_id; insert it first.")
        self.execute(
            """
            UPDATE run_metadata
               SET status = :status,
                   week_start_date = :week_start_date,
                   rows_processed = :rows_processed,
                   error_message = :error_message,
                   finished_at = :finished_at
             WHERE run_id = :run_id;
            """,
            _run_params(run),
        )

    def get_run_by_slug(self, run_slug: str) -> Optional[RunMetadata]:
        row = self.fetchone("SELECT * FROM run_metadata WHERE run_slug = ?;", (run_slug,))
        return _row_to_run(row) if row is not None else None

    def get_recent_runs(
        self, pipeline_stage: Optional[str] = None, limit: int = 20
    ) -> list[RunMetadata]:
        """Newest runs first, all stages unless ``pipeline_stage`` is given."""
        where, params = ("WHERE pipeline_stage = ?", (pipeline_stage,)) if pipeline_stage else ("", ())
        rows = self.fetchall(
            f"SELECT * FROM run_metadata {where} ORDER BY started_at DESC, run_id DESC LIMIT ?;",
            (*params, limit),
        )
        return [_row_to_run(r) for r in rows]


class RecommendationSnapshotRepository(BaseRepository):
    """Write/read access to ``recommendation_snapshots`` (migration 0003)."""

    def insert_list(self, run_id: int, recommendations: RecommendationList) -> int:
        """Persist every ranked entry of ``recommendations`` under ``run_id``.

        Returns:
            Number of rows written.
        """
        week = recommendations.week_start_date.isoformat()
        params = [
            (
                run_id,
                week,
                rank,
                rec.recipe_id,
                rec.score,
                rec.average_rating,
                rec.rating_count,
                _iso(rec.last_cooked_date),
                rec.frequency_preference,
                json.dumps(list(rec.reason_codes)),
            )
            for rank, rec in enumerate(recommendations.recipes, start=1)
        ]
        self.conn.executemany(
            """
            INSERT INTO recommendation_snapshots (
                run_id, week_start_date, rank, recipe_id, score, average_rating,
                rating_count, last_cooked_date, frequency_preference, reason_codes
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
            """,
            params,
        )
        logger.debug("Persisted %d recommendation snapshot row(s) for run %d", len(params), run_id)
        return len(params)

    def get_for_run(self, run_id: int) -> list[dict[str, Any]]:
        """Snapshot rows of one run in rank order, ``reason_codes`` decoded."""
        rows = self.fetchall(
            "SELECT * FROM recommendation_snapshots WHERE run_id = ? ORDER BY rank;",
            (run_id,),
        )
        snapshots = []
        for r in rows:
            entry = {key: r[key] for key in _SNAPSHOT_FIELDS}
            entry["reason_codes"] = json.loads(entry["reason_codes"])
            snapshots.append(entry)
        return snapshots


def _row_to_run(row: sqlite3.Row) -> RunMetadata:
    data = dict(row)
    data["config_snapshot"] = json.loads(data["config_snapshot"])
    for key, parse in (
        ("week_start_date", date.fromisoformat),
        ("started_at", datetime.fromisoformat),
        ("finished_at", datetime.fromisoformat),
    ):
        if data[key]:
            data[key] = parse(data[key])
    return RunMetadata(**data)
