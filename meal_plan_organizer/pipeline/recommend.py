"""
RecommendStage: rank every saved recipe for a planning week and record it.

Recommendation flow
-------------------
  1. Open the database and read one snapshot through ``SqliteSnapshotSource``.
  2. Aggregate, score and rank via ``RecommendationService.score_all()``.
  3. Build the ``RecommendationList`` response.
  4. Persist one ``recommendation_snapshots`` row per ranked recipe.
  5. Write JSON / CSV / Parquet reports to ``config.data.output_dir``.

Score formula (max 100)
-----------------------
    score = rating (≤30) + frequency (≤40) + recency (≤30)

with a hard 0 for recipes marked ``Never``. Frequency credit goes negative
for a recipe already planned after the week start.

Returns the number of recipes ranked.  The ``RecommendationList`` itself is
kept on ``self.last_result`` for callers that want to display it.
"""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Optional

from meal_plan_organizer.config import AppConfig
from meal_plan_organizer.models.meta import RunMetadata
from meal_plan_organizer.models.recommendation import RecommendationList
from meal_plan_organizer.pipeline.base import PipelineStage

logger = logging.getLogger(__name__)


class RecommendStage(PipelineStage):
    """Rank saved recipes for one planning week."""

    stage_name = "recommend"

    def __init__(self, config: AppConfig, db_path: str | None = None) -> None:
        super().__init__(config, db_path=db_path)
        self.last_result: Optional[RecommendationList] = None
        self.report_paths: list[Path] = []

    def _execute(
        self,
        run: RunMetadata,
        week_start_date: date | None = None,
        write_reports: bool = True,
        **kwargs,
    ) -> int:
        """Generate, persist and report recommendations.

        Args:
            run:             In-progress RunMetadata (mutable).
            week_start_date: Monday of the week being planned. Required.
            write_reports:   If ``False``, skip the JSON/CSV/Parquet files.

        Returns:
            Number of recipes ranked.

        Raises:
            ValueError: If ``week_start_date`` is missing.
        """
        from meal_plan_organizer.db.repositories.run_repo import (
            RecommendationSnapshotRepository,
        )
        from meal_plan_organizer.db.snapshot_source import SqliteSnapshotSource
        from meal_plan_organizer.recommendations.ranker import build_recommendation_list
        from meal_plan_organizer.recommendations.reporter import (
            write_recommendation_csv,
            write_recommendation_json,
            write_signals_parquet,
        )
        from meal_plan_organizer.recommendations.service import RecommendationService

        if week_start_date is None:
            raise ValueError("RecommendStage requires week_start_date.")

        run.week_start_date = week_start_date
        self.report_paths = []
        self._persist_run(run)

        rec_cfg = self.config.recommendation

        with self._connect() as conn:
            service = RecommendationService(SqliteSnapshotSource(conn))
            ranked = service.score_all(week_start_date)
            result = build_recommendation_list(ranked, week_start_date)

            if rec_cfg.persist_snapshot and run.run_id is not None:
                RecommendationSnapshotRepository(conn).insert_list(run.run_id, result)

        self.last_result = result

        if write_reports:
            output_dir = Path(self.config.data.output_dir)
            if rec_cfg.write_json:
                self.report_paths.append(
                    write_recommendation_json(result, output_dir, run_slug=run.run_slug)
                )
            if rec_cfg.write_csv:
                self.report_paths.append(write_recommendation_csv(result, output_dir))
            if rec_cfg.write_parquet:
                self.report_paths.append(
                    write_signals_parquet(ranked, output_dir, week_start_date)
                )

        logger.info(
            "RecommendStage complete: %d recipe(s) ranked for week %s.",
            result.total_recipes, week_start_date,
        )
        return result.total_recipes
