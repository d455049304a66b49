"""
ImportStage: load a seed JSON file of recipes, ratings and meal plans.

Wraps ``seeds.recipe_loader.load_seed_file`` so every import is recorded in
``run_metadata`` like any other stage.  Schema and migrations are applied
first, so importing into a fresh database file works without ``init-db``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from meal_plan_organizer.models.meta import RunMetadata
from meal_plan_organizer.pipeline.base import PipelineStage

logger = logging.getLogger(__name__)


class ImportStage(PipelineStage):
    """Import seed recipes into the database."""

    stage_name = "import"

    def _execute(
        self,
        run: RunMetadata,
        seed_file: str | Path | None = None,
        **kwargs,
    ) -> int:
        """Load the seed file.

        Args:
            run:       In-progress RunMetadata (mutable).
            seed_file: JSON file to load. Defaults to ``config.data.seed_file``.

        Returns:
            Total rows inserted across recipes, ratings, plans and assignments.
        """
        from meal_plan_organizer.db.migrations import initialize_database
        from meal_plan_organizer.seeds.recipe_loader import load_seed_file

        path = Path(seed_file or self.config.data.seed_file)

        with self._connect() as conn:
            initialize_database(conn)
            result = load_seed_file(conn, path)

        logger.info("Imported %d row(s) from %s", result.total_rows, path)
        return result.total_rows
