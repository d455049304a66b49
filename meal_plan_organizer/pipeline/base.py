"""
Shared run bookkeeping for pipeline stages.

A stage subclass sets ``stage_name`` and implements ``_execute(run, **kwargs)``
returning how many rows it handled. Callers only use ``run(**kwargs)``, which
wraps the work in a ``RunMetadata`` row:

    started  ->  success   (rows_processed set)
             ->  failed    (error_message set, exception re-raised)

Example::

    class ImportStage(PipelineStage):
        stage_name = "import"

        def _execute(self, run, seed_file=None):
            ...
            return rows_written

    run = ImportStage(config).run(seed_file="config/seed/sample_recipes.json")
"""

from __future__ import annotations

import logging
import sqlite3
from abc import ABC, abstractmethod
from uuid import uuid4

from meal_plan_organizer.config import AppConfig
from meal_plan_organizer.models.meta import RunMetadata
from meal_plan_organizer.utils.time_utils import utcnow

logger = logging.getLogger(__name__)


class PipelineStage(ABC):
    """Base class that records every stage invocation in ``run_metadata``.

    ``db_path`` overrides ``config.database.db_path`` when given.
    """

    stage_name: str

    def __init__(self, config: AppConfig, db_path: str | None = None) -> None:
        self.config = config
        self.db_path = db_path or config.database.db_path

    def run(self, **kwargs) -> RunMetadata:
        """Run the stage once and return its finished ``RunMetadata``.

        Whatever ``_execute`` raises is propagated after the run row has been
        marked ``failed``.
        """
        run = RunMetadata(
            run_slug=str(uuid4()),
            pipeline_stage=self.stage_name,
            config_snapshot=self.config.model_dump(),
            started_at=utcnow(),
        )
        logger.info("%s: started (run_slug=%s)", self.stage_name, run.run_slug)

        try:
            rows = self._execute(run=run, **kwargs)
        except Exception as exc:
            self._finish(run, status="failed", error=str(exc))
            logger.error("%s: failed (run_slug=%s): %s", self.stage_name, run.run_slug, exc)
            raise

        run.rows_processed = rows
        self._finish(run, status="success")
        logger.info(
            "%s: finished, %d rows (run_slug=%s)", self.stage_name, rows, run.run_slug
        )
        return run

    @abstractmethod
    def _execute(self, run: RunMetadata, **kwargs) -> int:
        """Do the stage's work; ``run`` may be updated in place."""

    def _connect(self):
        from meal_plan_organizer.db.connection import get_connection

        db = self.config.database
        return get_connection(
            self.db_path, wal_mode=db.wal_mode, busy_timeout_ms=db.busy_timeout_ms
        )

    def _finish(self, run: RunMetadata, status: str, error: str | None = None) -> None:
        run.status = status
        run.error_message = error
        run.finished_at = utcnow()
        self._persist_run(run)

    def _persist_run(self, run: RunMetadata) -> None:
        """Write ``run`` to ``run_metadata``, inserting on first save.

        A storage failure here is logged only, so the stage's own outcome
        (including its exception) is what the caller sees.
        """
        from meal_plan_organizer.db.repositories.run_repo import RunMetadataRepository

        try:
            with self._connect() as conn:
                repo = RunMetadataRepository(conn)
                if run.run_id is None:
                    run.run_id = repo.insert_run(run)
                else:
                    repo.update_run(run)
        except (sqlite3.Error, OSError) as exc:
            logger.error("Could not save run %s: %s", run.run_slug, exc)
