"""Tests for ImportStage: seed file → fresh database file."""

from __future__ import annotations

import json

import pytest

from meal_plan_organizer.db.connection import get_connection
from meal_plan_organizer.db.repositories.recipe_repo import RecipeRepository
from meal_plan_organizer.db.repositories.run_repo import RunMetadataRepository
from meal_plan_organizer.pipeline.import_recipes import ImportStage


@pytest.fixture
def seed_file(app_config):
    path = app_config.data.seed_file
    with open(path, "w", encoding="utf-8") as f:
        json.dump({"recipes": [{"slug": "soup", "title": "Soup"}]}, f)
    return path


class TestImportStage:
    def test_imports_into_fresh_db(self, app_config, seed_file):
        run = ImportStage(config=app_config).run()
        assert run.status == "success"
        assert run.rows_processed == 1
        with get_connection(app_config.database.db_path, wal_mode=False) as conn:
            assert RecipeRepository(conn).total() == 1
            stored = RunMetadataRepository(conn).get_run_by_slug(run.run_slug)
        assert stored.pipeline_stage == "import"

    def test_explicit_file_overrides_config(self, app_config, tmp_path):
        other = tmp_path / "other.json"
        other.write_text(
            json.dumps({"recipes": [{"slug": "a", "title": "A"}, {"slug": "b", "title": "B"}]}),
            encoding="utf-8",
        )
        run = ImportStage(config=app_config).run(seed_file=other)
        assert run.rows_processed == 2

    def test_missing_file_fails(self, app_config):
        with pytest.raises(FileNotFoundError):
            ImportStage(config=app_config).run()
