"""
Tests for meal_plan_organizer/recommendations/reporter.py.

Files are written to pytest's ``tmp_path``; contents are read back with
json / csv / pyarrow.
"""

from __future__ import annotations

import csv
import json
from datetime import date

import pyarrow.parquet as pq
import pytest

from conftest import make_recipe

from meal_plan_organizer.recommendations.ranker import (
    ScoredRecipe,
    build_recommendation_list,
)
from meal_plan_organizer.recommendations.reporter import (
    write_recommendation_csv,
    write_recommendation_json,
    write_signals_parquet,
)
from meal_plan_organizer.recommendations.scorer import score_signal
from meal_plan_organizer.recommendations.signals import RecipeSignal
from meal_plan_organizer.taxonomy.frequency import FrequencyPreference

WEEK = date(2026, 2, 16)


@pytest.fixture
def ranked() -> list[ScoredRecipe]:
    signals = [
        (make_recipe(1, "chicken-tikka"), RecipeSignal(4.5, 2, FrequencyPreference.ONCE_A_WEEK, date(2026, 1, 15))),
        (make_recipe(2, "new-dish", cuisine_type=None), RecipeSignal(0.0, 0, None, None)),
    ]
    return [
        ScoredRecipe(recipe=r, signal=s, breakdown=score_signal(s, WEEK))
        for r, s in signals
    ]


class TestJsonReport:
    def test_payload_shape(self, ranked, tmp_path):
        result = build_recommendation_list(ranked, WEEK)
        path = write_recommendation_json(result, tmp_path, run_slug="abc")

        assert path.name == "recommendations_2026-02-16.json"
        payload = json.loads(path.read_text(encoding="utf-8"))
        assert payload["schema_version"] == "v1"
        assert payload["run_slug"] == "abc"
        assert payload["weekStartDate"] == "2026-02-16"
        assert payload["totalRecipes"] == 2
        first = payload["recipes"][0]
        assert first["recipeId"] == 1
        assert first["lastCookedDate"] == "2026-01-15"
        assert first["reasonCodes"] == ["HighlyRated", "MeetsFrequency", "NotCookedRecently"]

    def test_creates_output_dir(self, ranked, tmp_path):
        target = tmp_path / "nested" / "dir"
        write_recommendation_json(build_recommendation_list(ranked, WEEK), target)
        assert target.is_dir()


class TestCsvReport:
    def test_rows(self, ranked, tmp_path):
        path = write_recommendation_csv(build_recommendation_list(ranked, WEEK), tmp_path)
        with path.open(encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))

        assert len(rows) == 2
        assert rows[0]["rank"] == "1"
        assert rows[0]["reason_codes"] == "HighlyRated;MeetsFrequency;NotCookedRecently"
        assert rows[1]["cuisine_type"] == ""
        assert rows[1]["last_cooked_date"] == ""
        assert rows[1]["reason_codes"] == "NeverRated;NeverCooked"


class TestParquetReport:
    def test_schema_and_rows(self, ranked, tmp_path):
        path = write_signals_parquet(ranked, tmp_path, WEEK)
        assert path.name == "signals_2026-02-16.parquet"

        table = pq.read_table(str(path))
        assert table.num_rows == 2
        rows = table.to_pylist()
        assert rows[0]["frequency_preference"] == "OnceAWeek"
        assert rows[0]["last_assigned_day"] == date(2026, 1, 15)
        assert rows[0]["frequency_component"] == pytest.approx(40.0)
        assert rows[1]["frequency_preference"] is None
        assert rows[1]["short_circuited"] is False

    def test_empty_ranked_list(self, tmp_path):
        path = write_signals_parquet([], tmp_path, WEEK)
        assert pq.read_table(str(path)).num_rows == 0
