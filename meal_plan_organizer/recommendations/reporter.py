"""
Recommendation report writer: JSON, CSV and Parquet output for a ranked
recommendation run.

All functions are pure I/O — no DB access.  They consume in-memory
RecommendationList / ScoredRecipe data and write human-readable +
machine-readable files.

Output files (written by RecommendStage)
-----------------------------------------
  data/outputs/recommendations/
    recommendations_{week_start}.json   -- API payload + run provenance
    recommendations_{week_start}.csv    -- one flat row per ranked recipe
    signals_{week_start}.parquet        -- signals + score components
"""

from __future__ import annotations

import csv
import json
import logging
from datetime import date
from pathlib import Path

import pyarrow as pa
import pyarrow.parquet as pq

from meal_plan_organizer.models.recommendation import RecommendationList
from meal_plan_organizer.recommendations.ranker import ScoredRecipe

logger = logging.getLogger(__name__)

_SIGNALS_SCHEMA = pa.schema([
    pa.field("rank",                  pa.int32(),   nullable=False),
    pa.field("recipe_id",             pa.int64(),   nullable=False),
    pa.field("title",                 pa.string(),  nullable=False),
    pa.field("average_rating",        pa.float32(), nullable=False),
    pa.field("rating_count",          pa.int32(),   nullable=False),
    pa.field("frequency_preference",  pa.string(),  nullable=True),
    pa.field("last_assigned_day",     pa.date32(),  nullable=True),
    pa.field("rating_component",      pa.float32(), nullable=False),
    pa.field("frequency_component",   pa.float32(), nullable=False),
    pa.field("recency_component",     pa.float32(), nullable=False),
    pa.field("score",                 pa.float32(), nullable=False),
    pa.field("short_circuited",       pa.bool_(),   nullable=False),
    pa.field("reason_codes",          pa.string(),  nullable=False),
])


def write_recommendation_json(
    recommendations: RecommendationList,
    output_dir: Path,
    run_slug: str = "",
) -> Path:
    """Write the recommendation payload to a structured JSON file.

    Args:
        recommendations: Output of ``RecommendationService.recommend()``.
        output_dir:      Target directory (created if missing).
        run_slug:        Pipeline run UUID for provenance.

    Returns:
        Path to the written JSON file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    week = recommendations.week_start_date
    json_path = output_dir / f"recommendations_{week.isoformat()}.json"

    payload: dict = {
        "schema_version": "v1",
        "run_slug":       run_slug,
        **recommendations.to_payload(),
    }

    json_path.write_text(json.dumps(payload, indent=2, default=str), encoding="utf-8")
    logger.info("Recommendation JSON written: %s", json_path)
    return json_path


def write_recommendation_csv(
    recommendations: RecommendationList,
    output_dir: Path,
) -> Path:
    """Write ranked recommendations to a flat CSV file.

    Columns: rank, recipe_id, title, cuisine_type, score, average_rating,
             rating_count, last_cooked_date, frequency_preference, reason_codes.

    Reason codes are joined with ``;``.

    Args:
        recommendations: Output of ``RecommendationService.recommend()``.
        output_dir:      Target directory.

    Returns:
        Path to the written CSV file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    week = recommendations.week_start_date
    csv_path = output_dir / f"recommendations_{week.isoformat()}.csv"

    fieldnames = [
        "rank", "recipe_id", "title", "cuisine_type", "score",
        "average_rating", "rating_count", "last_cooked_date",
        "frequency_preference", "reason_codes",
    ]

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for rank, rec in enumerate(recommendations.recipes, start=1):
            writer.writerow(
                {
                    "rank":                 rank,
                    "recipe_id":            rec.recipe_id,
                    "title":                rec.title,
                    "cuisine_type":         rec.cuisine_type or "",
                    "score":                rec.score,
                    "average_rating":       rec.average_rating,
                    "rating_count":         rec.rating_count,
                    "last_cooked_date":     (
                        rec.last_cooked_date.isoformat() if rec.last_cooked_date else ""
                    ),
                    "frequency_preference": rec.frequency_preference or "",
                    "reason_codes":         ";".join(rec.reason_codes),
                }
            )

    logger.info(
        "Recommendation CSV written: %s (%d rows)", csv_path, recommendations.total_recipes
    )
    return csv_path


def write_signals_parquet(
    ranked: list[ScoredRecipe],
    output_dir: Path,
    week_start_date: date,
) -> Path:
    """Write per-recipe signals and score components to a Parquet file.

    Intended for offline analysis of how the weights behave on real
    household data.

    Args:
        ranked:          Ranked ScoredRecipe objects.
        output_dir:      Target directory.
        week_start_date: Planning week (used in the filename).

    Returns:
        Path to the written Parquet file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    path = output_dir / f"signals_{week_start_date.isoformat()}.parquet"

    columns: dict[str, list] = {f.name: [] for f in _SIGNALS_SCHEMA}
    for rank, s in enumerate(ranked, start=1):
        pref = s.signal.dominant_frequency_preference
        columns["rank"].append(rank)
        columns["recipe_id"].append(s.recipe.recipe_id)
        columns["title"].append(s.recipe.title)
        columns["average_rating"].append(s.signal.average_rating)
        columns["rating_count"].append(s.signal.rating_count)
        columns["frequency_preference"].append(pref.value if pref is not None else None)
        columns["last_assigned_day"].append(s.signal.last_assigned_day)
        columns["rating_component"].append(s.breakdown.rating_component)
        columns["frequency_component"].append(s.breakdown.frequency_component)
        columns["recency_component"].append(s.breakdown.recency_component)
        columns["score"].append(s.breakdown.score)
        columns["short_circuited"].append(s.breakdown.short_circuited)
        columns["reason_codes"].append(";".join(s.breakdown.reason_codes))

    table = pa.table(
        {f.name: pa.array(columns[f.name], type=f.type) for f in _SIGNALS_SCHEMA},
        schema=_SIGNALS_SCHEMA,
    )
    pq.write_table(table, str(path), compression="snappy")
    logger.info("Signals Parquet written: %s (%d rows)", path, len(ranked))
    return path
