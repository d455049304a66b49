"""
``meal-planner`` command line.

Each command loads ``AppConfig`` (``--config`` overrides the default file),
sets up logging, checks its arguments, does one thing against the SQLite
database and prints ``[OK]`` or ``[ERROR] ...``; errors exit with code 1.

Typical session::

    meal-planner init-db
    meal-planner import-recipes
    meal-planner rate-recipe 3 --rating 5 --frequency OnceAWeek
    meal-planner create-meal-plan --name "Week of Feb 9" --start-date 2026-02-09
    meal-planner assign-recipe 1 3 --day 2026-02-10
    meal-planner show-meal-plan 1
    meal-planner recommend --week-start 2026-02-16 --top 5
"""

from __future__ import annotations

import json
from datetime import date
from pathlib import Path
from typing import Optional

import typer

app = typer.Typer(
    name="meal-planner",
    help="Rate household recipes and get weekly dinner recommendations.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Return the loaded ``AppConfig`` or exit 1 with an ``[ERROR]`` line."""
    from meal_plan_organizer.config import load_config

    try:
        return load_config(Path(config_path) if config_path else None)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except ValueError as exc:  # pydantic.ValidationError and TOML syntax errors
        typer.echo(f"[ERROR] Invalid configuration: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config) -> None:
    from meal_plan_organizer.utils.logging import configure_logging

    configure_logging(config.logging)


def _parse_date_or_exit(value: str, option: str) -> date:
    from meal_plan_organizer.utils.time_utils import parse_iso_date

    try:
        return parse_iso_date(value)
    except ValueError:
        typer.echo(f"[ERROR] Invalid date for {option}: '{value}' (expected YYYY-MM-DD).", err=True)
        raise typer.Exit(code=1)


def _open(config, db_path: Optional[str]):
    from meal_plan_organizer.db.connection import get_connection

    return get_connection(
        db_path or config.database.db_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    )


_DB_PATH_OPTION = typer.Option(
    None,
    "--db-path",
    help="Use this SQLite file instead of database.db_path.",
)
_CONFIG_OPTION = typer.Option(
    None,
    "--config",
    help="TOML config file (default: config/default.toml).",
)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Create the database schema and apply pending migrations.

    Idempotent: existing tables and applied migrations are left alone.
    """
    from meal_plan_organizer.db.migrations import initialize_database
    from meal_plan_organizer.db.schema import ALL_TABLE_NAMES

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.database.db_path
    typer.echo(f"Database: {target_path}")

    with _open(config, target_path) as conn:
        migrations_applied = initialize_database(conn)

    typer.echo(f"  {len(ALL_TABLE_NAMES)} base tables present")
    typer.echo(f"  {migrations_applied} migration(s) applied")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = _CONFIG_OPTION,
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Also dump every field as JSON.",
    ),
) -> None:
    """Load the configuration and print the effective settings."""
    config = _load_config_or_exit(config_path)

    typer.echo(f"Config loaded (debug={config.debug}).")
    typer.echo("")
    typer.echo(f"  Database path:  {config.database.db_path}")
    typer.echo(f"  Seed file:      {config.data.seed_file}")
    typer.echo(f"  Output dir:     {config.data.output_dir}")
    typer.echo(f"  Display top-N:  {config.recommendation.display_top_n}")
    typer.echo(f"  Log level:      {config.logging.level}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config is valid.")


@app.command("import-recipes")
def import_recipes(
    seed_file: Optional[str] = typer.Option(
        None,
        "--file",
        "-f",
        help="Path to a recipes JSON file. Defaults to config.data.seed_file.",
    ),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Import recipes, ratings and meal plans from a JSON seed file.

    Recipes already present (same slug) are left untouched.
    See config/seed/sample_recipes.json for the format.
    """
    from meal_plan_organizer.pipeline.import_recipes import ImportStage

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    path = Path(seed_file) if seed_file else Path(config.data.seed_file)
    if not path.exists():
        typer.echo(f"[ERROR] Seed file not found: {path}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Loading recipes from: {path}")
    stage = ImportStage(config=config, db_path=db_path)
    try:
        run = stage.run(seed_file=path)
    except Exception as exc:
        typer.echo(f"[ERROR] Import failed: {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"  Rows written: {run.rows_processed}")
    typer.echo("[OK] Recipes imported.")


@app.command("rate-recipe")
def rate_recipe(
    recipe_id: int = typer.Argument(..., help="ID of the recipe to rate."),
    rating: int = typer.Option(..., "--rating", "-r", help="Star rating, 1-5."),
    comments: Optional[str] = typer.Option(
        None, "--comments", "-c", help="Optional comment (max 500 characters)."
    ),
    frequency: Optional[str] = typer.Option(
        None,
        "--frequency",
        help="OnceAWeek, OnceAMonth, AFewTimesAYear, Yearly or Never.",
    ),
    user_id: Optional[str] = typer.Option(
        None, "--user", help="Household member rating the dish."
    ),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Append a rating to a recipe's rating history."""
    from pydantic import ValidationError

    from meal_plan_organizer.db.repositories.recipe_repo import (
        RecipeRatingRepository,
        RecipeRepository,
    )
    from meal_plan_organizer.models.recipe import RecipeRating
    from meal_plan_organizer.taxonomy.frequency import VALID_FREQUENCY_VALUES
    from meal_plan_organizer.utils.time_utils import utcnow

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    if frequency is not None and frequency not in VALID_FREQUENCY_VALUES:
        typer.echo(
            f"[ERROR] Invalid frequency '{frequency}'. "
            f"Valid values: {', '.join(sorted(VALID_FREQUENCY_VALUES))}",
            err=True,
        )
        raise typer.Exit(code=1)

    try:
        entry = RecipeRating(
            recipe_id=recipe_id,
            user_id=user_id or config.recommendation.default_user_id,
            rating=rating,
            comments=comments,
            frequency_preference=frequency,
            rated_at=utcnow(),
        )
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid rating: {exc}", err=True)
        raise typer.Exit(code=1)

    with _open(config, db_path) as conn:
        if not RecipeRepository(conn).exists(recipe_id):
            typer.echo(f"[ERROR] Recipe {recipe_id} not found.", err=True)
            raise typer.Exit(code=1)
        rating_repo = RecipeRatingRepository(conn)
        rating_id = rating_repo.add(entry)
        avg, count = rating_repo.average_for_recipe(recipe_id)

    typer.echo(f"  Rating {rating_id} saved for recipe {recipe_id}.")
    typer.echo(f"  Average: {avg:.1f} over {count} rating(s).")
    typer.echo("[OK] Rating recorded.")


@app.command("create-meal-plan")
def create_meal_plan(
    name: str = typer.Option(..., "--name", help="Display name of the plan."),
    start_date: str = typer.Option(..., "--start-date", help="First day (YYYY-MM-DD)."),
    end_date: Optional[str] = typer.Option(
        None, "--end-date", help="Last day (YYYY-MM-DD). Defaults to start + 6 days."
    ),
    created_by: Optional[str] = typer.Option(None, "--created-by", help="Plan owner."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Create a new weekly meal plan."""
    from pydantic import ValidationError

    from meal_plan_organizer.db.repositories.meal_plan_repo import MealPlanRepository
    from meal_plan_organizer.models.meal_plan import MealPlan
    from meal_plan_organizer.utils.time_utils import week_end

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    start = _parse_date_or_exit(start_date, "--start-date")
    end = _parse_date_or_exit(end_date, "--end-date") if end_date else week_end(start)

    try:
        plan = MealPlan(name=name, start_date=start, end_date=end, created_by=created_by)
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid meal plan: {exc}", err=True)
        raise typer.Exit(code=1)

    with _open(config, db_path) as conn:
        plan_id = MealPlanRepository(conn).insert(plan)

    typer.echo(f"  Meal plan {plan_id}: '{plan.name}' {plan.start_date} → {plan.end_date}")
    typer.echo("[OK] Meal plan created.")


@app.command("assign-recipe")
def assign_recipe(
    meal_plan_id: int = typer.Argument(..., help="Target meal plan ID."),
    recipe_id: int = typer.Argument(..., help="Recipe to place."),
    day: str = typer.Option(..., "--day", help="Calendar day (YYYY-MM-DD)."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Place a recipe on a day of a meal plan (replaces any recipe already there)."""
    from meal_plan_organizer.db.repositories.meal_plan_repo import MealPlanRepository
    from meal_plan_organizer.db.repositories.recipe_repo import RecipeRepository

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_day = _parse_date_or_exit(day, "--day")

    with _open(config, db_path) as conn:
        if not RecipeRepository(conn).exists(recipe_id):
            typer.echo(f"[ERROR] Recipe {recipe_id} not found.", err=True)
            raise typer.Exit(code=1)
        try:
            assignment_id = MealPlanRepository(conn).assign_recipe(
                meal_plan_id, recipe_id, target_day
            )
        except (LookupError, ValueError) as exc:
            typer.echo(f"[ERROR] {exc}", err=True)
            raise typer.Exit(code=1)

    typer.echo(f"  Assignment {assignment_id}: recipe {recipe_id} on {target_day}.")
    typer.echo("[OK] Recipe assigned.")


@app.command("unassign-recipe")
def unassign_recipe(
    meal_plan_id: int = typer.Argument(..., help="Meal plan ID."),
    day: str = typer.Option(..., "--day", help="Calendar day to clear (YYYY-MM-DD)."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Clear the recipe placed on one day of a meal plan."""
    from meal_plan_organizer.db.repositories.meal_plan_repo import MealPlanRepository

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_day = _parse_date_or_exit(day, "--day")

    with _open(config, db_path) as conn:
        removed = MealPlanRepository(conn).remove_assignment(meal_plan_id, target_day)

    if not removed:
        typer.echo(
            f"[ERROR] Nothing assigned on {target_day} in meal plan {meal_plan_id}.", err=True
        )
        raise typer.Exit(code=1)

    typer.echo(f"  Cleared {target_day} in meal plan {meal_plan_id}.")
    typer.echo("[OK] Recipe unassigned.")


@app.command("list-recipes")
def list_recipes(
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List every saved recipe with its average rating."""
    from meal_plan_organizer.db.repositories.recipe_repo import (
        RecipeRatingRepository,
        RecipeRepository,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open(config, db_path) as conn:
        recipes = RecipeRepository(conn).list_all()
        rating_repo = RecipeRatingRepository(conn)
        averages = {r.recipe_id: rating_repo.average_for_recipe(r.recipe_id) for r in recipes}

    typer.echo(f"  {'ID':>4}  {'Avg':>3}  {'n':>3}  {'Title':<32}  Cuisine")
    for recipe in recipes:
        avg, count = averages[recipe.recipe_id]
        typer.echo(
            f"  {recipe.recipe_id:>4}  {avg:>3.1f}  {count:>3}  "
            f"{recipe.title[:32]:<32}  {recipe.cuisine_type or '-'}"
        )
    typer.echo(f"[OK] {len(recipes)} recipe(s).")


@app.command("recipe-ratings")
def recipe_ratings(
    recipe_id: int = typer.Argument(..., help="Recipe whose rating history to show."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Show a recipe's full rating history, oldest first."""
    from meal_plan_organizer.db.repositories.recipe_repo import (
        RecipeRatingRepository,
        RecipeRepository,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open(config, db_path) as conn:
        recipe = RecipeRepository(conn).get_by_id(recipe_id)
        if recipe is None:
            typer.echo(f"[ERROR] Recipe {recipe_id} not found.", err=True)
            raise typer.Exit(code=1)
        rating_repo = RecipeRatingRepository(conn)
        history = rating_repo.list_for_recipe(recipe_id)
        avg, count = rating_repo.average_for_recipe(recipe_id)

    typer.echo(f"Ratings for recipe {recipe_id}: {recipe.title}")
    for entry in history:
        typer.echo(
            f"  {entry.rated_at:%Y-%m-%d %H:%M}  {entry.rating}/5  "
            f"{entry.frequency_preference or '-':<15}  {entry.user_id}"
            + (f"  \"{entry.comments}\"" if entry.comments else "")
        )
    typer.echo(f"  Average: {avg:.1f} over {count} rating(s).")
    typer.echo("[OK] Rating history listed.")


@app.command("rating-history")
def rating_history(
    user_id: Optional[str] = typer.Option(
        None, "--user", help="Household member. Defaults to recommendation.default_user_id."
    ),
    limit: int = typer.Option(50, "--limit", help="Maximum ratings to show."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Show one household member's ratings, newest first."""
    from meal_plan_organizer.db.repositories.recipe_repo import RecipeRatingRepository

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    user = user_id or config.recommendation.default_user_id
    with _open(config, db_path) as conn:
        history = RecipeRatingRepository(conn).list_for_user(user, limit=limit)

    typer.echo(f"Ratings by {user}")
    for entry in history:
        typer.echo(
            f"  {entry.rated_at:%Y-%m-%d %H:%M}  recipe {entry.recipe_id:>4}  "
            f"{entry.rating}/5  {entry.frequency_preference or '-'}"
        )
    typer.echo(f"[OK] {len(history)} rating(s).")


@app.command("list-meal-plans")
def list_meal_plans(
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List every meal plan."""
    from meal_plan_organizer.db.repositories.meal_plan_repo import MealPlanRepository

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open(config, db_path) as conn:
        plans = MealPlanRepository(conn).list_plans()

    for plan in plans:
        typer.echo(
            f"  {plan.meal_plan_id:>4}  {plan.start_date} → {plan.end_date}  "
            f"{plan.status:<8}  {plan.name}"
        )
    typer.echo(f"[OK] {len(plans)} meal plan(s).")


@app.command("show-meal-plan")
def show_meal_plan(
    meal_plan_id: int = typer.Argument(..., help="Meal plan ID."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Show a meal plan and the recipe placed on each day."""
    from meal_plan_organizer.db.repositories.meal_plan_repo import MealPlanRepository
    from meal_plan_organizer.db.repositories.recipe_repo import RecipeRepository

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open(config, db_path) as conn:
        plan_repo = MealPlanRepository(conn)
        plan = plan_repo.get_by_id(meal_plan_id)
        if plan is None:
            typer.echo(f"[ERROR] Meal plan {meal_plan_id} not found.", err=True)
            raise typer.Exit(code=1)
        assignments = plan_repo.list_assignments(meal_plan_id)
        titles = {r.recipe_id: r.title for r in RecipeRepository(conn).list_all()}

    typer.echo(f"Meal plan {meal_plan_id}: '{plan.name}' {plan.start_date} → {plan.end_date}")
    typer.echo(f"  Status: {plan.status}")
    for a in assignments:
        typer.echo(f"  {a.day:%a %Y-%m-%d}  {titles.get(a.recipe_id, f'recipe {a.recipe_id}')}")
    typer.echo(f"[OK] {len(assignments)} day(s) assigned.")


@app.command("recommend")
def recommend(
    week_start: Optional[str] = typer.Option(
        None,
        "--week-start",
        help="Monday of the week to plan (YYYY-MM-DD). Defaults to next Monday.",
    ),
    top: Optional[int] = typer.Option(
        None,
        "--top",
        "-n",
        help="Rows to display. Defaults to config.recommendation.display_top_n.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the full ranked list as JSON instead of a table.",
    ),
    no_report: bool = typer.Option(
        False,
        "--no-report",
        help="Skip writing JSON/CSV/Parquet report files.",
    ),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Rank every saved recipe for the coming week.

    \b
    Score (max 100) = rating (30) + frequency preference (40) + recency (30).
    Recipes marked "Never" always score 0.
    """
    from meal_plan_organizer.pipeline.recommend import RecommendStage
    from meal_plan_organizer.utils.time_utils import next_monday, utcnow

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    week = (
        _parse_date_or_exit(week_start, "--week-start")
        if week_start
        else next_monday(utcnow().date())
    )
    n = top if top is not None else config.recommendation.display_top_n

    stage = RecommendStage(config=config, db_path=db_path)
    try:
        stage.run(week_start_date=week, write_reports=not no_report)
    except Exception as exc:
        typer.echo(f"[ERROR] Recommendation run failed: {exc}", err=True)
        raise typer.Exit(code=1)

    result = stage.last_result
    assert result is not None

    if as_json:
        typer.echo(json.dumps(result.to_payload(), indent=2))
        return

    typer.echo(f"Recommendations for week starting {result.week_start_date}")
    typer.echo(f"  {result.total_recipes} recipe(s) ranked; showing top {min(n, result.total_recipes)}.")
    typer.echo("")
    typer.echo(f"  {'#':>3}  {'Score':>5}  {'Avg':>3}  {'Title':<32}  Reasons")
    for rank, rec in enumerate(result.top(n), start=1):
        typer.echo(
            f"  {rank:>3}  {rec.score:>5.1f}  {rec.average_rating:>3.1f}  "
            f"{rec.title[:32]:<32}  {', '.join(rec.reason_codes)}"
        )

    for path in stage.report_paths:
        typer.echo(f"  Report: {path}")
    typer.echo("[OK] Recommendations generated.")


@app.command("list-runs")
def list_runs(
    stage: Optional[str] = typer.Option(
        None, "--stage", help="Only show runs of this stage (import or recommend)."
    ),
    limit: int = typer.Option(20, "--limit", help="Maximum runs to show."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """List recent pipeline runs, newest first."""
    from meal_plan_organizer.db.repositories.run_repo import RunMetadataRepository

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open(config, db_path) as conn:
        runs = RunMetadataRepository(conn).get_recent_runs(stage, limit=limit)

    for run in runs:
        typer.echo(
            f"  {run.started_at:%Y-%m-%d %H:%M}  {run.pipeline_stage:<9}  "
            f"{run.status:<9}  {run.rows_processed:>4}  {run.run_slug}"
        )
    typer.echo(f"[OK] {len(runs)} run(s).")


@app.command("show-run")
def show_run(
    run_slug: str = typer.Argument(..., help="Slug of the run, as printed by list-runs."),
    db_path: Optional[str] = _DB_PATH_OPTION,
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Show one run and the ranking it stored, if any."""
    from meal_plan_organizer.db.repositories.run_repo import (
        RecommendationSnapshotRepository,
        RunMetadataRepository,
    )

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open(config, db_path) as conn:
        run = RunMetadataRepository(conn).get_run_by_slug(run_slug)
        if run is None:
            typer.echo(f"[ERROR] Run '{run_slug}' not found.", err=True)
            raise typer.Exit(code=1)
        snapshots = (
            RecommendationSnapshotRepository(conn).get_for_run(run.run_id)
            if run.run_id is not None
            else []
        )

    typer.echo(f"Run {run.run_slug} ({run.pipeline_stage}, {run.status})")
    if run.week_start_date is not None:
        typer.echo(f"  Week start: {run.week_start_date}")
    if run.error_message:
        typer.echo(f"  Error: {run.error_message}")
    for snap in snapshots:
        typer.echo(
            f"  {snap['rank']:>3}  {snap['score']:>5.1f}  recipe {snap['recipe_id']:>4}  "
            f"{', '.join(snap['reason_codes'])}"
        )
    typer.echo("[OK] Run shown.")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
