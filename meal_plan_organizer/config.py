"""
Configuration for the meal plan organizer.

Settings are layered; a later layer wins over an earlier one:

  1. ``config/default.toml`` (or the file passed with ``--config``)
  2. ``local.toml`` next to that file, when present (gitignored)
  3. ``MEAL_PLANNER_*`` environment variables, which may come from a
     project-level ``.env`` file

Use ``load_config()`` to get a validated, immutable ``AppConfig``.

Scoring weights live in ``recommendations/scorer.py`` as constants and have no
config key.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Callable, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

_LOG_LEVELS = ("CRITICAL", "DEBUG", "ERROR", "INFO", "WARNING")


class DatabaseConfig(BaseModel):
    """Where the SQLite file lives and how connections are opened."""

    model_config = ConfigDict(frozen=True)

    db_path: str = "data/db/meal_plan_organizer.db"
    wal_mode: bool = True
    busy_timeout_ms: int = 5000


class DataConfig(BaseModel):
    """Seed input and report output locations."""

    model_config = ConfigDict(frozen=True)

    seed_file: str = "config/seed/sample_recipes.json"
    output_dir: str = "data/outputs/recommendations"


class RecommendationConfig(BaseModel):
    """Which artefacts a recommendation run produces and how much it prints."""

    model_config = ConfigDict(frozen=True)

    display_top_n: int = 10
    default_user_id: str = "system"
    write_json: bool = True
    write_csv: bool = True
    write_parquet: bool = True
    persist_snapshot: bool = True

    @field_validator("display_top_n")
    @classmethod
    def _top_n_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"display_top_n must be >= 1, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Root logger level, optional log file and line format."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: str = "data/logs/meal_planner.log"
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        normalized = v.strip().upper()
        if normalized not in _LOG_LEVELS:
            raise ValueError(f"Log level must be one of {list(_LOG_LEVELS)}, got '{v}'.")
        return normalized


class AppConfig(BaseModel):
    """Top-level settings object handed to every stage and CLI command."""

    model_config = ConfigDict(frozen=True)

    database: DatabaseConfig = DatabaseConfig()
    data: DataConfig = DataConfig()
    recommendation: RecommendationConfig = RecommendationConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


# env var -> (section or None for top level, key, converter)
_ENV_OVERRIDES: dict[str, tuple[Optional[str], str, Callable[[str], Any]]] = {
    "MEAL_PLANNER_DB_PATH": ("database", "db_path", str),
    "MEAL_PLANNER_LOG_LEVEL": ("logging", "level", str),
    "MEAL_PLANNER_OUTPUT_DIR": ("data", "output_dir", str),
    "MEAL_PLANNER_DEBUG": (None, "debug", _as_bool),
}


def project_root() -> Path:
    """Directory holding ``pyproject.toml``; falls back to the package parent."""
    here = Path(__file__).resolve().parent
    for directory in (here, *here.parents[:4]):
        if (directory / "pyproject.toml").is_file():
            return directory
    return here.parent


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Build an ``AppConfig`` from TOML files and the environment.

    Args:
        config_path: TOML file to start from. When omitted,
            ``config/default.toml`` under the project root is used.

    Raises:
        FileNotFoundError: ``config_path`` does not exist.
        pydantic.ValidationError: A merged value is out of range.
    """
    root = project_root()
    load_dotenv(dotenv_path=root / ".env", override=False)

    path = Path(config_path) if config_path is not None else root / "config" / "default.toml"
    if not path.exists():
        raise FileNotFoundError(
            f"Config file not found: {path}\n"
            "Create config/default.toml or pass --config."
        )

    settings = _read_toml(path)
    overlay = path.parent / "local.toml"
    if overlay.exists():
        settings = _merge(settings, _read_toml(overlay))

    for var, (section, key, convert) in _ENV_OVERRIDES.items():
        value = os.environ.get(var)
        if not value:
            continue
        target = settings if section is None else settings.setdefault(section, {})
        target[key] = convert(value)

    return _to_app_config(settings)


def _read_toml(path: Path) -> dict[str, Any]:
    with path.open("rb") as fh:
        return tomllib.load(fh)


def _merge(lower: dict[str, Any], upper: dict[str, Any]) -> dict[str, Any]:
    """Return ``lower`` updated with ``upper``, descending into nested tables."""
    merged = dict(lower)
    for key, value in upper.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = _merge(current, value)
        else:
            merged[key] = value
    return merged


def _to_app_config(settings: dict[str, Any]) -> AppConfig:
    # ``[project]`` is informational except for a fallback ``debug`` flag.
    project = settings.get("project", {})
    return AppConfig(
        database=DatabaseConfig(**settings.get("database", {})),
        data=DataConfig(**settings.get("data", {})),
        recommendation=RecommendationConfig(**settings.get("recommendation", {})),
        logging=LoggingConfig(**settings.get("logging", {})),
        debug=settings.get("debug", project.get("debug", False)),
    )
