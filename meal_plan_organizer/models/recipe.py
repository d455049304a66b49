"""
Recipe and rating models.

``Recipe`` is the catalogue entry a household has saved. Only the display
metadata needed by the recommender lives here; ingredients and steps belong
to the (excluded) recipe editor.

``RecipeRating`` is one entry in the append-only rating log. A household
member may rate the same recipe many times; every entry is kept so the
recommender can fold over the whole history.

Both models are frozen — the recommender reads them, never mutates them.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from meal_plan_organizer.taxonomy.frequency import FrequencyPreference

MAX_COMMENT_LENGTH = 500


class Recipe(BaseModel):
    """A saved dish.

    Attributes:
        recipe_id: Auto-assigned DB PK; ``None`` before insertion.
        slug: Unique, human-friendly identifier, e.g. ``"chicken-tikka"``.
        title: Display title.
        description: Optional free-text description.
        image_url: Reference to the stored photo, if any.
        cuisine_type: Free-form cuisine tag, e.g. ``"Indian"``.
        prep_time_minutes: Preparation time in minutes.
        cook_time_minutes: Cooking time in minutes.
        servings: Number of servings the recipe yields.
        created_at: UTC datetime the recipe was saved.
    """

    model_config = ConfigDict(frozen=True)

    recipe_id: Optional[int] = None
    slug: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    cuisine_type: Optional[str] = None
    prep_time_minutes: Optional[int] = None
    cook_time_minutes: Optional[int] = None
    servings: Optional[int] = None
    created_at: Optional[datetime] = None

    @field_validator("slug", "title")
    @classmethod
    def validate_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("slug and title must not be empty.")
        return v.strip()

    @field_validator("prep_time_minutes", "cook_time_minutes", "servings")
    @classmethod
    def validate_non_negative(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError(f"Durations and servings must be non-negative, got {v}.")
        return v


class RecipeRating(BaseModel):
    """One star rating, optionally with a comment and a frequency preference.

    Attributes:
        rating_id: Auto-assigned DB PK; ``None`` before insertion.
        recipe_id: FK to ``recipes.recipe_id``.
        user_id: Household member who rated the dish.
        rating: Star value, 1 (worst) to 5 (best).
        comments: Optional free text, at most 500 characters.
        frequency_preference: How often the rater wants the dish, or ``None``.
        rated_at: UTC datetime the rating was recorded.
    """

    model_config = ConfigDict(frozen=True)

    rating_id: Optional[int] = None
    recipe_id: int
    user_id: str = "system"
    rating: int
    comments: Optional[str] = None
    frequency_preference: Optional[FrequencyPreference] = None
    rated_at: datetime

    @field_validator("rating")
    @classmethod
    def validate_rating_range(cls, v: int) -> int:
        if not 1 <= v <= 5:
            raise ValueError(f"rating must be between 1 and 5, got {v}.")
        return v

    @field_validator("comments")
    @classmethod
    def validate_comment_length(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        if len(v) > MAX_COMMENT_LENGTH:
            raise ValueError(
                f"comments must be {MAX_COMMENT_LENGTH} characters or less, got {len(v)}."
            )
        return v

    @field_validator("user_id")
    @classmethod
    def validate_user_id(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("user_id must not be empty.")
        return v.strip()
