"""
Recommendation output models.

``RecommendedRecipe`` is one ranked entry: display metadata, the aggregated
signals it was scored on, the final score and its reason codes.

``RecommendationList`` is the complete, ordered answer for one planning week.
``to_payload()`` renders the camelCase JSON shape consumed by the mobile
client, with dates as ``YYYY-MM-DD`` strings.

Both models are frozen — a recommendation is a snapshot of one scoring run.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class RecommendedRecipe(BaseModel):
    """One entry of a ranked recommendation list.

    Attributes:
        recipe_id: PK of the recommended recipe.
        title: Recipe title.
        image_url: Photo reference, if any.
        cuisine_type: Cuisine tag, if any.
        prep_time_minutes: Preparation time.
        cook_time_minutes: Cooking time.
        score: Recommendation score, at most 100.0, one decimal.
        average_rating: Mean star rating, 0.0–5.0, one decimal.
        rating_count: Number of ratings folded into ``average_rating``.
        last_cooked_date: Latest meal-plan day for the recipe, or ``None``.
        frequency_preference: Dominant stated preference value, or ``None``.
        reason_codes: Ordered explanation tags.
    """

    model_config = ConfigDict(frozen=True)

    recipe_id: int
    title: str
    image_url: Optional[str] = None
    cuisine_type: Optional[str] = None
    prep_time_minutes: Optional[int] = None
    cook_time_minutes: Optional[int] = None
    score: float
    average_rating: float
    rating_count: int
    last_cooked_date: Optional[date] = None
    frequency_preference: Optional[str] = None
    reason_codes: tuple[str, ...] = ()

    @field_validator("score")
    @classmethod
    def validate_score_range(cls, v: float) -> float:
        # Negative totals are legal: a recipe already planned after the week
        # start earns negative frequency credit.
        if v > 100.0:
            raise ValueError(f"score must be at most 100.0, got {v}.")
        return v

    @field_validator("average_rating")
    @classmethod
    def validate_average_range(cls, v: float) -> float:
        if not 0.0 <= v <= 5.0:
            raise ValueError(f"average_rating must be in [0.0, 5.0], got {v}.")
        return v

    def to_payload(self) -> dict[str, Any]:
        return {
            "recipeId":            self.recipe_id,
            "title":               self.title,
            "imageUrl":            self.image_url,
            "cuisineType":         self.cuisine_type,
            "prepTimeMinutes":     self.prep_time_minutes,
            "cookTimeMinutes":     self.cook_time_minutes,
            "score":               self.score,
            "averageRating":       self.average_rating,
            "ratingCount":         self.rating_count,
            "lastCookedDate":      (
                self.last_cooked_date.isoformat() if self.last_cooked_date else None
            ),
            "frequencyPreference": self.frequency_preference,
            "reasonCodes":         list(self.reason_codes),
        }


class RecommendationList(BaseModel):
    """Ranked recommendations for one planning week.

    Attributes:
        week_start_date: Monday of the week being planned.
        total_recipes: Number of entries in ``recipes``.
        recipes: Entries ordered by score desc, then average rating desc.
    """

    model_config = ConfigDict(frozen=True)

    week_start_date: date
    total_recipes: int
    recipes: tuple[RecommendedRecipe, ...] = ()

    @field_validator("total_recipes")
    @classmethod
    def validate_total(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"total_recipes must be non-negative, got {v}.")
        return v

    def top(self, n: int) -> list[RecommendedRecipe]:
        """Return the first ``n`` entries (display truncation only)."""
        return list(self.recipes[: max(n, 0)])

    def to_payload(self) -> dict[str, Any]:
        """Render the camelCase response payload."""
        return {
            "weekStartDate": self.week_start_date.isoformat(),
            "totalRecipes":  self.total_recipes,
            "recipes":       [r.to_payload() for r in self.recipes],
        }
