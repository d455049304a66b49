"""
Tests for meal_plan_organizer/recommendations/scorer.py.

What we test
------------
score_signal():
  - "Never" preference short-circuits to 0 with only MarkedNever.
  - Unrated, no preference, never cooked → 15 + 20 + 30 = 65.
  - Rating component scales (avg − 1) / 4 onto 0–30; HighlyRated at ≥ 4.0.
  - Frequency: ideal reached → 40 + MeetsFrequency; sooner → proportional.
  - Frequency: never-cooked recipe with a preference counts as overdue.
  - Frequency: assignment after the week start earns negative credit.
  - Recency buckets and NotCookedRecently / NeverCooked reasons.
  - Reason codes appear in phase order.
  - Score is rounded to one decimal and never exceeds 100.

recency_component():
  - Bucket boundaries at 7 / 14 / 30 days.
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from meal_plan_organizer.recommendations.scorer import (
    FREQUENCY_WEIGHT,
    RATING_WEIGHT,
    RECENCY_WEIGHT,
    recency_component,
    score_signal,
)
from meal_plan_organizer.recommendations.signals import RecipeSignal
from meal_plan_organizer.taxonomy.frequency import FrequencyPreference

WEEK = date(2026, 2, 16)


# ── Helpers ────────────────────────────────────────────────────────────────────

def _signal(
    average_rating: float = 0.0,
    rating_count: int = 0,
    preference: FrequencyPreference | None = None,
    days_ago: int | None = None,
) -> RecipeSignal:
    return RecipeSignal(
        average_rating=average_rating,
        rating_count=rating_count,
        dominant_frequency_preference=preference,
        last_assigned_day=WEEK - timedelta(days=days_ago) if days_ago is not None else None,
    )


# ── Short-circuit ──────────────────────────────────────────────────────────────

class TestMarkedNever:
    def test_score_is_zero(self):
        b = score_signal(_signal(5.0, 3, FrequencyPreference.NEVER), WEEK)
        assert b.score == 0.0

    def test_only_reason_is_marked_never(self):
        b = score_signal(_signal(5.0, 3, FrequencyPreference.NEVER, days_ago=100), WEEK)
        assert b.reason_codes == ["MarkedNever"]

    def test_flags_short_circuit(self):
        b = score_signal(_signal(0.0, 0, FrequencyPreference.NEVER), WEEK)
        assert b.short_circuited is True
        assert b.rating_component == 0.0
        assert b.recency_component == 0.0


# ── Neutral defaults ───────────────────────────────────────────────────────────

class TestNeutralDefaults:
    def test_brand_new_recipe_scores_65(self):
        b = score_signal(_signal(), WEEK)
        assert b.score == 65.0
        assert b.reason_codes == ["NeverRated", "NeverCooked"]

    def test_components_for_brand_new_recipe(self):
        b = score_signal(_signal(), WEEK)
        assert b.rating_component == pytest.approx(RATING_WEIGHT / 2)
        assert b.frequency_component == pytest.approx(FREQUENCY_WEIGHT / 2)
        assert b.recency_component == pytest.approx(RECENCY_WEIGHT)


# ── Rating phase ───────────────────────────────────────────────────────────────

class TestRatingComponent:
    def test_four_point_five_gives_26_25(self):
        b = score_signal(_signal(4.5, 3), WEEK)
        assert b.rating_component == pytest.approx(26.25)
        assert "HighlyRated" in b.reason_codes

    def test_one_star_gives_zero(self):
        b = score_signal(_signal(1.0, 1), WEEK)
        assert b.rating_component == pytest.approx(0.0)

    def test_five_stars_gives_full_weight(self):
        b = score_signal(_signal(5.0, 2), WEEK)
        assert b.rating_component == pytest.approx(RATING_WEIGHT)

    def test_highly_rated_threshold_inclusive(self):
        assert "HighlyRated" in score_signal(_signal(4.0, 1), WEEK).reason_codes
        assert "HighlyRated" not in score_signal(_signal(3.9, 1), WEEK).reason_codes

    def test_rated_recipe_has_no_never_rated(self):
        b = score_signal(_signal(2.0, 1), WEEK)
        assert "NeverRated" not in b.reason_codes


# ── Frequency phase ────────────────────────────────────────────────────────────

class TestFrequencyComponent:
    def test_weekly_at_seven_days_meets_frequency(self):
        b = score_signal(_signal(3.0, 1, FrequencyPreference.ONCE_A_WEEK, days_ago=7), WEEK)
        assert b.frequency_component == pytest.approx(40.0)
        assert "MeetsFrequency" in b.reason_codes

    def test_weekly_at_six_days_is_proportional(self):
        b = score_signal(_signal(3.0, 1, FrequencyPreference.ONCE_A_WEEK, days_ago=6), WEEK)
        assert b.frequency_component == pytest.approx(34.2857, abs=1e-3)
        assert "MeetsFrequency" not in b.reason_codes

    def test_monthly_half_way(self):
        b = score_signal(_signal(3.0, 1, FrequencyPreference.ONCE_A_MONTH, days_ago=15), WEEK)
        assert b.frequency_component == pytest.approx(20.0)

    def test_yearly_long_overdue_caps_at_weight(self):
        b = score_signal(_signal(3.0, 1, FrequencyPreference.YEARLY, days_ago=800), WEEK)
        assert b.frequency_component == pytest.approx(FREQUENCY_WEIGHT)

    def test_never_cooked_with_preference_meets_frequency(self):
        b = score_signal(_signal(4.0, 1, FrequencyPreference.A_FEW_TIMES_A_YEAR), WEEK)
        assert b.frequency_component == pytest.approx(FREQUENCY_WEIGHT)
        assert "MeetsFrequency" in b.reason_codes

    def test_assignment_after_week_start_gives_negative_credit(self):
        b = score_signal(_signal(3.0, 1, FrequencyPreference.ONCE_A_WEEK, days_ago=-3), WEEK)
        assert b.frequency_component == pytest.approx(-(3 / 7) * FREQUENCY_WEIGHT)
        assert b.score == pytest.approx(round(15.0 - (3 / 7) * FREQUENCY_WEIGHT + 3.0, 1))

    def test_planned_inside_week_ranks_below_cooked_on_week_start(self):
        planned = score_signal(_signal(3.0, 1, FrequencyPreference.ONCE_A_WEEK, days_ago=-3), WEEK)
        same_day = score_signal(_signal(3.0, 1, FrequencyPreference.ONCE_A_WEEK, days_ago=0), WEEK)
        assert planned.score < same_day.score

    def test_negative_total_is_allowed(self):
        b = score_signal(_signal(1.0, 1, FrequencyPreference.ONCE_A_WEEK, days_ago=-6), WEEK)
        assert b.score == pytest.approx(round(-(6 / 7) * FREQUENCY_WEIGHT + 3.0, 1))
        assert b.score < 0

    def test_same_day_gives_zero_credit(self):
        b = score_signal(_signal(3.0, 1, FrequencyPreference.ONCE_A_WEEK, days_ago=0), WEEK)
        assert b.frequency_component == pytest.approx(0.0)

    def test_no_preference_is_neutral(self):
        b = score_signal(_signal(3.0, 1, None, days_ago=3), WEEK)
        assert b.frequency_component == pytest.approx(20.0)
        assert "MeetsFrequency" not in b.reason_codes


# ── Recency phase ──────────────────────────────────────────────────────────────

class TestRecencyComponent:
    @pytest.mark.parametrize(
        "days, expected",
        [(0, 3.0), (7, 3.0), (8, 15.0), (14, 15.0), (15, 22.5), (30, 22.5), (31, 30.0)],
    )
    def test_bucket_boundaries(self, days, expected):
        assert recency_component(days) == pytest.approx(expected)

    def test_negative_days_fall_in_first_bucket(self):
        assert recency_component(-2) == pytest.approx(3.0)

    def test_ten_days_no_preference(self):
        b = score_signal(_signal(3.0, 1, None, days_ago=10), WEEK)
        assert b.recency_component == pytest.approx(15.0)
        assert "NotCookedRecently" not in b.reason_codes
        assert "NeverCooked" not in b.reason_codes

    def test_not_cooked_recently_after_thirty_days(self):
        b = score_signal(_signal(3.0, 1, None, days_ago=45), WEEK)
        assert b.recency_component == pytest.approx(30.0)
        assert "NotCookedRecently" in b.reason_codes

    def test_never_cooked_reason(self):
        b = score_signal(_signal(3.0, 1), WEEK)
        assert "NeverCooked" in b.reason_codes


# ── Totals and ordering ────────────────────────────────────────────────────────

class TestScoreTotals:
    def test_reason_codes_in_phase_order(self):
        b = score_signal(_signal(4.5, 2, FrequencyPreference.ONCE_A_MONTH, days_ago=60), WEEK)
        assert b.reason_codes == ["HighlyRated", "MeetsFrequency", "NotCookedRecently"]

    def test_maximum_score_is_100(self):
        b = score_signal(_signal(5.0, 4, FrequencyPreference.ONCE_A_WEEK, days_ago=40), WEEK)
        assert b.score == 100.0

    def test_score_rounded_to_one_decimal(self):
        b = score_signal(_signal(3.0, 1, FrequencyPreference.ONCE_A_WEEK, days_ago=6), WEEK)
        # 15 + 34.2857… + 3 = 52.2857…
        assert b.score == 52.3

    def test_score_within_bounds_when_history_precedes_week(self):
        for avg in (1.0, 2.5, 5.0):
            for days in (None, 0, 5, 20, 400):
                for pref in list(FrequencyPreference) + [None]:
                    b = score_signal(_signal(avg, 1, pref, days_ago=days), WEEK)
                    assert 0.0 <= b.score <= 100.0
