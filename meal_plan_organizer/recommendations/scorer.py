"""
Recommendation scoring: converts a RecipeSignal into a score (at most 100) with an
ordered list of reason codes.

Score formula (weighted sum, at most 100)
-----------------------------------------
    total = rating_component       # 0–30
          + frequency_component    # at most 40; negative when planned after the week start
          + recency_component      # 0–30

Component explanations
----------------------
rating_component (0–30):
    Stars 1–5 scaled linearly onto 0–30: ((avg − 1) / 4) × 30.
    Unrated recipes get the neutral midpoint 15 to encourage trying them.

frequency_component (≤40):
    Compares days since last cooked against the preference's ideal cadence
    (OnceAWeek 7, OnceAMonth 30, AFewTimesAYear 90, Yearly 365).
    At or past the ideal → 40.  Sooner → proportional credit, which is
    negative when the last assignment falls after the week start.
    A recipe that was never planned counts as ``ideal × 2`` days overdue.
    No preference stated → neutral 20.

recency_component (0–30):
    Penalises dishes cooked recently regardless of preference.
        d ≤ 7      →  3.0
        8 ≤ d ≤ 14 → 15.0
        15 ≤ d ≤ 30→ 22.5
        d > 30     → 30.0
        never      → 30.0

Short-circuit
-------------
A dominant preference of ``Never`` forces the score to 0 and the reason
codes to exactly ``["MarkedNever"]``; the recency phase does not run.

Reason codes (appended in phase order)
--------------------------------------
    rating:    HighlyRated (avg ≥ 4.0) | NeverRated
    frequency: MeetsFrequency
    recency:   NotCookedRecently (d > 30) | NeverCooked
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from meal_plan_organizer.recommendations.signals import RecipeSignal
from meal_plan_organizer.taxonomy.frequency import (
    IDEAL_DAYS,
    FrequencyPreference,
    ReasonCode,
)
from meal_plan_organizer.utils.time_utils import days_between

RATING_WEIGHT    = 30.0
FREQUENCY_WEIGHT = 40.0
RECENCY_WEIGHT   = 30.0

HIGHLY_RATED_THRESHOLD = 4.0

# Never-planned recipes are treated as this many ideal intervals overdue.
# Tunable: changing it reorders recipes that have a preference but no history.
NEVER_COOKED_OVERDUE_FACTOR = 2

# (max days since cooked, fraction of RECENCY_WEIGHT), checked in order.
_RECENCY_BUCKETS: tuple[tuple[int, float], ...] = (
    (7,  0.10),
    (14, 0.50),
    (30, 0.75),
)


@dataclass
class ScoreBreakdown:
    """All components of a recipe's recommendation score.

    Attributes:
        rating_component:    0–30, from the mean star rating.
        frequency_component: at most 40, from fit against the frequency
                             preference; negative if planned after the week start.
        recency_component:   0–30, from days since last cooked.
        score:               Final score rounded to one decimal.
        reason_codes:        Ordered explanation tags.
        short_circuited:     True when a ``Never`` preference forced the score to 0.
    """

    rating_component:    float = 0.0
    frequency_component: float = 0.0
    recency_component:   float = 0.0
    score:               float = 0.0
    reason_codes:        list[str] = field(default_factory=list)
    short_circuited:     bool = False


def score_signal(signal: RecipeSignal, week_start_date: date) -> ScoreBreakdown:
    """Score one recipe signal for the week starting ``week_start_date``.

    Args:
        signal:          Aggregated signals for the recipe.
        week_start_date: Monday of the week being planned.

    Returns:
        ScoreBreakdown with every component populated.
    """
    breakdown = ScoreBreakdown()
    reasons = breakdown.reason_codes

    # ── Rating ────────────────────────────────────────────────────────────────
    if signal.rating_count > 0:
        breakdown.rating_component = (
            (signal.average_rating - 1.0) / 4.0
        ) * RATING_WEIGHT
        if signal.average_rating >= HIGHLY_RATED_THRESHOLD:
            reasons.append(ReasonCode.HIGHLY_RATED.value)
    else:
        breakdown.rating_component = RATING_WEIGHT * 0.5
        reasons.append(ReasonCode.NEVER_RATED.value)

    # ── Frequency fit ─────────────────────────────────────────────────────────
    preference = signal.dominant_frequency_preference
    if preference == FrequencyPreference.NEVER:
        return ScoreBreakdown(
            reason_codes=[ReasonCode.MARKED_NEVER.value],
            short_circuited=True,
        )

    if preference is not None:
        ideal_days = IDEAL_DAYS[preference]
        if signal.last_assigned_day is not None:
            days_since = days_between(signal.last_assigned_day, week_start_date)
        else:
            days_since = ideal_days * NEVER_COOKED_OVERDUE_FACTOR

        if days_since >= ideal_days:
            breakdown.frequency_component = FREQUENCY_WEIGHT
            reasons.append(ReasonCode.MEETS_FREQUENCY.value)
        else:
            breakdown.frequency_component = (days_since / ideal_days) * FREQUENCY_WEIGHT
    else:
        breakdown.frequency_component = FREQUENCY_WEIGHT * 0.5

    # ── Recency ───────────────────────────────────────────────────────────────
    if signal.last_assigned_day is not None:
        days_since = days_between(signal.last_assigned_day, week_start_date)
        breakdown.recency_component = recency_component(days_since)
        if breakdown.recency_component == RECENCY_WEIGHT:
            reasons.append(ReasonCode.NOT_COOKED_RECENTLY.value)
    else:
        breakdown.recency_component = RECENCY_WEIGHT
        reasons.append(ReasonCode.NEVER_COOKED.value)

    breakdown.score = round(
        breakdown.rating_component
        + breakdown.frequency_component
        + breakdown.recency_component,
        1,
    )
    return breakdown


def recency_component(days_since_cooked: int) -> float:
    """Return the recency points for a dish last cooked ``days_since_cooked`` ago."""
    for max_days, fraction in _RECENCY_BUCKETS:
        if days_since_cooked <= max_days:
            return RECENCY_WEIGHT * fraction
    return RECENCY_WEIGHT
