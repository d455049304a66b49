"""
Frequency-preference and reason-code taxonomy for recipe recommendations.

Two closed vocabularies drive the scorer:
  - ``FrequencyPreference`` — how often a household member wants a dish.
  - ``ReasonCode``          — machine-readable tags explaining a score.

The "unset" preference is represented by ``None`` everywhere, never by a
sentinel enum member.

Usage example::

    from meal_plan_organizer.taxonomy.frequency import (
        FrequencyPreference, parse_frequency_preference,
    )

    pref = parse_frequency_preference("OnceAWeek")   # FrequencyPreference.ONCE_A_WEEK
    pref = parse_frequency_preference("sometimes")   # None

This module has NO imports from any other ``meal_plan_organizer`` package.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Optional


class FrequencyPreference(StrEnum):
    """Target cadence for cooking a dish, as stated alongside a rating."""

    ONCE_A_WEEK = "OnceAWeek"
    """Weekly staple."""

    ONCE_A_MONTH = "OnceAMonth"
    """Monthly rotation."""

    A_FEW_TIMES_A_YEAR = "AFewTimesAYear"
    """Seasonal or occasional dish."""

    YEARLY = "Yearly"
    """Holiday or special-occasion dish."""

    NEVER = "Never"
    """Do not suggest this dish again."""


class ReasonCode(StrEnum):
    """Explanation tags attached to a scored recipe, in scoring-phase order."""

    # ── Rating phase ──────────────────────────────────────────────────────────
    HIGHLY_RATED = "HighlyRated"
    NEVER_RATED = "NeverRated"

    # ── Frequency phase ───────────────────────────────────────────────────────
    MEETS_FREQUENCY = "MeetsFrequency"
    MARKED_NEVER = "MarkedNever"

    # ── Recency phase ─────────────────────────────────────────────────────────
    NOT_COOKED_RECENTLY = "NotCookedRecently"
    NEVER_COOKED = "NeverCooked"


# Ideal number of days between cookings.  NEVER has no entry: the scorer
# short-circuits on it before any day arithmetic happens.
IDEAL_DAYS: dict[FrequencyPreference, int] = {
    FrequencyPreference.ONCE_A_WEEK:        7,
    FrequencyPreference.ONCE_A_MONTH:       30,
    FrequencyPreference.A_FEW_TIMES_A_YEAR: 90,
    FrequencyPreference.YEARLY:             365,
}

VALID_FREQUENCY_VALUES: frozenset[str] = frozenset(p.value for p in FrequencyPreference)


def parse_frequency_preference(value: object) -> Optional[FrequencyPreference]:
    """Map a stored preference value onto the closed enum.

    Anything outside the allow-list (``None``, empty strings, typos,
    non-string values) is treated as "no preference stated".

    Args:
        value: Raw value from storage or user input.

    Returns:
        The matching ``FrequencyPreference`` or ``None``.
    """
    if isinstance(value, FrequencyPreference):
        return value
    if not isinstance(value, str):
        return None
    value = value.strip()
    if value not in VALID_FREQUENCY_VALUES:
        return None
    return FrequencyPreference(value)
