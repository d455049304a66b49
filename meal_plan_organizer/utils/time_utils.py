"""
Date utilities for weekly meal planning.

Key concepts:
  - Planning weeks start on Monday.
  - When no week is given, recommendations target the *next* Monday strictly
    after today (a Monday rolls forward a full week).
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

MONDAY = 0
WEEK_LENGTH_DAYS = 7


def next_monday(from_date: date) -> date:
    """Return the first Monday strictly after ``from_date``.

    Examples:
        Wednesday 2026-02-04 → Monday 2026-02-09
        Monday    2026-02-09 → Monday 2026-02-16
    """
    days_ahead = (MONDAY - from_date.weekday()) % WEEK_LENGTH_DAYS
    if days_ahead == 0:
        days_ahead = WEEK_LENGTH_DAYS
    return from_date + timedelta(days=days_ahead)


def week_end(week_start: date) -> date:
    """Return the last day (inclusive) of the week starting ``week_start``."""
    return week_start + timedelta(days=WEEK_LENGTH_DAYS - 1)


def days_between(earlier: date, later: date) -> int:
    """Return ``(later - earlier).days``; negative when ``earlier`` is after ``later``."""
    return (later - earlier).days


def parse_iso_date(value: str) -> date:
    """Parse ``YYYY-MM-DD``; datetime strings are truncated to their date.

    Raises:
        ValueError: If ``value`` is not an ISO date or datetime.
    """
    value = value.strip()
    try:
        return date.fromisoformat(value)
    except ValueError:
        return datetime.fromisoformat(value).date()


def utcnow() -> datetime:
    """Return the current UTC datetime with timezone info."""
    return datetime.now(tz=timezone.utc)
