"""
Weekly recurrence expansion.

Pure functions of their inputs: calling them twice with the same pattern
yields the same sequence. The service layer enforces the maximum number of
occurrences, so nothing here fails on a large range.
"""

from datetime import date, timedelta
from typing import List

from .types import LocalSlot
from .weekdays import normalize_day_of_week, weekday_of


def first_match(start_date: date, day_of_week: int) -> date:
    """First date on or after ``start_date`` that falls on ``day_of_week``."""
    days_until_target = (day_of_week - weekday_of(start_date)) % 7
    return start_date + timedelta(days=days_until_target)


def count_matches(start_date: date, end_date: date, day_of_week) -> int:
    """
    Number of dates in [start_date, end_date] falling on ``day_of_week``.

    Closed form, so a huge range can be rejected without iterating it.
    """
    if end_date < start_date:
        return 0
    first = first_match(start_date, normalize_day_of_week(day_of_week))
    if first > end_date:
        return 0
    return (end_date - first).days // 7 + 1


def expand(pattern) -> List[LocalSlot]:
    """
    Expand a weekly pattern into wall-clock slots, ordered by date.

    Args:
        pattern: Anything exposing ``day_of_week``, ``recurrence_start_date``,
            ``recurrence_end_date``, ``occurrence_start_time`` and
            ``occurrence_end_time`` (a RecurrenceSpec or RecurrencePattern)

    Returns:
        List of LocalSlot; empty when no weekday in range matches
    """
    start_date = pattern.recurrence_start_date
    end_date = pattern.recurrence_end_date
    if end_date < start_date:
        return []

    day_of_week = normalize_day_of_week(pattern.day_of_week)
    slots = []
    current_date = first_match(start_date, day_of_week)

    while current_date <= end_date:
        slots.append(LocalSlot(
            local_date=current_date,
            start_time=pattern.occurrence_start_time,
            end_time=pattern.occurrence_end_time,
        ))
        current_date += timedelta(days=7)

    return slots
