"""
Conversion between a resource's wall-clock time and canonical UTC instants.

Storage and comparison always happen in UTC; local dates and times only
exist at the edges (recurrence expansion, availability windows).

DST handling is deterministic:

* ambiguous wall times (clocks fall back) resolve to the earlier instant,
  i.e. the first time the wall clock shows that value;
* non-existent wall times (clocks spring forward) are read with the offset in
  force before the transition, which moves them forward by the length of the
  gap (02:30 inside a one-hour gap becomes 03:30).
"""

import logging
from datetime import date, datetime, time, timezone as dt_timezone
from typing import Tuple
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

UTC = dt_timezone.utc

NORMAL = 'normal'
AMBIGUOUS = 'ambiguous'
NONEXISTENT = 'nonexistent'


def get_zone(tz_name: str) -> ZoneInfo:
    """
    Resolve an IANA timezone name.

    Raises:
        ValidationError: If the name is empty or unknown
    """
    if not tz_name:
        raise ValidationError("Timezone is required")
    try:
        return ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValidationError(
            f"Unknown timezone: {tz_name}",
            details={'timezone': tz_name},
        )


def classify_local_time(tz_name: str, local_date: date, local_time: time) -> str:
    """Report whether a wall time is normal, ambiguous or non-existent in a zone."""
    zone = get_zone(tz_name)
    naive = datetime.combine(local_date, local_time)
    first = naive.replace(tzinfo=zone, fold=0)
    second = naive.replace(tzinfo=zone, fold=1)

    round_trip = first.astimezone(UTC).astimezone(zone).replace(tzinfo=None)
    if round_trip != naive:
        return NONEXISTENT
    if first.utcoffset() != second.utcoffset():
        return AMBIGUOUS
    return NORMAL


def to_instant(tz_name: str, local_date: date, local_time: time) -> datetime:
    """
    Convert a wall-clock date and time in ``tz_name`` to an aware UTC datetime.

    Args:
        tz_name: IANA timezone of the resource
        local_date: Calendar date on the resource's wall clock
        local_time: Time of day on the resource's wall clock

    Returns:
        Aware datetime in UTC
    """
    zone = get_zone(tz_name)
    naive = datetime.combine(local_date, local_time.replace(tzinfo=None))
    kind = classify_local_time(tz_name, local_date, local_time)
    if kind != NORMAL:
        logger.warning(
            "dst_transition_resolved",
            extra={
                'timezone': tz_name,
                'local': naive.isoformat(),
                'kind': kind,
            },
        )
    # fold=0 gives the earlier instant for ambiguous times and the
    # pre-transition offset for non-existent ones.
    return naive.replace(tzinfo=zone, fold=0).astimezone(UTC)


def to_local(instant: datetime, tz_name: str) -> Tuple[date, time]:
    """
    Convert an aware instant to the wall-clock (date, time) in ``tz_name``.

    Raises:
        ValidationError: If the instant is naive
    """
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValidationError(
            "Instant must be timezone-aware",
            details={'instant': instant.isoformat()},
        )
    local = instant.astimezone(get_zone(tz_name))
    return local.date(), local.time().replace(tzinfo=None, fold=0)


def to_utc(instant: datetime) -> datetime:
    """Normalize an aware datetime to UTC."""
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValidationError(
            "Instant must be timezone-aware",
            details={'instant': instant.isoformat()},
        )
    return instant.astimezone(UTC)
