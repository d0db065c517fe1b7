"""
Conflict detection for candidate occurrences and bookings.

Two checks run for every candidate:

1. availability: start and end, read on the resource's wall clock, must fall
   inside one active window on the same day;
2. overlap: exclusive resources may not hold two intervals that intersect
   (half-open, so back-to-back slots are fine). Shared resources skip this
   and are limited by capacity instead.
"""

from datetime import datetime, time, timedelta
from typing import Dict, Iterable, Optional

from .exceptions import ConflictError
from .models import AvailabilityWindow, Booking, Occurrence, Resource
from .timezones import to_local
from .types import Candidate, CheckResult
from .weekdays import day_name, weekday_of

NO_WINDOW = 'no_availability'
OUTSIDE_WINDOW = 'outside_availability'
CROSSES_DAY = 'crosses_day'
OVERLAP = 'overlap'

# Latest end a TimeField window can hold; such a window runs to midnight.
LAST_MINUTE = time(23, 59)


def load_active_windows(resource: Resource) -> Dict[int, AvailabilityWindow]:
    """Active windows of a resource keyed by canonical day."""
    return {
        window.day_of_week: window
        for window in AvailabilityWindow.objects.for_resource(resource).active()
    }


def check_availability(
    resource: Resource,
    start_at: datetime,
    end_at: datetime,
    windows: Optional[Dict[int, AvailabilityWindow]] = None,
) -> CheckResult:
    """Check that [start_at, end_at] sits inside one active window of the resource."""
    if windows is None:
        windows = load_active_windows(resource)

    start_date, start_time = to_local(start_at, resource.timezone)
    end_date, end_time = to_local(end_at, resource.timezone)
    # Ending on the stroke of midnight closes the start day.
    ends_at_midnight = end_date == start_date + timedelta(days=1) and end_time == time(0, 0)

    if start_date != end_date and not ends_at_midnight:
        return CheckResult(
            ok=False,
            code=CROSSES_DAY,
            reason=(
                f"{resource.name}: {start_date} {start_time:%H:%M} to "
                f"{end_date} {end_time:%H:%M} spans more than one day"
            ),
        )

    day = weekday_of(start_date)
    window = windows.get(day)
    if window is None:
        return CheckResult(
            ok=False,
            code=NO_WINDOW,
            reason=f"{resource.name} has no availability on {day_name(day)} ({start_date})",
        )

    if ends_at_midnight:
        fits = window.start_time <= start_time and window.end_time >= LAST_MINUTE
    else:
        fits = window.contains(start_time, end_time)
    if not fits:
        return CheckResult(
            ok=False,
            code=OUTSIDE_WINDOW,
            reason=(
                f"{resource.name}: {start_date} {start_time:%H:%M}-{end_time:%H:%M} is outside "
                f"availability {window.start_time:%H:%M}-{window.end_time:%H:%M}"
            ),
        )

    return CheckResult.success()


def check_overlap(
    resource: Resource,
    start_at: datetime,
    end_at: datetime,
    pending: Iterable[Candidate] = (),
    exclude_ids: Iterable = (),
) -> CheckResult:
    """
    Check an exclusive resource for intersecting intervals.

    Args:
        resource: Resource being booked
        start_at: Candidate start (UTC)
        end_at: Candidate end (UTC)
        pending: Candidates already accepted earlier in the same request
        exclude_ids: Rows to ignore (the row being rescheduled)
    """
    for other in pending:
        if other.start_at < end_at and other.end_at > start_at:
            return _overlap_result(resource, other.occurrence_id, other.start_at)

    exclude_ids = list(exclude_ids)

    occurrence = (
        Occurrence.objects.for_resource(resource)
        .scheduled()
        .overlapping(start_at, end_at)
        .exclude(pk__in=exclude_ids)
        .order_by('start_at')
        .first()
    )
    if occurrence is not None:
        return _overlap_result(resource, str(occurrence.pk), occurrence.start_at)

    booking = (
        Booking.objects.for_resource(resource)
        .overlapping(start_at, end_at)
        .exclude(pk__in=exclude_ids)
        .order_by('start_at')
        .first()
    )
    if booking is not None:
        return _overlap_result(resource, str(booking.pk), booking.start_at, label='booking')

    return CheckResult.success()


def check(
    resource: Resource,
    start_at: datetime,
    end_at: datetime,
    pending: Iterable[Candidate] = (),
    exclude_ids: Iterable = (),
    windows: Optional[Dict[int, AvailabilityWindow]] = None,
) -> CheckResult:
    """Run the availability check, then the overlap check for exclusive resources."""
    result = check_availability(resource, start_at, end_at, windows)
    if not result.ok:
        return result
    if resource.is_exclusive:
        return check_overlap(resource, start_at, end_at, pending, exclude_ids)
    return result


def assert_available(
    resource: Resource,
    start_at: datetime,
    end_at: datetime,
    pending: Iterable[Candidate] = (),
    exclude_ids: Iterable = (),
    windows: Optional[Dict[int, AvailabilityWindow]] = None,
) -> None:
    """
    Raise ConflictError naming the offending date if ``check`` fails.

    Raises:
        ConflictError: On availability or overlap violations
    """
    result = check(resource, start_at, end_at, pending, exclude_ids, windows)
    if result.ok:
        return

    local_date, _ = to_local(start_at, resource.timezone)
    details = {
        'resource_id': resource.pk,
        'date': local_date.isoformat(),
        'start_at': start_at.isoformat(),
        'reason': result.code,
    }
    if result.conflicting_id:
        details['conflicting_id'] = result.conflicting_id
    raise ConflictError(result.reason, details=details)


def _overlap_result(resource, conflicting_id, existing_start, label='occurrence') -> CheckResult:
    local_date, local_time = to_local(existing_start, resource.timezone)
    return CheckResult(
        ok=False,
        code=OVERLAP,
        reason=(
            f"{resource.name} is already booked at {local_date} {local_time:%H:%M} "
            f"({label} {conflicting_id})"
        ),
        conflicting_id=conflicting_id,
    )
