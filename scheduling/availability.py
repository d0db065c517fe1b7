"""
Availability window store.

Each resource holds at most one window per canonical day of week. Day
numbers are normalized on every write and lookup; see ``weekdays``.
"""

import logging
from datetime import time
from typing import Iterable, List, Mapping, Optional, Union

from .db import locked_resource, storage_guard
from .exceptions import AlreadyExists, InvalidRange, NotFound, ValidationError
from .models import AvailabilityWindow, Resource
from .types import WindowData
from .weekdays import CANONICAL_DAYS, day_name, normalize_day_of_week

logger = logging.getLogger(__name__)

WindowInput = Union[WindowData, Mapping]


def can_manage(user, resource: Resource) -> bool:
    """Owners manage their own windows; staff and superusers manage any."""
    if user is None or not user.is_authenticated:
        return False
    if user.is_staff or user.is_superuser:
        return True
    return resource.owner_id is not None and resource.owner_id == user.pk


def coerce_window(entry: WindowInput) -> WindowData:
    """
    Validate one window entry and canonicalise its day.

    Raises:
        ValidationError: If a field is missing or malformed
        InvalidRange: If start_time is not before end_time
    """
    if isinstance(entry, WindowData):
        data = entry
    else:
        missing = [
            key for key in ('day_of_week', 'start_time', 'end_time')
            if entry.get(key) is None
        ]
        if missing:
            raise ValidationError(
                f"Missing availability field(s): {', '.join(missing)}",
                details={'fields': missing},
            )
        data = WindowData(
            day_of_week=entry['day_of_week'],
            start_time=entry['start_time'],
            end_time=entry['end_time'],
            is_active=entry.get('is_active', True),
        )

    day = normalize_day_of_week(data.day_of_week)
    if not isinstance(data.start_time, time) or not isinstance(data.end_time, time):
        raise ValidationError(
            "start_time and end_time must be times of day",
            details={'day_of_week': day},
        )
    if data.start_time >= data.end_time:
        raise InvalidRange(
            f"{day_name(day)}: start time {data.start_time:%H:%M} must be before "
            f"end time {data.end_time:%H:%M}",
            details={'day_of_week': day},
        )
    return WindowData(
        day_of_week=day,
        start_time=data.start_time,
        end_time=data.end_time,
        is_active=bool(data.is_active),
    )


def list_windows(resource: Resource) -> List[AvailabilityWindow]:
    """All windows of a resource, Monday first."""
    with storage_guard('list_windows', resource_id=resource.pk):
        return list(AvailabilityWindow.objects.for_resource(resource).order_by('day_of_week'))


def list_active(resource: Resource) -> List[AvailabilityWindow]:
    """Windows of a resource that currently allow bookings."""
    with storage_guard('list_active_windows', resource_id=resource.pk):
        return list(
            AvailabilityWindow.objects.for_resource(resource).active().order_by('day_of_week')
        )


def get_window(resource: Resource, day_of_week) -> Optional[AvailabilityWindow]:
    day = normalize_day_of_week(day_of_week)
    return AvailabilityWindow.objects.for_resource(resource).for_day(day).first()


def create_window(resource: Resource, entry: WindowInput) -> AvailabilityWindow:
    """
    Create a window through the single-create path.

    Raises:
        InvalidRange: If start_time >= end_time
        AlreadyExists: If the resource already has a window on that day
    """
    data = coerce_window(entry)
    with locked_resource(resource.pk, 'create_window') as locked:
        if AvailabilityWindow.objects.for_resource(locked).for_day(data.day_of_week).exists():
            raise AlreadyExists(
                f"{day_name(data.day_of_week)} already has an availability window",
                details={'resource_id': locked.pk, 'day_of_week': data.day_of_week},
            )
        window = AvailabilityWindow(resource=locked, **_window_fields(data))
        window.save()

    logger.info(
        "availability_window_created",
        extra={'resource_id': resource.pk, 'day_of_week': data.day_of_week},
    )
    return window


def update_window(
    resource: Resource,
    day_of_week,
    start_time: Optional[time] = None,
    end_time: Optional[time] = None,
    is_active: Optional[bool] = None,
) -> AvailabilityWindow:
    """
    Update the existing window for one day; unset arguments keep their value.

    Raises:
        NotFound: If there is no window for that day
        InvalidRange: If the resulting start_time >= end_time
    """
    day = normalize_day_of_week(day_of_week)
    with locked_resource(resource.pk, 'update_window') as locked:
        window = AvailabilityWindow.objects.for_resource(locked).for_day(day).first()
        if window is None:
            raise NotFound(
                f"No availability window on {day_name(day)}",
                details={'resource_id': locked.pk, 'day_of_week': day},
            )
        data = coerce_window(WindowData(
            day_of_week=day,
            start_time=start_time if start_time is not None else window.start_time,
            end_time=end_time if end_time is not None else window.end_time,
            is_active=is_active if is_active is not None else window.is_active,
        ))
        _apply_window(window, data)
        window.save()

    logger.info(
        "availability_window_updated",
        extra={'resource_id': resource.pk, 'day_of_week': day},
    )
    return window


def upsert_window(resource: Resource, entry: WindowInput) -> AvailabilityWindow:
    """Create or update the window for the entry's day."""
    data = coerce_window(entry)
    with locked_resource(resource.pk, 'upsert_window') as locked:
        window = AvailabilityWindow.objects.for_resource(locked).for_day(data.day_of_week).first()
        if window is None:
            window = AvailabilityWindow(resource=locked)
        _apply_window(window, data)
        window.save()
    return window


def bulk_replace(resource: Resource, entries: Iterable[WindowInput]) -> List[AvailabilityWindow]:
    """
    Replace all seven day slots of a resource in one transaction.

    Every entry is validated before anything is written; one bad entry, a
    missing day or a duplicated day fails the whole call and leaves the
    existing windows untouched.

    Raises:
        ValidationError: If the entries are not exactly one per canonical day
        InvalidRange: If any entry has start_time >= end_time
    """
    validated = [coerce_window(entry) for entry in entries]

    days = [data.day_of_week for data in validated]
    duplicates = sorted({day for day in days if days.count(day) > 1})
    if duplicates:
        raise ValidationError(
            "Each day of week may appear only once",
            details={'duplicate_days': duplicates},
        )
    missing = [day for day in CANONICAL_DAYS if day not in days]
    if missing:
        raise ValidationError(
            "Bulk availability must cover all seven days",
            details={'missing_days': missing},
        )

    with locked_resource(resource.pk, 'bulk_replace_windows') as locked:
        existing = {
            window.day_of_week: window
            for window in AvailabilityWindow.objects.for_resource(locked)
        }
        windows = []
        for data in sorted(validated, key=lambda d: d.day_of_week):
            window = existing.get(data.day_of_week) or AvailabilityWindow(resource=locked)
            _apply_window(window, data)
            window.save()
            windows.append(window)

    logger.info(
        "availability_replaced",
        extra={
            'resource_id': resource.pk,
            'active_days': [w.day_of_week for w in windows if w.is_active],
        },
    )
    return windows


def delete_window(resource: Resource, day_of_week) -> None:
    """
    Remove the window for one day.

    Raises:
        NotFound: If there is no window for that day
    """
    day = normalize_day_of_week(day_of_week)
    with locked_resource(resource.pk, 'delete_window') as locked:
        deleted, _ = AvailabilityWindow.objects.for_resource(locked).for_day(day).delete()
        if not deleted:
            raise NotFound(
                f"No availability window on {day_name(day)}",
                details={'resource_id': locked.pk, 'day_of_week': day},
            )


def _window_fields(data: WindowData) -> dict:
    return {
        'day_of_week': data.day_of_week,
        'start_time': data.start_time,
        'end_time': data.end_time,
        'is_active': data.is_active,
    }


def _apply_window(window: AvailabilityWindow, data: WindowData) -> None:
    for field_name, value in _window_fields(data).items():
        setattr(window, field_name, value)
