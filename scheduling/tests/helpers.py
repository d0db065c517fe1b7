"""Shared fixtures for the scheduling tests."""

from datetime import datetime, time, timezone as dt_timezone

from scheduling.models import AvailabilityWindow, Resource
from scheduling.types import ResourceKind
from scheduling.weekdays import CANONICAL_DAYS

UTC = dt_timezone.utc


def utc(*args):
    """Aware UTC datetime shorthand."""
    return datetime(*args, tzinfo=UTC)


def make_resource(name='Chair 1', kind=ResourceKind.BARBER, tz='UTC', owner=None):
    return Resource.objects.create(name=name, kind=kind, timezone=tz, owner=owner)


def open_all_week(resource, start=time(9, 0), end=time(17, 0)):
    """Give a resource the same active window on every day."""
    return [
        AvailabilityWindow.objects.create(
            resource=resource,
            day_of_week=day,
            start_time=start,
            end_time=end,
        )
        for day in CANONICAL_DAYS
    ]


def week_entries(start=time(9, 0), end=time(17, 0), days=CANONICAL_DAYS):
    return [
        {'day_of_week': day, 'start_time': start, 'end_time': end}
        for day in days
    ]
