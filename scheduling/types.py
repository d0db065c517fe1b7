"""
Data types and constants for the scheduling core.

This module contains:
- Request variants (single vs recurring) handed to the service layer
- Value objects produced by expansion and validation
- Constants used across the application
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import List, Optional


STATUS_SCHEDULED = 'scheduled'
STATUS_CANCELLED = 'cancelled'

# Read-time statuses; never stored.
DISPLAY_UPCOMING = 'upcoming'
DISPLAY_COMPLETED = 'completed'


class ResourceKind:
    BARBER = 'barber'
    COURT = 'court'
    ROOM = 'room'
    LOCATION = 'location'
    PROGRAM = 'program'
    TEAM = 'team'

    CHOICES = [
        (BARBER, 'Barber'),
        (COURT, 'Court'),
        (ROOM, 'Room'),
        (LOCATION, 'Location'),
        (PROGRAM, 'Program'),
        (TEAM, 'Team'),
    ]

    # Kinds that can host at most one occurrence at a time.
    EXCLUSIVE = frozenset({BARBER, COURT, ROOM})


class BookingState(str, Enum):
    """Lifecycle of one booking request inside the service."""
    VALIDATING = 'validating'
    EXPANDING = 'expanding'
    CHECKING = 'checking'
    COMMITTING = 'committing'
    DONE = 'done'
    REJECTED = 'rejected'
    ABORTED = 'aborted'


@dataclass(frozen=True)
class ResourceRefs:
    """Optional references carried by an occurrence besides its contention resource."""
    program_id: Optional[int] = None
    location_id: Optional[int] = None
    court_id: Optional[int] = None
    team_id: Optional[int] = None


@dataclass
class SingleBookingRequest:
    """One-off booking between two instants."""
    resource_id: int
    start_at: datetime
    end_at: datetime
    refs: ResourceRefs = field(default_factory=ResourceRefs)
    capacity: Optional[int] = None
    request_id: Optional[str] = None
    attendee_ids: List[str] = field(default_factory=list)


@dataclass
class RecurringBookingRequest:
    """Weekly booking on one weekday between two calendar dates."""
    resource_id: int
    day_of_week: int
    recurrence_start_date: date
    recurrence_end_date: date
    occurrence_start_time: time
    occurrence_end_time: time
    refs: ResourceRefs = field(default_factory=ResourceRefs)
    capacity: Optional[int] = None
    request_id: Optional[str] = None
    attendee_ids: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class RecurrenceSpec:
    """Input to the recurrence expander."""
    day_of_week: int
    recurrence_start_date: date
    recurrence_end_date: date
    occurrence_start_time: time
    occurrence_end_time: time


@dataclass(frozen=True)
class LocalSlot:
    """One expanded candidate on the resource's wall clock."""
    local_date: date
    start_time: time
    end_time: time


@dataclass(frozen=True)
class Candidate:
    """An expanded candidate normalized to UTC, with its derived identity."""
    occurrence_id: str
    local_date: date
    start_at: datetime
    end_at: datetime


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a conflict or capacity check."""
    ok: bool
    reason: str = ''
    code: str = ''
    conflicting_id: Optional[str] = None

    @classmethod
    def success(cls) -> 'CheckResult':
        return cls(ok=True)


@dataclass
class SchedulingResult:
    """What a booking request returns on success."""
    occurrence_ids: List[str]
    created: int
    pattern_id: Optional[int] = None
    state: BookingState = BookingState.DONE


@dataclass
class WindowData:
    """Validated input for one availability window."""
    day_of_week: int
    start_time: time
    end_time: time
    is_active: bool = True

