"""
Capacity checks for occurrences.

A null capacity means unbounded. Capacity is fixed when an occurrence is
created; attendee additions are checked against it afterwards.
"""

from typing import Optional

from .exceptions import CapacityError, ValidationError
from .models import Occurrence
from .types import CheckResult

FULL = 'full'


def check_capacity(capacity: Optional[int], attendee_count: int) -> CheckResult:
    """Whether ``attendee_count`` attendees fit in ``capacity``."""
    if capacity is None:
        return CheckResult.success()
    if capacity < 0:
        raise ValidationError(
            "Capacity must be zero or greater",
            details={'capacity': capacity},
        )
    if attendee_count > capacity:
        return CheckResult(
            ok=False,
            code=FULL,
            reason=f"{attendee_count} attendee(s) exceed capacity {capacity}",
        )
    return CheckResult.success()


def can_add(occurrence: Occurrence, additional: int = 1) -> CheckResult:
    """Whether ``additional`` more attendees fit in the occurrence."""
    current = occurrence.attendances.count()
    result = check_capacity(occurrence.capacity, current + additional)
    if result.ok:
        return result
    return CheckResult(
        ok=False,
        code=FULL,
        reason=f"Occurrence {occurrence.pk} is full ({current}/{occurrence.capacity})",
        conflicting_id=str(occurrence.pk),
    )


def ensure_can_add(occurrence: Occurrence, additional: int = 1) -> None:
    """
    Raises:
        CapacityError: If the occurrence cannot take ``additional`` more attendees
    """
    result = can_add(occurrence, additional)
    if not result.ok:
        raise CapacityError(
            result.reason,
            details={
                'occurrence_id': str(occurrence.pk),
                'resource_id': occurrence.resource_id,
                'date': occurrence.local_date.isoformat(),
                'capacity': occurrence.capacity,
            },
        )
