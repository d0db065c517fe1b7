"""
Service layer for scheduling business logic.

Each booking request moves through
VALIDATING -> EXPANDING -> CHECKING -> COMMITTING -> DONE, or ends in
REJECTED (bad input) / ABORTED (conflict or capacity failure). A recurring
request is all-or-nothing: the first failing date aborts the whole batch and
nothing is written.

Check-then-act always runs under the per-resource lock (see ``db``); the
pure steps (expansion, timezone normalisation) run before taking it.
"""

import logging
import uuid
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from django.db import IntegrityError, transaction
from django.utils import timezone

from . import capacity, conflicts
from .conf import get_setting
from .db import locked_resource, storage_guard
from .exceptions import (
    CapacityError,
    ConflictError,
    NotFound,
    RangeTooLargeError,
    ValidationError,
)
from .models import Attendance, Booking, Occurrence, RecurrencePattern, Resource
from .recurrence import count_matches, expand
from .timezones import to_instant, to_local, to_utc
from .types import (
    DISPLAY_COMPLETED,
    DISPLAY_UPCOMING,
    STATUS_CANCELLED,
    STATUS_SCHEDULED,
    BookingState,
    Candidate,
    RecurrenceSpec,
    RecurringBookingRequest,
    ResourceRefs,
    SchedulingResult,
    SingleBookingRequest,
)
from .weekdays import normalize_day_of_week

logger = logging.getLogger(__name__)

REF_FIELDS = ('program', 'location', 'court', 'team')

LISTABLE_STATUSES = (STATUS_SCHEDULED, STATUS_CANCELLED, DISPLAY_UPCOMING, DISPLAY_COMPLETED)


def derive_occurrence_id(resource_id, request_id: str, local_date: date) -> str:
    """Deterministic identity of one occurrence of a request."""
    namespace = uuid.UUID(str(get_setting('OCCURRENCE_ID_NAMESPACE')))
    return str(uuid.uuid5(namespace, f"{resource_id}:{request_id}:{local_date.isoformat()}"))


def resolve_resource_id(resource_id=None, refs: Optional[ResourceRefs] = None):
    """
    Pick the contention resource of a request: an explicit resource, else
    the court, else the location.

    Raises:
        ValidationError: If none of them is given
    """
    refs = refs or ResourceRefs()
    for candidate in (resource_id, refs.court_id, refs.location_id):
        if candidate is not None:
            return candidate
    raise ValidationError(
        "A resource_id, court_id or location_id is required",
        details={'fields': ['resource_id', 'court_id', 'location_id']},
    )


def book_single(request: SingleBookingRequest) -> SchedulingResult:
    """
    Book one occurrence between two instants.

    Args:
        request: SingleBookingRequest

    Returns:
        SchedulingResult with the occurrence id

    Raises:
        ValidationError: If the request is malformed
        ConflictError: If the slot is unavailable or already taken
        CapacityError: If the initial attendees exceed the capacity
    """
    request_id = request.request_id or uuid.uuid4().hex
    _log_state(BookingState.VALIDATING, request_id, request.resource_id)

    try:
        resource = _get_resource(request.resource_id)
        start_at, end_at = _validate_interval(request.start_at, request.end_at)
        _validate_capacity(request.capacity)
        refs = _resolve_refs(request.refs)
        attendee_ids = _unique_attendees(request.attendee_ids)
    except ValidationError:
        _log_state(BookingState.REJECTED, request_id, request.resource_id)
        raise

    local_date, _ = to_local(start_at, resource.timezone)
    candidate = Candidate(
        occurrence_id=derive_occurrence_id(resource.pk, request_id, local_date),
        local_date=local_date,
        start_at=start_at,
        end_at=end_at,
    )
    return _commit_with_replay(
        resource_id=resource.pk,
        candidates=[candidate],
        request_id=request_id,
        refs=refs,
        capacity_limit=request.capacity,
        attendee_ids=attendee_ids,
    )


def book_recurring(request: RecurringBookingRequest) -> SchedulingResult:
    """
    Book one occurrence per matching weekday between two dates.

    Returns:
        SchedulingResult with every occurrence id of the series (empty when
        no date in range falls on the weekday)

    Raises:
        ValidationError: If the request is malformed
        RangeTooLargeError: If the series exceeds the configured maximum
        ConflictError: If any date is unavailable or already taken
        CapacityError: If the initial attendees exceed the capacity
    """
    request_id = request.request_id or uuid.uuid4().hex
    _log_state(BookingState.VALIDATING, request_id, request.resource_id)

    try:
        resource = _get_resource(request.resource_id)
        spec = RecurrenceSpec(
            day_of_week=normalize_day_of_week(request.day_of_week),
            recurrence_start_date=request.recurrence_start_date,
            recurrence_end_date=request.recurrence_end_date,
            occurrence_start_time=request.occurrence_start_time,
            occurrence_end_time=request.occurrence_end_time,
        )
        _validate_spec(spec)
        _validate_capacity(request.capacity)
        refs = _resolve_refs(request.refs)
        attendee_ids = _unique_attendees(request.attendee_ids)
    except ValidationError:
        _log_state(BookingState.REJECTED, request_id, request.resource_id)
        raise

    _log_state(BookingState.EXPANDING, request_id, resource.pk)
    count = count_matches(spec.recurrence_start_date, spec.recurrence_end_date, spec.day_of_week)
    limit = get_setting('MAX_OCCURRENCES_PER_REQUEST')
    if count > limit:
        _log_state(BookingState.REJECTED, request_id, resource.pk, count=count)
        raise RangeTooLargeError(
            f"Recurrence would create {count} occurrences; the maximum is {limit}",
            details={
                'resource_id': resource.pk,
                'date': spec.recurrence_start_date.isoformat(),
                'count': count,
                'max': limit,
            },
        )

    candidates = []
    for slot in expand(spec):
        start_at = to_instant(resource.timezone, slot.local_date, slot.start_time)
        end_at = to_instant(resource.timezone, slot.local_date, slot.end_time)
        if start_at >= end_at:
            _log_state(BookingState.REJECTED, request_id, resource.pk)
            raise ValidationError(
                f"{slot.local_date}: occurrence collapses across a DST transition",
                details={'resource_id': resource.pk, 'date': slot.local_date.isoformat()},
            )
        candidates.append(Candidate(
            occurrence_id=derive_occurrence_id(resource.pk, request_id, slot.local_date),
            local_date=slot.local_date,
            start_at=start_at,
            end_at=end_at,
        ))

    if not candidates:
        _log_state(BookingState.DONE, request_id, resource.pk, created_count=0)
        return SchedulingResult(occurrence_ids=[], created=0)

    pattern_fields = {
        'day_of_week': spec.day_of_week,
        'recurrence_start_date': spec.recurrence_start_date,
        'recurrence_end_date': spec.recurrence_end_date,
        'occurrence_start_time': spec.occurrence_start_time,
        'occurrence_end_time': spec.occurrence_end_time,
        'capacity': request.capacity,
        'timezone': resource.timezone,
    }
    return _commit_with_replay(
        resource_id=resource.pk,
        candidates=candidates,
        request_id=request_id,
        refs=refs,
        capacity_limit=request.capacity,
        attendee_ids=attendee_ids,
        pattern_fields=pattern_fields,
    )


def _commit_with_replay(**kwargs) -> SchedulingResult:
    """
    Commit a batch; if a concurrent retry of the same request won the race
    on the primary keys, answer with the rows it created.
    """
    try:
        return _commit(**kwargs)
    except IntegrityError:
        ids = [c.occurrence_id for c in kwargs['candidates']]
        found = set(
            str(pk) for pk in Occurrence.objects.filter(pk__in=ids).values_list('pk', flat=True)
        )
        if len(found) != len(ids):
            raise
        logger.info(
            "booking_replayed_after_race",
            extra={'request_id': kwargs['request_id'], 'resource_id': kwargs['resource_id']},
        )
        pattern = (
            RecurrencePattern.objects
            .for_request(kwargs['resource_id'], kwargs['request_id'])
            .first()
        )
        return SchedulingResult(
            occurrence_ids=ids,
            created=0,
            pattern_id=pattern.pk if pattern else None,
        )


def _commit(
    resource_id,
    candidates: List[Candidate],
    request_id: str,
    refs: Dict[str, Optional[Resource]],
    capacity_limit: Optional[int],
    attendee_ids: List[str],
    pattern_fields: Optional[dict] = None,
) -> SchedulingResult:
    ids = [c.occurrence_id for c in candidates]

    with locked_resource(resource_id, 'book') as resource:
        existing = {
            str(o.pk): o for o in Occurrence.objects.filter(pk__in=ids)
        }
        if existing:
            return _replay(resource, candidates, existing, request_id)
        if _request_used(resource, request_id):
            _log_state(BookingState.REJECTED, request_id, resource.pk)
            raise ValidationError(
                f"Request id {request_id} was already used for a different booking",
                details={
                    'resource_id': resource.pk,
                    'request_id': request_id,
                    'date': candidates[0].local_date.isoformat(),
                },
            )

        _log_state(BookingState.CHECKING, request_id, resource.pk, candidates=len(candidates))
        windows = conflicts.load_active_windows(resource)
        accepted: List[Candidate] = []
        for candidate in candidates:
            try:
                conflicts.assert_available(
                    resource,
                    candidate.start_at,
                    candidate.end_at,
                    pending=accepted,
                    windows=windows,
                )
                _ensure_initial_capacity(resource, candidate, capacity_limit, attendee_ids)
            except (ConflictError, CapacityError) as exc:
                _log_state(
                    BookingState.ABORTED, request_id, resource.pk,
                    date=candidate.local_date.isoformat(), reason=exc.code,
                )
                raise
            accepted.append(candidate)

        _log_state(BookingState.COMMITTING, request_id, resource.pk)
        pattern = None
        if pattern_fields is not None:
            pattern = RecurrencePattern(
                resource=resource,
                request_id=request_id,
                **pattern_fields,
                **refs,
            )
            pattern.save()

        Occurrence.objects.bulk_create([
            Occurrence(
                id=uuid.UUID(c.occurrence_id),
                resource=resource,
                recurrence_pattern=pattern,
                start_at=c.start_at,
                end_at=c.end_at,
                local_date=c.local_date,
                capacity=capacity_limit,
                status=STATUS_SCHEDULED,
                request_id=request_id,
                **refs,
            )
            for c in accepted
        ])
        if attendee_ids:
            Attendance.objects.bulk_create([
                Attendance(occurrence_id=uuid.UUID(c.occurrence_id), customer_id=customer_id)
                for c in accepted
                for customer_id in attendee_ids
            ])

    _log_state(BookingState.DONE, request_id, resource_id, created_count=len(accepted))
    logger.info(
        "occurrences_booked",
        extra={
            'request_id': request_id,
            'resource_id': resource_id,
            'created_count': len(accepted),
            'recurring': pattern is not None,
        },
    )
    return SchedulingResult(
        occurrence_ids=ids,
        created=len(accepted),
        pattern_id=pattern.pk if pattern else None,
    )


def _replay(resource, candidates, existing, request_id) -> SchedulingResult:
    """Answer a re-submitted request with the occurrences it already created."""
    for candidate in candidates:
        prior = existing.get(candidate.occurrence_id)
        if prior is None or prior.start_at != candidate.start_at or prior.end_at != candidate.end_at:
            raise ValidationError(
                f"Request id {request_id} was already used for a different booking",
                details={
                    'resource_id': resource.pk,
                    'request_id': request_id,
                    'date': candidate.local_date.isoformat(),
                },
            )

    pattern_ids = {o.recurrence_pattern_id for o in existing.values()}
    logger.info(
        "booking_replayed",
        extra={'request_id': request_id, 'resource_id': resource.pk, 'count': len(existing)},
    )
    return SchedulingResult(
        occurrence_ids=[c.occurrence_id for c in candidates],
        created=0,
        pattern_id=pattern_ids.pop() if len(pattern_ids) == 1 else None,
    )


def _request_used(resource, request_id) -> bool:
    """Whether an earlier request with this id already wrote rows on the resource."""
    return (
        Occurrence.objects.for_request(resource, request_id).exists()
        or RecurrencePattern.objects.for_request(resource, request_id).exists()
    )


def _ensure_initial_capacity(resource, candidate, capacity_limit, attendee_ids) -> None:
    result = capacity.check_capacity(capacity_limit, len(attendee_ids))
    if not result.ok:
        raise CapacityError(
            result.reason,
            details={
                'resource_id': resource.pk,
                'date': candidate.local_date.isoformat(),
                'capacity': capacity_limit,
            },
        )


def cancel_occurrence(occurrence_id) -> Occurrence:
    """
    Cancel an occurrence. Cancelling an already cancelled one is a no-op.

    Raises:
        NotFound: If the occurrence does not exist
    """
    occurrence = get_occurrence(occurrence_id)
    with locked_resource(occurrence.resource_id, 'cancel_occurrence'):
        occurrence.refresh_from_db()
        if occurrence.is_cancelled:
            return occurrence

        occurrence.status = STATUS_CANCELLED
        occurrence.cancelled_at = timezone.now()
        occurrence.save(update_fields=['status', 'cancelled_at', 'updated_at'])

    logger.info(
        "occurrence_cancelled",
        extra={'occurrence_id': str(occurrence.pk), 'resource_id': occurrence.resource_id},
    )
    return occurrence


def cancel_occurrences(occurrence_ids: Iterable) -> List[str]:
    """
    Cancel several occurrences in one transaction.

    Raises:
        NotFound: If any id does not exist (nothing is cancelled)
    """
    wanted = [str(_parse_uuid(value)) for value in occurrence_ids]
    if not wanted:
        raise ValidationError("At least one occurrence id is required", details={'fields': ['ids']})

    with storage_guard('cancel_occurrences'):
        with transaction.atomic():
            rows = list(Occurrence.objects.filter(pk__in=wanted))
            found = {str(o.pk) for o in rows}
            missing = [value for value in wanted if value not in found]
            if missing:
                raise NotFound(
                    f"Occurrence {missing[0]} does not exist",
                    details={'occurrence_id': missing[0]},
                )
            # Fixed lock order across resources.
            for resource_id in sorted({o.resource_id for o in rows}):
                Resource.objects.lock(resource_id)
            Occurrence.objects.filter(pk__in=wanted, status=STATUS_SCHEDULED).update(
                status=STATUS_CANCELLED,
                cancelled_at=timezone.now(),
                updated_at=timezone.now(),
            )

    logger.info("occurrences_cancelled", extra={'count': len(wanted)})
    return wanted


def cancel_series(pattern_id, from_datetime: Optional[datetime] = None) -> int:
    """
    Cancel the scheduled occurrences of a recurrence pattern.

    Args:
        pattern_id: RecurrencePattern id
        from_datetime: Only cancel occurrences starting at or after this instant

    Returns:
        Number of occurrences cancelled
    """
    try:
        pattern = RecurrencePattern.objects.get(pk=pattern_id)
    except (RecurrencePattern.DoesNotExist, ValueError, TypeError):
        raise NotFound(
            f"Recurrence {pattern_id} does not exist",
            details={'pattern_id': pattern_id},
        )

    with locked_resource(pattern.resource_id, 'cancel_series'):
        queryset = Occurrence.objects.for_pattern(pattern).scheduled()
        if from_datetime is not None:
            queryset = queryset.filter(start_at__gte=to_utc(from_datetime))
        now = timezone.now()
        cancelled = queryset.update(status=STATUS_CANCELLED, cancelled_at=now, updated_at=now)

    logger.info(
        "series_cancelled",
        extra={'pattern_id': pattern.pk, 'resource_id': pattern.resource_id, 'count': cancelled},
    )
    return cancelled


def add_attendee(occurrence_id, customer_id: str) -> Occurrence:
    """
    Enrol a customer. Enrolling the same customer twice is a no-op.

    Raises:
        NotFound: If the occurrence does not exist
        ValidationError: If the occurrence is cancelled
        CapacityError: If the occurrence is full
    """
    if not customer_id:
        raise ValidationError("customer_id is required", details={'fields': ['customer_id']})

    occurrence = get_occurrence(occurrence_id)
    with locked_resource(occurrence.resource_id, 'add_attendee'):
        occurrence.refresh_from_db()
        if occurrence.is_cancelled:
            raise ValidationError(
                "Cannot enrol in a cancelled occurrence",
                details={
                    'occurrence_id': str(occurrence.pk),
                    'date': occurrence.local_date.isoformat(),
                },
            )
        if occurrence.attendances.filter(customer_id=customer_id).exists():
            return occurrence

        capacity.ensure_can_add(occurrence)
        Attendance.objects.create(occurrence=occurrence, customer_id=customer_id)

    logger.info(
        "attendee_added",
        extra={'occurrence_id': str(occurrence.pk), 'customer_id': customer_id},
    )
    return occurrence


def remove_attendee(occurrence_id, customer_id: str) -> Occurrence:
    """
    Raises:
        NotFound: If the occurrence does not exist or the customer is not enrolled
    """
    occurrence = get_occurrence(occurrence_id)
    with locked_resource(occurrence.resource_id, 'remove_attendee'):
        deleted, _ = occurrence.attendances.filter(customer_id=customer_id).delete()
        if not deleted:
            raise NotFound(
                f"Customer {customer_id} is not enrolled",
                details={'occurrence_id': str(occurrence.pk), 'customer_id': customer_id},
            )
    return occurrence


def get_occurrence(occurrence_id) -> Occurrence:
    """
    Raises:
        NotFound: If the id is malformed or unknown
    """
    pk = _parse_uuid(occurrence_id)
    try:
        return Occurrence.objects.get(pk=pk)
    except Occurrence.DoesNotExist:
        raise NotFound(
            f"Occurrence {occurrence_id} does not exist",
            details={'occurrence_id': str(occurrence_id)},
        )


def get_occurrences_in_range(
    start_datetime: datetime,
    end_datetime: datetime,
    status: Optional[str] = None,
    resource_id=None,
) -> List[Occurrence]:
    """
    Get occurrences starting within a datetime range.

    Args:
        start_datetime: Range start
        end_datetime: Range end
        status: Optional filter ('scheduled', 'cancelled', or the derived
            'upcoming' / 'completed')
        resource_id: Optional contention resource filter

    Raises:
        ValidationError: If start_datetime >= end_datetime or the status is unknown
    """
    if start_datetime >= end_datetime:
        raise ValidationError("Start datetime must be before end datetime")

    queryset = Occurrence.objects.in_range(start_datetime, end_datetime)

    if resource_id is not None:
        queryset = queryset.filter(resource_id=resource_id)

    if status == DISPLAY_UPCOMING:
        queryset = queryset.upcoming()
    elif status == DISPLAY_COMPLETED:
        queryset = queryset.completed()
    elif status == STATUS_CANCELLED:
        queryset = queryset.cancelled()
    elif status == STATUS_SCHEDULED:
        queryset = queryset.scheduled()
    elif status:
        raise ValidationError(
            f"Unknown status: {status}",
            details={'status': status},
        )

    with storage_guard('list_occurrences'):
        return list(queryset.prefetch_related('attendances'))


def create_booking(
    resource_id,
    customer_id: str,
    start_at: datetime,
    end_at: datetime,
    request_id: Optional[str] = None,
) -> Booking:
    """
    Book a resource for one customer.

    A retry with the same request id returns the booking it created.

    Raises:
        ValidationError: If the input is malformed
        ConflictError: If the slot is unavailable or already taken
    """
    if not customer_id:
        raise ValidationError("customer_id is required", details={'fields': ['customer_id']})
    resource = _get_resource(resource_id)
    start_at, end_at = _validate_interval(start_at, end_at)
    request_id = request_id or uuid.uuid4().hex

    local_date, _ = to_local(start_at, resource.timezone)
    booking_id = derive_occurrence_id(resource.pk, request_id, local_date)

    with locked_resource(resource.pk, 'create_booking') as locked:
        prior = Booking.objects.filter(pk=booking_id).first()
        if prior is not None:
            if prior.start_at != start_at or prior.end_at != end_at:
                raise ValidationError(
                    f"Request id {request_id} was already used for a different booking",
                    details={'resource_id': locked.pk, 'request_id': request_id},
                )
            return prior

        conflicts.assert_available(locked, start_at, end_at)
        booking = Booking(
            id=uuid.UUID(booking_id),
            resource=locked,
            customer_id=customer_id,
            start_at=start_at,
            end_at=end_at,
            request_id=request_id,
        )
        booking.save(force_insert=True)

    logger.info(
        "booking_created",
        extra={'booking_id': booking_id, 'resource_id': resource.pk},
    )
    return booking


def update_booking(
    booking_id,
    start_at: Optional[datetime] = None,
    end_at: Optional[datetime] = None,
    customer_id: Optional[str] = None,
) -> Booking:
    """
    Reschedule or reassign a booking; the booking never conflicts with itself.

    Raises:
        NotFound: If the booking does not exist
        ConflictError: If the new slot is unavailable or taken
    """
    booking = get_booking(booking_id)
    with locked_resource(booking.resource_id, 'update_booking') as resource:
        booking.refresh_from_db()
        new_start, new_end = _validate_interval(
            start_at or booking.start_at,
            end_at or booking.end_at,
        )
        if (new_start, new_end) != (booking.start_at, booking.end_at):
            conflicts.assert_available(resource, new_start, new_end, exclude_ids=[booking.pk])
        booking.start_at = new_start
        booking.end_at = new_end
        if customer_id:
            booking.customer_id = customer_id
        booking.save()
    return booking


def delete_booking(booking_id) -> None:
    booking = get_booking(booking_id)
    with locked_resource(booking.resource_id, 'delete_booking'):
        booking.delete()
    logger.info("booking_deleted", extra={'booking_id': str(booking_id)})


def get_booking(booking_id) -> Booking:
    pk = _parse_uuid(booking_id)
    try:
        return Booking.objects.get(pk=pk)
    except Booking.DoesNotExist:
        raise NotFound(
            f"Booking {booking_id} does not exist",
            details={'booking_id': str(booking_id)},
        )


def _get_resource(resource_id) -> Resource:
    if resource_id is None:
        raise ValidationError("resource_id is required", details={'fields': ['resource_id']})
    try:
        resource = Resource.objects.get(pk=resource_id)
    except (Resource.DoesNotExist, ValueError, TypeError):
        raise NotFound(
            f"Resource {resource_id} does not exist",
            details={'resource_id': resource_id},
        )
    if not resource.is_active:
        raise ValidationError(
            f"Resource {resource.name} is not active",
            details={'resource_id': resource.pk},
        )
    return resource


def _resolve_refs(refs: Optional[ResourceRefs]) -> Dict[str, Optional[Resource]]:
    """Load the optional program/location/court/team references."""
    refs = refs or ResourceRefs()
    resolved = {}
    for name in REF_FIELDS:
        ref_id = getattr(refs, f"{name}_id")
        if ref_id is None:
            resolved[name] = None
            continue
        try:
            resolved[name] = Resource.objects.active().get(pk=ref_id)
        except (Resource.DoesNotExist, ValueError, TypeError):
            raise NotFound(
                f"{name.capitalize()} {ref_id} does not exist",
                details={f"{name}_id": ref_id},
            )
    return resolved


def _validate_interval(start_at: datetime, end_at: datetime):
    if start_at is None or end_at is None:
        raise ValidationError(
            "start_at and end_at are required",
            details={'fields': ['start_at', 'end_at']},
        )
    start_at, end_at = to_utc(start_at), to_utc(end_at)
    if start_at >= end_at:
        raise ValidationError(
            "start_at must be before end_at",
            details={'date': start_at.date().isoformat()},
        )
    return start_at, end_at


def _validate_spec(spec: RecurrenceSpec) -> None:
    missing = [
        name for name in (
            'recurrence_start_date', 'recurrence_end_date',
            'occurrence_start_time', 'occurrence_end_time',
        )
        if getattr(spec, name) is None
    ]
    if missing:
        raise ValidationError(
            f"Missing field(s): {', '.join(missing)}",
            details={'fields': missing},
        )
    if spec.occurrence_start_time >= spec.occurrence_end_time:
        raise ValidationError(
            "Event start time must be before event end time",
            details={'date': spec.recurrence_start_date.isoformat()},
        )


def _validate_capacity(value: Optional[int]) -> None:
    if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
        raise ValidationError(
            "Capacity must be a non-negative integer or null",
            details={'capacity': value},
        )


def _unique_attendees(attendee_ids: Iterable[str]) -> List[str]:
    seen = []
    for customer_id in attendee_ids or ():
        if customer_id and customer_id not in seen:
            seen.append(customer_id)
    return seen


def _parse_uuid(value) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (ValueError, TypeError, AttributeError):
        raise NotFound(f"{value} is not a valid id", details={'id': str(value)})


def _log_state(state: BookingState, request_id: str, resource_id, **extra) -> None:
    logger.debug(
        "booking_state",
        extra={
            'state': state.value,
            'request_id': request_id,
            'resource_id': resource_id,
            **extra,
        },
    )
