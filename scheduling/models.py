"""
Models for the scheduling core.

Occurrences are materialized: a recurring request stores its
RecurrencePattern and one Occurrence row per matching date, so conflict
checks and capacity checks always run against concrete rows.
"""

import uuid

from django.conf import settings
from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone

from .conf import get_setting
from .managers import (
    AvailabilityWindowManager,
    BookingManager,
    OccurrenceManager,
    RecurrencePatternManager,
    ResourceManager,
)
from .types import (
    DISPLAY_COMPLETED,
    DISPLAY_UPCOMING,
    STATUS_CANCELLED,
    STATUS_SCHEDULED,
    ResourceKind,
)
from .weekdays import DAY_CHOICES, day_name


def default_resource_timezone():
    return get_setting('DEFAULT_RESOURCE_TIMEZONE')


class Resource(models.Model):
    """
    A bookable entity contended over: a barber, court, room, location,
    program or team.

    Barbers, courts and rooms are exclusive (one occurrence at a time);
    the other kinds are shared and limited by capacity instead.
    """

    name = models.CharField(max_length=200)
    kind = models.CharField(max_length=20, choices=ResourceKind.CHOICES)
    timezone = models.CharField(
        max_length=64,
        default=default_resource_timezone,
        help_text="IANA timezone of the resource's wall clock"
    )
    owner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='owned_resources',
        help_text="User who manages this resource's availability (e.g. the barber)"
    )
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ResourceManager()

    class Meta:
        ordering = ['kind', 'name']

    def __str__(self):
        return f"{self.name} ({self.kind})"

    @property
    def is_exclusive(self):
        """Whether at most one occurrence may hold this resource at a time."""
        return self.kind in ResourceKind.EXCLUSIVE


class AvailabilityWindow(models.Model):
    """A resource's standing weekly permission to be booked on one day."""

    resource = models.ForeignKey(
        Resource,
        on_delete=models.CASCADE,
        related_name='availability_windows'
    )
    day_of_week = models.PositiveSmallIntegerField(
        choices=DAY_CHOICES,
        help_text="Canonical day of week (1=Monday, 7=Sunday)"
    )
    start_time = models.TimeField()
    end_time = models.TimeField()
    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = AvailabilityWindowManager()

    class Meta:
        ordering = ['resource', 'day_of_week']
        constraints = [
            models.UniqueConstraint(
                fields=['resource', 'day_of_week'],
                name='unique_window_per_resource_day',
            ),
        ]

    def __str__(self):
        flag = '' if self.is_active else ' [inactive]'
        return (
            f"{self.resource_id} {self.day_name} "
            f"{self.start_time.strftime('%H:%M')}-{self.end_time.strftime('%H:%M')}{flag}"
        )

    @property
    def day_name(self):
        return day_name(self.day_of_week)

    def contains(self, start_time, end_time):
        """Whether [start_time, end_time] lies entirely inside this window."""
        return self.start_time <= start_time and end_time <= self.end_time

    def clean(self):
        """Validate window data."""
        super().clean()

        if self.day_of_week not in dict(DAY_CHOICES):
            raise ValidationError({
                'day_of_week': 'Day of week must be between 1 (Monday) and 7 (Sunday).'
            })

        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValidationError({
                'end_time': 'End time must be after start time.'
            })

    def save(self, *args, **kwargs):
        """Save with validation."""
        self.full_clean()
        super().save(*args, **kwargs)


class RecurrencePattern(models.Model):
    """
    Stores the weekly rule a recurring request was created from.

    Actual occurrences are stored in the Occurrence model.
    """

    resource = models.ForeignKey(
        Resource,
        on_delete=models.CASCADE,
        related_name='recurrence_patterns',
        help_text="Contention resource the occurrences are booked against"
    )
    program = models.ForeignKey(
        Resource, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    location = models.ForeignKey(
        Resource, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    court = models.ForeignKey(
        Resource, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    team = models.ForeignKey(
        Resource, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )

    day_of_week = models.PositiveSmallIntegerField(
        choices=DAY_CHOICES,
        help_text="Day of week for recurring occurrences (1=Monday, 7=Sunday)"
    )
    recurrence_start_date = models.DateField()
    recurrence_end_date = models.DateField()
    occurrence_start_time = models.TimeField()
    occurrence_end_time = models.TimeField()
    capacity = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Fixed for every occurrence of the series (null = unbounded)"
    )
    timezone = models.CharField(
        max_length=64,
        help_text="Resource timezone at creation; wall times are read in it"
    )
    request_id = models.CharField(max_length=64)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = RecurrencePatternManager()

    class Meta:
        ordering = ['recurrence_start_date', 'occurrence_start_time']
        constraints = [
            models.UniqueConstraint(
                fields=['resource', 'request_id'],
                name='unique_pattern_per_request',
            ),
        ]

    def __str__(self):
        return (
            f"Every {self.weekday_name} at {self.occurrence_start_time.strftime('%H:%M')} "
            f"({self.recurrence_start_date} - {self.recurrence_end_date})"
        )

    @property
    def weekday_name(self):
        """Get human-readable weekday name."""
        return day_name(self.day_of_week)

    def clean(self):
        """Validate pattern data."""
        super().clean()

        if (self.occurrence_start_time and self.occurrence_end_time
                and self.occurrence_start_time >= self.occurrence_end_time):
            raise ValidationError({
                'occurrence_end_time': 'End time must be after start time.'
            })

    def save(self, *args, **kwargs):
        """Save with validation."""
        self.full_clean()
        super().save(*args, **kwargs)


class Occurrence(models.Model):
    """
    A single concrete, time-bounded booking against a resource.

    One-time occurrences: recurrence_pattern = null
    Recurring occurrences: reference their parent RecurrencePattern

    The primary key is derived from (resource, request id, local date), so a
    retried request maps onto the rows it already created.
    """

    STATUS_CHOICES = [
        (STATUS_SCHEDULED, 'Scheduled'),
        (STATUS_CANCELLED, 'Cancelled'),
    ]

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    resource = models.ForeignKey(
        Resource,
        on_delete=models.CASCADE,
        related_name='occurrences'
    )
    recurrence_pattern = models.ForeignKey(
        RecurrencePattern,
        on_delete=models.CASCADE,
        related_name='occurrences',
        null=True,
        blank=True,
        help_text="Parent pattern for recurring occurrences (null for one-time)"
    )
    program = models.ForeignKey(
        Resource, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    location = models.ForeignKey(
        Resource, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    court = models.ForeignKey(
        Resource, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )
    team = models.ForeignKey(
        Resource, on_delete=models.SET_NULL, null=True, blank=True, related_name='+'
    )

    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    local_date = models.DateField(help_text="Start date on the resource's wall clock")
    capacity = models.PositiveIntegerField(null=True, blank=True)

    status = models.CharField(
        max_length=20,
        choices=STATUS_CHOICES,
        default=STATUS_SCHEDULED
    )
    request_id = models.CharField(max_length=64)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = OccurrenceManager()

    class Meta:
        ordering = ['start_at']
        indexes = [
            models.Index(fields=['resource', 'start_at'], name='occurrence_resource_start_idx'),
            models.Index(fields=['start_at', 'status'], name='occurrence_start_status_idx'),
            models.Index(fields=['recurrence_pattern', 'start_at'], name='occurrence_pattern_start_idx'),
        ]

    def __str__(self):
        status_str = f" [{self.status}]" if self.status != STATUS_SCHEDULED else ""
        return f"{self.resource_id} - {self.start_at.strftime('%Y-%m-%d %H:%M')}{status_str}"

    @property
    def is_cancelled(self):
        return self.status == STATUS_CANCELLED

    @property
    def is_one_time(self):
        """Check if this is a one-time occurrence."""
        return self.recurrence_pattern_id is None

    @property
    def is_recurring(self):
        """Check if this is part of a recurring pattern."""
        return self.recurrence_pattern_id is not None

    @property
    def attendee_ids(self):
        return [a.customer_id for a in self.attendances.all()]

    def display_status(self, now=None):
        """
        Derived read-time status: cancelled, completed or upcoming.

        Completion is never stored; it follows from the clock.
        """
        if self.is_cancelled:
            return STATUS_CANCELLED
        now = now or timezone.now()
        return DISPLAY_COMPLETED if now > self.end_at else DISPLAY_UPCOMING

    def clean(self):
        """Validate occurrence data."""
        super().clean()

        if self.start_at and self.end_at and self.start_at >= self.end_at:
            raise ValidationError({
                'end_at': 'End must be after start.'
            })

    def save(self, *args, **kwargs):
        """Save with validation."""
        self.full_clean()
        super().save(*args, **kwargs)


class Attendance(models.Model):
    """A customer enrolled in an occurrence."""

    occurrence = models.ForeignKey(
        Occurrence,
        on_delete=models.CASCADE,
        related_name='attendances'
    )
    customer_id = models.CharField(max_length=64)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['created_at']
        constraints = [
            models.UniqueConstraint(
                fields=['occurrence', 'customer_id'],
                name='unique_attendee_per_occurrence',
            ),
        ]

    def __str__(self):
        return f"{self.customer_id} @ {self.occurrence_id}"


class Booking(models.Model):
    """
    A simple one-off reservation of a resource by one customer
    (e.g. a room or playground system session).

    Never produced by recurrence expansion; shares the overlap invariant and
    the per-resource lock with Occurrence.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    resource = models.ForeignKey(
        Resource,
        on_delete=models.CASCADE,
        related_name='bookings'
    )
    customer_id = models.CharField(max_length=64)
    start_at = models.DateTimeField()
    end_at = models.DateTimeField()
    request_id = models.CharField(max_length=64)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingManager()

    class Meta:
        ordering = ['start_at']
        indexes = [
            models.Index(fields=['resource', 'start_at'], name='booking_resource_start_idx'),
        ]

    def __str__(self):
        return f"{self.customer_id} - {self.start_at.strftime('%Y-%m-%d %H:%M')}"

    def clean(self):
        """Validate booking data."""
        super().clean()

        if self.start_at and self.end_at and self.start_at >= self.end_at:
            raise ValidationError({
                'end_at': 'End must be after start.'
            })

    def save(self, *args, **kwargs):
        """Save with validation."""
        self.full_clean()
        super().save(*args, **kwargs)
