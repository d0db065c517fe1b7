"""
Custom managers and querysets for scheduling models.

QuerySets define chainable query methods.
Managers use QuerySets to enable method chaining.
No business logic should be here - only query operations.
"""

from django.db import models
from django.utils import timezone


class ResourceQuerySet(models.QuerySet):
    """Custom queryset for Resource model with chainable methods."""

    def active(self):
        """Get all active resources."""
        return self.filter(is_active=True)


class ResourceManager(models.Manager):
    """Custom manager for Resource model."""

    def get_queryset(self):
        """Return custom queryset for method chaining."""
        return ResourceQuerySet(self.model, using=self._db)

    def active(self):
        return self.get_queryset().active()

    def lock(self, pk):
        """
        Fetch a resource row with a write lock held until the surrounding
        transaction ends.

        Must be called inside ``transaction.atomic()``.
        """
        return self.get_queryset().select_for_update().get(pk=pk)


class AvailabilityWindowQuerySet(models.QuerySet):
    """Custom queryset for AvailabilityWindow model with chainable methods."""

    def for_resource(self, resource):
        return self.filter(resource=resource)

    def active(self):
        """Get windows that currently allow bookings."""
        return self.filter(is_active=True)

    def for_day(self, day_of_week):
        """
        Get windows for a canonical day.

        Args:
            day_of_week: int (1=Monday, 7=Sunday)
        """
        return self.filter(day_of_week=day_of_week)


class AvailabilityWindowManager(models.Manager):
    """Custom manager for AvailabilityWindow model."""

    def get_queryset(self):
        """Return custom queryset for method chaining."""
        return AvailabilityWindowQuerySet(self.model, using=self._db)

    def for_resource(self, resource):
        return self.get_queryset().for_resource(resource)

    def active(self):
        return self.get_queryset().active()


class RecurrencePatternQuerySet(models.QuerySet):
    """Custom queryset for RecurrencePattern model with chainable methods."""

    def for_resource(self, resource):
        return self.filter(resource=resource)

    def for_request(self, resource, request_id):
        """Get the pattern created by a given idempotency key."""
        return self.filter(resource=resource, request_id=request_id)


class RecurrencePatternManager(models.Manager):
    """Custom manager for RecurrencePattern model."""

    def get_queryset(self):
        """Return custom queryset for method chaining."""
        return RecurrencePatternQuerySet(self.model, using=self._db)

    def for_resource(self, resource):
        return self.get_queryset().for_resource(resource)

    def for_request(self, resource, request_id):
        return self.get_queryset().for_request(resource, request_id)


class OccurrenceQuerySet(models.QuerySet):
    """Custom queryset for Occurrence model with chainable methods."""

    def scheduled(self):
        """Get all non-cancelled occurrences."""
        return self.filter(status='scheduled')

    def cancelled(self):
        return self.filter(status='cancelled')

    def upcoming(self, now=None):
        """Get scheduled occurrences that have not ended yet."""
        now = now or timezone.now()
        return self.scheduled().filter(end_at__gte=now)

    def completed(self, now=None):
        """Get scheduled occurrences whose end has passed."""
        now = now or timezone.now()
        return self.scheduled().filter(end_at__lt=now)

    def for_resource(self, resource):
        return self.filter(resource=resource)

    def for_pattern(self, pattern):
        """
        Get all occurrences for a specific recurrence pattern.

        Args:
            pattern: RecurrencePattern instance or id
        """
        return self.filter(recurrence_pattern=pattern)

    def for_request(self, resource, request_id):
        """Get the occurrences written by a given idempotency key."""
        return self.filter(resource=resource, request_id=request_id)

    def in_range(self, start_datetime, end_datetime):
        """
        Get occurrences starting within a datetime range.

        Args:
            start_datetime: datetime object
            end_datetime: datetime object
        """
        return self.filter(
            start_at__gte=start_datetime,
            start_at__lte=end_datetime
        )

    def overlapping(self, start_at, end_at):
        """Get occurrences whose half-open interval intersects [start_at, end_at)."""
        return self.filter(start_at__lt=end_at, end_at__gt=start_at)


class OccurrenceManager(models.Manager):
    """Custom manager for Occurrence model."""

    def get_queryset(self):
        """Return custom queryset for method chaining."""
        return OccurrenceQuerySet(self.model, using=self._db)

    def scheduled(self):
        return self.get_queryset().scheduled()

    def cancelled(self):
        return self.get_queryset().cancelled()

    def upcoming(self, now=None):
        return self.get_queryset().upcoming(now)

    def completed(self, now=None):
        return self.get_queryset().completed(now)

    def for_resource(self, resource):
        return self.get_queryset().for_resource(resource)

    def for_pattern(self, pattern):
        return self.get_queryset().for_pattern(pattern)

    def for_request(self, resource, request_id):
        return self.get_queryset().for_request(resource, request_id)

    def in_range(self, start_datetime, end_datetime):
        return self.get_queryset().in_range(start_datetime, end_datetime)


class BookingQuerySet(models.QuerySet):
    """Custom queryset for Booking model with chainable methods."""

    def for_resource(self, resource):
        return self.filter(resource=resource)

    def overlapping(self, start_at, end_at):
        """Get bookings whose half-open interval intersects [start_at, end_at)."""
        return self.filter(start_at__lt=end_at, end_at__gt=start_at)


class BookingManager(models.Manager):
    """Custom manager for Booking model."""

    def get_queryset(self):
        """Return custom queryset for method chaining."""
        return BookingQuerySet(self.model, using=self._db)

    def for_resource(self, resource):
        return self.get_queryset().for_resource(resource)
