"""
Serializers for the scheduling API.

Request serializers validate shape and types, then hand the service layer a
tagged request dataclass via ``to_request()``. Business rules (availability,
overlap, capacity) are left to the services.
"""

from collections.abc import Mapping

from rest_framework import serializers

from . import exceptions
from .models import AvailabilityWindow, Booking, Occurrence
from .services import LISTABLE_STATUSES, resolve_resource_id
from .types import RecurringBookingRequest, ResourceRefs, SingleBookingRequest
from .weekdays import normalize_day_of_week


class DayOfWeekField(serializers.Field):
    """
    Accepts 0..7 (0 and 7 both mean Sunday), numeric strings and weekday
    names; always emits the canonical 1..7 value.
    """

    default_error_messages = {
        'invalid': 'Day of week must be 0..7 or a weekday name.',
    }

    def to_internal_value(self, data):
        try:
            return normalize_day_of_week(data)
        except exceptions.ValidationError:
            self.fail('invalid')

    def to_representation(self, value):
        return value


class BookingRequestSerializer(serializers.Serializer):
    """Fields shared by the one-time and recurring booking requests."""

    resource_id = serializers.IntegerField(required=False, allow_null=True)
    program_id = serializers.IntegerField(required=False, allow_null=True)
    location_id = serializers.IntegerField(required=False, allow_null=True)
    court_id = serializers.IntegerField(required=False, allow_null=True)
    team_id = serializers.IntegerField(required=False, allow_null=True)
    capacity = serializers.IntegerField(required=False, allow_null=True, min_value=0)
    request_id = serializers.CharField(required=False, allow_blank=False, max_length=64)
    attendee_ids = serializers.ListField(
        child=serializers.CharField(max_length=64),
        required=False,
        default=list,
    )

    def validate(self, data):
        """Resolve the contention resource."""
        try:
            data['resource_id'] = resolve_resource_id(data.get('resource_id'), self._refs(data))
        except exceptions.ValidationError as exc:
            raise serializers.ValidationError({'resource_id': exc.message})
        return data

    def _refs(self, data):
        return ResourceRefs(
            program_id=data.get('program_id'),
            location_id=data.get('location_id'),
            court_id=data.get('court_id'),
            team_id=data.get('team_id'),
        )


class OneTimeEventSerializer(BookingRequestSerializer):
    """Serializer for booking a single occurrence."""

    start_at = serializers.DateTimeField()
    end_at = serializers.DateTimeField()

    def validate(self, data):
        if data['start_at'] >= data['end_at']:
            raise serializers.ValidationError({
                'end_at': 'End must be after start.'
            })
        return super().validate(data)

    def to_request(self) -> SingleBookingRequest:
        data = self.validated_data
        return SingleBookingRequest(
            resource_id=data['resource_id'],
            start_at=data['start_at'],
            end_at=data['end_at'],
            refs=self._refs(data),
            capacity=data.get('capacity'),
            request_id=data.get('request_id'),
            attendee_ids=data.get('attendee_ids', []),
        )


class RecurringEventSerializer(BookingRequestSerializer):
    """
    Serializer for booking a weekly series.

    ``recurrence_start_at``/``recurrence_end_at`` bound the calendar dates;
    ``event_start_at``/``event_end_at`` are wall-clock times on the
    resource's timezone.
    """

    day = DayOfWeekField()
    recurrence_start_at = serializers.DateField()
    recurrence_end_at = serializers.DateField()
    event_start_at = serializers.TimeField()
    event_end_at = serializers.TimeField()

    def validate(self, data):
        if data['event_start_at'] >= data['event_end_at']:
            raise serializers.ValidationError({
                'event_end_at': 'Event start time must be before event end time.'
            })
        return super().validate(data)

    def to_request(self) -> RecurringBookingRequest:
        data = self.validated_data
        return RecurringBookingRequest(
            resource_id=data['resource_id'],
            day_of_week=data['day'],
            recurrence_start_date=data['recurrence_start_at'],
            recurrence_end_date=data['recurrence_end_at'],
            occurrence_start_time=data['event_start_at'],
            occurrence_end_time=data['event_end_at'],
            refs=self._refs(data),
            capacity=data.get('capacity'),
            request_id=data.get('request_id'),
            attendee_ids=data.get('attendee_ids', []),
        )


class CancelEventsSerializer(serializers.Serializer):
    ids = serializers.ListField(child=serializers.UUIDField(), allow_empty=False)


class CancelSeriesQuerySerializer(serializers.Serializer):
    """Optional cut-off for cancelling the rest of a series."""

    start = serializers.DateTimeField(required=False)


class AttendeeSerializer(serializers.Serializer):
    customer_id = serializers.CharField(max_length=64)


class OccurrenceReadSerializer(serializers.ModelSerializer):
    """Serializer for reading/displaying Occurrence (output)."""

    pattern_id = serializers.IntegerField(
        source='recurrence_pattern_id',
        allow_null=True,
        read_only=True,
    )
    is_one_time = serializers.BooleanField(read_only=True)
    is_recurring = serializers.BooleanField(read_only=True)
    attendee_ids = serializers.ListField(child=serializers.CharField(), read_only=True)
    display_status = serializers.SerializerMethodField()

    class Meta:
        model = Occurrence
        fields = [
            'id',
            'resource',
            'pattern_id',
            'program',
            'location',
            'court',
            'team',
            'start_at',
            'end_at',
            'local_date',
            'capacity',
            'attendee_ids',
            'status',
            'display_status',
            'is_one_time',
            'is_recurring',
            'request_id',
            'cancelled_at',
            'created_at',
            'updated_at',
        ]

    def get_display_status(self, obj):
        return obj.display_status()


class AvailabilityWindowReadSerializer(serializers.ModelSerializer):
    """Serializer for reading/displaying AvailabilityWindow (output)."""

    day_name = serializers.ReadOnlyField()

    class Meta:
        model = AvailabilityWindow
        fields = [
            'id',
            'resource',
            'day_of_week',
            'day_name',
            'start_time',
            'end_time',
            'is_active',
            'created_at',
            'updated_at',
        ]


class AvailabilityWindowWriteSerializer(serializers.Serializer):
    """One availability entry; start/end ordering is checked by the store."""

    day_of_week = DayOfWeekField()
    start_time = serializers.TimeField()
    end_time = serializers.TimeField()
    is_active = serializers.BooleanField(default=True)


class AvailabilityWindowUpdateSerializer(serializers.Serializer):
    start_time = serializers.TimeField(required=False)
    end_time = serializers.TimeField(required=False)
    is_active = serializers.BooleanField(required=False)


class AvailabilityBulkSerializer(serializers.Serializer):
    """
    All seven days at once; day coverage is checked by the store.

    The entries may arrive as ``{"windows": [...]}``, as
    ``{"availability": [...]}`` or as a bare list.
    """

    windows = AvailabilityWindowWriteSerializer(many=True)

    def to_internal_value(self, data):
        if isinstance(data, list):
            data = {'windows': data}
        elif isinstance(data, Mapping) and 'windows' not in data and 'availability' in data:
            data = {'windows': data['availability']}
        return super().to_internal_value(data)


class BookingReadSerializer(serializers.ModelSerializer):
    """Serializer for reading/displaying Booking (output)."""

    class Meta:
        model = Booking
        fields = [
            'id',
            'resource',
            'customer_id',
            'start_at',
            'end_at',
            'request_id',
            'created_at',
            'updated_at',
        ]


class BookingCreateSerializer(serializers.Serializer):
    resource_id = serializers.IntegerField()
    customer_id = serializers.CharField(max_length=64)
    start_at = serializers.DateTimeField()
    end_at = serializers.DateTimeField()
    request_id = serializers.CharField(required=False, allow_blank=False, max_length=64)

    def validate(self, data):
        if data['start_at'] >= data['end_at']:
            raise serializers.ValidationError({
                'end_at': 'End must be after start.'
            })
        return data


class BookingUpdateSerializer(serializers.Serializer):
    customer_id = serializers.CharField(max_length=64, required=False)
    start_at = serializers.DateTimeField(required=False)
    end_at = serializers.DateTimeField(required=False)


class DateRangeQuerySerializer(serializers.Serializer):
    """Serializer for date range query parameters."""

    start = serializers.DateTimeField(required=True)
    end = serializers.DateTimeField(required=True)
    status = serializers.ChoiceField(
        choices=list(LISTABLE_STATUSES),
        required=False,
        allow_null=True
    )
    resource_id = serializers.IntegerField(required=False)

    def validate(self, data):
        """Ensure start is before end."""
        if data['start'] >= data['end']:
            raise serializers.ValidationError(
                "Start datetime must be before end datetime."
            )
        return data


class BookingQuerySerializer(serializers.Serializer):
    resource_id = serializers.IntegerField(required=False)
