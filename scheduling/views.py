"""Views for the scheduling API."""

from django.shortcuts import get_object_or_404

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import APIView

from . import availability, services
from .models import Booking, Resource
from .permissions import IsResourceOwnerOrAdmin
from .serializers import (
    AttendeeSerializer,
    AvailabilityBulkSerializer,
    AvailabilityWindowReadSerializer,
    AvailabilityWindowUpdateSerializer,
    AvailabilityWindowWriteSerializer,
    BookingCreateSerializer,
    BookingQuerySerializer,
    BookingReadSerializer,
    BookingUpdateSerializer,
    CancelEventsSerializer,
    CancelSeriesQuerySerializer,
    DateRangeQuerySerializer,
    OccurrenceReadSerializer,
    OneTimeEventSerializer,
    RecurringEventSerializer,
)
from .types import WindowData


def _result_response(result):
    """201 when something was written, 200 for a replayed request."""
    return Response({
        'occurrence_ids': result.occurrence_ids,
        'created': result.created,
        'pattern_id': result.pattern_id,
    }, status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK)


class OneTimeEventView(APIView):
    """
    Book a single occurrence.

    POST /api/events/one-time/
    """

    def post(self, request):
        serializer = OneTimeEventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = services.book_single(serializer.to_request())
        return _result_response(result)


class RecurringEventView(APIView):
    """
    Book a weekly series; all dates succeed or none are written.

    POST /api/events/recurring/
    """

    def post(self, request):
        serializer = RecurringEventSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = services.book_recurring(serializer.to_request())
        return _result_response(result)


class RecurringEventDetailView(APIView):
    """
    Cancel a series.

    DELETE /api/events/recurring/{id}/?start=X - Cancel occurrences starting at or after X
    """

    def delete(self, request, pk):
        query_serializer = CancelSeriesQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        cancelled = services.cancel_series(pk, query_serializer.validated_data.get('start'))
        return Response({
            'message': f'{cancelled} occurrence(s) have been cancelled.',
            'cancelled': cancelled,
        }, status=status.HTTP_200_OK)


class CancelEventsView(APIView):
    """
    Cancel several occurrences at once.

    POST /api/events/cancel/
    """

    def post(self, request):
        serializer = CancelEventsSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ids = services.cancel_occurrences(serializer.validated_data['ids'])
        return Response({
            'message': f'{len(ids)} occurrence(s) have been cancelled.',
            'occurrence_ids': ids,
        }, status=status.HTTP_200_OK)


class OccurrenceListView(APIView):
    """
    List occurrences within a date range.

    GET /api/occurrences/?start=X&end=Y&status=S&resource_id=R
    """

    def get(self, request):
        query_serializer = DateRangeQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        data = query_serializer.validated_data
        occurrences = services.get_occurrences_in_range(
            data['start'],
            data['end'],
            status=data.get('status'),
            resource_id=data.get('resource_id'),
        )

        serializer = OccurrenceReadSerializer(occurrences, many=True)
        return Response(serializer.data)


class OccurrenceDetailView(APIView):
    """
    Retrieve or cancel an occurrence.

    GET /api/occurrences/{id}/ - Retrieve occurrence
    DELETE /api/occurrences/{id}/ - Cancel occurrence (idempotent)
    """

    def get(self, request, pk):
        occurrence = services.get_occurrence(pk)
        serializer = OccurrenceReadSerializer(occurrence)
        return Response(serializer.data)

    def delete(self, request, pk):
        occurrence = services.cancel_occurrence(pk)

        return Response({
            'message': f'Occurrence on {occurrence.local_date} has been cancelled.'
        }, status=status.HTTP_200_OK)


class OccurrenceAttendeeView(APIView):
    """
    Enrol a customer.

    POST /api/occurrences/{id}/attendees/
    """

    def post(self, request, pk):
        serializer = AttendeeSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        occurrence = services.add_attendee(pk, serializer.validated_data['customer_id'])
        return Response(OccurrenceReadSerializer(occurrence).data, status=status.HTTP_200_OK)


class OccurrenceAttendeeDetailView(APIView):
    """
    Remove a customer.

    DELETE /api/occurrences/{id}/attendees/{customer_id}/
    """

    def delete(self, request, pk, customer_id):
        occurrence = services.remove_attendee(pk, customer_id)
        return Response(OccurrenceReadSerializer(occurrence).data, status=status.HTTP_200_OK)


class ResourceAvailabilityMixin:
    permission_classes = [IsResourceOwnerOrAdmin]

    def get_resource(self, request, resource_id):
        resource = get_object_or_404(Resource, pk=resource_id)
        self.check_object_permissions(request, resource)
        return resource


class AvailabilityListCreateView(ResourceAvailabilityMixin, APIView):
    """
    List or create availability windows of a resource.

    GET /api/resources/{id}/availability/ - List windows, Monday first
    POST /api/resources/{id}/availability/ - Create the window for one day
    """

    def get(self, request, resource_id):
        resource = self.get_resource(request, resource_id)
        windows = availability.list_windows(resource)
        serializer = AvailabilityWindowReadSerializer(windows, many=True)
        return Response(serializer.data)

    def post(self, request, resource_id):
        resource = self.get_resource(request, resource_id)
        serializer = AvailabilityWindowWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        window = availability.create_window(resource, WindowData(**serializer.validated_data))
        return Response(
            AvailabilityWindowReadSerializer(window).data,
            status=status.HTTP_201_CREATED,
        )


class AvailabilityDayView(ResourceAvailabilityMixin, APIView):
    """
    Update or remove the window for one day.

    PATCH /api/resources/{id}/availability/{day}/
    DELETE /api/resources/{id}/availability/{day}/
    """

    def patch(self, request, resource_id, day):
        resource = self.get_resource(request, resource_id)
        serializer = AvailabilityWindowUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        window = availability.update_window(resource, day, **serializer.validated_data)
        return Response(AvailabilityWindowReadSerializer(window).data)

    def delete(self, request, resource_id, day):
        resource = self.get_resource(request, resource_id)
        availability.delete_window(resource, day)

        return Response({
            'message': 'Availability removed.'
        }, status=status.HTTP_200_OK)


class AvailabilityBulkView(ResourceAvailabilityMixin, APIView):
    """
    Replace all seven days in one call.

    POST /api/resources/{id}/availability/bulk/
    """

    def post(self, request, resource_id):
        resource = self.get_resource(request, resource_id)
        serializer = AvailabilityBulkSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        windows = availability.bulk_replace(
            resource,
            [WindowData(**entry) for entry in serializer.validated_data['windows']],
        )
        serializer = AvailabilityWindowReadSerializer(windows, many=True)
        return Response(serializer.data)


class BookingListCreateView(APIView):
    """
    List or create simple bookings.

    GET /api/bookings/?resource_id=R
    POST /api/bookings/
    """

    def get(self, request):
        query_serializer = BookingQuerySerializer(data=request.query_params)
        query_serializer.is_valid(raise_exception=True)

        bookings = Booking.objects.all()
        resource_id = query_serializer.validated_data.get('resource_id')
        if resource_id is not None:
            bookings = bookings.for_resource(resource_id)
        serializer = BookingReadSerializer(bookings, many=True)
        return Response(serializer.data)

    def post(self, request):
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = services.create_booking(**serializer.validated_data)
        return Response(BookingReadSerializer(booking).data, status=status.HTTP_201_CREATED)


class BookingDetailView(APIView):
    """
    Retrieve, reschedule, or delete a booking.

    GET /api/bookings/{id}/
    PUT /api/bookings/{id}/
    DELETE /api/bookings/{id}/
    """

    def get(self, request, pk):
        booking = services.get_booking(pk)
        return Response(BookingReadSerializer(booking).data)

    def put(self, request, pk):
        serializer = BookingUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        booking = services.update_booking(pk, **serializer.validated_data)
        return Response(BookingReadSerializer(booking).data)

    def delete(self, request, pk):
        services.delete_booking(pk)

        return Response({
            'message': 'Booking has been deleted.'
        }, status=status.HTTP_200_OK)
