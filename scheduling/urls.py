"""
URL routing for the scheduling API.
"""

from django.urls import path
from .views import (
    AvailabilityBulkView,
    AvailabilityDayView,
    AvailabilityListCreateView,
    BookingDetailView,
    BookingListCreateView,
    CancelEventsView,
    OccurrenceAttendeeDetailView,
    OccurrenceAttendeeView,
    OccurrenceDetailView,
    OccurrenceListView,
    OneTimeEventView,
    RecurringEventDetailView,
    RecurringEventView,
)

urlpatterns = [
    path('events/one-time/', OneTimeEventView.as_view(), name='event-one-time'),
    path('events/recurring/', RecurringEventView.as_view(), name='event-recurring'),
    path('events/recurring/<int:pk>/', RecurringEventDetailView.as_view(), name='event-recurring-detail'),
    path('events/cancel/', CancelEventsView.as_view(), name='event-cancel'),
    path('occurrences/', OccurrenceListView.as_view(), name='occurrence-list'),
    path('occurrences/<str:pk>/', OccurrenceDetailView.as_view(), name='occurrence-detail'),
    path('occurrences/<str:pk>/attendees/', OccurrenceAttendeeView.as_view(), name='occurrence-attendees'),
    path(
        'occurrences/<str:pk>/attendees/<str:customer_id>/',
        OccurrenceAttendeeDetailView.as_view(),
        name='occurrence-attendee-detail',
    ),
    path(
        'resources/<int:resource_id>/availability/',
        AvailabilityListCreateView.as_view(),
        name='availability-list-create',
    ),
    path(
        'resources/<int:resource_id>/availability/bulk/',
        AvailabilityBulkView.as_view(),
        name='availability-bulk',
    ),
    path(
        'resources/<int:resource_id>/availability/<str:day>/',
        AvailabilityDayView.as_view(),
        name='availability-day',
    ),
    path('bookings/', BookingListCreateView.as_view(), name='booking-list-create'),
    path('bookings/<str:pk>/', BookingDetailView.as_view(), name='booking-detail'),
]
