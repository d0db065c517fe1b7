"""Tests for the scheduling API endpoints."""

from datetime import time
from unittest.mock import patch

from django.contrib.auth import get_user_model
from django.db import OperationalError
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from scheduling.managers import ResourceManager
from scheduling.models import AvailabilityWindow, Booking, Occurrence
from scheduling.types import ResourceKind

from .helpers import make_resource, open_all_week, week_entries


class RecurringEventAPITests(APITestCase):
    """Test POST /api/events/recurring/."""

    def setUp(self):
        self.client = APIClient()
        self.court = make_resource(name='Court 1', kind=ResourceKind.COURT)
        open_all_week(self.court)
        self.data = {
            'court_id': self.court.pk,
            'day': 'MONDAY',
            'recurrence_start_at': '2024-03-04',
            'recurrence_end_at': '2024-03-18',
            'event_start_at': '10:00',
            'event_end_at': '11:00',
            'capacity': 12,
            'request_id': 'form-1',
        }

    def test_create_series(self):
        """The court is the contention resource when no resource_id is sent."""
        response = self.client.post('/api/events/recurring/', self.data, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['created'], 3)
        self.assertEqual(len(response.data['occurrence_ids']), 3)
        self.assertEqual(Occurrence.objects.filter(resource=self.court).count(), 3)

    def test_retry_returns_same_ids(self):
        first = self.client.post('/api/events/recurring/', self.data, format='json')
        second = self.client.post('/api/events/recurring/', self.data, format='json')

        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(second.data['occurrence_ids'], first.data['occurrence_ids'])
        self.assertEqual(second.data['created'], 0)

    def test_conflict(self):
        self.client.post('/api/events/recurring/', self.data, format='json')
        self.data['request_id'] = 'form-2'
        self.data['event_start_at'] = '10:30'
        self.data['event_end_at'] = '11:30'

        response = self.client.post('/api/events/recurring/', self.data, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['code'], 'ConflictError')
        self.assertEqual(response.data['error']['date'], '2024-03-04')
        self.assertIn('conflicting_id', response.data['error'])

    def test_numeric_sunday(self):
        """Day 0 is Sunday."""
        self.data.update({'day': 0, 'recurrence_end_at': '2024-03-31'})
        response = self.client.post('/api/events/recurring/', self.data, format='json')
        self.assertEqual(response.data['created'], 4)

    def test_range_too_large(self):
        self.data['recurrence_end_at'] = '2030-12-31'
        response = self.client.post('/api/events/recurring/', self.data, format='json')

        self.assertEqual(response.status_code, status.HTTP_422_UNPROCESSABLE_ENTITY)
        self.assertEqual(response.data['error']['code'], 'RangeTooLargeError')

    def test_missing_resource(self):
        del self.data['court_id']
        response = self.client.post('/api/events/recurring/', self.data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('resource_id', response.data['error']['fields'])

    def test_invalid_day(self):
        self.data['day'] = 'someday'
        response = self.client.post('/api/events/recurring/', self.data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('day', response.data['error']['fields'])

    def test_cancel_series(self):
        created = self.client.post('/api/events/recurring/', self.data, format='json')
        pattern_id = created.data['pattern_id']

        response = self.client.delete(f'/api/events/recurring/{pattern_id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['cancelled'], 3)

    def test_request_id_reused_on_other_dates(self):
        self.client.post('/api/events/recurring/', self.data, format='json')
        self.data.update({'recurrence_start_at': '2024-04-01', 'recurrence_end_at': '2024-04-15'})

        response = self.client.post('/api/events/recurring/', self.data, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'ValidationError')
        self.assertEqual(response.data['error']['request_id'], 'form-1')
        self.assertEqual(Occurrence.objects.filter(resource=self.court).count(), 3)

    def test_storage_failure_is_retryable(self):
        with patch.object(
            ResourceManager, 'lock', side_effect=OperationalError('database is locked')
        ):
            response = self.client.post('/api/events/recurring/', self.data, format='json')

        self.assertEqual(response.status_code, status.HTTP_503_SERVICE_UNAVAILABLE)
        self.assertEqual(response.data['error']['code'], 'TransientStorageError')
        self.assertTrue(response.data['error']['retryable'])
        self.assertFalse(Occurrence.objects.exists())


class OneTimeEventAPITests(APITestCase):
    """Test one-time events and occurrence endpoints."""

    def setUp(self):
        self.client = APIClient()
        self.barber = make_resource(name='Sam', kind=ResourceKind.BARBER)
        open_all_week(self.barber)
        response = self.client.post('/api/events/one-time/', {
            'resource_id': self.barber.pk,
            'start_at': '2024-03-04T10:00:00Z',
            'end_at': '2024-03-04T11:00:00Z',
            'capacity': 1,
        }, format='json')
        self.occurrence_id = response.data['occurrence_ids'][0]

    def test_get_occurrence(self):
        response = self.client.get(f'/api/occurrences/{self.occurrence_id}/')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'scheduled')
        self.assertEqual(response.data['display_status'], 'completed')
        self.assertTrue(response.data['is_one_time'])

    def test_unknown_occurrence(self):
        response = self.client.get('/api/occurrences/00000000-0000-0000-0000-000000000000/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn('message', response.data['error'])

    def test_outside_availability(self):
        response = self.client.post('/api/events/one-time/', {
            'resource_id': self.barber.pk,
            'start_at': '2024-03-04T08:00:00Z',
            'end_at': '2024-03-04T09:30:00Z',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['reason'], 'outside_availability')

    def test_end_before_start(self):
        response = self.client.post('/api/events/one-time/', {
            'resource_id': self.barber.pk,
            'start_at': '2024-03-04T11:00:00Z',
            'end_at': '2024-03-04T10:00:00Z',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_cancel_twice(self):
        """Cancelling is idempotent."""
        first = self.client.delete(f'/api/occurrences/{self.occurrence_id}/')
        second = self.client.delete(f'/api/occurrences/{self.occurrence_id}/')

        self.assertEqual(first.status_code, status.HTTP_200_OK)
        self.assertEqual(second.status_code, status.HTTP_200_OK)
        self.assertEqual(Occurrence.objects.get(pk=self.occurrence_id).status, 'cancelled')

    def test_bulk_cancel(self):
        response = self.client.post('/api/events/cancel/', {'ids': [self.occurrence_id]}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['occurrence_ids'], [self.occurrence_id])

    def test_attendees(self):
        url = f'/api/occurrences/{self.occurrence_id}/attendees/'

        response = self.client.post(url, {'customer_id': 'c-1'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['attendee_ids'], ['c-1'])

        response = self.client.post(url, {'customer_id': 'c-2'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['code'], 'CapacityError')

        response = self.client.delete(f'{url}c-1/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['attendee_ids'], [])

    def test_list_in_range(self):
        response = self.client.get('/api/occurrences/', {
            'start': '2024-03-01T00:00:00Z',
            'end': '2024-03-31T23:59:59Z',
            'status': 'completed',
        })

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([o['id'] for o in response.data], [self.occurrence_id])

    def test_list_requires_range(self):
        response = self.client.get('/api/occurrences/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class AvailabilityAPITests(APITestCase):
    """Only the owner or an admin may edit availability."""

    def setUp(self):
        User = get_user_model()
        self.owner = User.objects.create_user('barber', password='pw')
        self.stranger = User.objects.create_user('stranger', password='pw')
        self.barber = make_resource(name='Sam', owner=self.owner)
        self.url = f'/api/resources/{self.barber.pk}/availability/'
        self.client = APIClient()

    def test_owner_creates_window(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.post(self.url, {
            'day_of_week': 0,
            'start_time': '09:00',
            'end_time': '17:00',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['day_of_week'], 7)
        self.assertEqual(response.data['day_name'], 'Sunday')

    def test_stranger_forbidden(self):
        self.client.force_authenticate(user=self.stranger)
        response = self.client.post(self.url, {
            'day_of_week': 1,
            'start_time': '09:00',
            'end_time': '17:00',
        }, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['error']['code'], 'PermissionDenied')
        self.assertFalse(AvailabilityWindow.objects.exists())

    def test_anyone_can_read(self):
        open_all_week(self.barber)
        response = self.client.get(self.url)

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([w['day_of_week'] for w in response.data], [1, 2, 3, 4, 5, 6, 7])

    def test_invalid_range(self):
        self.client.force_authenticate(user=self.owner)
        response = self.client.post(self.url, {
            'day_of_week': 1,
            'start_time': '17:00',
            'end_time': '09:00',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['code'], 'InvalidRange')

    def test_duplicate_day(self):
        self.client.force_authenticate(user=self.owner)
        payload = {'day_of_week': 1, 'start_time': '09:00', 'end_time': '17:00'}
        self.client.post(self.url, payload, format='json')
        response = self.client.post(self.url, payload, format='json')
        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['error']['code'], 'AlreadyExists')

    def test_update_and_delete_day(self):
        open_all_week(self.barber)
        self.client.force_authenticate(user=self.owner)

        response = self.client.patch(f'{self.url}monday/', {'end_time': '12:00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['end_time'], '12:00:00')

        response = self.client.delete(f'{self.url}1/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(AvailabilityWindow.objects.filter(resource=self.barber).count(), 6)

    def test_bulk_replace(self):
        self.client.force_authenticate(user=self.owner)
        entries = [
            {'day_of_week': day, 'start_time': '08:00', 'end_time': '12:00'}
            for day in range(0, 7)
        ]
        response = self.client.post(f'{self.url}bulk/', {'windows': entries}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 7)

    def test_bulk_replace_missing_day(self):
        self.client.force_authenticate(user=self.owner)
        entries = [
            {'day_of_week': day, 'start_time': '08:00', 'end_time': '12:00'}
            for day in range(1, 7)
        ]
        response = self.client.post(f'{self.url}bulk/', {'windows': entries}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error']['missing_days'], [7])

    def test_bulk_replace_accepts_availability_key(self):
        self.client.force_authenticate(user=self.owner)
        entries = [
            {'day_of_week': day, 'start_time': '08:00', 'end_time': '12:00', 'is_active': True}
            for day in range(0, 7)
        ]
        response = self.client.post(f'{self.url}bulk/', {'availability': entries}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([w['day_of_week'] for w in response.data], [1, 2, 3, 4, 5, 6, 7])

    def test_bulk_replace_accepts_bare_list(self):
        self.client.force_authenticate(user=self.owner)
        entries = [
            {'day_of_week': day, 'start_time': '08:00', 'end_time': '12:00'}
            for day in range(1, 8)
        ]
        response = self.client.post(f'{self.url}bulk/', entries, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(AvailabilityWindow.objects.filter(resource=self.barber).count(), 7)

    def test_admin_may_edit(self):
        admin = get_user_model().objects.create_user('admin', password='pw', is_staff=True)
        self.client.force_authenticate(user=admin)
        response = self.client.post(f'{self.url}bulk/', {
            'windows': [
                {**entry, 'start_time': '09:00', 'end_time': '17:00'}
                for entry in week_entries()
            ]
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)


class BookingAPITests(APITestCase):
    """Test simple booking endpoints."""

    def setUp(self):
        self.client = APIClient()
        self.room = make_resource(name='Playground', kind=ResourceKind.ROOM)
        open_all_week(self.room, time(8, 0), time(20, 0))

    def _book(self, start, end, customer='c-1'):
        return self.client.post('/api/bookings/', {
            'resource_id': self.room.pk,
            'customer_id': customer,
            'start_at': start,
            'end_at': end,
        }, format='json')

    def test_create_and_list(self):
        response = self._book('2024-03-04T10:00:00Z', '2024-03-04T11:00:00Z')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        response = self.client.get('/api/bookings/', {'resource_id': self.room.pk})
        self.assertEqual(len(response.data), 1)

    def test_double_booking(self):
        self._book('2024-03-04T10:00:00Z', '2024-03-04T11:00:00Z')
        response = self._book('2024-03-04T10:30:00Z', '2024-03-04T11:30:00Z', customer='c-2')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(Booking.objects.count(), 1)

    def test_reschedule_and_delete(self):
        booking_id = self._book('2024-03-04T10:00:00Z', '2024-03-04T11:00:00Z').data['id']

        response = self.client.put(f'/api/bookings/{booking_id}/', {
            'start_at': '2024-03-04T10:30:00Z',
            'end_at': '2024-03-04T11:30:00Z',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['start_at'], '2024-03-04T10:30:00Z')

        response = self.client.delete(f'/api/bookings/{booking_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        response = self.client.get(f'/api/bookings/{booking_id}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
