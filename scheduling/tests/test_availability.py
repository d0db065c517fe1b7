"""Tests for the availability window store."""

from datetime import time

from django.contrib.auth import get_user_model
from django.core.exceptions import ValidationError as ModelValidationError
from django.db import IntegrityError, transaction
from django.test import TestCase

from scheduling import availability
from scheduling.exceptions import AlreadyExists, InvalidRange, NotFound, ValidationError
from scheduling.models import AvailabilityWindow
from scheduling.types import WindowData
from scheduling.weekdays import MONDAY, SUNDAY

from .helpers import make_resource, week_entries


class CreateWindowTests(TestCase):
    """Test the single-create path."""

    def setUp(self):
        self.resource = make_resource()

    def test_create_window(self):
        """Test creating a window from a mapping."""
        window = availability.create_window(self.resource, {
            'day_of_week': 'monday',
            'start_time': time(9, 0),
            'end_time': time(17, 0),
        })

        self.assertEqual(window.day_of_week, MONDAY)
        self.assertEqual(window.day_name, 'Monday')
        self.assertTrue(window.is_active)

    def test_sunday_zero_stored_as_seven(self):
        """Day 0 is stored in the canonical domain."""
        window = availability.create_window(self.resource, WindowData(0, time(9, 0), time(12, 0)))
        self.assertEqual(window.day_of_week, SUNDAY)

    def test_start_after_end_rejected(self):
        with self.assertRaises(InvalidRange):
            availability.create_window(self.resource, WindowData(1, time(17, 0), time(9, 0)))
        with self.assertRaises(InvalidRange):
            availability.create_window(self.resource, WindowData(1, time(9, 0), time(9, 0)))
        self.assertFalse(AvailabilityWindow.objects.exists())

    def test_duplicate_day_rejected(self):
        """0 and 7 are the same day, so the second create collides."""
        availability.create_window(self.resource, WindowData(7, time(9, 0), time(12, 0)))
        with self.assertRaises(AlreadyExists):
            availability.create_window(self.resource, WindowData(0, time(13, 0), time(15, 0)))

    def test_missing_field(self):
        with self.assertRaises(ValidationError) as ctx:
            availability.create_window(self.resource, {'day_of_week': 1, 'start_time': time(9, 0)})
        self.assertEqual(ctx.exception.details['fields'], ['end_time'])

    def test_database_enforces_one_window_per_day(self):
        AvailabilityWindow.objects.create(
            resource=self.resource, day_of_week=2, start_time=time(9, 0), end_time=time(10, 0)
        )
        with self.assertRaises((ModelValidationError, IntegrityError)):
            with transaction.atomic():
                AvailabilityWindow.objects.create(
                    resource=self.resource, day_of_week=2, start_time=time(11, 0), end_time=time(12, 0)
                )


class UpdateWindowTests(TestCase):
    """Test update, upsert and delete."""

    def setUp(self):
        self.resource = make_resource()
        availability.create_window(self.resource, WindowData(MONDAY, time(9, 0), time(17, 0)))

    def test_update_keeps_unset_fields(self):
        window = availability.update_window(self.resource, 'mon', end_time=time(12, 0))
        self.assertEqual(window.start_time, time(9, 0))
        self.assertEqual(window.end_time, time(12, 0))

    def test_deactivate(self):
        availability.update_window(self.resource, MONDAY, is_active=False)
        self.assertEqual(availability.list_active(self.resource), [])
        self.assertEqual(len(availability.list_windows(self.resource)), 1)

    def test_update_missing_day(self):
        with self.assertRaises(NotFound):
            availability.update_window(self.resource, 'tuesday', end_time=time(12, 0))

    def test_update_invalid_range(self):
        with self.assertRaises(InvalidRange):
            availability.update_window(self.resource, MONDAY, start_time=time(18, 0))

    def test_upsert(self):
        availability.upsert_window(self.resource, WindowData(MONDAY, time(8, 0), time(9, 0)))
        availability.upsert_window(self.resource, WindowData(2, time(8, 0), time(9, 0)))

        windows = availability.list_windows(self.resource)
        self.assertEqual([w.day_of_week for w in windows], [1, 2])
        self.assertEqual(windows[0].start_time, time(8, 0))

    def test_delete(self):
        availability.delete_window(self.resource, MONDAY)
        self.assertIsNone(availability.get_window(self.resource, MONDAY))
        with self.assertRaises(NotFound):
            availability.delete_window(self.resource, MONDAY)


class BulkReplaceTests(TestCase):
    """Bulk replace is all-or-nothing over exactly seven days."""

    def setUp(self):
        self.resource = make_resource()

    def test_replace_all_days(self):
        windows = availability.bulk_replace(self.resource, week_entries())
        self.assertEqual([w.day_of_week for w in windows], [1, 2, 3, 4, 5, 6, 7])

        windows = availability.bulk_replace(self.resource, week_entries(time(10, 0), time(12, 0)))
        self.assertEqual(AvailabilityWindow.objects.filter(resource=self.resource).count(), 7)
        self.assertTrue(all(w.start_time == time(10, 0) for w in windows))

    def test_sunday_based_days_accepted(self):
        """0..6 covers the week just like 1..7."""
        windows = availability.bulk_replace(self.resource, week_entries(days=range(0, 7)))
        self.assertEqual(sorted(w.day_of_week for w in windows), [1, 2, 3, 4, 5, 6, 7])

    def test_invalid_entry_changes_nothing(self):
        """One bad entry fails the whole call and keeps the old windows."""
        availability.bulk_replace(self.resource, week_entries())

        entries = week_entries(time(10, 0), time(12, 0))
        entries[3]['start_time'] = time(13, 0)

        with self.assertRaises(InvalidRange):
            availability.bulk_replace(self.resource, entries)

        windows = availability.list_windows(self.resource)
        self.assertTrue(all(w.start_time == time(9, 0) for w in windows))

    def test_missing_day(self):
        with self.assertRaises(ValidationError) as ctx:
            availability.bulk_replace(self.resource, week_entries(days=[1, 2, 3, 4, 5, 6]))
        self.assertEqual(ctx.exception.details['missing_days'], [7])
        self.assertFalse(AvailabilityWindow.objects.exists())

    def test_duplicate_day_after_normalisation(self):
        """0 and 7 both mean Sunday."""
        with self.assertRaises(ValidationError) as ctx:
            availability.bulk_replace(self.resource, week_entries(days=[0, 1, 2, 3, 4, 5, 6, 7]))
        self.assertEqual(ctx.exception.details['duplicate_days'], [7])


class CanManageTests(TestCase):

    def setUp(self):
        User = get_user_model()
        self.owner = User.objects.create_user('barber', password='pw')
        self.other = User.objects.create_user('someone', password='pw')
        self.admin = User.objects.create_user('admin', password='pw', is_staff=True)
        self.resource = make_resource(owner=self.owner)

    def test_owner_and_admin(self):
        self.assertTrue(availability.can_manage(self.owner, self.resource))
        self.assertTrue(availability.can_manage(self.admin, self.resource))

    def test_other_user(self):
        self.assertFalse(availability.can_manage(self.other, self.resource))
        self.assertFalse(availability.can_manage(None, self.resource))
