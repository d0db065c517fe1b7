"""Tests for capacity checks."""

from django.test import SimpleTestCase, TestCase

from scheduling import capacity
from scheduling.exceptions import CapacityError, ValidationError
from scheduling.models import Attendance, Occurrence

from .helpers import make_resource, utc


class CheckCapacityTests(SimpleTestCase):

    def test_unbounded(self):
        self.assertTrue(capacity.check_capacity(None, 10_000).ok)

    def test_limits(self):
        self.assertTrue(capacity.check_capacity(2, 2).ok)
        result = capacity.check_capacity(2, 3)
        self.assertFalse(result.ok)
        self.assertEqual(result.code, capacity.FULL)

    def test_zero_capacity(self):
        self.assertTrue(capacity.check_capacity(0, 0).ok)
        self.assertFalse(capacity.check_capacity(0, 1).ok)

    def test_negative_capacity(self):
        with self.assertRaises(ValidationError):
            capacity.check_capacity(-1, 0)


class CanAddTests(TestCase):

    def setUp(self):
        self.occurrence = Occurrence.objects.create(
            resource=make_resource(),
            start_at=utc(2024, 3, 4, 10, 0),
            end_at=utc(2024, 3, 4, 11, 0),
            local_date=utc(2024, 3, 4).date(),
            capacity=1,
            request_id='r-1',
        )

    def test_can_add_until_full(self):
        self.assertTrue(capacity.can_add(self.occurrence).ok)
        Attendance.objects.create(occurrence=self.occurrence, customer_id='c-1')
        self.assertFalse(capacity.can_add(self.occurrence).ok)

    def test_ensure_can_add(self):
        Attendance.objects.create(occurrence=self.occurrence, customer_id='c-1')
        with self.assertRaises(CapacityError) as ctx:
            capacity.ensure_can_add(self.occurrence)
        self.assertEqual(ctx.exception.details['date'], '2024-03-04')
        self.assertEqual(ctx.exception.details['capacity'], 1)
