"""
Tests for per-resource write serialization.

Every check-then-act sequence must hold the resource row lock
(``Resource.objects.lock``, a ``select_for_update``) inside a transaction.
"""

import threading
import unittest
from datetime import date, time
from unittest.mock import patch

from django.db import IntegrityError, connection
from django.test import TestCase, TransactionTestCase

from scheduling import availability, conflicts, services
from scheduling.exceptions import ConflictError
from scheduling.managers import ResourceManager
from scheduling.models import Occurrence
from scheduling.types import RecurringBookingRequest, SingleBookingRequest, WindowData
from scheduling.weekdays import CANONICAL_DAYS, MONDAY

from .helpers import make_resource, open_all_week, utc


def single(resource, request_id, start=10):
    return SingleBookingRequest(
        resource_id=resource.pk,
        start_at=utc(2024, 3, 4, start, 0),
        end_at=utc(2024, 3, 4, start + 1, 0),
        request_id=request_id,
    )


class ResourceLockTests(TransactionTestCase):
    """The lock is taken inside a transaction, before anything is checked."""

    def setUp(self):
        self.resource = make_resource()
        open_all_week(self.resource)
        self.events = []

        original_lock = ResourceManager.lock
        original_assert = conflicts.assert_available

        def lock(manager, pk):
            self.events.append(('lock', pk, connection.in_atomic_block))
            return original_lock(manager, pk)

        def assert_available(resource, *args, **kwargs):
            self.events.append(('check', resource.pk, connection.in_atomic_block))
            return original_assert(resource, *args, **kwargs)

        lock_patch = patch.object(ResourceManager, 'lock', autospec=True, side_effect=lock)
        check_patch = patch.object(conflicts, 'assert_available', side_effect=assert_available)
        lock_patch.start()
        check_patch.start()
        self.addCleanup(lock_patch.stop)
        self.addCleanup(check_patch.stop)

    def assertLockedBeforeChecks(self):
        self.assertEqual(self.events[0], ('lock', self.resource.pk, True))
        for event in self.events[1:]:
            self.assertTrue(event[2], event)

    def test_book_single(self):
        services.book_single(single(self.resource, 'one'))

        self.assertLockedBeforeChecks()
        self.assertEqual([e[0] for e in self.events], ['lock', 'check'])

    def test_book_recurring(self):
        services.book_recurring(RecurringBookingRequest(
            resource_id=self.resource.pk,
            day_of_week=MONDAY,
            recurrence_start_date=date(2024, 3, 4),
            recurrence_end_date=date(2024, 3, 18),
            occurrence_start_time=time(10, 0),
            occurrence_end_time=time(11, 0),
            request_id='series',
        ))

        self.assertLockedBeforeChecks()
        self.assertEqual([e[0] for e in self.events], ['lock', 'check', 'check', 'check'])

    def test_cancel_occurrence(self):
        result = services.book_single(single(self.resource, 'one'))
        self.events.clear()

        services.cancel_occurrence(result.occurrence_ids[0])

        self.assertEqual(self.events, [('lock', self.resource.pk, True)])

    def test_bulk_replace(self):
        availability.bulk_replace(self.resource, [
            WindowData(day_of_week=day, start_time=time(8, 0), end_time=time(12, 0))
            for day in CANONICAL_DAYS
        ])

        self.assertEqual(self.events, [('lock', self.resource.pk, True)])


@unittest.skipUnless(connection.vendor == 'postgresql', 'row locks need PostgreSQL')
class ConcurrentBookingTests(TransactionTestCase):
    """Two writers racing for the same slot: exactly one wins."""

    def setUp(self):
        self.resource = make_resource()
        open_all_week(self.resource)

    def _attempt(self, request_id, barrier, outcomes):
        try:
            barrier.wait()
            services.book_single(single(self.resource, request_id))
            outcomes.append('booked')
        except ConflictError:
            outcomes.append('conflict')
        finally:
            connection.close()

    def test_one_booking_wins(self):
        barrier = threading.Barrier(2)
        outcomes = []
        threads = [
            threading.Thread(target=self._attempt, args=(request_id, barrier, outcomes))
            for request_id in ('first', 'second')
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(sorted(outcomes), ['booked', 'conflict'])
        self.assertEqual(Occurrence.objects.count(), 1)


class ReplayAfterRaceTests(TestCase):
    """A retry that loses the insert race answers with the winner's rows."""

    def setUp(self):
        self.resource = make_resource()
        open_all_week(self.resource)

    def test_same_ids_come_back(self):
        first = services.book_single(single(self.resource, 'retry'))

        with patch.object(services, '_commit', side_effect=IntegrityError('duplicate key')):
            second = services.book_single(single(self.resource, 'retry'))

        self.assertEqual(second.occurrence_ids, first.occurrence_ids)
        self.assertEqual(second.created, 0)
        self.assertEqual(Occurrence.objects.count(), 1)

    def test_unrelated_integrity_error_propagates(self):
        """Nothing was written under these ids, so the error is not a race."""
        with patch.object(services, '_commit', side_effect=IntegrityError('duplicate key')):
            with self.assertRaises(IntegrityError):
                services.book_single(single(self.resource, 'fresh'))
        self.assertFalse(Occurrence.objects.exists())
