"""
Management command to preview the occurrences a weekly recurrence would
create for a resource, without booking anything.

Useful for checking DST behaviour and availability before submitting a
series.
"""

from django.core.management.base import BaseCommand, CommandError
from django.utils.dateparse import parse_date, parse_time

from scheduling import conflicts, exceptions
from scheduling.models import Resource
from scheduling.recurrence import count_matches, expand
from scheduling.timezones import NORMAL, classify_local_time, to_instant
from scheduling.types import RecurrenceSpec
from scheduling.weekdays import day_name, normalize_day_of_week


class Command(BaseCommand):
    help = 'Preview the occurrences of a weekly recurrence for a resource'

    def add_arguments(self, parser):
        parser.add_argument('--resource', type=int, required=True, help='Resource id')
        parser.add_argument('--day', required=True, help='Weekday: 0..7 or a name (e.g. monday)')
        parser.add_argument('--start', required=True, help='First date, YYYY-MM-DD')
        parser.add_argument('--end', required=True, help='Last date, YYYY-MM-DD')
        parser.add_argument('--from', dest='from_time', required=True, help='Start time, HH:MM')
        parser.add_argument('--to', dest='to_time', required=True, help='End time, HH:MM')

    def handle(self, *args, **options):
        try:
            resource = Resource.objects.get(pk=options['resource'])
        except Resource.DoesNotExist:
            raise CommandError(f"Resource {options['resource']} does not exist")

        try:
            day = normalize_day_of_week(options['day'])
        except exceptions.ValidationError as exc:
            raise CommandError(exc.message)

        spec = RecurrenceSpec(
            day_of_week=day,
            recurrence_start_date=self._parse(parse_date, options['start'], 'start'),
            recurrence_end_date=self._parse(parse_date, options['end'], 'end'),
            occurrence_start_time=self._parse(parse_time, options['from_time'], 'from'),
            occurrence_end_time=self._parse(parse_time, options['to_time'], 'to'),
        )

        count = count_matches(spec.recurrence_start_date, spec.recurrence_end_date, day)
        self.stdout.write(
            f'{resource.name} ({resource.timezone}): {count} {day_name(day)}(s) '
            f'between {spec.recurrence_start_date} and {spec.recurrence_end_date}'
        )

        windows = conflicts.load_active_windows(resource)
        for slot in expand(spec):
            start_at = to_instant(resource.timezone, slot.local_date, slot.start_time)
            end_at = to_instant(resource.timezone, slot.local_date, slot.end_time)
            line = f'{slot.local_date}  {start_at:%Y-%m-%dT%H:%MZ} - {end_at:%H:%MZ}'

            kind = classify_local_time(resource.timezone, slot.local_date, slot.start_time)
            if kind != NORMAL:
                line += f'  [{kind}]'

            result = conflicts.check_availability(resource, start_at, end_at, windows)
            if result.ok:
                self.stdout.write(line)
            else:
                self.stdout.write(self.style.WARNING(f'{line}  {result.reason}'))

        self.stdout.write(self.style.SUCCESS(f'Previewed {count} occurrence(s)'))

    def _parse(self, parser, value, name):
        try:
            parsed = parser(value)
        except ValueError:
            parsed = None
        if parsed is None:
            raise CommandError(f'Invalid --{name}: {value}')
        return parsed
