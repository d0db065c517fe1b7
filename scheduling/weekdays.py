"""
Day-of-week canonicalisation.

Two numbering conventions reach the core: 0=Sunday..6=Saturday and
1=Monday..7=Sunday. They agree on 1..6, so folding 0 to 7 maps both onto the
canonical ISO domain (Monday=1 .. Sunday=7). Weekday names are accepted too,
as the recurring event form sends "MONDAY".."SUNDAY".
"""

from .exceptions import ValidationError

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(1, 8)

DAY_CHOICES = [
    (MONDAY, 'Monday'),
    (TUESDAY, 'Tuesday'),
    (WEDNESDAY, 'Wednesday'),
    (THURSDAY, 'Thursday'),
    (FRIDAY, 'Friday'),
    (SATURDAY, 'Saturday'),
    (SUNDAY, 'Sunday'),
]

CANONICAL_DAYS = tuple(day for day, _ in DAY_CHOICES)

_NAMES = {}
for _day, _label in DAY_CHOICES:
    _NAMES[_label.lower()] = _day
    _NAMES[_label[:3].lower()] = _day


def normalize_day_of_week(value) -> int:
    """
    Map any accepted day representation to 1 (Monday) .. 7 (Sunday).

    Idempotent: ``normalize_day_of_week(normalize_day_of_week(x))`` equals
    ``normalize_day_of_week(x)``.

    Raises:
        ValidationError: If the value is not a recognisable weekday
    """
    if isinstance(value, bool):
        raise ValidationError(
            f"Invalid day of week: {value!r}",
            details={'day_of_week': value},
        )

    if isinstance(value, str):
        text = value.strip().lower()
        if text in _NAMES:
            return _NAMES[text]
        if text.lstrip('-').isdigit():
            value = int(text)
        else:
            raise ValidationError(
                f"Invalid day of week: {value!r}",
                details={'day_of_week': value},
            )

    if not isinstance(value, int) or not 0 <= value <= 7:
        raise ValidationError(
            f"Day of week must be 0..7 or a weekday name, got {value!r}",
            details={'day_of_week': value},
        )

    return SUNDAY if value == 0 else value


def day_name(day: int) -> str:
    """Human-readable name for a canonical day number."""
    return dict(DAY_CHOICES).get(day, 'Unknown')


def weekday_of(date_obj) -> int:
    """Canonical day number of a date."""
    return date_obj.isoweekday()
