"""Calcolo delle scadenze delle transazioni ricorrenti.

Funzioni pure: nessun accesso al database. Le date sono di calendario
(senza ora); una definizione è qualsiasi oggetto con gli attributi
`frequency`, `day_of_week`, `day_of_month`, `start_date` (e opzionalmente
`end_date`), quindi sia il modello SQLAlchemy sia un SimpleNamespace.
"""
import calendar
from datetime import date, datetime, time, timedelta

from dateutil.relativedelta import relativedelta

from batvault.errors import InvalidSchedule

__all__ = [
    'FREQUENCIES', 'DAY_NAMES', 'validate_schedule', 'compute_next_due',
    'next_due_after', 'preview_occurrences', 'describe_schedule',
    'clamp_day', 'as_date', 'as_due_datetime',
]

FREQUENCIES = ('weekly', 'monthly', 'quarterly', 'yearly')

# 0 = domenica, come nel client
DAY_NAMES = ['Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday']


def as_date(value):
    """Normalizza date/datetime/stringa ISO in una `date`"""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.replace('Z', '+00:00')).date()
        except ValueError:
            raise InvalidSchedule(f'Invalid date: {value!r}')
    raise InvalidSchedule(f'Invalid date: {value!r}')


def as_due_datetime(day):
    """Scadenza memorizzata: mezzanotte del giorno dovuto"""
    return datetime.combine(as_date(day), time.min)


def clamp_day(year, month, day):
    """Return the date for `day` in year/month, clamped to the month length."""
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day, last_day))


def _weekday(d):
    # Python: lunedì=0; qui domenica=0
    return (d.weekday() + 1) % 7


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def validate_schedule(definition):
    """Return (frequency, anchor) or raise InvalidSchedule."""
    frequency = getattr(definition, 'frequency', None)
    if frequency not in FREQUENCIES:
        raise InvalidSchedule(f'Unrecognized frequency: {frequency!r}')

    if frequency == 'weekly':
        anchor = getattr(definition, 'day_of_week', None)
        if not _is_int(anchor) or not 0 <= anchor <= 6:
            raise InvalidSchedule(f'day_of_week must be between 0 and 6, got {anchor!r}')
    else:
        anchor = getattr(definition, 'day_of_month', None)
        if not _is_int(anchor) or not 1 <= anchor <= 31:
            raise InvalidSchedule(f'day_of_month must be between 1 and 31, got {anchor!r}')

    if getattr(definition, 'start_date', None) is None:
        raise InvalidSchedule('start_date is required')

    return frequency, anchor


def compute_next_due(definition, reference_date):
    """Earliest occurrence on or after max(reference_date, start_date).

    A reference date that already falls on an occurrence is returned as is.
    """
    frequency, anchor = validate_schedule(definition)
    start = as_date(definition.start_date)
    base = max(as_date(reference_date), start)

    if frequency == 'weekly':
        return base + timedelta(days=(anchor - _weekday(base)) % 7)

    if frequency == 'monthly':
        candidate = clamp_day(base.year, base.month, anchor)
        if candidate < base:
            following = base.replace(day=1) + relativedelta(months=1)
            candidate = clamp_day(following.year, following.month, anchor)
        return candidate

    if frequency == 'quarterly':
        quarter_month = ((base.month - 1) // 3) * 3 + 1
        candidate = clamp_day(base.year, quarter_month, anchor)
        if candidate < base:
            following = date(base.year, quarter_month, 1) + relativedelta(months=3)
            candidate = clamp_day(following.year, following.month, anchor)
        return candidate

    # yearly: mese fisso = mese della data di inizio
    candidate = clamp_day(base.year, start.month, anchor)
    if candidate < base:
        candidate = clamp_day(base.year + 1, start.month, anchor)
    return candidate


def next_due_after(definition, previous_due):
    """First occurrence strictly after the previous due date."""
    return compute_next_due(definition, as_date(previous_due) + timedelta(days=1))


def preview_occurrences(definition, count, reference_date):
    """Next `count` occurrences from reference_date, stopping at end_date."""
    end = getattr(definition, 'end_date', None)
    end = as_date(end) if end else None
    occurrences = []
    current = compute_next_due(definition, reference_date)
    while len(occurrences) < count:
        if end and current > end:
            break
        occurrences.append(current)
        current = next_due_after(definition, current)
    return occurrences


def describe_schedule(definition):
    """Testo leggibile della pianificazione, es. 'Monthly on day 15'"""
    frequency = getattr(definition, 'frequency', None)
    label = frequency.capitalize() if isinstance(frequency, str) else str(frequency)
    day_of_week = getattr(definition, 'day_of_week', None)
    day_of_month = getattr(definition, 'day_of_month', None)

    if frequency == 'weekly' and _is_int(day_of_week) and 0 <= day_of_week <= 6:
        return f'{label} on {DAY_NAMES[day_of_week]}'
    if frequency == 'yearly' and day_of_month is not None and getattr(definition, 'start_date', None):
        month_name = calendar.month_name[as_date(definition.start_date).month]
        return f'{label} on {month_name} {day_of_month}'
    if day_of_month is not None:
        return f'{label} on day {day_of_month}'
    return label
