"""
Period boundaries and date sequences in local calendar time.

Every function here is pure: no I/O, no clock access beyond `date.today()`
when the caller does not pass `today`. Dates are `datetime.date` values,
which carry no time-of-day or timezone, and strings are always "YYYY-MM-DD".

Parsing never goes through a timestamp parser: the text is split on "-" into
integer year/month/day and a calendar date is built from those. A value such
as "2024-05-01T23:30:00-03:00" is never turned into a UTC instant that could
land on a different day.

Usage:
    from opsreport.services.calendar import date_range, period_for

    date_range("2026-10-12", "2026-10-16")
    period = period_for(ReportKind.WEEKLY)
"""

from datetime import date, timedelta
from typing import List, Optional, Tuple, Union

from opsreport.core.errors import InvalidRangeError
from opsreport.models.enums import ReportKind
from opsreport.models.schemas import Period


DateLike = Union[str, date]

# pt-BR month names, matching the "Month Year" label of the monthly report
MONTH_NAMES_PT_BR = (
    "janeiro", "fevereiro", "março", "abril", "maio", "junho",
    "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
)


# =============================================================================
# Parse / format
# =============================================================================

def parse_ymd(value: DateLike) -> date:
    """
    Parse "YYYY-MM-DD" into a local calendar date.

    Args:
        value: Date string, or a date (returned unchanged).

    Returns:
        date: The calendar date.

    Raises:
        InvalidRangeError: If the text is not three integer parts forming a valid date.
    """
    if isinstance(value, date):
        return value
    parts = str(value).strip().split("-")
    if len(parts) != 3:
        raise InvalidRangeError(f"Invalid date: {value!r}")
    try:
        year, month, day = (int(part) for part in parts)
        return date(year, month, day)
    except ValueError as e:
        raise InvalidRangeError(f"Invalid date: {value!r}") from e


def format_ymd(value: date) -> str:
    return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"


def _today(today: Optional[date]) -> date:
    return today if today is not None else date.today()


def format_date(offset_days: int = 0, today: Optional[date] = None) -> str:
    """
    Today's local date shifted by `offset_days` (negative means past).

    >>> format_date(-1, today=date(2026, 3, 1))
    '2026-02-28'
    """
    return format_ymd(_today(today) + timedelta(days=offset_days))


def shift_date(value: DateLike, days: int) -> str:
    """Shift a "YYYY-MM-DD" date by a number of calendar days."""
    return format_ymd(parse_ymd(value) + timedelta(days=days))


# =============================================================================
# Ranges
# =============================================================================

def date_range(start: DateLike, end: DateLike) -> List[str]:
    """
    Every calendar date from start to end inclusive, ascending.

    Args:
        start: First date ("YYYY-MM-DD" or date).
        end: Last date ("YYYY-MM-DD" or date).

    Returns:
        List of "YYYY-MM-DD" strings, length (end - start).days + 1.

    Raises:
        InvalidRangeError: If start parses after end, or either is malformed.
    """
    first = parse_ymd(start)
    last = parse_ymd(end)
    if first > last:
        raise InvalidRangeError(
            f"Range start {format_ymd(first)} is after end {format_ymd(last)}"
        )
    return [
        format_ymd(first + timedelta(days=offset))
        for offset in range((last - first).days + 1)
    ]


def last_week_range(today: Optional[date] = None) -> Tuple[str, str]:
    """
    Monday and Friday of the ISO week before the current one.

    Sunday is day 7 of its week, so on a Sunday the current week's Monday is
    six days back, not the next day.

    Returns:
        Tuple of ("YYYY-MM-DD" Monday, "YYYY-MM-DD" Friday).
    """
    current = _today(today)
    current_monday = current - timedelta(days=current.isoweekday() - 1)
    last_monday = current_monday - timedelta(days=7)
    last_friday = last_monday + timedelta(days=4)
    return format_ymd(last_monday), format_ymd(last_friday)


def month_label(value: date) -> str:
    """pt-BR "month of year" label, e.g. "setembro de 2026"."""
    return f"{MONTH_NAMES_PT_BR[value.month - 1]} de {value.year}"


def last_month_range(today: Optional[date] = None) -> Tuple[str, str, str]:
    """
    First and last day of the month before the current one.

    Returns:
        Tuple of (first day, last day, month label).
    """
    first_of_current = _today(today).replace(day=1)
    last_of_previous = first_of_current - timedelta(days=1)
    first_of_previous = last_of_previous.replace(day=1)
    return (
        format_ymd(first_of_previous),
        format_ymd(last_of_previous),
        month_label(first_of_previous),
    )


# =============================================================================
# Period builders
# =============================================================================

def daily_period(today: Optional[date] = None) -> Period:
    """The previous calendar day."""
    day = parse_ymd(format_date(-1, today))
    return Period(start=day, end=day, label=format_ymd(day), kind=ReportKind.DAILY)


def weekly_period(today: Optional[date] = None) -> Period:
    """Monday to Friday of the previous ISO week."""
    start, end = last_week_range(today)
    return Period(
        start=parse_ymd(start),
        end=parse_ymd(end),
        label=f"semana_{start}_a_{end}",
        kind=ReportKind.WEEKLY,
    )


def monthly_period(today: Optional[date] = None) -> Period:
    """First to last day of the previous month."""
    start, end, label = last_month_range(today)
    return Period(
        start=parse_ymd(start),
        end=parse_ymd(end),
        label=label,
        kind=ReportKind.MONTHLY,
    )


_PERIOD_BUILDERS = {
    ReportKind.DAILY: daily_period,
    ReportKind.WEEKLY: weekly_period,
    ReportKind.MONTHLY: monthly_period,
}


def period_for(kind: ReportKind, today: Optional[date] = None) -> Period:
    """Build the period a report of `kind` covers when run on `today`."""
    return _PERIOD_BUILDERS[ReportKind(kind)](today)
