"""Date rules used by calendar entries.

All arithmetic is date-only (``datetime.date`` + ``timedelta``), so results do
not depend on the server timezone or DST transitions.
"""

import calendar as _calendar
import logging
from datetime import date, timedelta
from typing import List, Optional

from src.scheduling_bc.calendar.domain.entities import CalendarEntry, DateType

logger = logging.getLogger(__name__)


def easter_sunday(year: int) -> date:
    """Easter Sunday for a Gregorian year (Anonymous Gregorian algorithm).

    Also known as the Meeus/Jones/Butcher algorithm.
    """
    a = year % 19
    b = year // 100
    c = year % 100
    d = b // 4
    e = b % 4
    f = (b + 8) // 25
    g = (b - f + 1) // 3
    h = (19 * a + b - d - g + 15) % 30
    i = c // 4
    k = c % 4
    l = (32 + 2 * e + 2 * i - h - k) % 7  # noqa: E741
    m = (a + 11 * h + 22 * l) // 451
    month = (h + l - 7 * m + 114) // 31
    day = ((h + l - 7 * m + 114) % 31) + 1
    return date(year, month, day)


def easter_relative(year: int, offset: int) -> date:
    """Date offset days from Easter Sunday (negative = before)."""
    return easter_sunday(year) + timedelta(days=offset)


def sunday_based_weekday(d: date) -> int:
    """Weekday with 0=Sunday .. 6=Saturday."""
    return (d.weekday() + 1) % 7


def nth_weekday_of_month(year: int, month: int, weekday: int, nth: int) -> Optional[date]:
    """The nth given weekday of a month, or None when it does not exist.

    Args:
        year: Calendar year
        month: Month 1-12
        weekday: 0=Sunday .. 6=Saturday
        nth: 1..5 from the start of the month, -1..-5 from the end; 0 never matches

    Returns:
        The date, or None if the occurrence overflows (or underflows) the month
    """
    if nth == 0:
        return None

    last_day = _calendar.monthrange(year, month)[1]

    if nth > 0:
        first_weekday = sunday_based_weekday(date(year, month, 1))
        day = 1 + ((weekday - first_weekday) % 7) + (nth - 1) * 7
        if day > last_day:
            return None
    else:
        last_weekday = sunday_based_weekday(date(year, month, last_day))
        day = last_day - ((last_weekday - weekday) % 7) + (nth + 1) * 7
        if day < 1:
            return None

    return date(year, month, day)


def parse_iso_date(value: str) -> date:
    return date.fromisoformat(value)


def _fixed_dates(entry: CalendarEntry, year: int, calendar_year: Optional[int]) -> List[date]:
    value = entry.fixed_date
    if not value:
        return []

    parts = value.split("-")
    if len(parts) == 3:
        # Specific-year date, only meaningful for its own year
        specific = parse_iso_date(value)
        return [specific] if specific.year == year else []

    if len(parts) != 2:
        raise ValueError(f"Unrecognised fixed date '{value}'")

    month, day = int(parts[0]), int(parts[1])
    if not entry.is_recurring and calendar_year != year:
        return []
    return [date(year, month, day)]


def _range_dates(entry: CalendarEntry, year: int) -> List[date]:
    start = parse_iso_date(entry.start_date)
    end = parse_iso_date(entry.end_date)
    if not (start.year <= year <= end.year):
        return []

    # Clip to the requested year before enumerating
    current = max(start, date(year, 1, 1))
    last = min(end, date(year, 12, 31))
    dates = []
    while current <= last:
        dates.append(current)
        current += timedelta(days=1)
    return dates


def resolve_entry_dates(
    entry: CalendarEntry,
    year: int,
    calendar_year: Optional[int] = None,
) -> List[date]:
    """Concrete dates an entry produces in a year.

    Ranges take precedence over the entry's date type. Malformed entries
    (bad format, impossible dates such as 02-29 in a common year) yield no
    dates and are logged at debug level.
    """
    try:
        if entry.is_range:
            return _range_dates(entry, year)

        if entry.date_type == DateType.FIXED:
            return _fixed_dates(entry, year, calendar_year)

        if entry.date_type == DateType.EASTER_RELATIVE:
            if entry.easter_offset is None:
                return []
            return [easter_relative(year, entry.easter_offset)]

        if entry.date_type == DateType.NTH_WEEKDAY:
            nw = entry.nth_weekday
            if nw is None:
                return []
            resolved = nth_weekday_of_month(year, nw.month, nw.weekday, nw.nth)
            return [resolved] if resolved else []
    except (ValueError, TypeError) as e:
        logger.debug(f"Skipping calendar entry {entry.id} ({entry.name}) for {year}: {e}")
        return []

    return []
