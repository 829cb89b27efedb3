"""Unit tests for calendar date rules."""

import pytest
from datetime import date

from src.scheduling_bc.calendar.domain.entities import CalendarEntry, DateType, NthWeekday
from src.scheduling_bc.calendar.domain.value_objects import (
    easter_sunday,
    easter_relative,
    nth_weekday_of_month,
    resolve_entry_dates,
)


def entry(**kwargs):
    defaults = {"id": "e1", "name": "Entry", "date_type": DateType.FIXED}
    defaults.update(kwargs)
    return CalendarEntry(**defaults)


class TestEaster:
    """Tests for Easter Sunday computation."""

    @pytest.mark.parametrize("year,expected", [
        (2024, date(2024, 3, 31)),
        (2025, date(2025, 4, 20)),
        (2026, date(2026, 4, 5)),
        (2038, date(2038, 4, 25)),
    ])
    def test_easter_sunday(self, year, expected):
        """Easter Sunday should match the Gregorian computus."""
        assert easter_sunday(year) == expected

    def test_easter_relative_offsets(self):
        """Offsets count days from Easter Sunday, in both directions."""
        assert easter_relative(2026, 1) == date(2026, 4, 6)     # Easter Monday
        assert easter_relative(2026, 60) == date(2026, 6, 4)    # Corpus Christi
        assert easter_relative(2026, -2) == date(2026, 4, 3)    # Good Friday


class TestNthWeekday:
    """Tests for nth weekday of month (0=Sunday .. 6=Saturday)."""

    def test_fourth_thursday_of_november(self):
        """4th Thursday of November 2024 is the 28th."""
        assert nth_weekday_of_month(2024, 11, 4, 4) == date(2024, 11, 28)

    def test_last_monday_of_may(self):
        """nth=-1 counts from the end of the month."""
        assert nth_weekday_of_month(2024, 5, 1, -1) == date(2024, 5, 27)

    def test_first_sunday_when_month_starts_on_sunday(self):
        """The 1st is returned when it already is the wanted weekday."""
        assert nth_weekday_of_month(2026, 2, 0, 1) == date(2026, 2, 1)

    def test_overflow_returns_none(self):
        """A fifth Monday that does not exist yields None."""
        assert nth_weekday_of_month(2026, 2, 1, 5) is None

    def test_zero_never_matches(self):
        """nth=0 is not a valid occurrence."""
        assert nth_weekday_of_month(2026, 5, 1, 0) is None


class TestResolveEntryDates:
    """Tests for resolving a single entry to dates."""

    def test_recurring_month_day(self):
        """MM-DD entries repeat every year."""
        e = entry(fixed_date="12-25")
        assert resolve_entry_dates(e, 2026) == [date(2026, 12, 25)]
        assert resolve_entry_dates(e, 2030) == [date(2030, 12, 25)]

    def test_specific_year_date(self):
        """YYYY-MM-DD entries only produce their own year."""
        e = entry(fixed_date="2026-11-10")
        assert resolve_entry_dates(e, 2026) == [date(2026, 11, 10)]
        assert resolve_entry_dates(e, 2027) == []

    def test_non_recurring_month_day_follows_calendar_year(self):
        """A one-off MM-DD entry resolves only in the calendar's year."""
        e = entry(fixed_date="05-02", is_recurring=False)
        assert resolve_entry_dates(e, 2026, calendar_year=2026) == [date(2026, 5, 2)]
        assert resolve_entry_dates(e, 2027, calendar_year=2026) == []

    def test_impossible_date_is_skipped(self):
        """02-29 in a common year yields nothing instead of failing."""
        e = entry(fixed_date="02-29")
        assert resolve_entry_dates(e, 2026) == []
        assert resolve_entry_dates(e, 2028) == [date(2028, 2, 29)]

    def test_malformed_fixed_date_is_skipped(self):
        """Unparseable values yield nothing."""
        assert resolve_entry_dates(entry(fixed_date="christmas"), 2026) == []

    def test_easter_relative_entry(self):
        e = entry(date_type=DateType.EASTER_RELATIVE, easter_offset=49)
        assert resolve_entry_dates(e, 2026) == [date(2026, 5, 24)]

    def test_nth_weekday_entry(self):
        e = entry(date_type=DateType.NTH_WEEKDAY, nth_weekday=NthWeekday(month=11, weekday=4, nth=4))
        assert resolve_entry_dates(e, 2024) == [date(2024, 11, 28)]

    def test_range_clipped_to_year(self):
        """A range crossing New Year is split between the two years."""
        e = entry(start_date="2025-12-20", end_date="2026-01-06", is_recurring=False)
        dates_2025 = resolve_entry_dates(e, 2025)
        dates_2026 = resolve_entry_dates(e, 2026)
        assert dates_2025[0] == date(2025, 12, 20)
        assert len(dates_2025) == 12
        assert dates_2026 == [date(2026, 1, d) for d in range(1, 7)]
        assert resolve_entry_dates(e, 2027) == []

    def test_range_takes_precedence_over_date_type(self):
        """start/end dates win even when a fixed date is also set."""
        e = entry(fixed_date="01-01", start_date="2026-07-01", end_date="2026-07-03")
        assert resolve_entry_dates(e, 2026) == [date(2026, 7, 1), date(2026, 7, 2), date(2026, 7, 3)]
