"""Unit tests for calendar modifiers."""

import pytest
from datetime import date

from src.scheduling_bc.schedule.domain.entities import (
    ExcludeCalendar,
    IncludeOnlyCalendar,
    ExcludeDates,
    parse_modifier,
    modifier_to_dict,
    referenced_calendar_ids,
)
from src.scheduling_bc.schedule.domain.services import apply_modifiers


CHRISTMAS_WEEK = [date(2026, 12, 24), date(2026, 12, 25), date(2026, 12, 26)]


class TestApplyModifiers:
    """Tests for apply_modifiers."""

    def test_exclude_calendar(self):
        """Dates in an excluded calendar are dropped."""
        result = apply_modifiers(
            CHRISTMAS_WEEK,
            [ExcludeCalendar("pl-holidays")],
            {"pl-holidays": {date(2026, 12, 25)}},
        )
        assert result == [date(2026, 12, 24), date(2026, 12, 26)]

    def test_include_only_calendar(self):
        """Only dates in the calendar survive include_only."""
        result = apply_modifiers(
            CHRISTMAS_WEEK,
            [IncludeOnlyCalendar("school-break")],
            {"school-break": {date(2026, 12, 26), date(2026, 12, 27)}},
        )
        assert result == [date(2026, 12, 26)]

    def test_exclude_dates(self):
        result = apply_modifiers(CHRISTMAS_WEEK, [ExcludeDates((date(2026, 12, 24),))], {})
        assert result == [date(2026, 12, 25), date(2026, 12, 26)]

    def test_modifiers_apply_in_order(self):
        """Each modifier narrows the output of the previous one."""
        result = apply_modifiers(
            CHRISTMAS_WEEK,
            [
                IncludeOnlyCalendar("winter"),
                ExcludeCalendar("holidays"),
                ExcludeDates((date(2026, 12, 26),)),
            ],
            {
                "winter": set(CHRISTMAS_WEEK),
                "holidays": {date(2026, 12, 25)},
            },
        )
        assert result == [date(2026, 12, 24)]

    @pytest.mark.parametrize("modifier", [ExcludeCalendar("missing"), IncludeOnlyCalendar("missing")])
    def test_unresolved_calendar_is_ignored(self, modifier):
        """A calendar absent from the resolved map leaves the dates untouched."""
        assert apply_modifiers(CHRISTMAS_WEEK, [modifier], {}) == CHRISTMAS_WEEK

    def test_no_modifiers(self):
        assert apply_modifiers(CHRISTMAS_WEEK, [], {}) == CHRISTMAS_WEEK


class TestModifierParsing:
    """Tests for modifier descriptors."""

    def test_parse_calendar_modifiers(self):
        assert parse_modifier({"type": "exclude", "calendar_id": "c1"}) == ExcludeCalendar("c1")
        assert parse_modifier({"type": "include_only", "calendar_id": "c2"}) == IncludeOnlyCalendar("c2")

    def test_parse_exclude_dates_from_strings_and_dates(self):
        parsed = parse_modifier({"type": "exclude_dates", "dates": ["2026-12-24", date(2026, 12, 31)]})
        assert parsed == ExcludeDates((date(2026, 12, 24), date(2026, 12, 31)))

    @pytest.mark.parametrize("raw", [
        {"type": "exclude"},
        {"type": "sometimes", "calendar_id": "c1"},
        {"type": "exclude_dates", "dates": ["24/12/2026"]},
    ])
    def test_parse_rejects_malformed(self, raw):
        with pytest.raises(ValueError):
            parse_modifier(raw)

    def test_stored_form(self):
        assert modifier_to_dict(ExcludeDates((date(2026, 1, 1),))) == {
            "type": "exclude_dates",
            "dates": ["2026-01-01"],
        }
        assert modifier_to_dict(IncludeOnlyCalendar("c1")) == {"type": "include_only", "calendar_id": "c1"}

    def test_referenced_calendar_ids_are_distinct_and_ordered(self):
        modifiers = [
            ExcludeCalendar("b"),
            ExcludeDates(()),
            IncludeOnlyCalendar("a"),
            ExcludeCalendar("b"),
        ]
        assert referenced_calendar_ids(modifiers) == ["b", "a"]
