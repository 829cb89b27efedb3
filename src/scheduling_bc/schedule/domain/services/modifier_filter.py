import logging
from datetime import date
from typing import Dict, List, Set

from src.scheduling_bc.schedule.domain.entities import (
    CalendarModifier,
    ExcludeCalendar,
    IncludeOnlyCalendar,
    ExcludeDates,
)

logger = logging.getLogger(__name__)


def apply_modifiers(
    dates: List[date],
    modifiers: List[CalendarModifier],
    calendar_dates: Dict[str, Set[date]],
) -> List[date]:
    """Narrow candidate dates with the schedule's calendar modifiers.

    Modifiers apply in list order and each one only removes dates. A calendar
    modifier whose calendar is absent from calendar_dates (unknown or failed
    to resolve) leaves the dates untouched.

    Args:
        dates: Candidate dates, in order
        modifiers: Ordered modifiers
        calendar_dates: calendar_id -> resolved dates, pre-resolved by the caller

    Returns:
        The surviving dates, in input order
    """
    result = list(dates)

    for modifier in modifiers:
        if isinstance(modifier, ExcludeDates):
            if modifier.dates:
                excluded = set(modifier.dates)
                result = [d for d in result if d not in excluded]

        elif isinstance(modifier, ExcludeCalendar):
            members = calendar_dates.get(modifier.calendar_id)
            if members is None:
                logger.debug(f"Exclude modifier skipped, calendar {modifier.calendar_id} not resolved")
                continue
            result = [d for d in result if d not in members]

        elif isinstance(modifier, IncludeOnlyCalendar):
            members = calendar_dates.get(modifier.calendar_id)
            if members is None:
                logger.debug(f"Include-only modifier skipped, calendar {modifier.calendar_id} not resolved")
                continue
            result = [d for d in result if d in members]

    return result
