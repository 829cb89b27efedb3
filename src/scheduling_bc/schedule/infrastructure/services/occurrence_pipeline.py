"""Schedule occurrence pipeline.

recurrence -> calendar modifiers -> per-date exceptions, for one schedule and
an optional date window. Shared by the projector, the materializer and the
schedule preview so they agree on which dates run.
"""

import logging
from datetime import date
from typing import List, Optional

from core.config import settings
from src.scheduling_bc.calendar.infrastructure.services import CalendarDateResolver
from src.scheduling_bc.schedule.domain.entities import (
    CalendarModifier,
    ResolvedOccurrence,
    ScheduleType,
    exception_from_model,
    parse_modifier,
    referenced_calendar_ids,
)
from src.scheduling_bc.schedule.domain.services import (
    expand_recurrence,
    single_occurrence,
    apply_modifiers,
    resolve_exceptions,
)
from src.scheduling_bc.schedule.infrastructure.models import ScheduleModel

logger = logging.getLogger(__name__)


def schedule_modifiers(schedule: ScheduleModel) -> List[CalendarModifier]:
    """Parsed modifiers of a schedule; malformed descriptors are logged and dropped."""
    modifiers = []
    for raw in schedule.calendar_modifiers or []:
        try:
            modifiers.append(parse_modifier(raw))
        except (ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring malformed calendar modifier {raw!r} on schedule {schedule.id}: {e}")
    return modifiers


def candidate_dates(
    schedule: ScheduleModel,
    window_start: Optional[date] = None,
    window_end: Optional[date] = None,
) -> List[date]:
    """Raw dates of a schedule, clipped to [max(valid_from, start), min(valid_to, end)]."""
    start = max(schedule.valid_from, window_start) if window_start else schedule.valid_from
    end = schedule.valid_to
    if window_end:
        end = min(end, window_end) if end else window_end
    if end and start > end:
        return []

    if schedule.schedule_type == ScheduleType.SINGLE.value:
        return [d for d in single_occurrence(schedule.valid_from) if d >= start and (end is None or d <= end)]

    if not schedule.recurrence_rule:
        logger.warning(f"Recurring schedule {schedule.id} has no recurrence rule")
        return []

    return expand_recurrence(
        schedule.recurrence_rule,
        schedule.valid_from,
        schedule.valid_to,
        window_start=start,
        window_end=end,
        default_window_days=settings.scheduling.SCHEDULING_DEFAULT_WINDOW_DAYS,
    )


def schedule_occurrences(
    schedule: ScheduleModel,
    resolver: CalendarDateResolver,
    window_start: Optional[date] = None,
    window_end: Optional[date] = None,
) -> List[ResolvedOccurrence]:
    """Final occurrences of a schedule within a window.

    The resolver caches calendar date sets, so sharing one across schedules
    resolves every (calendar, year) once.
    """
    dates = candidate_dates(schedule, window_start, window_end)
    if not dates:
        return []

    modifiers = schedule_modifiers(schedule)
    if modifiers:
        calendar_ids = referenced_calendar_ids(modifiers)
        calendar_dates = resolver.date_sets(calendar_ids, {d.year for d in dates})
        dates = apply_modifiers(dates, modifiers, calendar_dates)

    exceptions = [exception_from_model(e) for e in schedule.exceptions]
    occurrences = resolve_exceptions(
        dates,
        exceptions,
        schedule.departure_time,
        schedule.arrival_time,
        schedule.vehicle_id,
        schedule.driver_id,
    )
    logger.debug(f"Schedule {schedule.id}: {len(occurrences)} occurrences in window")
    return occurrences
