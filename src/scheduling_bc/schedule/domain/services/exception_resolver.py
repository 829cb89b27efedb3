from datetime import date
from typing import Dict, Iterable, List, Optional

from src.scheduling_bc.schedule.domain.entities import (
    ScheduleException,
    SkipException,
    ModifyException,
    ResolvedOccurrence,
)


def resolve_exceptions(
    dates: Iterable[date],
    exceptions: Iterable[ScheduleException],
    departure_time: str,
    arrival_time: str,
    vehicle_id: Optional[str] = None,
    driver_id: Optional[str] = None,
) -> List[ResolvedOccurrence]:
    """Merge per-date exceptions into the schedule defaults.

    Skipped dates are dropped; modified dates take every field the exception
    sets and fall back to the defaults for the rest. Output order follows the
    input dates. Times stay as HH:MM; overnight rollover is applied when the
    occurrence is turned into timestamps.
    """
    by_date: Dict[date, ScheduleException] = {e.date: e for e in exceptions}
    resolved = []

    for d in dates:
        exception = by_date.get(d)

        if isinstance(exception, SkipException):
            continue

        if isinstance(exception, ModifyException):
            resolved.append(ResolvedOccurrence(
                date=d,
                departure_time=exception.departure_time or departure_time,
                arrival_time=exception.arrival_time or arrival_time,
                vehicle_id=exception.vehicle_id or vehicle_id,
                driver_id=exception.driver_id or driver_id,
                is_modified=True,
                modification_reason=exception.reason,
            ))
            continue

        resolved.append(ResolvedOccurrence(
            date=d,
            departure_time=departure_time,
            arrival_time=arrival_time,
            vehicle_id=vehicle_id,
            driver_id=driver_id,
        ))

    return resolved
