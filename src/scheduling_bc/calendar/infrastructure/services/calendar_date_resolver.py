import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy.orm import Session, selectinload

from core.errors import NotFoundError
from src.scheduling_bc.calendar.domain.entities import CalendarEntry, CalendarDate
from src.scheduling_bc.calendar.domain.value_objects import resolve_entry_dates
from src.scheduling_bc.calendar.infrastructure.models import CalendarModel

logger = logging.getLogger(__name__)


def resolve_calendar(calendar: CalendarModel, year: int) -> List[CalendarDate]:
    """Concrete dates of a loaded calendar for one year, sorted ascending.

    The calendar year only scopes non-recurring MM-DD entries; ranges and
    YYYY-MM-DD dates contribute to whichever years they fall in.
    """
    dates = []
    for row in calendar.entries:
        try:
            entry = CalendarEntry.from_model(row)
        except (ValueError, KeyError, TypeError) as e:
            logger.debug(f"Skipping malformed calendar entry {row.id} in {calendar.code}: {e}")
            continue

        for d in resolve_entry_dates(entry, year, calendar_year=calendar.year):
            dates.append(CalendarDate(date=d, name=entry.name, entry_id=entry.id))

    dates.sort(key=lambda cd: cd.iso)
    return dates


class CalendarDateResolver:
    """Resolves calendars to date sets, caching per (calendar_id, year).

    One resolver is meant to live for a single request or projection, so
    every calendar is loaded at most once.
    """

    def __init__(self, db: Session):
        self.db = db
        self._calendars: Dict[str, Optional[CalendarModel]] = {}
        self._sets: Dict[Tuple[str, int], Set[date]] = {}

    def _load(self, calendar_id: str) -> Optional[CalendarModel]:
        if calendar_id not in self._calendars:
            self._calendars[calendar_id] = (
                self.db.query(CalendarModel)
                .options(selectinload(CalendarModel.entries))
                .filter(CalendarModel.id == calendar_id)
                .first()
            )
        return self._calendars[calendar_id]

    def resolve(self, calendar_id: str, year: int) -> List[CalendarDate]:
        """Dates of a calendar for a year. Raises NotFoundError for unknown calendars."""
        calendar = self._load(calendar_id)
        if calendar is None:
            raise NotFoundError(f"Calendar {calendar_id} not found")
        return resolve_calendar(calendar, year)

    def resolve_by_code(self, code: str, year: int) -> List[CalendarDate]:
        calendar = (
            self.db.query(CalendarModel)
            .options(selectinload(CalendarModel.entries))
            .filter(CalendarModel.code == code)
            .first()
        )
        if calendar is None:
            raise NotFoundError(f"Calendar with code '{code}' not found")
        self._calendars[calendar.id] = calendar
        return resolve_calendar(calendar, year)

    def date_set(self, calendar_id: str, year: int) -> Set[date]:
        key = (calendar_id, year)
        if key not in self._sets:
            self._sets[key] = {cd.date for cd in self.resolve(calendar_id, year)}
        return self._sets[key]

    def date_sets(self, calendar_ids: Iterable[str], years: Iterable[int]) -> Dict[str, Set[date]]:
        """Union of each calendar's dates over the given years.

        Calendars that cannot be resolved are logged and left out of the
        result, so modifiers referencing them do nothing.
        """
        years = sorted(set(years))
        result: Dict[str, Set[date]] = {}
        for calendar_id in calendar_ids:
            try:
                merged: Set[date] = set()
                for year in years:
                    merged |= self.date_set(calendar_id, year)
                result[calendar_id] = merged
            except NotFoundError as e:
                logger.warning(f"Calendar modifier ignored: {e.message}")
        return result
