"""Public holiday import using python-holidays.

Rule-based calendars (Easter offsets, nth weekdays) cover most countries, but
some holidays move by decree or follow lunar calendars. Importing a year from
python-holidays adds them as year-specific fixed entries.
"""

import logging
from datetime import date
from typing import Dict, Optional

import holidays as holidays_lib
from sqlalchemy.orm import Session

from core.errors import ValidationError
from src.scheduling_bc.calendar.domain.entities import DateType
from src.scheduling_bc.calendar.infrastructure.models import CalendarEntryModel
from src.scheduling_bc.calendar.infrastructure.services.calendar_service import CalendarService

logger = logging.getLogger(__name__)


def get_country_holidays(country: str, year: int, region: Optional[str] = None) -> Dict[date, str]:
    """National (and optionally regional) holidays for a year.

    Args:
        country: ISO 3166-1 alpha-2 code (e.g., 'PL')
        year: Year to get holidays for
        region: Optional ISO 3166-2 subdivision code understood by python-holidays

    Returns:
        date -> holiday name
    """
    try:
        country_holidays = holidays_lib.country_holidays(country.upper(), subdiv=region, years=year)
    except NotImplementedError:
        raise ValidationError(f"No holiday data available for country '{country}'")
    return dict(sorted(country_holidays.items()))


class HolidayImporter:
    """Adds a country's public holidays for a year to a calendar."""

    def __init__(self, db: Session):
        self.db = db
        self.calendars = CalendarService(db)

    def import_year(
        self,
        calendar_id: str,
        year: int,
        country: Optional[str] = None,
        region: Optional[str] = None,
    ) -> int:
        """Import holidays as YYYY-MM-DD entries, skipping dates already present.

        country and region default to the calendar's own.

        Returns:
            Number of entries created
        """
        calendar = self.calendars.get(calendar_id)
        country = country or calendar.country
        if not country:
            raise ValidationError(f"Calendar {calendar.code} has no country; pass one explicitly")
        region = region or calendar.region

        existing = {e.fixed_date for e in calendar.entries if e.fixed_date}
        created = 0

        for day, name in get_country_holidays(country, year, region).items():
            iso = day.isoformat()
            if iso in existing or day.strftime("%m-%d") in existing:
                continue
            self.db.add(CalendarEntryModel(
                calendar_id=calendar.id,
                name=name,
                date_type=DateType.FIXED.value,
                fixed_date=iso,
                is_recurring=False,
            ))
            created += 1

        self.db.commit()
        logger.info(f"Imported {created} {country.upper()} holidays for {year} into {calendar.code}")
        return created
