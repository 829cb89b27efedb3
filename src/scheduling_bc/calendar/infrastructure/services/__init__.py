from .calendar_date_resolver import CalendarDateResolver, resolve_calendar
from .calendar_service import CalendarService
from .holiday_importer import HolidayImporter, get_country_holidays

__all__ = [
    "CalendarDateResolver",
    "resolve_calendar",
    "CalendarService",
    "HolidayImporter",
    "get_country_holidays",
]
