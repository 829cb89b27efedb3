from .calendar import CalendarType, DateType, NthWeekday, CalendarEntry, CalendarDate

__all__ = ["CalendarType", "DateType", "NthWeekday", "CalendarEntry", "CalendarDate"]
