from .calendar_model import CalendarModel, CalendarEntryModel

__all__ = ["CalendarModel", "CalendarEntryModel"]
