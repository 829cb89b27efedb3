from .schedule import (
    ScheduleType,
    ExceptionType,
    ModifierType,
    SkipException,
    ModifyException,
    ScheduleException,
    exception_from_model,
    ExcludeCalendar,
    IncludeOnlyCalendar,
    ExcludeDates,
    CalendarModifier,
    parse_modifier,
    parse_modifiers,
    modifier_to_dict,
    referenced_calendar_ids,
    ResolvedOccurrence,
)

__all__ = [
    "ScheduleType",
    "ExceptionType",
    "ModifierType",
    "SkipException",
    "ModifyException",
    "ScheduleException",
    "exception_from_model",
    "ExcludeCalendar",
    "IncludeOnlyCalendar",
    "ExcludeDates",
    "CalendarModifier",
    "parse_modifier",
    "parse_modifiers",
    "modifier_to_dict",
    "referenced_calendar_ids",
    "ResolvedOccurrence",
]
