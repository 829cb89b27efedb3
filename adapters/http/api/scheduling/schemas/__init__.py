"""Centralized API schemas for scheduling endpoints."""

from .calendar_schemas import (
    NthWeekdaySchema,
    CalendarEntryCreate,
    CalendarEntryUpdate,
    CalendarEntryResponse,
    CalendarCreate,
    CalendarUpdate,
    CalendarResponse,
    CalendarDetailResponse,
    CalendarDateResponse,
    HolidayImportRequest,
    HolidayImportResponse,
)

from .schedule_schemas import (
    ScheduleStopTimeInput,
    CalendarModifierSchema,
    ScheduleCreate,
    ScheduleUpdate,
    ScheduleStopTimeResponse,
    ScheduleExceptionCreate,
    ScheduleExceptionResponse,
    ScheduleResponse,
    OccurrenceResponse,
    RRuleDescribeRequest,
    RRuleDescribeResponse,
)

from .trip_schemas import (
    StopTimeResponse,
    TripResponse,
    ManualTripCreate,
    TripUpdate,
    AssignDriverRequest,
    CancelTripRequest,
    StopEventRequest,
)

__all__ = [
    # Calendars
    "NthWeekdaySchema",
    "CalendarEntryCreate",
    "CalendarEntryUpdate",
    "CalendarEntryResponse",
    "CalendarCreate",
    "CalendarUpdate",
    "CalendarResponse",
    "CalendarDetailResponse",
    "CalendarDateResponse",
    "HolidayImportRequest",
    "HolidayImportResponse",
    # Schedules
    "ScheduleStopTimeInput",
    "CalendarModifierSchema",
    "ScheduleCreate",
    "ScheduleUpdate",
    "ScheduleStopTimeResponse",
    "ScheduleExceptionCreate",
    "ScheduleExceptionResponse",
    "ScheduleResponse",
    "OccurrenceResponse",
    "RRuleDescribeRequest",
    "RRuleDescribeResponse",
    # Trips
    "StopTimeResponse",
    "TripResponse",
    "ManualTripCreate",
    "TripUpdate",
    "AssignDriverRequest",
    "CancelTripRequest",
    "StopEventRequest",
]
