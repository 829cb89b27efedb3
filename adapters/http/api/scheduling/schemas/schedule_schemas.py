"""Schedule request/response schemas."""

from datetime import date, datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field, model_validator


HHMM_PATTERN = r"^([01]\d|2[0-3]):([0-5]\d)$"


class ScheduleStopTimeInput(BaseModel):
    """Explicit times at a route stop (required at least for first and last stop)."""
    route_stop_id: str
    arrival_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    departure_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)


class CalendarModifierSchema(BaseModel):
    type: Literal["exclude", "include_only", "exclude_dates"]
    calendar_id: Optional[str] = None  # exclude / include_only
    dates: Optional[List[date]] = None  # exclude_dates

    @model_validator(mode="after")
    def check_target(self):
        if self.type in ("exclude", "include_only") and not self.calendar_id:
            raise ValueError(f"'{self.type}' modifiers need calendar_id")
        return self


class ScheduleCreate(BaseModel):
    company_id: str
    route_id: str
    vehicle_id: Optional[str] = None
    driver_id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    departure_time: str = Field(..., pattern=HHMM_PATTERN, examples=["08:00"])
    arrival_time: str = Field(..., pattern=HHMM_PATTERN, examples=["11:30"])
    schedule_type: Literal["single", "recurring"] = "recurring"
    recurrence_rule: Optional[str] = Field(None, examples=["FREQ=WEEKLY;BYDAY=MO,WE,FR"])
    valid_from: date
    valid_to: Optional[date] = None
    calendar_modifiers: List[CalendarModifierSchema] = []
    stop_times: Optional[List[ScheduleStopTimeInput]] = None
    is_active: bool = True


class ScheduleUpdate(BaseModel):
    vehicle_id: Optional[str] = None
    driver_id: Optional[str] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    departure_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    arrival_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    schedule_type: Optional[Literal["single", "recurring"]] = None
    recurrence_rule: Optional[str] = None
    valid_from: Optional[date] = None
    valid_to: Optional[date] = None
    calendar_modifiers: Optional[List[CalendarModifierSchema]] = None
    stop_times: Optional[List[ScheduleStopTimeInput]] = None  # Replaces the whole set
    is_active: Optional[bool] = None


class ScheduleStopTimeResponse(BaseModel):
    route_stop_id: str
    arrival_time: str
    departure_time: str

    class Config:
        from_attributes = True


class ScheduleExceptionCreate(BaseModel):
    date: date
    exception_type: Literal["skip", "modify"]
    departure_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    arrival_time: Optional[str] = Field(None, pattern=HHMM_PATTERN)
    vehicle_id: Optional[str] = None
    driver_id: Optional[str] = None
    reason: Optional[str] = None


class ScheduleExceptionResponse(BaseModel):
    id: str
    schedule_id: str
    date: date
    exception_type: str
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    vehicle_id: Optional[str] = None
    driver_id: Optional[str] = None
    reason: Optional[str] = None

    class Config:
        from_attributes = True


class ScheduleResponse(BaseModel):
    id: str
    company_id: str
    route_id: str
    vehicle_id: Optional[str] = None
    driver_id: Optional[str] = None
    name: str
    description: Optional[str] = None
    departure_time: str
    arrival_time: str
    schedule_type: str
    recurrence_rule: Optional[str] = None
    recurrence_description: Optional[str] = None
    valid_from: date
    valid_to: Optional[date] = None
    calendar_modifiers: List[dict] = []
    is_active: bool
    stop_times: List[ScheduleStopTimeResponse] = []
    exceptions: List[ScheduleExceptionResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class OccurrenceResponse(BaseModel):
    """One resolved occurrence of a schedule (preview)."""
    date: date
    departure_time: str
    arrival_time: str
    vehicle_id: Optional[str] = None
    driver_id: Optional[str] = None
    is_modified: bool = False
    modification_reason: Optional[str] = None


class RRuleDescribeRequest(BaseModel):
    """Either a rule to describe, or components to build one from."""
    rule: Optional[str] = None
    frequency: Optional[Literal["DAILY", "WEEKLY", "MONTHLY", "YEARLY"]] = None
    interval: Optional[int] = Field(None, ge=1)
    by_day: Optional[List[Literal["MO", "TU", "WE", "TH", "FR", "SA", "SU"]]] = None
    by_month_day: Optional[List[int]] = None
    by_month: Optional[List[int]] = None
    count: Optional[int] = Field(None, ge=1)
    until: Optional[date] = None

    @model_validator(mode="after")
    def check_input(self):
        if not self.rule and not self.frequency:
            raise ValueError("Provide either rule or frequency")
        return self


class RRuleDescribeResponse(BaseModel):
    rule: str
    description: str
