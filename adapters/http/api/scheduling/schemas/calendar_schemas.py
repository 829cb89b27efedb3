"""Calendar request/response schemas."""

from datetime import date, datetime
from typing import List, Literal, Optional
from pydantic import BaseModel, Field


DateTypeLiteral = Literal["fixed", "easter_relative", "nth_weekday"]
CalendarTypeLiteral = Literal["holidays", "school_days", "custom"]


class NthWeekdaySchema(BaseModel):
    """Nth weekday of a month. weekday: 0=Sunday .. 6=Saturday; nth < 0 counts from the end."""
    month: int = Field(..., ge=1, le=12)
    weekday: int = Field(..., ge=0, le=6)
    nth: int = Field(..., ge=-5, le=5)


class CalendarEntryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    date_type: DateTypeLiteral = "fixed"
    fixed_date: Optional[str] = Field(None, pattern=r"^(\d{4}-)?\d{2}-\d{2}$")  # MM-DD or YYYY-MM-DD
    easter_offset: Optional[int] = None
    nth_weekday: Optional[NthWeekdaySchema] = None
    start_date: Optional[str] = Field(None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    end_date: Optional[str] = Field(None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    is_recurring: bool = True


class CalendarEntryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    date_type: Optional[DateTypeLiteral] = None
    fixed_date: Optional[str] = Field(None, pattern=r"^(\d{4}-)?\d{2}-\d{2}$")
    easter_offset: Optional[int] = None
    nth_weekday: Optional[NthWeekdaySchema] = None
    start_date: Optional[str] = Field(None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    end_date: Optional[str] = Field(None, pattern=r"^\d{4}-\d{2}-\d{2}$")
    is_recurring: Optional[bool] = None


class CalendarEntryResponse(BaseModel):
    id: str
    calendar_id: str
    name: str
    date_type: str
    fixed_date: Optional[str] = None
    easter_offset: Optional[int] = None
    nth_weekday: Optional[NthWeekdaySchema] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_recurring: bool

    class Config:
        from_attributes = True


class CalendarCreate(BaseModel):
    code: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    country: Optional[str] = Field(None, min_length=2, max_length=2)
    region: Optional[str] = None
    type: CalendarTypeLiteral = "custom"
    year: Optional[int] = Field(None, ge=1900, le=2200)
    company_id: Optional[str] = None  # None = system-wide
    is_active: bool = True
    entries: List[CalendarEntryCreate] = []


class CalendarUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    is_active: Optional[bool] = None


class CalendarResponse(BaseModel):
    id: str
    code: str
    name: str
    description: Optional[str] = None
    country: Optional[str] = None
    region: Optional[str] = None
    type: str
    year: Optional[int] = None
    company_id: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CalendarDetailResponse(CalendarResponse):
    entries: List[CalendarEntryResponse] = []


class CalendarDateResponse(BaseModel):
    """A resolved calendar date."""
    date: date
    name: str
    entry_id: str


class HolidayImportRequest(BaseModel):
    year: int = Field(..., ge=1900, le=2200)
    country: Optional[str] = Field(None, min_length=2, max_length=2)  # Defaults to the calendar's
    region: Optional[str] = None


class HolidayImportResponse(BaseModel):
    calendar_id: str
    year: int
    created: int
