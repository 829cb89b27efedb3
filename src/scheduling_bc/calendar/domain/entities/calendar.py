from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional


class CalendarType(Enum):
    """Kind of date set a calendar describes."""
    HOLIDAYS = "holidays"
    SCHOOL_DAYS = "school_days"
    CUSTOM = "custom"


class DateType(Enum):
    """How a calendar entry computes its date."""
    FIXED = "fixed"                      # MM-DD or YYYY-MM-DD
    EASTER_RELATIVE = "easter_relative"  # Offset in days from Easter Sunday
    NTH_WEEKDAY = "nth_weekday"          # e.g. 4th Thursday of November


@dataclass(frozen=True)
class NthWeekday:
    """Nth weekday of a month.

    weekday uses 0=Sunday .. 6=Saturday. nth counts from the start of the
    month when positive and from the end when negative (-1 = last).
    """
    month: int
    weekday: int
    nth: int

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> Optional["NthWeekday"]:
        if not data:
            return None
        return cls(
            month=int(data["month"]),
            weekday=int(data["weekday"]),
            nth=int(data["nth"]),
        )

    def to_dict(self) -> dict:
        return {"month": self.month, "weekday": self.weekday, "nth": self.nth}


@dataclass
class CalendarEntry:
    """One rule of a calendar. A start/end pair makes it a date range."""

    id: str
    name: str
    date_type: DateType
    fixed_date: Optional[str] = None
    easter_offset: Optional[int] = None
    nth_weekday: Optional[NthWeekday] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    is_recurring: bool = True

    @property
    def is_range(self) -> bool:
        return bool(self.start_date and self.end_date)

    @classmethod
    def from_model(cls, model) -> "CalendarEntry":
        """Create CalendarEntry from a CalendarEntryModel row."""
        return cls(
            id=model.id,
            name=model.name,
            date_type=DateType(model.date_type),
            fixed_date=model.fixed_date,
            easter_offset=model.easter_offset,
            nth_weekday=NthWeekday.from_dict(model.nth_weekday),
            start_date=model.start_date,
            end_date=model.end_date,
            is_recurring=model.is_recurring if model.is_recurring is not None else True,
        )


@dataclass(frozen=True)
class CalendarDate:
    """A concrete date produced by a calendar entry."""
    date: date
    name: str
    entry_id: str

    @property
    def iso(self) -> str:
        return self.date.isoformat()
