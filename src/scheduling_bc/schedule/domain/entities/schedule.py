from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import List, Optional, Tuple, Union


class ScheduleType(Enum):
    SINGLE = "single"
    RECURRING = "recurring"


class ExceptionType(Enum):
    SKIP = "skip"
    MODIFY = "modify"


class ModifierType(Enum):
    EXCLUDE = "exclude"
    INCLUDE_ONLY = "include_only"
    EXCLUDE_DATES = "exclude_dates"


# Per-date exceptions

@dataclass(frozen=True)
class SkipException:
    """No trip runs on this date."""
    date: date
    reason: Optional[str] = None


@dataclass(frozen=True)
class ModifyException:
    """Trip runs on this date with some parameters overridden.

    Fields left as None fall back to the schedule defaults.
    """
    date: date
    departure_time: Optional[str] = None
    arrival_time: Optional[str] = None
    vehicle_id: Optional[str] = None
    driver_id: Optional[str] = None
    reason: Optional[str] = None


ScheduleException = Union[SkipException, ModifyException]


def exception_from_model(model) -> ScheduleException:
    """Build the exception variant for a ScheduleExceptionModel row."""
    if model.exception_type == ExceptionType.SKIP.value:
        return SkipException(date=model.date, reason=model.reason)
    return ModifyException(
        date=model.date,
        departure_time=model.departure_time,
        arrival_time=model.arrival_time,
        vehicle_id=model.vehicle_id,
        driver_id=model.driver_id,
        reason=model.reason,
    )


# Calendar modifiers

@dataclass(frozen=True)
class ExcludeCalendar:
    """Drop candidate dates that belong to the calendar."""
    calendar_id: str


@dataclass(frozen=True)
class IncludeOnlyCalendar:
    """Keep only candidate dates that belong to the calendar."""
    calendar_id: str


@dataclass(frozen=True)
class ExcludeDates:
    """Drop an explicit list of dates."""
    dates: Tuple[date, ...] = field(default_factory=tuple)


CalendarModifier = Union[ExcludeCalendar, IncludeOnlyCalendar, ExcludeDates]


def parse_modifier(data: dict) -> CalendarModifier:
    """Parse a stored modifier descriptor.

    Raises:
        ValueError: Unknown type, or a calendar modifier without calendar_id
    """
    modifier_type = ModifierType(data.get("type"))

    if modifier_type == ModifierType.EXCLUDE_DATES:
        return ExcludeDates(dates=tuple(
            d if isinstance(d, date) else date.fromisoformat(d)
            for d in data.get("dates") or []
        ))

    calendar_id = data.get("calendar_id")
    if not calendar_id:
        raise ValueError(f"Modifier '{modifier_type.value}' requires calendar_id")

    if modifier_type == ModifierType.EXCLUDE:
        return ExcludeCalendar(calendar_id=calendar_id)
    return IncludeOnlyCalendar(calendar_id=calendar_id)


def parse_modifiers(data: Optional[List[dict]]) -> List[CalendarModifier]:
    return [parse_modifier(item) for item in data or []]


def modifier_to_dict(modifier: CalendarModifier) -> dict:
    """Serialize a modifier to its stored JSON form."""
    if isinstance(modifier, ExcludeDates):
        return {
            "type": ModifierType.EXCLUDE_DATES.value,
            "dates": [d.isoformat() for d in modifier.dates],
        }
    if isinstance(modifier, ExcludeCalendar):
        return {"type": ModifierType.EXCLUDE.value, "calendar_id": modifier.calendar_id}
    return {"type": ModifierType.INCLUDE_ONLY.value, "calendar_id": modifier.calendar_id}


def referenced_calendar_ids(modifiers: List[CalendarModifier]) -> List[str]:
    """Distinct calendar ids referenced by the modifiers, in first-use order."""
    ids: List[str] = []
    for modifier in modifiers:
        if isinstance(modifier, (ExcludeCalendar, IncludeOnlyCalendar)) and modifier.calendar_id not in ids:
            ids.append(modifier.calendar_id)
    return ids


# Resolved occurrence

@dataclass(frozen=True)
class ResolvedOccurrence:
    """Final parameters of one schedule occurrence after exceptions."""
    date: date
    departure_time: str
    arrival_time: str
    vehicle_id: Optional[str]
    driver_id: Optional[str]
    is_modified: bool = False
    modification_reason: Optional[str] = None
