"""Trip identifiers.

A trip id is either the id of a persisted trip or a virtual id naming one
occurrence of a schedule: ``virtual:{schedule_id}:{YYYY-MM-DD}``. Ids are
parsed once when they enter the service.
"""

from dataclasses import dataclass
from datetime import date
from typing import Union

from core.errors import ValidationError

VIRTUAL_PREFIX = "virtual:"


@dataclass(frozen=True)
class VirtualTripRef:
    """An occurrence of a schedule that may or may not be materialized yet."""
    schedule_id: str
    schedule_date: date

    def __str__(self) -> str:
        return build_virtual_id(self.schedule_id, self.schedule_date)


@dataclass(frozen=True)
class MaterializedTripRef:
    """A persisted trip."""
    trip_id: str

    def __str__(self) -> str:
        return self.trip_id


TripRef = Union[VirtualTripRef, MaterializedTripRef]


def build_virtual_id(schedule_id: str, schedule_date: date) -> str:
    return f"{VIRTUAL_PREFIX}{schedule_id}:{schedule_date.isoformat()}"


def is_virtual_id(trip_id: str) -> bool:
    return trip_id.startswith(VIRTUAL_PREFIX)


def parse_trip_id(trip_id: str) -> TripRef:
    """Parse an incoming trip id.

    Raises:
        ValidationError: A virtual id without a schedule id or with a date
            that is not YYYY-MM-DD
    """
    if not is_virtual_id(trip_id):
        return MaterializedTripRef(trip_id=trip_id)

    body = trip_id[len(VIRTUAL_PREFIX):]
    # Date is always the last segment
    schedule_id, sep, date_part = body.rpartition(":")
    if not sep or not schedule_id:
        raise ValidationError(f"Malformed virtual trip id '{trip_id}'")

    try:
        schedule_date = date.fromisoformat(date_part)
    except ValueError:
        raise ValidationError(f"Malformed date in virtual trip id '{trip_id}'")

    return VirtualTripRef(schedule_id=schedule_id, schedule_date=schedule_date)
