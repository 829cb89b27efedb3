"""Trip request/response schemas."""

from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, Field


class StopTimeResponse(BaseModel):
    route_stop_id: str
    sequence_number: int
    scheduled_arrival: datetime
    scheduled_departure: datetime
    actual_arrival: Optional[datetime] = None
    actual_departure: Optional[datetime] = None

    class Config:
        from_attributes = True


class TripResponse(BaseModel):
    """A trip, virtual (id "virtual:{schedule_id}:{date}") or persisted."""
    id: str
    is_virtual: bool
    company_id: str
    route_id: str
    route_version_id: Optional[str] = None
    schedule_id: Optional[str] = None
    schedule_date: Optional[date] = None
    vehicle_id: Optional[str] = None
    driver_id: Optional[str] = None
    departure_time: datetime
    arrival_time: datetime
    actual_departure: Optional[datetime] = None
    actual_arrival: Optional[datetime] = None
    status: str
    is_modified: bool = False
    modification_reason: Optional[str] = None
    notes: Optional[str] = None
    stop_times: List[StopTimeResponse] = []

    @classmethod
    def from_view(cls, trip) -> "TripResponse":
        return cls(
            id=trip.id,
            is_virtual=trip.is_virtual,
            company_id=trip.company_id,
            route_id=trip.route_id,
            route_version_id=trip.route_version_id,
            schedule_id=trip.schedule_id,
            schedule_date=trip.schedule_date,
            vehicle_id=trip.vehicle_id,
            driver_id=trip.driver_id,
            departure_time=trip.departure_time,
            arrival_time=trip.arrival_time,
            actual_departure=trip.actual_departure,
            actual_arrival=trip.actual_arrival,
            status=trip.status.value,
            is_modified=trip.is_modified,
            modification_reason=trip.modification_reason,
            notes=trip.notes,
            stop_times=[StopTimeResponse.model_validate(st) for st in trip.stop_times],
        )


class ManualTripCreate(BaseModel):
    company_id: str
    route_id: str
    departure_time: datetime  # Local time
    vehicle_id: Optional[str] = None
    driver_id: Optional[str] = None
    notes: Optional[str] = None


class TripUpdate(BaseModel):
    vehicle_id: Optional[str] = None
    driver_id: Optional[str] = None
    notes: Optional[str] = None


class AssignDriverRequest(BaseModel):
    driver_id: str = Field(..., min_length=1)


class CancelTripRequest(BaseModel):
    reason: Optional[str] = None


class StopEventRequest(BaseModel):
    at: Optional[datetime] = None  # Defaults to now
