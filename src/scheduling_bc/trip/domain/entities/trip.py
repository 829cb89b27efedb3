from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional


class TripStatus(Enum):
    """Lifecycle of a trip."""
    SCHEDULED = "scheduled"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


@dataclass
class StopTimeView:
    """Times of a trip at one route stop."""
    route_stop_id: str
    sequence_number: int
    scheduled_arrival: datetime
    scheduled_departure: datetime
    actual_arrival: Optional[datetime] = None
    actual_departure: Optional[datetime] = None


@dataclass
class TripView:
    """A trip as returned to readers, virtual or materialized.

    Virtual trips are recomputed on every query and never persisted. A
    materialized trip carries the schedule key it was created from; a manual
    trip has neither schedule_id nor schedule_date.
    """
    id: str
    company_id: str
    route_id: str
    departure_time: datetime
    arrival_time: datetime
    status: TripStatus = TripStatus.SCHEDULED
    is_virtual: bool = False
    schedule_id: Optional[str] = None
    schedule_date: Optional[date] = None
    route_version_id: Optional[str] = None
    vehicle_id: Optional[str] = None
    driver_id: Optional[str] = None
    actual_departure: Optional[datetime] = None
    actual_arrival: Optional[datetime] = None
    is_modified: bool = False
    modification_reason: Optional[str] = None
    notes: Optional[str] = None
    stop_times: List[StopTimeView] = field(default_factory=list)

    @property
    def duration_minutes(self) -> int:
        return int((self.arrival_time - self.departure_time).total_seconds() // 60)

    @classmethod
    def from_model(cls, model, sequence_by_stop: Optional[dict] = None) -> "TripView":
        """Create TripView from a TripModel row.

        sequence_by_stop maps route_stop_id -> sequence_number; stop times are
        ordered by it when given.
        """
        sequence_by_stop = sequence_by_stop or {}
        stop_times = [
            StopTimeView(
                route_stop_id=st.route_stop_id,
                sequence_number=sequence_by_stop.get(st.route_stop_id, index),
                scheduled_arrival=st.scheduled_arrival,
                scheduled_departure=st.scheduled_departure,
                actual_arrival=st.actual_arrival,
                actual_departure=st.actual_departure,
            )
            for index, st in enumerate(model.stop_times)
        ]
        stop_times.sort(key=lambda st: st.sequence_number)

        return cls(
            id=model.id,
            company_id=model.company_id,
            route_id=model.route_id,
            departure_time=model.departure_time,
            arrival_time=model.arrival_time,
            status=TripStatus(model.status),
            is_virtual=False,
            schedule_id=model.schedule_id,
            schedule_date=model.schedule_date,
            route_version_id=model.route_version_id,
            vehicle_id=model.vehicle_id,
            driver_id=model.driver_id,
            actual_departure=model.actual_departure,
            actual_arrival=model.actual_arrival,
            notes=model.notes,
            stop_times=stop_times,
        )
