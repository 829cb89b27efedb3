import uuid

from sqlalchemy import Column, String, Text, Date, DateTime, ForeignKey, UniqueConstraint, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class TripModel(Base):
    """Persisted trip.

    Either materialized from a schedule occurrence (schedule_id and
    schedule_date set) or created manually (both NULL). A schedule occurrence
    can be materialized at most once.
    """

    __tablename__ = "trips"
    __table_args__ = (
        UniqueConstraint("schedule_id", "schedule_date", name="uq_trips_schedule_date"),
        Index("ix_trips_company_departure", "company_id", "departure_time"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    schedule_id = Column(String(36), ForeignKey("schedules.id"), nullable=True)
    schedule_date = Column(Date, nullable=True)
    company_id = Column(String(36), nullable=False)
    route_id = Column(String(36), ForeignKey("routes.id"), nullable=False)
    route_version_id = Column(String(36), ForeignKey("route_versions.id"), nullable=False)
    vehicle_id = Column(String(36), nullable=True)
    driver_id = Column(String(36), nullable=True, index=True)
    departure_time = Column(DateTime, nullable=False)
    arrival_time = Column(DateTime, nullable=False)
    actual_departure = Column(DateTime, nullable=True)
    actual_arrival = Column(DateTime, nullable=True)
    status = Column(String(20), nullable=False, default="scheduled")
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    stop_times = relationship(
        "TripStopTimeModel",
        back_populates="trip",
        cascade="all, delete-orphan",
        order_by="TripStopTimeModel.scheduled_arrival",
    )

    def __repr__(self):
        return f"<Trip {self.id} {self.status} {self.departure_time}>"


class TripStopTimeModel(Base):
    """Scheduled and actual times of a persisted trip at one route stop."""

    __tablename__ = "trip_stop_times"
    __table_args__ = (
        UniqueConstraint("trip_id", "route_stop_id", name="uq_trip_stop_times_stop"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    trip_id = Column(String(36), ForeignKey("trips.id", ondelete="CASCADE"), nullable=False, index=True)
    route_stop_id = Column(String(36), ForeignKey("route_stops.id"), nullable=False)
    scheduled_arrival = Column(DateTime, nullable=False)
    scheduled_departure = Column(DateTime, nullable=False)
    actual_arrival = Column(DateTime, nullable=True)
    actual_departure = Column(DateTime, nullable=True)

    trip = relationship("TripModel", back_populates="stop_times")
