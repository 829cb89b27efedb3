import uuid

from sqlalchemy import (
    Column, String, Boolean, Text, Date, DateTime, ForeignKey, JSON, UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class ScheduleModel(Base):
    """Recurring (or single) departure of a route.

    Trips are not stored per date: they are projected from this row on
    demand and only persisted when materialized.
    """

    __tablename__ = "schedules"

    id = Column(String(36), primary_key=True, default=_uuid)
    company_id = Column(String(36), nullable=False, index=True)
    route_id = Column(String(36), ForeignKey("routes.id"), nullable=False, index=True)
    vehicle_id = Column(String(36), nullable=True)
    driver_id = Column(String(36), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    departure_time = Column(String(5), nullable=False)  # HH:MM local
    arrival_time = Column(String(5), nullable=False)    # HH:MM local
    schedule_type = Column(String(20), nullable=False, default="recurring")  # single, recurring
    recurrence_rule = Column(Text, nullable=True)  # RRULE body, e.g. FREQ=WEEKLY;BYDAY=MO,FR
    valid_from = Column(Date, nullable=False)
    valid_to = Column(Date, nullable=True)
    # Ordered list of {"type": "exclude" | "include_only" | "exclude_dates", ...}
    calendar_modifiers = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    route = relationship("RouteModel")
    stop_times = relationship(
        "ScheduleStopTimeModel",
        back_populates="schedule",
        cascade="all, delete-orphan",
    )
    exceptions = relationship(
        "ScheduleExceptionModel",
        back_populates="schedule",
        cascade="all, delete-orphan",
        order_by="ScheduleExceptionModel.date",
    )

    def __repr__(self):
        return f"<Schedule {self.name} {self.departure_time}>"


class ScheduleStopTimeModel(Base):
    """Explicit arrival/departure at a route stop for every trip of a schedule."""

    __tablename__ = "schedule_stop_times"
    __table_args__ = (
        UniqueConstraint("schedule_id", "route_stop_id", name="uq_schedule_stop_times_stop"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    schedule_id = Column(
        String(36),
        ForeignKey("schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    route_stop_id = Column(String(36), ForeignKey("route_stops.id"), nullable=False)
    arrival_time = Column(String(5), nullable=False)
    departure_time = Column(String(5), nullable=False)

    schedule = relationship("ScheduleModel", back_populates="stop_times")


class ScheduleExceptionModel(Base):
    """Per-date override of a schedule: skip the date or modify its parameters."""

    __tablename__ = "schedule_exceptions"
    __table_args__ = (
        UniqueConstraint("schedule_id", "date", name="uq_schedule_exceptions_date"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    schedule_id = Column(
        String(36),
        ForeignKey("schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date = Column(Date, nullable=False)
    exception_type = Column(String(10), nullable=False)  # skip, modify
    departure_time = Column(String(5), nullable=True)
    arrival_time = Column(String(5), nullable=True)
    vehicle_id = Column(String(36), nullable=True)
    driver_id = Column(String(36), nullable=True)
    reason = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())

    schedule = relationship("ScheduleModel", back_populates="exceptions")
