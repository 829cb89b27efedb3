import uuid

from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, ForeignKey, JSON
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.base import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class CalendarModel(Base):
    """A named, reusable set of dates (public holidays, school breaks, ...).

    company_id NULL means the calendar is system-wide and visible to every
    company.
    """

    __tablename__ = "calendars"

    id = Column(String(36), primary_key=True, default=_uuid)
    code = Column(String(100), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    country = Column(String(2), nullable=True)
    region = Column(String(100), nullable=True)
    type = Column(String(20), nullable=False, default="custom")  # holidays, school_days, custom
    year = Column(Integer, nullable=True)
    company_id = Column(String(36), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    entries = relationship(
        "CalendarEntryModel",
        back_populates="calendar",
        cascade="all, delete-orphan",
        order_by="CalendarEntryModel.name",
    )

    def __repr__(self):
        return f"<Calendar {self.code}: {self.name}>"


class CalendarEntryModel(Base):
    """A single rule of a calendar."""

    __tablename__ = "calendar_entries"

    id = Column(String(36), primary_key=True, default=_uuid)
    calendar_id = Column(
        String(36),
        ForeignKey("calendars.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    date_type = Column(String(20), nullable=False)  # fixed, easter_relative, nth_weekday
    fixed_date = Column(String(10), nullable=True)  # MM-DD or YYYY-MM-DD
    easter_offset = Column(Integer, nullable=True)
    nth_weekday = Column(JSON, nullable=True)  # {"month": 11, "weekday": 4, "nth": 4}
    start_date = Column(String(10), nullable=True)
    end_date = Column(String(10), nullable=True)
    is_recurring = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())

    calendar = relationship("CalendarModel", back_populates="entries")

    def __repr__(self):
        return f"<CalendarEntry {self.name} ({self.date_type})>"
