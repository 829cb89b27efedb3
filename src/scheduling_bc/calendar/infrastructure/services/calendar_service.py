import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from core.database import BaseRepository
from core.errors import NotFoundError, ConflictError, ValidationError
from src.scheduling_bc.calendar.domain.entities import CalendarType, DateType, CalendarDate
from src.scheduling_bc.calendar.infrastructure.models import CalendarModel, CalendarEntryModel
from src.scheduling_bc.calendar.infrastructure.services.calendar_date_resolver import (
    CalendarDateResolver,
)
from src.scheduling_bc.schedule.infrastructure.models import ScheduleModel

logger = logging.getLogger(__name__)

ENTRY_FIELDS = (
    "name",
    "date_type",
    "fixed_date",
    "easter_offset",
    "nth_weekday",
    "start_date",
    "end_date",
    "is_recurring",
)


def validate_entry(data: dict) -> None:
    """Check an entry carries what its date type needs.

    Raises:
        ValidationError: Missing or malformed rule fields
    """
    if data.get("start_date") or data.get("end_date"):
        if not (data.get("start_date") and data.get("end_date")):
            raise ValidationError("Date ranges need both start_date and end_date")
        try:
            start = date.fromisoformat(data["start_date"])
            end = date.fromisoformat(data["end_date"])
        except ValueError:
            raise ValidationError("start_date and end_date must be YYYY-MM-DD")
        if end < start:
            raise ValidationError("end_date must not be before start_date")
        return

    try:
        date_type = DateType(data.get("date_type") or DateType.FIXED.value)
    except ValueError:
        raise ValidationError(f"Unknown date_type '{data.get('date_type')}'")

    if date_type == DateType.FIXED:
        value = data.get("fixed_date") or ""
        if len(value.split("-")) not in (2, 3):
            raise ValidationError("fixed_date must be MM-DD or YYYY-MM-DD")
    elif date_type == DateType.EASTER_RELATIVE:
        if data.get("easter_offset") is None:
            raise ValidationError("easter_relative entries need easter_offset")
    elif date_type == DateType.NTH_WEEKDAY:
        nw = data.get("nth_weekday") or {}
        if not {"month", "weekday", "nth"} <= set(nw):
            raise ValidationError("nth_weekday entries need month, weekday and nth")


class CalendarService:
    """Calendar and calendar entry management."""

    def __init__(self, db: Session):
        self.db = db
        self.repository = BaseRepository(db, CalendarModel)

    # Calendars

    def list_for_company(self, company_id: Optional[str] = None) -> List[CalendarModel]:
        """Active system-wide calendars plus the company's own."""
        query = self.db.query(CalendarModel).filter(CalendarModel.is_active.is_(True))
        if company_id:
            query = query.filter(
                or_(CalendarModel.company_id.is_(None), CalendarModel.company_id == company_id)
            )
        else:
            query = query.filter(CalendarModel.company_id.is_(None))
        return query.order_by(CalendarModel.name).all()

    def get(self, calendar_id: str) -> CalendarModel:
        calendar = (
            self.db.query(CalendarModel)
            .options(selectinload(CalendarModel.entries))
            .filter(CalendarModel.id == calendar_id)
            .first()
        )
        if not calendar:
            raise NotFoundError(f"Calendar {calendar_id} not found")
        return calendar

    def get_by_code(self, code: str) -> CalendarModel:
        calendar = self.db.query(CalendarModel).filter(CalendarModel.code == code).first()
        if not calendar:
            raise NotFoundError(f"Calendar with code '{code}' not found")
        return calendar

    def create(self, data: dict) -> CalendarModel:
        """Create a calendar, optionally with its entries.

        Raises:
            ConflictError: Code already taken
        """
        if self.db.query(CalendarModel).filter(CalendarModel.code == data["code"]).first():
            raise ConflictError(f"Calendar with code '{data['code']}' already exists")

        calendar_type = data.get("type") or CalendarType.CUSTOM.value
        try:
            CalendarType(calendar_type)
        except ValueError:
            raise ValidationError(f"Unknown calendar type '{calendar_type}'")

        entries = data.get("entries") or []
        for entry in entries:
            validate_entry(entry)

        calendar = CalendarModel(
            code=data["code"],
            name=data["name"],
            description=data.get("description"),
            country=data.get("country"),
            region=data.get("region"),
            type=calendar_type,
            year=data.get("year"),
            company_id=data.get("company_id"),
            is_active=data.get("is_active", True),
        )
        calendar.entries = [self._build_entry(entry) for entry in entries]

        calendar = self.repository.create(calendar)
        logger.info(f"Created calendar {calendar.code} with {len(entries)} entries")
        return calendar

    def update(self, calendar_id: str, data: dict) -> CalendarModel:
        self.get(calendar_id)
        allowed = {k: v for k, v in data.items() if k in ("name", "description", "is_active")}
        return self.repository.update(calendar_id, allowed)

    def schedules_using(self, calendar_id: str) -> List[ScheduleModel]:
        """Schedules whose calendar modifiers reference the calendar."""
        schedules = self.db.query(ScheduleModel).filter(ScheduleModel.calendar_modifiers.isnot(None)).all()
        return [
            s for s in schedules
            if any(m.get("calendar_id") == calendar_id for m in s.calendar_modifiers or [])
        ]

    def delete(self, calendar_id: str) -> None:
        """Delete a calendar and its entries.

        Raises:
            ConflictError: A schedule still uses the calendar in a modifier
        """
        self.get(calendar_id)
        in_use = self.schedules_using(calendar_id)
        if in_use:
            raise ConflictError(
                f"Calendar {calendar_id} is used by {len(in_use)} schedule(s). "
                f"Remove it from their modifiers first."
            )
        self.repository.delete(calendar_id)
        logger.info(f"Deleted calendar {calendar_id}")

    # Entries

    @staticmethod
    def _build_entry(data: dict) -> CalendarEntryModel:
        values = {k: data.get(k) for k in ENTRY_FIELDS}
        if values["date_type"] is None:
            values["date_type"] = DateType.FIXED.value
        if values["is_recurring"] is None:
            values["is_recurring"] = True
        return CalendarEntryModel(**values)

    def _get_entry(self, calendar_id: str, entry_id: str) -> CalendarEntryModel:
        self.get(calendar_id)
        entry = self.db.query(CalendarEntryModel).filter(CalendarEntryModel.id == entry_id).first()
        if not entry or entry.calendar_id != calendar_id:
            raise NotFoundError(f"Entry {entry_id} not found in calendar {calendar_id}")
        return entry

    def create_entry(self, calendar_id: str, data: dict) -> CalendarEntryModel:
        self.get(calendar_id)
        validate_entry(data)
        entry = self._build_entry(data)
        entry.calendar_id = calendar_id
        self.db.add(entry)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def update_entry(self, calendar_id: str, entry_id: str, data: dict) -> CalendarEntryModel:
        entry = self._get_entry(calendar_id, entry_id)

        merged = {k: getattr(entry, k) for k in ENTRY_FIELDS}
        merged.update({k: v for k, v in data.items() if k in ENTRY_FIELDS})
        validate_entry(merged)

        for key, value in data.items():
            if key in ENTRY_FIELDS:
                setattr(entry, key, value)
        self.db.commit()
        self.db.refresh(entry)
        return entry

    def delete_entry(self, calendar_id: str, entry_id: str) -> None:
        entry = self._get_entry(calendar_id, entry_id)
        self.db.delete(entry)
        self.db.commit()

    # Dates

    def get_dates(self, calendar_id: str, year: int) -> List[CalendarDate]:
        return CalendarDateResolver(self.db).resolve(calendar_id, year)

    def get_dates_by_code(self, code: str, year: int) -> List[CalendarDate]:
        return CalendarDateResolver(self.db).resolve_by_code(code, year)

    def is_date_in_calendar(self, calendar_id: str, day: date) -> bool:
        return day in CalendarDateResolver(self.db).date_set(calendar_id, day.year)
