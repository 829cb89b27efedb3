import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from core.clock import local_today
from core.config import settings
from core.errors import NotFoundError, ValidationError, ConflictError
from src.scheduling_bc.calendar.infrastructure.services import CalendarDateResolver
from src.scheduling_bc.route.infrastructure.models import RouteModel
from src.scheduling_bc.schedule.domain.entities import (
    ExceptionType,
    ResolvedOccurrence,
    ScheduleType,
    modifier_to_dict,
    parse_modifier,
)
from src.scheduling_bc.schedule.domain.services import validate_rrule
from src.scheduling_bc.schedule.infrastructure.models import (
    ScheduleModel,
    ScheduleStopTimeModel,
    ScheduleExceptionModel,
)
from src.scheduling_bc.schedule.infrastructure.services.occurrence_pipeline import schedule_occurrences
from src.scheduling_bc.trip.domain.services import parse_hhmm
from src.scheduling_bc.trip.infrastructure.models import TripModel

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "vehicle_id",
    "driver_id",
    "name",
    "description",
    "departure_time",
    "arrival_time",
    "schedule_type",
    "recurrence_rule",
    "valid_from",
    "valid_to",
    "is_active",
)


def validate_hhmm(value: Optional[str], field: str) -> None:
    if value is None:
        return
    try:
        hour, minute = parse_hhmm(value)
    except ValueError:
        raise ValidationError(f"{field} must be in HH:MM format")
    if not (0 <= hour <= 23 and 0 <= minute <= 59) or len(value) != 5:
        raise ValidationError(f"{field} must be in HH:MM format")


def normalize_modifiers(raw: Optional[list]) -> list:
    """Validate modifier descriptors and return their stored form."""
    try:
        return [modifier_to_dict(parse_modifier(item)) for item in raw or []]
    except (ValueError, TypeError, AttributeError) as e:
        raise ValidationError(f"Invalid calendar modifier: {e}")


class ScheduleService:
    """Schedule management: CRUD, stop times, exceptions and preview."""

    def __init__(self, db: Session):
        self.db = db

    def list(
        self,
        company_id: Optional[str] = None,
        route_id: Optional[str] = None,
        is_active: Optional[bool] = None,
    ) -> List[ScheduleModel]:
        query = self.db.query(ScheduleModel).options(
            selectinload(ScheduleModel.stop_times),
            selectinload(ScheduleModel.exceptions),
        )
        if company_id:
            query = query.filter(ScheduleModel.company_id == company_id)
        if route_id:
            query = query.filter(ScheduleModel.route_id == route_id)
        if is_active is not None:
            query = query.filter(ScheduleModel.is_active.is_(is_active))
        return query.order_by(ScheduleModel.created_at.desc(), ScheduleModel.name).all()

    def get(self, schedule_id: str) -> ScheduleModel:
        schedule = (
            self.db.query(ScheduleModel)
            .options(
                selectinload(ScheduleModel.stop_times),
                selectinload(ScheduleModel.exceptions),
            )
            .filter(ScheduleModel.id == schedule_id)
            .first()
        )
        if not schedule:
            raise NotFoundError(f"Schedule {schedule_id} not found")
        return schedule

    # Validation

    def _validate_stop_times(self, route_id: str, stop_times: list) -> None:
        """Stop times must reference the route's current stops; first needs a
        departure and last needs an arrival."""
        route = self.db.query(RouteModel).filter(RouteModel.id == route_id).first()
        version = route.current_version if route else None
        if version is None or not version.stops:
            raise ValidationError("Route has no active version")

        stops = version.stops
        stop_ids = {s.id for s in stops}
        by_stop = {}
        for st in stop_times:
            if st["route_stop_id"] not in stop_ids:
                raise ValidationError(f"Route stop {st['route_stop_id']} does not belong to this route")
            validate_hhmm(st.get("arrival_time"), "arrival_time")
            validate_hhmm(st.get("departure_time"), "departure_time")
            by_stop[st["route_stop_id"]] = st

        first = by_stop.get(stops[0].id) or {}
        last = by_stop.get(stops[-1].id) or {}
        if not first.get("departure_time"):
            raise ValidationError("First stop must have a departure time")
        if not last.get("arrival_time"):
            raise ValidationError("Last stop must have an arrival time")

    @staticmethod
    def _build_stop_times(stop_times: list) -> List[ScheduleStopTimeModel]:
        # Only stops with both times are authoritative; the rest are interpolated
        return [
            ScheduleStopTimeModel(
                route_stop_id=st["route_stop_id"],
                arrival_time=st["arrival_time"],
                departure_time=st["departure_time"],
            )
            for st in stop_times
            if st.get("arrival_time") and st.get("departure_time")
        ]

    def _validate_type_and_rule(self, schedule_type: str, rule: Optional[str], anchor: date) -> None:
        try:
            ScheduleType(schedule_type)
        except ValueError:
            raise ValidationError(f"Unknown schedule type '{schedule_type}'")
        if schedule_type == ScheduleType.RECURRING.value:
            validate_rrule(rule, anchor)

    # Commands

    def create(self, data: dict) -> ScheduleModel:
        route = self.db.query(RouteModel).filter(RouteModel.id == data["route_id"]).first()
        if not route or route.company_id != data["company_id"]:
            raise ValidationError("Route does not belong to the specified company")

        schedule_type = data.get("schedule_type") or ScheduleType.RECURRING.value
        self._validate_type_and_rule(schedule_type, data.get("recurrence_rule"), data["valid_from"])
        validate_hhmm(data["departure_time"], "departure_time")
        validate_hhmm(data["arrival_time"], "arrival_time")
        if data.get("valid_to") and data["valid_to"] < data["valid_from"]:
            raise ValidationError("valid_to must not be before valid_from")

        stop_times = data.get("stop_times")
        if stop_times:
            self._validate_stop_times(route.id, stop_times)

        schedule = ScheduleModel(
            company_id=data["company_id"],
            route_id=route.id,
            vehicle_id=data.get("vehicle_id"),
            driver_id=data.get("driver_id"),
            name=data["name"],
            description=data.get("description"),
            departure_time=data["departure_time"],
            arrival_time=data["arrival_time"],
            schedule_type=schedule_type,
            recurrence_rule=data.get("recurrence_rule"),
            valid_from=data["valid_from"],
            valid_to=data.get("valid_to"),
            calendar_modifiers=normalize_modifiers(data.get("calendar_modifiers")),
            is_active=data.get("is_active", True),
        )
        schedule.stop_times = self._build_stop_times(stop_times or [])

        self.db.add(schedule)
        self.db.commit()
        logger.info(f"Created schedule {schedule.id} ({schedule.name}) on route {route.id}")
        return self.get(schedule.id)

    def update(self, schedule_id: str, data: dict) -> ScheduleModel:
        """Partial update. A stop_times list replaces the whole set."""
        schedule = self.get(schedule_id)

        schedule_type = data.get("schedule_type") or schedule.schedule_type
        rule = data["recurrence_rule"] if "recurrence_rule" in data else schedule.recurrence_rule
        if "schedule_type" in data or "recurrence_rule" in data:
            self._validate_type_and_rule(schedule_type, rule, data.get("valid_from") or schedule.valid_from)
        validate_hhmm(data.get("departure_time"), "departure_time")
        validate_hhmm(data.get("arrival_time"), "arrival_time")

        valid_from = data.get("valid_from") or schedule.valid_from
        valid_to = data["valid_to"] if "valid_to" in data else schedule.valid_to
        if valid_to and valid_to < valid_from:
            raise ValidationError("valid_to must not be before valid_from")

        if data.get("stop_times") is not None:
            self._validate_stop_times(schedule.route_id, data["stop_times"])

        for key in UPDATABLE_FIELDS:
            if key not in data:
                continue
            if key in ("name", "departure_time", "arrival_time", "valid_from", "schedule_type") and not data[key]:
                continue
            setattr(schedule, key, data[key])

        if data.get("calendar_modifiers") is not None:
            schedule.calendar_modifiers = normalize_modifiers(data["calendar_modifiers"])

        if data.get("stop_times") is not None:
            # Old rows must be gone before the new ones hit the unique constraint
            schedule.stop_times.clear()
            self.db.flush()
            schedule.stop_times.extend(self._build_stop_times(data["stop_times"]))

        self.db.commit()
        logger.info(f"Updated schedule {schedule_id}")
        return self.get(schedule_id)

    def delete(self, schedule_id: str) -> None:
        schedule = self.get(schedule_id)

        trip_count = self.db.query(TripModel).filter(TripModel.schedule_id == schedule_id).count()
        if trip_count > 0:
            raise ConflictError(
                f"Cannot delete schedule with {trip_count} materialized trips. Deactivate it instead."
            )

        self.db.delete(schedule)
        self.db.commit()
        logger.info(f"Deleted schedule {schedule_id}")

    def duplicate(self, schedule_id: str) -> ScheduleModel:
        """Inactive copy with the same stop times. Exceptions are not copied."""
        source = self.get(schedule_id)

        copy = ScheduleModel(
            company_id=source.company_id,
            route_id=source.route_id,
            vehicle_id=source.vehicle_id,
            driver_id=source.driver_id,
            name=f"Copy: {source.name}",
            description=source.description,
            departure_time=source.departure_time,
            arrival_time=source.arrival_time,
            schedule_type=source.schedule_type,
            recurrence_rule=source.recurrence_rule,
            valid_from=source.valid_from,
            valid_to=source.valid_to,
            calendar_modifiers=list(source.calendar_modifiers or []),
            is_active=False,
        )
        copy.stop_times = [
            ScheduleStopTimeModel(
                route_stop_id=st.route_stop_id,
                arrival_time=st.arrival_time,
                departure_time=st.departure_time,
            )
            for st in source.stop_times
        ]

        self.db.add(copy)
        self.db.commit()
        logger.info(f"Duplicated schedule {schedule_id} as {copy.id}")
        return self.get(copy.id)

    # Exceptions

    def create_exception(self, schedule_id: str, data: dict) -> ScheduleExceptionModel:
        """Add a skip/modify exception.

        Raises:
            ConflictError: The schedule already has an exception on that date
        """
        self.get(schedule_id)

        try:
            exception_type = ExceptionType(data.get("exception_type"))
        except ValueError:
            raise ValidationError(f"Unknown exception type '{data.get('exception_type')}'")
        validate_hhmm(data.get("departure_time"), "departure_time")
        validate_hhmm(data.get("arrival_time"), "arrival_time")

        existing = (
            self.db.query(ScheduleExceptionModel)
            .filter(
                ScheduleExceptionModel.schedule_id == schedule_id,
                ScheduleExceptionModel.date == data["date"],
            )
            .first()
        )
        if existing:
            raise ConflictError(f"Exception already exists for {data['date'].isoformat()}")

        is_modify = exception_type == ExceptionType.MODIFY
        exception = ScheduleExceptionModel(
            schedule_id=schedule_id,
            date=data["date"],
            exception_type=exception_type.value,
            departure_time=data.get("departure_time") if is_modify else None,
            arrival_time=data.get("arrival_time") if is_modify else None,
            vehicle_id=data.get("vehicle_id") if is_modify else None,
            driver_id=data.get("driver_id") if is_modify else None,
            reason=data.get("reason"),
        )
        self.db.add(exception)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError(f"Exception already exists for {data['date'].isoformat()}")

        self.db.refresh(exception)
        logger.info(f"Added {exception.exception_type} exception on {exception.date} to schedule {schedule_id}")
        return exception

    def delete_exception(self, schedule_id: str, exception_id: str) -> None:
        exception = (
            self.db.query(ScheduleExceptionModel)
            .filter(ScheduleExceptionModel.id == exception_id)
            .first()
        )
        if not exception or exception.schedule_id != schedule_id:
            raise NotFoundError(f"Exception {exception_id} not found for schedule {schedule_id}")

        self.db.delete(exception)
        self.db.commit()

    # Preview

    def preview(self, schedule_id: str, days: Optional[int] = None) -> List[ResolvedOccurrence]:
        """Occurrences of the next `days` days, starting today or at valid_from."""
        schedule = self.get(schedule_id)
        days = days or settings.scheduling.SCHEDULING_PREVIEW_DAYS

        start = max(schedule.valid_from, local_today())
        end = start + timedelta(days=days)
        return schedule_occurrences(schedule, CalendarDateResolver(self.db), start, end)
