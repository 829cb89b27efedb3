import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from core.config import settings
from core.errors import DomainError, NotFoundError, ValidationError
from src.scheduling_bc.route.infrastructure.models import RouteModel
from src.scheduling_bc.schedule.domain.entities import exception_from_model
from src.scheduling_bc.schedule.domain.services import resolve_exceptions
from src.scheduling_bc.schedule.infrastructure.models import ScheduleModel
from src.scheduling_bc.trip.domain.entities import TripStatus
from src.scheduling_bc.trip.domain.services import build_stop_times, trip_timestamps
from src.scheduling_bc.trip.infrastructure.models import TripModel, TripStopTimeModel
from src.scheduling_bc.trip.infrastructure.services.virtual_trip_projector import explicit_stop_times

logger = logging.getLogger(__name__)


class TripMaterializer:
    """Turns one schedule occurrence into a persisted trip, exactly once.

    (schedule_id, schedule_date) is unique at the database. When two callers
    race, the loser's insert fails, it rolls back and returns the winner's row.
    """

    def __init__(self, db: Session):
        self.db = db

    def find_existing(self, schedule_id: str, day: date) -> Optional[TripModel]:
        return (
            self.db.query(TripModel)
            .options(selectinload(TripModel.stop_times))
            .filter(TripModel.schedule_id == schedule_id, TripModel.schedule_date == day)
            .first()
        )

    def materialize(self, schedule_id: str, day: date) -> TripModel:
        """Persist the occurrence of a schedule on a date; idempotent.

        Raises:
            NotFoundError: Unknown schedule, or its route has no current version
            ValidationError: Route version has fewer than two stops
            DomainError: Date outside the validity window, or skipped
        """
        existing = self.find_existing(schedule_id, day)
        if existing:
            return existing

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

        route = self.db.query(RouteModel).filter(RouteModel.id == schedule.route_id).first()
        version = route.current_version if route else None
        if version is None:
            raise NotFoundError(f"Route {schedule.route_id} has no active version")
        if len(version.stops) < 2:
            raise ValidationError(f"Route version {version.id} needs at least two stops")

        if day < schedule.valid_from or (schedule.valid_to and day > schedule.valid_to):
            raise DomainError(f"{day.isoformat()} is outside the validity of schedule {schedule_id}")

        resolved = resolve_exceptions(
            [day],
            [exception_from_model(e) for e in schedule.exceptions],
            schedule.departure_time,
            schedule.arrival_time,
            schedule.vehicle_id,
            schedule.driver_id,
        )
        if not resolved:
            raise DomainError(f"Schedule {schedule_id} is skipped on {day.isoformat()}")
        occurrence = resolved[0]

        departure, arrival = trip_timestamps(day, occurrence.departure_time, occurrence.arrival_time)
        stop_times = build_stop_times(
            version.stops,
            explicit_stop_times(schedule),
            day,
            departure,
            arrival,
            dwell_minutes=settings.scheduling.SCHEDULING_DWELL_MINUTES,
        )

        trip = TripModel(
            schedule_id=schedule.id,
            schedule_date=day,
            company_id=schedule.company_id,
            route_id=schedule.route_id,
            route_version_id=version.id,
            vehicle_id=occurrence.vehicle_id,
            driver_id=occurrence.driver_id,
            departure_time=departure,
            arrival_time=arrival,
            status=TripStatus.SCHEDULED.value,
            notes=occurrence.modification_reason if occurrence.is_modified else None,
        )
        trip.stop_times = [
            TripStopTimeModel(
                route_stop_id=st.route_stop_id,
                scheduled_arrival=st.scheduled_arrival,
                scheduled_departure=st.scheduled_departure,
            )
            for st in stop_times
        ]

        try:
            self.db.add(trip)
            self.db.flush()
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            winner = self.find_existing(schedule_id, day)
            if winner is None:
                raise
            logger.info(f"Lost materialization race for {schedule_id} on {day}, using trip {winner.id}")
            return winner

        logger.info(f"Materialized schedule {schedule_id} on {day} as trip {trip.id}")
        return self.find_existing(schedule_id, day)
