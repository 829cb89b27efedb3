import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, Iterable, List, Optional, Set, Tuple

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from core.config import settings
from core.errors import NotFoundError, SchedulingError, ValidationError
from src.scheduling_bc.calendar.infrastructure.services import CalendarDateResolver
from src.scheduling_bc.route.infrastructure.models import RouteModel, RouteStopModel
from src.scheduling_bc.schedule.domain.entities import ResolvedOccurrence
from src.scheduling_bc.schedule.infrastructure.models import ScheduleModel, ScheduleExceptionModel
from src.scheduling_bc.schedule.infrastructure.services import schedule_occurrences
from src.scheduling_bc.trip.domain.entities import TripStatus, TripView
from src.scheduling_bc.trip.domain.services import build_stop_times, trip_timestamps
from src.scheduling_bc.trip.domain.value_objects import build_virtual_id
from src.scheduling_bc.trip.infrastructure.models import TripModel

logger = logging.getLogger(__name__)


def explicit_stop_times(schedule: ScheduleModel) -> Dict[str, Tuple[str, str]]:
    return {st.route_stop_id: (st.arrival_time, st.departure_time) for st in schedule.stop_times}


def build_virtual_trip(
    schedule: ScheduleModel,
    occurrence: ResolvedOccurrence,
    route_version_id: Optional[str],
    route_stops: List[RouteStopModel],
) -> TripView:
    """Virtual trip for one resolved occurrence of a schedule."""
    departure, arrival = trip_timestamps(
        occurrence.date, occurrence.departure_time, occurrence.arrival_time
    )
    stop_times = build_stop_times(
        route_stops,
        explicit_stop_times(schedule),
        occurrence.date,
        departure,
        arrival,
        dwell_minutes=settings.scheduling.SCHEDULING_DWELL_MINUTES,
    )
    return TripView(
        id=build_virtual_id(schedule.id, occurrence.date),
        company_id=schedule.company_id,
        route_id=schedule.route_id,
        departure_time=departure,
        arrival_time=arrival,
        status=TripStatus.SCHEDULED,
        is_virtual=True,
        schedule_id=schedule.id,
        schedule_date=occurrence.date,
        route_version_id=route_version_id,
        vehicle_id=occurrence.vehicle_id,
        driver_id=occurrence.driver_id,
        is_modified=occurrence.is_modified,
        modification_reason=occurrence.modification_reason,
        stop_times=stop_times,
    )


class VirtualTripProjector:
    """Expands active schedules into virtual trips and merges persisted trips.

    Trips are not stored per date: every query recomputes occurrences from
    the schedules. A persisted (materialized) trip for a schedule and date
    always replaces the virtual one.
    """

    def __init__(self, db: Session):
        self.db = db
        self.resolver = CalendarDateResolver(db)

    # Loading

    def _route_stops_by_version(self, version_ids: Iterable[str]) -> Dict[str, List[RouteStopModel]]:
        version_ids = {v for v in version_ids if v}
        result: Dict[str, List[RouteStopModel]] = {v: [] for v in version_ids}
        if not version_ids:
            return result

        rows = (
            self.db.query(RouteStopModel)
            .filter(RouteStopModel.route_version_id.in_(version_ids))
            .order_by(RouteStopModel.route_version_id, RouteStopModel.sequence_number)
            .all()
        )
        for row in rows:
            result[row.route_version_id].append(row)
        return result

    def _current_versions(self, route_ids: Iterable[str]) -> Dict[str, Optional[str]]:
        route_ids = set(route_ids)
        if not route_ids:
            return {}
        rows = (
            self.db.query(RouteModel.id, RouteModel.current_version_id)
            .filter(RouteModel.id.in_(route_ids))
            .all()
        )
        return {route_id: version_id for route_id, version_id in rows}

    def _active_schedules(
        self,
        company_id: str,
        route_id: Optional[str],
        driver_id: Optional[str],
    ) -> List[ScheduleModel]:
        query = (
            self.db.query(ScheduleModel)
            .options(
                selectinload(ScheduleModel.stop_times),
                selectinload(ScheduleModel.exceptions),
            )
            .filter(
                ScheduleModel.company_id == company_id,
                ScheduleModel.is_active.is_(True),
            )
        )
        if route_id:
            query = query.filter(ScheduleModel.route_id == route_id)
        if driver_id:
            # Default driver, or reassigned to the driver on some date
            query = query.filter(or_(
                ScheduleModel.driver_id == driver_id,
                ScheduleModel.exceptions.any(ScheduleExceptionModel.driver_id == driver_id),
            ))
        return query.all()

    # Projection

    def project(
        self,
        company_id: str,
        from_date: date,
        to_date: date,
        route_id: Optional[str] = None,
        driver_id: Optional[str] = None,
        status: Optional[TripStatus] = None,
    ) -> List[TripView]:
        """Virtual and persisted trips of a company between two dates (inclusive).

        Args:
            company_id: Operating company
            from_date: First service date
            to_date: Last service date
            route_id: Only trips of this route
            driver_id: Only trips driven by this driver
            status: Only trips in this status; virtual trips are always scheduled

        Returns:
            Trips sorted by departure, then id
        """
        if to_date < from_date:
            raise ValidationError("to_date must not be before from_date")
        max_days = settings.scheduling.SCHEDULING_MAX_PROJECTION_DAYS
        if (to_date - from_date).days + 1 > max_days:
            raise ValidationError(f"Projection window cannot exceed {max_days} days")

        schedules = self._active_schedules(company_id, route_id, driver_id)
        versions = self._current_versions(s.route_id for s in schedules)

        materialized = self._materialized_trips(company_id, from_date, to_date, route_id)
        manual = self._manual_trips(company_id, from_date, to_date, route_id, driver_id, status)

        stops_by_version = self._route_stops_by_version(
            list(versions.values()) + [t.route_version_id for t in materialized + manual]
        )

        virtual: List[TripView] = []
        if status is None or status == TripStatus.SCHEDULED:
            materialized_keys: Set[Tuple[str, date]] = {
                (t.schedule_id, t.schedule_date) for t in materialized
            }
            for schedule in schedules:
                virtual.extend(self._expand_schedule(
                    schedule,
                    from_date,
                    to_date,
                    versions.get(schedule.route_id),
                    stops_by_version,
                    materialized_keys,
                    driver_id,
                ))

        persisted = [
            t for t in materialized
            if (driver_id is None or t.driver_id == driver_id)
            and (status is None or t.status == status.value)
        ] + manual

        trips = virtual + [self._to_view(t, stops_by_version) for t in persisted]
        trips.sort(key=lambda t: (t.departure_time, t.id))

        logger.debug(
            f"Projected {len(trips)} trips for company {company_id} "
            f"{from_date}..{to_date} ({len(virtual)} virtual)"
        )
        return trips

    def _expand_schedule(
        self,
        schedule: ScheduleModel,
        from_date: date,
        to_date: date,
        version_id: Optional[str],
        stops_by_version: Dict[str, List[RouteStopModel]],
        materialized_keys: Set[Tuple[str, date]],
        driver_id: Optional[str],
    ) -> List[TripView]:
        # One bad schedule must not take the whole projection down
        try:
            occurrences = schedule_occurrences(schedule, self.resolver, from_date, to_date)
            route_stops = stops_by_version.get(version_id, []) if version_id else []
            trips = []
            for occurrence in occurrences:
                if (schedule.id, occurrence.date) in materialized_keys:
                    continue
                if driver_id and occurrence.driver_id != driver_id:
                    continue
                trips.append(build_virtual_trip(schedule, occurrence, version_id, route_stops))
            return trips
        except (SchedulingError, ValueError, TypeError, KeyError) as e:
            logger.warning(f"Skipping schedule {schedule.id} in projection: {e}", exc_info=True)
            return []

    def _materialized_trips(
        self,
        company_id: str,
        from_date: date,
        to_date: date,
        route_id: Optional[str],
    ) -> List[TripModel]:
        # Unfiltered by driver/status: every materialized key must hide its virtual twin
        query = (
            self.db.query(TripModel)
            .options(selectinload(TripModel.stop_times))
            .filter(
                TripModel.company_id == company_id,
                TripModel.schedule_id.isnot(None),
                TripModel.schedule_date.isnot(None),
                TripModel.schedule_date >= from_date,
                TripModel.schedule_date <= to_date,
            )
        )
        if route_id:
            query = query.filter(TripModel.route_id == route_id)
        return query.all()

    def _manual_trips(
        self,
        company_id: str,
        from_date: date,
        to_date: date,
        route_id: Optional[str],
        driver_id: Optional[str],
        status: Optional[TripStatus],
    ) -> List[TripModel]:
        start = datetime.combine(from_date, time.min)
        end = datetime.combine(to_date + timedelta(days=1), time.min)
        query = (
            self.db.query(TripModel)
            .options(selectinload(TripModel.stop_times))
            .filter(
                TripModel.company_id == company_id,
                TripModel.schedule_id.is_(None),
                TripModel.departure_time >= start,
                TripModel.departure_time < end,
            )
        )
        if route_id:
            query = query.filter(TripModel.route_id == route_id)
        if driver_id:
            query = query.filter(TripModel.driver_id == driver_id)
        if status:
            query = query.filter(TripModel.status == status.value)
        return query.all()

    @staticmethod
    def _to_view(trip: TripModel, stops_by_version: Dict[str, List[RouteStopModel]]) -> TripView:
        sequence = {rs.id: rs.sequence_number for rs in stops_by_version.get(trip.route_version_id, [])}
        return TripView.from_model(trip, sequence)

    # Single occurrence

    def project_occurrence(self, schedule_id: str, day: date) -> TripView:
        """Virtual trip for one schedule date, without persisting anything.

        Raises:
            NotFoundError: Unknown schedule, or the schedule does not run that day
        """
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

        occurrences = schedule_occurrences(schedule, self.resolver, day, day)
        if not occurrences:
            raise NotFoundError(f"Schedule {schedule_id} has no trip on {day.isoformat()}")

        version_id = self._current_versions([schedule.route_id]).get(schedule.route_id)
        route_stops = self._route_stops_by_version([version_id]).get(version_id, []) if version_id else []
        return build_virtual_trip(schedule, occurrences[0], version_id, route_stops)
