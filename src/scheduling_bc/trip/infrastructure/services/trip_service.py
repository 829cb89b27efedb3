import logging
from datetime import date, datetime, time, timedelta
from typing import Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from core.clock import local_now
from core.config import settings
from core.errors import DomainError, NotFoundError, ValidationError
from src.scheduling_bc.route.infrastructure.models import RouteModel, RouteStopModel
from src.scheduling_bc.trip.domain.entities import TripStatus, TripView
from src.scheduling_bc.trip.domain.services import build_stop_times
from src.scheduling_bc.trip.domain.value_objects import (
    MaterializedTripRef,
    parse_trip_id,
)
from src.scheduling_bc.trip.infrastructure.models import TripModel, TripStopTimeModel
from src.scheduling_bc.trip.infrastructure.services.materializer import TripMaterializer
from src.scheduling_bc.trip.infrastructure.services.virtual_trip_projector import VirtualTripProjector

logger = logging.getLogger(__name__)


class TripService:
    """Trip reads and lifecycle.

    Every operation accepts either id shape. Mutations on a virtual id
    materialize the occurrence first; reads never persist anything.
    """

    def __init__(self, db: Session):
        self.db = db
        self.projector = VirtualTripProjector(db)
        self.materializer = TripMaterializer(db)

    # Helpers

    def _load(self, trip_id: str) -> TripModel:
        trip = (
            self.db.query(TripModel)
            .options(selectinload(TripModel.stop_times))
            .filter(TripModel.id == trip_id)
            .first()
        )
        if not trip:
            raise NotFoundError(f"Trip {trip_id} not found")
        return trip

    def to_view(self, trip: TripModel) -> TripView:
        rows = (
            self.db.query(RouteStopModel.id, RouteStopModel.sequence_number)
            .filter(RouteStopModel.route_version_id == trip.route_version_id)
            .all()
        )
        return TripView.from_model(trip, {stop_id: seq for stop_id, seq in rows})

    def resolve_trip(self, trip_id: str) -> TripModel:
        """Persisted trip for either id shape, materializing a virtual id."""
        ref = parse_trip_id(trip_id)
        if isinstance(ref, MaterializedTripRef):
            return self._load(ref.trip_id)
        return self.materializer.materialize(ref.schedule_id, ref.schedule_date)

    def _existing_trip(self, trip_id: str) -> TripModel:
        """Persisted trip for either id shape, without materializing."""
        ref = parse_trip_id(trip_id)
        if isinstance(ref, MaterializedTripRef):
            return self._load(ref.trip_id)
        trip = self.materializer.find_existing(ref.schedule_id, ref.schedule_date)
        if trip is None:
            raise DomainError(f"Trip {trip_id} has not started")
        return trip

    # Reads

    def get(self, trip_id: str) -> TripView:
        ref = parse_trip_id(trip_id)
        if isinstance(ref, MaterializedTripRef):
            return self.to_view(self._load(ref.trip_id))

        existing = self.materializer.find_existing(ref.schedule_id, ref.schedule_date)
        if existing:
            return self.to_view(existing)
        return self.projector.project_occurrence(ref.schedule_id, ref.schedule_date)

    def list(
        self,
        company_id: str,
        from_date: date,
        to_date: date,
        route_id: Optional[str] = None,
        driver_id: Optional[str] = None,
        status: Optional[TripStatus] = None,
    ) -> List[TripView]:
        return self.projector.project(company_id, from_date, to_date, route_id, driver_id, status)

    def driver_trips(self, driver_id: str, company_id: str, day: date) -> List[TripView]:
        """A driver's trips for one day."""
        return self.projector.project(company_id, day, day, driver_id=driver_id)

    def search(
        self,
        from_stop_id: str,
        to_stop_id: str,
        company_id: str,
        day: Optional[date] = None,
    ) -> List[TripView]:
        """Scheduled trips of one service day that stop at from_stop_id and later at to_stop_id.

        Without a day, today's trips that have not departed yet. Virtual
        and materialized trips are searched alike; at most
        SCHEDULING_SEARCH_LIMIT trips are returned, earliest first.
        """
        if from_stop_id == to_stop_id:
            raise ValidationError("from_stop_id and to_stop_id must differ")

        if day is None:
            earliest = local_now()
            day = earliest.date()
        else:
            earliest = datetime.combine(day, time.min)

        trips = self.projector.project(company_id, day, day, status=TripStatus.SCHEDULED)
        stop_order = self._stop_order({t.route_version_id for t in trips if t.route_version_id})

        matches = []
        for trip in trips:
            if trip.departure_time < earliest:
                continue
            stops = stop_order.get(trip.route_version_id, [])
            if from_stop_id in stops and to_stop_id in stops[stops.index(from_stop_id) + 1:]:
                matches.append(trip)
        return matches[:settings.scheduling.SCHEDULING_SEARCH_LIMIT]

    def _stop_order(self, version_ids) -> Dict[str, List[str]]:
        """Physical stop ids of each route version, in sequence order."""
        order: Dict[str, List[str]] = {v: [] for v in version_ids}
        if not order:
            return order
        rows = (
            self.db.query(RouteStopModel.route_version_id, RouteStopModel.stop_id)
            .filter(RouteStopModel.route_version_id.in_(list(order)))
            .order_by(RouteStopModel.route_version_id, RouteStopModel.sequence_number)
            .all()
        )
        for version_id, stop_id in rows:
            order[version_id].append(stop_id)
        return order

    # Commands

    def materialize(self, trip_id: str) -> TripView:
        return self.to_view(self.resolve_trip(trip_id))

    def create_manual(self, data: dict) -> TripView:
        """One-off trip not backed by a schedule.

        Arrival is the departure plus the route's total duration; stop times
        follow the route's cumulative durations.
        """
        route = self.db.query(RouteModel).filter(RouteModel.id == data["route_id"]).first()
        if not route or route.company_id != data["company_id"]:
            raise ValidationError("Route does not belong to the specified company")
        version = route.current_version
        if version is None:
            raise NotFoundError(f"Route {route.id} has no active version")
        if len(version.stops) < 2:
            raise ValidationError(f"Route version {version.id} needs at least two stops")

        departure: datetime = data["departure_time"]
        arrival = departure + timedelta(minutes=version.stops[-1].duration_from_start or 0)
        stop_times = build_stop_times(
            version.stops,
            {},
            departure.date(),
            departure,
            arrival,
            dwell_minutes=settings.scheduling.SCHEDULING_DWELL_MINUTES,
        )

        trip = TripModel(
            company_id=route.company_id,
            route_id=route.id,
            route_version_id=version.id,
            vehicle_id=data.get("vehicle_id"),
            driver_id=data.get("driver_id"),
            departure_time=departure,
            arrival_time=arrival,
            status=TripStatus.SCHEDULED.value,
            notes=data.get("notes"),
        )
        trip.stop_times = [
            TripStopTimeModel(
                route_stop_id=st.route_stop_id,
                scheduled_arrival=st.scheduled_arrival,
                scheduled_departure=st.scheduled_departure,
            )
            for st in stop_times
        ]
        self.db.add(trip)
        self.db.commit()
        logger.info(f"Created manual trip {trip.id} on route {route.id} at {departure}")
        return self.to_view(self._load(trip.id))

    def update(self, trip_id: str, data: dict) -> TripView:
        """Change vehicle, driver or notes."""
        trip = self.resolve_trip(trip_id)
        reassigning = any(data.get(k) is not None for k in ("vehicle_id", "driver_id"))
        if reassigning and trip.status in (TripStatus.COMPLETED.value, TripStatus.CANCELLED.value):
            raise DomainError(f"Cannot reassign a {trip.status} trip")

        for key in ("vehicle_id", "driver_id", "notes"):
            if key in data:
                setattr(trip, key, data[key])
        self.db.commit()
        return self.to_view(self._load(trip.id))

    def assign_driver(self, trip_id: str, driver_id: str) -> TripView:
        return self.update(trip_id, {"driver_id": driver_id})

    def start(self, trip_id: str) -> TripView:
        trip = self.resolve_trip(trip_id)
        if trip.status != TripStatus.SCHEDULED.value:
            raise DomainError(f"Only scheduled trips can be started (trip is {trip.status})")

        trip.status = TripStatus.IN_PROGRESS.value
        trip.actual_departure = local_now()
        self.db.commit()
        logger.info(f"Trip {trip.id} started")
        return self.to_view(self._load(trip.id))

    def complete(self, trip_id: str) -> TripView:
        """Complete an in-progress trip.

        A virtual id is only accepted once its occurrence has been started
        (and therefore materialized).
        """
        trip = self._existing_trip(trip_id)
        if trip.status != TripStatus.IN_PROGRESS.value:
            raise DomainError(f"Only in-progress trips can be completed (trip is {trip.status})")

        trip.status = TripStatus.COMPLETED.value
        trip.actual_arrival = local_now()
        self.db.commit()
        logger.info(f"Trip {trip.id} completed")
        return self.to_view(self._load(trip.id))

    def cancel(self, trip_id: str, reason: Optional[str] = None) -> TripView:
        trip = self.resolve_trip(trip_id)
        if trip.status in (TripStatus.COMPLETED.value, TripStatus.CANCELLED.value):
            raise DomainError(f"Cannot cancel a {trip.status} trip")

        trip.status = TripStatus.CANCELLED.value
        if reason:
            trip.notes = f"{trip.notes}\n{reason}" if trip.notes else reason
        self.db.commit()
        logger.info(f"Trip {trip.id} cancelled")
        return self.to_view(self._load(trip.id))

    # Stop events

    def _stop_time(self, trip: TripModel, route_stop_id: str) -> TripStopTimeModel:
        if trip.status != TripStatus.IN_PROGRESS.value:
            raise DomainError(f"Stop events need an in-progress trip (trip is {trip.status})")
        for st in trip.stop_times:
            if st.route_stop_id == route_stop_id:
                return st
        raise NotFoundError(f"Stop {route_stop_id} is not part of trip {trip.id}")

    def record_stop_arrival(self, trip_id: str, route_stop_id: str, at: Optional[datetime] = None) -> TripView:
        trip = self._existing_trip(trip_id)
        self._stop_time(trip, route_stop_id).actual_arrival = at or local_now()
        self.db.commit()
        return self.to_view(self._load(trip.id))

    def record_stop_departure(self, trip_id: str, route_stop_id: str, at: Optional[datetime] = None) -> TripView:
        trip = self._existing_trip(trip_id)
        self._stop_time(trip, route_stop_id).actual_departure = at or local_now()
        self.db.commit()
        return self.to_view(self._load(trip.id))
