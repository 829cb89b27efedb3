"""Integration tests for the trip lifecycle."""

import pytest
from datetime import date, datetime

from core.config import settings
from core.errors import DomainError, NotFoundError, ValidationError
from src.scheduling_bc.schedule.infrastructure.services import ScheduleService
from src.scheduling_bc.trip.domain.entities import TripStatus
from src.scheduling_bc.trip.infrastructure.models import TripModel
from src.scheduling_bc.trip.infrastructure.services import TripService
from src.scheduling_bc.trip.infrastructure.services import trip_service as trip_service_module


@pytest.fixture
def service(db):
    return TripService(db)


@pytest.fixture
def virtual_id(schedule):
    return f"virtual:{schedule.id}:2026-03-04"


class TestReads:
    """Reads never persist anything."""

    def test_get_virtual(self, db, service, virtual_id):
        trip = service.get(virtual_id)
        assert trip.is_virtual is True
        assert trip.id == virtual_id
        assert db.query(TripModel).count() == 0

    def test_get_virtual_after_materialize(self, service, virtual_id):
        persisted = service.materialize(virtual_id)
        trip = service.get(virtual_id)
        assert trip.id == persisted.id
        assert trip.is_virtual is False

    def test_get_unknown(self, service):
        with pytest.raises(NotFoundError):
            service.get("no-such-trip")

    def test_malformed_virtual_id(self, service):
        with pytest.raises(ValidationError):
            service.get("virtual:abc:yesterday")

    def test_driver_trips(self, service, route, make_schedule):
        make_schedule(route, driver_id="driver-a")
        make_schedule(route, name="Other driver", driver_id="driver-c")
        trips = service.driver_trips("driver-a", route.company_id, date(2026, 3, 4))
        assert len(trips) == 1
        assert trips[0].driver_id == "driver-a"


class TestLifecycle:
    """Tests for start / complete / cancel and stop events."""

    def test_start_materializes(self, db, service, virtual_id):
        trip = service.start(virtual_id)
        assert trip.is_virtual is False
        assert trip.status == TripStatus.IN_PROGRESS
        assert trip.actual_departure is not None
        assert db.query(TripModel).count() == 1

    def test_start_twice(self, service, virtual_id):
        service.start(virtual_id)
        with pytest.raises(DomainError):
            service.start(virtual_id)

    def test_complete_never_started(self, db, service, virtual_id):
        with pytest.raises(DomainError):
            service.complete(virtual_id)
        assert db.query(TripModel).count() == 0

    def test_complete_scheduled_trip(self, service, virtual_id):
        trip = service.materialize(virtual_id)
        with pytest.raises(DomainError):
            service.complete(trip.id)

    def test_full_run(self, service, route, virtual_id):
        started = service.start(virtual_id)
        stop_id = route.current_version.stops[1].id
        at = datetime(2026, 3, 4, 8, 25)

        trip = service.record_stop_arrival(started.id, stop_id, at)
        arrived = [st for st in trip.stop_times if st.route_stop_id == stop_id][0]
        assert arrived.actual_arrival == at

        # The virtual id keeps resolving to the persisted trip
        trip = service.record_stop_departure(virtual_id, stop_id)
        departed = [st for st in trip.stop_times if st.route_stop_id == stop_id][0]
        assert departed.actual_departure is not None

        completed = service.complete(virtual_id)
        assert completed.status == TripStatus.COMPLETED
        assert completed.actual_arrival is not None

    def test_stop_event_needs_in_progress(self, service, route, virtual_id):
        trip = service.materialize(virtual_id)
        with pytest.raises(DomainError):
            service.record_stop_arrival(trip.id, route.current_version.stops[0].id)

    def test_stop_event_unknown_stop(self, service, virtual_id):
        trip = service.start(virtual_id)
        with pytest.raises(NotFoundError):
            service.record_stop_arrival(trip.id, "not-a-stop")

    def test_stop_event_on_virtual_never_started(self, service, route, virtual_id):
        with pytest.raises(DomainError):
            service.record_stop_arrival(virtual_id, route.current_version.stops[0].id)

    def test_cancel_appends_reason(self, service, virtual_id):
        trip = service.cancel(virtual_id, "Vehicle breakdown")
        assert trip.status == TripStatus.CANCELLED
        assert trip.notes == "Vehicle breakdown"

    def test_cancel_completed(self, service, virtual_id):
        service.start(virtual_id)
        service.complete(virtual_id)
        with pytest.raises(DomainError):
            service.cancel(virtual_id)

    def test_cancel_twice(self, service, virtual_id):
        service.cancel(virtual_id)
        with pytest.raises(DomainError):
            service.cancel(virtual_id)


class TestAssignment:
    """Tests for driver / vehicle changes."""

    def test_assign_driver_materializes(self, service, virtual_id):
        trip = service.assign_driver(virtual_id, "driver-z")
        assert trip.is_virtual is False
        assert trip.driver_id == "driver-z"

    def test_update_notes_and_vehicle(self, service, virtual_id):
        trip = service.update(virtual_id, {"vehicle_id": "bus-9", "notes": "Wi-Fi broken"})
        assert trip.vehicle_id == "bus-9"
        assert trip.notes == "Wi-Fi broken"

    def test_reassign_cancelled(self, service, virtual_id):
        service.cancel(virtual_id)
        with pytest.raises(DomainError):
            service.assign_driver(virtual_id, "driver-z")

    def test_skipped_occurrence_cannot_be_assigned(self, db, service, schedule, virtual_id):
        ScheduleService(db).create_exception(schedule.id, {"date": date(2026, 3, 4), "exception_type": "skip"})
        with pytest.raises(DomainError):
            service.assign_driver(virtual_id, "driver-z")


class TestManualTrips:
    """Tests for trips outside any schedule."""

    def test_create_manual(self, service, route):
        trip = service.create_manual({
            "company_id": route.company_id,
            "route_id": route.id,
            "departure_time": datetime(2026, 3, 3, 14, 0),
            "driver_id": "driver-a",
        })
        assert trip.is_virtual is False
        assert trip.schedule_id is None
        assert trip.arrival_time == datetime(2026, 3, 3, 15, 0)
        assert [st.sequence_number for st in trip.stop_times] == [1, 2, 3, 4]

    def test_create_manual_other_company(self, service, make_route):
        route = make_route(company_id="company-other")
        with pytest.raises(ValidationError):
            service.create_manual({
                "company_id": "company-polbus",
                "route_id": route.id,
                "departure_time": datetime(2026, 3, 3, 14, 0),
            })


@pytest.fixture
def stop_ids(route):
    """Physical stop ids of the route, in travel order."""
    return [rs.stop_id for rs in route.current_version.stops]


class TestSearch:
    """Tests for stop-to-stop search."""

    def test_finds_virtual_trip(self, db, service, schedule, stop_ids):
        trips = service.search(stop_ids[0], stop_ids[2], schedule.company_id, date(2026, 3, 4))
        assert [t.id for t in trips] == [f"virtual:{schedule.id}:2026-03-04"]
        assert db.query(TripModel).count() == 0

    def test_wrong_direction_is_empty(self, service, schedule, stop_ids):
        assert service.search(stop_ids[2], stop_ids[0], schedule.company_id, date(2026, 3, 4)) == []

    def test_unknown_stop_is_empty(self, service, schedule, stop_ids):
        assert service.search(stop_ids[0], "nowhere", schedule.company_id, date(2026, 3, 4)) == []

    def test_finds_materialized_trip(self, service, schedule, stop_ids, virtual_id):
        persisted = service.materialize(virtual_id)
        trips = service.search(stop_ids[1], stop_ids[3], schedule.company_id, date(2026, 3, 4))
        assert [t.id for t in trips] == [persisted.id]
        assert trips[0].is_virtual is False

    def test_skips_cancelled_trips(self, service, schedule, stop_ids, virtual_id):
        service.cancel(virtual_id)
        assert service.search(stop_ids[0], stop_ids[3], schedule.company_id, date(2026, 3, 4)) == []

    def test_other_company_is_empty(self, service, schedule, stop_ids):
        assert service.search(stop_ids[0], stop_ids[3], "company-other", date(2026, 3, 4)) == []

    def test_without_date_returns_upcoming_trips_today(self, monkeypatch, service, schedule, stop_ids):
        """Trips that already left today are not offered."""
        monkeypatch.setattr(trip_service_module, "local_now", lambda: datetime(2026, 3, 4, 7, 0))
        assert len(service.search(stop_ids[0], stop_ids[3], schedule.company_id)) == 1

        monkeypatch.setattr(trip_service_module, "local_now", lambda: datetime(2026, 3, 4, 9, 0))
        assert service.search(stop_ids[0], stop_ids[3], schedule.company_id) == []

    def test_limit(self, monkeypatch, service, route, make_schedule, stop_ids):
        make_schedule(route, departure_time="06:00", arrival_time="07:30")
        make_schedule(route, departure_time="10:00", arrival_time="11:30")
        monkeypatch.setattr(settings.scheduling, "SCHEDULING_SEARCH_LIMIT", 1)

        trips = service.search(stop_ids[0], stop_ids[3], route.company_id, date(2026, 3, 4))
        assert len(trips) == 1
        assert trips[0].departure_time == datetime(2026, 3, 4, 6, 0)

    def test_same_stop_rejected(self, service, schedule, stop_ids):
        with pytest.raises(ValidationError):
            service.search(stop_ids[0], stop_ids[0], schedule.company_id, date(2026, 3, 4))
