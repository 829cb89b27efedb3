"""Tests for the scheduling HTTP endpoints."""

import pytest


def schedule_payload(route, **overrides):
    payload = {
        "company_id": route.company_id,
        "route_id": route.id,
        "name": "Morning express",
        "departure_time": "08:00",
        "arrival_time": "09:30",
        "recurrence_rule": "FREQ=WEEKLY;BYDAY=MO,WE,FR",
        "valid_from": "2026-03-02",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def created_schedule(client, api_base_url, route):
    response = client.post(f"{api_base_url}/schedules", json=schedule_payload(route))
    assert response.status_code == 201
    return response.json()


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestCalendarEndpoints:
    """Tests for /calendars."""

    def test_create_and_resolve(self, client, api_base_url):
        response = client.post(f"{api_base_url}/calendars", json={
            "code": "pl-holidays",
            "name": "Polskie swieta",
            "type": "holidays",
            "entries": [
                {"name": "Wielkanoc", "date_type": "easter_relative", "easter_offset": 0},
                {"name": "Dzien Matki", "date_type": "fixed", "fixed_date": "05-26"},
            ],
        })
        assert response.status_code == 201
        calendar = response.json()
        assert len(calendar["entries"]) == 2

        response = client.get(f"{api_base_url}/calendars/{calendar['id']}/dates?year=2026")
        assert response.status_code == 200
        assert [d["date"] for d in response.json()] == ["2026-04-05", "2026-05-26"]

        response = client.get(f"{api_base_url}/calendars/by-code/pl-holidays/dates?year=2025")
        assert response.json()[0]["date"] == "2025-04-20"

    def test_duplicate_code_is_409(self, client, api_base_url):
        body = {"code": "dup", "name": "Dup"}
        assert client.post(f"{api_base_url}/calendars", json=body).status_code == 201

        response = client.post(f"{api_base_url}/calendars", json=body)
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"

    def test_unknown_calendar_is_404(self, client, api_base_url):
        response = client.get(f"{api_base_url}/calendars/missing")
        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    def test_entry_endpoints(self, client, api_base_url):
        calendar = client.post(f"{api_base_url}/calendars", json={"code": "c", "name": "C"}).json()

        response = client.post(f"{api_base_url}/calendars/{calendar['id']}/entries", json={
            "name": "Thanksgiving",
            "date_type": "nth_weekday",
            "nth_weekday": {"month": 11, "weekday": 4, "nth": 4},
        })
        assert response.status_code == 201
        entry = response.json()

        dates = client.get(f"{api_base_url}/calendars/{calendar['id']}/dates?year=2024").json()
        assert [d["date"] for d in dates] == ["2024-11-28"]

        response = client.delete(f"{api_base_url}/calendars/{calendar['id']}/entries/{entry['id']}")
        assert response.status_code == 204

    def test_list_calendars(self, client, api_base_url):
        client.post(f"{api_base_url}/calendars", json={"code": "sys", "name": "System"})
        client.post(f"{api_base_url}/calendars", json={"code": "own", "name": "Own", "company_id": "company-polbus"})

        codes = {c["code"] for c in client.get(f"{api_base_url}/calendars?company_id=company-polbus").json()}
        assert codes == {"sys", "own"}

    def test_delete_calendar_in_use_is_409(self, client, api_base_url, route):
        calendar = client.post(f"{api_base_url}/calendars", json={"code": "school", "name": "School"}).json()
        modifiers = [{"type": "include_only", "calendar_id": calendar["id"]}]
        response = client.post(f"{api_base_url}/schedules", json=schedule_payload(route, calendar_modifiers=modifiers))
        assert response.status_code == 201

        response = client.delete(f"{api_base_url}/calendars/{calendar['id']}")
        assert response.status_code == 409
        assert response.json()["error"] == "conflict"
        assert client.get(f"{api_base_url}/calendars/{calendar['id']}").status_code == 200


class TestScheduleEndpoints:
    """Tests for /schedules."""

    def test_create_returns_description(self, created_schedule):
        assert created_schedule["recurrence_description"] == "Weekly on Monday, Wednesday, Friday"
        assert created_schedule["is_active"] is True

    def test_invalid_rule_is_422(self, client, api_base_url, route):
        response = client.post(
            f"{api_base_url}/schedules",
            json=schedule_payload(route, recurrence_rule="FREQ=SOMETIMES"),
        )
        assert response.status_code == 422
        assert response.json()["error"] == "validation_error"

    def test_bad_time_format_is_422(self, client, api_base_url, route):
        response = client.post(f"{api_base_url}/schedules", json=schedule_payload(route, departure_time="8am"))
        assert response.status_code == 422

    def test_unknown_schedule_is_404(self, client, api_base_url):
        assert client.get(f"{api_base_url}/schedules/missing").status_code == 404

    def test_update(self, client, api_base_url, created_schedule):
        response = client.patch(
            f"{api_base_url}/schedules/{created_schedule['id']}",
            json={"is_active": False},
        )
        assert response.status_code == 200
        assert response.json()["is_active"] is False

    def test_exception_conflict_is_409(self, client, api_base_url, created_schedule):
        url = f"{api_base_url}/schedules/{created_schedule['id']}/exceptions"
        body = {"date": "2026-03-04", "exception_type": "skip"}
        assert client.post(url, json=body).status_code == 201
        assert client.post(url, json=body).status_code == 409

    def test_duplicate_and_delete(self, client, api_base_url, created_schedule):
        response = client.post(f"{api_base_url}/schedules/{created_schedule['id']}/duplicate")
        assert response.status_code == 201
        copy = response.json()
        assert copy["name"] == "Copy: Morning express"

        assert client.delete(f"{api_base_url}/schedules/{copy['id']}").status_code == 204
        assert client.get(f"{api_base_url}/schedules/{copy['id']}").status_code == 404

    def test_delete_with_trips_is_409(self, client, api_base_url, created_schedule):
        trip_id = f"virtual:{created_schedule['id']}:2026-03-02"
        assert client.post(f"{api_base_url}/trips/{trip_id}/materialize").status_code == 200

        response = client.delete(f"{api_base_url}/schedules/{created_schedule['id']}")
        assert response.status_code == 409

    def test_describe_rrule(self, client, api_base_url):
        response = client.post(f"{api_base_url}/schedules/rrule/describe", json={
            "frequency": "WEEKLY",
            "by_day": ["MO", "FR"],
        })
        assert response.status_code == 200
        assert response.json() == {"rule": "FREQ=WEEKLY;BYDAY=MO,FR", "description": "Weekly on Monday, Friday"}

    def test_describe_needs_input(self, client, api_base_url):
        assert client.post(f"{api_base_url}/schedules/rrule/describe", json={}).status_code == 422


class TestTripEndpoints:
    """Tests for /trips and /drivers."""

    def list_url(self, api_base_url, route, start="2026-03-02", end="2026-03-08"):
        return f"{api_base_url}/trips?company_id={route.company_id}&from_date={start}&to_date={end}"

    def test_list_virtual_trips(self, client, api_base_url, route, created_schedule):
        response = client.get(self.list_url(api_base_url, route))
        assert response.status_code == 200
        trips = response.json()
        assert [t["schedule_date"] for t in trips] == ["2026-03-02", "2026-03-04", "2026-03-06"]
        assert all(t["is_virtual"] for t in trips)
        assert trips[0]["id"] == f"virtual:{created_schedule['id']}:2026-03-02"

    def test_inverted_window_is_422(self, client, api_base_url, route):
        response = client.get(self.list_url(api_base_url, route, "2026-03-08", "2026-03-02"))
        assert response.status_code == 422

    def test_start_replaces_virtual(self, client, api_base_url, route, created_schedule):
        virtual_id = f"virtual:{created_schedule['id']}:2026-03-04"

        response = client.post(f"{api_base_url}/trips/{virtual_id}/start")
        assert response.status_code == 200
        started = response.json()
        assert started["is_virtual"] is False
        assert started["status"] == "in_progress"

        trips = client.get(self.list_url(api_base_url, route)).json()
        ids = [t["id"] for t in trips]
        assert started["id"] in ids
        assert virtual_id not in ids
        assert len(trips) == 3

    def test_materialize_is_idempotent(self, client, api_base_url, created_schedule):
        virtual_id = f"virtual:{created_schedule['id']}:2026-03-06"
        first = client.post(f"{api_base_url}/trips/{virtual_id}/materialize").json()
        second = client.post(f"{api_base_url}/trips/{virtual_id}/materialize").json()
        assert first["id"] == second["id"]

    def test_complete_virtual_is_400(self, client, api_base_url, created_schedule):
        virtual_id = f"virtual:{created_schedule['id']}:2026-03-04"
        response = client.post(f"{api_base_url}/trips/{virtual_id}/complete")
        assert response.status_code == 400
        assert response.json()["error"] == "domain_error"

    def test_malformed_virtual_id_is_422(self, client, api_base_url):
        response = client.post(f"{api_base_url}/trips/virtual:abc:not-a-date/start")
        assert response.status_code == 422

    def test_get_virtual_trip(self, client, api_base_url, created_schedule):
        virtual_id = f"virtual:{created_schedule['id']}:2026-03-06"
        response = client.get(f"{api_base_url}/trips/{virtual_id}")
        assert response.status_code == 200
        assert response.json()["is_virtual"] is True

    def test_trip_not_running_is_404(self, client, api_base_url, created_schedule):
        # 2026-03-03 is a Tuesday
        virtual_id = f"virtual:{created_schedule['id']}:2026-03-03"
        assert client.get(f"{api_base_url}/trips/{virtual_id}").status_code == 404

    def test_cancel_with_reason(self, client, api_base_url, created_schedule):
        virtual_id = f"virtual:{created_schedule['id']}:2026-03-04"
        response = client.post(f"{api_base_url}/trips/{virtual_id}/cancel", json={"reason": "Snow"})
        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert response.json()["notes"] == "Snow"

    def test_manual_trip(self, client, api_base_url, route):
        response = client.post(f"{api_base_url}/trips", json={
            "company_id": route.company_id,
            "route_id": route.id,
            "departure_time": "2026-03-03T14:00:00",
        })
        assert response.status_code == 201
        assert response.json()["arrival_time"] == "2026-03-03T15:00:00"

    def test_driver_trips(self, client, api_base_url, route):
        client.post(f"{api_base_url}/schedules", json=schedule_payload(route, driver_id="driver-a"))
        response = client.get(
            f"{api_base_url}/drivers/driver-a/trips?company_id={route.company_id}&date=2026-03-04"
        )
        assert response.status_code == 200
        trips = response.json()
        assert len(trips) == 1
        assert trips[0]["driver_id"] == "driver-a"

    def test_search_between_stops(self, client, api_base_url, route):
        client.post(f"{api_base_url}/schedules", json=schedule_payload(route))
        stops = [rs.stop_id for rs in route.current_version.stops]

        url = f"{api_base_url}/trips/search?company_id={route.company_id}&date=2026-03-04"
        response = client.get(f"{url}&from_stop_id={stops[0]}&to_stop_id={stops[3]}")
        assert response.status_code == 200
        trips = response.json()
        assert len(trips) == 1
        assert trips[0]["is_virtual"] is True
        assert trips[0]["schedule_date"] == "2026-03-04"

        response = client.get(f"{url}&from_stop_id={stops[3]}&to_stop_id={stops[0]}")
        assert response.json() == []
