"""Unit tests for per-stop time computation."""

from datetime import date, datetime
from types import SimpleNamespace

from src.scheduling_bc.trip.domain.services import build_stop_times, trip_timestamps


DAY = date(2026, 3, 2)


def route_stops(durations):
    return [
        SimpleNamespace(id=f"rs-{i + 1}", sequence_number=i + 1, duration_from_start=minutes)
        for i, minutes in enumerate(durations)
    ]


class TestTripTimestamps:
    """Tests for trip_timestamps."""

    def test_same_day(self):
        departure, arrival = trip_timestamps(DAY, "08:00", "09:30")
        assert departure == datetime(2026, 3, 2, 8, 0)
        assert arrival == datetime(2026, 3, 2, 9, 30)

    def test_overnight_arrives_next_day(self):
        """An arrival earlier than the departure rolls to the next day."""
        departure, arrival = trip_timestamps(DAY, "23:30", "00:15")
        assert arrival == datetime(2026, 3, 3, 0, 15)
        assert (arrival - departure).total_seconds() == 45 * 60


class TestBuildStopTimes:
    """Tests for build_stop_times."""

    def test_interpolation_scales_to_trip_duration(self):
        """Route durations (0, 15, 40, 60) stretched over a 90 minute trip."""
        departure, arrival = trip_timestamps(DAY, "08:00", "09:30")
        stops = build_stop_times(route_stops([0, 15, 40, 60]), {}, DAY, departure, arrival)

        assert [st.scheduled_arrival for st in stops] == [
            datetime(2026, 3, 2, 8, 0),
            datetime(2026, 3, 2, 8, 22, 30),
            datetime(2026, 3, 2, 9, 0),
            datetime(2026, 3, 2, 9, 30),
        ]
        assert stops[1].scheduled_departure == datetime(2026, 3, 2, 8, 24, 30)

    def test_dwell_is_configurable(self):
        departure, arrival = trip_timestamps(DAY, "08:00", "09:00")
        stops = build_stop_times(route_stops([0, 30, 60]), {}, DAY, departure, arrival, dwell_minutes=5)
        assert stops[1].scheduled_departure == datetime(2026, 3, 2, 8, 35)

    def test_zero_duration_route_uses_raw_offsets(self):
        departure, arrival = trip_timestamps(DAY, "08:00", "09:00")
        stops = build_stop_times(route_stops([0, 0]), {}, DAY, departure, arrival)
        assert stops[-1].scheduled_arrival == departure

    def test_explicit_times_are_used_verbatim(self):
        departure, arrival = trip_timestamps(DAY, "08:00", "09:30")
        explicit = {"rs-2": ("08:10", "08:12")}
        stops = build_stop_times(route_stops([0, 15, 40, 60]), explicit, DAY, departure, arrival)
        assert stops[1].scheduled_arrival == datetime(2026, 3, 2, 8, 10)
        assert stops[1].scheduled_departure == datetime(2026, 3, 2, 8, 12)

    def test_explicit_times_after_midnight_roll_over(self):
        departure, arrival = trip_timestamps(DAY, "23:30", "00:15")
        explicit = {"rs-2": ("23:58", "00:02"), "rs-3": ("00:15", "00:15")}
        stops = build_stop_times(route_stops([0, 20, 45]), explicit, DAY, departure, arrival)
        assert stops[1].scheduled_arrival == datetime(2026, 3, 2, 23, 58)
        assert stops[1].scheduled_departure == datetime(2026, 3, 3, 0, 2)
        assert stops[2].scheduled_arrival == datetime(2026, 3, 3, 0, 15)

    def test_ordered_by_sequence(self):
        departure, arrival = trip_timestamps(DAY, "08:00", "09:00")
        stops = build_stop_times(list(reversed(route_stops([0, 30, 60]))), {}, DAY, departure, arrival)
        assert [st.sequence_number for st in stops] == [1, 2, 3]
