from datetime import date, datetime, timedelta
from typing import Dict, List, Sequence, Tuple

from src.scheduling_bc.trip.domain.entities import StopTimeView

DEFAULT_DWELL_MINUTES = 2


def parse_hhmm(value: str) -> Tuple[int, int]:
    """Parse "HH:MM" into (hour, minute)."""
    hour, minute = value.split(":")
    return int(hour), int(minute)


def at_local_time(day: date, hhmm: str) -> datetime:
    hour, minute = parse_hhmm(hhmm)
    return datetime(day.year, day.month, day.day, hour, minute)


def trip_timestamps(day: date, departure_hhmm: str, arrival_hhmm: str) -> Tuple[datetime, datetime]:
    """Departure and arrival timestamps of an occurrence.

    An arrival time-of-day earlier than the departure means the trip runs
    overnight and arrives the next day.
    """
    departure = at_local_time(day, departure_hhmm)
    arrival = at_local_time(day, arrival_hhmm)
    if arrival < departure:
        arrival += timedelta(days=1)
    return departure, arrival


def build_stop_times(
    route_stops: Sequence,
    explicit_times: Dict[str, Tuple[str, str]],
    trip_date: date,
    departure: datetime,
    arrival: datetime,
    dwell_minutes: int = DEFAULT_DWELL_MINUTES,
) -> List[StopTimeView]:
    """Per-stop scheduled times of one trip.

    Stops with an explicit (arrival, departure) pair use it verbatim, rolled
    to the next day when the time-of-day falls before the trip departure.
    Other stops are interpolated: the stop's cumulative duration_from_start is
    scaled so the last stop lands on the trip arrival, and the departure is
    the arrival plus dwell_minutes.

    Args:
        route_stops: Route stops with id, sequence_number and duration_from_start
        explicit_times: route_stop_id -> (arrival "HH:MM", departure "HH:MM")
        trip_date: Service date the HH:MM times belong to
        departure: Trip departure timestamp
        arrival: Trip arrival timestamp
        dwell_minutes: Dwell added at interpolated stops

    Returns:
        Stop times ordered by sequence number
    """
    stops = sorted(route_stops, key=lambda rs: rs.sequence_number)
    if not stops:
        return []

    total_minutes = (arrival - departure).total_seconds() / 60
    last_duration = stops[-1].duration_from_start or 0
    scale = total_minutes / last_duration if last_duration > 0 else 1
    dwell = timedelta(minutes=dwell_minutes)

    result = []
    for rs in stops:
        explicit = explicit_times.get(rs.id)
        if explicit:
            stop_arrival = at_local_time(trip_date, explicit[0])
            if stop_arrival < departure:
                stop_arrival += timedelta(days=1)
            stop_departure = at_local_time(trip_date, explicit[1])
            while stop_departure < stop_arrival:
                stop_departure += timedelta(days=1)
        else:
            offset = timedelta(minutes=(rs.duration_from_start or 0) * scale)
            stop_arrival = departure + offset
            stop_departure = stop_arrival + dwell

        result.append(StopTimeView(
            route_stop_id=rs.id,
            sequence_number=rs.sequence_number,
            scheduled_arrival=stop_arrival,
            scheduled_departure=stop_departure,
        ))

    return result
