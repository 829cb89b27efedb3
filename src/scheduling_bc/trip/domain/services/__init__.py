from .stop_time_builder import (
    DEFAULT_DWELL_MINUTES,
    parse_hhmm,
    at_local_time,
    trip_timestamps,
    build_stop_times,
)

__all__ = [
    "DEFAULT_DWELL_MINUTES",
    "parse_hhmm",
    "at_local_time",
    "trip_timestamps",
    "build_stop_times",
]
