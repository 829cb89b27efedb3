from .trip_id import (
    VirtualTripRef,
    MaterializedTripRef,
    TripRef,
    build_virtual_id,
    is_virtual_id,
    parse_trip_id,
)

__all__ = [
    "VirtualTripRef",
    "MaterializedTripRef",
    "TripRef",
    "build_virtual_id",
    "is_virtual_id",
    "parse_trip_id",
]
