from .virtual_trip_projector import VirtualTripProjector, build_virtual_trip
from .materializer import TripMaterializer
from .trip_service import TripService

__all__ = ["VirtualTripProjector", "build_virtual_trip", "TripMaterializer", "TripService"]
