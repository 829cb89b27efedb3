from .trip_model import TripModel, TripStopTimeModel

__all__ = ["TripModel", "TripStopTimeModel"]
