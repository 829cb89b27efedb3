from .trip import TripStatus, StopTimeView, TripView

__all__ = ["TripStatus", "StopTimeView", "TripView"]
