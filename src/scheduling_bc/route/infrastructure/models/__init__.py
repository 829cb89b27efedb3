from .route_model import StopModel, RouteModel, RouteVersionModel, RouteStopModel

__all__ = ["StopModel", "RouteModel", "RouteVersionModel", "RouteStopModel"]
