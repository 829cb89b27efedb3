from .calendar_router import router as calendar_router
from .schedule_router import router as schedule_router
from .trip_router import router as trip_router, driver_router

__all__ = ["calendar_router", "schedule_router", "trip_router", "driver_router"]
