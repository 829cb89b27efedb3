# Models registry for Alembic autogenerate
# Import all SQLAlchemy models here so Alembic can detect them

# Calendar models
from src.scheduling_bc.calendar.infrastructure.models import CalendarModel, CalendarEntryModel

# Route models
from src.scheduling_bc.route.infrastructure.models import (
    StopModel,
    RouteModel,
    RouteVersionModel,
    RouteStopModel,
)

# Schedule models
from src.scheduling_bc.schedule.infrastructure.models import (
    ScheduleModel,
    ScheduleStopTimeModel,
    ScheduleExceptionModel,
)

# Trip models
from src.scheduling_bc.trip.infrastructure.models import TripModel, TripStopTimeModel

__all__ = [
    # Calendar
    "CalendarModel",
    "CalendarEntryModel",
    # Route
    "StopModel",
    "RouteModel",
    "RouteVersionModel",
    "RouteStopModel",
    # Schedule
    "ScheduleModel",
    "ScheduleStopTimeModel",
    "ScheduleExceptionModel",
    # Trip
    "TripModel",
    "TripStopTimeModel",
]
