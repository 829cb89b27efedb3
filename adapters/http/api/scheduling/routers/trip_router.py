from datetime import date
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from core.clock import local_today
from core.database import get_db
from core.rate_limiter import limiter, RateLimits
from src.scheduling_bc.trip.domain.entities import TripStatus
from src.scheduling_bc.trip.infrastructure.services import TripService
from adapters.http.api.scheduling.schemas import (
    TripResponse,
    ManualTripCreate,
    TripUpdate,
    AssignDriverRequest,
    CancelTripRequest,
    StopEventRequest,
)


router = APIRouter(prefix="/trips", tags=["Trips"])
driver_router = APIRouter(prefix="/drivers", tags=["Trips"])


@router.get("", response_model=List[TripResponse])
@limiter.limit(RateLimits.TRIP_PROJECTION)
def list_trips(
    request: Request,
    company_id: str = Query(...),
    from_date: date = Query(..., description="First service date (YYYY-MM-DD)"),
    to_date: date = Query(..., description="Last service date, inclusive"),
    route_id: Optional[str] = Query(None),
    driver_id: Optional[str] = Query(None),
    status: Optional[TripStatus] = Query(None),
    db: Session = Depends(get_db),
):
    """Trips of a company for a date range.

    Active schedules are expanded on the fly into virtual trips
    (id "virtual:{schedule_id}:{date}"). A materialized trip replaces the
    virtual one for its date. Sorted by departure.
    """
    trips = TripService(db).list(company_id, from_date, to_date, route_id, driver_id, status)
    return [TripResponse.from_view(t) for t in trips]


@router.get("/search", response_model=List[TripResponse])
@limiter.limit(RateLimits.TRIP_PROJECTION)
def search_trips(
    request: Request,
    from_stop_id: str = Query(..., description="Boarding stop"),
    to_stop_id: str = Query(..., description="Alighting stop, after the boarding stop"),
    company_id: str = Query(...),
    day: Optional[date] = Query(None, alias="date", description="Service date, defaults to upcoming trips today"),
    db: Session = Depends(get_db),
):
    """Scheduled trips running from one stop to another on a day, earliest first (max 50)."""
    trips = TripService(db).search(from_stop_id, to_stop_id, company_id, day)
    return [TripResponse.from_view(t) for t in trips]


@router.post("", response_model=TripResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RateLimits.TRIP_MUTATION)
def create_trip(
    request: Request,
    body: ManualTripCreate,
    db: Session = Depends(get_db),
):
    """Create a one-off trip outside any schedule."""
    return TripResponse.from_view(TripService(db).create_manual(body.model_dump()))


@router.get("/{trip_id}", response_model=TripResponse)
def get_trip(trip_id: str, db: Session = Depends(get_db)):
    """Get a trip by persisted or virtual id. Virtual ids are not persisted."""
    return TripResponse.from_view(TripService(db).get(trip_id))


@router.post("/{trip_id}/materialize", response_model=TripResponse)
@limiter.limit(RateLimits.TRIP_MUTATION)
def materialize_trip(request: Request, trip_id: str, db: Session = Depends(get_db)):
    """Persist a virtual trip. Idempotent: repeated calls return the same trip."""
    return TripResponse.from_view(TripService(db).materialize(trip_id))


@router.patch("/{trip_id}", response_model=TripResponse)
@limiter.limit(RateLimits.TRIP_MUTATION)
def update_trip(
    request: Request,
    trip_id: str,
    body: TripUpdate,
    db: Session = Depends(get_db),
):
    return TripResponse.from_view(TripService(db).update(trip_id, body.model_dump(exclude_unset=True)))


@router.post("/{trip_id}/assign-driver", response_model=TripResponse)
@limiter.limit(RateLimits.TRIP_MUTATION)
def assign_driver(
    request: Request,
    trip_id: str,
    body: AssignDriverRequest,
    db: Session = Depends(get_db),
):
    return TripResponse.from_view(TripService(db).assign_driver(trip_id, body.driver_id))


@router.post("/{trip_id}/start", response_model=TripResponse)
@limiter.limit(RateLimits.TRIP_MUTATION)
def start_trip(request: Request, trip_id: str, db: Session = Depends(get_db)):
    return TripResponse.from_view(TripService(db).start(trip_id))


@router.post("/{trip_id}/complete", response_model=TripResponse)
@limiter.limit(RateLimits.TRIP_MUTATION)
def complete_trip(request: Request, trip_id: str, db: Session = Depends(get_db)):
    """Complete an in-progress trip. A virtual id must already have been started."""
    return TripResponse.from_view(TripService(db).complete(trip_id))


@router.post("/{trip_id}/cancel", response_model=TripResponse)
@limiter.limit(RateLimits.TRIP_MUTATION)
def cancel_trip(
    request: Request,
    trip_id: str,
    body: Optional[CancelTripRequest] = None,
    db: Session = Depends(get_db),
):
    reason = body.reason if body else None
    return TripResponse.from_view(TripService(db).cancel(trip_id, reason))


@router.post("/{trip_id}/stops/{route_stop_id}/arrival", response_model=TripResponse)
def record_stop_arrival(
    trip_id: str,
    route_stop_id: str,
    body: Optional[StopEventRequest] = None,
    db: Session = Depends(get_db),
):
    at = body.at if body else None
    return TripResponse.from_view(TripService(db).record_stop_arrival(trip_id, route_stop_id, at))


@router.post("/{trip_id}/stops/{route_stop_id}/departure", response_model=TripResponse)
def record_stop_departure(
    trip_id: str,
    route_stop_id: str,
    body: Optional[StopEventRequest] = None,
    db: Session = Depends(get_db),
):
    at = body.at if body else None
    return TripResponse.from_view(TripService(db).record_stop_departure(trip_id, route_stop_id, at))


@driver_router.get("/{driver_id}/trips", response_model=List[TripResponse])
def get_driver_trips(
    driver_id: str,
    company_id: str = Query(...),
    day: Optional[date] = Query(None, alias="date", description="Service date, defaults to today"),
    db: Session = Depends(get_db),
):
    """A driver's trips for one day, virtual and persisted."""
    trips = TripService(db).driver_trips(driver_id, company_id, day or local_today())
    return [TripResponse.from_view(t) for t in trips]
