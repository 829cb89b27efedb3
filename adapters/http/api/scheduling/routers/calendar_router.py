from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from core.database import get_db
from core.rate_limiter import limiter, RateLimits
from src.scheduling_bc.calendar.infrastructure.services import CalendarService, HolidayImporter
from adapters.http.api.scheduling.schemas import (
    CalendarCreate,
    CalendarUpdate,
    CalendarResponse,
    CalendarDetailResponse,
    CalendarEntryCreate,
    CalendarEntryUpdate,
    CalendarEntryResponse,
    CalendarDateResponse,
    HolidayImportRequest,
    HolidayImportResponse,
)


router = APIRouter(prefix="/calendars", tags=["Calendars"])


def _dates_response(dates) -> List[CalendarDateResponse]:
    return [CalendarDateResponse(date=d.date, name=d.name, entry_id=d.entry_id) for d in dates]


@router.get("", response_model=List[CalendarResponse])
def list_calendars(
    company_id: Optional[str] = Query(None, description="Include this company's own calendars"),
    db: Session = Depends(get_db),
):
    """List active calendars: system-wide ones plus the company's own."""
    return CalendarService(db).list_for_company(company_id)


@router.post("", response_model=CalendarDetailResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RateLimits.CALENDARS)
def create_calendar(
    request: Request,
    body: CalendarCreate,
    db: Session = Depends(get_db),
):
    """Create a calendar with optional entries. 409 if the code is taken."""
    return CalendarService(db).create(body.model_dump())


@router.get("/by-code/{code}/dates", response_model=List[CalendarDateResponse])
def get_calendar_dates_by_code(
    code: str,
    year: int = Query(..., ge=1900, le=2200),
    db: Session = Depends(get_db),
):
    """Resolved dates of a calendar, looked up by its code."""
    return _dates_response(CalendarService(db).get_dates_by_code(code, year))


@router.get("/{calendar_id}", response_model=CalendarDetailResponse)
def get_calendar(calendar_id: str, db: Session = Depends(get_db)):
    return CalendarService(db).get(calendar_id)


@router.patch("/{calendar_id}", response_model=CalendarDetailResponse)
def update_calendar(
    calendar_id: str,
    body: CalendarUpdate,
    db: Session = Depends(get_db),
):
    service = CalendarService(db)
    service.update(calendar_id, body.model_dump(exclude_unset=True))
    return service.get(calendar_id)


@router.delete("/{calendar_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_calendar(calendar_id: str, db: Session = Depends(get_db)):
    CalendarService(db).delete(calendar_id)


@router.post(
    "/{calendar_id}/entries",
    response_model=CalendarEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_entry(
    calendar_id: str,
    body: CalendarEntryCreate,
    db: Session = Depends(get_db),
):
    return CalendarService(db).create_entry(calendar_id, body.model_dump())


@router.patch("/{calendar_id}/entries/{entry_id}", response_model=CalendarEntryResponse)
def update_entry(
    calendar_id: str,
    entry_id: str,
    body: CalendarEntryUpdate,
    db: Session = Depends(get_db),
):
    return CalendarService(db).update_entry(calendar_id, entry_id, body.model_dump(exclude_unset=True))


@router.delete("/{calendar_id}/entries/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_entry(calendar_id: str, entry_id: str, db: Session = Depends(get_db)):
    CalendarService(db).delete_entry(calendar_id, entry_id)


@router.get("/{calendar_id}/dates", response_model=List[CalendarDateResponse])
def get_calendar_dates(
    calendar_id: str,
    year: int = Query(..., ge=1900, le=2200),
    db: Session = Depends(get_db),
):
    """Resolve every entry of the calendar to concrete dates for a year.

    Fixed dates, Easter-relative offsets, nth weekdays and date ranges are
    resolved; the result is sorted ascending.
    """
    return _dates_response(CalendarService(db).get_dates(calendar_id, year))


@router.post("/{calendar_id}/import-holidays", response_model=HolidayImportResponse)
@limiter.limit(RateLimits.HOLIDAY_IMPORT)
def import_holidays(
    request: Request,
    calendar_id: str,
    body: HolidayImportRequest,
    db: Session = Depends(get_db),
):
    """Import a country's public holidays for a year (python-holidays)."""
    created = HolidayImporter(db).import_year(calendar_id, body.year, body.country, body.region)
    return HolidayImportResponse(calendar_id=calendar_id, year=body.year, created=created)
