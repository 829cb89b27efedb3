from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from core.database import get_db
from core.rate_limiter import limiter, RateLimits
from src.scheduling_bc.schedule.domain.services import build_rrule, describe_rrule
from src.scheduling_bc.schedule.infrastructure.services import ScheduleService
from adapters.http.api.scheduling.schemas import (
    ScheduleCreate,
    ScheduleUpdate,
    ScheduleResponse,
    ScheduleExceptionCreate,
    ScheduleExceptionResponse,
    OccurrenceResponse,
    RRuleDescribeRequest,
    RRuleDescribeResponse,
)


router = APIRouter(prefix="/schedules", tags=["Schedules"])


def _schedule_response(schedule) -> ScheduleResponse:
    response = ScheduleResponse.model_validate(schedule)
    if schedule.recurrence_rule:
        response.recurrence_description = describe_rrule(schedule.recurrence_rule)
    return response


@router.get("", response_model=List[ScheduleResponse])
def list_schedules(
    company_id: Optional[str] = Query(None),
    route_id: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
):
    schedules = ScheduleService(db).list(company_id, route_id, is_active)
    return [_schedule_response(s) for s in schedules]


@router.post("", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RateLimits.SCHEDULES)
def create_schedule(
    request: Request,
    body: ScheduleCreate,
    db: Session = Depends(get_db),
):
    """Create a schedule.

    Recurring schedules need a recurrence rule. When stop times are given,
    the first stop needs a departure and the last stop an arrival.
    """
    return _schedule_response(ScheduleService(db).create(body.model_dump()))


@router.post("/rrule/describe", response_model=RRuleDescribeResponse)
def describe_recurrence(body: RRuleDescribeRequest):
    """Describe a rule in English, building it from components if no rule is given."""
    rule = body.rule or build_rrule(
        body.frequency,
        interval=body.interval,
        by_day=body.by_day,
        by_month_day=body.by_month_day,
        by_month=body.by_month,
        count=body.count,
        until=body.until,
    )
    return RRuleDescribeResponse(rule=rule, description=describe_rrule(rule))


@router.get("/{schedule_id}", response_model=ScheduleResponse)
def get_schedule(schedule_id: str, db: Session = Depends(get_db)):
    return _schedule_response(ScheduleService(db).get(schedule_id))


@router.patch("/{schedule_id}", response_model=ScheduleResponse)
@limiter.limit(RateLimits.SCHEDULES)
def update_schedule(
    request: Request,
    schedule_id: str,
    body: ScheduleUpdate,
    db: Session = Depends(get_db),
):
    """Partial update. stop_times, when present, replaces the whole set."""
    data = body.model_dump(exclude_unset=True)
    return _schedule_response(ScheduleService(db).update(schedule_id, data))


@router.delete("/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_schedule(schedule_id: str, db: Session = Depends(get_db)):
    """Delete a schedule. 409 while materialized trips reference it."""
    ScheduleService(db).delete(schedule_id)


@router.post("/{schedule_id}/duplicate", response_model=ScheduleResponse, status_code=status.HTTP_201_CREATED)
def duplicate_schedule(schedule_id: str, db: Session = Depends(get_db)):
    """Copy a schedule (inactive, with stop times, without exceptions)."""
    return _schedule_response(ScheduleService(db).duplicate(schedule_id))


@router.post(
    "/{schedule_id}/exceptions",
    response_model=ScheduleExceptionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_exception(
    schedule_id: str,
    body: ScheduleExceptionCreate,
    db: Session = Depends(get_db),
):
    """Skip or modify one date. 409 if the date already has an exception."""
    return ScheduleService(db).create_exception(schedule_id, body.model_dump())


@router.delete("/{schedule_id}/exceptions/{exception_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_exception(schedule_id: str, exception_id: str, db: Session = Depends(get_db)):
    ScheduleService(db).delete_exception(schedule_id, exception_id)


@router.get("/{schedule_id}/preview", response_model=List[OccurrenceResponse])
def preview_schedule(
    schedule_id: str,
    days: Optional[int] = Query(None, ge=1, le=366, description="Days ahead (default 30)"),
    db: Session = Depends(get_db),
):
    """Occurrences of the coming days after rule, modifiers and exceptions."""
    occurrences = ScheduleService(db).preview(schedule_id, days)
    return [
        OccurrenceResponse(
            date=o.date,
            departure_time=o.departure_time,
            arrival_time=o.arrival_time,
            vehicle_id=o.vehicle_id,
            driver_id=o.driver_id,
            is_modified=o.is_modified,
            modification_reason=o.modification_reason,
        )
        for o in occurrences
    ]
