from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from pawsboarding.core.config import get_settings
from pawsboarding.core.deps import get_availability_engine, get_db, get_notifier
from pawsboarding.schemas.availability import (
    AvailabilityCheckRequest,
    AvailabilityCheckResponse,
    BlackoutDatesResponse,
    DateRangeOut,
)
from pawsboarding.schemas.booking import BookingDecisionOut, BookingRequestCreate, BookingRequestOut
from pawsboarding.services.availability_service import AvailabilityEngine, format_availability_message
from pawsboarding.services.booking_policy import BookingStatus, status_message
from pawsboarding.services.booking_rules import DateRange
from pawsboarding.services.booking_service import get_booking_request, submit_booking_request
from pawsboarding.services.slack_notifier import SlackNotifier
from pawsboarding.services.vip_service import get_vip_details

router = APIRouter()


@router.post("/request", response_model=BookingDecisionOut)
async def create_booking_request(
    payload: BookingRequestCreate,
    db: Session = Depends(get_db),
    engine: AvailabilityEngine = Depends(get_availability_engine),
    notifier: SlackNotifier = Depends(get_notifier),
):
    decision = await submit_booking_request(db, payload, engine=engine, notifier=notifier)
    return BookingDecisionOut(booking_id=decision.booking_id, status=decision.status.value, message=decision.message)


@router.post("/availability", response_model=AvailabilityCheckResponse)
async def check_availability(payload: AvailabilityCheckRequest, engine: AvailabilityEngine = Depends(get_availability_engine)):
    date_range = DateRange.parse(payload.start_date, payload.end_date)
    verdict = await engine.check_range_availability(date_range)
    return AvailabilityCheckResponse(
        is_available=verdict.is_available,
        conflicts=verdict.conflicts,
        message=format_availability_message(date_range, verdict),
    )


@router.get("/blackout-dates", response_model=BlackoutDatesResponse)
async def blackout_dates(
    months: int | None = Query(default=None),
    engine: AvailabilityEngine = Depends(get_availability_engine),
):
    horizon = get_settings().blackout_default_months if months is None else months
    result = await engine.compute_blackout_dates(horizon)
    body = BlackoutDatesResponse(
        success=not result.degraded,
        blackout_dates=[d.isoformat() for d in result.dates],
        date_range=DateRangeOut(start=result.window_start.isoformat(), end=result.window_end.isoformat()),
        error=result.error,
    )
    if result.degraded:
        # Empty list means "unknown" here, not "fully open"
        return JSONResponse(status_code=503, content=body.model_dump(by_alias=True))
    return body


@router.get("/bookings/{booking_id}", response_model=BookingRequestOut)
def view_booking(booking_id: str, db: Session = Depends(get_db)):
    b = get_booking_request(db, booking_id)
    return BookingRequestOut(
        id=b.id,
        parent_name=b.parent_name,
        dog_name=b.dog_name,
        start_date=b.start_date,
        end_date=b.end_date,
        stay_pattern=b.stay_pattern,
        is_vip=b.is_vip,
        vip_level=get_vip_details(db, b.email)["vipLevel"],
        status=b.status,
        message=status_message(BookingStatus(b.status)),
        created_at=b.created_at,
    )
