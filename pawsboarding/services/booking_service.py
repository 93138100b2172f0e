from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from pawsboarding.core.errors import BookingError, PersistenceFailure
from pawsboarding.models.booking_request import BookingRequest
from pawsboarding.schemas.booking import BookingRequestCreate
from pawsboarding.services.availability_service import AvailabilityEngine, format_availability_message
from pawsboarding.services.booking_policy import BookingStatus, decide, status_message
from pawsboarding.services.booking_rules import DateRange, validate_booking_dates
from pawsboarding.services.slack_notifier import SlackNotifier
from pawsboarding.services.vip_service import is_vip_customer, normalize_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingDecision:
    booking_id: str
    status: BookingStatus
    message: str


async def submit_booking_request(
    db: Session,
    payload: BookingRequestCreate,
    *,
    engine: AvailabilityEngine,
    notifier: SlackNotifier,
    today: date | None = None,
) -> BookingDecision:
    # Input checks happen before any calendar call
    date_range = DateRange.parse(payload.start_date, payload.end_date)
    classification = validate_booking_dates(date_range, today=today or engine.today())

    email = normalize_email(str(payload.email))
    is_vip = is_vip_customer(db, email)

    verdict = await engine.check_range_availability(date_range)
    status = decide(verdict, is_vip)
    logger.info(
        "Booking %s..%s (%s): available=%s vip=%s -> %s",
        date_range.start,
        date_range.end,
        classification.pattern.value,
        verdict.is_available,
        is_vip,
        status.value,
    )

    booking = BookingRequest(
        parent_name=payload.parent_name,
        email=email,
        phone=payload.phone or None,
        dog_name=payload.dog_name,
        dog_breed=payload.dog_breed or None,
        dog_age=payload.dog_age,
        start_date=date_range.start,
        end_date=date_range.end,
        stay_pattern=classification.pattern.value,
        is_vip=is_vip,
        status=status.value,
        conflicts_json=list(verdict.conflicts),
        notes=payload.notes or None,
    )
    try:
        db.add(booking)
        db.commit()
        db.refresh(booking)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Failed to store booking request")
        raise PersistenceFailure("Could not save your booking request. Please try again later.") from exc

    if status is BookingStatus.PENDING:
        # A failed notification never changes the decided status
        try:
            ts = await notifier.post_approval_request(booking, format_availability_message(date_range, verdict))
        except BookingError as exc:
            logger.error("Slack notification for booking %s failed: %s", booking.id, exc.message)
            ts = None
        if ts:
            booking.slack_message_ts = ts
            db.commit()

    return BookingDecision(booking_id=booking.id, status=status, message=status_message(status))


def get_booking_request(db: Session, booking_id: str) -> BookingRequest:
    booking = db.get(BookingRequest, booking_id)
    if not booking:
        raise HTTPException(status_code=404, detail="Not found")
    return booking


def update_booking_status(db: Session, *, booking_id: str, status: BookingStatus, decided_by: str = "") -> BookingRequest:
    """Manual approve/deny of a request awaiting review."""
    if status not in (BookingStatus.APPROVED, BookingStatus.DENIED):
        raise HTTPException(status_code=400, detail="Status must be APPROVED or DENIED")

    booking = get_booking_request(db, booking_id)
    if booking.status != BookingStatus.PENDING.value:
        raise HTTPException(status_code=409, detail=f"Booking already {booking.status}")

    booking.status = status.value
    booking.decided_by = decided_by[:255]
    db.commit()
    db.refresh(booking)
    logger.info("Booking %s manually set to %s", booking.id, status.value)
    return booking
