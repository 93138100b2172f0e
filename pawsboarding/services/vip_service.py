from __future__ import annotations

import logging

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from pawsboarding.core.config import get_settings
from pawsboarding.models.booking_request import BookingRequest
from pawsboarding.models.vip_customer import VipCustomer

logger = logging.getLogger(__name__)

APPROVED_STATUSES = ("APPROVED", "AUTO_APPROVED")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _approved_booking_count(db: Session, email: str) -> int:
    q = (
        select(func.count(BookingRequest.id))
        .where(BookingRequest.email == email)
        .where(BookingRequest.status.in_(APPROVED_STATUSES))
    )
    return int(db.execute(q).scalar_one())


def _level_for(count: int) -> str:
    if count >= 10:
        return "premium"
    if count >= 5:
        return "gold"
    return "standard"


def is_vip_customer(db: Session, email: str) -> bool:
    """Listed in the VIP table, or enough approved stays on record."""
    email_norm = normalize_email(email)
    listed = db.execute(select(VipCustomer.id).where(VipCustomer.email == email_norm)).first()
    if listed is not None:
        return True
    return _approved_booking_count(db, email_norm) >= get_settings().vip_booking_threshold


def get_vip_details(db: Session, email: str) -> dict:
    email_norm = normalize_email(email)
    vip = db.execute(select(VipCustomer).where(VipCustomer.email == email_norm)).scalar_one_or_none()
    if vip is not None:
        return {"isVip": True, "vipLevel": vip.vip_level or "standard", "totalBookings": vip.total_bookings}

    count = _approved_booking_count(db, email_norm)
    is_vip = count >= get_settings().vip_booking_threshold
    return {"isVip": is_vip, "vipLevel": _level_for(count) if is_vip else None, "totalBookings": count}


def add_vip_customer(db: Session, *, email: str, vip_level: str = "standard") -> VipCustomer:
    email_norm = normalize_email(email)
    vip = db.execute(select(VipCustomer).where(VipCustomer.email == email_norm)).scalar_one_or_none()
    if vip is None:
        vip = VipCustomer(email=email_norm, vip_level=vip_level)
        db.add(vip)
        logger.info("Added VIP customer")
    else:
        vip.vip_level = vip_level
    db.commit()
    db.refresh(vip)
    return vip
