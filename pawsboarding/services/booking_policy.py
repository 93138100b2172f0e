from __future__ import annotations

from enum import Enum

from pawsboarding.services.availability_service import AvailabilityVerdict


class BookingStatus(str, Enum):
    AUTO_APPROVED = "AUTO_APPROVED"
    PENDING = "PENDING"
    DENIED = "DENIED"
    # Only reachable through manual approval of a PENDING request
    APPROVED = "APPROVED"


STATUS_MESSAGES = {
    BookingStatus.AUTO_APPROVED: "Your booking has been automatically approved! You'll receive a confirmation email shortly.",
    BookingStatus.PENDING: "Your booking request has been submitted and is awaiting approval. We'll notify you within 2-4 hours.",
    BookingStatus.DENIED: "Unfortunately, we don't have availability for your requested dates. Please try different dates.",
    BookingStatus.APPROVED: "Your booking has been approved! You'll receive a confirmation email shortly.",
}


def decide(verdict: AvailabilityVerdict, is_vip: bool) -> BookingStatus:
    # VIP status never overrides unavailability
    if not verdict.is_available:
        return BookingStatus.DENIED
    if is_vip:
        return BookingStatus.AUTO_APPROVED
    return BookingStatus.PENDING


def status_message(status: BookingStatus) -> str:
    return STATUS_MESSAGES.get(status, "Your booking request has been processed.")
