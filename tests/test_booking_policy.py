import pytest

from pawsboarding.services.availability_service import AvailabilityVerdict
from pawsboarding.services.booking_policy import BookingStatus, decide, status_message


@pytest.mark.parametrize(
    "available,vip,expected",
    [
        (False, True, BookingStatus.DENIED),
        (False, False, BookingStatus.DENIED),
        (True, True, BookingStatus.AUTO_APPROVED),
        (True, False, BookingStatus.PENDING),
    ],
)
def test_decision_table(available, vip, expected):
    assert decide(AvailabilityVerdict(is_available=available), vip) is expected


def test_decide_never_returns_manual_approval():
    outcomes = {decide(AvailabilityVerdict(a), v) for a in (True, False) for v in (True, False)}
    assert BookingStatus.APPROVED not in outcomes


def test_every_status_has_a_message():
    for status in BookingStatus:
        assert status_message(status)
    assert BookingStatus.AUTO_APPROVED.value == "AUTO_APPROVED"
