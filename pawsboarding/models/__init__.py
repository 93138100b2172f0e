# Import all models so that SQLAlchemy registers them for metadata.create_all
from pawsboarding.models.booking_request import BookingRequest
from pawsboarding.models.vip_customer import VipCustomer

__all__ = [
    "BookingRequest",
    "VipCustomer",
]
