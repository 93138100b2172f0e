from __future__ import annotations

import uuid

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from pawsboarding.db.base import Base
from pawsboarding.models._mixins import TimestampMixin


class VipCustomer(Base, TimestampMixin):
    __tablename__ = "vip_customers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    vip_level: Mapped[str] = mapped_column(String(32), nullable=False, default="standard")  # standard/gold/premium
    total_bookings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
