from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import JSON, Boolean, Date, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from pawsboarding.db.base import Base
from pawsboarding.models._mixins import TimestampMixin


class BookingRequest(Base, TimestampMixin):
    __tablename__ = "booking_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    parent_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)

    dog_name: Mapped[str] = mapped_column(String(255), nullable=False)
    dog_breed: Mapped[str | None] = mapped_column(String(255), nullable=True)
    dog_age: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Arrival and departure days; departure day is not a boarded night
    start_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    end_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    stay_pattern: Mapped[str] = mapped_column(String(32), nullable=False, default="")  # WEEKNIGHT/WEEKEND_PACKAGE

    is_vip: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False, default="PENDING", index=True)  # PENDING/AUTO_APPROVED/APPROVED/DENIED
    conflicts_json: Mapped[list] = mapped_column(JSON, nullable=False, default=list)

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    slack_message_ts: Mapped[str | None] = mapped_column(String(64), nullable=True)
    decided_by: Mapped[str] = mapped_column(String(255), nullable=False, default="")
