from __future__ import annotations

from pydantic import BaseModel, Field


class AvailabilityCheckRequest(BaseModel):
    start_date: str = Field(alias="startDate", min_length=1)
    end_date: str = Field(alias="endDate", min_length=1)

    class Config:
        populate_by_name = True


class AvailabilityCheckResponse(BaseModel):
    is_available: bool = Field(alias="isAvailable")
    conflicts: list[str] = Field(default_factory=list)
    message: str

    class Config:
        populate_by_name = True


class DateRangeOut(BaseModel):
    start: str
    end: str


class BlackoutDatesResponse(BaseModel):
    success: bool = True
    blackout_dates: list[str] = Field(alias="blackoutDates", default_factory=list)
    date_range: DateRangeOut | None = Field(alias="dateRange", default=None)
    error: str | None = None

    class Config:
        populate_by_name = True
