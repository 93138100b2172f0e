from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel, EmailStr, Field, field_validator


class BookingRequestCreate(BaseModel):
    parent_name: str = Field(alias="parentName", min_length=1, max_length=255)
    dog_name: str = Field(alias="dogName", min_length=1, max_length=255)
    email: EmailStr
    phone: str | None = Field(default=None, max_length=32)
    dog_breed: str | None = Field(alias="dogBreed", default=None, max_length=255)
    dog_age: int | None = Field(alias="dogAge", default=None, ge=0, le=40)
    start_date: str = Field(alias="startDate", min_length=1)
    end_date: str = Field(alias="endDate", min_length=1)
    notes: str | None = Field(default=None, max_length=2000)

    @field_validator("dog_age", mode="before")
    @classmethod
    def blank_age_is_unknown(cls, v):
        # HTML forms post an untouched number input as ""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    class Config:
        populate_by_name = True


class BookingDecisionOut(BaseModel):
    success: bool = True
    booking_id: str = Field(alias="bookingId")
    status: str  # AUTO_APPROVED/PENDING/DENIED
    message: str

    class Config:
        populate_by_name = True


class BookingRequestOut(BaseModel):
    id: str
    parent_name: str = Field(alias="parentName")
    dog_name: str = Field(alias="dogName")
    start_date: date = Field(alias="startDate")
    end_date: date = Field(alias="endDate")
    stay_pattern: str = Field(alias="stayPattern")
    is_vip: bool = Field(alias="isVip")
    vip_level: str | None = Field(alias="vipLevel", default=None)
    status: str
    message: str
    created_at: datetime = Field(alias="createdAt")

    class Config:
        populate_by_name = True
