from __future__ import annotations

import uuid
from datetime import date, datetime, time
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from legaldesk.platform.patch import PatchModel


BookingStatus = Literal["pending_payment", "payment_confirmed", "scheduled", "completed", "cancelled"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]
Urgency = Literal["low", "medium", "high", "urgent"]


class ConsultationCreate(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone_number: str = Field(min_length=1, max_length=32)
    practice_area: str = Field(min_length=1, max_length=128)
    urgency: Urgency = "medium"
    issue_summary: str = Field(min_length=1)
    relevant_dates: str | None = None
    opposing_party: str | None = Field(default=None, max_length=255)
    additional_notes: str | None = None


class ConsultationUpdate(PatchModel):
    non_nullable = frozenset({"booking_status", "payment_status", "practice_area"})

    booking_status: BookingStatus | None = None
    payment_status: PaymentStatus | None = None
    booking_date: date | None = None
    booking_time: time | None = None
    meeting_link: str | None = Field(default=None, max_length=512)
    practice_area: str | None = Field(default=None, min_length=1, max_length=128)


class ConsultationStatusQuery(BaseModel):
    reference_number: str = Field(min_length=1, max_length=32)
    email: EmailStr


class ConsultationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    reference_number: str
    client_profile_id: uuid.UUID | None
    full_name: str
    email: str
    phone_number: str
    practice_area: str
    urgency: Urgency
    issue_summary: str
    relevant_dates: str | None
    opposing_party: str | None
    additional_notes: str | None
    consultation_fee: Decimal
    currency: str
    payment_status: PaymentStatus
    booking_status: BookingStatus
    booking_date: date | None
    booking_time: time | None
    meeting_link: str | None
    created_at: datetime
    updated_at: datetime


class ConsultationStatusRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    reference_number: str
    full_name: str
    practice_area: str
    payment_status: PaymentStatus
    booking_status: BookingStatus
    booking_date: date | None
    booking_time: time | None
    meeting_link: str | None
    created_at: datetime
