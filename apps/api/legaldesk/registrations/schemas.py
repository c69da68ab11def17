from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from legaldesk.platform.patch import PatchModel


RegistrationStatus = Literal["pending_payment", "paid", "in_progress", "completed", "cancelled"]
PaymentStatus = Literal["pending", "paid", "failed", "refunded"]


class RegistrationCreate(BaseModel):
    service_id: uuid.UUID
    full_name: str = Field(min_length=1, max_length=255)
    email: EmailStr
    phone_number: str = Field(min_length=1, max_length=32)
    cnic: str | None = Field(default=None, max_length=32)
    address: str | None = None
    description_of_need: str | None = None


class RegistrationUpdate(PatchModel):
    non_nullable = frozenset({"status", "payment_status"})

    status: RegistrationStatus | None = None
    payment_status: PaymentStatus | None = None
    staff_notes: str | None = None
    assigned_to_id: uuid.UUID | None = None


class RegistrationStatusQuery(BaseModel):
    reference_number: str = Field(min_length=1, max_length=32)
    email: EmailStr


class RegistrationAssign(BaseModel):
    assigned_to_id: uuid.UUID


class RegistrationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    reference_number: str
    service_id: uuid.UUID
    service_name: str | None = None
    client_profile_id: uuid.UUID | None
    full_name: str
    email: str
    phone_number: str
    cnic: str | None
    address: str | None
    description_of_need: str | None
    status: RegistrationStatus
    payment_status: PaymentStatus
    assigned_to_id: uuid.UUID | None
    assignee_name: str | None = None
    staff_notes: str | None
    created_at: datetime
    updated_at: datetime


class RegistrationStatusRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    reference_number: str
    full_name: str
    status: RegistrationStatus
    payment_status: PaymentStatus
    created_at: datetime
    updated_at: datetime
