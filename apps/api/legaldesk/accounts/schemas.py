from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from legaldesk.platform.patch import PatchModel


UserTypeValue = Literal["client", "attorney", "staff", "admin"]
InvitableUserType = Literal["attorney", "staff", "admin"]
CompanyType = Literal["sole_proprietorship", "partnership", "llc", "corporation", "ngo", "other"]


class ClientProfileSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    company_name: str | None
    company_type: str | None
    city: str | None
    country: str | None


class AttorneyProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    bar_number: str | None
    specializations: list[str]
    education: str | None
    experience_years: int | None
    hourly_rate: Decimal | None
    updated_at: datetime


class UserProfileRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    full_name: str
    phone_number: str | None
    user_type: UserTypeValue
    email: str | None = None
    client_profile: ClientProfileSummary | None = None
    attorney_profile: AttorneyProfileRead | None = None
    created_at: datetime
    updated_at: datetime


class UserProfileUpdate(PatchModel):
    non_nullable = frozenset({"full_name"})

    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    phone_number: str | None = Field(default=None, max_length=32)


class AttorneyProfileUpdate(PatchModel):
    non_nullable = frozenset({"specializations"})

    bar_number: str | None = Field(default=None, max_length=64)
    specializations: list[str] | None = None
    education: str | None = None
    experience_years: int | None = Field(default=None, ge=0)
    hourly_rate: Decimal | None = Field(default=None, ge=0)


class UserInvite(BaseModel):
    email: EmailStr
    full_name: str = Field(min_length=1, max_length=255)
    phone_number: str | None = Field(default=None, max_length=32)
    user_type: InvitableUserType


class PrincipalRead(BaseModel):
    user_id: uuid.UUID
    role: UserTypeValue
    linked_owner_id: uuid.UUID | None
    email: str | None
