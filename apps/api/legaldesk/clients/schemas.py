from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field

from legaldesk.accounts.schemas import CompanyType
from legaldesk.platform.patch import PatchModel


PROFILE_FIELDS = frozenset({"full_name", "phone_number"})


class ClientCreate(BaseModel):
    email: EmailStr
    full_name: str = Field(min_length=1, max_length=255)
    phone_number: str | None = Field(default=None, max_length=32)
    company_name: str | None = Field(default=None, max_length=255)
    company_type: CompanyType | None = None
    tax_id: str | None = Field(default=None, max_length=64)
    address: str | None = None
    city: str | None = Field(default=None, max_length=128)
    country: str | None = Field(default=None, max_length=128)

    def client_fields(self) -> dict[str, object]:
        return self.model_dump(exclude={"email"} | PROFILE_FIELDS)


class ClientUpdate(PatchModel):
    non_nullable = frozenset({"full_name"})

    full_name: str | None = Field(default=None, min_length=1, max_length=255)
    phone_number: str | None = Field(default=None, max_length=32)
    company_name: str | None = Field(default=None, max_length=255)
    company_type: CompanyType | None = None
    tax_id: str | None = Field(default=None, max_length=64)
    address: str | None = None
    city: str | None = Field(default=None, max_length=128)
    country: str | None = Field(default=None, max_length=128)


class ClientRead(BaseModel):
    id: uuid.UUID
    user_profile_id: uuid.UUID
    full_name: str
    phone_number: str | None
    email: str | None = None
    company_name: str | None
    company_type: CompanyType | None
    tax_id: str | None
    address: str | None
    city: str | None
    country: str | None
    created_at: datetime
    updated_at: datetime
