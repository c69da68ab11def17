from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from legaldesk.platform.patch import PatchModel


_SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"


class PracticeAreaCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255, pattern=_SLUG_PATTERN)
    description: str | None = None
    is_active: bool = True


class PracticeAreaUpdate(PatchModel):
    non_nullable = frozenset({"name", "slug", "is_active"})

    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, min_length=1, max_length=255, pattern=_SLUG_PATTERN)
    description: str | None = None
    is_active: bool | None = None


class PracticeAreaRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    slug: str
    description: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


class LegalServiceCreate(BaseModel):
    practice_area_id: uuid.UUID | None = None
    name: str = Field(min_length=1, max_length=255)
    slug: str = Field(min_length=1, max_length=255, pattern=_SLUG_PATTERN)
    description: str | None = None
    registration_fee: Decimal = Field(default=Decimal("0"), ge=0)
    is_active: bool = True


class LegalServiceUpdate(PatchModel):
    non_nullable = frozenset({"name", "slug", "registration_fee", "is_active"})

    practice_area_id: uuid.UUID | None = None
    name: str | None = Field(default=None, min_length=1, max_length=255)
    slug: str | None = Field(default=None, min_length=1, max_length=255, pattern=_SLUG_PATTERN)
    description: str | None = None
    registration_fee: Decimal | None = Field(default=None, ge=0)
    is_active: bool | None = None


class LegalServiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    practice_area_id: uuid.UUID | None
    name: str
    slug: str
    description: str | None
    registration_fee: Decimal
    is_active: bool
    created_at: datetime
    updated_at: datetime
