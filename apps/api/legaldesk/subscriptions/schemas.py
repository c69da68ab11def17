from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from legaldesk.platform.patch import PatchModel


SubscriptionStatus = Literal["pending", "active", "past_due", "cancelled", "expired"]


class SubscriptionCancel(BaseModel):
    reason: str | None = Field(default=None, max_length=1000)


class SubscriptionUpdate(PatchModel):
    non_nullable = frozenset({"status"})

    status: SubscriptionStatus | None = None
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    cancellation_reason: str | None = Field(default=None, max_length=1000)


class SubscriptionRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    client_profile_id: uuid.UUID
    plan_name: str
    monthly_amount: Decimal
    currency: str
    status: SubscriptionStatus
    current_period_start: datetime | None
    current_period_end: datetime | None
    cancelled_at: datetime | None
    cancellation_reason: str | None
    created_at: datetime
    updated_at: datetime


class SubscriptionStatusRead(BaseModel):
    is_active: bool
