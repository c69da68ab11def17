from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from legaldesk.platform.patch import PatchModel


InvoiceStatus = Literal["draft", "sent", "paid", "overdue", "cancelled"]


class InvoiceCreate(BaseModel):
    client_profile_id: uuid.UUID
    case_id: uuid.UUID | None = None
    description: str | None = None
    amount: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    currency: str = Field(default="PKR", min_length=3, max_length=3)
    issue_date: date | None = None
    due_date: date

    @model_validator(mode="after")
    def check_dates(self) -> "InvoiceCreate":
        if self.issue_date is not None and self.due_date < self.issue_date:
            raise ValueError("due_date must not be before issue_date")
        return self


class InvoiceUpdate(PatchModel):
    non_nullable = frozenset({"amount", "status", "due_date", "currency"})

    description: str | None = None
    amount: Decimal | None = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    status: InvoiceStatus | None = None
    case_id: uuid.UUID | None = None
    due_date: date | None = None
    paid_at: datetime | None = None


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    invoice_number: str
    client_profile_id: uuid.UUID
    case_id: uuid.UUID | None
    description: str | None
    amount: Decimal
    currency: str
    status: InvoiceStatus
    issue_date: date
    due_date: date
    paid_at: datetime | None
    created_at: datetime
    updated_at: datetime
