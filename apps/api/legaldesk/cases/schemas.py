from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from legaldesk.platform.patch import PatchModel


CaseStatus = Literal["pending", "active", "on_hold", "resolved", "closed"]
CasePriority = Literal["low", "medium", "high", "urgent"]


class CaseCreate(BaseModel):
    client_profile_id: uuid.UUID
    practice_area_id: uuid.UUID
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
    priority: CasePriority = "low"
    case_type: str | None = Field(default=None, max_length=64)
    assigned_to_id: uuid.UUID | None = None
    service_id: uuid.UUID | None = None
    filing_date: date | None = None


class CaseUpdate(PatchModel):
    non_nullable = frozenset({"title", "status", "priority", "practice_area_id"})

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    status: CaseStatus | None = None
    priority: CasePriority | None = None
    case_type: str | None = Field(default=None, max_length=64)
    practice_area_id: uuid.UUID | None = None
    assigned_to_id: uuid.UUID | None = None
    service_id: uuid.UUID | None = None
    filing_date: date | None = None
    closing_date: date | None = None


class CaseStatusUpdate(BaseModel):
    status: CaseStatus


class CaseAssign(BaseModel):
    assigned_to_id: uuid.UUID | None


class CaseRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    case_number: str
    client_profile_id: uuid.UUID
    client_name: str | None = None
    practice_area_id: uuid.UUID
    practice_area_name: str | None = None
    service_id: uuid.UUID | None
    assigned_to_id: uuid.UUID | None
    assignee_name: str | None = None
    title: str
    description: str | None
    case_type: str | None
    status: CaseStatus
    priority: CasePriority
    filing_date: date | None
    closing_date: date | None
    created_at: datetime
    updated_at: datetime
