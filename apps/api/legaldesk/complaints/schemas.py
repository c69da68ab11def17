from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from legaldesk.platform.patch import PatchModel


ComplaintStatus = Literal["submitted", "under_review", "escalated", "resolved", "closed"]
ComplaintCategory = Literal[
    "infrastructure",
    "public_services",
    "environment",
    "governance",
    "health",
    "education",
    "utilities",
    "other",
]


class ComplaintCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)
    target_organization: str = Field(min_length=1, max_length=255)
    location: str | None = Field(default=None, max_length=255)
    category: ComplaintCategory | None = None
    evidence_urls: list[str] = Field(default_factory=list, max_length=10)


class ComplaintUpdate(PatchModel):
    non_nullable = frozenset({"status"})

    status: ComplaintStatus | None = None
    category: ComplaintCategory | None = None
    assigned_staff_id: uuid.UUID | None = None
    staff_notes: str | None = None
    resolution_notes: str | None = None
    resolved_at: datetime | None = None


class ComplaintStatusUpdate(BaseModel):
    status: ComplaintStatus
    staff_notes: str | None = None
    resolution_notes: str | None = None


class ComplaintAssign(BaseModel):
    assigned_staff_id: uuid.UUID


class ComplaintRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    complaint_number: str
    client_profile_id: uuid.UUID
    title: str
    description: str
    target_organization: str
    location: str | None
    category: ComplaintCategory | None
    evidence_urls: list[str]
    status: ComplaintStatus
    assigned_staff_id: uuid.UUID | None
    assignee_name: str | None = None
    staff_notes: str | None
    resolution_notes: str | None
    resolved_at: datetime | None
    created_at: datetime
    updated_at: datetime
