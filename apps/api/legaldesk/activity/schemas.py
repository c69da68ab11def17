from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


ParentType = Literal[
    "case",
    "client",
    "complaint",
    "subscription",
    "consultation",
    "service_registration",
    "invoice",
]

COMMON_KINDS = frozenset({"created", "status_changed", "assignee_changed", "note_added"})
CASE_KINDS = COMMON_KINDS | {"hearing_scheduled", "document_uploaded", "payment_received", "other"}

ACTIVITY_KINDS: dict[str, frozenset[str]] = {
    "case": CASE_KINDS,
    "client": COMMON_KINDS,
    "complaint": COMMON_KINDS,
    "subscription": COMMON_KINDS,
    "consultation": COMMON_KINDS,
    "service_registration": COMMON_KINDS,
    "invoice": COMMON_KINDS,
}

CaseActivityKind = Literal[
    "note_added",
    "hearing_scheduled",
    "document_uploaded",
    "payment_received",
    "other",
]


class ActivityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    parent_type: str
    parent_id: uuid.UUID
    kind: str
    title: str
    description: str | None
    actor_id: uuid.UUID | None
    created_at: datetime


class ActivityNoteCreate(BaseModel):
    kind: CaseActivityKind = "note_added"
    title: str = Field(min_length=1, max_length=255)
    description: str | None = None
