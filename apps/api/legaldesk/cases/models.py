from __future__ import annotations

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from legaldesk.accounts.models import ClientProfile, UserProfile
from legaldesk.catalog.models import PracticeArea
from legaldesk.core.database import Base
from legaldesk.platform.sequences import register_sequence


CASE_STATUSES = ("pending", "active", "on_hold", "resolved", "closed")
CASE_PRIORITIES = ("low", "medium", "high", "urgent")
CLOSING_STATUSES = frozenset({"resolved", "closed"})


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Case(Base):
    __tablename__ = "cases"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    case_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    client_profile_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("client_profiles.id", ondelete="CASCADE"),
        nullable=False,
    )
    practice_area_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("practice_areas.id", ondelete="RESTRICT"),
        nullable=False,
    )
    service_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("legal_services.id", ondelete="SET NULL"),
        nullable=True,
    )
    assigned_to_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("user_profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    case_type: Mapped[str | None] = mapped_column(String(64), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", server_default="pending")
    priority: Mapped[str] = mapped_column(String(16), nullable=False, default="low", server_default="low")
    filing_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    closing_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    client: Mapped[ClientProfile] = relationship(ClientProfile)
    assignee: Mapped[UserProfile | None] = relationship(UserProfile)
    practice_area: Mapped[PracticeArea] = relationship(PracticeArea)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'active', 'on_hold', 'resolved', 'closed')",
            name="ck_cases_status",
        ),
        CheckConstraint("priority IN ('low', 'medium', 'high', 'urgent')", name="ck_cases_priority"),
        Index("ix_cases_client_created", "client_profile_id", "created_at"),
    )


register_sequence(Case, "case_number", "CASE")
