from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from legaldesk.catalog.models import LegalService
from legaldesk.core.database import Base
from legaldesk.platform.sequences import register_sequence


REGISTRATION_STATUSES = ("pending_payment", "paid", "in_progress", "completed", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ServiceRegistration(Base):
    __tablename__ = "service_registrations"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    reference_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    service_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("legal_services.id", ondelete="RESTRICT"),
        nullable=False,
    )
    client_profile_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("client_profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False)
    cnic: Mapped[str | None] = mapped_column(String(32), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    description_of_need: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(
        String(24),
        nullable=False,
        default="pending_payment",
        server_default="pending_payment",
    )
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", server_default="pending")
    assigned_to_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("user_profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    staff_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    service: Mapped[LegalService] = relationship(LegalService)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending_payment', 'paid', 'in_progress', 'completed', 'cancelled')",
            name="ck_service_registrations_status",
        ),
        CheckConstraint(
            "payment_status IN ('pending', 'paid', 'failed', 'refunded')",
            name="ck_service_registrations_payment_status",
        ),
        Index("ix_service_registrations_email", "email"),
    )


register_sequence(ServiceRegistration, "reference_number", "SRV")
