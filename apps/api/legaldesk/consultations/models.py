from __future__ import annotations

import uuid
from datetime import date, datetime, time, timezone
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Index, Numeric, String, Text, Time, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from legaldesk.core.database import Base
from legaldesk.platform.sequences import register_sequence


BOOKING_STATUSES = ("pending_payment", "payment_confirmed", "scheduled", "completed", "cancelled")
PAYMENT_STATUSES = ("pending", "paid", "failed", "refunded")
URGENCY_LEVELS = ("low", "medium", "high", "urgent")

CONSULTATION_FEE = Decimal("50000.00")
CONSULTATION_CURRENCY = "PKR"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConsultationBooking(Base):
    __tablename__ = "consultation_bookings"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    reference_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    # Set when a signed-in client books; guest bookings have no owner.
    client_profile_id: Mapped[uuid.UUID | None] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("client_profiles.id", ondelete="SET NULL"),
        nullable=True,
    )
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(32), nullable=False)
    practice_area: Mapped[str] = mapped_column(String(128), nullable=False)
    urgency: Mapped[str] = mapped_column(String(16), nullable=False, default="medium")
    issue_summary: Mapped[str] = mapped_column(Text, nullable=False)
    relevant_dates: Mapped[str | None] = mapped_column(Text, nullable=True)
    opposing_party: Mapped[str | None] = mapped_column(String(255), nullable=True)
    additional_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    consultation_fee: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=CONSULTATION_FEE)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default=CONSULTATION_CURRENCY)
    payment_status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", server_default="pending")
    booking_status: Mapped[str] = mapped_column(
        String(24),
        nullable=False,
        default="pending_payment",
        server_default="pending_payment",
    )
    booking_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    booking_time: Mapped[time | None] = mapped_column(Time, nullable=True)
    meeting_link: Mapped[str | None] = mapped_column(String(512), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(
            "booking_status IN ('pending_payment', 'payment_confirmed', 'scheduled', 'completed', 'cancelled')",
            name="ck_consultation_bookings_booking_status",
        ),
        CheckConstraint(
            "payment_status IN ('pending', 'paid', 'failed', 'refunded')",
            name="ck_consultation_bookings_payment_status",
        ),
        CheckConstraint("urgency IN ('low', 'medium', 'high', 'urgent')", name="ck_consultation_bookings_urgency"),
        Index("ix_consultation_bookings_email", "email"),
    )


register_sequence(ConsultationBooking, "reference_number", "CON")
