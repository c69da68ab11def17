from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from legaldesk.core.database import Base


SUBSCRIPTION_STATUSES = ("pending", "active", "past_due", "cancelled", "expired")

PLAN_NAME = "civic_retainer"
PLAN_MONTHLY_AMOUNT = Decimal("700.00")
PLAN_CURRENCY = "PKR"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Subscription(Base):
    __tablename__ = "subscriptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # One subscription row per client; it is reactivated rather than recreated.
    client_profile_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("client_profiles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    plan_name: Mapped[str] = mapped_column(String(64), nullable=False, default=PLAN_NAME)
    monthly_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=PLAN_MONTHLY_AMOUNT)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default=PLAN_CURRENCY)
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending", server_default="pending")
    current_period_start: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    current_period_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancelled_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    cancellation_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'active', 'past_due', 'cancelled', 'expired')",
            name="ck_subscriptions_status",
        ),
    )
