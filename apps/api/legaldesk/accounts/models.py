from __future__ import annotations

import uuid
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, CheckConstraint, DateTime, ForeignKey, Integer, Numeric, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from legaldesk.core.database import Base


USER_TYPES = ("client", "attorney", "staff", "admin")
COMPANY_TYPES = ("sole_proprietorship", "partnership", "llc", "corporation", "ngo", "other")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _in_clause(column: str, values: tuple[str, ...]) -> str:
    quoted = ", ".join(f"'{value}'" for value in values)
    return f"{column} IN ({quoted})"


class UserProfile(Base):
    __tablename__ = "user_profiles"

    # Same id as the identity the profile was provisioned for.
    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone_number: Mapped[str | None] = mapped_column(String(32), nullable=True)
    user_type: Mapped[str] = mapped_column(String(16), nullable=False, default="client")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    client_profile: Mapped[ClientProfile | None] = relationship(
        "legaldesk.accounts.models.ClientProfile",
        back_populates="user",
        uselist=False,
        passive_deletes=True,
    )
    attorney_profile: Mapped[AttorneyProfile | None] = relationship(
        "legaldesk.accounts.models.AttorneyProfile",
        back_populates="user",
        uselist=False,
        passive_deletes=True,
    )

    __table_args__ = (CheckConstraint(_in_clause("user_type", USER_TYPES), name="ck_user_profiles_user_type"),)


class ClientProfile(Base):
    __tablename__ = "client_profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_profile_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    company_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    company_type: Mapped[str | None] = mapped_column(String(32), nullable=True)
    tax_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    address: Mapped[str | None] = mapped_column(Text, nullable=True)
    city: Mapped[str | None] = mapped_column(String(128), nullable=True)
    country: Mapped[str | None] = mapped_column(String(128), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user: Mapped[UserProfile] = relationship("legaldesk.accounts.models.UserProfile", back_populates="client_profile")

    __table_args__ = (
        CheckConstraint(
            f"company_type IS NULL OR {_in_clause('company_type', COMPANY_TYPES)}",
            name="ck_client_profiles_company_type",
        ),
    )


class AttorneyProfile(Base):
    __tablename__ = "attorney_profiles"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_profile_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("user_profiles.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    bar_number: Mapped[str | None] = mapped_column(String(64), nullable=True)
    specializations: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    education: Mapped[str | None] = mapped_column(Text, nullable=True)
    experience_years: Mapped[int | None] = mapped_column(Integer, nullable=True)
    hourly_rate: Mapped[Decimal | None] = mapped_column(Numeric(12, 2), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    user: Mapped[UserProfile] = relationship("legaldesk.accounts.models.UserProfile", back_populates="attorney_profile")
