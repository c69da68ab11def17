"""create legaldesk schema

Revision ID: 202610170001
Revises:
Create Date: 2026-10-17 00:01:00
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa


revision: str = "202610170001"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        "sequence_counters",
        sa.Column("prefix", sa.String(length=16), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("last_value", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("prefix", "year"),
    )

    op.create_table(
        "user_profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("phone_number", sa.String(length=32), nullable=True),
        sa.Column("user_type", sa.String(length=16), nullable=False, server_default="client"),
        *_timestamps(),
        sa.CheckConstraint(
            "user_type IN ('client', 'attorney', 'staff', 'admin')",
            name="ck_user_profiles_user_type",
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    op.create_table(
        "client_profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_profile_id", sa.Uuid(), nullable=False),
        sa.Column("company_name", sa.String(length=255), nullable=True),
        sa.Column("company_type", sa.String(length=32), nullable=True),
        sa.Column("tax_id", sa.String(length=64), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("city", sa.String(length=128), nullable=True),
        sa.Column("country", sa.String(length=128), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "company_type IS NULL OR company_type IN "
            "('sole_proprietorship', 'partnership', 'llc', 'corporation', 'ngo', 'other')",
            name="ck_client_profiles_company_type",
        ),
        sa.ForeignKeyConstraint(["user_profile_id"], ["user_profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_profile_id"),
    )

    op.create_table(
        "attorney_profiles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("user_profile_id", sa.Uuid(), nullable=False),
        sa.Column("bar_number", sa.String(length=64), nullable=True),
        sa.Column("specializations", sa.JSON(), nullable=False),
        sa.Column("education", sa.Text(), nullable=True),
        sa.Column("experience_years", sa.Integer(), nullable=True),
        sa.Column("hourly_rate", sa.Numeric(12, 2), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(["user_profile_id"], ["user_profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_profile_id"),
    )

    op.create_table(
        "practice_areas",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )

    op.create_table(
        "legal_services",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("practice_area_id", sa.Uuid(), nullable=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("registration_fee", sa.Numeric(12, 2), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.ForeignKeyConstraint(["practice_area_id"], ["practice_areas.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug"),
    )

    op.create_table(
        "cases",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("case_number", sa.String(length=32), nullable=False),
        sa.Column("client_profile_id", sa.Uuid(), nullable=False),
        sa.Column("practice_area_id", sa.Uuid(), nullable=False),
        sa.Column("service_id", sa.Uuid(), nullable=True),
        sa.Column("assigned_to_id", sa.Uuid(), nullable=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("case_type", sa.String(length=64), nullable=True),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("priority", sa.String(length=16), nullable=False, server_default="low"),
        sa.Column("filing_date", sa.Date(), nullable=True),
        sa.Column("closing_date", sa.Date(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("status IN ('pending', 'active', 'on_hold', 'resolved', 'closed')", name="ck_cases_status"),
        sa.CheckConstraint("priority IN ('low', 'medium', 'high', 'urgent')", name="ck_cases_priority"),
        sa.ForeignKeyConstraint(["client_profile_id"], ["client_profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["practice_area_id"], ["practice_areas.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["service_id"], ["legal_services.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["assigned_to_id"], ["user_profiles.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("case_number"),
    )
    op.create_index("ix_cases_client_created", "cases", ["client_profile_id", "created_at"], unique=False)

    op.create_table(
        "invoices",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("invoice_number", sa.String(length=32), nullable=False),
        sa.Column("client_profile_id", sa.Uuid(), nullable=False),
        sa.Column("case_id", sa.Uuid(), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("amount", sa.Numeric(12, 2), nullable=False),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="PKR"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="draft"),
        sa.Column("issue_date", sa.Date(), nullable=False, server_default=sa.func.current_date()),
        sa.Column("due_date", sa.Date(), nullable=False),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('draft', 'sent', 'paid', 'overdue', 'cancelled')",
            name="ck_invoices_status",
        ),
        sa.CheckConstraint("amount >= 0", name="ck_invoices_amount_non_negative"),
        sa.ForeignKeyConstraint(["client_profile_id"], ["client_profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["case_id"], ["cases.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("invoice_number"),
    )
    op.create_index("ix_invoices_client_created", "invoices", ["client_profile_id", "created_at"], unique=False)

    op.create_table(
        "complaints",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("complaint_number", sa.String(length=32), nullable=False),
        sa.Column("client_profile_id", sa.Uuid(), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("target_organization", sa.String(length=255), nullable=False),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("category", sa.String(length=32), nullable=True),
        sa.Column("evidence_urls", sa.JSON(), nullable=False),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="submitted"),
        sa.Column("assigned_staff_id", sa.Uuid(), nullable=True),
        sa.Column("staff_notes", sa.Text(), nullable=True),
        sa.Column("resolution_notes", sa.Text(), nullable=True),
        sa.Column("resolved_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('submitted', 'under_review', 'escalated', 'resolved', 'closed')",
            name="ck_complaints_status",
        ),
        sa.ForeignKeyConstraint(["client_profile_id"], ["client_profiles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["assigned_staff_id"], ["user_profiles.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("complaint_number"),
    )
    op.create_index("ix_complaints_client_created", "complaints", ["client_profile_id", "created_at"], unique=False)

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("client_profile_id", sa.Uuid(), nullable=False),
        sa.Column("plan_name", sa.String(length=64), nullable=False, server_default="civic_retainer"),
        sa.Column("monthly_amount", sa.Numeric(12, 2), nullable=False, server_default="700.00"),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="PKR"),
        sa.Column("status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("current_period_start", sa.DateTime(timezone=True), nullable=True),
        sa.Column("current_period_end", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancelled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending', 'active', 'past_due', 'cancelled', 'expired')",
            name="ck_subscriptions_status",
        ),
        sa.ForeignKeyConstraint(["client_profile_id"], ["client_profiles.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("client_profile_id"),
    )

    op.create_table(
        "consultation_bookings",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("reference_number", sa.String(length=32), nullable=False),
        sa.Column("client_profile_id", sa.Uuid(), nullable=True),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("phone_number", sa.String(length=32), nullable=False),
        sa.Column("practice_area", sa.String(length=128), nullable=False),
        sa.Column("urgency", sa.String(length=16), nullable=False, server_default="medium"),
        sa.Column("issue_summary", sa.Text(), nullable=False),
        sa.Column("relevant_dates", sa.Text(), nullable=True),
        sa.Column("opposing_party", sa.String(length=255), nullable=True),
        sa.Column("additional_notes", sa.Text(), nullable=True),
        sa.Column("consultation_fee", sa.Numeric(12, 2), nullable=False, server_default="50000.00"),
        sa.Column("currency", sa.String(length=3), nullable=False, server_default="PKR"),
        sa.Column("payment_status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("booking_status", sa.String(length=24), nullable=False, server_default="pending_payment"),
        sa.Column("booking_date", sa.Date(), nullable=True),
        sa.Column("booking_time", sa.Time(), nullable=True),
        sa.Column("meeting_link", sa.String(length=512), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "booking_status IN ('pending_payment', 'payment_confirmed', 'scheduled', 'completed', 'cancelled')",
            name="ck_consultation_bookings_booking_status",
        ),
        sa.CheckConstraint(
            "payment_status IN ('pending', 'paid', 'failed', 'refunded')",
            name="ck_consultation_bookings_payment_status",
        ),
        sa.CheckConstraint("urgency IN ('low', 'medium', 'high', 'urgent')", name="ck_consultation_bookings_urgency"),
        sa.ForeignKeyConstraint(["client_profile_id"], ["client_profiles.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("reference_number"),
    )
    op.create_index("ix_consultation_bookings_email", "consultation_bookings", ["email"], unique=False)

    op.create_table(
        "service_registrations",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("reference_number", sa.String(length=32), nullable=False),
        sa.Column("service_id", sa.Uuid(), nullable=False),
        sa.Column("client_profile_id", sa.Uuid(), nullable=True),
        sa.Column("full_name", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=320), nullable=False),
        sa.Column("phone_number", sa.String(length=32), nullable=False),
        sa.Column("cnic", sa.String(length=32), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("description_of_need", sa.Text(), nullable=True),
        sa.Column("status", sa.String(length=24), nullable=False, server_default="pending_payment"),
        sa.Column("payment_status", sa.String(length=16), nullable=False, server_default="pending"),
        sa.Column("assigned_to_id", sa.Uuid(), nullable=True),
        sa.Column("staff_notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.CheckConstraint(
            "status IN ('pending_payment', 'paid', 'in_progress', 'completed', 'cancelled')",
            name="ck_service_registrations_status",
        ),
        sa.CheckConstraint(
            "payment_status IN ('pending', 'paid', 'failed', 'refunded')",
            name="ck_service_registrations_payment_status",
        ),
        sa.ForeignKeyConstraint(["service_id"], ["legal_services.id"], ondelete="RESTRICT"),
        sa.ForeignKeyConstraint(["client_profile_id"], ["client_profiles.id"], ondelete="SET NULL"),
        sa.ForeignKeyConstraint(["assigned_to_id"], ["user_profiles.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("reference_number"),
    )
    op.create_index("ix_service_registrations_email", "service_registrations", ["email"], unique=False)

    op.create_table(
        "activity_records",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("parent_type", sa.String(length=32), nullable=False),
        sa.Column("parent_id", sa.Uuid(), nullable=False),
        sa.Column("kind", sa.String(length=32), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("actor_id", sa.Uuid(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_activity_records_parent_created",
        "activity_records",
        ["parent_type", "parent_id", "created_at"],
        unique=False,
    )


def downgrade() -> None:
    op.drop_index("ix_activity_records_parent_created", table_name="activity_records")
    op.drop_table("activity_records")
    op.drop_index("ix_service_registrations_email", table_name="service_registrations")
    op.drop_table("service_registrations")
    op.drop_index("ix_consultation_bookings_email", table_name="consultation_bookings")
    op.drop_table("consultation_bookings")
    op.drop_table("subscriptions")
    op.drop_index("ix_complaints_client_created", table_name="complaints")
    op.drop_table("complaints")
    op.drop_index("ix_invoices_client_created", table_name="invoices")
    op.drop_table("invoices")
    op.drop_index("ix_cases_client_created", table_name="cases")
    op.drop_table("cases")
    op.drop_table("legal_services")
    op.drop_table("practice_areas")
    op.drop_table("attorney_profiles")
    op.drop_table("client_profiles")
    op.drop_table("user_profiles")
    op.drop_table("sequence_counters")
