from __future__ import annotations

import uuid
from collections.abc import Generator
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import legaldesk.models  # noqa: F401
from legaldesk.accounts.models import ClientProfile, UserProfile
from legaldesk.consultations.schemas import ConsultationCreate, ConsultationUpdate
from legaldesk.consultations.service import ConsultationService
from legaldesk.core.database import Base
from legaldesk.core.errors import Forbidden, NotFound
from legaldesk.platform.query import PageParams
from legaldesk.platform.security import Principal
from legaldesk.platform.sequences import current_year


@pytest.fixture()
def db_session() -> Generator[Session, None, None]:
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


def _client(session: Session, full_name: str = "Signed In") -> Principal:
    user = UserProfile(id=uuid.uuid4(), full_name=full_name, user_type="client")
    session.add(user)
    session.flush()
    client = ClientProfile(user_profile_id=user.id)
    session.add(client)
    session.commit()
    return Principal(user_id=user.id, role="client", linked_owner_id=client.id)


def _staff(session: Session) -> Principal:
    user = UserProfile(id=uuid.uuid4(), full_name="Front Desk", user_type="staff")
    session.add(user)
    session.commit()
    return Principal(user_id=user.id, role="staff")


def _booking(email: str = "Guest.User@Example.com", **overrides: str) -> ConsultationCreate:
    fields = {
        "full_name": "Guest User",
        "email": email,
        "phone_number": "+92 300 1234567",
        "practice_area": "family-law",
        "issue_summary": "Need advice on a custody dispute.",
    }
    fields.update(overrides)
    return ConsultationCreate(**fields)


def test_guest_booking_has_no_owner_and_default_fee(db_session: Session) -> None:
    service = ConsultationService()

    booking = service.create(db_session, None, _booking())

    assert booking.reference_number == f"CON-{current_year()}-0001"
    assert booking.client_profile_id is None
    assert booking.booking_status == "pending_payment"
    assert booking.payment_status == "pending"
    assert booking.urgency == "medium"
    assert booking.consultation_fee == Decimal("50000.00")
    assert booking.currency == "PKR"


def test_status_check_matches_reference_and_email(db_session: Session) -> None:
    service = ConsultationService()
    booking = service.create(db_session, None, _booking())

    found = service.check_status(db_session, f" {booking.reference_number} ", "guest.user@EXAMPLE.com")
    assert found.reference_number == booking.reference_number
    assert found.booking_status == "pending_payment"
    assert not hasattr(found, "email")

    with pytest.raises(NotFound) as exc_info:
        service.check_status(db_session, booking.reference_number, "someone.else@example.com")
    assert exc_info.value.message == "Consultation not found"
    with pytest.raises(NotFound):
        service.check_status(db_session, f"CON-{current_year()}-9999", "guest.user@example.com")


def test_signed_in_client_owns_booking(db_session: Session) -> None:
    service = ConsultationService()
    member = _client(db_session)
    guest_booking = service.create(db_session, None, _booking())

    owned = service.create(db_session, member, _booking(email="member@example.com", full_name="Member"))

    assert owned.client_profile_id == member.linked_owner_id
    assert service.get(db_session, member, owned.id).id == owned.id
    with pytest.raises(Forbidden):
        service.get(db_session, member, guest_booking.id)

    mine = service.list_consultations(db_session, member, PageParams())
    assert [item.id for item in mine.data] == [owned.id]


def test_staff_scheduling_records_status_change(db_session: Session) -> None:
    service = ConsultationService()
    staff = _staff(db_session)
    member = _client(db_session)
    booking = service.create(db_session, None, _booking())

    scheduled = service.update_consultation(
        db_session,
        staff,
        booking.id,
        ConsultationUpdate(booking_status="scheduled", meeting_link="https://meet.example.com/abc"),
    )

    assert scheduled.booking_status == "scheduled"
    assert scheduled.meeting_link == "https://meet.example.com/abc"
    titles = [item.title for item in service.list_activities(db_session, staff, booking.id, PageParams()).data]
    assert 'Status changed from "pending_payment" to "scheduled"' in titles
    assert "Consultation booked" in titles

    with pytest.raises(Forbidden):
        service.update_consultation(db_session, member, booking.id, ConsultationUpdate(booking_status="cancelled"))


def test_staff_listing_filters_by_urgency(db_session: Session) -> None:
    service = ConsultationService()
    staff = _staff(db_session)
    service.create(db_session, None, _booking(urgency="urgent", full_name="Urgent Caller"))
    service.create(db_session, None, _booking(email="calm@example.com", full_name="Calm Caller"))

    urgent = service.list_consultations(db_session, staff, PageParams(), filters={"urgency": "urgent"})
    assert [item.full_name for item in urgent.data] == ["Urgent Caller"]

    searched = service.list_consultations(db_session, staff, PageParams(), search="calm")
    assert [item.full_name for item in searched.data] == ["Calm Caller"]
