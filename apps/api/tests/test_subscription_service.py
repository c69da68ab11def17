from __future__ import annotations

import uuid
from collections.abc import Generator
from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import legaldesk.models  # noqa: F401
from legaldesk.accounts.models import ClientProfile, UserProfile
from legaldesk.core.database import Base
from legaldesk.core.errors import Forbidden, NotFound, ValidationFailure
from legaldesk.platform.query import PageParams
from legaldesk.platform.security import Principal
from legaldesk.subscriptions.schemas import SubscriptionUpdate
from legaldesk.subscriptions.service import SubscriptionService


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


def _client(session: Session, full_name: str = "Civic Member") -> Principal:
    user = UserProfile(id=uuid.uuid4(), full_name=full_name, user_type="client")
    session.add(user)
    session.flush()
    client = ClientProfile(user_profile_id=user.id)
    session.add(client)
    session.commit()
    return Principal(user_id=user.id, role="client", linked_owner_id=client.id)


def _staff(session: Session) -> Principal:
    user = UserProfile(id=uuid.uuid4(), full_name="Billing Desk", user_type="staff")
    session.add(user)
    session.commit()
    return Principal(user_id=user.id, role="staff")


def test_add_months_clamps_to_month_end() -> None:
    assert SubscriptionService._add_months(datetime(2026, 1, 31, 12, 0), 1) == datetime(2026, 2, 28, 12, 0)
    assert SubscriptionService._add_months(datetime(2028, 1, 31), 1) == datetime(2028, 2, 29)
    assert SubscriptionService._add_months(datetime(2026, 12, 15), 1) == datetime(2027, 1, 15)


def test_subscription_lifecycle(db_session: Session) -> None:
    service = SubscriptionService()
    member = _client(db_session)
    staff = _staff(db_session)

    created = service.create(db_session, member)
    assert created.status == "pending"
    assert created.plan_name == "civic_retainer"
    assert created.monthly_amount == Decimal("700.00")
    assert created.currency == "PKR"
    assert service.is_active(db_session, member.linked_owner_id) is False

    again = service.create(db_session, member)
    assert again.id == created.id
    assert again.status == "pending"

    activated = service.activate(db_session, staff, created.id)
    assert activated.status == "active"
    assert activated.current_period_start is not None
    assert activated.current_period_end is not None
    assert activated.current_period_end > activated.current_period_start
    assert service.is_active(db_session, member.linked_owner_id) is True

    with pytest.raises(Forbidden) as exc_info:
        service.create(db_session, member)
    assert exc_info.value.message == "You already have an active subscription"

    cancelled = service.cancel(db_session, member, created.id, reason="Moving abroad")
    assert cancelled.status == "cancelled"
    assert cancelled.cancelled_at is not None
    assert cancelled.cancellation_reason == "Moving abroad"
    assert service.is_active(db_session, member.linked_owner_id) is False

    with pytest.raises(ValidationFailure):
        service.cancel(db_session, member, created.id)

    renewed = service.create(db_session, member)
    assert renewed.id == created.id
    assert renewed.status == "pending"
    assert renewed.cancelled_at is None
    assert renewed.cancellation_reason is None

    titles = [item.title for item in service.list_activities(db_session, staff, created.id, PageParams()).data]
    assert "Subscription created" in titles
    assert 'Status changed from "pending" to "active"' in titles
    assert 'Status changed from "active" to "cancelled"' in titles
    assert 'Status changed from "cancelled" to "pending"' in titles


def test_only_clients_create_and_read_their_own(db_session: Session) -> None:
    service = SubscriptionService()
    staff = _staff(db_session)
    member = _client(db_session, "Member")
    stranger = _client(db_session, "Stranger")

    with pytest.raises(ValidationFailure) as exc_info:
        service.create(db_session, staff)
    assert exc_info.value.message == "Only clients can create subscriptions"

    with pytest.raises(NotFound) as not_found:
        service.get_mine(db_session, member)
    assert not_found.value.message == "No subscription found for this client"

    created = service.create(db_session, member)
    assert service.get_mine(db_session, member).id == created.id
    with pytest.raises(Forbidden):
        service.get(db_session, stranger, created.id)
    with pytest.raises(Forbidden):
        service.cancel(db_session, stranger, created.id)


def test_activation_rules(db_session: Session) -> None:
    service = SubscriptionService()
    staff = _staff(db_session)
    member = _client(db_session)
    created = service.create(db_session, member)

    with pytest.raises(Forbidden):
        service.activate(db_session, member, created.id)

    service.update_subscription(db_session, staff, created.id, SubscriptionUpdate(status="expired"))
    with pytest.raises(ValidationFailure) as exc_info:
        service.activate(db_session, staff, created.id)
    assert exc_info.value.message == "Cannot activate subscription with status: expired"

    service.update_subscription(db_session, staff, created.id, SubscriptionUpdate(status="past_due"))
    assert service.activate(db_session, staff, created.id).status == "active"


def test_staff_listing_filters_by_status(db_session: Session) -> None:
    service = SubscriptionService()
    staff = _staff(db_session)
    pending_member = _client(db_session, "Pending")
    active_member = _client(db_session, "Active")
    service.create(db_session, pending_member)
    active = service.create(db_session, active_member)
    service.activate(db_session, staff, active.id)

    only_active = service.list_subscriptions(db_session, staff, PageParams(), status="active")
    assert [item.id for item in only_active.data] == [active.id]
    assert service.list_subscriptions(db_session, staff, PageParams()).meta.total == 2

    with pytest.raises(Forbidden):
        service.list_subscriptions(db_session, pending_member, PageParams())


def test_period_start_is_utc_now(db_session: Session) -> None:
    service = SubscriptionService()
    staff = _staff(db_session)
    member = _client(db_session)
    created = service.create(db_session, member)
    before = datetime.now(timezone.utc).replace(tzinfo=None)

    activated = service.activate(db_session, staff, created.id)

    started = activated.current_period_start.replace(tzinfo=None)
    assert abs((started - before).total_seconds()) < 60
