from __future__ import annotations

import uuid
from collections.abc import Generator
from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import legaldesk.models  # noqa: F401
from legaldesk.catalog.schemas import LegalServiceCreate, LegalServiceUpdate, PracticeAreaCreate, PracticeAreaUpdate
from legaldesk.catalog.service import LegalServiceCatalog, PracticeAreaService
from legaldesk.core.database import Base
from legaldesk.core.errors import NotFound, ValidationFailure
from legaldesk.platform.query import PageParams
from legaldesk.platform.security import Principal


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


ADMIN = Principal(user_id=uuid.uuid4(), role="admin")
CLIENT = Principal(user_id=uuid.uuid4(), role="client", linked_owner_id=uuid.uuid4())


def _seed_areas(service: PracticeAreaService, session: Session) -> None:
    service.create(session, ADMIN, PracticeAreaCreate(name="Family Law", slug="family-law"))
    service.create(session, ADMIN, PracticeAreaCreate(name="Corporate Law", slug="corporate-law"))
    service.create(session, ADMIN, PracticeAreaCreate(name="Maritime Law", slug="maritime-law", is_active=False))


def test_guests_only_see_active_practice_areas(db_session: Session) -> None:
    service = PracticeAreaService()
    _seed_areas(service, db_session)

    public = service.list_entries(db_session, None, PageParams(sort="name", order="asc"))
    assert [item.slug for item in public.data] == ["corporate-law", "family-law"]

    asked_for_all = service.list_entries(db_session, CLIENT, PageParams(), include_inactive=True)
    assert asked_for_all.meta.total == 2

    everything = service.list_entries(db_session, ADMIN, PageParams(), include_inactive=True)
    assert everything.meta.total == 3

    searched = service.list_entries(db_session, None, PageParams(), search="corp")
    assert [item.name for item in searched.data] == ["Corporate Law"]


def test_slug_and_id_lookups_hide_inactive_entries(db_session: Session) -> None:
    service = PracticeAreaService()
    _seed_areas(service, db_session)

    assert service.get_by_slug(db_session, None, "family-law").name == "Family Law"
    with pytest.raises(NotFound) as exc_info:
        service.get_by_slug(db_session, None, "maritime-law")
    assert exc_info.value.message == "Practice area not found"
    assert service.get_by_slug(db_session, ADMIN, "maritime-law").is_active is False

    hidden_id = service.get_by_slug(db_session, ADMIN, "maritime-law").id
    with pytest.raises(NotFound):
        service.get_entry(db_session, CLIENT, hidden_id)
    assert service.get_entry(db_session, ADMIN, hidden_id).slug == "maritime-law"


def test_duplicate_slug_conflicts(db_session: Session) -> None:
    service = PracticeAreaService()
    service.create(db_session, ADMIN, PracticeAreaCreate(name="Tax", slug="tax"))

    with pytest.raises(ValidationFailure) as exc_info:
        service.create(db_session, ADMIN, PracticeAreaCreate(name="Taxation", slug="tax"))
    assert exc_info.value.status_code == 409

    with pytest.raises(ValidationError):
        PracticeAreaCreate(name="Bad Slug", slug="Bad Slug")


def test_services_filter_by_practice_area_and_deactivate(db_session: Session) -> None:
    areas = PracticeAreaService()
    catalog = LegalServiceCatalog()
    corporate = areas.create(db_session, ADMIN, PracticeAreaCreate(name="Corporate", slug="corporate"))
    incorporation = catalog.create(
        db_session,
        ADMIN,
        LegalServiceCreate(
            practice_area_id=corporate.id,
            name="Company Incorporation",
            slug="company-incorporation",
            registration_fee=Decimal("30000"),
        ),
    )
    catalog.create(db_session, ADMIN, LegalServiceCreate(name="Will Drafting", slug="will-drafting"))

    corporate_only = catalog.list_entries(db_session, None, PageParams(), filters={"practice_area_id": corporate.id})
    assert [item.slug for item in corporate_only.data] == ["company-incorporation"]
    assert corporate_only.data[0].registration_fee == Decimal("30000")

    retired = catalog.update_entry(db_session, ADMIN, incorporation.id, LegalServiceUpdate(is_active=False))
    assert retired.is_active is False
    with pytest.raises(NotFound) as exc_info:
        catalog.require_active(db_session, incorporation.id)
    assert exc_info.value.message == "Service not found"
    assert catalog.list_entries(db_session, None, PageParams()).meta.total == 1

    with pytest.raises(ValidationFailure):
        areas.update_entry(db_session, ADMIN, corporate.id, PracticeAreaUpdate())
