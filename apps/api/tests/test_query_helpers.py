from __future__ import annotations

import uuid
from collections.abc import Generator

import pytest
from pydantic import ValidationError
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import legaldesk.models  # noqa: F401
from legaldesk.catalog.models import PracticeArea
from legaldesk.catalog.service import PracticeAreaService
from legaldesk.core.database import Base
from legaldesk.platform.query import (
    PageParams,
    build_page,
    resolve_sort_column,
    sanitize_search_term,
)


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


def _seed_practice_areas(session: Session, count: int) -> None:
    for index in range(count):
        session.add(PracticeArea(id=uuid.uuid4(), name=f"Area {index:02d}", slug=f"area-{index:02d}"))
    session.commit()


def test_sanitize_search_term_strips_filter_and_like_characters() -> None:
    assert sanitize_search_term("  ali,(khan)%_  ") == "alikhan"
    assert sanitize_search_term("o'brien \"law\"") == "obrien law"
    assert sanitize_search_term("a.b\\c") == "abc"
    assert sanitize_search_term("%%__") is None
    assert sanitize_search_term("   ") is None
    assert sanitize_search_term(None) is None


def test_resolve_sort_column_falls_back_to_created_at() -> None:
    allowed = ("created_at", "updated_at", "title")
    assert resolve_sort_column("title", allowed) == "title"
    assert resolve_sort_column("password_hash", allowed) == "created_at"
    assert resolve_sort_column(None, allowed) == "created_at"
    assert resolve_sort_column("", allowed) == "created_at"


def test_page_params_bounds() -> None:
    assert PageParams().offset == 0
    assert PageParams(page=3, limit=25).offset == 50

    with pytest.raises(ValidationError):
        PageParams(page=0)
    with pytest.raises(ValidationError):
        PageParams(limit=101)
    with pytest.raises(ValidationError):
        PageParams(order="sideways")


def test_build_page_envelope_serializes_total_pages_alias() -> None:
    page = build_page(["a", "b"], total=45, params=PageParams(page=1, limit=20))
    assert page.meta.total_pages == 3
    assert page.model_dump(by_alias=True)["meta"] == {"page": 1, "limit": 20, "total": 45, "totalPages": 3}

    empty = build_page([], total=0, params=PageParams())
    assert empty.meta.total_pages == 0
    assert empty.data == []


def test_list_total_describes_full_filtered_set_not_the_page(db_session: Session) -> None:
    _seed_practice_areas(db_session, 7)
    service = PracticeAreaService()

    first = service.list_entries(db_session, None, PageParams(page=1, limit=3, sort="name", order="asc"))
    last = service.list_entries(db_session, None, PageParams(page=3, limit=3, sort="name", order="asc"))

    assert [item.name for item in first.data] == ["Area 00", "Area 01", "Area 02"]
    assert [item.name for item in last.data] == ["Area 06"]
    assert first.meta.total == 7
    assert last.meta.total == 7
    assert first.meta.total_pages == 3


def test_unknown_sort_column_is_ignored_and_search_is_sanitized(db_session: Session) -> None:
    _seed_practice_areas(db_session, 3)
    service = PracticeAreaService()

    page = service.list_entries(db_session, None, PageParams(sort="drop table", order="asc"))
    assert page.meta.total == 3

    matched = service.list_entries(db_session, None, PageParams(), search="%area-01%")
    assert [item.slug for item in matched.data] == ["area-01"]

    wildcard_only = service.list_entries(db_session, None, PageParams(), search="%_%")
    assert wildcard_only.meta.total == 3
