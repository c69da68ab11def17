from __future__ import annotations

import threading
import uuid
from collections.abc import Generator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import legaldesk.models  # noqa: F401
from legaldesk.accounts.models import ClientProfile, UserProfile
from legaldesk.cases.models import Case
from legaldesk.cases.schemas import CaseCreate
from legaldesk.cases.service import CaseService
from legaldesk.catalog.models import PracticeArea
from legaldesk.core.database import Base
from legaldesk.core.errors import ValidationFailure
from legaldesk.platform.security import Principal
from legaldesk.platform.sequences import SequenceCounter, current_year, format_identifier, next_identifier


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


def _seed(session: Session) -> tuple[Principal, ClientProfile, PracticeArea]:
    staff = UserProfile(id=uuid.uuid4(), full_name="Desk Staff", user_type="staff")
    client_user = UserProfile(id=uuid.uuid4(), full_name="Hina Raza", user_type="client")
    session.add_all([staff, client_user])
    session.flush()
    client = ClientProfile(user_profile_id=client_user.id)
    area = PracticeArea(name="Property", slug="property")
    session.add_all([client, area])
    session.commit()
    return Principal(user_id=staff.id, role="staff"), client, area


def test_format_identifier_pads_to_four_digits() -> None:
    assert format_identifier("CASE", 2026, 1) == "CASE-2026-0001"
    assert format_identifier("INV", 2026, 12345) == "INV-2026-12345"


def test_counters_are_independent_per_prefix_and_year(db_session: Session) -> None:
    connection = db_session.connection()

    assert next_identifier(connection, "CASE", year=2025) == "CASE-2025-0001"
    assert next_identifier(connection, "CASE", year=2025) == "CASE-2025-0002"
    assert next_identifier(connection, "CASE", year=2026) == "CASE-2026-0001"
    assert next_identifier(connection, "INV", year=2025) == "INV-2025-0001"
    db_session.commit()

    counters = {
        (row.prefix, row.year): row.last_value for row in db_session.scalars(select(SequenceCounter)).all()
    }
    assert counters == {("CASE", 2025): 2, ("CASE", 2026): 1, ("INV", 2025): 1}


def test_unknown_prefix_is_rejected(db_session: Session) -> None:
    with pytest.raises(ValueError):
        next_identifier(db_session.connection(), "XYZ", year=2026)


def test_insert_assigns_identifier_and_keeps_caller_supplied_value(db_session: Session) -> None:
    actor, client, area = _seed(db_session)
    service = CaseService()

    created = service.create(
        db_session,
        actor,
        CaseCreate(client_profile_id=client.id, practice_area_id=area.id, title="Boundary wall dispute"),
    )
    assert created.case_number == f"CASE-{current_year()}-0001"

    manual = Case(
        case_number="CASE-LEGACY-0042",
        client_profile_id=client.id,
        practice_area_id=area.id,
        title="Migrated matter",
    )
    db_session.add(manual)
    db_session.commit()
    assert manual.case_number == "CASE-LEGACY-0042"


def test_failed_insert_rolls_back_its_increment(db_session: Session) -> None:
    actor, client, area = _seed(db_session)
    service = CaseService()

    with pytest.raises(ValidationFailure) as exc_info:
        service.create(
            db_session,
            actor,
            CaseCreate(client_profile_id=client.id, practice_area_id=uuid.uuid4(), title="Dangling area"),
        )
    assert exc_info.value.code == "invalid_reference"
    assert exc_info.value.status_code == 422

    created = service.create(
        db_session,
        actor,
        CaseCreate(client_profile_id=client.id, practice_area_id=area.id, title="Valid matter"),
    )
    assert created.case_number == f"CASE-{current_year()}-0001"


def test_concurrent_transactions_draw_distinct_contiguous_numbers(tmp_path: Path) -> None:
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'sequences.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
    )
    Base.metadata.create_all(bind=engine, tables=[SequenceCounter.__table__])
    workers = 8
    draws_per_worker = 5
    start = threading.Barrier(workers)

    def draw() -> list[str]:
        start.wait()
        issued = []
        for _ in range(draws_per_worker):
            with engine.begin() as connection:
                issued.append(next_identifier(connection, "CMP", year=2026))
        return issued

    try:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = [pool.submit(draw) for _ in range(workers)]
            identifiers = [identifier for future in futures for identifier in future.result()]
    finally:
        engine.dispose()

    total = workers * draws_per_worker
    assert len(set(identifiers)) == total
    assert sorted(identifiers) == [format_identifier("CMP", 2026, value) for value in range(1, total + 1)]
