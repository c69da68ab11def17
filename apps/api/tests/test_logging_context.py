from __future__ import annotations

import json
import logging
import uuid
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import legaldesk.models  # noqa: F401
from legaldesk.accounts.models import UserProfile
from legaldesk.core.config import get_settings
from legaldesk.core.database import Base, get_db
from legaldesk.logging import JsonLogFormatter
from legaldesk.main import app
from legaldesk.middleware.rate_limit import reset_rate_limiter


SECRET = "logging-test-secret"


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


@pytest.fixture(autouse=True)
def setup_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    monkeypatch.setenv("JWT_SECRET", SECRET)
    monkeypatch.setenv("RATE_LIMIT_DISABLED", "true")
    get_settings.cache_clear()
    reset_rate_limiter()
    yield
    get_settings.cache_clear()
    reset_rate_limiter()


@pytest.fixture()
def client(db_session: Session) -> Generator[TestClient, None, None]:
    def override_get_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture()
def staff(db_session: Session) -> UserProfile:
    profile = UserProfile(id=uuid.uuid4(), full_name="Logging Staff", user_type="staff")
    db_session.add(profile)
    db_session.commit()
    return profile


def _headers(user_id: uuid.UUID, correlation_id: str) -> dict[str, str]:
    token = jwt.encode({"sub": str(user_id), "aud": "authenticated"}, SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}", "X-Correlation-Id": correlation_id}


def test_logs_include_correlation_id_for_http(
    client: TestClient,
    staff: UserProfile,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO)

    response = client.get(f"/api/cases/{uuid.uuid4()}", headers=_headers(staff.id, "abc-123"))
    assert response.status_code == 404

    records = [
        record
        for record in caplog.records
        if record.name == "legaldesk.request" and record.getMessage() == "http.request"
    ]
    assert records
    assert any(
        getattr(record, "correlation_id", None) == "abc-123"
        and getattr(record, "method", None) == "GET"
        and getattr(record, "path", None) == "/api/cases/{id}"
        and getattr(record, "status_code", None) == 404
        and record.levelno == logging.WARNING
        and getattr(record, "actor_id", None) == str(staff.id)
        and isinstance(getattr(record, "duration_ms", None), float)
        for record in records
    )


def test_mutation_logs_carry_entity_and_actor(
    client: TestClient,
    staff: UserProfile,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO)

    response = client.post(
        "/api/practice-areas",
        json={"name": "Banking Law", "slug": "banking-law"},
        headers=_headers(staff.id, "log-mutation-1"),
    )
    assert response.status_code == 201

    created = [record for record in caplog.records if record.getMessage() == "practice_area.created"]
    assert created
    record = created[-1]
    assert record.name == "legaldesk.practice_area"
    assert getattr(record, "entity_id", None) == response.json()["id"]
    assert getattr(record, "actor_id", None) == str(staff.id)
    assert getattr(record, "correlation_id", None) == "log-mutation-1"


def test_json_formatter_keeps_known_fields_only() -> None:
    record = logging.makeLogRecord(
        {
            "name": "legaldesk.case",
            "levelname": "INFO",
            "levelno": logging.INFO,
            "msg": "case.updated",
            "entity_id": "case-1",
            "password": "hunter2",
            "error": "x" * 600,
            "correlation_id": "fmt-1",
        }
    )

    payload = json.loads(JsonLogFormatter().format(record))

    assert payload["msg"] == "case.updated"
    assert payload["logger"] == "legaldesk.case"
    assert payload["service"] == "legaldesk-api"
    assert payload["correlation_id"] == "fmt-1"
    assert payload["fields"]["entity_id"] == "case-1"
    assert "password" not in payload["fields"]
    assert len(payload["fields"]["error"]) == 500
