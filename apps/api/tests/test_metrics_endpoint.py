from __future__ import annotations

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
from legaldesk.main import app
from legaldesk.middleware.rate_limit import reset_rate_limiter


SECRET = "metrics-test-secret"


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
def configure_env(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    monkeypatch.setenv("JWT_SECRET", SECRET)
    monkeypatch.setenv("METRICS_ENABLED", "true")
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


def _headers(session: Session, user_type: str) -> dict[str, str]:
    profile = UserProfile(id=uuid.uuid4(), full_name=f"Metrics {user_type}", user_type=user_type)
    session.add(profile)
    session.commit()
    token = jwt.encode({"sub": str(profile.id), "aud": "authenticated"}, SECRET, algorithm="HS256")
    return {"Authorization": f"Bearer {token}"}


def test_metrics_endpoint_exposes_http_and_domain_metrics(client: TestClient, db_session: Session) -> None:
    admin = _headers(db_session, "admin")

    health = client.get("/health")
    assert health.status_code == 200

    booked = client.post(
        "/api/consultations",
        json={
            "full_name": "Metrics Guest",
            "email": "metrics@example.com",
            "phone_number": "0300-8888888",
            "practice_area": "labour-law",
            "issue_summary": "Unpaid wages.",
        },
    )
    assert booked.status_code == 201
    missing = client.get(f"/api/cases/{uuid.uuid4()}", headers=admin)
    assert missing.status_code == 404

    metrics = client.get("/metrics", headers=admin)
    assert metrics.status_code == 200
    body = metrics.text

    assert "http_requests_total" in body
    assert "http_request_duration_seconds" in body
    assert "sequence_identifiers_issued_total" in body

    assert 'path="/health"' in body
    assert 'path="/api/cases/{id}"' in body
    assert 'prefix="CON"' in body


def test_metrics_require_admin(client: TestClient, db_session: Session) -> None:
    assert client.get("/metrics").status_code == 401

    staff = client.get("/metrics", headers=_headers(db_session, "staff"))
    assert staff.status_code == 403
    assert staff.json()["code"] == "forbidden"


def test_metrics_disabled_returns_404(
    client: TestClient,
    db_session: Session,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("METRICS_ENABLED", "false")
    get_settings.cache_clear()

    response = client.get("/metrics", headers=_headers(db_session, "admin"))

    assert response.status_code == 404
