from __future__ import annotations

import logging
import uuid
from collections.abc import Generator

import pytest
from sqlalchemy import create_engine, func, select
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import legaldesk.models  # noqa: F401
from legaldesk.accounts.models import ClientProfile, UserProfile
from legaldesk.accounts.provisioning import DUPLICATE_EMAIL_MESSAGE, AccountProvisioner
from legaldesk.core.database import Base
from legaldesk.core.errors import StorageFailure, ValidationFailure
from legaldesk.platform.identity import IdentityProviderError, InMemoryIdentityProvider


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


class StuckDeleteIdentityProvider(InMemoryIdentityProvider):
    """Identity backend whose deletes fail with a server error."""

    def delete_user(self, user_id: uuid.UUID) -> None:
        raise IdentityProviderError("identity backend unavailable", status_code=503)


def _invalid_client_profile(profile_id: uuid.UUID) -> ClientProfile:
    # Violates ck_client_profiles_company_type.
    return ClientProfile(user_profile_id=profile_id, company_type="cooperative")


def _count(session: Session, model: type) -> int:
    return int(session.scalar(select(func.count()).select_from(model)) or 0)


def test_provision_creates_identity_profile_and_role_profile(db_session: Session) -> None:
    identity = InMemoryIdentityProvider()

    account = AccountProvisioner().provision_account(
        db_session,
        identity,
        email="Nadia@Example.com",
        full_name="Nadia Aslam",
        user_type="client",
        role_profile=lambda profile_id: ClientProfile(user_profile_id=profile_id, city="Karachi"),
    )

    assert account.identity.email == "nadia@example.com"
    assert account.profile.id == account.identity.id
    assert identity.exists(account.identity.id)
    assert account.role_profile.user_profile_id == account.profile.id
    assert _count(db_session, ClientProfile) == 1


def test_duplicate_email_creates_nothing(db_session: Session) -> None:
    identity = InMemoryIdentityProvider()
    provisioner = AccountProvisioner()
    provisioner.provision_account(db_session, identity, email="a@example.com", full_name="First", user_type="staff")

    with pytest.raises(ValidationFailure) as exc_info:
        provisioner.provision_account(
            db_session, identity, email="a@example.com", full_name="Second", user_type="staff"
        )

    assert exc_info.value.code == "duplicate"
    assert exc_info.value.message == DUPLICATE_EMAIL_MESSAGE
    assert _count(db_session, UserProfile) == 1


def test_profile_insert_failure_deletes_identity(
    db_session: Session,
    monkeypatch: pytest.MonkeyPatch,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.ERROR)
    identity = InMemoryIdentityProvider()
    provisioner = AccountProvisioner()

    def failing_insert(session: Session, row: object) -> None:
        raise OperationalError("INSERT INTO user_profiles", {}, Exception("connection reset"))

    monkeypatch.setattr(provisioner, "_insert", failing_insert)

    with pytest.raises(StorageFailure):
        provisioner.provision_account(db_session, identity, email="b@example.com", full_name="B", user_type="staff")

    assert identity._users == {}
    assert _count(db_session, UserProfile) == 0
    assert any(
        record.getMessage() == "account.profile_create_failed" and getattr(record, "step", None) == "profile_insert"
        for record in caplog.records
    )


def test_role_profile_failure_undoes_profile_then_identity(db_session: Session) -> None:
    identity = InMemoryIdentityProvider()

    with pytest.raises(StorageFailure):
        AccountProvisioner().provision_account(
            db_session,
            identity,
            email="c@example.com",
            full_name="C",
            user_type="client",
            role_profile=_invalid_client_profile,
        )

    assert _count(db_session, UserProfile) == 0
    assert _count(db_session, ClientProfile) == 0
    assert identity._users == {}


def test_failed_compensation_is_logged_for_manual_cleanup(
    db_session: Session,
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.CRITICAL)
    identity = StuckDeleteIdentityProvider()

    with pytest.raises(StorageFailure):
        AccountProvisioner().provision_account(
            db_session,
            identity,
            email="d@example.com",
            full_name="D",
            user_type="client",
            role_profile=_invalid_client_profile,
        )

    assert _count(db_session, UserProfile) == 0
    compensation = [record for record in caplog.records if record.getMessage() == "account.compensation_failed"]
    assert len(compensation) == 1
    assert compensation[0].levelno == logging.CRITICAL
    assert getattr(compensation[0], "manual_cleanup_required", None) is True
    assert getattr(compensation[0], "step", None) == "role_profile_insert:identity_delete"


def test_delete_removes_identity_before_profile(db_session: Session) -> None:
    identity = InMemoryIdentityProvider()
    provisioner = AccountProvisioner()
    account = provisioner.provision_account(
        db_session,
        identity,
        email="e@example.com",
        full_name="E",
        user_type="client",
        role_profile=lambda profile_id: ClientProfile(user_profile_id=profile_id),
    )

    provisioner.delete_account(db_session, identity, account.profile.id)

    db_session.expire_all()
    assert not identity.exists(account.profile.id)
    assert _count(db_session, UserProfile) == 0
    assert _count(db_session, ClientProfile) == 0


def test_identity_delete_failure_leaves_profile_untouched(db_session: Session) -> None:
    identity = StuckDeleteIdentityProvider()
    provisioner = AccountProvisioner()
    account = provisioner.provision_account(
        db_session, identity, email="f@example.com", full_name="F", user_type="staff"
    )

    with pytest.raises(StorageFailure):
        provisioner.delete_account(db_session, identity, account.profile.id)

    assert _count(db_session, UserProfile) == 1


def test_missing_identity_counts_as_deleted(db_session: Session, caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.WARNING)
    orphan = UserProfile(id=uuid.uuid4(), full_name="Orphan", user_type="staff")
    db_session.add(orphan)
    db_session.commit()

    AccountProvisioner().delete_account(db_session, InMemoryIdentityProvider(), orphan.id)

    assert _count(db_session, UserProfile) == 0
    assert any(record.getMessage() == "account.identity_already_deleted" for record in caplog.records)
