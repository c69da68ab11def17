from __future__ import annotations

import logging

import pytest
from sqlalchemy.exc import IntegrityError, NoResultFound, OperationalError

from legaldesk.core.errors import STORAGE_FAILURE_MESSAGE, NotFound, StorageFailure, ValidationFailure
from legaldesk.platform.store import translate_store_error


class _PgError(Exception):
    def __init__(self, message: str, sqlstate: str) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


def test_unique_violation_becomes_duplicate_conflict() -> None:
    exc = IntegrityError("INSERT", {}, _PgError("duplicate key value violates unique constraint", "23505"))
    error = translate_store_error(exc, operation="practice_area.create")
    assert isinstance(error, ValidationFailure)
    assert error.code == "duplicate"
    assert error.status_code == 409


def test_foreign_key_violation_becomes_invalid_reference() -> None:
    exc = IntegrityError("INSERT", {}, _PgError("insert or update violates foreign key", "23503"))
    error = translate_store_error(exc, operation="case.create")
    assert isinstance(error, ValidationFailure)
    assert error.code == "invalid_reference"
    assert error.status_code == 422


def test_sqlite_messages_are_recognised_without_sqlstate() -> None:
    unique = IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: practice_areas.slug"))
    missing = IntegrityError("INSERT", {}, Exception("NOT NULL constraint failed: cases.title"))
    assert translate_store_error(unique, operation="x").code == "duplicate"
    missing_error = translate_store_error(missing, operation="x")
    assert missing_error.code == "validation_failed"
    assert missing_error.status_code == 400


def test_no_result_becomes_not_found() -> None:
    assert isinstance(translate_store_error(NoResultFound(), operation="case.get"), NotFound)


def test_other_failures_hide_their_cause(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.ERROR)
    exc = OperationalError("SELECT", {}, Exception("could not connect to server: secret-host:5432"))

    error = translate_store_error(exc, operation="case.list")

    assert isinstance(error, StorageFailure)
    assert error.message == STORAGE_FAILURE_MESSAGE
    assert "secret-host" not in error.message
    records = [record for record in caplog.records if record.name == "legaldesk.store"]
    assert any(
        record.getMessage() == "store.failure"
        and getattr(record, "operation", None) == "case.list"
        and "secret-host" in getattr(record, "error", "")
        for record in records
    )
