from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError
from sqlalchemy.orm import Session

from legaldesk.core.errors import NotFound, ServiceError, StorageFailure, ValidationFailure


logger = logging.getLogger("legaldesk.store")

_UNIQUE_SQLSTATE = "23505"
_FOREIGN_KEY_SQLSTATE = "23503"
_NOT_NULL_SQLSTATE = "23502"


def _sqlstate(exc: SQLAlchemyError) -> str | None:
    original = getattr(exc, "orig", None)
    for attribute in ("sqlstate", "pgcode"):
        value = getattr(original, attribute, None)
        if value:
            return str(value)
    return None


def translate_store_error(exc: SQLAlchemyError, *, operation: str) -> ServiceError:
    """Map a SQLAlchemy failure onto the service error taxonomy.

    Constraint violations become ``ValidationFailure``; everything else is a
    ``StorageFailure`` whose cause is logged here and not returned to callers.
    """

    if isinstance(exc, NoResultFound):
        return NotFound("Record not found")

    if isinstance(exc, IntegrityError):
        state = _sqlstate(exc)
        text = str(getattr(exc, "orig", exc)).lower()
        if state == _UNIQUE_SQLSTATE or "unique constraint" in text or "duplicate key" in text:
            return ValidationFailure.duplicate()
        if state == _FOREIGN_KEY_SQLSTATE or "foreign key constraint" in text:
            return ValidationFailure.invalid_reference()
        if state == _NOT_NULL_SQLSTATE or "not null constraint" in text:
            return ValidationFailure("A required field is missing")

    logger.error("store.failure", exc_info=exc, extra={"operation": operation, "error": str(exc)})
    return StorageFailure()


@contextmanager
def store_guard(session: Session, operation: str) -> Iterator[None]:
    """Roll back and translate any store error raised inside the block."""

    try:
        yield
    except SQLAlchemyError as exc:
        session.rollback()
        raise translate_store_error(exc, operation=operation) from exc
