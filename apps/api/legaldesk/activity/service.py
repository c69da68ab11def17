from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from legaldesk.activity.models import ActivityRecord
from legaldesk.activity.schemas import ACTIVITY_KINDS, ActivityRead
from legaldesk.core.errors import ServiceError, ValidationFailure
from legaldesk.metrics import observe_activity_write_failure
from legaldesk.platform.query import Page, PageParams, build_page, paginate
from legaldesk.platform.store import store_guard, translate_store_error


logger = logging.getLogger("legaldesk.activity")


@dataclass(frozen=True, slots=True)
class ActivityWriteResult:
    record: ActivityRead | None = None
    error: ServiceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class ActivityLog:
    """Append-only timeline of state changes, keyed by parent family and id."""

    def append(
        self,
        session: Session,
        *,
        parent_type: str,
        parent_id: uuid.UUID,
        kind: str,
        title: str,
        description: str | None = None,
        actor_id: uuid.UUID | None = None,
    ) -> ActivityWriteResult:
        allowed = ACTIVITY_KINDS.get(parent_type)
        if allowed is None:
            return ActivityWriteResult(error=ValidationFailure(f"Unknown activity parent type: {parent_type}"))
        if kind not in allowed:
            invalid = ValidationFailure(f"Activity kind '{kind}' is not valid for {parent_type}")
            return ActivityWriteResult(error=invalid)

        row = ActivityRecord(
            parent_type=parent_type,
            parent_id=parent_id,
            kind=kind,
            title=title[:255],
            description=description,
            actor_id=actor_id,
        )
        try:
            self._insert(session, row)
            record = ActivityRead.model_validate(row)
        except SQLAlchemyError as exc:
            session.rollback()
            return ActivityWriteResult(error=translate_store_error(exc, operation="activity.append"))
        return ActivityWriteResult(record=record)

    def record(
        self,
        session: Session,
        *,
        parent_type: str,
        parent_id: uuid.UUID,
        kind: str,
        title: str,
        description: str | None = None,
        actor_id: uuid.UUID | None = None,
    ) -> None:
        """Best-effort append used after a parent mutation has committed.

        Any failed write is logged and counted, never raised.
        """

        try:
            result = self.append(
                session,
                parent_type=parent_type,
                parent_id=parent_id,
                kind=kind,
                title=title,
                description=description,
                actor_id=actor_id,
            )
        except Exception as exc:
            self._report_failure(parent_type, parent_id, kind, actor_id, code="activity_failed", message=str(exc))
            return
        if result.error is not None:
            self._report_failure(
                parent_type, parent_id, kind, actor_id, code=result.error.code, message=result.error.message
            )

    def _report_failure(
        self,
        parent_type: str,
        parent_id: uuid.UUID,
        kind: str,
        actor_id: uuid.UUID | None,
        *,
        code: str,
        message: str,
    ) -> None:
        observe_activity_write_failure(parent_type)
        logger.warning(
            "activity.write_failed",
            extra={
                "entity_type": parent_type,
                "entity_id": str(parent_id),
                "kind": kind,
                "actor_id": str(actor_id) if actor_id else None,
                "error_code": code,
                "error": message,
            },
        )

    def list_for_parent(
        self,
        session: Session,
        *,
        parent_type: str,
        parent_id: uuid.UUID,
        params: PageParams,
    ) -> Page[ActivityRead]:
        query = select(ActivityRecord).where(
            ActivityRecord.parent_type == parent_type,
            ActivityRecord.parent_id == parent_id,
        )
        newest_first = params.model_copy(update={"sort": "created_at", "order": "desc"})
        with store_guard(session, "activity.list"):
            rows, total = paginate(session, query, ActivityRecord, newest_first, sort_columns=("created_at",))
        return build_page([ActivityRead.model_validate(row) for row in rows], total=total, params=params)

    def _insert(self, session: Session, row: ActivityRecord) -> None:
        session.add(row)
        session.commit()


activity_log = ActivityLog()
