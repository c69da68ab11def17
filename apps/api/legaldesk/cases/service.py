from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from legaldesk.activity.schemas import ActivityNoteCreate, ActivityRead
from legaldesk.cases.models import CLOSING_STATUSES, Case
from legaldesk.cases.schemas import CaseCreate, CaseRead, CaseUpdate
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.resource import ResourceService
from legaldesk.platform.security import Principal
from legaldesk.platform.store import store_guard


class CaseService(ResourceService[Case, CaseRead]):
    model = Case
    family = "case"
    label = "Case"
    sort_columns = ("created_at", "updated_at", "case_number", "status", "priority", "filing_date")
    search_columns = ("case_number", "title")
    filter_columns = ("status", "priority", "client_profile_id", "assigned_to_id", "practice_area_id")
    assignee_attribute = "assigned_to_id"

    def create(self, session: Session, actor: Principal, payload: CaseCreate) -> CaseRead:
        self._require_staff(actor, "create cases")
        row = Case(**payload.model_dump())
        self._insert(
            session,
            actor,
            row,
            title="Case created",
            description=f'Case "{payload.title}" was created',
        )
        with store_guard(session, "case.create"):
            return self._to_read(session, row)

    def list_cases(
        self,
        session: Session,
        actor: Principal,
        params: PageParams,
        *,
        filters: dict[str, Any] | None = None,
        search: str | None = None,
    ) -> Page[CaseRead]:
        return self.list(session, actor, params, filters=filters, search=search)

    def update_case(self, session: Session, actor: Principal, case_id: uuid.UUID, patch: CaseUpdate) -> CaseRead:
        self._require_staff(actor, "update cases")
        return self.update(session, actor, case_id, patch)

    def update_status(self, session: Session, actor: Principal, case_id: uuid.UUID, status: str) -> CaseRead:
        return self.update_case(session, actor, case_id, CaseUpdate(status=status))

    def assign(self, session: Session, actor: Principal, case_id: uuid.UUID, assignee_id: uuid.UUID | None) -> CaseRead:
        return self.update_case(session, actor, case_id, CaseUpdate(assigned_to_id=assignee_id))

    def add_note(
        self,
        session: Session,
        actor: Principal,
        case_id: uuid.UUID,
        payload: ActivityNoteCreate,
    ) -> ActivityRead:
        """Append a manual timeline entry. Unlike automatic entries, a failed write is raised."""

        self._require_staff(actor, "add case activities")
        with store_guard(session, "case.add_note"):
            row = self._get_row(session, case_id)
            self._assert_access(actor, row)

        result = self.activity.append(
            session,
            parent_type=self.family,
            parent_id=case_id,
            kind=payload.kind,
            title=payload.title,
            description=payload.description,
            actor_id=actor.user_id,
        )
        if result.error is not None:
            raise result.error
        self.logger.info(
            "case.note_added",
            extra={"entity_id": str(case_id), "actor_id": str(actor.user_id), "kind": payload.kind},
        )
        return result.record

    def _derive_changes(self, session: Session, row: Case, changes: dict[str, Any]) -> dict[str, Any]:
        if changes.get("status") in CLOSING_STATUSES and "closing_date" not in changes:
            changes = {**changes, "closing_date": datetime.now(timezone.utc).date()}
        return changes

    def _to_read(self, session: Session, row: Case) -> CaseRead:
        client = row.client
        client_name = None
        if client is not None:
            client_name = client.company_name or (client.user.full_name if client.user is not None else None)
        return CaseRead.model_validate(row).model_copy(
            update={
                "client_name": client_name,
                "assignee_name": row.assignee.full_name if row.assignee is not None else None,
                "practice_area_name": row.practice_area.name if row.practice_area is not None else None,
            }
        )


case_service = CaseService()
