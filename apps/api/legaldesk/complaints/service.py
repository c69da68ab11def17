from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from legaldesk.complaints.models import Complaint
from legaldesk.complaints.schemas import ComplaintCreate, ComplaintRead, ComplaintStatusUpdate, ComplaintUpdate
from legaldesk.core.errors import Forbidden
from legaldesk.metrics import observe_access_denied
from legaldesk.platform.query import Page, PageParams, sanitize_search_term
from legaldesk.platform.resource import ResourceService
from legaldesk.platform.security import Principal
from legaldesk.platform.store import store_guard
from legaldesk.subscriptions.service import SubscriptionService, subscription_service


class ComplaintService(ResourceService[Complaint, ComplaintRead]):
    model = Complaint
    family = "complaint"
    label = "Complaint"
    sort_columns = ("created_at", "updated_at", "complaint_number", "status")
    search_columns = ("complaint_number", "title", "target_organization")
    filter_columns = ("status", "category")
    assignee_attribute = "assigned_staff_id"

    def __init__(self, subscriptions: SubscriptionService | None = None) -> None:
        super().__init__()
        self.subscriptions = subscriptions or subscription_service

    def submit(self, session: Session, actor: Principal, payload: ComplaintCreate) -> ComplaintRead:
        """File a complaint on behalf of the calling client, who must hold an active subscription."""

        if actor.role != "client" or actor.linked_owner_id is None:
            observe_access_denied(self.family)
            raise Forbidden("Only clients can submit complaints")
        if not self.subscriptions.is_active(session, actor.linked_owner_id):
            observe_access_denied(self.family)
            raise Forbidden("Active subscription required to submit complaints")

        row = Complaint(client_profile_id=actor.linked_owner_id, **payload.model_dump())
        self._insert(session, actor, row, title="Complaint submitted", description=payload.title)
        with store_guard(session, "complaint.submit"):
            return self._to_read(session, row)

    def list_complaints(
        self,
        session: Session,
        actor: Principal,
        params: PageParams,
        *,
        filters: dict[str, Any] | None = None,
        search: str | None = None,
    ) -> Page[ComplaintRead]:
        return self.list(session, actor, params, filters=filters, search=search)

    def update_complaint(
        self,
        session: Session,
        actor: Principal,
        complaint_id: uuid.UUID,
        patch: ComplaintUpdate,
    ) -> ComplaintRead:
        self._require_staff(actor, "update complaints")
        return self.update(session, actor, complaint_id, patch)

    def update_status(
        self,
        session: Session,
        actor: Principal,
        complaint_id: uuid.UUID,
        payload: ComplaintStatusUpdate,
    ) -> ComplaintRead:
        patch = ComplaintUpdate(**payload.model_dump(exclude_unset=True))
        return self.update_complaint(session, actor, complaint_id, patch)

    def assign(
        self,
        session: Session,
        actor: Principal,
        complaint_id: uuid.UUID,
        staff_id: uuid.UUID,
    ) -> ComplaintRead:
        return self.update_complaint(session, actor, complaint_id, ComplaintUpdate(assigned_staff_id=staff_id))

    def _apply_filters(self, query: Select[Any], filters: dict[str, Any]) -> Select[Any]:
        organization = sanitize_search_term(filters.pop("target_organization", None))
        if organization is not None:
            query = query.where(Complaint.target_organization.ilike(f"%{organization}%"))
        return super()._apply_filters(query, filters)

    def _derive_changes(self, session: Session, row: Complaint, changes: dict[str, Any]) -> dict[str, Any]:
        derived = dict(changes)
        if derived.get("assigned_staff_id") is not None and "status" not in derived and row.status == "submitted":
            derived["status"] = "under_review"
        if derived.get("status") == "resolved" and "resolved_at" not in derived:
            derived["resolved_at"] = datetime.now(timezone.utc)
        return derived

    def _to_read(self, session: Session, row: Complaint) -> ComplaintRead:
        return ComplaintRead.model_validate(row).model_copy(
            update={"assignee_name": self._display_name(session, row.assigned_staff_id)}
        )


complaint_service = ComplaintService()
