from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from legaldesk.consultations.models import ConsultationBooking
from legaldesk.consultations.schemas import (
    ConsultationCreate,
    ConsultationRead,
    ConsultationStatusRead,
    ConsultationUpdate,
)
from legaldesk.core.errors import NotFound
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.resource import ResourceService
from legaldesk.platform.security import Principal
from legaldesk.platform.store import store_guard


class ConsultationService(ResourceService[ConsultationBooking, ConsultationRead]):
    model = ConsultationBooking
    family = "consultation"
    label = "Consultation"
    sort_columns = ("created_at", "updated_at", "reference_number", "booking_status", "payment_status", "urgency")
    search_columns = ("reference_number", "full_name", "email")
    filter_columns = ("booking_status", "payment_status", "urgency", "practice_area")
    status_attribute = "booking_status"

    def create(self, session: Session, actor: Principal | None, payload: ConsultationCreate) -> ConsultationRead:
        """Book a consultation. Guests may book; a signed-in client is recorded as the owner."""

        owner_id = actor.linked_owner_id if actor is not None and actor.is_self_scoped else None
        row = ConsultationBooking(client_profile_id=owner_id, **payload.model_dump())
        self._insert(session, actor, row, title="Consultation booked", description=payload.practice_area)
        with store_guard(session, "consultation.create"):
            return self._to_read(session, row)

    def check_status(self, session: Session, reference_number: str, email: str) -> ConsultationStatusRead:
        with store_guard(session, "consultation.check_status"):
            row = session.scalar(
                select(ConsultationBooking).where(
                    ConsultationBooking.reference_number == reference_number.strip(),
                    func.lower(ConsultationBooking.email) == email.strip().lower(),
                )
            )
            if row is None:
                raise NotFound("Consultation not found")
            return ConsultationStatusRead.model_validate(row)

    def list_consultations(
        self,
        session: Session,
        actor: Principal,
        params: PageParams,
        *,
        filters: dict[str, Any] | None = None,
        search: str | None = None,
    ) -> Page[ConsultationRead]:
        return self.list(session, actor, params, filters=filters, search=search)

    def update_consultation(
        self,
        session: Session,
        actor: Principal,
        consultation_id: uuid.UUID,
        patch: ConsultationUpdate,
    ) -> ConsultationRead:
        self._require_staff(actor, "update consultations")
        return self.update(session, actor, consultation_id, patch)

    def _to_read(self, session: Session, row: ConsultationBooking) -> ConsultationRead:
        return ConsultationRead.model_validate(row)


consultation_service = ConsultationService()
