from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from legaldesk.catalog.service import LegalServiceCatalog, legal_service_catalog
from legaldesk.core.errors import NotFound
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.resource import ResourceService
from legaldesk.platform.security import Principal
from legaldesk.platform.store import store_guard
from legaldesk.registrations.models import ServiceRegistration
from legaldesk.registrations.schemas import (
    RegistrationCreate,
    RegistrationRead,
    RegistrationStatusRead,
    RegistrationUpdate,
)


# Assigning staff to a registration in one of these states starts the work.
AUTO_START_STATUSES = frozenset({"pending_payment", "paid"})


class RegistrationService(ResourceService[ServiceRegistration, RegistrationRead]):
    model = ServiceRegistration
    family = "service_registration"
    label = "Registration"
    sort_columns = ("created_at", "updated_at", "reference_number", "status", "payment_status")
    search_columns = ("reference_number", "full_name", "email")
    filter_columns = ("status", "payment_status", "service_id", "assigned_to_id")
    assignee_attribute = "assigned_to_id"

    def __init__(self, catalog: LegalServiceCatalog | None = None) -> None:
        super().__init__()
        self.catalog = catalog or legal_service_catalog

    def create(self, session: Session, actor: Principal | None, payload: RegistrationCreate) -> RegistrationRead:
        with store_guard(session, "service_registration.create"):
            service = self.catalog.require_active(session, payload.service_id)
            service_name = service.name

        owner_id = actor.linked_owner_id if actor is not None and actor.is_self_scoped else None
        row = ServiceRegistration(client_profile_id=owner_id, **payload.model_dump())
        self._insert(session, actor, row, title="Service registration submitted", description=service_name)
        with store_guard(session, "service_registration.create"):
            return self._to_read(session, row)

    def check_status(self, session: Session, reference_number: str, email: str) -> RegistrationStatusRead:
        with store_guard(session, "service_registration.check_status"):
            row = session.scalar(
                select(ServiceRegistration).where(
                    ServiceRegistration.reference_number == reference_number.strip(),
                    func.lower(ServiceRegistration.email) == email.strip().lower(),
                )
            )
            if row is None:
                raise NotFound("Registration not found")
            return RegistrationStatusRead.model_validate(row)

    def list_registrations(
        self,
        session: Session,
        actor: Principal,
        params: PageParams,
        *,
        filters: dict[str, Any] | None = None,
        search: str | None = None,
    ) -> Page[RegistrationRead]:
        return self.list(session, actor, params, filters=filters, search=search)

    def update_registration(
        self,
        session: Session,
        actor: Principal,
        registration_id: uuid.UUID,
        patch: RegistrationUpdate,
    ) -> RegistrationRead:
        self._require_staff(actor, "update registrations")
        return self.update(session, actor, registration_id, patch)

    def assign(
        self,
        session: Session,
        actor: Principal,
        registration_id: uuid.UUID,
        assignee_id: uuid.UUID,
    ) -> RegistrationRead:
        return self.update_registration(session, actor, registration_id, RegistrationUpdate(assigned_to_id=assignee_id))

    def _derive_changes(self, session: Session, row: ServiceRegistration, changes: dict[str, Any]) -> dict[str, Any]:
        if changes.get("assigned_to_id") is not None and "status" not in changes and row.status in AUTO_START_STATUSES:
            return {**changes, "status": "in_progress"}
        return changes

    def _to_read(self, session: Session, row: ServiceRegistration) -> RegistrationRead:
        return RegistrationRead.model_validate(row).model_copy(
            update={
                "service_name": row.service.name if row.service is not None else None,
                "assignee_name": self._display_name(session, row.assigned_to_id),
            }
        )


registration_service = RegistrationService()
