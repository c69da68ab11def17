from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from legaldesk.catalog.models import LegalService, PracticeArea
from legaldesk.catalog.schemas import (
    LegalServiceCreate,
    LegalServiceRead,
    LegalServiceUpdate,
    PracticeAreaCreate,
    PracticeAreaRead,
    PracticeAreaUpdate,
)
from legaldesk.core.errors import NotFound
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.resource import ResourceService
from legaldesk.platform.security import Principal
from legaldesk.platform.store import store_guard


class _CatalogService(ResourceService[Any, Any]):
    """Public lookup tables. Anyone may read active entries; only staff see inactive ones."""

    owner_attribute = None
    status_attribute = None
    emits_activity = False
    search_columns = ("name", "slug")
    filter_columns = ("is_active",)
    sort_columns = ("created_at", "updated_at", "name", "slug")

    def list_entries(
        self,
        session: Session,
        actor: Principal | None,
        params: PageParams,
        *,
        include_inactive: bool = False,
        filters: dict[str, Any] | None = None,
        search: str | None = None,
    ) -> Page[Any]:
        merged = dict(filters or {})
        if not (include_inactive and actor is not None and actor.is_staff):
            merged["is_active"] = True
        return self.list(session, actor, params, filters=merged, search=search)

    def get_by_slug(self, session: Session, actor: Principal | None, slug: str) -> Any:
        with store_guard(session, f"{self.family}.get_by_slug"):
            row = session.scalar(select(self.model).where(self.model.slug == slug))
            if row is None or (not row.is_active and not (actor is not None and actor.is_staff)):
                raise NotFound(f"{self.label} not found")
            return self._to_read(session, row)

    def get_entry(self, session: Session, actor: Principal | None, entry_id: uuid.UUID) -> Any:
        with store_guard(session, f"{self.family}.get"):
            row = self._get_row(session, entry_id)
            if not row.is_active and not (actor is not None and actor.is_staff):
                raise NotFound(f"{self.label} not found")
            return self._to_read(session, row)

    def _assert_access(self, actor: Principal, row: Any) -> None:
        return None


class PracticeAreaService(_CatalogService):
    model = PracticeArea
    family = "practice_area"
    label = "Practice area"

    def create(self, session: Session, actor: Principal, payload: PracticeAreaCreate) -> PracticeAreaRead:
        row = PracticeArea(**payload.model_dump())
        self._insert(session, actor, row, title=f"Practice area created: {payload.name}")
        with store_guard(session, "practice_area.create"):
            return self._to_read(session, row)

    def update_entry(
        self,
        session: Session,
        actor: Principal,
        entry_id: uuid.UUID,
        patch: PracticeAreaUpdate,
    ) -> PracticeAreaRead:
        return self.update(session, actor, entry_id, patch)

    def _to_read(self, session: Session, row: PracticeArea) -> PracticeAreaRead:
        return PracticeAreaRead.model_validate(row)


class LegalServiceCatalog(_CatalogService):
    model = LegalService
    family = "legal_service"
    label = "Service"
    filter_columns = ("is_active", "practice_area_id")
    sort_columns = ("created_at", "updated_at", "name", "slug", "registration_fee")

    def create(self, session: Session, actor: Principal, payload: LegalServiceCreate) -> LegalServiceRead:
        row = LegalService(**payload.model_dump())
        self._insert(session, actor, row, title=f"Service created: {payload.name}")
        with store_guard(session, "legal_service.create"):
            return self._to_read(session, row)

    def update_entry(
        self,
        session: Session,
        actor: Principal,
        entry_id: uuid.UUID,
        patch: LegalServiceUpdate,
    ) -> LegalServiceRead:
        return self.update(session, actor, entry_id, patch)

    def require_active(self, session: Session, service_id: uuid.UUID) -> LegalService:
        row = session.get(LegalService, service_id)
        if row is None or not row.is_active:
            raise NotFound("Service not found")
        return row

    def _to_read(self, session: Session, row: LegalService) -> LegalServiceRead:
        return LegalServiceRead.model_validate(row)


practice_area_service = PracticeAreaService()
legal_service_catalog = LegalServiceCatalog()
