from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from legaldesk.api.deps import get_optional_principal, get_page_params, require_roles
from legaldesk.catalog.schemas import (
    LegalServiceCreate,
    LegalServiceRead,
    LegalServiceUpdate,
    PracticeAreaCreate,
    PracticeAreaRead,
    PracticeAreaUpdate,
)
from legaldesk.catalog.service import legal_service_catalog, practice_area_service
from legaldesk.core.database import get_db
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.security import ADMIN_ROLES, Principal


practice_areas_router = APIRouter(prefix="/api/practice-areas", tags=["catalog.practice_areas"])
services_router = APIRouter(prefix="/api/services", tags=["catalog.services"])


def _lookup(service: Any, db: Session, principal: Principal | None, id_or_slug: str) -> Any:
    try:
        entry_id = uuid.UUID(id_or_slug)
    except ValueError:
        return service.get_by_slug(db, principal, id_or_slug)
    return service.get_entry(db, principal, entry_id)


@practice_areas_router.get("", response_model=Page[PracticeAreaRead])
def list_practice_areas(
    include_inactive: bool = Query(default=False),
    search: str | None = Query(default=None),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal | None = Depends(get_optional_principal),
) -> Page[PracticeAreaRead]:
    return practice_area_service.list_entries(db, principal, params, include_inactive=include_inactive, search=search)


@practice_areas_router.get("/{id_or_slug}", response_model=PracticeAreaRead)
def get_practice_area(
    id_or_slug: str,
    db: Session = Depends(get_db),
    principal: Principal | None = Depends(get_optional_principal),
) -> PracticeAreaRead:
    return _lookup(practice_area_service, db, principal, id_or_slug)


@practice_areas_router.post("", response_model=PracticeAreaRead, status_code=status.HTTP_201_CREATED)
def create_practice_area(
    dto: PracticeAreaCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*ADMIN_ROLES)),
) -> PracticeAreaRead:
    return practice_area_service.create(db, principal, dto)


@practice_areas_router.patch("/{practice_area_id}", response_model=PracticeAreaRead)
def patch_practice_area(
    practice_area_id: uuid.UUID,
    dto: PracticeAreaUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*ADMIN_ROLES)),
) -> PracticeAreaRead:
    return practice_area_service.update_entry(db, principal, practice_area_id, dto)


@services_router.get("", response_model=Page[LegalServiceRead])
def list_services(
    practice_area_id: uuid.UUID | None = Query(default=None),
    include_inactive: bool = Query(default=False),
    search: str | None = Query(default=None),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal | None = Depends(get_optional_principal),
) -> Page[LegalServiceRead]:
    return legal_service_catalog.list_entries(
        db,
        principal,
        params,
        include_inactive=include_inactive,
        filters={"practice_area_id": practice_area_id},
        search=search,
    )


@services_router.get("/{id_or_slug}", response_model=LegalServiceRead)
def get_service(
    id_or_slug: str,
    db: Session = Depends(get_db),
    principal: Principal | None = Depends(get_optional_principal),
) -> LegalServiceRead:
    return _lookup(legal_service_catalog, db, principal, id_or_slug)


@services_router.post("", response_model=LegalServiceRead, status_code=status.HTTP_201_CREATED)
def create_service(
    dto: LegalServiceCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*ADMIN_ROLES)),
) -> LegalServiceRead:
    return legal_service_catalog.create(db, principal, dto)


@services_router.patch("/{service_id}", response_model=LegalServiceRead)
def patch_service(
    service_id: uuid.UUID,
    dto: LegalServiceUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*ADMIN_ROLES)),
) -> LegalServiceRead:
    return legal_service_catalog.update_entry(db, principal, service_id, dto)
