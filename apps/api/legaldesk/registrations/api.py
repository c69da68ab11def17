from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from legaldesk.activity.schemas import ActivityRead
from legaldesk.api.deps import get_current_principal, get_optional_principal, get_page_params, require_roles
from legaldesk.core.database import get_db
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.security import STAFF_ROLES, Principal
from legaldesk.registrations.schemas import (
    PaymentStatus,
    RegistrationAssign,
    RegistrationCreate,
    RegistrationRead,
    RegistrationStatus,
    RegistrationStatusQuery,
    RegistrationStatusRead,
    RegistrationUpdate,
)
from legaldesk.registrations.service import registration_service


router = APIRouter(prefix="/api/service-registrations", tags=["service-registrations"])


@router.post("", response_model=RegistrationRead, status_code=status.HTTP_201_CREATED)
def register_for_service(
    dto: RegistrationCreate,
    db: Session = Depends(get_db),
    principal: Principal | None = Depends(get_optional_principal),
) -> RegistrationRead:
    return registration_service.create(db, principal, dto)


@router.post("/status", response_model=RegistrationStatusRead)
def check_registration_status(
    dto: RegistrationStatusQuery,
    db: Session = Depends(get_db),
) -> RegistrationStatusRead:
    return registration_service.check_status(db, dto.reference_number, dto.email)


@router.get("", response_model=Page[RegistrationRead])
def list_registrations(
    status_filter: RegistrationStatus | None = Query(default=None, alias="status"),
    payment_status: PaymentStatus | None = Query(default=None),
    service_id: uuid.UUID | None = Query(default=None),
    assigned_to_id: uuid.UUID | None = Query(default=None),
    search: str | None = Query(default=None),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Page[RegistrationRead]:
    return registration_service.list_registrations(
        db,
        principal,
        params,
        filters={
            "status": status_filter,
            "payment_status": payment_status,
            "service_id": service_id,
            "assigned_to_id": assigned_to_id,
        },
        search=search,
    )


@router.get("/{registration_id}", response_model=RegistrationRead)
def get_registration(
    registration_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> RegistrationRead:
    return registration_service.get(db, principal, registration_id)


@router.patch("/{registration_id}", response_model=RegistrationRead)
def patch_registration(
    registration_id: uuid.UUID,
    dto: RegistrationUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> RegistrationRead:
    return registration_service.update_registration(db, principal, registration_id, dto)


@router.patch("/{registration_id}/assign", response_model=RegistrationRead)
def assign_registration(
    registration_id: uuid.UUID,
    dto: RegistrationAssign,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> RegistrationRead:
    return registration_service.assign(db, principal, registration_id, dto.assigned_to_id)


@router.get("/{registration_id}/activities", response_model=Page[ActivityRead])
def list_registration_activities(
    registration_id: uuid.UUID,
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Page[ActivityRead]:
    return registration_service.list_activities(db, principal, registration_id, params)
