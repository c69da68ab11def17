from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from legaldesk.activity.schemas import ActivityRead
from legaldesk.api.deps import get_current_principal, get_optional_principal, get_page_params, require_roles
from legaldesk.consultations.schemas import (
    BookingStatus,
    ConsultationCreate,
    ConsultationRead,
    ConsultationStatusQuery,
    ConsultationStatusRead,
    ConsultationUpdate,
    PaymentStatus,
    Urgency,
)
from legaldesk.consultations.service import consultation_service
from legaldesk.core.database import get_db
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.security import STAFF_ROLES, Principal


router = APIRouter(prefix="/api/consultations", tags=["consultations"])


@router.post("", response_model=ConsultationRead, status_code=status.HTTP_201_CREATED)
def book_consultation(
    dto: ConsultationCreate,
    db: Session = Depends(get_db),
    principal: Principal | None = Depends(get_optional_principal),
) -> ConsultationRead:
    return consultation_service.create(db, principal, dto)


@router.post("/status", response_model=ConsultationStatusRead)
def check_consultation_status(
    dto: ConsultationStatusQuery,
    db: Session = Depends(get_db),
) -> ConsultationStatusRead:
    return consultation_service.check_status(db, dto.reference_number, dto.email)


@router.get("", response_model=Page[ConsultationRead])
def list_consultations(
    booking_status: BookingStatus | None = Query(default=None),
    payment_status: PaymentStatus | None = Query(default=None),
    urgency: Urgency | None = Query(default=None),
    practice_area: str | None = Query(default=None),
    search: str | None = Query(default=None),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Page[ConsultationRead]:
    return consultation_service.list_consultations(
        db,
        principal,
        params,
        filters={
            "booking_status": booking_status,
            "payment_status": payment_status,
            "urgency": urgency,
            "practice_area": practice_area,
        },
        search=search,
    )


@router.get("/{consultation_id}", response_model=ConsultationRead)
def get_consultation(
    consultation_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> ConsultationRead:
    return consultation_service.get(db, principal, consultation_id)


@router.patch("/{consultation_id}", response_model=ConsultationRead)
def patch_consultation(
    consultation_id: uuid.UUID,
    dto: ConsultationUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> ConsultationRead:
    return consultation_service.update_consultation(db, principal, consultation_id, dto)


@router.get("/{consultation_id}/activities", response_model=Page[ActivityRead])
def list_consultation_activities(
    consultation_id: uuid.UUID,
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Page[ActivityRead]:
    return consultation_service.list_activities(db, principal, consultation_id, params)
