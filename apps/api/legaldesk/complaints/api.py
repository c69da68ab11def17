from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from legaldesk.activity.schemas import ActivityRead
from legaldesk.api.deps import get_current_principal, get_page_params, require_roles
from legaldesk.complaints.schemas import (
    ComplaintAssign,
    ComplaintCategory,
    ComplaintCreate,
    ComplaintRead,
    ComplaintStatus,
    ComplaintStatusUpdate,
    ComplaintUpdate,
)
from legaldesk.complaints.service import complaint_service
from legaldesk.core.database import get_db
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.security import ADMIN_ROLES, STAFF_ROLES, Principal


router = APIRouter(prefix="/api/complaints", tags=["complaints"])


@router.post("", response_model=ComplaintRead, status_code=status.HTTP_201_CREATED)
def submit_complaint(
    dto: ComplaintCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles("client")),
) -> ComplaintRead:
    return complaint_service.submit(db, principal, dto)


@router.get("", response_model=Page[ComplaintRead])
def list_complaints(
    status_filter: ComplaintStatus | None = Query(default=None, alias="status"),
    category: ComplaintCategory | None = Query(default=None),
    target_organization: str | None = Query(default=None),
    search: str | None = Query(default=None),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Page[ComplaintRead]:
    return complaint_service.list_complaints(
        db,
        principal,
        params,
        filters={"status": status_filter, "category": category, "target_organization": target_organization},
        search=search,
    )


@router.get("/{complaint_id}", response_model=ComplaintRead)
def get_complaint(
    complaint_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> ComplaintRead:
    return complaint_service.get(db, principal, complaint_id)


@router.patch("/{complaint_id}", response_model=ComplaintRead)
def patch_complaint(
    complaint_id: uuid.UUID,
    dto: ComplaintUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> ComplaintRead:
    return complaint_service.update_complaint(db, principal, complaint_id, dto)


@router.patch("/{complaint_id}/status", response_model=ComplaintRead)
def update_complaint_status(
    complaint_id: uuid.UUID,
    dto: ComplaintStatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> ComplaintRead:
    return complaint_service.update_status(db, principal, complaint_id, dto)


@router.patch("/{complaint_id}/assign", response_model=ComplaintRead)
def assign_complaint(
    complaint_id: uuid.UUID,
    dto: ComplaintAssign,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> ComplaintRead:
    return complaint_service.assign(db, principal, complaint_id, dto.assigned_staff_id)


@router.delete("/{complaint_id}", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
def delete_complaint(
    complaint_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*ADMIN_ROLES)),
) -> None:
    complaint_service.delete(db, principal, complaint_id)


@router.get("/{complaint_id}/activities", response_model=Page[ActivityRead])
def list_complaint_activities(
    complaint_id: uuid.UUID,
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Page[ActivityRead]:
    return complaint_service.list_activities(db, principal, complaint_id, params)
