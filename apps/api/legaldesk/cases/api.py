from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from legaldesk.activity.schemas import ActivityNoteCreate, ActivityRead
from legaldesk.api.deps import get_current_principal, get_page_params, require_roles
from legaldesk.cases.schemas import (
    CaseAssign,
    CaseCreate,
    CasePriority,
    CaseRead,
    CaseStatus,
    CaseStatusUpdate,
    CaseUpdate,
)
from legaldesk.cases.service import case_service
from legaldesk.core.database import get_db
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.security import ADMIN_ROLES, STAFF_ROLES, Principal


router = APIRouter(prefix="/api/cases", tags=["cases"])


@router.post("", response_model=CaseRead, status_code=status.HTTP_201_CREATED)
def create_case(
    dto: CaseCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> CaseRead:
    return case_service.create(db, principal, dto)


@router.get("", response_model=Page[CaseRead])
def list_cases(
    status_filter: CaseStatus | None = Query(default=None, alias="status"),
    priority: CasePriority | None = Query(default=None),
    client_profile_id: uuid.UUID | None = Query(default=None),
    assigned_to_id: uuid.UUID | None = Query(default=None),
    practice_area_id: uuid.UUID | None = Query(default=None),
    search: str | None = Query(default=None),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Page[CaseRead]:
    return case_service.list_cases(
        db,
        principal,
        params,
        filters={
            "status": status_filter,
            "priority": priority,
            "client_profile_id": client_profile_id,
            "assigned_to_id": assigned_to_id,
            "practice_area_id": practice_area_id,
        },
        search=search,
    )


@router.get("/{case_id}", response_model=CaseRead)
def get_case(
    case_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> CaseRead:
    return case_service.get(db, principal, case_id)


@router.patch("/{case_id}", response_model=CaseRead)
def patch_case(
    case_id: uuid.UUID,
    dto: CaseUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> CaseRead:
    return case_service.update_case(db, principal, case_id, dto)


@router.patch("/{case_id}/status", response_model=CaseRead)
def update_case_status(
    case_id: uuid.UUID,
    dto: CaseStatusUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> CaseRead:
    return case_service.update_status(db, principal, case_id, dto.status)


@router.patch("/{case_id}/assign", response_model=CaseRead)
def assign_case(
    case_id: uuid.UUID,
    dto: CaseAssign,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> CaseRead:
    return case_service.assign(db, principal, case_id, dto.assigned_to_id)


@router.delete("/{case_id}", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
def delete_case(
    case_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*ADMIN_ROLES)),
) -> None:
    case_service.delete(db, principal, case_id)


@router.get("/{case_id}/activities", response_model=Page[ActivityRead])
def list_case_activities(
    case_id: uuid.UUID,
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Page[ActivityRead]:
    return case_service.list_activities(db, principal, case_id, params)


@router.post("/{case_id}/activities", response_model=ActivityRead, status_code=status.HTTP_201_CREATED)
def add_case_activity(
    case_id: uuid.UUID,
    dto: ActivityNoteCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> ActivityRead:
    return case_service.add_note(db, principal, case_id, dto)
