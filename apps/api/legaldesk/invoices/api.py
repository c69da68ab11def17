from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from legaldesk.activity.schemas import ActivityRead
from legaldesk.api.deps import get_current_principal, get_page_params, require_roles
from legaldesk.core.database import get_db
from legaldesk.invoices.schemas import InvoiceCreate, InvoiceRead, InvoiceStatus, InvoiceUpdate
from legaldesk.invoices.service import invoice_service
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.security import ADMIN_ROLES, STAFF_ROLES, Principal


router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.post("", response_model=InvoiceRead, status_code=status.HTTP_201_CREATED)
def create_invoice(
    dto: InvoiceCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> InvoiceRead:
    return invoice_service.create(db, principal, dto)


@router.get("", response_model=Page[InvoiceRead])
def list_invoices(
    status_filter: InvoiceStatus | None = Query(default=None, alias="status"),
    case_id: uuid.UUID | None = Query(default=None),
    client_profile_id: uuid.UUID | None = Query(default=None),
    search: str | None = Query(default=None),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Page[InvoiceRead]:
    return invoice_service.list(
        db,
        principal,
        params,
        filters={"status": status_filter, "case_id": case_id, "client_profile_id": client_profile_id},
        search=search,
    )


@router.get("/{invoice_id}", response_model=InvoiceRead)
def get_invoice(
    invoice_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> InvoiceRead:
    return invoice_service.get(db, principal, invoice_id)


@router.patch("/{invoice_id}", response_model=InvoiceRead)
def patch_invoice(
    invoice_id: uuid.UUID,
    dto: InvoiceUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> InvoiceRead:
    return invoice_service.update_invoice(db, principal, invoice_id, dto)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
def delete_invoice(
    invoice_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*ADMIN_ROLES)),
) -> None:
    invoice_service.delete(db, principal, invoice_id)


@router.get("/{invoice_id}/activities", response_model=Page[ActivityRead])
def list_invoice_activities(
    invoice_id: uuid.UUID,
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Page[ActivityRead]:
    return invoice_service.list_activities(db, principal, invoice_id, params)
