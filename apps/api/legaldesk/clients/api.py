from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from legaldesk.accounts.schemas import CompanyType
from legaldesk.activity.schemas import ActivityRead
from legaldesk.api.deps import get_current_principal, get_identity, get_page_params, require_roles
from legaldesk.cases.schemas import CaseRead
from legaldesk.clients.schemas import ClientCreate, ClientRead, ClientUpdate
from legaldesk.clients.service import client_service
from legaldesk.core.database import get_db
from legaldesk.invoices.schemas import InvoiceRead
from legaldesk.platform.identity import IdentityProvider
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.security import ADMIN_ROLES, STAFF_ROLES, Principal


router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.post("", response_model=ClientRead, status_code=status.HTTP_201_CREATED)
def create_client(
    dto: ClientCreate,
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
    principal: Principal = Depends(require_roles(*ADMIN_ROLES)),
) -> ClientRead:
    return client_service.create(db, identity, principal, dto)


@router.get("", response_model=Page[ClientRead])
def list_clients(
    company_type: CompanyType | None = Query(default=None),
    city: str | None = Query(default=None),
    search: str | None = Query(default=None),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> Page[ClientRead]:
    return client_service.list_clients(db, principal, params, company_type=company_type, city=city, search=search)


@router.get("/{client_id}", response_model=ClientRead)
def get_client(
    client_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
    principal: Principal = Depends(get_current_principal),
) -> ClientRead:
    return client_service.get_client(db, principal, client_id, identity)


@router.patch("/{client_id}", response_model=ClientRead)
def patch_client(
    client_id: uuid.UUID,
    dto: ClientUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> ClientRead:
    return client_service.update_client(db, principal, client_id, dto)


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
def delete_client(
    client_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
    principal: Principal = Depends(require_roles(*ADMIN_ROLES)),
) -> None:
    client_service.delete_client(db, identity, principal, client_id)


@router.get("/{client_id}/cases", response_model=Page[CaseRead])
def list_client_cases(
    client_id: uuid.UUID,
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Page[CaseRead]:
    return client_service.list_cases(db, principal, client_id, params)


@router.get("/{client_id}/invoices", response_model=Page[InvoiceRead])
def list_client_invoices(
    client_id: uuid.UUID,
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Page[InvoiceRead]:
    return client_service.list_invoices(db, principal, client_id, params)


@router.get("/{client_id}/activities", response_model=Page[ActivityRead])
def list_client_activities(
    client_id: uuid.UUID,
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> Page[ActivityRead]:
    return client_service.list_activities(db, principal, client_id, params)
