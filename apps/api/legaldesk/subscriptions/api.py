from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from legaldesk.api.deps import get_current_principal, get_page_params, require_roles
from legaldesk.core.database import get_db
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.security import STAFF_ROLES, Principal
from legaldesk.subscriptions.schemas import (
    SubscriptionCancel,
    SubscriptionRead,
    SubscriptionStatus,
    SubscriptionStatusRead,
    SubscriptionUpdate,
)
from legaldesk.subscriptions.service import subscription_service


router = APIRouter(prefix="/api/subscriptions", tags=["subscriptions"])


@router.post("", response_model=SubscriptionRead, status_code=status.HTTP_201_CREATED)
def create_subscription(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles("client")),
) -> SubscriptionRead:
    return subscription_service.create(db, principal)


@router.get("/me", response_model=SubscriptionRead)
def get_my_subscription(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles("client")),
) -> SubscriptionRead:
    return subscription_service.get_mine(db, principal)


@router.get("/me/status", response_model=SubscriptionStatusRead)
def get_my_subscription_status(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles("client")),
) -> SubscriptionStatusRead:
    return SubscriptionStatusRead(is_active=subscription_service.is_active(db, principal.linked_owner_id))


@router.get("", response_model=Page[SubscriptionRead])
def list_subscriptions(
    status_filter: SubscriptionStatus | None = Query(default=None, alias="status"),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> Page[SubscriptionRead]:
    return subscription_service.list_subscriptions(db, principal, params, status=status_filter)


@router.get("/{subscription_id}", response_model=SubscriptionRead)
def get_subscription(
    subscription_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> SubscriptionRead:
    return subscription_service.get(db, principal, subscription_id)


@router.patch("/{subscription_id}", response_model=SubscriptionRead)
def patch_subscription(
    subscription_id: uuid.UUID,
    dto: SubscriptionUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> SubscriptionRead:
    return subscription_service.update_subscription(db, principal, subscription_id, dto)


@router.post("/{subscription_id}/cancel", response_model=SubscriptionRead)
def cancel_subscription(
    subscription_id: uuid.UUID,
    dto: SubscriptionCancel,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> SubscriptionRead:
    return subscription_service.cancel(db, principal, subscription_id, dto.reason)


@router.post("/{subscription_id}/activate", response_model=SubscriptionRead)
def activate_subscription(
    subscription_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
) -> SubscriptionRead:
    return subscription_service.activate(db, principal, subscription_id)
