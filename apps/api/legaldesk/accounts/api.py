from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from legaldesk.accounts.schemas import AttorneyProfileUpdate, UserInvite, UserProfileRead, UserProfileUpdate
from legaldesk.accounts.service import user_service
from legaldesk.api.deps import get_current_principal, get_identity, get_page_params, require_roles
from legaldesk.core.database import get_db
from legaldesk.platform.identity import IdentityProvider
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.security import ADMIN_ROLES, Principal


router = APIRouter(prefix="/api/users", tags=["users"])


def _parse_user_types(raw: str | None) -> list[str] | None:
    if raw is None:
        return None
    return [item.strip() for item in raw.split(",") if item.strip()]


@router.get("", response_model=Page[UserProfileRead])
def list_users(
    user_types: str | None = Query(default=None, description="Comma-separated user types"),
    search: str | None = Query(default=None),
    params: PageParams = Depends(get_page_params),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_roles(*ADMIN_ROLES)),
) -> Page[UserProfileRead]:
    return user_service.list_users(db, principal, params, user_types=_parse_user_types(user_types), search=search)


@router.post("/invite", response_model=UserProfileRead, status_code=status.HTTP_201_CREATED)
def invite_user(
    dto: UserInvite,
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
    principal: Principal = Depends(require_roles("admin")),
) -> UserProfileRead:
    return user_service.invite_user(db, identity, principal, dto)


@router.get("/{user_id}", response_model=UserProfileRead)
def get_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
    principal: Principal = Depends(get_current_principal),
) -> UserProfileRead:
    return user_service.get_profile(db, principal, user_id, identity)


@router.patch("/{user_id}", response_model=UserProfileRead)
def patch_user(
    user_id: uuid.UUID,
    dto: UserProfileUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> UserProfileRead:
    return user_service.update_profile(db, principal, user_id, dto)


@router.patch("/{user_id}/attorney-profile", response_model=UserProfileRead)
def patch_attorney_profile(
    user_id: uuid.UUID,
    dto: AttorneyProfileUpdate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
) -> UserProfileRead:
    return user_service.update_attorney_profile(db, principal, user_id, dto)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
def delete_user(
    user_id: uuid.UUID,
    db: Session = Depends(get_db),
    identity: IdentityProvider = Depends(get_identity),
    principal: Principal = Depends(require_roles("admin")),
) -> None:
    user_service.delete_user(db, identity, principal, user_id)
