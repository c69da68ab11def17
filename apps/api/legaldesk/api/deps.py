from __future__ import annotations

import uuid
from collections.abc import Callable
from typing import Literal

from fastapi import Depends, HTTPException, Query, status
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.requests import Request

from legaldesk.accounts.models import ClientProfile, UserProfile
from legaldesk.context import get_correlation_id
from legaldesk.core.auth import decode_access_token, read_bearer_token
from legaldesk.core.database import get_db
from legaldesk.platform.identity import IdentityProvider, get_identity_provider
from legaldesk.platform.query import PageParams
from legaldesk.platform.security import Principal
from legaldesk.platform.store import translate_store_error


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _resolve_principal(request: Request, db: Session, token: str) -> Principal:
    try:
        claims = decode_access_token(token)
        user_id = uuid.UUID(claims.sub)
    except (JWTError, ValueError) as exc:
        raise _unauthorized("Invalid or expired token") from exc

    try:
        profile = db.get(UserProfile, user_id)
        linked_owner_id = None
        if profile is not None and profile.user_type == "client":
            linked_owner_id = db.scalar(select(ClientProfile.id).where(ClientProfile.user_profile_id == profile.id))
    except SQLAlchemyError as exc:
        db.rollback()
        raise translate_store_error(exc, operation="auth.resolve_principal") from exc

    if profile is None:
        raise _unauthorized("User profile not found")

    request.state.actor_id = str(profile.id)
    return Principal(
        user_id=profile.id,
        role=profile.user_type,  # type: ignore[arg-type]
        linked_owner_id=linked_owner_id,
        email=claims.email,
        correlation_id=get_correlation_id(),
    )


def get_current_principal(request: Request, db: Session = Depends(get_db)) -> Principal:
    token = read_bearer_token(request)
    if token is None:
        raise _unauthorized("Not authenticated")
    return _resolve_principal(request, db, token)


def get_optional_principal(request: Request, db: Session = Depends(get_db)) -> Principal | None:
    """Principal for routes that also serve guests. A bad token is still rejected."""

    token = read_bearer_token(request)
    if token is None:
        return None
    return _resolve_principal(request, db, token)


def require_roles(*roles: str) -> Callable[..., Principal]:
    allowed = frozenset(roles)

    def dependency(principal: Principal = Depends(get_current_principal)) -> Principal:
        if principal.role not in allowed:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return principal

    return dependency


def get_identity() -> IdentityProvider:
    return get_identity_provider()


def get_page_params(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    sort: str = Query(default="created_at"),
    order: Literal["asc", "desc"] = Query(default="desc"),
) -> PageParams:
    return PageParams(page=page, limit=limit, sort=sort, order=order)
