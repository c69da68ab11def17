from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from jose import JWTError, jwt
from starlette.requests import Request

from legaldesk.core.config import get_settings


@dataclass
class TokenClaims:
    sub: str
    email: str | None = None


def read_bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("authorization", "")
    if not auth_header.startswith("Bearer "):
        return None
    token = auth_header.removeprefix("Bearer ").strip()
    return token or None


def decode_access_token(token: str) -> TokenClaims:
    """Verify a bearer token and return its subject. Raises ``JWTError`` when invalid."""

    settings = get_settings()
    options = {"verify_aud": settings.jwt_audience is not None}
    payload: dict[str, Any] = jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        options=options,
    )
    subject = payload.get("sub")
    if not subject:
        raise JWTError("token has no subject")
    email = payload.get("email")
    return TokenClaims(sub=str(subject), email=str(email) if email else None)


def resolve_token_subject(request: Request) -> str | None:
    token = read_bearer_token(request)
    if token is None:
        return None
    try:
        return decode_access_token(token).sub
    except JWTError:
        return None
