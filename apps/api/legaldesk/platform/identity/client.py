from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Protocol

import httpx

from legaldesk.core.config import get_settings
from legaldesk.otel import get_tracer, traced


tracer = get_tracer("legaldesk.identity")


@dataclass(frozen=True, slots=True)
class IdentityUser:
    id: uuid.UUID
    email: str


class IdentityProviderError(Exception):
    def __init__(self, message: str, *, status_code: int | None = None, duplicate: bool = False) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.duplicate = duplicate

    @property
    def not_found(self) -> bool:
        return self.status_code == 404


class IdentityProvider(Protocol):
    def invite_user(self, email: str, *, metadata: dict[str, Any] | None = None) -> IdentityUser: ...

    def get_user_by_id(self, user_id: uuid.UUID) -> IdentityUser: ...

    def delete_user(self, user_id: uuid.UUID) -> None: ...


class InMemoryIdentityProvider:
    """Process-local identity store for local runs and tests."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._users: dict[uuid.UUID, IdentityUser] = {}

    def invite_user(self, email: str, *, metadata: dict[str, Any] | None = None) -> IdentityUser:
        normalized = email.strip().lower()
        with traced(tracer, "identity.invite_user", backend="inmemory"):
            with self._lock:
                if any(user.email == normalized for user in self._users.values()):
                    raise IdentityProviderError("email already registered", status_code=422, duplicate=True)
                user = IdentityUser(id=uuid.uuid4(), email=normalized)
                self._users[user.id] = user
                return user

    def get_user_by_id(self, user_id: uuid.UUID) -> IdentityUser:
        with traced(tracer, "identity.get_user", backend="inmemory", identity_id=user_id):
            with self._lock:
                user = self._users.get(user_id)
            if user is None:
                raise IdentityProviderError("user not found", status_code=404)
            return user

    def delete_user(self, user_id: uuid.UUID) -> None:
        with traced(tracer, "identity.delete_user", backend="inmemory", identity_id=user_id):
            with self._lock:
                if self._users.pop(user_id, None) is None:
                    raise IdentityProviderError("user not found", status_code=404)

    def exists(self, user_id: uuid.UUID) -> bool:
        with self._lock:
            return user_id in self._users

    def clear(self) -> None:
        with self._lock:
            self._users.clear()


class SupabaseAdminClient:
    """Auth-admin calls against a Supabase GoTrue server using the service-role key."""

    def __init__(
        self,
        base_url: str,
        service_role_key: str,
        *,
        timeout: float = 10.0,
        invite_redirect_url: str | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.invite_redirect_url = invite_redirect_url
        self._client = httpx.Client(
            base_url=f"{base_url.rstrip('/')}/auth/v1",
            headers={
                "apikey": service_role_key,
                "Authorization": f"Bearer {service_role_key}",
            },
            timeout=timeout,
            transport=transport,
        )

    def invite_user(self, email: str, *, metadata: dict[str, Any] | None = None) -> IdentityUser:
        body: dict[str, Any] = {"email": email}
        if metadata:
            body["data"] = metadata
        params = {"redirect_to": self.invite_redirect_url} if self.invite_redirect_url else None
        with traced(tracer, "identity.invite_user", backend="supabase"):
            payload = self._request("POST", "/invite", json=body, params=params)
        return self._to_user(payload)

    def get_user_by_id(self, user_id: uuid.UUID) -> IdentityUser:
        with traced(tracer, "identity.get_user", backend="supabase", identity_id=user_id):
            payload = self._request("GET", f"/admin/users/{user_id}")
        return self._to_user(payload)

    def delete_user(self, user_id: uuid.UUID) -> None:
        with traced(tracer, "identity.delete_user", backend="supabase", identity_id=user_id):
            self._request("DELETE", f"/admin/users/{user_id}")

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            raise IdentityProviderError(f"identity provider unreachable: {exc}") from exc

        if response.status_code >= 400:
            raise self._to_error(response)
        if not response.content:
            return {}
        payload = response.json()
        return payload if isinstance(payload, dict) else {}

    @staticmethod
    def _to_error(response: httpx.Response) -> IdentityProviderError:
        try:
            body = response.json()
        except ValueError:
            body = {}
        error_code = str(body.get("error_code") or body.get("code") or "")
        message = str(body.get("msg") or body.get("message") or body.get("error_description") or response.text)
        duplicate = error_code in {"email_exists", "user_already_exists"} or "already been registered" in message
        return IdentityProviderError(message, status_code=response.status_code, duplicate=duplicate)

    @staticmethod
    def _to_user(payload: dict[str, Any]) -> IdentityUser:
        raw = payload.get("user") if isinstance(payload.get("user"), dict) else payload
        try:
            return IdentityUser(id=uuid.UUID(str(raw["id"])), email=str(raw.get("email") or ""))
        except (KeyError, ValueError) as exc:
            raise IdentityProviderError("identity provider returned an unexpected payload") from exc


@lru_cache
def get_identity_provider() -> IdentityProvider:
    settings = get_settings()
    backend = settings.identity_backend.lower()
    if backend == "auto":
        backend = "supabase" if settings.is_production else "inmemory"

    if backend == "supabase":
        return SupabaseAdminClient(
            settings.supabase_url,
            settings.supabase_service_role_key,
            timeout=settings.identity_timeout_seconds,
            invite_redirect_url=settings.invite_redirect_url,
        )
    return InMemoryIdentityProvider()
