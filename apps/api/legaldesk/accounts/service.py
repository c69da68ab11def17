from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import false, func, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from legaldesk.accounts.models import AttorneyProfile, UserProfile
from legaldesk.accounts.provisioning import AccountProvisioner, account_provisioner
from legaldesk.accounts.schemas import AttorneyProfileUpdate, UserInvite, UserProfileRead, UserProfileUpdate
from legaldesk.core.errors import Forbidden, NotFound, ValidationFailure
from legaldesk.metrics import observe_access_denied
from legaldesk.platform.identity import IdentityProvider, IdentityProviderError
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.resource import ResourceService
from legaldesk.platform.security import ADMIN_ROLES, Principal
from legaldesk.platform.store import store_guard


def _new_attorney_profile(profile_id: uuid.UUID) -> AttorneyProfile:
    return AttorneyProfile(user_profile_id=profile_id, specializations=[])


class UserService(ResourceService[UserProfile, UserProfileRead]):
    model = UserProfile
    family = "user"
    label = "User"
    owner_attribute = None
    sort_columns = ("created_at", "updated_at", "full_name", "user_type")
    search_columns = ("full_name",)
    status_attribute = None
    empty_patch = "current"
    emits_activity = False

    def __init__(self, provisioner: AccountProvisioner | None = None) -> None:
        super().__init__()
        self.provisioner = provisioner or account_provisioner

    def get_profile(
        self,
        session: Session,
        actor: Principal,
        user_id: uuid.UUID,
        identity: IdentityProvider | None = None,
    ) -> UserProfileRead:
        profile = self.get(session, actor, user_id)
        if identity is None:
            return profile
        try:
            email = identity.get_user_by_id(user_id).email
        except IdentityProviderError as exc:
            self.logger.warning("user.email_lookup_failed", extra={"entity_id": str(user_id), "error": str(exc)})
            return profile
        return profile.model_copy(update={"email": email})

    def update_profile(
        self,
        session: Session,
        actor: Principal,
        user_id: uuid.UUID,
        patch: UserProfileUpdate,
    ) -> UserProfileRead:
        return self.update(session, actor, user_id, patch)

    def update_attorney_profile(
        self,
        session: Session,
        actor: Principal,
        user_id: uuid.UUID,
        patch: AttorneyProfileUpdate,
    ) -> UserProfileRead:
        with store_guard(session, "user.update_attorney_profile"):
            row = self._get_row(session, user_id)
            if actor.role not in ADMIN_ROLES and actor.user_id != row.id:
                observe_access_denied(self.family)
                raise Forbidden("You do not have access to this attorney profile")
            attorney = session.scalar(select(AttorneyProfile).where(AttorneyProfile.user_profile_id == user_id))
            if attorney is None:
                raise NotFound("Attorney profile not found")

            changes = patch.changes()
            if changes:
                for key, value in changes.items():
                    setattr(attorney, key, value)
                session.commit()
            return self._to_read(session, row)

    def list_users(
        self,
        session: Session,
        actor: Principal,
        params: PageParams,
        *,
        user_types: list[str] | None = None,
        search: str | None = None,
    ) -> Page[UserProfileRead]:
        return self.list(session, actor, params, filters={"user_types": user_types}, search=search)

    def invite_user(
        self,
        session: Session,
        identity: IdentityProvider,
        actor: Principal,
        payload: UserInvite,
    ) -> UserProfileRead:
        role_profile = _new_attorney_profile if payload.user_type == "attorney" else None
        account = self.provisioner.provision_account(
            session,
            identity,
            email=payload.email,
            full_name=payload.full_name,
            user_type=payload.user_type,
            phone_number=payload.phone_number,
            role_profile=role_profile,
        )
        self.logger.info(
            "user.invited",
            extra={"entity_id": str(account.profile.id), "actor_id": str(actor.user_id), "entity_type": payload.user_type},
        )
        with store_guard(session, "user.invite"):
            profile = self._to_read(session, account.profile)
        return profile.model_copy(update={"email": account.identity.email})

    def delete_user(
        self,
        session: Session,
        identity: IdentityProvider,
        actor: Principal,
        user_id: uuid.UUID,
    ) -> None:
        with store_guard(session, "user.delete"):
            row = self._get_row(session, user_id)
            if row.id == actor.user_id:
                raise ValidationFailure("Cannot delete your own account")
            if row.user_type == "admin":
                admin_count = session.scalar(
                    select(func.count()).select_from(UserProfile).where(UserProfile.user_type == "admin")
                )
                if int(admin_count or 0) <= 1:
                    raise ValidationFailure("Cannot delete the last admin user")

        self.provisioner.delete_account(session, identity, user_id)
        self.logger.info("user.deleted", extra={"entity_id": str(user_id), "actor_id": str(actor.user_id)})

    def _to_read(self, session: Session, row: UserProfile) -> UserProfileRead:
        return UserProfileRead.model_validate(row)

    def _scope(self, query: Select[Any], actor: Principal | None, filters: dict[str, Any]) -> Select[Any]:
        if actor is not None and actor.is_self_scoped:
            return query.where(UserProfile.id == actor.user_id)
        return query

    def _apply_filters(self, query: Select[Any], filters: dict[str, Any]) -> Select[Any]:
        user_types = filters.get("user_types")
        if user_types is not None:
            if not user_types:
                return query.where(false())
            query = query.where(UserProfile.user_type.in_(user_types))
        return query

    def _assert_access(self, actor: Principal, row: UserProfile) -> None:
        if actor.is_staff or actor.user_id == row.id:
            return
        observe_access_denied(self.family)
        raise Forbidden("You do not have access to this user")


user_service = UserService()
