"""Multi-step account creation and deletion across the identity provider and the store.

The identity provider and the database cannot share a transaction, so
provisioning compensates instead: each completed step is undone in reverse
order when a later step fails. Between step 1 and step 2 the identity exists
without a profile; concurrent readers can observe that window.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from legaldesk.accounts.models import UserProfile
from legaldesk.core.errors import StorageFailure, ValidationFailure
from legaldesk.metrics import observe_compensation_failure
from legaldesk.otel import get_tracer, traced
from legaldesk.platform.identity import IdentityProvider, IdentityProviderError, IdentityUser


logger = logging.getLogger("legaldesk.accounts")
tracer = get_tracer("legaldesk.accounts")

DUPLICATE_EMAIL_MESSAGE = "Unable to create user account. The email may already be registered."

RoleProfileFactory = Callable[[uuid.UUID], Any]


@dataclass(frozen=True, slots=True)
class ProvisionedAccount:
    identity: IdentityUser
    profile: UserProfile
    role_profile: Any | None = None


class AccountProvisioner:
    def provision_account(
        self,
        session: Session,
        identity: IdentityProvider,
        *,
        email: str,
        full_name: str,
        user_type: str,
        phone_number: str | None = None,
        role_profile: RoleProfileFactory | None = None,
    ) -> ProvisionedAccount:
        """Invite the identity, then insert the profile, then the optional role profile."""

        with traced(tracer, "account.provision", user_type=user_type):
            try:
                identity_user = identity.invite_user(email, metadata={"full_name": full_name, "user_type": user_type})
            except IdentityProviderError as exc:
                logger.error(
                    "account.identity_create_failed",
                    extra={"step": "identity_invite", "error": str(exc)},
                )
                if exc.duplicate:
                    raise ValidationFailure.duplicate(DUPLICATE_EMAIL_MESSAGE) from exc
                raise StorageFailure() from exc

            profile = UserProfile(
                id=identity_user.id,
                full_name=full_name,
                phone_number=phone_number,
                user_type=user_type,
            )
            try:
                self._insert(session, profile)
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error(
                    "account.profile_create_failed",
                    exc_info=exc,
                    extra={"step": "profile_insert", "identity_id": str(identity_user.id), "error": str(exc)},
                )
                self._compensate_identity(identity, identity_user.id, failed_step="profile_insert")
                raise StorageFailure() from exc

            if role_profile is None:
                return ProvisionedAccount(identity=identity_user, profile=profile)

            role_row = role_profile(profile.id)
            try:
                self._insert(session, role_row)
            except SQLAlchemyError as exc:
                session.rollback()
                logger.error(
                    "account.role_profile_create_failed",
                    exc_info=exc,
                    extra={"step": "role_profile_insert", "identity_id": str(identity_user.id), "error": str(exc)},
                )
                self._compensate_profile(session, identity_user.id, failed_step="role_profile_insert")
                self._compensate_identity(identity, identity_user.id, failed_step="role_profile_insert")
                raise StorageFailure() from exc

            logger.info(
                "account.provisioned",
                extra={"identity_id": str(identity_user.id), "entity_type": user_type},
            )
            return ProvisionedAccount(identity=identity_user, profile=profile, role_profile=role_row)

    def delete_account(self, session: Session, identity: IdentityProvider, user_profile_id: uuid.UUID) -> None:
        """Delete the login first, then the profile rows.

        An identity that is already gone counts as deleted. Any other identity
        failure stops before the profile is touched.
        """

        with traced(tracer, "account.delete", identity_id=user_profile_id):
            try:
                identity.delete_user(user_profile_id)
            except IdentityProviderError as exc:
                if not exc.not_found:
                    logger.error(
                        "account.identity_delete_failed",
                        extra={"step": "identity_delete", "identity_id": str(user_profile_id), "error": str(exc)},
                    )
                    raise StorageFailure() from exc
                logger.warning(
                    "account.identity_already_deleted",
                    extra={"step": "identity_delete", "identity_id": str(user_profile_id)},
                )

            try:
                session.execute(delete(UserProfile).where(UserProfile.id == user_profile_id))
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                observe_compensation_failure("profile_delete")
                logger.critical(
                    "account.profile_delete_failed",
                    exc_info=exc,
                    extra={
                        "step": "profile_delete",
                        "identity_id": str(user_profile_id),
                        "manual_cleanup_required": True,
                        "error": str(exc),
                    },
                )
                raise StorageFailure() from exc

            logger.info("account.deleted", extra={"identity_id": str(user_profile_id)})

    def _insert(self, session: Session, row: Any) -> None:
        session.add(row)
        session.commit()

    def _compensate_identity(self, identity: IdentityProvider, identity_id: uuid.UUID, *, failed_step: str) -> None:
        try:
            identity.delete_user(identity_id)
        except IdentityProviderError as exc:
            observe_compensation_failure("identity_delete")
            logger.critical(
                "account.compensation_failed",
                extra={
                    "step": f"{failed_step}:identity_delete",
                    "identity_id": str(identity_id),
                    "manual_cleanup_required": True,
                    "error": str(exc),
                },
            )

    def _compensate_profile(self, session: Session, profile_id: uuid.UUID, *, failed_step: str) -> None:
        try:
            session.execute(delete(UserProfile).where(UserProfile.id == profile_id))
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            observe_compensation_failure("profile_delete")
            logger.critical(
                "account.compensation_failed",
                extra={
                    "step": f"{failed_step}:profile_delete",
                    "identity_id": str(profile_id),
                    "manual_cleanup_required": True,
                    "error": str(exc),
                },
            )


account_provisioner = AccountProvisioner()
