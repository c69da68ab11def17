"""Client accounts: a client profile joined 1:1 with the user profile of its login."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from legaldesk.accounts.models import ClientProfile, UserProfile
from legaldesk.accounts.provisioning import AccountProvisioner, account_provisioner
from legaldesk.cases.schemas import CaseRead
from legaldesk.cases.service import CaseService, case_service
from legaldesk.clients.schemas import PROFILE_FIELDS, ClientCreate, ClientRead, ClientUpdate
from legaldesk.invoices.schemas import InvoiceRead
from legaldesk.invoices.service import InvoiceService, invoice_service
from legaldesk.platform.identity import IdentityProvider, IdentityProviderError
from legaldesk.platform.query import Page, PageParams, sanitize_search_term
from legaldesk.platform.resource import ResourceService
from legaldesk.platform.security import Principal
from legaldesk.platform.store import store_guard


class ClientService(ResourceService[ClientProfile, ClientRead]):
    model = ClientProfile
    family = "client"
    label = "Client"
    # A client principal's linked owner id is its client profile id.
    owner_attribute = "id"
    sort_columns = ("created_at", "updated_at", "company_name", "city")
    filter_columns = ("company_type",)
    status_attribute = None
    empty_patch = "current"

    def __init__(
        self,
        provisioner: AccountProvisioner | None = None,
        cases: CaseService | None = None,
        invoices: InvoiceService | None = None,
    ) -> None:
        super().__init__()
        self.provisioner = provisioner or account_provisioner
        self.cases = cases or case_service
        self.invoices = invoices or invoice_service

    def create(
        self,
        session: Session,
        identity: IdentityProvider,
        actor: Principal,
        payload: ClientCreate,
    ) -> ClientRead:
        self._require_staff(actor, "create clients")
        client_fields = payload.client_fields()

        def client_profile(profile_id: uuid.UUID) -> ClientProfile:
            return ClientProfile(user_profile_id=profile_id, **client_fields)

        account = self.provisioner.provision_account(
            session,
            identity,
            email=payload.email,
            full_name=payload.full_name,
            user_type="client",
            phone_number=payload.phone_number,
            role_profile=client_profile,
        )
        client = account.role_profile
        with store_guard(session, "client.create"):
            client_id = client.id
        self.logger.info(
            "client.created",
            extra={"entity_type": self.family, "entity_id": str(client_id), "actor_id": str(actor.user_id)},
        )
        self._record(
            session,
            actor,
            client_id,
            kind="created",
            title="Client created",
            description=payload.company_name or payload.full_name,
        )
        with store_guard(session, "client.create"):
            return self._to_read(session, client).model_copy(update={"email": account.identity.email})

    def get_client(
        self,
        session: Session,
        actor: Principal,
        client_id: uuid.UUID,
        identity: IdentityProvider | None = None,
    ) -> ClientRead:
        client = self.get(session, actor, client_id)
        if identity is None:
            return client
        try:
            email = identity.get_user_by_id(client.user_profile_id).email
        except IdentityProviderError as exc:
            self.logger.warning(
                "client.email_lookup_failed",
                extra={"entity_id": str(client_id), "identity_id": str(client.user_profile_id), "error": str(exc)},
            )
            return client
        return client.model_copy(update={"email": email})

    def list_clients(
        self,
        session: Session,
        actor: Principal,
        params: PageParams,
        *,
        company_type: str | None = None,
        city: str | None = None,
        search: str | None = None,
    ) -> Page[ClientRead]:
        self._require_staff(actor, "list clients")
        return self.list(session, actor, params, filters={"company_type": company_type, "city": city}, search=search)

    def update_client(
        self,
        session: Session,
        actor: Principal,
        client_id: uuid.UUID,
        patch: ClientUpdate,
    ) -> ClientRead:
        return self.update(session, actor, client_id, patch)

    def delete_client(
        self,
        session: Session,
        identity: IdentityProvider,
        actor: Principal,
        client_id: uuid.UUID,
    ) -> None:
        """Delete the login, then the user profile; the client profile and owned rows cascade."""

        with store_guard(session, "client.delete"):
            row = self._get_row(session, client_id)
            user_profile_id = row.user_profile_id
        self.provisioner.delete_account(session, identity, user_profile_id)
        self.logger.info(
            "client.deleted",
            extra={"entity_type": self.family, "entity_id": str(client_id), "actor_id": str(actor.user_id)},
        )

    def list_cases(
        self,
        session: Session,
        actor: Principal,
        client_id: uuid.UUID,
        params: PageParams,
    ) -> Page[CaseRead]:
        self._check_client(session, actor, client_id, "client.list_cases")
        return self.cases.list(session, actor, params, filters={"client_profile_id": client_id})

    def list_invoices(
        self,
        session: Session,
        actor: Principal,
        client_id: uuid.UUID,
        params: PageParams,
    ) -> Page[InvoiceRead]:
        self._check_client(session, actor, client_id, "client.list_invoices")
        return self.invoices.list(session, actor, params, filters={"client_profile_id": client_id})

    def _check_client(self, session: Session, actor: Principal, client_id: uuid.UUID, operation: str) -> None:
        with store_guard(session, operation):
            row = self._get_row(session, client_id)
            self._assert_access(actor, row)

    def _base_query(self) -> Select[Any]:
        return select(ClientProfile).join(UserProfile, ClientProfile.user_profile_id == UserProfile.id)

    def _apply_filters(self, query: Select[Any], filters: dict[str, Any]) -> Select[Any]:
        city = sanitize_search_term(filters.pop("city", None))
        if city is not None:
            query = query.where(ClientProfile.city.ilike(f"%{city}%"))
        return super()._apply_filters(query, filters)

    def _apply_search(self, query: Select[Any], term: str | None) -> Select[Any]:
        cleaned = sanitize_search_term(term)
        if cleaned is None:
            return query
        pattern = f"%{cleaned}%"
        return query.where(or_(ClientProfile.company_name.ilike(pattern), UserProfile.full_name.ilike(pattern)))

    def _apply_changes(self, session: Session, row: ClientProfile, changes: dict[str, Any]) -> None:
        for key, value in changes.items():
            target = row.user if key in PROFILE_FIELDS else row
            setattr(target, key, value)

    def _to_read(self, session: Session, row: ClientProfile) -> ClientRead:
        user = row.user
        return ClientRead(
            id=row.id,
            user_profile_id=row.user_profile_id,
            full_name=user.full_name,
            phone_number=user.phone_number,
            company_name=row.company_name,
            company_type=row.company_type,
            tax_id=row.tax_id,
            address=row.address,
            city=row.city,
            country=row.country,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


client_service = ClientService()
