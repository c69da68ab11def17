from __future__ import annotations

import calendar
import uuid
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from legaldesk.core.errors import Forbidden, NotFound, ValidationFailure
from legaldesk.platform.query import Page, PageParams
from legaldesk.platform.resource import ResourceService
from legaldesk.platform.security import Principal
from legaldesk.platform.store import store_guard
from legaldesk.subscriptions.models import Subscription
from legaldesk.subscriptions.schemas import SubscriptionRead, SubscriptionUpdate


ACTIVATABLE_STATUSES = frozenset({"pending", "past_due"})


class SubscriptionService(ResourceService[Subscription, SubscriptionRead]):
    model = Subscription
    family = "subscription"
    label = "Subscription"
    sort_columns = ("created_at", "updated_at", "status", "current_period_start", "current_period_end")
    filter_columns = ("status",)
    empty_patch = "current"

    def create(self, session: Session, actor: Principal) -> SubscriptionRead:
        owner_id = self._client_owner(actor, "Only clients can create subscriptions")
        with store_guard(session, "subscription.create"):
            existing = session.scalar(select(Subscription).where(Subscription.client_profile_id == owner_id))

        if existing is None:
            row = self._insert(session, actor, Subscription(client_profile_id=owner_id), title="Subscription created")
            with store_guard(session, "subscription.create"):
                return self._to_read(session, row)

        if existing.status == "active":
            raise Forbidden("You already have an active subscription")
        return self._commit_changes(
            session,
            actor,
            existing,
            {"status": "pending", "cancelled_at": None, "cancellation_reason": None},
        )

    def get_mine(self, session: Session, actor: Principal) -> SubscriptionRead:
        owner_id = self._client_owner(actor, "Only clients have a subscription")
        with store_guard(session, "subscription.get_mine"):
            row = session.scalar(select(Subscription).where(Subscription.client_profile_id == owner_id))
            if row is None:
                raise NotFound("No subscription found for this client")
            return self._to_read(session, row)

    def is_active(self, session: Session, owner_id: uuid.UUID | None) -> bool:
        if owner_id is None:
            return False
        with store_guard(session, "subscription.is_active"):
            found = session.scalar(
                select(Subscription.id).where(
                    Subscription.client_profile_id == owner_id,
                    Subscription.status == "active",
                )
            )
        return found is not None

    def cancel(
        self,
        session: Session,
        actor: Principal,
        subscription_id: uuid.UUID,
        reason: str | None = None,
    ) -> SubscriptionRead:
        with store_guard(session, "subscription.cancel"):
            row = self._get_row(session, subscription_id)
            self._assert_access(actor, row)
            if row.status != "active":
                raise ValidationFailure("Only active subscriptions can be cancelled")
        return self._commit_changes(
            session,
            actor,
            row,
            {"status": "cancelled", "cancelled_at": datetime.now(timezone.utc), "cancellation_reason": reason},
        )

    def activate(self, session: Session, actor: Principal, subscription_id: uuid.UUID) -> SubscriptionRead:
        """Mark a subscription paid for one period, starting now."""

        self._require_staff(actor, "activate subscriptions")
        with store_guard(session, "subscription.activate"):
            row = self._get_row(session, subscription_id)
            if row.status not in ACTIVATABLE_STATUSES:
                raise ValidationFailure(f"Cannot activate subscription with status: {row.status}")
        started = datetime.now(timezone.utc)
        return self._commit_changes(
            session,
            actor,
            row,
            {"status": "active", "current_period_start": started, "current_period_end": self._add_months(started, 1)},
        )

    def list_subscriptions(
        self,
        session: Session,
        actor: Principal,
        params: PageParams,
        *,
        status: str | None = None,
    ) -> Page[SubscriptionRead]:
        self._require_staff(actor, "list subscriptions")
        return self.list(session, actor, params, filters={"status": status})

    def update_subscription(
        self,
        session: Session,
        actor: Principal,
        subscription_id: uuid.UUID,
        patch: SubscriptionUpdate,
    ) -> SubscriptionRead:
        self._require_staff(actor, "update subscriptions")
        return self.update(session, actor, subscription_id, patch)

    @staticmethod
    def _add_months(base: datetime, months: int) -> datetime:
        month_index = base.month - 1 + months
        year = base.year + (month_index // 12)
        month = month_index % 12 + 1
        day = min(base.day, calendar.monthrange(year, month)[1])
        return base.replace(year=year, month=month, day=day)

    def _client_owner(self, actor: Principal, message: str) -> uuid.UUID:
        if actor.role != "client" or actor.linked_owner_id is None:
            raise ValidationFailure(message)
        return actor.linked_owner_id

    def _to_read(self, session: Session, row: Subscription) -> SubscriptionRead:
        return SubscriptionRead.model_validate(row)


subscription_service = SubscriptionService()
