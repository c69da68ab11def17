from __future__ import annotations

import logging
import uuid
from typing import Any, Generic, Literal, TypeVar

from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.sql import Select

from legaldesk.accounts.models import UserProfile
from legaldesk.activity.schemas import ActivityRead
from legaldesk.activity.service import ActivityLog, activity_log
from legaldesk.core.errors import Forbidden, NotFound, ValidationFailure
from legaldesk.metrics import observe_access_denied
from legaldesk.platform.patch import PatchModel
from legaldesk.platform.query import Page, PageParams, apply_equality_filters, apply_search, build_page, paginate
from legaldesk.platform.security import Principal, apply_owner_scope, can_access
from legaldesk.platform.store import store_guard


ModelT = TypeVar("ModelT")
ReadT = TypeVar("ReadT", bound=BaseModel)

EmptyPatchPolicy = Literal["reject", "current"]


class ResourceService(Generic[ModelT, ReadT]):
    """Guarded lifecycle shared by every owned entity family.

    Subclasses bind the model, read schema and per-family allow-lists. Reads
    check existence before access, so a denied caller gets ``Forbidden`` only
    for rows that exist. Mutations commit first and then append to the
    activity log, whose failures never reach the caller.
    """

    model: type[ModelT]
    family: str
    label: str
    owner_attribute: str | None = "client_profile_id"
    sort_columns: tuple[str, ...] = ("created_at", "updated_at")
    search_columns: tuple[str, ...] = ()
    filter_columns: tuple[str, ...] = ()
    status_attribute: str | None = "status"
    assignee_attribute: str | None = None
    empty_patch: EmptyPatchPolicy = "reject"
    emits_activity: bool = True

    def __init__(self, activity: ActivityLog | None = None) -> None:
        self.activity = activity or activity_log
        self.logger = logging.getLogger(f"legaldesk.{self.family}")

    def get(self, session: Session, actor: Principal, resource_id: uuid.UUID) -> ReadT:
        with store_guard(session, f"{self.family}.get"):
            row = self._get_row(session, resource_id)
            self._assert_access(actor, row)
            return self._to_read(session, row)

    def list(
        self,
        session: Session,
        actor: Principal | None,
        params: PageParams,
        *,
        filters: dict[str, Any] | None = None,
        search: str | None = None,
    ) -> Page[ReadT]:
        remaining = dict(filters or {})
        query = self._scope(self._base_query(), actor, remaining)
        query = self._apply_filters(query, remaining)
        query = self._apply_search(query, search)

        with store_guard(session, f"{self.family}.list"):
            rows, total = paginate(session, query, self.model, params, sort_columns=self.sort_columns)
            items = [self._to_read(session, row) for row in rows]
        return build_page(items, total=total, params=params)

    def list_activities(
        self,
        session: Session,
        actor: Principal,
        resource_id: uuid.UUID,
        params: PageParams,
    ) -> Page[ActivityRead]:
        with store_guard(session, f"{self.family}.list_activities"):
            row = self._get_row(session, resource_id)
            self._assert_access(actor, row)
        return self.activity.list_for_parent(session, parent_type=self.family, parent_id=resource_id, params=params)

    def update(self, session: Session, actor: Principal, resource_id: uuid.UUID, patch: PatchModel) -> ReadT:
        with store_guard(session, f"{self.family}.update"):
            row = self._get_row(session, resource_id)
            self._assert_access(actor, row)

            changes = patch.changes()
            if not changes:
                if self.empty_patch == "current":
                    return self._to_read(session, row)
                raise ValidationFailure("No fields to update")

        return self._commit_changes(session, actor, row, changes)

    def _commit_changes(self, session: Session, actor: Principal, row: ModelT, changes: dict[str, Any]) -> ReadT:
        """Apply ``changes`` to a loaded row, commit, then emit status and assignee activities."""

        with store_guard(session, f"{self.family}.update"):
            resource_id = row.id  # type: ignore[attr-defined]
            before = self._snapshot(row)
            changes = self._derive_changes(session, row, changes)
            self._apply_changes(session, row, changes)
            session.commit()
            after = self._snapshot(row)
            if self.assignee_attribute is not None:
                after["assignee_name"] = self._display_name(session, after[self.assignee_attribute])

        self.logger.info(
            f"{self.family}.updated",
            extra={"entity_type": self.family, "entity_id": str(resource_id), "actor_id": str(actor.user_id)},
        )
        self._emit_change_activities(session, actor, resource_id, before, after)
        with store_guard(session, f"{self.family}.update"):
            return self._to_read(session, row)

    def delete(self, session: Session, actor: Principal, resource_id: uuid.UUID) -> None:
        """Hard delete. Callers must restrict this to admin and staff."""

        with store_guard(session, f"{self.family}.delete"):
            row = self._get_row(session, resource_id)
            session.delete(row)
            session.commit()
        self.logger.info(
            f"{self.family}.deleted",
            extra={"entity_type": self.family, "entity_id": str(resource_id), "actor_id": str(actor.user_id)},
        )

    def _insert(
        self,
        session: Session,
        actor: Principal | None,
        row: ModelT,
        *,
        title: str,
        description: str | None = None,
    ) -> ModelT:
        with store_guard(session, f"{self.family}.create"):
            session.add(row)
            session.commit()
            row_id = row.id  # type: ignore[attr-defined]
        self.logger.info(
            f"{self.family}.created",
            extra={
                "entity_type": self.family,
                "entity_id": str(row_id),
                "actor_id": str(actor.user_id) if actor else None,
            },
        )
        self._record(session, actor, row_id, kind="created", title=title, description=description)
        return row

    def _record(
        self,
        session: Session,
        actor: Principal | None,
        parent_id: uuid.UUID,
        *,
        kind: str,
        title: str,
        description: str | None = None,
    ) -> None:
        if not self.emits_activity:
            return
        self.activity.record(
            session,
            parent_type=self.family,
            parent_id=parent_id,
            kind=kind,
            title=title,
            description=description,
            actor_id=actor.user_id if actor else None,
        )

    def _to_read(self, session: Session, row: ModelT) -> ReadT:
        raise NotImplementedError

    def _base_query(self) -> Select[Any]:
        return select(self.model)

    def _scope(self, query: Select[Any], actor: Principal | None, filters: dict[str, Any]) -> Select[Any]:
        if self.owner_attribute is None:
            return query
        requested_owner = filters.pop(self.owner_attribute, None)
        return apply_owner_scope(query, getattr(self.model, self.owner_attribute), actor, requested_owner)

    def _apply_filters(self, query: Select[Any], filters: dict[str, Any]) -> Select[Any]:
        return apply_equality_filters(query, self.model, filters, self.filter_columns)

    def _apply_search(self, query: Select[Any], term: str | None) -> Select[Any]:
        return apply_search(query, self.model, self.search_columns, term)

    def _derive_changes(self, session: Session, row: ModelT, changes: dict[str, Any]) -> dict[str, Any]:
        return changes

    def _apply_changes(self, session: Session, row: ModelT, changes: dict[str, Any]) -> None:
        for key, value in changes.items():
            setattr(row, key, value)

    def _get_row(self, session: Session, resource_id: uuid.UUID) -> ModelT:
        row = session.get(self.model, resource_id)
        if row is None:
            raise NotFound(f"{self.label} not found")
        return row

    def _owner_id(self, row: ModelT) -> uuid.UUID | None:
        if self.owner_attribute is None:
            return None
        return getattr(row, self.owner_attribute)

    def _require_staff(self, actor: Principal, action: str) -> None:
        if actor.is_staff:
            return
        observe_access_denied(self.family)
        raise Forbidden(f"Only staff can {action}")

    def _assert_access(self, actor: Principal, row: ModelT) -> None:
        if can_access(actor, self._owner_id(row)):
            return
        observe_access_denied(self.family)
        raise Forbidden(f"You do not have access to this {self.label.lower()}")

    def _snapshot(self, row: ModelT) -> dict[str, Any]:
        tracked = [name for name in (self.status_attribute, self.assignee_attribute) if name is not None]
        return {name: getattr(row, name) for name in tracked}

    def _emit_change_activities(
        self,
        session: Session,
        actor: Principal,
        resource_id: uuid.UUID,
        before: dict[str, Any],
        after: dict[str, Any],
    ) -> None:
        if self.status_attribute is not None:
            old_status = before.get(self.status_attribute)
            new_status = after.get(self.status_attribute)
            if old_status != new_status:
                self._record(
                    session,
                    actor,
                    resource_id,
                    kind="status_changed",
                    title=f'Status changed from "{old_status}" to "{new_status}"',
                    description=f"from: {old_status}, to: {new_status}",
                )

        if self.assignee_attribute is not None:
            old_assignee = before.get(self.assignee_attribute)
            new_assignee = after.get(self.assignee_attribute)
            if old_assignee != new_assignee:
                title = (
                    f"Assigned to: {after.get('assignee_name') or new_assignee}"
                    if new_assignee is not None
                    else "Assignment cleared"
                )
                self._record(session, actor, resource_id, kind="assignee_changed", title=title)

    @staticmethod
    def _display_name(session: Session, user_id: uuid.UUID | None) -> str | None:
        if user_id is None:
            return None
        profile = session.get(UserProfile, user_id)
        return profile.full_name if profile is not None else str(user_id)
