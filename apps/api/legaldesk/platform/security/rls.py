from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import false
from sqlalchemy.orm import InstrumentedAttribute
from sqlalchemy.sql import Select

from legaldesk.platform.security.context import Principal


def apply_owner_scope(
    query: Select[Any],
    owner_column: InstrumentedAttribute[Any],
    principal: Principal | None,
    requested_owner_id: uuid.UUID | None = None,
) -> Select[Any]:
    """Narrow a list query to the rows the principal may see.

    Self-scoped principals always get their own owner id; any owner id the
    caller asked for is replaced, not combined. Staff-tier principals get the
    requested owner filter as-is.
    """

    if principal is not None and principal.is_self_scoped:
        if principal.linked_owner_id is None:
            return query.where(false())
        return query.where(owner_column == principal.linked_owner_id)

    if requested_owner_id is not None:
        return query.where(owner_column == requested_owner_id)
    return query
