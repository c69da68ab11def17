from __future__ import annotations

import uuid

from legaldesk.platform.security.context import STAFF_ROLES, Principal


def can_access(principal: Principal, owner_id: uuid.UUID | None) -> bool:
    if principal.role in STAFF_ROLES:
        return True
    if principal.linked_owner_id is None or owner_id is None:
        return False
    return principal.linked_owner_id == owner_id
