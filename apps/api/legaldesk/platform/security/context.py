from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Literal


UserType = Literal["client", "attorney", "staff", "admin"]

STAFF_ROLES: frozenset[str] = frozenset({"admin", "staff", "attorney"})
ADMIN_ROLES: frozenset[str] = frozenset({"admin", "staff"})


@dataclass(frozen=True, slots=True)
class Principal:
    """An authenticated caller.

    ``linked_owner_id`` is the client profile id of a ``client`` principal and
    ``None`` for staff-tier roles, which pass every ownership check.
    """

    user_id: uuid.UUID
    role: UserType
    linked_owner_id: uuid.UUID | None = None
    email: str | None = None
    correlation_id: str | None = None

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_self_scoped(self) -> bool:
        return self.role not in STAFF_ROLES
