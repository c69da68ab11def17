from legaldesk.platform.security.access import can_access
from legaldesk.platform.security.context import ADMIN_ROLES, STAFF_ROLES, Principal, UserType
from legaldesk.platform.security.rls import apply_owner_scope

__all__ = [
    "ADMIN_ROLES",
    "STAFF_ROLES",
    "Principal",
    "UserType",
    "apply_owner_scope",
    "can_access",
]
