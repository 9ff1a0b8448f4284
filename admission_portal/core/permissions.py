# admission_portal/core/permissions.py
from dataclasses import dataclass
from typing import Iterable, Optional

from admission_portal.core.errors import Forbidden
from admission_portal.models.account import Role

STUDENT = Role.STUDENT.value
STAFF = Role.STAFF.value
ADMIN = Role.ADMIN.value

PRIVILEGED = frozenset({STAFF, ADMIN})
ADMIN_ONLY = frozenset({ADMIN})


@dataclass(frozen=True)
class Principal:
    """Authenticated caller, resolved from the credential token."""
    account_id: str
    role: str
    name: Optional[str] = None
    email: Optional[str] = None


def authorize(
    principal: Principal,
    *,
    roles: Optional[Iterable[str]] = None,
    owner_id: Optional[str] = None,
    bypass_roles: Iterable[str] = PRIVILEGED,
) -> Principal:
    """
    Single capability check used by every handler.

    - roles: if given, the caller's role must be one of them.
    - owner_id: if given, the caller must own the resource unless their
      role is in bypass_roles (staff/admin by default).
    """
    if roles is not None and principal.role not in set(roles):
        raise Forbidden()
    if owner_id is not None and principal.role not in set(bypass_roles):
        if principal.account_id != str(owner_id):
            raise Forbidden()
    return principal
