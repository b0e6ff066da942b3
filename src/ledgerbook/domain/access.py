"""Caller context and role gating.

The ledger never authenticates anyone. Whoever calls a service hands in an
already-resolved ``Caller`` and every query is scoped to ``caller.tenant_id``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from ledgerbook.domain.errors import PermissionDeniedError, ValidationError, role_not_allowed


class Role(str, Enum):
    """Roles issued by the identity service."""

    OWNER = "OWNER"
    FINANCE = "FINANCE"
    MANAGER = "MANAGER"
    STAFF = "STAFF"
    SUPERADMIN = "SUPERADMIN"


# Mutations of accounts, entries, batches, trees; reconciliation
WRITE_ROLES = frozenset({Role.OWNER, Role.FINANCE})
# Account update / deactivation
OWNER_ROLES = frozenset({Role.OWNER})
# Accounts, trees, statements
READ_ROLES = frozenset({Role.OWNER, Role.FINANCE, Role.MANAGER})
# Entry listing
ENTRY_READ_ROLES = frozenset({Role.OWNER, Role.FINANCE, Role.MANAGER, Role.STAFF})
SYSTEM_ROLES = frozenset({Role.SUPERADMIN})


@dataclass(frozen=True)
class Caller:
    """Authenticated identity with its resolved tenant."""

    id: str
    tenant_id: str
    role: Role

    @classmethod
    def of(cls, id: str, tenant_id: str, role: str | Role) -> "Caller":
        """Build a caller from loosely-typed values (CLI, env)."""
        if not tenant_id:
            raise ValidationError("Caller has no tenant")
        try:
            resolved = role if isinstance(role, Role) else Role(str(role).upper())
        except ValueError:
            raise ValidationError(f"Unknown role '{role}'")
        return cls(id=id, tenant_id=tenant_id, role=resolved)


def require_role(caller: Caller, allowed: Iterable[Role], action: str) -> None:
    """Raise PermissionDeniedError unless the caller's role is allowed.

    SUPERADMIN passes every gate.
    """
    if caller.role == Role.SUPERADMIN:
        return
    if caller.role not in allowed:
        raise PermissionDeniedError(role_not_allowed(caller.role.value, action))
