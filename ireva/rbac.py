"""Role-Based Access Control for iREVA.

Defines the role hierarchy, the operator set shared by the tenant and
investor gates, the per-role permission matrix, and the role gate itself.

Roles:
    super_admin — Platform owner; inherits everything ``admin`` may do
    admin       — Platform operator; acts across tenants
    tenant      — Tenant-organisation account; scoped to its own tenant
    user        — Investor account
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from ireva.decision import Allowed, Decision, Denied, DenialReason

if TYPE_CHECKING:
    from ireva.principal import Principal

logger = logging.getLogger("ireva.rbac")


class Role(StrEnum):
    """Enumerated platform roles."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    TENANT = "tenant"
    USER = "user"


#: Mapping from each role to the set of roles it implicitly includes.
#: ``tenant`` and ``user`` are separate principal classes, not privilege
#: levels, so neither includes the other.
ROLE_INCLUDES: dict[Role, frozenset[Role]] = {
    Role.SUPER_ADMIN: frozenset({Role.SUPER_ADMIN, Role.ADMIN}),
    Role.ADMIN: frozenset({Role.ADMIN}),
    Role.TENANT: frozenset({Role.TENANT}),
    Role.USER: frozenset({Role.USER}),
}

#: Roles that bypass tenant, ownership and accreditation restrictions.
OPERATOR_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.SUPER_ADMIN})


def is_operator(principal: Principal) -> bool:
    """Return True for platform operators (``admin``, ``super_admin``)."""
    return principal.role in OPERATOR_ROLES


def expand_required_roles(required: Iterable[Role | str]) -> frozenset[Role]:
    """Return every role that satisfies at least one role in *required*.

    ``{admin}`` expands to ``{admin, super_admin}``; ``{super_admin}`` stays
    as it is.

    Raises:
        ValueError: *required* names a role outside :class:`Role`.
    """
    wanted = {Role(r) for r in required}
    return frozenset(role for role, includes in ROLE_INCLUDES.items() if includes & wanted)


def has_role(role: Role | str, required: Role | str) -> bool:
    """Check whether *role* satisfies *required*, respecting hierarchy."""
    try:
        role = Role(role)
    except ValueError:
        return False
    return Role(required) in ROLE_INCLUDES[role]


def authorize_role(
    principal: Principal | None, required_roles: Iterable[Role | str]
) -> Decision:
    """Role gate.

    An empty *required_roles* means "any authenticated principal".  A
    missing principal is reported as ``unauthenticated`` so the boundary can
    answer 401 instead of 403.
    """
    if principal is None:
        return Denied(DenialReason.UNAUTHENTICATED, "no principal")

    required = frozenset(Role(r) for r in required_roles)
    if not required:
        return Allowed(principal)

    if principal.role in expand_required_roles(required):
        return Allowed(principal)

    logger.debug(
        "Role denied: principal=%s role=%s required=%s",
        principal.id,
        principal.role,
        ",".join(sorted(required)),
    )
    return Denied(
        DenialReason.ROLE_FORBIDDEN,
        f"role {principal.role} not in {sorted(required)}",
    )


# ---------------------------------------------------------------------------
# Permission matrix
# ---------------------------------------------------------------------------

RESOURCES: frozenset[str] = frozenset(
    {
        "users",
        "properties",
        "investments",
        "transactions",
        "kyc",
        "documents",
        "notifications",
        "wallets",
        "reports",
    }
)
ACTIONS: frozenset[str] = frozenset({"read", "create", "update", "delete"})
OWN_SUFFIX = "_own"

_CRUD = frozenset(ACTIONS)

#: Actions each role may perform per resource.  An ``*_own`` entry only
#: covers records the principal owns; a plain entry covers ``*_own`` too.
#: ``super_admin`` inherits the ``admin`` row through :data:`ROLE_INCLUDES`.
ROLE_PERMISSIONS: dict[Role, dict[str, frozenset[str]]] = {
    Role.ADMIN: {
        "users": _CRUD,
        "properties": _CRUD,
        "investments": _CRUD,
        "transactions": _CRUD,
        "kyc": _CRUD,
        "documents": _CRUD,
        "notifications": _CRUD,
        "wallets": frozenset({"read", "update"}),
        "reports": frozenset({"read", "create"}),
    },
    Role.TENANT: {
        "users": frozenset({"read"}),
        "properties": frozenset({"read", "create", "update"}),
        "investments": frozenset({"read", "update"}),
        "transactions": frozenset({"read"}),
        "kyc": frozenset({"read", "update"}),
        "documents": frozenset({"read", "create", "update"}),
        "notifications": frozenset({"read", "create"}),
        "wallets": frozenset({"read"}),
        "reports": frozenset({"read"}),
    },
    Role.USER: {
        "users": frozenset({"read_own"}),
        "properties": frozenset({"read"}),
        "investments": frozenset({"read_own", "create_own"}),
        "transactions": frozenset({"read_own", "create_own"}),
        "kyc": frozenset({"read_own", "create_own"}),
        "documents": frozenset({"read_own", "create_own"}),
        "notifications": frozenset({"read_own"}),
        "wallets": frozenset({"read_own", "update_own"}),
        "reports": frozenset({"read_own"}),
    },
}


@dataclass(frozen=True)
class Permission:
    """A ``(resource, action)`` pair such as ``investments:read_own``."""

    resource: str
    action: str

    def __post_init__(self) -> None:
        if self.resource not in RESOURCES:
            msg = f"unknown resource: {self.resource!r}"
            raise ValueError(msg)
        if self.base_action not in ACTIONS:
            msg = f"unknown action: {self.action!r}"
            raise ValueError(msg)

    @property
    def owner_scoped(self) -> bool:
        return self.action.endswith(OWN_SUFFIX)

    @property
    def base_action(self) -> str:
        return self.action.removesuffix(OWN_SUFFIX)

    @classmethod
    def parse(cls, value: Permission | str | tuple[str, str]) -> Permission:
        if isinstance(value, Permission):
            return value
        if isinstance(value, str):
            resource, sep, action = value.partition(":")
            if not sep:
                msg = f"permission must look like 'resource:action', got {value!r}"
                raise ValueError(msg)
            return cls(resource.strip(), action.strip())
        resource, action = value
        return cls(resource, action)

    def __str__(self) -> str:
        return f"{self.resource}:{self.action}"


def role_permits(role: Role | str, permission: Permission) -> bool:
    """Check *permission* against the matrix rows *role* includes.

    ``read_own`` is granted by either ``read_own`` or ``read``; plain
    ``read`` is never granted by ``read_own``.
    """
    try:
        role = Role(role)
    except ValueError:
        return False
    for included in ROLE_INCLUDES[role]:
        granted = ROLE_PERMISSIONS.get(included, {}).get(permission.resource, frozenset())
        if permission.action in granted:
            return True
        if permission.owner_scoped and permission.base_action in granted:
            return True
    return False


def authorize_permission(principal: Principal | None, permission: Permission | None) -> Decision:
    """Permission half of the role stage.

    Owner-scoped actions only decide whether the role may act on its own
    records; the owner gate decides whether this record is one of them.
    """
    if principal is None:
        return Denied(DenialReason.UNAUTHENTICATED, "no principal")
    if permission is None or role_permits(principal.role, permission):
        return Allowed(principal)

    logger.debug(
        "Permission denied: principal=%s role=%s permission=%s",
        principal.id,
        principal.role,
        permission,
    )
    return Denied(
        DenialReason.ROLE_FORBIDDEN,
        f"role {principal.role} lacks {permission}",
    )
