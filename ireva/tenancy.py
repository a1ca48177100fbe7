"""Tenant isolation guardrails.

Every tenant-owned resource access goes through :func:`authorize_tenant`.
The rule fails closed: a principal without a tenant never matches a
tenant-scoped resource.  Platform operators cross tenant boundaries.
"""

from __future__ import annotations

import logging

from ireva.decision import Allowed, Decision, Denied, DenialReason
from ireva.principal import Principal
from ireva.rbac import is_operator

logger = logging.getLogger("ireva.tenancy")


def authorize_tenant(principal: Principal, resource_tenant_id: str | None) -> Decision:
    """Tenant gate.

    Returns Allowed for operators, for resources that are not tenant scoped
    (``resource_tenant_id is None``), and for principals whose own tenant
    equals the resource's.  Anything else is a ``tenant_mismatch``.
    """
    if is_operator(principal):
        return Allowed(principal)

    if resource_tenant_id is None:
        return Allowed(principal)

    if principal.tenant_id is not None and principal.tenant_id == resource_tenant_id:
        return Allowed(principal)

    logger.debug(
        "Tenant denied: principal=%s has_tenant=%s",
        principal.id,
        principal.tenant_id is not None,
    )
    return Denied(
        DenialReason.TENANT_MISMATCH,
        f"principal tenant {principal.tenant_id!r} != resource tenant {resource_tenant_id!r}",
    )


def authorize_owner(principal: Principal, owner_id: str | None) -> Decision:
    """Self-or-operator gate for per-user records (KYC files, wallets, ...).

    Operators may act on anyone's record; everyone else only on their own.
    """
    if owner_id is None or is_operator(principal):
        return Allowed(principal)

    if principal.id == owner_id:
        return Allowed(principal)

    return Denied(DenialReason.OWNER_MISMATCH, f"principal {principal.id} is not owner")
