"""FastAPI adapter for the authorization facade.

Clients supply credentials via the ``Authorization: Bearer <token>`` header.
Routes declare what they protect with a :class:`ResourceGateDescriptor`::

    @router.get("/tenants/{tenant_id}/properties")
    async def list_properties(
        ctx: RequestContext = Depends(
            require_access(ResourceGateDescriptor.build(tenant_scoped=True))
        ),
    ): ...

On success the dependency returns a :class:`RequestContext`; on denial it
raises :class:`~ireva.exceptions.AccessDenied`, which the application's
error handler renders as 401 or 403.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fastapi import Request

from ireva.auth_providers.jwt_provider import extract_bearer
from ireva.authorization import Authorizer, ResourceGateDescriptor
from ireva.decision import DenialReason, Denied, UNAUTHENTICATED_REASONS
from ireva.exceptions import AccessDenied, ConfigurationError
from ireva.principal import Principal
from ireva.rbac import Role

_audit_logger = logging.getLogger("ireva.audit")

#: Transport status for every denial reason.
DENIAL_STATUS: dict[DenialReason, int] = {
    reason: 401 if reason in UNAUTHENTICATED_REASONS else 403 for reason in DenialReason
}


@dataclass(frozen=True)
class RequestContext:
    """Typed per-request context handed to route handlers."""

    principal: Principal
    request_id: str


def extract_token(request: Request) -> str | None:
    return extract_bearer(request.headers.get("Authorization"))


def get_authorizer(request: Request) -> Authorizer:
    authorizer = getattr(request.app.state, "authorizer", None)
    if authorizer is None:
        msg = "Authorizer not configured on application state"
        raise ConfigurationError(msg)
    return authorizer


def _bind(
    request: Request,
    descriptor: ResourceGateDescriptor,
    tenant_param: str | None,
    owner_param: str | None,
) -> ResourceGateDescriptor:
    if descriptor.tenant_scoped and descriptor.tenant_id is None and tenant_param:
        tenant_id = request.path_params.get(tenant_param)
        if tenant_id is not None:
            descriptor = descriptor.for_tenant(str(tenant_id))
    if owner_param and descriptor.owner_id is None:
        owner_id = request.path_params.get(owner_param)
        if owner_id is not None:
            descriptor = descriptor.for_owner(str(owner_id))
    return descriptor


def audit_denial(request: Request, denied: Denied) -> None:
    _audit_logger.warning(
        "Auth failure (%s): %s %s from %s",
        denied.reason,
        request.method,
        request.url.path,
        request.client.host if request.client else "unknown",
        extra={
            "event_category": "audit",
            "action": "auth_failure",
            "reason": denied.reason.value,
            "path": request.url.path,
            "method": request.method,
            "request_id": getattr(request.state, "request_id", None),
        },
    )
    _audit_logger.debug("Denial detail: %s", denied.detail)


def require_access(
    descriptor: ResourceGateDescriptor,
    *,
    tenant_param: str | None = "tenant_id",
    owner_param: str | None = None,
):
    """Dependency factory: run the full pipeline for *descriptor*.

    A tenant-scoped descriptor without a bound tenant takes it from the path
    parameter named *tenant_param*; *owner_param* does the same for the
    owner check.
    """

    async def _check(request: Request) -> RequestContext:
        authorizer = get_authorizer(request)
        bound = _bind(request, descriptor, tenant_param, owner_param)
        decision = authorizer.authorize(extract_token(request), bound)
        if isinstance(decision, Denied):
            audit_denial(request, decision)
            raise AccessDenied(decision.reason)
        return RequestContext(
            principal=decision.principal,
            request_id=getattr(request.state, "request_id", "unknown"),
        )

    return _check


def require_role(*roles: Role | str):
    """Dependency factory: require one of *roles* (hierarchy applies).

    Usage::

        @app.post("/admin/thing", dependencies=[Depends(require_role("admin"))])
        async def admin_thing(): ...
    """
    return require_access(ResourceGateDescriptor.build(*roles))


#: Any authenticated principal.
require_authenticated = require_access(ResourceGateDescriptor())
