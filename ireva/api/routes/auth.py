"""Auth routes: identity, decision queries and scoped access probes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field, field_validator

from ireva.auth import (
    DENIAL_STATUS,
    RequestContext,
    audit_denial,
    extract_token,
    get_authorizer,
    require_access,
    require_authenticated,
)
from ireva.authorization import ResourceGateDescriptor
from ireva.decision import Allowed
from ireva.exceptions import AccessDenied
from ireva.principal import AccreditationLevel, KycStatus
from ireva.rbac import Permission, Role

router = APIRouter(prefix="/auth", tags=["auth"])
scoped_router = APIRouter(tags=["access"])


class PrincipalInfo(BaseModel):
    id: str
    role: Role
    tenant_id: str | None
    kyc_status: KycStatus
    accreditation_level: AccreditationLevel
    email: str | None


class DecisionRequest(BaseModel):
    required_roles: list[Role] = Field(default_factory=list)
    tenant_id: str | None = None
    owner_id: str | None = None
    required_accreditation: AccreditationLevel | None = None
    permission: str | None = Field(default=None, examples=["investments:read_own"])

    @field_validator("permission")
    @classmethod
    def validate_permission(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return str(Permission.parse(v))

    def to_descriptor(self) -> ResourceGateDescriptor:
        return ResourceGateDescriptor(
            required_roles=frozenset(self.required_roles),
            tenant_scoped=self.tenant_id is not None,
            tenant_id=self.tenant_id,
            owner_id=self.owner_id,
            required_accreditation=self.required_accreditation,
            permission=self.permission,
        )


class DecisionResponse(BaseModel):
    allowed: bool
    reason: str | None = None
    status_code: int = 200


@router.get("/me", response_model=PrincipalInfo)
async def get_me(ctx: RequestContext = Depends(require_authenticated)):
    """Return the principal attached to the caller's token."""
    p = ctx.principal
    return PrincipalInfo(
        id=p.id,
        role=p.role,
        tenant_id=p.tenant_id,
        kyc_status=p.kyc_status,
        accreditation_level=p.accreditation_level,
        email=p.email,
    )


@router.post("/decisions", response_model=DecisionResponse)
async def decide(req: DecisionRequest, request: Request):
    """Evaluate a descriptor against the caller's own credential.

    Credential failures are answered with 401; gate denials come back as
    ``allowed: false`` with the coarse reason code.
    """
    decision = get_authorizer(request).authorize(extract_token(request), req.to_descriptor())
    if isinstance(decision, Allowed):
        return DecisionResponse(allowed=True)
    audit_denial(request, decision)
    if decision.is_authentication_failure:
        raise AccessDenied(decision.reason)
    return DecisionResponse(
        allowed=False,
        reason=decision.reason.value,
        status_code=DENIAL_STATUS[decision.reason],
    )


@scoped_router.get("/tenants/{tenant_id}/access")
async def tenant_access(
    tenant_id: str,
    ctx: RequestContext = Depends(require_access(ResourceGateDescriptor(tenant_scoped=True))),
):
    """Succeeds only for members of *tenant_id* and platform operators."""
    return {"tenant_id": tenant_id, "principal_id": ctx.principal.id}


@scoped_router.get("/users/{user_id}/access")
async def owner_access(
    user_id: str,
    ctx: RequestContext = Depends(require_access(ResourceGateDescriptor(), owner_param="user_id")),
):
    """Succeeds for the user themself and platform operators."""
    return {"user_id": user_id, "principal_id": ctx.principal.id}

