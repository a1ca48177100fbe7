"""Authorization facade.

Single entry point for every protected operation.  The pipeline is linear
and stops at the first denial:

    token -> role gate -> tenant gate -> owner gate -> accreditation gate

The role gate checks the required roles and, when given, the
``(resource, action)`` permission.  The tenant, owner and accreditation
stages only run when the descriptor asks for them.  Nothing here holds
per-request state, so one :class:`Authorizer` is shared by all requests.
"""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from ireva.accreditation import authorize_investor_access
from ireva.auth_providers.base import TokenVerifier
from ireva.auth_providers.jwt_provider import JWTVerifier
from ireva.decision import Allowed, Decision, Denied
from ireva.exceptions import DescriptorError
from ireva.principal import AccreditationLevel, Principal
from ireva.rbac import Permission, Role, authorize_permission, authorize_role
from ireva.tenancy import authorize_owner, authorize_tenant

if TYPE_CHECKING:
    from ireva.config import Settings

logger = logging.getLogger("ireva.authorization")


@dataclass(frozen=True)
class ResourceGateDescriptor:
    """What a call site protects.

    ``tenant_id`` and ``owner_id`` may be left unbound on a static per-route
    descriptor and bound per request with :meth:`for_tenant` and
    :meth:`for_owner`.
    """

    required_roles: frozenset[Role] = field(default_factory=frozenset)
    tenant_scoped: bool = False
    tenant_id: str | None = None
    required_accreditation: AccreditationLevel | None = None
    owner_id: str | None = None
    permission: Permission | None = None

    def __post_init__(self) -> None:
        try:
            roles = frozenset(Role(r) for r in self.required_roles)
        except ValueError as e:
            raise DescriptorError(f"unknown role in required_roles: {e}") from e
        object.__setattr__(self, "required_roles", roles)

        if self.required_accreditation is not None:
            try:
                level = AccreditationLevel(self.required_accreditation)
            except ValueError as e:
                raise DescriptorError(f"unknown accreditation level: {e}") from e
            object.__setattr__(self, "required_accreditation", level)

        if self.permission is not None:
            try:
                permission = Permission.parse(self.permission)
            except (TypeError, ValueError) as e:
                raise DescriptorError(f"invalid permission: {e}") from e
            object.__setattr__(self, "permission", permission)

        if self.tenant_id is not None and not self.tenant_scoped:
            msg = "tenant_id given for a descriptor that is not tenant scoped"
            raise DescriptorError(msg)

    @classmethod
    def build(
        cls,
        *roles: Role | str,
        tenant_scoped: bool = False,
        tenant_id: str | None = None,
        required_accreditation: AccreditationLevel | str | None = None,
        owner_id: str | None = None,
        permission: Permission | str | None = None,
    ) -> ResourceGateDescriptor:
        """Convenience constructor: ``ResourceGateDescriptor.build("admin")``."""
        return cls(
            required_roles=frozenset(roles),
            tenant_scoped=tenant_scoped,
            tenant_id=tenant_id,
            required_accreditation=required_accreditation,
            owner_id=owner_id,
            permission=permission,
        )

    def for_tenant(self, tenant_id: str) -> ResourceGateDescriptor:
        if not self.tenant_scoped:
            raise DescriptorError("cannot bind a tenant to a descriptor that is not tenant scoped")
        return dataclasses.replace(self, tenant_id=tenant_id)

    def for_owner(self, owner_id: str) -> ResourceGateDescriptor:
        return dataclasses.replace(self, owner_id=owner_id)


def _roles(required: Iterable[Role]) -> str:
    return ",".join(sorted(required)) or "*"


class Authorizer:
    """Compose the gates into one ordered pipeline."""

    def __init__(self, verifier: TokenVerifier) -> None:
        self._verifier = verifier

    @classmethod
    def from_settings(cls, settings: Settings) -> Authorizer:
        verifier = JWTVerifier(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            leeway=settings.clock_skew_seconds,
            ttl_seconds=settings.token_ttl_seconds,
        )
        return cls(verifier)

    @property
    def verifier(self) -> TokenVerifier:
        return self._verifier

    def authorize(self, raw_credential: str | None, descriptor: ResourceGateDescriptor) -> Decision:
        """Verify *raw_credential* and run every gate *descriptor* asks for.

        Raises:
            DescriptorError: the descriptor is tenant scoped but no tenant
                was bound to it.
        """
        verified = self._verifier.verify(raw_credential)
        if isinstance(verified, Denied):
            logger.debug("Credential rejected: %s (%s)", verified.reason, verified.detail)
            return verified
        return self.authorize_principal(verified, descriptor)

    def authorize_principal(
        self, principal: Principal, descriptor: ResourceGateDescriptor
    ) -> Decision:
        """Run the gates for an already verified principal."""
        if descriptor.tenant_scoped and descriptor.tenant_id is None:
            msg = "tenant-scoped descriptor evaluated without a bound tenant_id"
            raise DescriptorError(msg)

        decision = authorize_role(principal, descriptor.required_roles)
        if isinstance(decision, Allowed) and descriptor.permission is not None:
            decision = authorize_permission(principal, descriptor.permission)
        if isinstance(decision, Allowed) and descriptor.tenant_scoped:
            decision = authorize_tenant(principal, descriptor.tenant_id)
        if isinstance(decision, Allowed) and descriptor.owner_id is not None:
            decision = authorize_owner(principal, descriptor.owner_id)
        if isinstance(decision, Allowed) and descriptor.required_accreditation is not None:
            decision = authorize_investor_access(principal, descriptor.required_accreditation)

        if isinstance(decision, Denied):
            logger.debug(
                "Denied: principal=%s role=%s reason=%s required_roles=%s",
                principal.id,
                principal.role,
                decision.reason,
                _roles(descriptor.required_roles),
            )
        return decision
