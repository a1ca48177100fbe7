"""KYC and accreditation gating for investment-grade resources.

Identity verification comes first: until a principal's KYC status is
``verified`` its accreditation level is irrelevant.  Operators bypass the
gate through the same :func:`~ireva.rbac.is_operator` rule the tenant gate
uses.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ireva.decision import Allowed, Decision, Denied, DenialReason
from ireva.exceptions import DescriptorError
from ireva.principal import AccreditationLevel, Principal, accreditation_at_least
from ireva.rbac import is_operator

logger = logging.getLogger("ireva.accreditation")


@dataclass(frozen=True)
class InvestmentResource:
    """Accreditation flags of a property or offering."""

    accreditation_gated: bool = False
    required_accreditation: AccreditationLevel = AccreditationLevel.NONE

    def __post_init__(self) -> None:
        if not self.accreditation_gated and self.required_accreditation is not AccreditationLevel.NONE:
            msg = "required_accreditation set on a resource that is not accreditation gated"
            raise DescriptorError(msg)


def authorize_investor_access(
    principal: Principal, required_accreditation: AccreditationLevel | None
) -> Decision:
    """Accreditation gate.

    Denied with ``kyc_unverified`` while KYC is not verified, otherwise
    Allowed iff the principal's level is at least *required_accreditation*.
    """
    if is_operator(principal):
        return Allowed(principal)

    if not principal.is_kyc_verified:
        logger.debug("KYC unverified: principal=%s status=%s", principal.id, principal.kyc_status)
        return Denied(DenialReason.KYC_UNVERIFIED, f"kyc status {principal.kyc_status}")

    if accreditation_at_least(principal.accreditation_level, required_accreditation):
        return Allowed(principal)

    return Denied(
        DenialReason.ACCREDITATION_INSUFFICIENT,
        f"level {principal.accreditation_level} below {required_accreditation}",
    )


def can_access_property(principal: Principal, resource: InvestmentResource) -> Decision:
    """Property-level check used by listing and detail pages.

    Ungated properties are open to any authenticated principal, KYC or not.
    Gated ones go through :func:`authorize_investor_access`.
    """
    if not resource.accreditation_gated:
        return Allowed(principal)
    return authorize_investor_access(principal, resource.required_accreditation)
