"""Authorization outcomes.

Every gate returns a :data:`Decision`; a denial is a value, not an
exception.  Only the HTTP adapter turns a :class:`Denied` into an error.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Union

if TYPE_CHECKING:
    from ireva.principal import Principal


class DenialReason(StrEnum):
    """Coarse reason codes safe to expose to clients."""

    NO_TOKEN = "no_token"
    INVALID_TOKEN = "invalid_token"
    UNAUTHENTICATED = "unauthenticated"
    ROLE_FORBIDDEN = "role_forbidden"
    TENANT_MISMATCH = "tenant_mismatch"
    OWNER_MISMATCH = "owner_mismatch"
    KYC_UNVERIFIED = "kyc_unverified"
    ACCREDITATION_INSUFFICIENT = "accreditation_insufficient"


#: Reasons that mean "who are you?" rather than "you may not".
UNAUTHENTICATED_REASONS: frozenset[DenialReason] = frozenset(
    {DenialReason.NO_TOKEN, DenialReason.INVALID_TOKEN, DenialReason.UNAUTHENTICATED}
)


@dataclass(frozen=True)
class Allowed:
    principal: Principal

    @property
    def allowed(self) -> bool:
        return True


@dataclass(frozen=True)
class Denied:
    """A denial.  ``detail`` is for logs only and must not reach clients."""

    reason: DenialReason
    detail: str = ""

    @property
    def allowed(self) -> bool:
        return False

    @property
    def is_authentication_failure(self) -> bool:
        return self.reason in UNAUTHENTICATED_REASONS


Decision = Union[Allowed, Denied]
