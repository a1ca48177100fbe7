"""The authenticated principal and the investor-status enumerations it carries.

A :class:`Principal` is rebuilt from verified token claims on every request
and never persisted or mutated.  Claim names follow the platform's JWT
payload (``tenantId``, ``kycStatus``, ``accreditationLevel``) but the
snake_case spellings are accepted as well.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from ireva.rbac import Role


class KycStatus(StrEnum):
    """Identity-verification state of an investor."""

    NOT_STARTED = "not_started"
    PENDING = "pending"
    INCOMPLETE = "incomplete"
    VERIFIED = "verified"
    REJECTED = "rejected"


class AccreditationLevel(StrEnum):
    """Investor accreditation, totally ordered by :data:`ACCREDITATION_RANK`."""

    NONE = "none"
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


#: Rank used for every accreditation comparison.
ACCREDITATION_RANK: dict[AccreditationLevel, int] = {
    AccreditationLevel.NONE: 0,
    AccreditationLevel.BASIC: 1,
    AccreditationLevel.INTERMEDIATE: 2,
    AccreditationLevel.ADVANCED: 3,
}

# Spellings issued by older parts of the platform.
_ROLE_ALIASES: dict[str, Role] = {"investor": Role.USER, "superadmin": Role.SUPER_ADMIN}
_KYC_ALIASES: dict[str, KycStatus] = {"approved": KycStatus.VERIFIED}


def accreditation_at_least(
    level: AccreditationLevel | None, required: AccreditationLevel | None
) -> bool:
    """Return True when *level* meets *required*.

    A missing level counts as ``none``; a missing requirement is always met.
    """
    have = ACCREDITATION_RANK[level or AccreditationLevel.NONE]
    need = ACCREDITATION_RANK[required or AccreditationLevel.NONE]
    return have >= need


def parse_role(value: Any) -> Role:
    if not isinstance(value, str):
        msg = f"role must be a string, got {type(value).__name__}"
        raise ValueError(msg)
    key = value.strip().lower()
    if key in _ROLE_ALIASES:
        return _ROLE_ALIASES[key]
    return Role(key)


def parse_kyc_status(value: Any) -> KycStatus:
    if value is None:
        return KycStatus.NOT_STARTED
    if not isinstance(value, str):
        msg = f"kycStatus must be a string, got {type(value).__name__}"
        raise ValueError(msg)
    key = value.strip().lower()
    if key in _KYC_ALIASES:
        return _KYC_ALIASES[key]
    return KycStatus(key)


def parse_accreditation(value: Any) -> AccreditationLevel:
    if value is None:
        return AccreditationLevel.NONE
    if not isinstance(value, str):
        msg = f"accreditationLevel must be a string, got {type(value).__name__}"
        raise ValueError(msg)
    return AccreditationLevel(value.strip().lower())


def _first(claims: dict[str, Any], *names: str) -> Any:
    for name in names:
        value = claims.get(name)
        if value is not None:
            return value
    return None


@dataclass(frozen=True)
class Principal:
    """Read-only identity for one request."""

    id: str
    role: Role
    tenant_id: str | None = None
    kyc_status: KycStatus = KycStatus.NOT_STARTED
    accreditation_level: AccreditationLevel = AccreditationLevel.NONE
    email: str | None = None

    @property
    def is_kyc_verified(self) -> bool:
        return self.kyc_status is KycStatus.VERIFIED

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> Principal:
        """Build a principal from a decoded token payload.

        Raises:
            ValueError: a required claim is missing or a value is outside
                its enumeration.
        """
        subject = _first(claims, "sub", "id")
        if subject is None or str(subject).strip() == "":
            raise ValueError("token has no subject")
        if claims.get("role") is None:
            raise ValueError("token has no role")

        tenant_id = _first(claims, "tenantId", "tenant_id")
        if tenant_id is not None:
            tenant_id = str(tenant_id).strip() or None

        email = claims.get("email")
        return cls(
            id=str(subject),
            role=parse_role(claims["role"]),
            tenant_id=tenant_id,
            kyc_status=parse_kyc_status(_first(claims, "kycStatus", "kyc_status")),
            accreditation_level=parse_accreditation(
                _first(claims, "accreditationLevel", "accreditation_level")
            ),
            email=str(email) if email is not None else None,
        )

    def to_claims(self) -> dict[str, Any]:
        """Inverse of :meth:`from_claims`, without timing claims."""
        claims: dict[str, Any] = {
            "sub": self.id,
            "role": self.role.value,
            "kycStatus": self.kyc_status.value,
            "accreditationLevel": self.accreditation_level.value,
        }
        if self.tenant_id is not None:
            claims["tenantId"] = self.tenant_id
        if self.email is not None:
            claims["email"] = self.email
        return claims
