"""Tests for the principal model and claim parsing."""

from __future__ import annotations

import dataclasses

import pytest

from ireva.principal import (
    ACCREDITATION_RANK,
    AccreditationLevel,
    KycStatus,
    Principal,
    accreditation_at_least,
)
from ireva.rbac import Role


class TestAccreditationOrder:
    def test_total_order(self):
        levels = sorted(AccreditationLevel, key=ACCREDITATION_RANK.__getitem__)
        assert levels == [
            AccreditationLevel.NONE,
            AccreditationLevel.BASIC,
            AccreditationLevel.INTERMEDIATE,
            AccreditationLevel.ADVANCED,
        ]

    def test_missing_level_is_none(self):
        assert accreditation_at_least(None, AccreditationLevel.NONE) is True
        assert accreditation_at_least(None, AccreditationLevel.BASIC) is False

    def test_missing_requirement_always_met(self):
        assert accreditation_at_least(AccreditationLevel.NONE, None) is True

    def test_higher_meets_lower(self):
        assert accreditation_at_least(AccreditationLevel.ADVANCED, AccreditationLevel.BASIC)
        assert not accreditation_at_least(AccreditationLevel.BASIC, AccreditationLevel.ADVANCED)


class TestFromClaims:
    def test_platform_claim_names(self):
        p = Principal.from_claims(
            {
                "sub": "u-1",
                "role": "user",
                "tenantId": "t1",
                "kycStatus": "verified",
                "accreditationLevel": "basic",
                "email": "a@example.com",
            }
        )
        assert p == Principal(
            id="u-1",
            role=Role.USER,
            tenant_id="t1",
            kyc_status=KycStatus.VERIFIED,
            accreditation_level=AccreditationLevel.BASIC,
            email="a@example.com",
        )

    def test_snake_case_claim_names(self):
        p = Principal.from_claims(
            {"sub": "u-1", "role": "tenant", "tenant_id": "t9", "kyc_status": "pending"}
        )
        assert p.role is Role.TENANT
        assert p.tenant_id == "t9"
        assert p.kyc_status is KycStatus.PENDING

    def test_id_claim_used_when_sub_missing(self):
        assert Principal.from_claims({"id": "legacy-7", "role": "admin"}).id == "legacy-7"

    def test_defaults_for_missing_optional_claims(self):
        p = Principal.from_claims({"sub": "u-1", "role": "user"})
        assert p.tenant_id is None
        assert p.kyc_status is KycStatus.NOT_STARTED
        assert p.accreditation_level is AccreditationLevel.NONE
        assert p.is_kyc_verified is False

    def test_approved_is_verified(self):
        p = Principal.from_claims({"sub": "u-1", "role": "user", "kycStatus": "approved"})
        assert p.kyc_status is KycStatus.VERIFIED
        assert p.is_kyc_verified is True

    def test_investor_role_alias(self):
        assert Principal.from_claims({"sub": "u-1", "role": "investor"}).role is Role.USER

    def test_superadmin_spelling_alias(self):
        principal = Principal.from_claims({"sub": "u-1", "role": "superadmin"})
        assert principal.role is Role.SUPER_ADMIN

    def test_blank_tenant_treated_as_absent(self):
        assert Principal.from_claims({"sub": "u", "role": "user", "tenantId": "  "}).tenant_id is None

    @pytest.mark.parametrize(
        "claims",
        [
            {"role": "user"},
            {"sub": "", "role": "user"},
            {"sub": "u-1"},
            {"sub": "u-1", "role": "root"},
            {"sub": "u-1", "role": 3},
            {"sub": "u-1", "role": "user", "kycStatus": "maybe"},
            {"sub": "u-1", "role": "user", "accreditationLevel": "platinum"},
        ],
    )
    def test_invalid_claims_rejected(self, claims):
        with pytest.raises(ValueError):
            Principal.from_claims(claims)

    def test_round_trip_through_claims(self):
        p = Principal(
            id="u-2",
            role=Role.SUPER_ADMIN,
            kyc_status=KycStatus.REJECTED,
            accreditation_level=AccreditationLevel.ADVANCED,
        )
        assert Principal.from_claims(p.to_claims()) == p

    def test_principal_is_immutable(self):
        p = Principal(id="u", role=Role.USER)
        with pytest.raises(dataclasses.FrozenInstanceError):
            p.role = Role.ADMIN  # type: ignore[misc]
