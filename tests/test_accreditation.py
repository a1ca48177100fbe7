"""Tests for KYC and accreditation gating."""

from __future__ import annotations

import pytest

from ireva.accreditation import (
    InvestmentResource,
    authorize_investor_access,
    can_access_property,
)
from ireva.decision import Allowed, DenialReason
from ireva.exceptions import DescriptorError
from ireva.principal import ACCREDITATION_RANK, AccreditationLevel, KycStatus
from ireva.rbac import Role

LEVELS = sorted(AccreditationLevel, key=ACCREDITATION_RANK.__getitem__)
UNVERIFIED = [s for s in KycStatus if s is not KycStatus.VERIFIED]


class TestAuthorizeInvestorAccess:
    @pytest.mark.parametrize("role", [Role.ADMIN, Role.SUPER_ADMIN])
    def test_operators_bypass(self, role, make_principal):
        p = make_principal(role, kyc_status=KycStatus.PENDING)
        assert isinstance(authorize_investor_access(p, AccreditationLevel.ADVANCED), Allowed)

    @pytest.mark.parametrize("status", UNVERIFIED)
    @pytest.mark.parametrize("level", LEVELS[1:])
    def test_unverified_kyc_denied(self, status, level, make_principal):
        p = make_principal(kyc_status=status, accreditation_level=AccreditationLevel.ADVANCED)
        assert authorize_investor_access(p, level).reason is DenialReason.KYC_UNVERIFIED

    def test_unverified_kyc_denied_even_at_none(self, make_principal):
        p = make_principal(kyc_status=KycStatus.PENDING)
        decision = authorize_investor_access(p, AccreditationLevel.NONE)
        assert decision.reason is DenialReason.KYC_UNVERIFIED

    def test_tenant_role_is_gated(self, make_principal):
        p = make_principal(Role.TENANT, kyc_status=KycStatus.PENDING)
        assert not authorize_investor_access(p, AccreditationLevel.BASIC).allowed

    def test_level_sufficient(self, make_principal):
        p = make_principal(accreditation_level=AccreditationLevel.INTERMEDIATE)
        assert authorize_investor_access(p, AccreditationLevel.INTERMEDIATE).allowed

    def test_level_insufficient(self, make_principal):
        p = make_principal(accreditation_level=AccreditationLevel.BASIC)
        decision = authorize_investor_access(p, AccreditationLevel.ADVANCED)
        assert decision.reason is DenialReason.ACCREDITATION_INSUFFICIENT

    def test_no_requirement_needs_only_kyc(self, make_principal):
        assert authorize_investor_access(make_principal(), None).allowed

    @pytest.mark.parametrize("have", LEVELS)
    def test_monotonic_in_required_level(self, have, make_principal):
        p = make_principal(accreditation_level=have)
        for i, required in enumerate(LEVELS):
            if authorize_investor_access(p, required).allowed:
                for lower in LEVELS[: i + 1]:
                    assert authorize_investor_access(p, lower).allowed


class TestCanAccessProperty:
    def test_ungated_property_open_without_kyc(self, make_principal):
        p = make_principal(kyc_status=KycStatus.NOT_STARTED)
        assert can_access_property(p, InvestmentResource()).allowed

    def test_gated_property_requires_kyc(self, make_principal):
        p = make_principal(kyc_status=KycStatus.PENDING, accreditation_level=AccreditationLevel.ADVANCED)
        resource = InvestmentResource(True, AccreditationLevel.BASIC)
        assert can_access_property(p, resource).reason is DenialReason.KYC_UNVERIFIED

    def test_gated_property_requires_level(self, make_principal):
        p = make_principal(accreditation_level=AccreditationLevel.BASIC)
        resource = InvestmentResource(True, AccreditationLevel.INTERMEDIATE)
        assert can_access_property(p, resource).reason is DenialReason.ACCREDITATION_INSUFFICIENT

    def test_gated_property_allowed(self, make_principal):
        p = make_principal(accreditation_level=AccreditationLevel.ADVANCED)
        assert can_access_property(p, InvestmentResource(True, AccreditationLevel.ADVANCED)).allowed

    def test_operator_bypass(self, make_principal):
        p = make_principal(Role.ADMIN, kyc_status=KycStatus.NOT_STARTED)
        assert can_access_property(p, InvestmentResource(True, AccreditationLevel.ADVANCED)).allowed

    def test_level_on_ungated_resource_is_rejected(self):
        with pytest.raises(DescriptorError):
            InvestmentResource(False, AccreditationLevel.BASIC)
