"""Tests for tenant isolation and the self-or-operator rule."""

from __future__ import annotations

import pytest

from ireva.decision import Allowed, DenialReason
from ireva.rbac import Role
from ireva.tenancy import authorize_owner, authorize_tenant


class TestAuthorizeTenant:
    @pytest.mark.parametrize("role", [Role.ADMIN, Role.SUPER_ADMIN])
    @pytest.mark.parametrize("own_tenant", [None, "t1", "t2"])
    def test_operators_cross_tenants(self, role, own_tenant, make_principal):
        p = make_principal(role, tenant_id=own_tenant)
        assert isinstance(authorize_tenant(p, "t9"), Allowed)

    @pytest.mark.parametrize("role", [Role.USER, Role.TENANT])
    def test_same_tenant_allowed(self, role, make_principal):
        assert authorize_tenant(make_principal(role, tenant_id="t1"), "t1").allowed

    @pytest.mark.parametrize("role", [Role.USER, Role.TENANT])
    def test_other_tenant_denied(self, role, make_principal):
        decision = authorize_tenant(make_principal(role, tenant_id="t1"), "t2")
        assert decision.reason is DenialReason.TENANT_MISMATCH

    def test_principal_without_tenant_fails_closed(self, make_principal):
        decision = authorize_tenant(make_principal(Role.USER, tenant_id=None), "t1")
        assert decision.reason is DenialReason.TENANT_MISMATCH

    def test_unscoped_resource_allowed(self, make_principal):
        assert authorize_tenant(make_principal(Role.USER, tenant_id=None), None).allowed
        assert authorize_tenant(make_principal(Role.TENANT, tenant_id="t1"), None).allowed

    def test_comparison_is_exact(self, make_principal):
        decision = authorize_tenant(make_principal(Role.USER, tenant_id="T1"), "t1")
        assert not decision.allowed


class TestAuthorizeOwner:
    def test_owner_allowed(self, make_principal):
        assert authorize_owner(make_principal(id="u-1"), "u-1").allowed

    def test_other_user_denied(self, make_principal):
        decision = authorize_owner(make_principal(id="u-1"), "u-2")
        assert decision.reason is DenialReason.OWNER_MISMATCH

    @pytest.mark.parametrize("role", [Role.ADMIN, Role.SUPER_ADMIN])
    def test_operator_allowed(self, role, make_principal):
        assert authorize_owner(make_principal(role, id="ops"), "u-2").allowed

    def test_tenant_role_is_not_operator(self, make_principal):
        assert not authorize_owner(make_principal(Role.TENANT, id="t-acct"), "u-2").allowed

    def test_no_owner_allowed(self, make_principal):
        assert authorize_owner(make_principal(id="u-1"), None).allowed
