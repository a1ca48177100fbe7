"""Shared fixtures for iREVA tests."""

from __future__ import annotations

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from ireva.api.app import create_app
from ireva.auth_providers.jwt_provider import JWTVerifier, issue_token
from ireva.authorization import Authorizer
from ireva.config import Settings
from ireva.principal import AccreditationLevel, KycStatus, Principal
from ireva.rbac import Role

_SECRET = "test-secret-key-for-jwt-signing-0123456789"
_NOW = 1_700_000_000.0


@pytest.fixture
def secret() -> str:
    return _SECRET


@pytest.fixture
def now() -> float:
    """Frozen wall-clock time seen by the ``verifier`` fixture."""
    return _NOW


@pytest.fixture
def clock(now):
    return lambda: now


@pytest.fixture
def make_principal():
    """Factory for principals; defaults to a KYC-verified investor."""

    def _make(
        role: Role | str = Role.USER,
        *,
        id: str = "user-1",
        tenant_id: str | None = None,
        kyc_status: KycStatus = KycStatus.VERIFIED,
        accreditation_level: AccreditationLevel = AccreditationLevel.NONE,
    ) -> Principal:
        return Principal(
            id=id,
            role=Role(role),
            tenant_id=tenant_id,
            kyc_status=kyc_status,
            accreditation_level=accreditation_level,
        )

    return _make


@pytest.fixture
def make_token(secret, clock):
    """Factory for tokens issued at the frozen ``now``."""

    def _make(principal: Principal, *, expires_in: float = 3600, secret: str = secret) -> str:
        return issue_token(principal, secret, expires_in=expires_in, clock=clock)

    return _make


@pytest.fixture
def bearer(secret):
    """Factory for Authorization headers valid at the real current time."""

    def _make(principal: Principal, **kwargs) -> dict[str, str]:
        return {"Authorization": f"Bearer {issue_token(principal, secret, **kwargs)}"}

    return _make


@pytest.fixture
def verifier(secret, clock) -> JWTVerifier:
    return JWTVerifier(secret, clock=clock)


@pytest.fixture
def authorizer(verifier) -> Authorizer:
    return Authorizer(verifier)


@pytest.fixture
def settings(secret) -> Settings:
    return Settings(jwt_secret=secret)


@pytest_asyncio.fixture
async def client(settings):
    """HTTP test client wired to a fresh application."""
    app = create_app(settings, configure_logging=False)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
