"""HMAC-signed JWT verification and issuance.

Expiry is checked against an injected clock rather than PyJWT's own
``datetime.now`` so callers (and tests) control wall-clock time.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable
from typing import Any

import jwt

from ireva.decision import Denied, DenialReason
from ireva.exceptions import ConfigurationError
from ireva.principal import Principal

logger = logging.getLogger("ireva.auth_providers.jwt")

SUPPORTED_ALGORITHMS: frozenset[str] = frozenset({"HS256", "HS384", "HS512"})

Clock = Callable[[], float]


def extract_bearer(header: str | None) -> str | None:
    """Return the token of an ``Authorization: Bearer <token>`` header.

    Missing headers, other schemes and empty tokens all yield ``None``.
    """
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    token = token.strip()
    return token or None


def _is_timestamp(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    # NaN never compares true against a clock reading.
    return isinstance(value, float) and math.isfinite(value)


class JWTVerifier:
    """Verify platform JWTs signed with a shared secret."""

    name = "jwt"

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        clock: Clock = time.time,
        leeway: float = 0,
        ttl_seconds: float = 24 * 3600,
    ) -> None:
        if not secret:
            msg = "JWT signing secret is not configured"
            raise ConfigurationError(msg)
        if algorithm not in SUPPORTED_ALGORITHMS:
            msg = f"Unsupported JWT algorithm: {algorithm}"
            raise ConfigurationError(msg)
        self._secret = secret
        self._algorithm = algorithm
        self._clock = clock
        self._leeway = leeway
        self._ttl_seconds = ttl_seconds

    @property
    def algorithm(self) -> str:
        return self._algorithm

    def issue(
        self,
        principal: Principal,
        *,
        expires_in: float | None = None,
        extra_claims: dict[str, Any] | None = None,
    ) -> str:
        """Sign a token for *principal* with this verifier's secret and clock.

        ``expires_in`` defaults to the configured token lifetime.
        """
        return issue_token(
            principal,
            self._secret,
            expires_in=self._ttl_seconds if expires_in is None else expires_in,
            algorithm=self._algorithm,
            clock=self._clock,
            extra_claims=extra_claims,
        )

    def verify(self, token: str | None) -> Principal | Denied:
        if not token:
            return Denied(DenialReason.NO_TOKEN, "no bearer token")

        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={
                    "verify_exp": False,
                    "verify_nbf": False,
                    "verify_iat": False,
                    "verify_aud": False,
                    "require": ["exp"],
                },
            )
        except jwt.InvalidSignatureError:
            return Denied(DenialReason.INVALID_TOKEN, "invalid token signature")
        except jwt.PyJWTError as e:
            return Denied(DenialReason.INVALID_TOKEN, f"malformed token: {e}")

        now = self._clock()
        exp = claims["exp"]
        if not _is_timestamp(exp):
            return Denied(DenialReason.INVALID_TOKEN, "exp claim is not numeric")
        if exp <= now - self._leeway:
            return Denied(DenialReason.INVALID_TOKEN, "token expired")

        nbf = claims.get("nbf")
        if nbf is not None and (not _is_timestamp(nbf) or nbf > now + self._leeway):
            return Denied(DenialReason.INVALID_TOKEN, "token not yet valid")

        try:
            return Principal.from_claims(claims)
        except ValueError as e:
            logger.info("JWT payload validation failed: %s", e)
            return Denied(DenialReason.INVALID_TOKEN, f"invalid token structure: {e}")


def issue_token(
    principal: Principal,
    secret: str,
    *,
    expires_in: float = 24 * 3600,
    algorithm: str = "HS256",
    clock: Clock = time.time,
    extra_claims: dict[str, Any] | None = None,
) -> str:
    """Sign a token carrying *principal*'s claims.

    ``expires_in`` may be negative to mint an already expired token.
    """
    if not secret:
        msg = "JWT signing secret is not configured"
        raise ConfigurationError(msg)
    now = clock()
    payload = principal.to_claims()
    if extra_claims:
        payload.update(extra_claims)
    payload["iat"] = int(now)
    payload["exp"] = int(now + expires_in)
    return jwt.encode(payload, secret, algorithm=algorithm)
