"""Base token verifier protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ireva.decision import Denied
from ireva.principal import Principal


@runtime_checkable
class TokenVerifier(Protocol):
    """Protocol that all credential verifiers must implement.

    ``verify`` is a pure function of the token, the verifier's secret and
    its clock.  It returns the principal on success and a ``no_token`` or
    ``invalid_token`` denial otherwise.
    """

    name: str

    def verify(self, token: str | None) -> Principal | Denied:
        """Verify a bearer token and return the principal or a denial."""
        ...
