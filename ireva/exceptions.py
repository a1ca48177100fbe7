"""Custom exception hierarchy for iREVA.

Provides structured error types that the application's error handler
translates into consistent JSON responses.  Ordinary authorization denials
are :class:`~ireva.decision.Denied` values; :class:`AccessDenied` only exists
at the HTTP boundary.
"""

from __future__ import annotations

from ireva.decision import DenialReason, UNAUTHENTICATED_REASONS


class IrevaError(Exception):
    """Base exception for all iREVA errors."""

    status_code: int = 500
    error_type: str = "internal_error"

    def __init__(self, message: str = "An internal error occurred") -> None:
        self.message = message
        super().__init__(message)


class ConfigurationError(IrevaError):
    """Missing or unsafe process configuration (e.g. no signing secret)."""

    status_code = 500
    error_type = "configuration_error"


class DescriptorError(IrevaError):
    """A resource gate descriptor is malformed.  Always a caller bug."""

    status_code = 500
    error_type = "descriptor_error"


class AccessDenied(IrevaError):
    """An authorization denial surfaced through HTTP.

    The message is fixed per status so the response never reveals which
    tenant, role or gate was involved beyond the reason code.
    """

    def __init__(self, reason: DenialReason) -> None:
        self.reason = reason
        if reason in UNAUTHENTICATED_REASONS:
            self.status_code = 401
            message = "Authentication required."
        else:
            self.status_code = 403
            message = "Access denied."
        self.error_type = reason.value
        super().__init__(message)
