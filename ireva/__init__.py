"""iREVA authorization engine: JWT authentication, role, tenant and investor gating."""

__version__ = "0.1.0"
