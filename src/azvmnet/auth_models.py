"""Authentication data models for azvmnet.

This module defines the service principal credentials used to talk to the
Azure management plane. Values come from the process environment only:

- TENANT_ID
- CLIENT_ID
- CLIENT_SECRET
- SUBSCRIPTION_ID

Security features:
- Frozen dataclass for immutability
- Secret masking in __repr__ and to_dict_masked()
- No secret storage in config files
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from azvmnet.exceptions import AuthenticationError

# Environment variable name for each credential field
ENV_VARS: dict[str, str] = {
    "tenant_id": "TENANT_ID",
    "client_id": "CLIENT_ID",
    "client_secret": "CLIENT_SECRET",  # noqa: S105 - variable name, not a secret
    "subscription_id": "SUBSCRIPTION_ID",
}


@dataclass(frozen=True)
class ServicePrincipalConfig:
    """Service principal credentials bound to one subscription.

    All four values are required and must be non-empty. The secret is
    excluded from repr so the object can be logged safely.
    """

    tenant_id: str
    client_id: str
    client_secret: str = field(repr=False)
    subscription_id: str

    def __post_init__(self):
        """Reject missing or blank values."""
        missing = [name for name in ENV_VARS if not (getattr(self, name) or "").strip()]
        if missing:
            names = ", ".join(ENV_VARS[name] for name in missing)
            raise AuthenticationError(f"Missing Azure credentials: {names} must be set")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ServicePrincipalConfig":
        """Build credentials from environment variables.

        Args:
            environ: Mapping to read from (default: os.environ)

        Returns:
            ServicePrincipalConfig instance

        Raises:
            AuthenticationError: If any required variable is missing or empty
        """
        env = os.environ if environ is None else environ
        return cls(**{name: env.get(var, "") for name, var in ENV_VARS.items()})

    def to_dict_masked(self) -> dict[str, Any]:
        """Return a dict safe for logging with the secret replaced by ****."""
        return {
            "tenant_id": self.tenant_id,
            "client_id": self.client_id,
            "client_secret": "****",
            "subscription_id": self.subscription_id,
        }


__all__ = ["ENV_VARS", "ServicePrincipalConfig"]
