"""Exception hierarchy for azvmnet.

Every error raised by azvmnet derives from AzvmnetError so the CLI can
catch the whole family at the top level. Azure SDK errors are wrapped
with ``raise ... from e`` so the original cause stays attached.
"""


class AzvmnetError(Exception):
    """Base class for all azvmnet errors."""

    pass


class ConfigError(AzvmnetError):
    """Raised when configuration is missing or invalid."""

    pass


class AuthenticationError(AzvmnetError):
    """Raised when credentials are missing or rejected by Azure AD."""

    pass


class ProvisioningError(AzvmnetError):
    """Raised when a create call against the management API fails."""

    def __init__(self, message: str, step: str | None = None):
        super().__init__(message)
        self.step = step


class TeardownError(AzvmnetError):
    """Raised when the resource group cannot be deleted."""

    def __init__(
        self,
        message: str,
        resource_group: str | None = None,
        original_error: BaseException | None = None,
    ):
        super().__init__(message)
        self.resource_group = resource_group
        # Error that aborted provisioning before teardown, if any
        self.original_error = original_error


__all__ = [
    "AuthenticationError",
    "AzvmnetError",
    "ConfigError",
    "ProvisioningError",
    "TeardownError",
]
