"""Credential factory for Azure authentication.

Creates Azure Identity SDK credential objects from ServicePrincipalConfig.
Only client-secret service principals are supported; the secret comes from
the environment via ServicePrincipalConfig.from_env().

Security:
- No token storage - delegates to Azure Identity SDK
- Log sanitization for all error messages
"""

from azure.identity import ClientSecretCredential

from azvmnet.auth_models import ServicePrincipalConfig
from azvmnet.exceptions import AuthenticationError
from azvmnet.log_sanitizer import LogSanitizer


class CredentialFactoryError(AuthenticationError):
    """Raised when credential creation fails."""

    pass


class CredentialFactory:
    """Factory for creating Azure Identity credentials."""

    @staticmethod
    def create_credential(config: ServicePrincipalConfig) -> ClientSecretCredential:
        """Create a client secret credential.

        Args:
            config: Service principal configuration

        Returns:
            ClientSecretCredential bound to the tenant

        Raises:
            CredentialFactoryError: If the SDK rejects the configuration
        """
        LogSanitizer.register_secret(config.client_secret)
        try:
            return ClientSecretCredential(
                tenant_id=config.tenant_id,
                client_id=config.client_id,
                client_secret=config.client_secret,
            )
        except Exception as e:
            safe_error = LogSanitizer.sanitize_exception(e)
            raise CredentialFactoryError(
                f"Failed to create service principal credential: {safe_error}"
            ) from e


__all__ = ["CredentialFactory", "CredentialFactoryError"]
