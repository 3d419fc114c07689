"""Azure authentication handler module.

Turns service principal credentials into a set of management clients bound
to one subscription. The credential is exercised once up front so that a
bad secret fails here, before any resource group exists.

Security:
- No credential storage
- Secret masked in every log line and error message
"""

import logging
from dataclasses import dataclass
from typing import Any

from azure.core.exceptions import AzureError, ClientAuthenticationError
from azure.mgmt.compute import ComputeManagementClient
from azure.mgmt.network import NetworkManagementClient
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.storage import StorageManagementClient

from azvmnet.auth_models import ServicePrincipalConfig
from azvmnet.credential_factory import CredentialFactory
from azvmnet.exceptions import AuthenticationError
from azvmnet.log_sanitizer import LogSanitizer

logger = logging.getLogger(__name__)

ARM_SCOPE = "https://management.azure.com/.default"


@dataclass
class AzureClients:
    """Authenticated management clients for one subscription."""

    subscription_id: str
    credential: Any
    resource: ResourceManagementClient
    network: NetworkManagementClient
    compute: ComputeManagementClient
    storage: StorageManagementClient

    def close(self) -> None:
        """Close the underlying HTTP pipelines."""
        for client in (self.resource, self.network, self.compute, self.storage):
            client.close()
        close_credential = getattr(self.credential, "close", None)
        if callable(close_credential):
            close_credential()


class AzureAuthenticator:
    """Authenticate a service principal and build management clients.

    Example:
        >>> auth = AzureAuthenticator(ServicePrincipalConfig.from_env())
        >>> clients = auth.authenticate()
        >>> clients.resource.resource_groups.list()
    """

    def __init__(self, config: ServicePrincipalConfig):
        """Initialize Azure authenticator.

        Args:
            config: Service principal credentials
        """
        self._config = config

    def authenticate(self) -> AzureClients:
        """Create the credential, verify it and build management clients.

        Returns:
            AzureClients bound to the configured subscription

        Raises:
            AuthenticationError: If Azure AD rejects the credentials or the
                token request fails
        """
        credential = CredentialFactory.create_credential(self._config)

        try:
            credential.get_token(ARM_SCOPE)
        except ClientAuthenticationError as e:
            raise AuthenticationError(
                LogSanitizer.create_safe_error_message(e, "Azure AD rejected the credentials")
            ) from e
        except AzureError as e:
            raise AuthenticationError(
                LogSanitizer.create_safe_error_message(e, "Failed to acquire an ARM token")
            ) from e

        subscription_id = self._config.subscription_id
        clients = AzureClients(
            subscription_id=subscription_id,
            credential=credential,
            resource=ResourceManagementClient(credential, subscription_id),
            network=NetworkManagementClient(credential, subscription_id),
            compute=ComputeManagementClient(credential, subscription_id),
            storage=StorageManagementClient(credential, subscription_id),
        )
        logger.info(f"Selected subscription: /subscriptions/{subscription_id}")
        return clients


__all__ = ["ARM_SCOPE", "AzureAuthenticator", "AzureClients"]
