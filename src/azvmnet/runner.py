"""End-to-end provisioning run.

Drives the whole sequence and tracks the run state:

    unauthenticated -> authenticated -> resource_group_created
        -> network_provisioned -> compute_provisioned -> torn_down

Errors are caught here, logged (sanitized) and turned into an exit code;
nothing is re-raised to the caller.
"""

import logging

from azvmnet.auth_models import ServicePrincipalConfig
from azvmnet.azure_auth import AzureAuthenticator, AzureClients
from azvmnet.config_manager import ProvisioningConfig
from azvmnet.exceptions import (
    AuthenticationError,
    ConfigError,
    ProvisioningError,
    TeardownError,
)
from azvmnet.log_sanitizer import LogSanitizer
from azvmnet.models import ProvisioningResult, RunState
from azvmnet.naming import ResourceNames
from azvmnet.provisioner import Provisioner
from azvmnet.reporter import ProvisioningReporter
from azvmnet.resource_group_scope import resource_group_scope

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_UNEXPECTED = 1
EXIT_CONFIG = 2
EXIT_AUTH = 3
EXIT_PROVISIONING = 4
EXIT_TEARDOWN = 5
EXIT_INTERRUPTED = 130


class ProvisioningRun:
    """One authenticate -> provision -> tear down cycle."""

    def __init__(
        self,
        config: ProvisioningConfig,
        credentials: ServicePrincipalConfig | None = None,
        names: ResourceNames | None = None,
        reporter: ProvisioningReporter | None = None,
        authenticator: AzureAuthenticator | None = None,
    ):
        """Initialize run.

        Args:
            config: Validated provisioning configuration
            credentials: Service principal (default: read from environment
                when the run starts)
            names: Resource names (default: freshly generated)
            reporter: Progress reporter
            authenticator: Pre-built authenticator (mainly for tests)
        """
        self.config = config
        self.credentials = credentials
        self.names = names or ResourceNames.generate()
        self.reporter = reporter or ProvisioningReporter()
        self.authenticator = authenticator
        self.result = ProvisioningResult(resource_group=self.names.resource_group)

    @property
    def state(self) -> RunState:
        return self.result.state

    def _authenticate(self) -> AzureClients:
        if self.authenticator is None:
            credentials = self.credentials or ServicePrincipalConfig.from_env()
            self.authenticator = AzureAuthenticator(credentials)
        clients = self.authenticator.authenticate()
        self.result.state = RunState.AUTHENTICATED
        return clients

    def execute(self, clients: AzureClients) -> ProvisioningResult:
        """Provision everything inside a resource group scope.

        The resource group is deleted on the way out whether or not
        provisioning succeeded. Errors propagate to the caller.
        """
        provisioner = Provisioner(
            clients, self.config, self.names, self.reporter, result=self.result
        )

        try:
            with resource_group_scope(
                clients.resource,
                self.names.resource_group,
                self.config.region,
                self.reporter,
            ) as group:
                self.result.add(group)
                self.result.state = RunState.RESOURCE_GROUP_CREATED
                provisioner.provision()
        except TeardownError:
            raise
        except BaseException:
            # Teardown already ran if the group existed
            if self.result.state != RunState.AUTHENTICATED:
                self.result.state = RunState.TORN_DOWN
            raise

        self.result.state = RunState.TORN_DOWN
        return self.result

    def _fail(self, error: BaseException, message: str) -> None:
        self.result.error = LogSanitizer.create_safe_error_message(error, message)
        self.reporter.failure(error)
        if self.result.state in (RunState.UNAUTHENTICATED, RunState.AUTHENTICATED):
            self.result.state = RunState.FAILED

    def run(self) -> int:
        """Execute the full workflow.

        Returns:
            Exit code (0 = success, non-zero = error)
        """
        clients: AzureClients | None = None
        try:
            clients = self._authenticate()
            self.execute(clients)
            return EXIT_SUCCESS

        except ConfigError as e:
            self._fail(e, "Configuration error")
            return EXIT_CONFIG
        except AuthenticationError as e:
            self._fail(e, "Authentication failed")
            return EXIT_AUTH
        except ProvisioningError as e:
            self._fail(e, "Provisioning failed")
            return EXIT_PROVISIONING
        except TeardownError as e:
            self._fail(e, "Resource group deletion failed")
            if e.original_error is not None:
                logger.error(
                    LogSanitizer.create_safe_error_message(
                        e.original_error, "Provisioning had already failed"
                    )
                )
            return EXIT_TEARDOWN
        except KeyboardInterrupt as e:
            self._fail(e, "Cancelled by user")
            return EXIT_INTERRUPTED
        except Exception as e:
            self._fail(e, "Unexpected error")
            logger.exception("Unexpected error in provisioning run")
            return EXIT_UNEXPECTED
        finally:
            if clients is not None:
                clients.close()
            self.reporter.print_summary(self.result)


def run_sample(
    config: ProvisioningConfig,
    credentials: ServicePrincipalConfig | None = None,
    reporter: ProvisioningReporter | None = None,
) -> ProvisioningResult:
    """Run the full sample once and return what happened.

    Failures are logged, never raised; check ``result.succeeded``.
    """
    run = ProvisioningRun(config, credentials=credentials, reporter=reporter)
    run.run()
    return run.result


__all__ = [
    "EXIT_AUTH",
    "EXIT_CONFIG",
    "EXIT_INTERRUPTED",
    "EXIT_PROVISIONING",
    "EXIT_SUCCESS",
    "EXIT_TEARDOWN",
    "EXIT_UNEXPECTED",
    "ProvisioningRun",
    "run_sample",
]
