"""Provisioning of the network, storage and compute resources.

Every create call is a long-running operation; ``begin_*`` returns a poller
and ``.result()`` blocks until Azure reports a terminal state. Steps run in
a fixed order because later bodies reference IDs produced earlier:

    NSGs -> virtual network (subnets bound to NSGs) -> public IP
         -> NICs -> storage account -> frontend VMs -> backend VMs

The resource group itself is owned by resource_group_scope; the
Provisioner assumes it exists.

With ``max_parallel == 1`` (the default) VMs are created one at a time.
With a higher value the VMs of one tier are submitted to a thread pool,
at most ``max_parallel`` at once, after that tier's NIC exists. Results
are recorded by the calling thread only.
"""

import logging
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Any

from azure.core.exceptions import AzureError

from azvmnet.azure_auth import AzureClients
from azvmnet.config_manager import ProvisioningConfig
from azvmnet.exceptions import ProvisioningError
from azvmnet.log_sanitizer import LogSanitizer
from azvmnet.models import CreatedResource, ProvisioningResult, ResourceKind, RunState
from azvmnet.naming import ResourceNames, create_password, create_username
from azvmnet.network_templates import (
    BACKEND_SUBNET_NAME,
    FRONTEND_SUBNET_NAME,
    backend_nsg_body,
    frontend_nsg_body,
    network_interface_body,
    public_ip_body,
    subnet_id,
    virtual_network_body,
)
from azvmnet.reporter import ProvisioningReporter
from azvmnet.vm_templates import (
    ImageReference,
    Tier,
    computer_name,
    storage_account_body,
    virtual_machine_body,
    vm_name,
)

logger = logging.getLogger(__name__)


class Provisioner:
    """Create the resources of one run inside an existing resource group."""

    def __init__(
        self,
        clients: AzureClients,
        config: ProvisioningConfig,
        names: ResourceNames | None = None,
        reporter: ProvisioningReporter | None = None,
        result: ProvisioningResult | None = None,
    ):
        """Initialize provisioner.

        Args:
            clients: Authenticated management clients
            config: Validated provisioning configuration
            names: Resource names (default: freshly generated)
            reporter: Progress reporter
            result: Result to record into (default: a new one)
        """
        self.clients = clients
        self.config = config
        self.names = names or ResourceNames.generate()
        self.reporter = reporter or ProvisioningReporter()
        self.result = result or ProvisioningResult(resource_group=self.names.resource_group)

        self.admin_username = config.admin_username or create_username()
        self.admin_password = config.admin_password or create_password()
        LogSanitizer.register_secret(self.admin_password)

        self.image = ImageReference(
            publisher=config.image_publisher,
            offer=config.image_offer,
            sku=config.image_sku,
            version=config.image_version,
        )

        self.frontend_nsg: CreatedResource | None = None
        self.backend_nsg: CreatedResource | None = None
        self.virtual_network: CreatedResource | None = None
        self.public_ip: CreatedResource | None = None
        self.frontend_nic: CreatedResource | None = None
        self.backend_nic: CreatedResource | None = None
        self.storage_account: CreatedResource | None = None

    @property
    def resource_group(self) -> str:
        return self.names.resource_group

    def _wait(
        self,
        step: str,
        kind: ResourceKind,
        name: str,
        begin: Callable[[], Any],
    ) -> CreatedResource:
        """Start a long-running operation and block until it finishes.

        Raises:
            ProvisioningError: If Azure rejects the request or the
                operation ends in a failed state
        """
        self.reporter.creating(kind, name)
        try:
            resource = begin().result()
        except AzureError as e:
            raise ProvisioningError(
                LogSanitizer.create_safe_error_message(e, f"Failed to create {kind} {name}"),
                step=step,
            ) from e
        return CreatedResource(kind, name, resource.id)

    def _record(self, resource: CreatedResource) -> CreatedResource:
        self.result.add(resource)
        self.reporter.created(resource)
        return resource

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------

    def create_network_security_groups(self) -> tuple[CreatedResource, CreatedResource]:
        """Create the frontend and backend NSGs."""
        nsgs = self.clients.network.network_security_groups
        rg = self.resource_group

        self.reporter.log("Creating a security group for the front ends - allows SSH and HTTP")
        frontend_body = frontend_nsg_body(self.config.region)
        self.frontend_nsg = self._record(
            self._wait(
                "network_security_group",
                ResourceKind.NETWORK_SECURITY_GROUP,
                self.names.frontend_nsg,
                lambda: nsgs.begin_create_or_update(rg, self.names.frontend_nsg, frontend_body),
            )
        )

        self.reporter.log(
            "Creating a security group for the back ends - allows SQL from the front end "
            "and denies all outbound internet traffic"
        )
        backend_body = backend_nsg_body(self.config.region, self.config.frontend_subnet_prefix)
        self.backend_nsg = self._record(
            self._wait(
                "network_security_group",
                ResourceKind.NETWORK_SECURITY_GROUP,
                self.names.backend_nsg,
                lambda: nsgs.begin_create_or_update(rg, self.names.backend_nsg, backend_body),
            )
        )
        return self.frontend_nsg, self.backend_nsg

    def create_virtual_network(self) -> CreatedResource:
        """Create the VNet with Front-end and Back-end subnets."""
        body = virtual_network_body(
            self.config.region,
            self.config.address_space,
            self.config.frontend_subnet_prefix,
            self.config.backend_subnet_prefix,
            frontend_nsg_id=self.frontend_nsg.id if self.frontend_nsg else None,
            backend_nsg_id=self.backend_nsg.id if self.backend_nsg else None,
        )
        vnets = self.clients.network.virtual_networks
        self.virtual_network = self._record(
            self._wait(
                "virtual_network",
                ResourceKind.VIRTUAL_NETWORK,
                self.names.virtual_network,
                lambda: vnets.begin_create_or_update(
                    self.resource_group, self.names.virtual_network, body
                ),
            )
        )
        return self.virtual_network

    def create_public_ip(self) -> CreatedResource:
        """Create the static public IP."""
        body = public_ip_body(self.config.region, self.names.public_ip_dns_label)
        ips = self.clients.network.public_ip_addresses
        self.public_ip = self._record(
            self._wait(
                "public_ip",
                ResourceKind.PUBLIC_IP,
                self.names.public_ip,
                lambda: ips.begin_create_or_update(self.resource_group, self.names.public_ip, body),
            )
        )
        return self.public_ip

    def create_network_interfaces(self) -> tuple[CreatedResource, CreatedResource]:
        """Create one NIC per tier, each on its tier's subnet."""
        if self.virtual_network is None:
            raise ProvisioningError(
                "Virtual network must exist before NICs", step="network_interface"
            )

        public_ip_id = self.public_ip.id if self.public_ip else None
        nics = self.clients.network.network_interfaces

        def create(name: str, subnet_name: str) -> CreatedResource:
            body = network_interface_body(
                self.config.region, subnet_id(self.virtual_network.id, subnet_name), public_ip_id
            )
            return self._record(
                self._wait(
                    "network_interface",
                    ResourceKind.NETWORK_INTERFACE,
                    name,
                    lambda: nics.begin_create_or_update(self.resource_group, name, body),
                )
            )

        self.frontend_nic = create(self.names.frontend_nic, FRONTEND_SUBNET_NAME)
        self.backend_nic = create(self.names.backend_nic, BACKEND_SUBNET_NAME)
        return self.frontend_nic, self.backend_nic

    def provision_network(self) -> None:
        """Create NSGs, VNet, public IP and NICs."""
        self.create_network_security_groups()
        self.create_virtual_network()
        self.create_public_ip()
        self.create_network_interfaces()
        self.result.state = RunState.NETWORK_PROVISIONED

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    def create_storage_account(self) -> CreatedResource:
        """Create the storage account (not attached to VM disks)."""
        body = storage_account_body(self.config.region, self.config.storage_sku)
        accounts = self.clients.storage.storage_accounts
        self.storage_account = self._record(
            self._wait(
                "storage_account",
                ResourceKind.STORAGE_ACCOUNT,
                self.names.storage_account,
                lambda: accounts.begin_create(
                    self.resource_group, self.names.storage_account, body
                ),
            )
        )
        return self.storage_account

    # ------------------------------------------------------------------
    # Compute
    # ------------------------------------------------------------------

    def _create_vm(self, tier: Tier, index: int, nic_id: str) -> CreatedResource:
        name = vm_name(tier, index)
        body = virtual_machine_body(
            self.config.region,
            self.config.vm_size,
            self.admin_username,
            self.admin_password,
            computer_name(self.names.computer_name_prefix, tier, index),
            nic_id,
            self.image,
        )
        logger.debug(f"VM request for {name}: {LogSanitizer.sanitize_dict(body)}")
        vms = self.clients.compute.virtual_machines
        return self._wait(
            "virtual_machine",
            ResourceKind.VIRTUAL_MACHINE,
            name,
            lambda: vms.begin_create_or_update(self.resource_group, name, body),
        )

    def create_virtual_machines(self, tier: Tier, count: int, nic_id: str) -> list[CreatedResource]:
        """Create ``count`` VMs of one tier, in index order.

        Raises:
            ProvisioningError: On the first failed VM; pending VMs of the
                tier are not started
        """
        if count <= 0:
            return []

        if self.config.max_parallel <= 1:
            return [self._record(self._create_vm(tier, i, nic_id)) for i in range(count)]

        created: dict[int, CreatedResource] = {}
        futures: dict[Future, int] = {}
        workers = min(self.config.max_parallel, count)
        try:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(self._create_vm, tier, i, nic_id): i for i in range(count)
                }
                try:
                    for future in as_completed(futures):
                        future.result()
                except BaseException:
                    for future in futures:
                        future.cancel()
                    raise
        finally:
            # Executor shutdown has waited for in-flight VMs; record every one that exists
            for future, i in sorted(futures.items(), key=lambda item: item[1]):
                if not future.cancelled() and future.done() and future.exception() is None:
                    created[i] = self._record(future.result())

        return [created[i] for i in range(count)]

    def provision_compute(self) -> None:
        """Create the frontend VMs, then the backend VMs."""
        if self.frontend_nic is None or self.backend_nic is None:
            raise ProvisioningError(
                "Network interfaces must exist before VMs", step="virtual_machine"
            )

        self.reporter.log("Creating the virtual machines")
        self.reporter.start_timer()
        try:
            self.result.frontend_vms = self.create_virtual_machines(
                Tier.FRONTEND, self.config.frontend_vm_count, self.frontend_nic.id
            )
            self.result.backend_vms = self.create_virtual_machines(
                Tier.BACKEND, self.config.backend_vm_count, self.backend_nic.id
            )
        finally:
            self.result.vm_creation_seconds = self.reporter.stop_timer()

        self.reporter.virtual_machines_created(
            self.result.all_vms, self.result.vm_creation_seconds
        )
        self.result.state = RunState.COMPUTE_PROVISIONED

    def provision(self) -> ProvisioningResult:
        """Run every step after the resource group, in order."""
        self.provision_network()
        self.create_storage_account()
        self.provision_compute()
        return self.result


__all__ = ["Provisioner"]
