"""Data models shared by the provisioner, reporter and runner."""

from dataclasses import dataclass, field
from enum import StrEnum


class RunState(StrEnum):
    """Lifecycle of one provisioning run.

    unauthenticated -> authenticated -> resource_group_created ->
    network_provisioned -> compute_provisioned -> torn_down

    Any state from resource_group_created onwards can jump to torn_down
    when a step fails. FAILED marks a run that never got a resource group.
    """

    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    RESOURCE_GROUP_CREATED = "resource_group_created"
    NETWORK_PROVISIONED = "network_provisioned"
    COMPUTE_PROVISIONED = "compute_provisioned"
    TORN_DOWN = "torn_down"
    FAILED = "failed"


class ResourceKind(StrEnum):
    """Kinds of resources a run creates."""

    RESOURCE_GROUP = "resource group"
    NETWORK_SECURITY_GROUP = "network security group"
    VIRTUAL_NETWORK = "virtual network"
    PUBLIC_IP = "public IP address"
    NETWORK_INTERFACE = "network interface"
    STORAGE_ACCOUNT = "storage account"
    VIRTUAL_MACHINE = "virtual machine"


@dataclass(frozen=True)
class CreatedResource:
    """A resource created during the run."""

    kind: ResourceKind
    name: str
    id: str


@dataclass
class ProvisioningResult:
    """Everything created by one run.

    Attributes:
        resource_group: Name of the owning resource group
        resources: Every created resource, in creation order
        frontend_vms: VM resources of the frontend tier
        backend_vms: VM resources of the backend tier
        vm_creation_seconds: Wall time spent creating VMs
        state: Last state the run reached
        error: Sanitized error message if the run failed
    """

    resource_group: str
    resources: list[CreatedResource] = field(default_factory=list)
    frontend_vms: list[CreatedResource] = field(default_factory=list)
    backend_vms: list[CreatedResource] = field(default_factory=list)
    vm_creation_seconds: float = 0.0
    state: RunState = RunState.UNAUTHENTICATED
    error: str | None = None

    @property
    def all_vms(self) -> list[CreatedResource]:
        return self.frontend_vms + self.backend_vms

    @property
    def succeeded(self) -> bool:
        return self.error is None

    def add(self, resource: CreatedResource) -> None:
        self.resources.append(resource)

    def count(self, kind: ResourceKind) -> int:
        """Number of created resources of a kind."""
        return sum(1 for r in self.resources if r.kind == kind)


__all__ = ["CreatedResource", "ProvisioningResult", "ResourceKind", "RunState"]
