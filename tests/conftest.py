"""
Shared test fixtures for azvmnet tests.

This module provides common fixtures used across all test types:
- Fake Azure management clients whose pollers return ARM-shaped IDs
- Fixed resource names and service principal credentials
- A reporter writing to an in-memory console
"""

import io
from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from rich.console import Console

from azvmnet.auth_models import ServicePrincipalConfig
from azvmnet.azure_auth import AzureClients
from azvmnet.config_manager import ProvisioningConfig
from azvmnet.naming import ResourceNames
from azvmnet.reporter import ProvisioningReporter

SUBSCRIPTION_ID = "11111111-2222-3333-4444-555555555555"

# ============================================================================
# AZURE CLIENT FAKES
# ============================================================================


def arm_id(resource_group: str, provider: str, resource_type: str, name: str) -> str:
    """Build an ARM resource ID inside the test subscription."""
    return (
        f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/{resource_group}"
        f"/providers/{provider}/{resource_type}/{name}"
    )


def fake_lro(provider: str, resource_type: str) -> Mock:
    """Mock ``begin_*`` operation returning a poller for the named resource."""

    def begin(resource_group, name, body):
        poller = Mock()
        poller.result.return_value = SimpleNamespace(
            id=arm_id(resource_group, provider, resource_type, name), name=name, body=body
        )
        return poller

    return Mock(side_effect=begin)


def build_fake_clients() -> AzureClients:
    """AzureClients whose operations succeed and echo ARM IDs."""
    resource = Mock()
    resource.resource_groups.create_or_update.side_effect = lambda name, body: SimpleNamespace(
        id=f"/subscriptions/{SUBSCRIPTION_ID}/resourceGroups/{name}",
        name=name,
        location=body["location"],
    )
    resource.resource_groups.begin_delete.return_value.result.return_value = None

    network = Mock()
    network.network_security_groups.begin_create_or_update = fake_lro(
        "Microsoft.Network", "networkSecurityGroups"
    )
    network.virtual_networks.begin_create_or_update = fake_lro(
        "Microsoft.Network", "virtualNetworks"
    )
    network.public_ip_addresses.begin_create_or_update = fake_lro(
        "Microsoft.Network", "publicIPAddresses"
    )
    network.network_interfaces.begin_create_or_update = fake_lro(
        "Microsoft.Network", "networkInterfaces"
    )

    storage = Mock()
    storage.storage_accounts.begin_create = fake_lro("Microsoft.Storage", "storageAccounts")

    compute = Mock()
    compute.virtual_machines.begin_create_or_update = fake_lro(
        "Microsoft.Compute", "virtualMachines"
    )

    return AzureClients(
        subscription_id=SUBSCRIPTION_ID,
        credential=Mock(),
        resource=resource,
        network=network,
        compute=compute,
        storage=storage,
    )


@pytest.fixture
def fake_clients() -> AzureClients:
    """Fake management clients for a successful run."""
    return build_fake_clients()


# ============================================================================
# CONFIGURATION FIXTURES
# ============================================================================


@pytest.fixture
def resource_names() -> ResourceNames:
    """Deterministic resource names."""
    return ResourceNames(
        resource_group="rgNEPP1234",
        frontend_nsg="fensg1234",
        backend_nsg="bensg1234",
        virtual_network="vnetCOMV1234",
        public_ip="pip11234",
        public_ip_dns_label="rgpip11234",
        frontend_nic="frontendnic1234",
        backend_nic="backendnic1234",
        storage_account="stgcomv12345678",
        computer_name_prefix="linuxvm1234",
    )


@pytest.fixture
def small_config() -> ProvisioningConfig:
    """Config with a handful of VMs and a fixed admin password."""
    return ProvisioningConfig(
        frontend_vm_count=3,
        backend_vm_count=2,
        admin_username="azureuser",
        admin_password="Str0ng!Passw0rd-xyz",  # noqa: S106 - test fixture
    ).validate()


@pytest.fixture
def sp_config() -> ServicePrincipalConfig:
    """Fake service principal credentials."""
    return ServicePrincipalConfig(
        tenant_id="aaaaaaaa-0000-0000-0000-000000000001",
        client_id="bbbbbbbb-0000-0000-0000-000000000002",
        client_secret="super-secret-value",  # noqa: S106 - test fixture
        subscription_id=SUBSCRIPTION_ID,
    )


# ============================================================================
# REPORTER FIXTURES
# ============================================================================


@pytest.fixture
def reporter() -> ProvisioningReporter:
    """Reporter whose summary table goes to an in-memory console."""
    return ProvisioningReporter(console=Console(file=io.StringIO(), width=120))


@pytest.fixture(autouse=True)
def clear_registered_secrets():
    """Keep literal secrets registered by one test from masking output in the next."""
    from azvmnet.log_sanitizer import LogSanitizer

    LogSanitizer.clear_registered_secrets()
    yield
    LogSanitizer.clear_registered_secrets()
