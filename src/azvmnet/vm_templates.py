"""Request bodies for compute and storage resources.

All VMs are Linux, boot from a marketplace image onto a managed Standard_LRS
OS disk and use a single primary NIC. The storage account is provisioned
alongside the VMs but is not attached to their disks.
"""

from dataclasses import dataclass
from enum import StrEnum
from typing import Any


class Tier(StrEnum):
    """VM tier; the value is used in VM names."""

    FRONTEND = "FE"
    BACKEND = "BE"


@dataclass(frozen=True)
class ImageReference:
    """Marketplace image coordinates."""

    publisher: str = "Canonical"
    offer: str = "0001-com-ubuntu-server-jammy"
    sku: str = "22_04-lts-gen2"
    version: str = "latest"

    def to_dict(self) -> dict[str, str]:
        return {
            "publisher": self.publisher,
            "offer": self.offer,
            "sku": self.sku,
            "version": self.version,
        }


def vm_name(tier: Tier, index: int) -> str:
    """VM resource name, e.g. VM-FE-0 or VM-BE-3."""
    return f"VM-{tier.value}-{index}"


def computer_name(prefix: str, tier: Tier, index: int) -> str:
    """Unique OS hostname for a VM (Linux hostnames allow up to 64 chars)."""
    return f"{prefix}-{tier.value.lower()}{index}"


def virtual_machine_body(
    region: str,
    vm_size: str,
    admin_username: str,
    admin_password: str,
    hostname: str,
    nic_id: str,
    image: ImageReference,
) -> dict[str, Any]:
    """Linux VM attached to one NIC with a managed OS disk."""
    return {
        "location": region,
        "hardware_profile": {"vm_size": vm_size},
        "os_profile": {
            "computer_name": hostname,
            "admin_username": admin_username,
            "admin_password": admin_password,
            "linux_configuration": {"disable_password_authentication": False},
        },
        "network_profile": {"network_interfaces": [{"id": nic_id, "primary": True}]},
        "storage_profile": {
            "image_reference": image.to_dict(),
            "os_disk": {
                "create_option": "FromImage",
                "os_type": "Linux",
                "caching": "ReadWrite",
                "managed_disk": {"storage_account_type": "Standard_LRS"},
            },
        },
    }


def storage_account_body(region: str, sku_name: str) -> dict[str, Any]:
    """General purpose v2 storage account."""
    return {"location": region, "kind": "StorageV2", "sku": {"name": sku_name}}


__all__ = [
    "ImageReference",
    "Tier",
    "computer_name",
    "storage_account_body",
    "virtual_machine_body",
    "vm_name",
]
