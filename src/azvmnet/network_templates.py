"""Request bodies for the network resources.

Each builder returns a plain dict accepted by the azure-mgmt-network
``begin_create_or_update`` operations. Rules and prefixes are static; only
names, region and the address plan come from the caller.

Topology:
    vnet 172.16.0.0/16
      Front-end 172.16.1.0/24  <- frontend NSG (SSH, HTTP in)
      Back-end  172.16.2.0/24  <- backend NSG (SQL from Front-end, no Internet out)
"""

import ipaddress
from collections.abc import Sequence
from typing import Any

FRONTEND_SUBNET_NAME = "Front-end"
BACKEND_SUBNET_NAME = "Back-end"
IP_CONFIGURATION_NAME = "internal"


def validate_address_layout(address_space: str, subnet_prefixes: Sequence[str]) -> None:
    """Check that subnets are valid, inside the address space and disjoint.

    Args:
        address_space: VNet CIDR, e.g. "172.16.0.0/16"
        subnet_prefixes: Subnet CIDRs

    Raises:
        ValueError: If any prefix is malformed, escapes the address space,
            or overlaps another subnet
    """
    space = ipaddress.ip_network(address_space, strict=True)
    subnets = [ipaddress.ip_network(prefix, strict=True) for prefix in subnet_prefixes]

    for subnet in subnets:
        if subnet.version != space.version or not subnet.subnet_of(space):  # type: ignore[arg-type]
            raise ValueError(f"Subnet {subnet} is not inside address space {space}")

    for i, first in enumerate(subnets):
        for second in subnets[i + 1 :]:
            if first.overlaps(second):
                raise ValueError(f"Subnets {first} and {second} overlap")


def _security_rule(
    name: str,
    priority: int,
    direction: str,
    access: str,
    protocol: str,
    destination_port_range: str = "*",
    source_address_prefix: str = "*",
    destination_address_prefix: str = "*",
    description: str | None = None,
) -> dict[str, Any]:
    return {
        "name": name,
        "description": description or name,
        "priority": priority,
        "direction": direction,
        "access": access,
        "protocol": protocol,
        "source_port_range": "*",
        "destination_port_range": destination_port_range,
        "source_address_prefix": source_address_prefix,
        "destination_address_prefix": destination_address_prefix,
    }


def frontend_nsg_body(region: str) -> dict[str, Any]:
    """Frontend NSG: allow SSH (22) and HTTP (80) in."""
    return {
        "location": region,
        "security_rules": [
            _security_rule("ALLOW-SSH", 100, "Inbound", "Allow", "Tcp", "22"),
            _security_rule("ALLOW-HTTP", 101, "Inbound", "Allow", "Tcp", "80"),
        ],
    }


def backend_nsg_body(region: str, frontend_subnet_prefix: str) -> dict[str, Any]:
    """Backend NSG: allow SQL (1433) from the frontend subnet, deny Internet out."""
    return {
        "location": region,
        "security_rules": [
            _security_rule(
                "ALLOW-SQL",
                100,
                "Inbound",
                "Allow",
                "Tcp",
                "1433",
                source_address_prefix=frontend_subnet_prefix,
                description="Allow SQL from the front end subnet",
            ),
            _security_rule(
                "DENY-WEB",
                200,
                "Outbound",
                "Deny",
                "*",
                destination_address_prefix="Internet",
                description="Deny all outbound internet traffic",
            ),
        ],
    }


def virtual_network_body(
    region: str,
    address_space: str,
    frontend_subnet_prefix: str,
    backend_subnet_prefix: str,
    frontend_nsg_id: str | None = None,
    backend_nsg_id: str | None = None,
) -> dict[str, Any]:
    """VNet with the Front-end and Back-end subnets.

    Raises:
        ValueError: If the address layout is invalid
    """
    validate_address_layout(address_space, [frontend_subnet_prefix, backend_subnet_prefix])

    def subnet(name: str, prefix: str, nsg_id: str | None) -> dict[str, Any]:
        body: dict[str, Any] = {"name": name, "address_prefix": prefix}
        if nsg_id:
            body["network_security_group"] = {"id": nsg_id}
        return body

    return {
        "location": region,
        "address_space": {"address_prefixes": [address_space]},
        "subnets": [
            subnet(FRONTEND_SUBNET_NAME, frontend_subnet_prefix, frontend_nsg_id),
            subnet(BACKEND_SUBNET_NAME, backend_subnet_prefix, backend_nsg_id),
        ],
    }


def public_ip_body(region: str, dns_label: str) -> dict[str, Any]:
    """Static IPv4 Standard SKU public IP with a DNS label."""
    return {
        "location": region,
        "sku": {"name": "Standard"},
        "public_ip_address_version": "IPv4",
        "public_ip_allocation_method": "Static",
        "dns_settings": {"domain_name_label": dns_label.lower()},
    }


def subnet_id(virtual_network_id: str, subnet_name: str) -> str:
    """ARM ID of a subnet inside a virtual network."""
    return f"{virtual_network_id}/subnets/{subnet_name}"


def network_interface_body(
    region: str, subnet_resource_id: str, public_ip_id: str | None
) -> dict[str, Any]:
    """NIC with one primary dynamic IP configuration."""
    ip_configuration: dict[str, Any] = {
        "name": IP_CONFIGURATION_NAME,
        "primary": True,
        "subnet": {"id": subnet_resource_id},
        "private_ip_allocation_method": "Dynamic",
    }
    if public_ip_id:
        ip_configuration["public_ip_address"] = {"id": public_ip_id}
    return {"location": region, "ip_configurations": [ip_configuration]}


__all__ = [
    "BACKEND_SUBNET_NAME",
    "FRONTEND_SUBNET_NAME",
    "IP_CONFIGURATION_NAME",
    "backend_nsg_body",
    "frontend_nsg_body",
    "network_interface_body",
    "public_ip_body",
    "subnet_id",
    "validate_address_layout",
    "virtual_network_body",
]
