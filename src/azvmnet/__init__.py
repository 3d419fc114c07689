"""azvmnet - provision a two-tier Azure VM network and tear it down again.

Philosophy:
- Ruthless simplicity
- One explicit configuration object, no global state
- Teardown is guaranteed on every exit path
- Fail fast with helpful guidance

The azvmnet CLI creates a resource group holding two network security groups,
a virtual network with frontend/backend subnets, a public IP, two network
interfaces, a storage account and a batch of Linux VMs, then deletes the
resource group.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
