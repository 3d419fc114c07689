"""Random resource names and VM admin credentials.

Azure naming rules that matter here:
- Storage account names: 3-24 chars, lowercase letters and digits only
- DNS labels: lowercase, must start with a letter
- VM admin passwords: 12-123 chars, at least 3 of lower/upper/digit/special
"""

import random
import secrets
import string
from dataclasses import dataclass

DEFAULT_ADMIN_USERNAME = "azureuser"
PASSWORD_LENGTH = 20
PASSWORD_SPECIALS = "!@#%^*-_=+"


def create_random_name(prefix: str, digits: int = 4) -> str:
    """Append a random numeric suffix to prefix.

    Args:
        prefix: Name prefix (e.g. "rgNEPP")
        digits: Number of random digits to append

    Returns:
        Name such as "rgNEPP4821"
    """
    suffix = "".join(random.choices(string.digits, k=digits))  # noqa: S311 - not security sensitive
    return f"{prefix}{suffix}"


def create_username() -> str:
    """Return the VM admin username."""
    return DEFAULT_ADMIN_USERNAME


def create_password(length: int = PASSWORD_LENGTH) -> str:
    """Generate a VM admin password satisfying Azure complexity rules.

    One character from each class is guaranteed, the rest are drawn from
    the union and the result is shuffled.
    """
    if length < 12:
        raise ValueError("Azure VM passwords must be at least 12 characters")

    classes = [string.ascii_lowercase, string.ascii_uppercase, string.digits, PASSWORD_SPECIALS]
    alphabet = "".join(classes)
    chars = [secrets.choice(cls) for cls in classes]
    chars += [secrets.choice(alphabet) for _ in range(length - len(classes))]
    secrets.SystemRandom().shuffle(chars)
    return "".join(chars)


@dataclass(frozen=True)
class ResourceNames:
    """Names for every resource created in one run."""

    resource_group: str
    frontend_nsg: str
    backend_nsg: str
    virtual_network: str
    public_ip: str
    public_ip_dns_label: str
    frontend_nic: str
    backend_nic: str
    storage_account: str
    computer_name_prefix: str

    @classmethod
    def generate(cls) -> "ResourceNames":
        """Generate a fresh, randomized set of names."""
        return cls(
            resource_group=create_random_name("rgNEPP"),
            frontend_nsg=create_random_name("fensg"),
            backend_nsg=create_random_name("bensg"),
            virtual_network=create_random_name("vnetCOMV"),
            public_ip=create_random_name("pip1"),
            public_ip_dns_label=create_random_name("rgpip1"),
            frontend_nic=create_random_name("frontendnic"),
            backend_nic=create_random_name("backendnic"),
            storage_account=create_random_name("stgcomv", digits=8),
            computer_name_prefix=create_random_name("linuxvm"),
        )


__all__ = [
    "DEFAULT_ADMIN_USERNAME",
    "ResourceNames",
    "create_password",
    "create_random_name",
    "create_username",
]
