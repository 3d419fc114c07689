"""Configuration management module.

This module handles persistent configuration storage using TOML format and
produces the ProvisioningConfig object that is passed explicitly into the
provisioner. Credentials are never stored here; they come from the
environment (see azvmnet.auth_models).

Precedence (highest first):
1. CLI flags
2. Config file (~/.azvmnet/config.toml or --config PATH)
3. Built-in defaults

Security:
- Config file permissions: 0600 (owner read/write only)
- Path validation
"""

import logging
import os
import tempfile
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

try:
    import tomli  # type: ignore[import]
except ImportError:
    # Fallback for older Python versions
    try:
        import tomllib as tomli  # type: ignore[import]
    except ImportError as e:
        raise ImportError("toml library not available. Install with: pip install tomli") from e

try:
    import tomlkit
except ImportError as e:
    raise ImportError("tomlkit library not available. Install with: pip install tomlkit") from e

from azvmnet.exceptions import ConfigError
from azvmnet.network_templates import validate_address_layout

logger = logging.getLogger(__name__)

# Required, non-empty string settings
STRING_FIELDS = (
    "region",
    "vm_size",
    "address_space",
    "frontend_subnet_prefix",
    "backend_subnet_prefix",
    "image_publisher",
    "image_offer",
    "image_sku",
    "image_version",
    "storage_sku",
)


@dataclass
class ProvisioningConfig:
    """Everything a provisioning run needs besides credentials."""

    region: str = "eastus"
    frontend_vm_count: int = 10
    backend_vm_count: int = 10
    vm_size: str = "Standard_D2a_v4"
    address_space: str = "172.16.0.0/16"
    frontend_subnet_prefix: str = "172.16.1.0/24"
    backend_subnet_prefix: str = "172.16.2.0/24"
    image_publisher: str = "Canonical"
    image_offer: str = "0001-com-ubuntu-server-jammy"
    image_sku: str = "22_04-lts-gen2"
    image_version: str = "latest"
    storage_sku: str = "Standard_LRS"
    max_parallel: int = 1
    admin_username: str | None = None
    admin_password: str | None = None  # Generated per run when unset

    @property
    def total_vm_count(self) -> int:
        """Number of VMs a run creates across both tiers."""
        return self.frontend_vm_count + self.backend_vm_count

    def validate(self) -> "ProvisioningConfig":
        """Check counts and the address layout.

        Returns:
            self, to allow chaining

        Raises:
            ConfigError: If any value is out of range
        """
        for name in ("frontend_vm_count", "backend_vm_count", "max_parallel"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                raise ConfigError(f"{name} must be a positive integer, got: {value!r}")

        for name in STRING_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str):
                raise ConfigError(f"{name} must be a string, got: {value!r}")
            if not value.strip():
                raise ConfigError(f"{name} cannot be empty")

        for name in ("admin_username", "admin_password"):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise ConfigError(f"{name} must be a string")

        try:
            validate_address_layout(
                self.address_space,
                [self.frontend_subnet_prefix, self.backend_subnet_prefix],
            )
        except ValueError as e:
            raise ConfigError(f"Invalid address layout: {e}") from e

        return self

    def to_dict(self, include_secrets: bool = False) -> dict[str, Any]:
        """Convert to dictionary, dropping unset values.

        Args:
            include_secrets: If True, keep admin_password (never written to disk)
        """
        data = {k: v for k, v in asdict(self).items() if v is not None}
        if not include_secrets:
            data.pop("admin_password", None)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProvisioningConfig":
        """Create config from dictionary, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning(f"Ignoring unknown config keys: {', '.join(unknown)}")
        return cls(**{k: v for k, v in data.items() if k in known})


class ConfigManager:
    """Manage azvmnet configuration file."""

    DEFAULT_CONFIG_DIR = Path.home() / ".azvmnet"
    DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"

    @classmethod
    def _validate_config_path(cls, path: Path) -> Path:
        """Validate configuration file path.

        Only paths inside ~/.azvmnet/, the current working directory or the
        system temporary directory are accepted.

        Raises:
            ConfigError: If path is outside allowed directories
        """
        resolved_path = path.resolve()

        allowed_dirs = [
            cls.DEFAULT_CONFIG_DIR.resolve(),
            Path.cwd().resolve(),
            Path(tempfile.gettempdir()).resolve(),
        ]

        for allowed_dir in allowed_dirs:
            try:
                resolved_path.relative_to(allowed_dir)
                return resolved_path
            except ValueError:
                continue

        raise ConfigError(
            f"Config path outside allowed directories: {resolved_path}\n"
            f"Allowed directories:\n"
            f"  - {cls.DEFAULT_CONFIG_DIR}\n"
            f"  - {Path.cwd()}"
        )

    @classmethod
    def get_config_path(cls, custom_path: str | None = None) -> Path:
        """Get configuration file path.

        Raises:
            ConfigError: If a custom path is invalid or does not exist
        """
        if custom_path:
            path = cls._validate_config_path(Path(custom_path).expanduser())
            if not path.exists():
                raise ConfigError(f"Config file not found: {path}")
            return path

        return cls.DEFAULT_CONFIG_FILE

    @classmethod
    def load_config(cls, custom_path: str | None = None) -> ProvisioningConfig:
        """Load configuration from file, falling back to defaults.

        Raises:
            ConfigError: If the file exists but cannot be parsed
        """
        config_path = cls.get_config_path(custom_path)

        if not config_path.exists():
            logger.debug("Config file not found, using defaults")
            return ProvisioningConfig()

        try:
            mode = config_path.stat().st_mode & 0o777
            if mode & 0o077:
                logger.warning(
                    f"Config file has insecure permissions: {oct(mode)}. Fixing to 0600..."
                )
                os.chmod(config_path, 0o600)

            with open(config_path, "rb") as f:
                data = tomli.load(f)  # type: ignore[attr-defined]

            logger.debug(f"Loaded config from: {config_path}")
            return ProvisioningConfig.from_dict(data)

        except Exception as e:
            raise ConfigError(f"Failed to load config: {e}") from e

    @classmethod
    def save_config(cls, config: ProvisioningConfig, custom_path: str | None = None) -> Path:
        """Save configuration to file atomically with 0600 permissions.

        The admin password is never written.

        Returns:
            Path the config was written to

        Raises:
            ConfigError: If saving fails or path is outside allowed directories
        """
        temp_path: Path | None = None
        try:
            if custom_path:
                config_path = cls._validate_config_path(Path(custom_path).expanduser())
                config_path.parent.mkdir(parents=True, exist_ok=True)
            else:
                cls.DEFAULT_CONFIG_DIR.mkdir(parents=True, exist_ok=True)
                os.chmod(cls.DEFAULT_CONFIG_DIR, 0o700)
                config_path = cls.DEFAULT_CONFIG_FILE

            temp_path = config_path.with_suffix(".tmp")

            # Preserve comments and formatting of an existing file
            if config_path.exists():
                with open(config_path) as f:
                    doc = tomlkit.load(f)
            else:
                doc = tomlkit.document()
                doc.add(tomlkit.comment("azvmnet configuration"))

            for key, value in config.to_dict().items():
                doc[key] = value

            with open(temp_path, "w") as f:
                tomlkit.dump(doc, f)

            os.chmod(temp_path, 0o600)
            temp_path.replace(config_path)

            logger.debug(f"Saved config to: {config_path}")
            return config_path

        except ConfigError:
            raise
        except Exception as e:
            if temp_path and temp_path.exists():
                temp_path.unlink()
            raise ConfigError(f"Failed to save config: {e}") from e

    @classmethod
    def resolve_config(
        cls, custom_path: str | None = None, **overrides: Any
    ) -> ProvisioningConfig:
        """Load config, apply CLI overrides and validate.

        Args:
            custom_path: Custom config file path (optional)
            **overrides: CLI values; None means "not given"

        Returns:
            Validated ProvisioningConfig

        Raises:
            ConfigError: If loading or validation fails
        """
        config = cls.load_config(custom_path)
        data = asdict(config)
        for key, value in overrides.items():
            if value is None:
                continue
            if key not in data:
                raise ConfigError(f"Unknown configuration option: {key}")
            data[key] = value
        return ProvisioningConfig(**data).validate()


__all__ = ["ConfigManager", "ProvisioningConfig"]
