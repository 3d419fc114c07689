"""Unit tests for config_manager module.

Tests configuration handling:
- Defaults and validation
- TOML load/save with 0600 permissions
- CLI override precedence
"""

import os

import pytest

from azvmnet.config_manager import ConfigManager, ProvisioningConfig
from azvmnet.exceptions import ConfigError


class TestProvisioningConfig:
    """Test ProvisioningConfig defaults and validation."""

    def test_defaults(self):
        config = ProvisioningConfig()

        assert config.region == "eastus"
        assert config.frontend_vm_count == 10
        assert config.backend_vm_count == 10
        assert config.vm_size == "Standard_D2a_v4"
        assert config.address_space == "172.16.0.0/16"
        assert config.frontend_subnet_prefix == "172.16.1.0/24"
        assert config.backend_subnet_prefix == "172.16.2.0/24"
        assert config.max_parallel == 1
        assert config.total_vm_count == 20

    def test_validate_returns_self(self):
        config = ProvisioningConfig()

        assert config.validate() is config

    @pytest.mark.parametrize("field", ["frontend_vm_count", "backend_vm_count", "max_parallel"])
    @pytest.mark.parametrize("value", [0, -1, True, "3"])
    def test_rejects_non_positive_counts(self, field, value):
        config = ProvisioningConfig(**{field: value})

        with pytest.raises(ConfigError, match=field):
            config.validate()

    def test_rejects_blank_region(self):
        with pytest.raises(ConfigError, match="region"):
            ProvisioningConfig(region="  ").validate()

    @pytest.mark.parametrize(
        "field", ["region", "vm_size", "address_space", "image_sku", "storage_sku"]
    )
    def test_rejects_non_string_values(self, field):
        config = ProvisioningConfig(**{field: 5})

        with pytest.raises(ConfigError, match=f"{field} must be a string"):
            config.validate()

    def test_rejects_non_string_admin_username(self):
        with pytest.raises(ConfigError, match="admin_username"):
            ProvisioningConfig(admin_username=123).validate()

    def test_rejects_overlapping_subnets(self):
        config = ProvisioningConfig(backend_subnet_prefix="172.16.1.0/24")

        with pytest.raises(ConfigError, match="Invalid address layout"):
            config.validate()

    def test_rejects_subnet_outside_address_space(self):
        config = ProvisioningConfig(address_space="10.0.0.0/16")

        with pytest.raises(ConfigError):
            config.validate()

    def test_to_dict_never_includes_password_by_default(self):
        config = ProvisioningConfig(admin_password="Str0ng!Passw0rd-xyz")

        assert "admin_password" not in config.to_dict()
        assert config.to_dict(include_secrets=True)["admin_password"] == "Str0ng!Passw0rd-xyz"

    def test_to_dict_drops_unset_values(self):
        assert "admin_username" not in ProvisioningConfig().to_dict()

    def test_from_dict_ignores_unknown_keys(self, caplog):
        config = ProvisioningConfig.from_dict({"region": "westus2", "colour": "blue"})

        assert config.region == "westus2"
        assert "colour" in caplog.text


class TestLoadAndSave:
    """Test reading and writing the TOML file."""

    def test_missing_default_file_gives_defaults(self, mock_config_path):
        assert not mock_config_path.exists()

        assert ConfigManager.load_config() == ProvisioningConfig()

    def test_save_writes_secure_file(self, mock_config_path):
        path = ConfigManager.save_config(ProvisioningConfig(region="westus2"))

        assert path == mock_config_path
        assert mock_config_path.stat().st_mode & 0o777 == 0o600
        assert ConfigManager.load_config().region == "westus2"

    def test_save_never_writes_admin_password(self, mock_config_path):
        ConfigManager.save_config(ProvisioningConfig(admin_password="Str0ng!Passw0rd-xyz"))

        assert "Str0ng!Passw0rd-xyz" not in mock_config_path.read_text()

    def test_save_preserves_comments(self, mock_config_path):
        mock_config_path.write_text('# my notes\nregion = "eastus"\n')

        ConfigManager.save_config(ProvisioningConfig(region="westeurope"))

        text = mock_config_path.read_text()
        assert "# my notes" in text
        assert 'region = "westeurope"' in text

    def test_load_fixes_insecure_permissions(self, mock_config_path):
        mock_config_path.write_text('region = "eastus"\n')
        os.chmod(mock_config_path, 0o644)

        ConfigManager.load_config()

        assert mock_config_path.stat().st_mode & 0o777 == 0o600

    def test_load_invalid_toml_raises(self, mock_config_path):
        mock_config_path.write_text("region = [unterminated\n")

        with pytest.raises(ConfigError, match="Failed to load config"):
            ConfigManager.load_config()

    def test_custom_path_must_exist(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            ConfigManager.load_config(str(tmp_path / "missing.toml"))

    def test_custom_path_outside_allowed_dirs_rejected(self):
        with pytest.raises(ConfigError, match="outside allowed"):
            ConfigManager.save_config(ProvisioningConfig(), "/etc/azvmnet/config.toml")

    def test_custom_path_round_trip(self, tmp_path):
        path = tmp_path / "custom.toml"

        ConfigManager.save_config(ProvisioningConfig(frontend_vm_count=2), str(path))

        assert ConfigManager.load_config(str(path)).frontend_vm_count == 2


class TestResolveConfig:
    """Test CLI overrides on top of the file."""

    def test_overrides_beat_file(self, mock_config_path):
        mock_config_path.write_text('region = "westus2"\nfrontend_vm_count = 4\n')

        config = ConfigManager.resolve_config(region="northeurope", frontend_vm_count=None)

        assert config.region == "northeurope"
        assert config.frontend_vm_count == 4

    def test_unknown_override_raises(self, mock_config_path):
        with pytest.raises(ConfigError, match="Unknown configuration option"):
            ConfigManager.resolve_config(colour="blue")

    def test_result_is_validated(self, mock_config_path):
        mock_config_path.write_text("backend_vm_count = 0\n")

        with pytest.raises(ConfigError, match="backend_vm_count"):
            ConfigManager.resolve_config()

    def test_wrong_type_in_file_raises_config_error(self, mock_config_path):
        mock_config_path.write_text("region = 5\n")

        with pytest.raises(ConfigError, match="region must be a string"):
            ConfigManager.resolve_config()
