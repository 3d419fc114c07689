"""Pytest configuration and fixtures for azvmnet tests.

CRITICAL: Protects production configuration and real credentials from tests.
"""

import os
import shutil
from pathlib import Path

import pytest

CREDENTIAL_ENV_VARS = ("CLIENT_ID", "CLIENT_SECRET", "TENANT_ID", "SUBSCRIPTION_ID")


@pytest.fixture(scope="session", autouse=True)
def protect_production_config():
    """Protect ~/.azvmnet/config.toml from being modified by tests.

    This fixture:
    1. Backs up the real config.toml before any tests run
    2. Restores it after all tests complete
    """
    config_path = Path.home() / ".azvmnet" / "config.toml"
    backup_path = Path.home() / ".azvmnet" / ".config.toml.pytest-backup"

    config_existed = config_path.exists()
    if config_existed:
        shutil.copy2(config_path, backup_path)
        print(f"\n[PYTEST] Protected config.toml - backup at {backup_path}")

    yield

    if config_existed and backup_path.exists():
        shutil.copy2(backup_path, config_path)
        backup_path.unlink()
        print("\n[PYTEST] Restored config.toml from backup")
    elif backup_path.exists():
        backup_path.unlink()


@pytest.fixture(scope="session", autouse=True)
def prevent_real_azure_operations():
    """Prevent tests from reaching Azure with real credentials.

    Removes the service principal variables for the whole session and
    restores them afterwards. Tests that need credentials set fakes with
    monkeypatch.
    """
    saved = {name: os.environ.pop(name) for name in CREDENTIAL_ENV_VARS if name in os.environ}

    yield

    os.environ.update(saved)


@pytest.fixture
def isolated_config(tmp_path):
    """Provide isolated config directory for tests.

    Use this fixture instead of modifying ~/.azvmnet/config.toml.
    """
    config_dir = tmp_path / ".azvmnet"
    config_dir.mkdir(parents=True)
    return config_dir


@pytest.fixture
def mock_config_path(isolated_config, monkeypatch):
    """Point ConfigManager's default location at the isolated directory.

    Example:
        def test_something(mock_config_path):
            ConfigManager.save_config(config)  # Safe!
    """
    from azvmnet.config_manager import ConfigManager

    config_file = isolated_config / "config.toml"
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_DIR", isolated_config)
    monkeypatch.setattr(ConfigManager, "DEFAULT_CONFIG_FILE", config_file)
    return config_file
