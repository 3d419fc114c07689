"""azvmnet command line interface.

Commands:
    run           Provision the two-tier network and VMs, then delete them
    config init   Write a default config file
    config show   Print the effective configuration

Credentials are read from CLIENT_ID, CLIENT_SECRET, TENANT_ID and
SUBSCRIPTION_ID; they are never accepted as flags or stored in config.
"""

import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from azvmnet import __version__
from azvmnet.config_manager import ConfigManager, ProvisioningConfig
from azvmnet.exceptions import ConfigError
from azvmnet.log_sanitizer import LogSanitizer
from azvmnet.reporter import ProvisioningReporter
from azvmnet.runner import EXIT_CONFIG, ProvisioningRun

logger = logging.getLogger(__name__)

# Azure SDK loggers are chatty at INFO (every HTTP request)
_NOISY_LOGGERS = ("azure", "azure.core.pipeline.policies.http_logging_policy", "azure.identity")


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s" if verbose else "%(message)s",
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@click.group(context_settings={"help_option_names": ["--help", "-h"]})
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, verbose: bool) -> None:
    """azvmnet - provision a two-tier Azure VM network and tear it down.

    \b
    Creates, in a fresh resource group:
      - frontend and backend network security groups
      - a virtual network with Front-end and Back-end subnets
      - a public IP and one network interface per tier
      - a storage account
      - frontend and backend Linux VMs (10 + 10 by default)
    and deletes the resource group when done, also on failure.

    \b
    CREDENTIALS (environment):
        CLIENT_ID, CLIENT_SECRET, TENANT_ID, SUBSCRIPTION_ID

    \b
    CONFIGURATION:
        Config file: ~/.azvmnet/config.toml
        Create one with: azvmnet config init
    """
    _setup_logging(verbose)
    ctx.ensure_object(dict)


@main.command(name="run")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Config file path")
@click.option("--region", help="Azure region (default: eastus)")
@click.option("--frontend-count", type=click.IntRange(min=1), help="Number of frontend VMs")
@click.option("--backend-count", type=click.IntRange(min=1), help="Number of backend VMs")
@click.option("--vm-size", help="VM size (default: Standard_D2a_v4)")
@click.option(
    "--max-parallel",
    type=click.IntRange(min=1),
    help="VMs created at once within a tier (default: 1, sequential)",
)
def run_command(
    config_path: str | None,
    region: str | None,
    frontend_count: int | None,
    backend_count: int | None,
    vm_size: str | None,
    max_parallel: int | None,
) -> None:
    """Provision all resources, report them, then delete the resource group.

    \b
    Examples:
      $ azvmnet run
      $ azvmnet run --region westus2 --frontend-count 2 --backend-count 2
      $ azvmnet run --max-parallel 5
    """
    try:
        config = ConfigManager.resolve_config(
            config_path,
            region=region,
            frontend_vm_count=frontend_count,
            backend_vm_count=backend_count,
            vm_size=vm_size,
            max_parallel=max_parallel,
        )
    except ConfigError as e:
        click.echo(f"Error: {LogSanitizer.sanitize_exception(e)}", err=True)
        sys.exit(EXIT_CONFIG)

    exit_code = ProvisioningRun(config, reporter=ProvisioningReporter()).run()
    sys.exit(exit_code)


@main.group(name="config")
def config_group() -> None:
    """Manage the azvmnet config file."""
    pass


@config_group.command(name="init")
@click.argument("path", required=False, type=click.Path(dir_okay=False))
@click.option("--force", is_flag=True, help="Overwrite an existing file")
def config_init(path: str | None, force: bool) -> None:
    """Write a config file with default values.

    PATH defaults to ~/.azvmnet/config.toml.
    """
    target = Path(path).expanduser() if path else ConfigManager.DEFAULT_CONFIG_FILE
    if target.exists() and not force:
        click.echo(f"Error: {target} already exists (use --force to overwrite)", err=True)
        sys.exit(1)

    try:
        written = ConfigManager.save_config(ProvisioningConfig(), path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Wrote default configuration to {written}")


@config_group.command(name="show")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), help="Config file path")
def config_show(config_path: str | None) -> None:
    """Print the effective configuration."""
    try:
        config = ConfigManager.resolve_config(config_path)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    table = Table(title="azvmnet configuration", show_header=True)
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    for key, value in LogSanitizer.sanitize_dict(config.to_dict()).items():
        table.add_row(key, str(value))
    table.add_row("total_vm_count", str(config.total_vm_count))
    Console().print(table)


if __name__ == "__main__":
    main()
