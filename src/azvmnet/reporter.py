"""Progress reporting for provisioning runs.

Emits human-readable progress lines (created resource names and IDs, VM
creation time, resource group deletion) through logging, and renders a
summary table with rich at the end of a run. Purely observational: nothing
here influences control flow.
"""

import logging
import time
from collections import Counter

from rich.console import Console
from rich.table import Table

from azvmnet.log_sanitizer import LogSanitizer
from azvmnet.models import CreatedResource, ProvisioningResult, ResourceKind

logger = logging.getLogger(__name__)


class ProvisioningReporter:
    """Report provisioning progress to the log and console."""

    def __init__(self, console: Console | None = None):
        """Initialize reporter.

        Args:
            console: Rich console for the summary table (default: stdout)
        """
        self.console = console or Console()
        self._timer_start: float | None = None

    def log(self, message: str) -> None:
        """Emit one sanitized progress line."""
        logger.info(LogSanitizer.sanitize(message))

    def creating(self, kind: ResourceKind, name: str) -> None:
        self.log(f"Creating {kind}: {name}")

    def created(self, resource: CreatedResource) -> None:
        self.log(f"Created {resource.kind}: {resource.name} ({resource.id})")

    def start_timer(self) -> None:
        """Start timing a batch of operations."""
        self._timer_start = time.monotonic()

    def stop_timer(self) -> float:
        """Return seconds since start_timer() (0.0 if never started)."""
        if self._timer_start is None:
            return 0.0
        elapsed = time.monotonic() - self._timer_start
        self._timer_start = None
        return elapsed

    def virtual_machines_created(self, vms: list[CreatedResource], seconds: float) -> None:
        """Log the ID of every VM and the total creation time."""
        self.log("Created virtual machines")
        for vm in vms:
            self.log(vm.id)
        self.log(f"Virtual machines create: took {seconds:.2f} seconds")

    def deleting_resource_group(self, name: str) -> None:
        self.log(f"Deleting resource group : {name}")

    def deleted_resource_group(self, name: str) -> None:
        self.log(f"Deleted resource group : {name}")

    def failure(self, error: BaseException) -> None:
        """Log a run failure without leaking secrets."""
        logger.error(LogSanitizer.create_safe_error_message(error, type(error).__name__))

    def print_summary(self, result: ProvisioningResult) -> None:
        """Render created resource counts as a table."""
        counts = Counter(r.kind for r in result.resources)

        table = Table(title=f"Resource group {result.resource_group}", show_header=True)
        table.add_column("Resource", style="cyan")
        table.add_column("Created", justify="right")

        for kind in ResourceKind:
            table.add_row(str(kind), str(counts.get(kind, 0)))

        self.console.print(table)
        status = "[green]succeeded[/green]" if result.succeeded else "[red]failed[/red]"
        self.console.print(f"Run {status}, final state: {result.state}")
        if result.vm_creation_seconds:
            self.console.print(
                f"VM creation took {result.vm_creation_seconds:.1f} seconds "
                f"for {len(result.all_vms)} virtual machines"
            )


__all__ = ["ProvisioningReporter"]
