"""Scoped acquisition of the run's resource group.

The resource group owns every other resource, so deleting it is the only
cleanup a run needs. ``resource_group_scope`` creates the group on entry
and deletes it exactly once on exit, whatever happened inside the block:

    with resource_group_scope(clients.resource, name, region) as group:
        provision_everything(group)
    # group deleted here, also after an exception

If the group cannot be created nothing is deleted. A failed delete raises
TeardownError, which masks any error raised inside the block; that error
is kept on ``TeardownError.original_error``.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from azure.core.exceptions import AzureError

from azvmnet.exceptions import ProvisioningError, TeardownError
from azvmnet.log_sanitizer import LogSanitizer
from azvmnet.models import CreatedResource, ResourceKind
from azvmnet.reporter import ProvisioningReporter

logger = logging.getLogger(__name__)


@contextmanager
def resource_group_scope(
    resource_client: Any,
    name: str,
    region: str,
    reporter: ProvisioningReporter | None = None,
) -> Iterator[CreatedResource]:
    """Create a resource group, yield it and always delete it afterwards.

    Args:
        resource_client: ResourceManagementClient
        name: Resource group name
        region: Azure region
        reporter: Progress reporter (optional)

    Yields:
        CreatedResource describing the group

    Raises:
        ProvisioningError: If the group cannot be created
        TeardownError: If the group cannot be deleted
    """
    reporter = reporter or ProvisioningReporter()
    reporter.creating(ResourceKind.RESOURCE_GROUP, name)

    try:
        group = resource_client.resource_groups.create_or_update(name, {"location": region})
    except AzureError as e:
        raise ProvisioningError(
            LogSanitizer.create_safe_error_message(e, f"Failed to create resource group {name}"),
            step="resource_group",
        ) from e

    created = CreatedResource(ResourceKind.RESOURCE_GROUP, name, group.id)
    reporter.created(created)

    body_error: BaseException | None = None
    try:
        yield created
    except BaseException as e:
        body_error = e
        raise
    finally:
        reporter.deleting_resource_group(name)
        try:
            resource_client.resource_groups.begin_delete(name).result()
        except AzureError as e:
            raise TeardownError(
                LogSanitizer.create_safe_error_message(
                    e, f"Failed to delete resource group {name}"
                ),
                resource_group=name,
                original_error=body_error,
            ) from e
        reporter.deleted_resource_group(name)


__all__ = ["resource_group_scope"]
