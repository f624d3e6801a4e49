"""Provider utilities and built-in registrations."""

# Import built-in resource kinds for side effects (registration)
from octoform.providers import github as _github  # noqa: F401
from octoform.providers.github import GitHubProvider
from octoform.providers.importer import ImportResolver
from octoform.providers.reconciler import Reconciler, ReconcileResult, ResourceStatus
from octoform.providers.registry import (
    create_resource,
    list_resources,
    register_resource,
    resource_schemas,
)

__all__ = [
    "GitHubProvider",
    "ImportResolver",
    "ReconcileResult",
    "Reconciler",
    "ResourceStatus",
    "create_resource",
    "list_resources",
    "register_resource",
    "resource_schemas",
]
