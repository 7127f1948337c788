"""Resolution context, principals, and merge-field lookup."""

from credential_injection.core.resolution.context import ContainerBinding, ResolutionContext
from credential_injection.core.resolution.merge_fields import (
    CREDENTIAL_NAMESPACE,
    MergeFieldResolver,
    NamespaceResolver,
    resolve,
)
from credential_injection.core.resolution.principal import (
    PermissionChecker,
    Principal,
    StaticPermissionChecker,
)

__all__ = [
    "CREDENTIAL_NAMESPACE",
    "ContainerBinding",
    "MergeFieldResolver",
    "NamespaceResolver",
    "PermissionChecker",
    "Principal",
    "ResolutionContext",
    "StaticPermissionChecker",
    "resolve",
]
