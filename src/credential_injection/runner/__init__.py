"""Header building: snapshot, augmenter, hooks, and wiring."""

from credential_injection.runner.audit_hooks import AuditHooks
from credential_injection.runner.augmenter import RequestAugmenter
from credential_injection.runner.factory import (
    build_audit_sink,
    build_augmenter,
    build_hooks,
    build_registry,
    build_secret_store,
)
from credential_injection.runner.hooks import (
    AugmentHooks,
    CompositeHooks,
    NoOpHooks,
)
from credential_injection.runner.hooks_builtin import (
    LoggingHooks,
    MetricsHooks,
)
from credential_injection.runner.result import Header, HeaderSet
from credential_injection.runner.snapshot import BoundTemplate, ConfigurationSnapshot

__all__ = [
    "AugmentHooks",
    "AuditHooks",
    "BoundTemplate",
    "CompositeHooks",
    "ConfigurationSnapshot",
    "Header",
    "HeaderSet",
    "LoggingHooks",
    "MetricsHooks",
    "NoOpHooks",
    "RequestAugmenter",
    "build_audit_sink",
    "build_augmenter",
    "build_hooks",
    "build_registry",
    "build_secret_store",
]
