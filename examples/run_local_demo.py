"""Local demo: build credential headers from an in-memory secret store.

Demonstrates permission-set mapping selection, formula templates, and
lifecycle hooks without any external secret service.

Usage:
    python examples/run_local_demo.py
"""

from __future__ import annotations

from pathlib import Path

from credential_injection.core.audit import LoggingAuditSink
from credential_injection.core.config import CredentialConfig, load_from_file
from credential_injection.core.exceptions import AugmentError
from credential_injection.core.metrics import InMemoryRegistry
from credential_injection.core.resolution import Principal
from credential_injection.core.secrets import AuditedSecretStore, InMemorySecretStore
from credential_injection.core.utils import mask_value
from credential_injection.runner import (
    AuditHooks,
    CompositeHooks,
    LoggingHooks,
    MetricsHooks,
    RequestAugmenter,
)


def main() -> None:
    """Load config, attach hooks, build headers for a few principals."""
    # 1. Load HOCON configuration
    config_path = str(Path(__file__).parent / "credentials.conf")
    config = load_from_file(config_path, CredentialConfig)
    print(f"Configuration: {config.name}")

    # 2. Stand-in secret store
    sink = LoggingAuditSink()
    store = AuditedSecretStore(
        InMemorySecretStore({
            ("GitHub", "token"): "ghp_demo_token",
            ("Jira", "admin_user"): "Admin",
            ("Jira", "admin_pass"): "admin-secret",
            ("Jira", "svc_user"): "Svc-Bot",
            ("Jira", "svc_pass"): "svc-secret",
        }),
        sink,
    )

    # 3. Compose lifecycle hooks
    registry = InMemoryRegistry()
    hooks = CompositeHooks(LoggingHooks(), MetricsHooks(registry), AuditHooks(sink))

    # 4. Build headers
    augmenter = RequestAugmenter.from_config(config, store, hooks=hooks)
    principals = [
        Principal("alice", frozenset({"integration-user", "jira-user"})),
        Principal("root", frozenset({"jira-admin", "jira-user"})),
        Principal("guest"),
    ]
    for principal in principals:
        for endpoint in augmenter.snapshot.endpoint_names:
            try:
                headers = augmenter.build_headers(endpoint, principal)
            except AugmentError as exc:
                print(f"\n{principal.name} -> {endpoint}: {type(exc).__name__}: {exc}")
                continue
            print(f"\n{principal.name} -> {endpoint}:")
            for header in headers:
                print(f"  {header.name}: {mask_value(header.value, visible_chars=4)}")

    # 5. Print metrics
    print("\nMetrics:")
    for name, buckets in registry.get_metrics()["counters"].items():
        for tags, value in buckets.items():
            print(f"  {name}{{{tags}}} = {value:g}")


if __name__ == "__main__":
    main()
