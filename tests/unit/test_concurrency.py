"""Concurrency tests for thread-safe components.

Validates that TemplateCache, CachedSecretStore, InMemoryRegistry, and
RequestAugmenter behave correctly under contention from multiple threads.
"""

from __future__ import annotations

import threading
from unittest.mock import MagicMock

from credential_injection.core.config.endpoint import EndpointConfig
from credential_injection.core.config.hooks import HooksConfig
from credential_injection.core.metrics.registry import InMemoryRegistry
from credential_injection.core.resolution.principal import Principal
from credential_injection.core.secrets.base import SecretLookupResult, SecretReference, SecretStore
from credential_injection.core.secrets.resolver import CachedSecretStore
from credential_injection.core.template.cache import TemplateCache
from credential_injection.runner.factory import build_hooks
from tests.factories import (
    make_augmenter,
    make_container,
    make_credential_config,
    make_header,
    make_mapping,
    make_store,
)

THREADS = 8
ITERATIONS = 200


def _run_threads(worker) -> list[BaseException]:
    errors: list[BaseException] = []
    barrier = threading.Barrier(THREADS)

    def wrapped(index: int) -> None:
        barrier.wait()
        try:
            worker(index)
        except BaseException as exc:  # noqa: BLE001
            errors.append(exc)

    threads = [threading.Thread(target=wrapped, args=(i,)) for i in range(THREADS)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return errors


# ---------------------------------------------------------------------------
# TemplateCache
# ---------------------------------------------------------------------------


class TestTemplateCacheConcurrency:
    def test_single_entry_per_template(self) -> None:
        cache = TemplateCache()
        seen: list[object] = []
        lock = threading.Lock()

        def worker(index: int) -> None:
            for _ in range(ITERATIONS):
                compiled = cache.get("Bearer {!$Credential.GitHub.Token}")
                with lock:
                    seen.append(compiled)

        assert _run_threads(worker) == []
        assert len(cache) == 1
        assert len({id(c) for c in seen}) == 1
        assert cache.hits + cache.misses == THREADS * ITERATIONS


# ---------------------------------------------------------------------------
# CachedSecretStore
# ---------------------------------------------------------------------------


class TestCachedSecretStoreConcurrency:
    def test_concurrent_lookups(self) -> None:
        inner = MagicMock(spec=SecretStore)
        inner.store_name = "mock"
        inner.lookup.return_value = SecretLookupResult.success(SecretReference("GitHub", "token"), "gh-123")
        cached = CachedSecretStore(inner, ttl_seconds=300)

        def worker(index: int) -> None:
            for _ in range(ITERATIONS):
                assert cached.lookup("GitHub", "token").value == "gh-123"

        assert _run_threads(worker) == []
        assert inner.lookup.call_count <= THREADS


# ---------------------------------------------------------------------------
# RequestAugmenter
# ---------------------------------------------------------------------------


class TestAugmenterConcurrency:
    def test_concurrent_builds_are_deterministic(self) -> None:
        jira = make_container(
            "Jira",
            parameters=["User", "Pass"],
            mappings=[
                make_mapping("admin", "jira-admin", 1, {"User": "admin_user", "Pass": "admin_pass"}),
                make_mapping("svc", "jira-user", 10, {"User": "user", "Pass": "pass"}),
            ],
            headers=[
                make_header(
                    "Authorization",
                    "{!'Basic ' & BASE64($Credential.Jira.User & ':' & $Credential.Jira.Pass)}",
                ),
            ],
        )
        store = make_store({
            ("Jira", "admin_user"): "root",
            ("Jira", "admin_pass"): "hunter2",
            ("Jira", "user"): "svc",
            ("Jira", "pass"): "s3cret",
        })
        config = make_credential_config([jira], [])
        registry = InMemoryRegistry()
        augmenter = make_augmenter(config, store, hooks=build_hooks(HooksConfig(), registry=registry))
        admin = Principal("admin", frozenset({"jira-admin", "jira-user"}))
        user = Principal("bob", frozenset({"jira-user"}))
        target = EndpointConfig("jira-search", "https://jira.example.com", "Jira")
        results: dict[int, set[str]] = {i: set() for i in range(THREADS)}

        def worker(index: int) -> None:
            principal = admin if index % 2 == 0 else user
            for _ in range(ITERATIONS):
                headers = augmenter.build_headers(target, principal)
                results[index].add(headers.get("Authorization") or "")

        assert _run_threads(worker) == []
        for index, values in results.items():
            expected = "Basic cm9vdDpodW50ZXIy" if index % 2 == 0 else "Basic c3ZjOnMzY3JldA=="
            assert values == {expected}
        assert registry.get_counter("cie_headers_built", {"endpoint": "jira-search"}) == THREADS * ITERATIONS
