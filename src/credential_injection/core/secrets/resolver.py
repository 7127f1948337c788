"""Composite and caching secret stores."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable

from credential_injection.core.secrets.base import (
    SecretLookupResult,
    SecretLookupStatus,
    SecretReference,
    SecretStore,
)


class ChainedSecretStore(SecretStore):
    """Consult several stores in registration order.

    The first answer that is not ``NOT_FOUND`` wins, so an ``ERROR`` from
    an earlier store is reported rather than masked by a later one.
    """

    def __init__(self, *stores: SecretStore) -> None:
        self._stores: list[SecretStore] = list(stores)

    @property
    def store_name(self) -> str:
        return "chain"

    def register(self, store: SecretStore) -> None:
        """Append a store to the chain."""
        self._stores.append(store)

    def lookup(self, container: str, key: str) -> SecretLookupResult:
        """Look up a secret in each store until one answers."""
        reference = SecretReference(container, key)
        if not self._stores:
            return SecretLookupResult.failed(reference, "No secret stores registered")

        misses: list[str] = []
        for store in self._stores:
            result = store.lookup(container, key)
            if result.status != SecretLookupStatus.NOT_FOUND:
                return result
            misses.append(store.store_name)
        return SecretLookupResult.not_found(
            reference, f"Not found in any store ({', '.join(misses)})"
        )


class CachedSecretStore(SecretStore):
    """Thread-safe caching wrapper for secret lookups.

    Only successful lookups are cached, with a configurable TTL, so a
    secret added after a miss becomes visible on the next request. Use
    :meth:`clear` to manually invalidate.

    Args:
        store: The underlying store to delegate to on cache miss.
        ttl_seconds: Cache entry lifetime in seconds. Defaults to 300.
        clock: Injectable monotonic clock for testing.
            Defaults to ``time.monotonic``.
    """

    def __init__(
        self,
        store: SecretStore,
        ttl_seconds: int = 300,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._store = store
        self._ttl = ttl_seconds
        self._clock = clock or time.monotonic
        self._cache: dict[tuple[str, str], tuple[SecretLookupResult, float]] = {}
        self._lock = threading.Lock()

    @property
    def store_name(self) -> str:
        return self._store.store_name

    def lookup(self, container: str, key: str) -> SecretLookupResult:
        """Look up a secret, returning a cached result if available."""
        cache_key = (container, key)
        now = self._clock()

        with self._lock:
            if cache_key in self._cache:
                result, timestamp = self._cache[cache_key]
                if now - timestamp < self._ttl:
                    return result
                del self._cache[cache_key]

        result = self._store.lookup(container, key)

        if result.found:
            with self._lock:
                self._cache[cache_key] = (result, self._clock())

        return result

    def invalidate(self, container: str, key: str | None = None) -> None:
        """Drop cached entries for a container, or for one key within it."""
        with self._lock:
            for cached in list(self._cache):
                if cached[0] == container and (key is None or cached[1] == key):
                    del self._cache[cached]

    def clear(self) -> None:
        """Clear all cached entries."""
        with self._lock:
            self._cache.clear()
