"""Content-addressed cache of compiled templates."""

from __future__ import annotations

import threading

from credential_injection.core.template.compiler import CompiledTemplate, compile_template


class TemplateCache:
    """Thread-safe cache of compiled templates keyed by ``(text, allow_formula)``.

    Compiled templates are immutable, so entries never expire. Failed
    compilations raise and are not cached.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[tuple[str, bool], CompiledTemplate] = {}
        self._hits = 0
        self._misses = 0

    def get(self, text: str, allow_formula: bool = True) -> CompiledTemplate:
        """Return the compiled form of *text*, compiling on first use.

        Raises:
            MalformedTemplateError: If *text* does not compile.
        """
        key = (text, allow_formula)
        with self._lock:
            cached = self._entries.get(key)
            if cached is not None:
                self._hits += 1
                return cached
            self._misses += 1

        compiled = compile_template(text, allow_formula)

        with self._lock:
            return self._entries.setdefault(key, compiled)

    @property
    def hits(self) -> int:
        with self._lock:
            return self._hits

    @property
    def misses(self) -> int:
        with self._lock:
            return self._misses

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        """Drop all entries and reset counters."""
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0
