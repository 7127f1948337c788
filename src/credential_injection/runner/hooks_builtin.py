"""Built-in header building hooks: logging and metrics collection."""

from __future__ import annotations

import logging

from credential_injection.core.config.endpoint import EndpointConfig
from credential_injection.core.metrics.registry import MeterRegistry
from credential_injection.core.resolution.principal import Principal
from credential_injection.runner.result import HeaderSet

BUILT_METRIC = "cie_headers_built"
FAILED_METRIC = "cie_headers_failed"
DURATION_METRIC = "cie_build_duration_ms"


class LoggingHooks:
    """Hooks that log header building events.

    Only endpoint, principal, and header names are logged. Header values
    never reach the log. Uses ``%s`` formatting for lazy evaluation.

    Args:
        logger: Custom logger instance. Defaults to ``logging.getLogger("cie.headers")``.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("cie.headers")

    @property
    def logger(self) -> logging.Logger:
        """Return the logger used by this hooks instance."""
        return self._logger

    def before_build(self, endpoint: EndpointConfig, principal: Principal) -> None:
        self._logger.debug(
            "Building headers for endpoint '%s' (container '%s') as '%s'",
            endpoint.name,
            endpoint.container,
            principal.name,
        )

    def after_build(self, endpoint: EndpointConfig, principal: Principal, headers: HeaderSet, duration_ms: int) -> None:
        self._logger.info(
            "Built %d headers for endpoint '%s' as '%s' in %dms: %s",
            len(headers),
            endpoint.name,
            principal.name,
            duration_ms,
            ", ".join(headers.names),
        )

    def on_build_failure(self, endpoint: EndpointConfig, principal: Principal, error: Exception) -> None:
        self._logger.error(
            "Header building for endpoint '%s' as '%s' failed: %s",
            endpoint.name,
            principal.name,
            error,
        )


class MetricsHooks:
    """Hooks that record build counts, failures, and durations.

    Tags carry endpoint names and error types only.

    Args:
        registry: Meter registry receiving the measurements.
    """

    def __init__(self, registry: MeterRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> MeterRegistry:
        """Return the meter registry."""
        return self._registry

    def before_build(self, endpoint: EndpointConfig, principal: Principal) -> None:
        pass

    def after_build(self, endpoint: EndpointConfig, principal: Principal, headers: HeaderSet, duration_ms: int) -> None:
        tags = {"endpoint": endpoint.name}
        self._registry.counter(BUILT_METRIC, tags=tags)
        self._registry.timer(DURATION_METRIC, float(duration_ms), tags=tags)

    def on_build_failure(self, endpoint: EndpointConfig, principal: Principal, error: Exception) -> None:
        self._registry.counter(
            FAILED_METRIC,
            tags={"endpoint": endpoint.name, "error": type(error).__name__},
        )
