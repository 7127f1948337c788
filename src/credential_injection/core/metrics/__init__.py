"""Metrics collection and export abstractions."""

from credential_injection.core.metrics.exporters import PrometheusRegistry
from credential_injection.core.metrics.registry import InMemoryRegistry, MeterRegistry

__all__ = [
    "InMemoryRegistry",
    "MeterRegistry",
    "PrometheusRegistry",
]
