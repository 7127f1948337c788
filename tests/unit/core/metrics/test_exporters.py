"""Tests for the Prometheus metric registry adapter."""

from __future__ import annotations

from unittest.mock import patch

import pytest

from credential_injection.core.metrics.exporters import PrometheusRegistry
from credential_injection.core.metrics.registry import MeterRegistry

prometheus_client = pytest.importorskip("prometheus_client")


@pytest.fixture
def collector():
    return prometheus_client.CollectorRegistry()


class TestPrometheusRegistryProtocol:
    """PrometheusRegistry satisfies the MeterRegistry protocol."""

    def test_implements_protocol(self, collector) -> None:
        assert isinstance(PrometheusRegistry(collector), MeterRegistry)

    def test_missing_dependency(self) -> None:
        with patch.dict("sys.modules", {"prometheus_client": None}):
            with pytest.raises(ImportError, match="pip install prometheus-client"):
                PrometheusRegistry()


class TestPrometheusCounter:
    def test_counter_no_tags(self, collector) -> None:
        reg = PrometheusRegistry(collector)
        reg.counter("cie_test_built")
        reg.counter("cie_test_built", value=2.0)

        assert collector.get_sample_value("cie_test_built_total") == 3.0
        assert "cie_test_built" in reg.get_metrics()["counters"]

    def test_counter_with_tags(self, collector) -> None:
        reg = PrometheusRegistry(collector)
        reg.counter("cie_test_failed", tags={"endpoint": "github-api", "error": "EvalFailedError"})

        value = collector.get_sample_value(
            "cie_test_failed_total",
            {"endpoint": "github-api", "error": "EvalFailedError"},
        )
        assert value == 1.0


class TestPrometheusTimer:
    def test_timer_no_tags(self, collector) -> None:
        reg = PrometheusRegistry(collector)
        reg.timer("cie_test_duration", 12.5)

        assert collector.get_sample_value("cie_test_duration_sum") == 12.5
        assert collector.get_sample_value("cie_test_duration_count") == 1.0

    def test_timer_with_tags(self, collector) -> None:
        reg = PrometheusRegistry(collector)
        reg.timer("cie_test_tagged_duration", 5.0, tags={"endpoint": "jira"})
        reg.timer("cie_test_tagged_duration", 7.0, tags={"endpoint": "jira"})

        assert collector.get_sample_value("cie_test_tagged_duration_sum", {"endpoint": "jira"}) == 12.0


class TestPrometheusGetMetrics:
    def test_empty_registry(self, collector) -> None:
        assert PrometheusRegistry(collector).get_metrics() == {"counters": [], "timers": []}

    def test_all_kinds(self, collector) -> None:
        reg = PrometheusRegistry(collector)
        reg.counter("cie_test_a")
        reg.timer("cie_test_b", 1.0)

        assert reg.get_metrics() == {"counters": ["cie_test_a"], "timers": ["cie_test_b"]}
