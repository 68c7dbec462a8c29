"""Tests for the exporter build info collector."""

import platform

from prometheus_client import CollectorRegistry

from scaleway_exporter.collectors.exporter import ExporterCollector


class TestExporterCollector:
    def test_build_info(self):
        registry = CollectorRegistry()
        registry.register(ExporterCollector("1.2.3", "abc123", "2024-01-01"))

        value = registry.get_sample_value(
            "scaleway_exporter_build_info",
            {
                "version": "1.2.3",
                "revision": "abc123",
                "build_date": "2024-01-01",
                "python_version": platform.python_version(),
            },
        )

        assert value == 1.0

    def test_start_time(self):
        registry = CollectorRegistry()
        registry.register(ExporterCollector("dev", "", "", start_time=1700000000.0))

        assert registry.get_sample_value("scaleway_exporter_start_time_seconds") == 1700000000.0
