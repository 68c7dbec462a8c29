"""Tests for the per-collector error counter."""

import threading

from prometheus_client import CollectorRegistry, generate_latest

from scaleway_exporter.collectors.errors import ErrorCounter
from tests.testing_utils import error_count


class TestErrorCounter:
    """Test ErrorCounter exposition and concurrency."""

    def test_registered_collector_starts_at_zero(self, registry: CollectorRegistry):
        errors = ErrorCounter(registry)

        errors.register("database")

        assert registry.get_sample_value(
            "scaleway_errors_total", {"collector": "database"}
        ) == 0.0

    def test_increment(self, registry: CollectorRegistry):
        errors = ErrorCounter(registry)

        errors.increment("bucket")
        errors.increment("bucket")

        assert registry.get_sample_value(
            "scaleway_errors_total", {"collector": "bucket"}
        ) == 2.0

    def test_collectors_are_counted_separately(
        self, registry: CollectorRegistry, error_counter: ErrorCounter
    ):
        error_counter.register("loadbalancer")
        error_counter.increment("redis")

        assert error_count(registry, "redis") == 1.0
        assert error_count(registry, "loadbalancer") == 0.0
        assert error_count(registry, "database") is None

    def test_concurrent_increments_are_not_lost(
        self, registry: CollectorRegistry, error_counter: ErrorCounter
    ):
        def worker():
            for _ in range(200):
                error_counter.increment("database")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert error_count(registry, "database") == 1600.0

    def test_exposition_format(self, registry: CollectorRegistry):
        errors = ErrorCounter(registry)
        errors.register("billing")

        text = generate_latest(registry).decode("utf-8")

        assert "# TYPE scaleway_errors_total counter" in text
        assert 'scaleway_errors_total{collector="billing"} 0.0' in text
