"""Tests for MetricsService exposition and shutdown metrics."""

from prometheus_client import CollectorRegistry, generate_latest

from scaleway_exporter.collectors.exporter import ExporterCollector
from scaleway_exporter.core.shutdown import LifetimeEvent
from scaleway_exporter.metrics.service import MetricsService, create_registry
from tests.testing_utils import StubShutdownCoordinator, TestShutdownCoordinator


class TestCreateRegistry:
    def test_includes_platform_collector(self):
        text = generate_latest(create_registry()).decode("utf-8")

        assert "python_info" in text

    def test_is_not_the_global_registry(self):
        from prometheus_client import REGISTRY

        assert create_registry() is not REGISTRY


class TestMetricsService:
    """Test MetricsService behavior."""

    def _make_service(self, coordinator=None, collectors=None):
        registry = CollectorRegistry()
        service = MetricsService(
            registry=registry,
            shutdown_coordinator=coordinator or StubShutdownCoordinator(),
            collectors=collectors,
        )
        return service, registry

    def test_registers_collectors(self):
        service, _ = self._make_service(
            collectors=[ExporterCollector("1.0.0", "rev", "today")]
        )

        text = service.get_metrics_text()

        assert "scaleway_exporter_build_info" in text
        assert 'version="1.0.0"' in text

    def test_shutdown_gauge_starts_at_zero(self):
        service, registry = self._make_service()

        assert registry.get_sample_value("application_shutting_down") == 0.0
        assert "application_shutting_down 0.0" in service.get_metrics_text()

    def test_prepare_shutdown_sets_gauge(self):
        coordinator = TestShutdownCoordinator()
        _, registry = self._make_service(coordinator=coordinator)

        coordinator.simulate_shutdown()

        assert registry.get_sample_value("application_shutting_down") == 1.0

    def test_shutdown_records_duration(self):
        coordinator = StubShutdownCoordinator()
        service, registry = self._make_service(coordinator=coordinator)

        service._on_lifetime_event(LifetimeEvent.PREPARE_SHUTDOWN)
        service._on_lifetime_event(LifetimeEvent.SHUTDOWN)

        assert registry.get_sample_value("graceful_shutdown_duration_seconds_count") == 1.0

    def test_duration_not_recorded_without_prepare(self):
        service, registry = self._make_service()

        service._on_lifetime_event(LifetimeEvent.SHUTDOWN)

        assert registry.get_sample_value("graceful_shutdown_duration_seconds_count") == 0.0
