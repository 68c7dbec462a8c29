"""Prometheus exposition for the exporter registry.

The exporter uses its own ``CollectorRegistry`` rather than the global one:
the scrape orchestrator, the error counter, build info and the process
collectors are registered on it, and ``get_metrics_text()`` renders all of
them.
"""

import logging
import time
from typing import TYPE_CHECKING

from prometheus_client import (
    CollectorRegistry,
    Gauge,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)
from prometheus_client.registry import Collector

from scaleway_exporter.core.shutdown import LifetimeEvent

if TYPE_CHECKING:
    from scaleway_exporter.core.shutdown import ShutdownCoordinatorProtocol

logger = logging.getLogger(__name__)


def create_registry() -> CollectorRegistry:
    """Registry preloaded with the standard process and platform collectors."""
    registry = CollectorRegistry()
    ProcessCollector(registry=registry)
    PlatformCollector(registry=registry)
    return registry


class MetricsService:
    """Owns the exporter registry and the shutdown-state metrics."""

    def __init__(
        self,
        registry: CollectorRegistry,
        shutdown_coordinator: "ShutdownCoordinatorProtocol",
        collectors: "list[Collector] | None" = None,
    ):
        """Initialize metrics service.

        Args:
            registry: Registry rendered on every pull.
            shutdown_coordinator: Coordinator for graceful shutdown.
            collectors: Custom collectors to register (orchestrator, build info).
        """
        self.registry = registry
        self.shutdown_coordinator = shutdown_coordinator
        self._shutdown_start_time: float | None = None

        for collector in collectors or []:
            registry.register(collector)

        self.shutdown_coordinator.register_lifetime_notification(
            self._on_lifetime_event
        )

        self.application_shutting_down = Gauge(
            "application_shutting_down",
            "Whether application is shutting down (1=yes, 0=no)",
            registry=registry,
        )

        self.graceful_shutdown_duration_seconds = Histogram(
            "graceful_shutdown_duration_seconds",
            "Duration of graceful shutdowns",
            registry=registry,
        )

    def get_metrics_text(self) -> str:
        """Run a scrape and render every registered metric in text format."""
        return generate_latest(self.registry).decode("utf-8")

    def set_shutdown_state(self, is_shutting_down: bool) -> None:
        self.application_shutting_down.set(1 if is_shutting_down else 0)
        if is_shutting_down:
            self._shutdown_start_time = time.perf_counter()

    def _on_lifetime_event(self, event: LifetimeEvent) -> None:
        match event:
            case LifetimeEvent.PREPARE_SHUTDOWN:
                self.set_shutdown_state(True)
            case LifetimeEvent.SHUTDOWN:
                self._record_shutdown_duration()

    def _record_shutdown_duration(self) -> None:
        if self._shutdown_start_time:
            duration = time.perf_counter() - self._shutdown_start_time
            self.graceful_shutdown_duration_seconds.observe(duration)
