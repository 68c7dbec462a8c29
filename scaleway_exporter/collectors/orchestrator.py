"""Scrape orchestrator: runs every enabled collector under one deadline."""

import logging
import threading
import time
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any, Protocol

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector

from scaleway_exporter.collectors.descriptors import MetricDescriptor, Observation
from scaleway_exporter.collectors.scope import ScrapeScope
from scaleway_exporter.core.shutdown import LifetimeEvent

if TYPE_CHECKING:
    from scaleway_exporter.core.shutdown import ShutdownCoordinatorProtocol

logger = logging.getLogger(__name__)


class ScrapeCollector(Protocol):
    """What the orchestrator needs from a family collector."""

    name: str

    def describe(self) -> list[MetricDescriptor[Any]]: ...

    def collect(self, scope: ScrapeScope) -> None: ...


class ScrapeOrchestrator(Collector):
    """prometheus_client collector invoked on every pull of the metrics page.

    All collectors are started concurrently in one ``ScrapeScope`` and the
    scrape returns once they have all finished or the shared timeout expired.
    Samples are grouped per descriptor and sorted by label values, so an
    unchanged upstream yields identical output on every scrape.
    """

    def __init__(
        self,
        collectors: Sequence[ScrapeCollector],
        timeout: float,
        shutdown_coordinator: "ShutdownCoordinatorProtocol",
    ):
        """Initialize the orchestrator.

        Args:
            collectors: Enabled family collectors, in exposition order.
            timeout: Shared deadline of one scrape in seconds.
            shutdown_coordinator: Coordinator for graceful shutdown.
        """
        self.collectors = list(collectors)
        self.timeout = timeout
        self._shutting_down = False
        self._active: set[ScrapeScope] = set()
        self._idle = threading.Condition()

        shutdown_coordinator.register_lifetime_notification(self._on_lifetime_event)
        shutdown_coordinator.register_shutdown_waiter(
            "ScrapeOrchestrator", self._wait_for_scrapes
        )

        logger.info(
            "Scrape orchestrator ready",
            extra={
                "collectors": [collector.name for collector in self.collectors],
                "timeout": timeout,
            },
        )

    def descriptors(self) -> list[MetricDescriptor[Any]]:
        result: list[MetricDescriptor[Any]] = []
        for collector in self.collectors:
            result.extend(collector.describe())
        return result

    def describe(self) -> Iterator[Metric]:
        for descriptor in self.descriptors():
            yield _family(descriptor)

    def collect(self) -> Iterator[Metric]:
        yield from self._families(self.scrape())

    def scrape(self) -> list[Observation]:
        """Run one full scrape and return its observations."""
        scope = ScrapeScope(self.timeout)

        with self._idle:
            if self._shutting_down:
                logger.debug("Shutting down, skipping scrape")
                return []
            self._active.add(scope)

        started = time.perf_counter()
        try:
            for collector in self.collectors:
                scope.spawn(collector.collect, scope, name=f"scrape-{collector.name}")
            scope.join()
        finally:
            with self._idle:
                self._active.discard(scope)
                self._idle.notify_all()

        observations = scope.sink.drain()
        logger.debug(
            "Scrape finished",
            extra={
                "duration": time.perf_counter() - started,
                "observations": len(observations),
                "dropped": scope.sink.dropped,
            },
        )
        return observations

    def _families(self, observations: list[Observation]) -> Iterator[Metric]:
        by_name: dict[str, list[Observation]] = {}
        for observation in observations:
            by_name.setdefault(observation.descriptor.name, []).append(observation)

        for descriptor in self.descriptors():
            family = _family(descriptor)
            for observation in by_name.get(descriptor.name, []):
                family.add_metric(list(observation.label_values), observation.value)
            yield family

    def _on_lifetime_event(self, event: LifetimeEvent) -> None:
        if event == LifetimeEvent.PREPARE_SHUTDOWN:
            with self._idle:
                self._shutting_down = True
                active = list(self._active)
            for scope in active:
                scope.abandon()

    def _wait_for_scrapes(self, timeout: float) -> bool:
        with self._idle:
            return self._idle.wait_for(lambda: not self._active, timeout=timeout)


def _family(descriptor: MetricDescriptor[Any]) -> GaugeMetricFamily:
    return GaugeMetricFamily(
        descriptor.name,
        descriptor.documentation,
        labels=list(descriptor.label_names),
    )
