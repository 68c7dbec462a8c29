"""Generic per-family resource collector.

Each resource family (databases, buckets, load balancers, Redis clusters) is
described by a ``CollectorFamily``. ``ResourceCollector`` runs the same scrape
for all of them: list resources per partition, report liveness, fetch metric
series per resource, reduce each series and emit one gauge sample.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Generic

from scaleway_exporter.collectors.descriptors import (
    L,
    MetricDescriptor,
    Observation,
    SeriesRegistry,
)
from scaleway_exporter.collectors.errors import ErrorCounter
from scaleway_exporter.collectors.model import Resource, TimeSeries, UpstreamStatus
from scaleway_exporter.collectors.reducer import latest_value
from scaleway_exporter.collectors.scope import ScrapeScope
from scaleway_exporter.exceptions import ScalewayResponseError

logger = logging.getLogger(__name__)

HEALTHY = 1.0
DEGRADED = 0.5
DOWN = 0.0

ListResources = Callable[[str, float], list[Resource]]
FetchSeries = Callable[[Resource, "str | None", float], list[TimeSeries]]


def status_tiers(
    healthy: Iterable[UpstreamStatus],
    degraded: Iterable[UpstreamStatus],
    down: Iterable[UpstreamStatus],
) -> dict[UpstreamStatus, float]:
    """Build a status -> up value table from the three liveness tiers."""
    table: dict[UpstreamStatus, float] = {}
    for value, statuses in ((HEALTHY, healthy), (DEGRADED, degraded), (DOWN, down)):
        for status in statuses:
            if status in table:
                raise ValueError(f"Status {status.value!r} assigned to two tiers")
            table[status] = value
    return table


@dataclass(frozen=True)
class Liveness(Generic[L]):
    """Synthetic ``up`` gauge derived from a resource's own status."""

    descriptor: MetricDescriptor[L]
    build_labels: Callable[[Resource], L]
    status_type: type[UpstreamStatus]
    values: Mapping[UpstreamStatus, float]

    def __post_init__(self) -> None:
        missing = [status.value for status in self.status_type if status not in self.values]
        if missing:
            raise ValueError(
                f"{self.descriptor.name}: no liveness value for status "
                f"{', '.join(missing)}"
            )

    def observe(self, resource: Resource) -> Observation:
        status = resource.status
        if status is None:
            status = self.status_type.parse(None)
        return self.descriptor.observe(self.values[status], self.build_labels(resource))


@dataclass(frozen=True)
class CollectorFamily:
    """Everything that differs between two resource collectors."""

    name: str
    partitions: tuple[str, ...]
    list_resources: ListResources
    fetch_series: FetchSeries
    registry: SeriesRegistry
    liveness: Liveness[Any] | None = None
    # One upstream call per entry; None means a single call returns every series
    metric_requests: tuple[str | None, ...] = (None,)
    partition_kind: str = "region"


class ResourceCollector:
    """Scrapes one resource family across all of its partitions."""

    def __init__(self, family: CollectorFamily, errors: ErrorCounter) -> None:
        self.family = family
        self._errors = errors

        errors.register(family.name)
        logger.info(f"{family.name.capitalize()} collector enabled")

    @property
    def name(self) -> str:
        return self.family.name

    def describe(self) -> list[MetricDescriptor[Any]]:
        descriptors: list[MetricDescriptor[Any]] = []
        if self.family.liveness is not None:
            descriptors.append(self.family.liveness.descriptor)
        descriptors.extend(self.family.registry.descriptors())
        return descriptors

    def collect(self, scope: ScrapeScope) -> None:
        """Start one task per partition; the caller joins the scope."""
        for partition in self.family.partitions:
            scope.spawn(
                self._collect_partition,
                scope,
                partition,
                name=f"{self.name}-{partition}",
            )

    def _collect_partition(self, scope: ScrapeScope, partition: str) -> None:
        context = {"collector": self.name, self.family.partition_kind: partition}

        try:
            resources = self.family.list_resources(partition, scope.remaining())
        except ScalewayResponseError as e:
            if e.is_not_implemented:
                logger.debug(
                    f"{self.name.capitalize()} is not supported in this "
                    f"{self.family.partition_kind}",
                    extra=context,
                )
                return
            self._partition_failed(context, e)
            return
        except Exception as e:
            self._partition_failed(context, e)
            return

        logger.debug(f"Found {len(resources)} {self.name} resources", extra=context)

        for resource in resources:
            scope.spawn(
                self._collect_resource,
                scope,
                resource,
                name=f"{self.name}-{resource.id}",
            )

    def _partition_failed(self, context: dict[str, str], error: Exception) -> None:
        self._errors.increment(self.name)
        logger.warning(
            f"Can't fetch the list of {self.name} resources",
            extra={**context, "error": str(error)},
        )

    def _collect_resource(self, scope: ScrapeScope, resource: Resource) -> None:
        if self.family.liveness is not None:
            scope.emit(self.family.liveness.observe(resource))

        logger.debug(
            f"Fetching metrics for {self.name} resource",
            extra=self._resource_context(resource),
        )

        requests = self.family.metric_requests
        if len(requests) == 1:
            self._collect_series(scope, resource, requests[0])
            return

        for metric_name in requests:
            scope.spawn(
                self._collect_series,
                scope,
                resource,
                metric_name,
                name=f"{self.name}-{resource.id}-{metric_name}",
            )

    def _collect_series(
        self, scope: ScrapeScope, resource: Resource, metric_name: str | None
    ) -> None:
        context = self._resource_context(resource)
        if metric_name is not None:
            context["metric"] = metric_name

        if scope.expired:
            logger.debug("Scrape deadline passed, skipping metric fetch", extra=context)
            return

        try:
            series_list = self.family.fetch_series(resource, metric_name, scope.remaining())
        except Exception as e:
            self._errors.increment(self.name)
            logger.warning(
                f"Can't fetch the metrics for the {self.name} resource",
                extra={**context, "error": str(e)},
            )
            return

        for series in series_list:
            self._emit_series(scope, resource, series, context)

    def _emit_series(
        self,
        scope: ScrapeScope,
        resource: Resource,
        series: TimeSeries,
        context: dict[str, str],
    ) -> None:
        registry = self.family.registry
        if registry.is_ignored(series.name):
            return

        binding = registry.lookup(series.name)
        if binding is None:
            logger.debug(
                "Unmapped Scaleway metric",
                extra={**context, "scw_metric": series.name},
            )
            return

        value = latest_value(series)
        if value is None:
            self._errors.increment(self.name)
            logger.warning(
                "No data were returned for the metric",
                extra={**context, "scw_metric": series.name, "metadata": dict(series.metadata)},
            )
            return

        scope.emit(binding.observe(resource, series, value))

    def _resource_context(self, resource: Resource) -> dict[str, str]:
        return {
            "collector": self.name,
            self.family.partition_kind: resource.partition,
            "resource_id": resource.id,
            "resource_name": resource.name,
        }
