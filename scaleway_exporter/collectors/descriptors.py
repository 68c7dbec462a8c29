"""Metric descriptors and the per-collector series registry.

A descriptor is parameterised by a ``NamedTuple`` label type. Its label names
are that type's fields, and observations can only be built from an instance of
it, so an observation's labels always match the declared schema.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Generic, NamedTuple, TypeVar

from scaleway_exporter.collectors.model import Resource, TimeSeries

logger = logging.getLogger(__name__)

L = TypeVar("L", bound=tuple[Any, ...])


class NoLabels(NamedTuple):
    """Label type for descriptors without labels."""


@dataclass(frozen=True)
class MetricDescriptor(Generic[L]):
    """Static exposition metadata for one gauge."""

    name: str
    documentation: str
    labels_type: type[L]

    @property
    def label_names(self) -> tuple[str, ...]:
        return tuple(getattr(self.labels_type, "_fields", ()))

    def observe(self, value: float, labels: L) -> "Observation":
        return Observation(self, float(value), tuple(str(v) for v in labels))


@dataclass(frozen=True)
class Observation:
    """One gauge sample handed to the exposition layer."""

    descriptor: MetricDescriptor[Any]
    value: float
    label_values: tuple[str, ...]

    def sort_key(self) -> tuple[str, tuple[str, ...]]:
        return self.descriptor.name, self.label_values


@dataclass(frozen=True)
class SeriesBinding(Generic[L]):
    """Routes one upstream series to a descriptor and builds its labels."""

    descriptor: MetricDescriptor[L]
    build_labels: Callable[[Resource, TimeSeries], L]

    def observe(self, resource: Resource, series: TimeSeries, value: float) -> Observation:
        return self.descriptor.observe(value, self.build_labels(resource, series))


class SeriesRegistry:
    """Immutable upstream-series-name -> binding lookup built once per collector.

    Unknown names are not an error: the upstream API may add series at any
    time, and callers simply skip them. Names listed in ``ignored`` are known
    but deliberately not exported.
    """

    def __init__(
        self,
        bindings: Mapping[str, SeriesBinding[Any]],
        ignored: Iterable[str] = (),
    ) -> None:
        self._bindings = MappingProxyType(dict(bindings))
        self._ignored = frozenset(ignored)

    def lookup(self, series_name: str) -> SeriesBinding[Any] | None:
        return self._bindings.get(series_name)

    def is_ignored(self, series_name: str) -> bool:
        return series_name in self._ignored

    def descriptors(self) -> list[MetricDescriptor[Any]]:
        """Distinct descriptors in registration order."""
        seen: dict[str, MetricDescriptor[Any]] = {}
        for binding in self._bindings.values():
            seen.setdefault(binding.descriptor.name, binding.descriptor)
        return list(seen.values())
