"""Domain types shared by every collector.

Everything here is immutable: resources and series are re-fetched on every
scrape and handed between threads by reference.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from types import MappingProxyType
from typing import Any


class UpstreamStatus(str, Enum):
    """Base for family status enums parsed from API strings."""

    @classmethod
    def parse(cls, raw: str | None) -> "UpstreamStatus":
        """Map an API status string onto the enum; unknown strings become UNKNOWN."""
        try:
            return cls(raw or "unknown")
        except ValueError:
            return cls("unknown")


@dataclass(frozen=True)
class Resource:
    """One live instance of a monitored entity, as listed in one partition."""

    id: str
    name: str
    partition: str
    status: UpstreamStatus | None = None
    attributes: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def attr(self, key: str, default: str = "") -> str:
        value = self.attributes.get(key, default)
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)


@dataclass(frozen=True)
class Point:
    timestamp: datetime
    value: float


@dataclass(frozen=True)
class TimeSeries:
    """A named stream of points for one resource over one scrape window."""

    name: str
    points: tuple[Point, ...] = ()
    metadata: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def meta(self, key: str) -> str:
        return self.metadata.get(key, "")


@dataclass(frozen=True)
class Project:
    """A billing cost center (Scaleway project) of the organization."""

    id: str
    name: str


@dataclass(frozen=True)
class Consumption:
    project_id: str
    category: str
    operation_path: str
    description: str
    value: float
    currency: str


@dataclass(frozen=True)
class ConsumptionReport:
    """Aggregate consumption of the organization and its last update time."""

    consumptions: tuple[Consumption, ...]
    updated_at: datetime | None
