"""Prometheus exposition module."""

from scaleway_exporter.metrics.service import MetricsService, create_registry

__all__ = [
    "MetricsService",
    "create_registry",
]
