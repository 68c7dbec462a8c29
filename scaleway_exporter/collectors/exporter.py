"""Build information about the exporter process itself."""

import platform
import time
from collections.abc import Iterator

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.metrics_core import Metric
from prometheus_client.registry import Collector


class ExporterCollector(Collector):
    """Exposes version/build metadata and the process start time."""

    def __init__(
        self,
        version: str,
        revision: str,
        build_date: str,
        start_time: float | None = None,
    ):
        self.version = version
        self.revision = revision
        self.build_date = build_date
        self.python_version = platform.python_version()
        self.start_time = start_time if start_time is not None else time.time()

    def collect(self) -> Iterator[Metric]:
        build_info = GaugeMetricFamily(
            "scaleway_exporter_build_info",
            "A metric with a constant '1' value labeled by version, revision, "
            "build date and Python version from which scaleway_exporter was built",
            labels=["version", "revision", "build_date", "python_version"],
        )
        build_info.add_metric(
            [self.version, self.revision, self.build_date, self.python_version], 1
        )
        yield build_info

        start_time = GaugeMetricFamily(
            "scaleway_exporter_start_time_seconds",
            "Unix time when the exporter was started",
        )
        start_time.add_metric([], self.start_time)
        yield start_time
