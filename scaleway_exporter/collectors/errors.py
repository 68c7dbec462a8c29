"""Process-wide error counter, labelled by collector family."""

import logging

from prometheus_client import CollectorRegistry, Counter

logger = logging.getLogger(__name__)


class ErrorCounter:
    """Counts recoverable scrape failures per collector.

    Backed by a prometheus_client ``Counter`` whose children increment under
    their own lock, so any number of scrape threads can report concurrently.
    The counter only ever grows for the lifetime of the process.
    """

    def __init__(self, registry: CollectorRegistry) -> None:
        self._counter = Counter(
            "scaleway_errors",
            "The total number of errors per collector",
            ["collector"],
            registry=registry,
        )

    def register(self, collector: str) -> None:
        """Expose the family's series at zero before its first failure."""
        self._counter.labels(collector=collector)

    def increment(self, collector: str) -> None:
        self._counter.labels(collector=collector).inc()
