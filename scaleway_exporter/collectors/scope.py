"""Scrape scope: one deadline, one observation sink, structured fan-out.

Every task started for a scrape is spawned through the scope and awaited by
``join()``. Tasks may spawn further tasks (partition -> resource -> metric), so
the scope keeps joining until nothing it started is still alive or the deadline
passes. Once joined, the sink is closed and late writes are dropped, which
keeps an overrun scrape partial rather than duplicated.
"""

import logging
import threading
import time
from collections.abc import Callable
from typing import Any

from scaleway_exporter.collectors.descriptors import Observation

logger = logging.getLogger(__name__)

_JOIN_POLL_SECONDS = 0.1


class ObservationSink:
    """Mutex-guarded collection point for concurrent producers."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._observations: list[Observation] = []
        self._closed = False
        self._dropped = 0

    def emit(self, observation: Observation) -> bool:
        """Accept an observation; returns False if the sink is already closed."""
        with self._lock:
            if self._closed:
                self._dropped += 1
                return False
            self._observations.append(observation)
            return True

    def close(self) -> None:
        with self._lock:
            self._closed = True

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    @property
    def dropped(self) -> int:
        with self._lock:
            return self._dropped

    def drain(self) -> list[Observation]:
        """Remove and return everything collected, in a deterministic order."""
        with self._lock:
            observations, self._observations = self._observations, []
        return sorted(observations, key=Observation.sort_key)


class ScrapeScope:
    """Bounded-duration context shared by every task of one scrape."""

    def __init__(
        self,
        timeout: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the scope.

        Args:
            timeout: Seconds the whole scrape may take.
            clock: Monotonic time source (overridable for tests).
        """
        self.timeout = timeout
        self._clock = clock
        self._deadline = clock() + timeout
        self._lock = threading.Lock()
        self._threads: list[threading.Thread] = []
        self._abandoned = threading.Event()
        self.sink = ObservationSink()

    def remaining(self) -> float:
        """Seconds left before the deadline, never negative."""
        return max(0.0, self._deadline - self._clock())

    @property
    def expired(self) -> bool:
        return self._abandoned.is_set() or self.remaining() <= 0

    def emit(self, observation: Observation) -> bool:
        return self.sink.emit(observation)

    def spawn(
        self, target: Callable[..., Any], *args: Any, name: str | None = None
    ) -> None:
        """Run ``target(*args)`` in its own thread, tracked by this scope."""
        if self.sink.closed:
            logger.debug(
                "Scrape already finished, not starting task",
                extra={"task": name or getattr(target, "__name__", repr(target))},
            )
            return

        thread = threading.Thread(
            target=self._run,
            args=(target, args),
            daemon=True,
            name=name,
        )
        with self._lock:
            self._threads.append(thread)
        thread.start()

    def _run(self, target: Callable[..., Any], args: tuple[Any, ...]) -> None:
        try:
            target(*args)
        except Exception as e:
            logger.error(
                "Scrape task failed",
                exc_info=True,
                extra={
                    "task": threading.current_thread().name,
                    "error": str(e),
                },
            )

    def join(self) -> bool:
        """Wait for all spawned tasks or the deadline, then close the sink.

        Returns:
            True if every task finished in time, False if the scrape was cut
            short by the deadline or abandoned.
        """
        completed = True
        pending: list[threading.Thread] = []

        while True:
            # Liveness is checked under the lock so a task that spawns a child
            # and then exits cannot be observed without its child.
            with self._lock:
                pending = [thread for thread in self._threads if thread.is_alive()]

            if not pending:
                break

            if self.expired:
                completed = False
                break

            pending[0].join(timeout=min(self.remaining(), _JOIN_POLL_SECONDS))

        self.sink.close()

        if not completed:
            logger.warning(
                "Scrape did not finish in time, returning partial results",
                extra={
                    "timeout": self.timeout,
                    "pending_tasks": len(pending),
                    "abandoned": self._abandoned.is_set(),
                },
            )

        return completed

    def abandon(self) -> None:
        """Stop accepting work and observations, e.g. on shutdown."""
        self._abandoned.set()
        self.sink.close()
