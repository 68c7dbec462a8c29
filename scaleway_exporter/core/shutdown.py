"""Graceful shutdown coordinator for the exporter process."""

import logging
import signal
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class LifetimeEvent(str, Enum):
    """Lifecycle events during shutdown process."""

    PREPARE_SHUTDOWN = "prepare-shutdown"
    SHUTDOWN = "shutdown"
    AFTER_SHUTDOWN = "after-shutdown"


class ShutdownCoordinatorProtocol(ABC):
    """Protocol for shutdown coordinator implementations."""

    @abstractmethod
    def initialize(self) -> None:
        """Install the signal handlers."""
        pass

    @abstractmethod
    def register_lifetime_notification(
        self, callback: Callable[[LifetimeEvent], None]
    ) -> None:
        """Register a callback invoked for every lifetime event."""
        pass

    @abstractmethod
    def register_shutdown_waiter(
        self, name: str, handler: Callable[[float], bool]
    ) -> None:
        """Register a handler that blocks until its owner is idle."""
        pass

    @abstractmethod
    def is_shutting_down(self) -> bool:
        pass

    @abstractmethod
    def shutdown(self) -> None:
        pass


class ShutdownCoordinator(ShutdownCoordinatorProtocol):
    """Turns SIGTERM/SIGINT into an ordered shutdown.

    In-progress scrapes are abandoned on PREPARE_SHUTDOWN; waiters then get
    the remaining grace period to let their threads return before the
    exposition server is stopped on AFTER_SHUTDOWN.
    """

    def __init__(self, graceful_shutdown_timeout: int):
        """Initialize shutdown coordinator.

        Args:
            graceful_shutdown_timeout: Maximum seconds to wait for waiters
        """
        self._graceful_shutdown_timeout = graceful_shutdown_timeout
        self._shutting_down = False
        self._lock = threading.RLock()
        self._notifications: list[Callable[[LifetimeEvent], None]] = []
        self._waiters: dict[str, Callable[[float], bool]] = {}

    def initialize(self) -> None:
        signal.signal(signal.SIGTERM, self._handle_signal)
        signal.signal(signal.SIGINT, self._handle_signal)

    def register_lifetime_notification(
        self, callback: Callable[[LifetimeEvent], None]
    ) -> None:
        with self._lock:
            self._notifications.append(callback)
            logger.debug(
                f"Registered lifetime notification: "
                f"{getattr(callback, '__name__', repr(callback))}"
            )

    def register_shutdown_waiter(
        self, name: str, handler: Callable[[float], bool]
    ) -> None:
        with self._lock:
            self._waiters[name] = handler
            logger.debug(f"Registered shutdown waiter: {name}")

    def is_shutting_down(self) -> bool:
        with self._lock:
            return self._shutting_down

    def _handle_signal(self, signum: int, frame: object) -> None:
        logger.info(f"Received signal {signum}, shutting down")
        self.shutdown()

    def shutdown(self) -> None:
        with self._lock:
            if self._shutting_down:
                logger.warning("Shutdown already in progress, ignoring signal")
                return
            self._shutting_down = True
            waiters = dict(self._waiters)

        started = time.perf_counter()
        self._raise_lifetime_event(LifetimeEvent.PREPARE_SHUTDOWN)

        all_ready = True
        for name, waiter in waiters.items():
            remaining = self._graceful_shutdown_timeout - (time.perf_counter() - started)
            if remaining <= 0:
                logger.error(f"Shutdown timeout exceeded before waiting for {name}")
                all_ready = False
                break

            try:
                if not waiter(remaining):
                    logger.warning(f"{name} was not idle within the shutdown timeout")
                    all_ready = False
            except Exception as e:
                logger.error(f"Error in shutdown waiter {name}: {e}")
                all_ready = False

        if not all_ready:
            logger.error(
                f"Forcing shutdown after {time.perf_counter() - started:.1f}s"
            )

        self._raise_lifetime_event(LifetimeEvent.SHUTDOWN)
        logger.info("Shutting down")
        self._raise_lifetime_event(LifetimeEvent.AFTER_SHUTDOWN)

    def _raise_lifetime_event(self, event: LifetimeEvent) -> None:
        logger.info(f"Raising lifetime event {event.value}")

        with self._lock:
            callbacks = list(self._notifications)

        for callback in callbacks:
            try:
                callback(event)
            except Exception as e:
                logger.error(
                    f"Error in lifetime event notification "
                    f"{getattr(callback, '__name__', repr(callback))}: {e}"
                )
