"""Tests for graceful shutdown coordinator."""

import signal
import time
from unittest.mock import patch

from scaleway_exporter.core.shutdown import LifetimeEvent, ShutdownCoordinator


class TestShutdownCoordinator:
    """Tests for ShutdownCoordinator functionality."""

    def test_initial_state_not_shutting_down(self) -> None:
        """Test coordinator starts in non-shutdown state."""
        coordinator = ShutdownCoordinator(graceful_shutdown_timeout=5)

        assert coordinator.is_shutting_down() is False

    def test_shutdown_sets_flag(self) -> None:
        coordinator = ShutdownCoordinator(graceful_shutdown_timeout=5)

        coordinator.shutdown()

        assert coordinator.is_shutting_down() is True

    def test_shutdown_is_idempotent(self) -> None:
        """Test calling shutdown multiple times raises events only once."""
        coordinator = ShutdownCoordinator(graceful_shutdown_timeout=5)
        received: list[LifetimeEvent] = []
        coordinator.register_lifetime_notification(received.append)

        coordinator.shutdown()
        coordinator.shutdown()

        assert received.count(LifetimeEvent.PREPARE_SHUTDOWN) == 1

    def test_events_are_raised_in_order(self) -> None:
        coordinator = ShutdownCoordinator(graceful_shutdown_timeout=5)
        received: list[LifetimeEvent] = []
        coordinator.register_lifetime_notification(received.append)

        coordinator.shutdown()

        assert received == [
            LifetimeEvent.PREPARE_SHUTDOWN,
            LifetimeEvent.SHUTDOWN,
            LifetimeEvent.AFTER_SHUTDOWN,
        ]

    def test_waiters_run_between_prepare_and_shutdown(self) -> None:
        coordinator = ShutdownCoordinator(graceful_shutdown_timeout=5)
        sequence: list[str] = []

        coordinator.register_lifetime_notification(lambda event: sequence.append(event.value))

        def waiter(timeout: float) -> bool:
            sequence.append("waiter")
            assert 0 < timeout <= 5
            return True

        coordinator.register_shutdown_waiter("TestWaiter", waiter)
        coordinator.shutdown()

        assert sequence == ["prepare-shutdown", "waiter", "shutdown", "after-shutdown"]

    def test_failing_waiter_does_not_block_shutdown(self) -> None:
        coordinator = ShutdownCoordinator(graceful_shutdown_timeout=5)
        received: list[LifetimeEvent] = []
        coordinator.register_lifetime_notification(received.append)

        def broken(timeout: float) -> bool:
            raise RuntimeError("boom")

        coordinator.register_shutdown_waiter("Broken", broken)
        coordinator.register_shutdown_waiter("Slow", lambda timeout: False)

        start = time.perf_counter()
        coordinator.shutdown()

        assert time.perf_counter() - start < 1.0
        assert LifetimeEvent.AFTER_SHUTDOWN in received

    def test_failing_notification_does_not_stop_others(self) -> None:
        coordinator = ShutdownCoordinator(graceful_shutdown_timeout=5)
        received: list[LifetimeEvent] = []

        def broken(event: LifetimeEvent) -> None:
            raise RuntimeError("boom")

        coordinator.register_lifetime_notification(broken)
        coordinator.register_lifetime_notification(received.append)
        coordinator.shutdown()

        assert len(received) == 3

    def test_initialize_installs_signal_handlers(self) -> None:
        coordinator = ShutdownCoordinator(graceful_shutdown_timeout=5)

        with patch("scaleway_exporter.core.shutdown.signal.signal") as mock_signal:
            coordinator.initialize()

        handled = {call.args[0] for call in mock_signal.call_args_list}
        assert handled == {signal.SIGTERM, signal.SIGINT}

    def test_signal_triggers_shutdown(self) -> None:
        coordinator = ShutdownCoordinator(graceful_shutdown_timeout=5)

        coordinator._handle_signal(signal.SIGTERM, None)

        assert coordinator.is_shutting_down() is True
