"""Command line entry point for the exporter."""

import argparse
import logging
import sys
import threading
from typing import Any, NoReturn

from dotenv import load_dotenv
from paste.translogger import TransLogger  # type: ignore[import-untyped]
from waitress.server import create_server

from scaleway_exporter.config import Environment, Settings
from scaleway_exporter.core.shutdown import LifetimeEvent
from scaleway_exporter.exceptions import ConfigurationError, ScalewayClientError

logger = logging.getLogger(__name__)

_COLLECTORS = ("database", "bucket", "loadbalancer", "redis", "billing")


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Prometheus exporter for Scaleway resources",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="Every option can also be set through the environment variable "
        "shown in its help text.",
    )

    parser.add_argument("--debug", action="store_true", default=None, help="DEBUG")
    parser.add_argument("--http-timeout", type=int, help="HTTP_TIMEOUT, in ms")
    parser.add_argument("--web-addr", help="WEB_ADDR, e.g. ':9503'")
    parser.add_argument("--web-path", help="WEB_PATH")
    parser.add_argument("--region", help="SCALEWAY_REGION")

    for collector in _COLLECTORS:
        parser.add_argument(
            f"--disable-{collector}-collector",
            action="store_true",
            default=None,
            help=f"DISABLE_{collector.upper()}_COLLECTOR",
        )

    return parser


def environment_overrides(args: argparse.Namespace) -> dict[str, Any]:
    """Map command line options onto ``Environment`` field names.

    Options left unset are omitted so the environment value applies.
    """
    candidates: dict[str, Any] = {
        "DEBUG": args.debug,
        "HTTP_TIMEOUT": args.http_timeout,
        "WEB_ADDR": args.web_addr,
        "WEB_PATH": args.web_path,
        "SCALEWAY_REGION": args.region,
    }
    for collector in _COLLECTORS:
        candidates[f"DISABLE_{collector.upper()}_COLLECTOR"] = getattr(
            args, f"disable_{collector}_collector"
        )

    return {key: value for key, value in candidates.items() if value is not None}


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def main(argv: list[str] | None = None) -> NoReturn:
    load_dotenv()

    args = create_parser().parse_args(argv)

    # Settings are needed before logging is configured to know the level
    try:
        settings = Settings.load(Environment(**environment_overrides(args)))
    except ConfigurationError as e:
        configure_logging(False)
        logger.error(str(e))
        sys.exit(1)

    configure_logging(settings.debug)

    from scaleway_exporter.core.app import create_app

    try:
        app = create_app(settings)
    except (ConfigurationError, ScalewayClientError) as e:
        logger.error(f"Failed to start exporter: {e}")
        sys.exit(1)

    wsgi = TransLogger(app, setup_console_handler=False)

    # Bind before the serving thread starts
    try:
        server = create_server(
            wsgi,
            host=settings.web_host,
            port=settings.web_port,
            threads=settings.waitress_threads,
        )
    except OSError as e:
        logger.error(
            f"Failed to listen on {settings.web_host}:{settings.web_port}: {e}"
        )
        sys.exit(1)

    wsgi.logger.info(
        f"Using Waitress WSGI server with {settings.waitress_threads} threads"
    )

    shutdown_coordinator = app.container.shutdown_coordinator()
    shutdown_coordinator.initialize()

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    logger.info(
        f"Listening on {settings.web_host}:{settings.web_port}{settings.web_path}",
        extra={"version": settings.version, "revision": settings.revision},
    )

    event = threading.Event()

    def signal_shutdown(lifetime_event: LifetimeEvent) -> None:
        if lifetime_event == LifetimeEvent.AFTER_SHUTDOWN:
            event.set()

    shutdown_coordinator.register_lifetime_notification(signal_shutdown)
    event.wait()

    sys.exit(0)


if __name__ == "__main__":
    main()
