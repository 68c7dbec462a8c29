"""Flask application factory for the exposition server."""

from flask import Flask

from scaleway_exporter.config import Settings
from scaleway_exporter.container import ExporterContainer


class App(Flask):
    """Flask app carrying the exporter's service container."""

    container: ExporterContainer


def create_app(
    settings: "Settings | None" = None,
    container: "ExporterContainer | None" = None,
) -> App:
    """Create and configure the exposition app.

    Builds the container, wires the metrics blueprint and instantiates the
    error counter and metrics service eagerly so collector construction
    errors surface at startup rather than on the first scrape.

    Args:
        settings: Loaded settings; read from the environment when omitted.
        container: Pre-built container, e.g. with providers overridden in tests.
    """
    if settings is None:
        settings = Settings.load()

    settings.validate_config()

    app = App(__name__)

    if container is None:
        container = ExporterContainer()
    container.config.override(settings)
    container.wire(modules=["scaleway_exporter.metrics.routes"])
    app.container = container

    from scaleway_exporter.metrics.routes import create_metrics_blueprint

    app.register_blueprint(create_metrics_blueprint(settings.web_path))

    container.error_counter()
    container.metrics_service()

    return app
