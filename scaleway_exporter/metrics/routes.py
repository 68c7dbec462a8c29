"""Metrics API endpoint for Prometheus scraping."""

from typing import Any

from dependency_injector.wiring import Provide, inject
from flask import Blueprint, Response

from scaleway_exporter.metrics.service import MetricsService

CONTENT_TYPE = "text/plain; version=0.0.4; charset=utf-8"


@inject
def get_metrics(
    metrics_service: MetricsService = Provide["metrics_service"],
) -> Any:
    """Return metrics in Prometheus text format.

    Every call runs one full scrape of the enabled collectors.
    """
    metrics_text = metrics_service.get_metrics_text()

    return Response(metrics_text, content_type=CONTENT_TYPE)


def create_metrics_blueprint(web_path: str) -> Blueprint:
    """Blueprint serving the landing page and metrics at ``web_path``."""
    metrics_bp = Blueprint("metrics", __name__)

    def index() -> Any:
        return Response(
            "<html>"
            "<head><title>Scaleway Exporter</title></head>"
            "<body>"
            "<h1>Scaleway Exporter</h1>"
            f'<p><a href="{web_path}">Metrics</a></p>'
            "</body>"
            "</html>",
            content_type="text/html; charset=utf-8",
        )

    metrics_bp.add_url_rule("/", "index", index, methods=["GET"])
    metrics_bp.add_url_rule(web_path, "get_metrics", get_metrics, methods=["GET"])
    return metrics_bp
