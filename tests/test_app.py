"""Tests for the exposition app and its routes."""

from unittest.mock import MagicMock

import pytest
from flask import Flask
from flask.testing import FlaskClient

from scaleway_exporter.collectors.model import Consumption, ConsumptionReport, Project
from scaleway_exporter.config import Settings
from scaleway_exporter.container import ExporterContainer
from scaleway_exporter.core.app import create_app
from scaleway_exporter.exceptions import ConfigurationError
from scaleway_exporter.metrics.routes import CONTENT_TYPE


class TestCreateApp:
    """Test the application factory."""

    def test_invalid_settings_fail_fast(self):
        with pytest.raises(ConfigurationError):
            create_app(Settings(scaleway_access_key="", scaleway_secret_key=""))

    def test_enabled_collectors(self, app: Flask):
        names = [collector.name for collector in app.container.enabled_collectors()]

        assert names == ["database", "bucket", "loadbalancer", "redis", "billing"]

    def test_disabled_collectors_are_not_created(
        self, test_settings: Settings, container: ExporterContainer
    ):
        settings = test_settings.model_copy(
            update={
                "database_collector_enabled": False,
                "billing_collector_enabled": False,
            }
        )
        app = create_app(settings, container=container)

        names = [collector.name for collector in container.enabled_collectors()]
        text = app.test_client().get("/metrics").get_data(as_text=True)

        assert names == ["bucket", "loadbalancer", "redis"]
        assert 'scaleway_errors_total{collector="database"}' not in text
        assert "scaleway_database_up" not in text

    def test_scrape_timeout_follows_settings(self, app: Flask):
        assert app.container.orchestrator().timeout == 2.0


class TestMetricsEndpoint:
    """Test the /metrics endpoint."""

    def test_content_type(self, client: FlaskClient):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert response.headers["Content-Type"] == CONTENT_TYPE

    def test_exposes_families_and_error_counters(self, client: FlaskClient):
        text = client.get("/metrics").get_data(as_text=True)

        assert "# TYPE scaleway_database_up gauge" in text
        assert "# TYPE scaleway_s3_storage_usage_bytes gauge" in text
        assert "# TYPE scaleway_loadbalancer_up gauge" in text
        assert "# TYPE scaleway_redis_cpu_usage_percent gauge" in text
        assert "# TYPE scaleway_billing_consumptions gauge" in text
        for collector in ("database", "bucket", "loadbalancer", "redis"):
            assert f'scaleway_errors_total{{collector="{collector}"}} 0.0' in text
        assert 'version="1.2.3"' in text
        assert "application_shutting_down 0.0" in text

    def test_every_pull_scrapes_upstream(
        self, client: FlaskClient, mock_scaleway_api: MagicMock
    ):
        client.get("/metrics")
        client.get("/metrics")

        assert mock_scaleway_api.list_database_instances.call_count == 2
        assert mock_scaleway_api.list_redis_clusters.call_count == 2

        region, timeout = mock_scaleway_api.list_database_instances.call_args.args
        assert region == "fr-par"
        assert 0 < timeout <= 2.0

    def test_billing_without_projects_is_counted(self, client: FlaskClient):
        text = client.get("/metrics").get_data(as_text=True)

        assert 'scaleway_errors_total{collector="billing"} 1.0' in text

    def test_billing_samples(self, client: FlaskClient, mock_scaleway_api: MagicMock):
        mock_scaleway_api.list_projects.return_value = [Project("p1", "production")]
        mock_scaleway_api.get_consumption.return_value = ConsumptionReport(
            consumptions=(
                Consumption("p1", "Compute", "instance/DEV1-S", "DEV1-S", 3.25, "EUR"),
            ),
            updated_at=None,
        )

        text = client.get("/metrics").get_data(as_text=True)

        assert (
            'scaleway_billing_consumptions{project_id="p1",project_name="production",'
            'category="Compute",operation_path="instance/DEV1-S",description="DEV1-S",'
            'currency_code="EUR"} 3.25'
        ) in text
        assert 'scaleway_errors_total{collector="billing"} 0.0' in text


class TestIndexPage:
    def test_links_to_metrics(self, client: FlaskClient):
        response = client.get("/")

        assert response.status_code == 200
        assert 'href="/metrics"' in response.get_data(as_text=True)

    def test_custom_web_path(self, test_settings: Settings, container: ExporterContainer):
        app = create_app(
            test_settings.model_copy(update={"web_path": "/scrape"}), container=container
        )
        client = app.test_client()

        assert 'href="/scrape"' in client.get("/").get_data(as_text=True)
        assert client.get("/scrape").status_code == 200
        assert client.get("/metrics").status_code == 404
