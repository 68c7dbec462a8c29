"""Pytest fixtures for exporter tests.

Every test gets its own ``CollectorRegistry`` so metrics never leak between
tests; nothing here talks to the real Scaleway API.
"""

from collections.abc import Generator
from typing import TYPE_CHECKING
from unittest.mock import MagicMock

import pytest
from flask import Flask
from flask.testing import FlaskClient
from prometheus_client import CollectorRegistry

from scaleway_exporter.collectors.errors import ErrorCounter
from scaleway_exporter.config import Settings
from tests.testing_utils import StubShutdownCoordinator, TestShutdownCoordinator

if TYPE_CHECKING:
    from scaleway_exporter.container import ExporterContainer


def _build_test_settings() -> Settings:
    """Construct base Settings object for tests."""
    return Settings(
        scaleway_access_key="SCWXXXXXXXXXXXXXXXXX",
        scaleway_secret_key="11111111-2222-3333-4444-555555555555",
        scaleway_organization_id="org-1",
        regions=("fr-par",),
        zones=("fr-par-1",),
        http_timeout=2.0,
        graceful_shutdown_timeout=5,
        version="1.2.3",
        revision="abc123",
        build_date="2024-01-01",
    )


@pytest.fixture
def test_settings() -> Settings:
    return _build_test_settings()


@pytest.fixture
def registry() -> CollectorRegistry:
    return CollectorRegistry()


@pytest.fixture
def error_counter(registry: CollectorRegistry) -> ErrorCounter:
    return ErrorCounter(registry)


@pytest.fixture
def stub_shutdown_coordinator() -> StubShutdownCoordinator:
    return StubShutdownCoordinator()


@pytest.fixture
def test_shutdown_coordinator() -> TestShutdownCoordinator:
    return TestShutdownCoordinator()


@pytest.fixture
def mock_scaleway_api() -> MagicMock:
    """Scaleway API mock returning no resources and no projects."""
    from scaleway_exporter.services.scaleway_api import ScalewayApi

    scaleway_api = MagicMock(spec=ScalewayApi)
    scaleway_api.list_database_instances.return_value = []
    scaleway_api.list_buckets.return_value = []
    scaleway_api.list_load_balancers.return_value = []
    scaleway_api.list_redis_clusters.return_value = []
    scaleway_api.list_projects.return_value = []
    return scaleway_api


@pytest.fixture
def container(mock_scaleway_api: MagicMock) -> Generator["ExporterContainer", None, None]:
    """Container whose Scaleway API never leaves the process."""
    from scaleway_exporter.container import ExporterContainer

    container = ExporterContainer()
    container.scaleway_api.override(mock_scaleway_api)

    yield container

    container.unwire()


@pytest.fixture
def app(test_settings: Settings, container: "ExporterContainer") -> Flask:
    """Exposition app backed by the mocked Scaleway API.

    Every enabled family scrapes cleanly and only the always-present series
    are exported.
    """
    from scaleway_exporter.core.app import create_app

    flask_app = create_app(test_settings, container=container)
    flask_app.config["TESTING"] = True
    return flask_app


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    return app.test_client()
