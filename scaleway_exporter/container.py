"""Exporter dependency injection container."""

import logging
from collections.abc import Callable

from dependency_injector import containers, providers

from scaleway_exporter.collectors.billing import BillingCollector
from scaleway_exporter.collectors.errors import ErrorCounter
from scaleway_exporter.collectors.exporter import ExporterCollector
from scaleway_exporter.collectors.families import (
    bucket_family,
    database_family,
    loadbalancer_family,
    redis_family,
)
from scaleway_exporter.collectors.orchestrator import ScrapeCollector, ScrapeOrchestrator
from scaleway_exporter.collectors.resource import ResourceCollector
from scaleway_exporter.config import Settings
from scaleway_exporter.core.shutdown import ShutdownCoordinator
from scaleway_exporter.metrics.service import MetricsService, create_registry
from scaleway_exporter.services.s3_service import S3Service
from scaleway_exporter.services.scaleway_api import ScalewayApi
from scaleway_exporter.services.scaleway_client import ScalewayClient

logger = logging.getLogger(__name__)


def select_collectors(
    settings: Settings,
    database: Callable[[], ScrapeCollector],
    bucket: Callable[[], ScrapeCollector],
    loadbalancer: Callable[[], ScrapeCollector],
    redis: Callable[[], ScrapeCollector],
    billing: Callable[[], ScrapeCollector],
) -> list[ScrapeCollector]:
    """Instantiate only the enabled collectors, in exposition order."""
    selected: list[ScrapeCollector] = []

    if settings.database_collector_enabled:
        selected.append(database())
    if settings.bucket_collector_enabled:
        selected.append(bucket())
    if settings.loadbalancer_collector_enabled:
        selected.append(loadbalancer())
    if settings.redis_collector_enabled:
        selected.append(redis())
    if settings.billing_collector_enabled:
        selected.append(billing())
    elif not settings.scaleway_organization_id:
        logger.info("Billing collector disabled: SCALEWAY_ORGANIZATION_ID is not set")

    return selected


class ExporterContainer(containers.DeclarativeContainer):
    """Exporter service container.

    ``config`` must be overridden with a loaded ``Settings`` before any
    provider is resolved.
    """

    config = providers.Dependency(instance_of=Settings)

    registry = providers.Singleton(create_registry)

    shutdown_coordinator = providers.Singleton(
        ShutdownCoordinator,
        graceful_shutdown_timeout=config.provided.graceful_shutdown_timeout,
    )

    error_counter = providers.Singleton(ErrorCounter, registry=registry)

    # Upstream clients
    scaleway_client = providers.Singleton(
        ScalewayClient,
        access_key=config.provided.scaleway_access_key,
        secret_key=config.provided.scaleway_secret_key,
        api_url=config.provided.scaleway_api_url,
    )

    s3_service = providers.Singleton(
        S3Service,
        access_key=config.provided.scaleway_access_key,
        secret_key=config.provided.scaleway_secret_key,
        timeout=config.provided.http_timeout,
    )

    scaleway_api = providers.Singleton(
        ScalewayApi,
        client=scaleway_client,
        s3_service=s3_service,
    )

    # Family collectors, only instantiated when enabled
    database_collector = providers.Singleton(
        ResourceCollector,
        family=providers.Factory(
            database_family, api=scaleway_api, regions=config.provided.regions
        ),
        errors=error_counter,
    )

    bucket_collector = providers.Singleton(
        ResourceCollector,
        family=providers.Factory(
            bucket_family, api=scaleway_api, regions=config.provided.regions
        ),
        errors=error_counter,
    )

    loadbalancer_collector = providers.Singleton(
        ResourceCollector,
        family=providers.Factory(
            loadbalancer_family, api=scaleway_api, zones=config.provided.zones
        ),
        errors=error_counter,
    )

    redis_collector = providers.Singleton(
        ResourceCollector,
        family=providers.Factory(
            redis_family, api=scaleway_api, zones=config.provided.zones
        ),
        errors=error_counter,
    )

    billing_collector = providers.Singleton(
        BillingCollector,
        organization_id=config.provided.scaleway_organization_id,
        list_projects=scaleway_api.provided.list_projects,
        get_consumption=scaleway_api.provided.get_consumption,
        errors=error_counter,
    )

    enabled_collectors = providers.Singleton(
        select_collectors,
        settings=config,
        database=database_collector.provider,
        bucket=bucket_collector.provider,
        loadbalancer=loadbalancer_collector.provider,
        redis=redis_collector.provider,
        billing=billing_collector.provider,
    )

    orchestrator = providers.Singleton(
        ScrapeOrchestrator,
        collectors=enabled_collectors,
        timeout=config.provided.http_timeout,
        shutdown_coordinator=shutdown_coordinator,
    )

    exporter_collector = providers.Singleton(
        ExporterCollector,
        version=config.provided.version,
        revision=config.provided.revision,
        build_date=config.provided.build_date,
    )

    # Registers the orchestrator and build info on the registry
    metrics_service = providers.Singleton(
        MetricsService,
        registry=registry,
        shutdown_coordinator=shutdown_coordinator,
        collectors=providers.List(orchestrator, exporter_collector),
    )
