"""Scaleway product endpoints mapped onto the exporter's domain types."""

import logging
from datetime import UTC, datetime, timedelta
from types import MappingProxyType
from typing import Any

from scaleway_exporter.collectors.model import (
    Consumption,
    ConsumptionReport,
    Point,
    Project,
    Resource,
    TimeSeries,
)
from scaleway_exporter.collectors.status import (
    DatabaseStatus,
    LoadBalancerStatus,
    RedisStatus,
)
from scaleway_exporter.exceptions import ScalewayClientError
from scaleway_exporter.services.s3_service import S3Service
from scaleway_exporter.services.scaleway_client import ScalewayClient

logger = logging.getLogger(__name__)

METRICS_WINDOW = timedelta(hours=1)


class ScalewayApi:
    """Inventory and metric calls for every monitored product.

    Metric windows always cover the trailing hour, computed when the call is
    made.
    """

    def __init__(self, client: ScalewayClient, s3_service: S3Service):
        self.client = client
        self.s3_service = s3_service

    # ── Managed databases (regional) ───────────────────────────────────

    def list_database_instances(self, region: str, timeout: float) -> list[Resource]:
        instances = self.client.list_all(
            f"/rdb/v1/regions/{region}/instances", "instances", timeout=timeout
        )
        return [
            Resource(
                id=instance["id"],
                name=instance.get("name", ""),
                partition=instance.get("region") or region,
                status=DatabaseStatus.parse(instance.get("status")),
                attributes=MappingProxyType(
                    {
                        "engine": instance.get("engine", ""),
                        "node_type": instance.get("node_type", ""),
                    }
                ),
            )
            for instance in instances
        ]

    def get_database_metrics(
        self, instance: Resource, metric_name: str | None, timeout: float
    ) -> list[TimeSeries]:
        start, end = _window()
        payload = self.client.get(
            f"/rdb/v1/regions/{instance.partition}/instances/{instance.id}/metrics",
            params=_with_metric({"start_date": start, "end_date": end}, metric_name),
            timeout=timeout,
        )
        return parse_timeseries(payload)

    # ── Load balancers (zonal) ─────────────────────────────────────────

    def list_load_balancers(self, zone: str, timeout: float) -> list[Resource]:
        lbs = self.client.list_all(f"/lb/v1/zones/{zone}/lbs", "lbs", timeout=timeout)
        return [
            Resource(
                id=lb["id"],
                name=lb.get("name", ""),
                partition=lb.get("zone") or zone,
                status=LoadBalancerStatus.parse(lb.get("status")),
                attributes=MappingProxyType({"type": lb.get("type", "")}),
            )
            for lb in lbs
        ]

    def get_load_balancer_metrics(
        self, lb: Resource, metric_name: str | None, timeout: float
    ) -> list[TimeSeries]:
        start, end = _window()
        payload = self.client.get(
            f"/lb-private/v1/zones/{lb.partition}/lbs/{lb.id}/metrics",
            params=_with_metric({"start_date": start, "end_date": end}, metric_name),
            timeout=timeout,
        )
        return parse_timeseries(payload)

    # ── Redis clusters (zonal) ─────────────────────────────────────────

    def list_redis_clusters(self, zone: str, timeout: float) -> list[Resource]:
        clusters = self.client.list_all(
            f"/redis/v1/zones/{zone}/clusters", "clusters", timeout=timeout
        )
        return [
            Resource(
                id=cluster["id"],
                name=cluster.get("name", ""),
                partition=cluster.get("zone") or zone,
                status=RedisStatus.parse(cluster.get("status")),
                attributes=MappingProxyType({"node_type": cluster.get("node_type", "")}),
            )
            for cluster in clusters
        ]

    def get_redis_metrics(
        self, cluster: Resource, metric_name: str | None, timeout: float
    ) -> list[TimeSeries]:
        start, end = _window()
        payload = self.client.get(
            f"/redis/v1/zones/{cluster.partition}/clusters/{cluster.id}/metrics",
            params=_with_metric({"start_at": start, "end_at": end}, metric_name),
            timeout=timeout,
        )
        return parse_timeseries(payload)

    # ── Object storage (regional) ──────────────────────────────────────

    def list_buckets(self, region: str, timeout: float) -> list[Resource]:
        """Enumerate buckets over S3, then enrich them through buckets-info.

        Buckets reported by S3 but missing from buckets-info are dropped: the
        exporter has no visibility flag for them.
        """
        listing = self.s3_service.list_buckets(region)
        if not listing.names:
            return []

        payload = self.client.post(
            f"/object-private/v1/regions/{region}/buckets-info/",
            body={"project_id": listing.project_id, "buckets_name": list(listing.names)},
            timeout=timeout,
        )

        buckets: dict[str, dict[str, Any]] = payload.get("buckets") or {}
        return [
            Resource(
                id=name,
                name=name,
                partition=region,
                attributes=MappingProxyType(
                    {
                        "public": bool(info.get("is_public", False)),
                        "project_id": listing.project_id,
                    }
                ),
            )
            for name, info in sorted(buckets.items())
        ]

    def get_bucket_metrics(
        self, bucket: Resource, metric_name: str | None, timeout: float
    ) -> list[TimeSeries]:
        """Fetch one named metric of a bucket.

        The bucket metrics endpoint serves one metric per request; returned
        series are renamed to the requested metric so they can be routed.
        """
        if metric_name is None:
            raise ScalewayClientError("Bucket metrics must be requested by name")

        start, end = _window()
        payload = self.client.get(
            f"/object-private/v1/regions/{bucket.partition}/buckets/{bucket.name}/metrics",
            params={"start_date": start, "end_date": end, "metric_name": metric_name},
            timeout=timeout,
        )
        return [
            TimeSeries(name=metric_name, points=series.points, metadata=series.metadata)
            for series in parse_timeseries(payload)
        ]

    # ── Billing (organization-wide) ────────────────────────────────────

    def list_projects(self, organization_id: str, timeout: float) -> list[Project]:
        projects = self.client.list_all(
            "/account/v3/projects",
            "projects",
            params={"organization_id": organization_id},
            timeout=timeout,
        )
        return [Project(id=p["id"], name=p.get("name", "")) for p in projects]

    def get_consumption(self, organization_id: str, timeout: float) -> ConsumptionReport:
        payload = self.client.get(
            "/billing/v2alpha1/consumption",
            params={"organization_id": organization_id},
            timeout=timeout,
        )

        consumptions = []
        for item in payload.get("consumptions") or []:
            money = item.get("value") or {}
            consumptions.append(
                Consumption(
                    project_id=item.get("project_id", ""),
                    category=item.get("category", ""),
                    operation_path=item.get("operation_path", ""),
                    description=item.get("description", ""),
                    value=money_to_float(money),
                    currency=money.get("currency_code", ""),
                )
            )

        updated_at = payload.get("updated_at")
        return ConsumptionReport(
            consumptions=tuple(consumptions),
            updated_at=parse_timestamp(updated_at) if updated_at else None,
        )


def money_to_float(money: dict[str, Any]) -> float:
    """Scaleway money is split into whole ``units`` and ``nanos`` (1e-9 units)."""
    return float(money.get("units", 0)) + float(money.get("nanos", 0)) / 1e9


def parse_timestamp(value: str) -> datetime:
    timestamp = datetime.fromisoformat(value)
    if timestamp.tzinfo is None:
        timestamp = timestamp.replace(tzinfo=UTC)
    return timestamp


def parse_timeseries(payload: dict[str, Any]) -> list[TimeSeries]:
    """Parse ``{"timeseries": [{"name", "points": [[ts, value]], "metadata"}]}``."""
    result = []
    for raw in payload.get("timeseries") or []:
        points = tuple(
            Point(timestamp=parse_timestamp(ts), value=float(value))
            for ts, value in raw.get("points") or []
        )
        result.append(
            TimeSeries(
                name=raw.get("name", ""),
                points=points,
                metadata=MappingProxyType(dict(raw.get("metadata") or {})),
            )
        )
    return result


def _window() -> tuple[str, str]:
    end = datetime.now(UTC).replace(microsecond=0)
    start = end - METRICS_WINDOW
    return _rfc3339(start), _rfc3339(end)


def _rfc3339(moment: datetime) -> str:
    return moment.isoformat().replace("+00:00", "Z")


def _with_metric(params: dict[str, str], metric_name: str | None) -> dict[str, str]:
    if metric_name is not None:
        params["metric_name"] = metric_name
    return params
