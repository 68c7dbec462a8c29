"""Resource family definitions: descriptors, label schemas and API bindings."""

from typing import TYPE_CHECKING, NamedTuple

from scaleway_exporter.collectors.descriptors import (
    MetricDescriptor,
    SeriesBinding,
    SeriesRegistry,
)
from scaleway_exporter.collectors.model import Resource, TimeSeries
from scaleway_exporter.collectors.resource import CollectorFamily, Liveness
from scaleway_exporter.collectors.status import (
    DATABASE_LIVENESS,
    LOADBALANCER_LIVENESS,
    REDIS_LIVENESS,
    DatabaseStatus,
    LoadBalancerStatus,
    RedisStatus,
)

if TYPE_CHECKING:
    from scaleway_exporter.services.scaleway_api import ScalewayApi


class NodeLabels(NamedTuple):
    id: str
    name: str
    node: str


def node_labels(resource: Resource, series: TimeSeries) -> NodeLabels:
    return NodeLabels(resource.id, resource.name, series.meta("node"))


# ── Database ───────────────────────────────────────────────────────────


class DatabaseLabels(NamedTuple):
    id: str
    name: str
    region: str
    engine: str
    type: str


def database_labels(resource: Resource) -> DatabaseLabels:
    return DatabaseLabels(
        resource.id,
        resource.name,
        resource.partition,
        resource.attr("engine"),
        resource.attr("node_type"),
    )


DATABASE_UP = MetricDescriptor(
    "scaleway_database_up",
    "If 1 the database is up and running, 0.5 while transitioning or autohealing, 0 otherwise",
    DatabaseLabels,
)
DATABASE_CPU = MetricDescriptor(
    "scaleway_database_cpu_usage_percent", "Database's CPUs percentage usage", NodeLabels
)
DATABASE_MEMORY = MetricDescriptor(
    "scaleway_database_memory_usage_percent", "Database's memory percentage usage", NodeLabels
)
DATABASE_CONNECTIONS = MetricDescriptor(
    "scaleway_database_total_connections", "Database's connection count", NodeLabels
)
DATABASE_DISK = MetricDescriptor(
    "scaleway_database_disk_usage_percent", "Database's disk percentage usage", NodeLabels
)


def database_family(api: "ScalewayApi", regions: tuple[str, ...]) -> CollectorFamily:
    return CollectorFamily(
        name="database",
        partitions=regions,
        list_resources=api.list_database_instances,
        fetch_series=api.get_database_metrics,
        registry=SeriesRegistry(
            {
                "cpu_usage_percent": SeriesBinding(DATABASE_CPU, node_labels),
                "mem_usage_percent": SeriesBinding(DATABASE_MEMORY, node_labels),
                "total_connections": SeriesBinding(DATABASE_CONNECTIONS, node_labels),
                "disk_usage_percent": SeriesBinding(DATABASE_DISK, node_labels),
            }
        ),
        liveness=Liveness(DATABASE_UP, database_labels, DatabaseStatus, DATABASE_LIVENESS),
    )


# ── Object storage ─────────────────────────────────────────────────────


class BucketLabels(NamedTuple):
    name: str
    region: str
    public: str


class BucketStorageLabels(NamedTuple):
    name: str
    region: str
    public: str
    storage_class: str


def bucket_labels(resource: Resource, series: TimeSeries) -> BucketLabels:
    return BucketLabels(resource.name, resource.partition, resource.attr("public"))


def bucket_storage_labels(resource: Resource, series: TimeSeries) -> BucketStorageLabels:
    return BucketStorageLabels(
        resource.name, resource.partition, resource.attr("public"), series.meta("type")
    )


BUCKET_OBJECTS = MetricDescriptor(
    "scaleway_s3_object_total", "Number of objects, excluding parts", BucketLabels
)
BUCKET_BANDWIDTH = MetricDescriptor(
    "scaleway_s3_bandwidth_bytes", "Bucket's Bandwidth usage", BucketLabels
)
BUCKET_STORAGE = MetricDescriptor(
    "scaleway_s3_storage_usage_bytes", "Bucket's Storage usage", BucketStorageLabels
)

BUCKET_METRICS = ("object_count", "bytes_sent", "storage_usage")


def bucket_family(api: "ScalewayApi", regions: tuple[str, ...]) -> CollectorFamily:
    return CollectorFamily(
        name="bucket",
        partitions=regions,
        list_resources=api.list_buckets,
        fetch_series=api.get_bucket_metrics,
        registry=SeriesRegistry(
            {
                "object_count": SeriesBinding(BUCKET_OBJECTS, bucket_labels),
                "bytes_sent": SeriesBinding(BUCKET_BANDWIDTH, bucket_labels),
                "storage_usage": SeriesBinding(BUCKET_STORAGE, bucket_storage_labels),
            }
        ),
        metric_requests=BUCKET_METRICS,
    )


# ── Load balancer ──────────────────────────────────────────────────────


class LoadBalancerLabels(NamedTuple):
    id: str
    name: str
    zone: str
    type: str


def loadbalancer_labels(resource: Resource, series: TimeSeries | None = None) -> LoadBalancerLabels:
    return LoadBalancerLabels(resource.id, resource.name, resource.partition, resource.attr("type"))


LOADBALANCER_UP = MetricDescriptor(
    "scaleway_loadbalancer_up",
    "If 1 the loadbalancer is up and running, 0.5 when migrating, 0 otherwise",
    LoadBalancerLabels,
)
LOADBALANCER_RECEIVE = MetricDescriptor(
    "scaleway_loadbalancer_network_receive_bits_sec",
    "LoadBalancer's network receive rate in bits per second",
    LoadBalancerLabels,
)
LOADBALANCER_TRANSMIT = MetricDescriptor(
    "scaleway_loadbalancer_network_transmit_bits_sec",
    "LoadBalancer's network transmit rate in bits per second",
    LoadBalancerLabels,
)
LOADBALANCER_CONNECTIONS = MetricDescriptor(
    "scaleway_loadbalancer_total_connections",
    "LoadBalancer's current connection rate per second",
    LoadBalancerLabels,
)
LOADBALANCER_NEW_CONNECTIONS = MetricDescriptor(
    "scaleway_loadbalancer_new_connection_rate_sec",
    "LoadBalancer's new connection rate per second",
    LoadBalancerLabels,
)


def loadbalancer_family(api: "ScalewayApi", zones: tuple[str, ...]) -> CollectorFamily:
    return CollectorFamily(
        name="loadbalancer",
        partitions=zones,
        partition_kind="zone",
        list_resources=api.list_load_balancers,
        fetch_series=api.get_load_balancer_metrics,
        registry=SeriesRegistry(
            {
                "node_network_receive_bits_sec": SeriesBinding(LOADBALANCER_RECEIVE, loadbalancer_labels),
                "node_network_transmit_bits_sec": SeriesBinding(LOADBALANCER_TRANSMIT, loadbalancer_labels),
                "current_connection_rate_sec": SeriesBinding(LOADBALANCER_CONNECTIONS, loadbalancer_labels),
                "current_new_connection_rate_sec": SeriesBinding(LOADBALANCER_NEW_CONNECTIONS, loadbalancer_labels),
            },
            # Per-backend health, already summarised by the up gauge
            ignored=["server_status"],
        ),
        liveness=Liveness(LOADBALANCER_UP, loadbalancer_labels, LoadBalancerStatus, LOADBALANCER_LIVENESS),
    )


# ── Redis ──────────────────────────────────────────────────────────────


class RedisLabels(NamedTuple):
    id: str
    name: str
    zone: str
    node_type: str


def redis_labels(resource: Resource) -> RedisLabels:
    return RedisLabels(resource.id, resource.name, resource.partition, resource.attr("node_type"))


REDIS_UP = MetricDescriptor(
    "scaleway_redis_up",
    "If 1 the redis cluster is up and running, 0.5 while transitioning or autohealing, 0 otherwise",
    RedisLabels,
)
REDIS_CPU = MetricDescriptor(
    "scaleway_redis_cpu_usage_percent", "The redis node CPU usage percentage", NodeLabels
)
REDIS_MEMORY = MetricDescriptor(
    "scaleway_redis_memory_usage_percent", "The redis node memory usage percentage", NodeLabels
)
REDIS_DB_MEMORY = MetricDescriptor(
    "scaleway_redis_db_memory_usage_percent",
    "The redis node database memory usage percentage",
    NodeLabels,
)


def redis_family(api: "ScalewayApi", zones: tuple[str, ...]) -> CollectorFamily:
    return CollectorFamily(
        name="redis",
        partitions=zones,
        partition_kind="zone",
        list_resources=api.list_redis_clusters,
        fetch_series=api.get_redis_metrics,
        registry=SeriesRegistry(
            {
                "cpu_usage_percent": SeriesBinding(REDIS_CPU, node_labels),
                "mem_usage_percent": SeriesBinding(REDIS_MEMORY, node_labels),
                "db_memory_usage_percent": SeriesBinding(REDIS_DB_MEMORY, node_labels),
            }
        ),
        liveness=Liveness(REDIS_UP, redis_labels, RedisStatus, REDIS_LIVENESS),
    )
