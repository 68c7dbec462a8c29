"""Status enums of the resource families that report their own liveness."""

from scaleway_exporter.collectors.model import UpstreamStatus
from scaleway_exporter.collectors.resource import status_tiers


class DatabaseStatus(UpstreamStatus):
    UNKNOWN = "unknown"
    READY = "ready"
    PROVISIONING = "provisioning"
    CONFIGURING = "configuring"
    DELETING = "deleting"
    ERROR = "error"
    AUTOHEALING = "autohealing"
    LOCKED = "locked"
    INITIALIZING = "initializing"
    DISK_FULL = "disk_full"
    BACKUPING = "backuping"
    SNAPSHOTTING = "snapshotting"
    RESTARTING = "restarting"


class LoadBalancerStatus(UpstreamStatus):
    UNKNOWN = "unknown"
    READY = "ready"
    PENDING = "pending"
    STOPPED = "stopped"
    ERROR = "error"
    LOCKED = "locked"
    MIGRATING = "migrating"
    TO_CREATE = "to_create"
    CREATING = "creating"
    TO_DELETE = "to_delete"
    DELETING = "deleting"


class RedisStatus(UpstreamStatus):
    UNKNOWN = "unknown"
    READY = "ready"
    PROVISIONING = "provisioning"
    CONFIGURING = "configuring"
    DELETING = "deleting"
    ERROR = "error"
    AUTOHEALING = "autohealing"
    LOCKED = "locked"
    SUSPENDED = "suspended"
    INITIALIZING = "initializing"


DATABASE_LIVENESS = status_tiers(
    healthy=[DatabaseStatus.READY, DatabaseStatus.BACKUPING],
    degraded=[
        DatabaseStatus.AUTOHEALING,
        DatabaseStatus.PROVISIONING,
        DatabaseStatus.CONFIGURING,
        DatabaseStatus.DELETING,
        DatabaseStatus.INITIALIZING,
        DatabaseStatus.RESTARTING,
        DatabaseStatus.SNAPSHOTTING,
    ],
    down=[
        DatabaseStatus.UNKNOWN,
        DatabaseStatus.ERROR,
        DatabaseStatus.LOCKED,
        DatabaseStatus.DISK_FULL,
    ],
)

LOADBALANCER_LIVENESS = status_tiers(
    healthy=[LoadBalancerStatus.READY],
    degraded=[
        LoadBalancerStatus.DELETING,
        LoadBalancerStatus.CREATING,
        LoadBalancerStatus.MIGRATING,
        LoadBalancerStatus.TO_DELETE,
    ],
    down=[
        LoadBalancerStatus.ERROR,
        LoadBalancerStatus.UNKNOWN,
        LoadBalancerStatus.LOCKED,
        LoadBalancerStatus.PENDING,
        LoadBalancerStatus.STOPPED,
        LoadBalancerStatus.TO_CREATE,
    ],
)

REDIS_LIVENESS = status_tiers(
    healthy=[RedisStatus.READY],
    degraded=[
        RedisStatus.PROVISIONING,
        RedisStatus.CONFIGURING,
        RedisStatus.DELETING,
        RedisStatus.AUTOHEALING,
        RedisStatus.INITIALIZING,
    ],
    down=[
        RedisStatus.ERROR,
        RedisStatus.LOCKED,
        RedisStatus.SUSPENDED,
        RedisStatus.UNKNOWN,
    ],
)
