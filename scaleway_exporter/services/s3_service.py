"""S3 client used to enumerate Scaleway Object Storage buckets per region."""

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client

logger = logging.getLogger(__name__)


class S3ServiceError(Exception):
    """Raised when a bucket listing fails."""

    pass


@dataclass(frozen=True)
class BucketListing:
    """Bucket names owned by the credentials in one region."""

    project_id: str
    names: tuple[str, ...]


class S3Service:
    """Per-region S3 clients pointed at ``https://s3.<region>.scw.cloud``.

    Client creation is serialised; built clients are shared by scrape threads.
    """

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        timeout: float = 5.0,
        endpoint_template: str = "https://s3.{region}.scw.cloud",
    ) -> None:
        """Initialize S3 service.

        Args:
            access_key: Scaleway access key.
            secret_key: Scaleway secret key.
            timeout: Connect and read timeout in seconds, normally the scrape
                deadline; boto3 has no per-call timeout.
            endpoint_template: Endpoint URL with a ``{region}`` placeholder.
        """
        self._access_key = access_key
        self._secret_key = secret_key
        self._timeout = timeout
        self._endpoint_template = endpoint_template
        self._clients: dict[str, "S3Client"] = {}
        self._lock = threading.Lock()

    def client(self, region: str) -> "S3Client":
        """Get or create the S3 client for a region (lazy initialization)."""
        with self._lock:
            if region not in self._clients:
                self._clients[region] = boto3.client(
                    "s3",
                    endpoint_url=self._endpoint_template.format(region=region),
                    aws_access_key_id=self._access_key,
                    aws_secret_access_key=self._secret_key,
                    region_name=region,
                    config=Config(
                        signature_version="s3v4",
                        s3={"addressing_style": "path"},
                        connect_timeout=self._timeout,
                        read_timeout=self._timeout,
                        retries={"max_attempts": 1, "mode": "standard"},
                    ),
                )
            return self._clients[region]

    def list_buckets(self, region: str) -> BucketListing:
        """List the buckets visible in a region.

        Args:
            region: Scaleway region (e.g. ``fr-par``).

        Returns:
            The owning project id and the bucket names.

        Raises:
            S3ServiceError: If the listing fails.
        """
        try:
            response = self.client(region).list_buckets()
        except (ClientError, BotoCoreError) as e:
            raise S3ServiceError(f"Failed to list buckets in {region}: {e}") from e

        owner_id = response.get("Owner", {}).get("ID", "")
        names = tuple(bucket["Name"] for bucket in response.get("Buckets", []))

        logger.debug(
            f"Found {len(names)} buckets",
            extra={"region": region, "bucket_names": list(names)},
        )

        # Scaleway reports the owner as "<project_id>:<project_id>"
        return BucketListing(project_id=owner_id.split(":")[0], names=names)

