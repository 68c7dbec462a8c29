"""Unit tests for S3Service."""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from scaleway_exporter.services.s3_service import S3Service, S3ServiceError


@pytest.fixture
def mock_s3_client():
    return MagicMock()


@pytest.fixture
def s3_service(mock_s3_client):
    service = S3Service("access", "secret", timeout=2.0)
    service._clients["fr-par"] = mock_s3_client
    return service


class TestS3Service:
    """Test S3Service functionality."""

    def test_list_buckets(self, s3_service, mock_s3_client):
        mock_s3_client.list_buckets.return_value = {
            "Buckets": [{"Name": "logs"}, {"Name": "assets"}],
            "Owner": {"ID": "proj-1:proj-1", "DisplayName": "proj-1:proj-1"},
        }

        listing = s3_service.list_buckets("fr-par")

        assert listing.project_id == "proj-1"
        assert listing.names == ("logs", "assets")

    def test_list_buckets_empty(self, s3_service, mock_s3_client):
        mock_s3_client.list_buckets.return_value = {"Buckets": [], "Owner": {"ID": "proj-1:proj-1"}}

        listing = s3_service.list_buckets("fr-par")

        assert listing.names == ()

    def test_client_error(self, s3_service, mock_s3_client):
        mock_s3_client.list_buckets.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "Access Denied"}}, "ListBuckets"
        )

        with pytest.raises(S3ServiceError, match="fr-par"):
            s3_service.list_buckets("fr-par")

    def test_connection_error(self, s3_service, mock_s3_client):
        mock_s3_client.list_buckets.side_effect = EndpointConnectionError(
            endpoint_url="https://s3.fr-par.scw.cloud"
        )

        with pytest.raises(S3ServiceError):
            s3_service.list_buckets("fr-par")

    def test_client_per_region_is_cached(self):
        service = S3Service("access", "secret", timeout=3.0)

        with patch("scaleway_exporter.services.s3_service.boto3.client") as mock_client:
            first = service.client("nl-ams")
            second = service.client("nl-ams")
            service.client("pl-waw")

        assert first is second
        assert mock_client.call_count == 2

        kwargs = mock_client.call_args_list[0].kwargs
        assert kwargs["endpoint_url"] == "https://s3.nl-ams.scw.cloud"
        assert kwargs["region_name"] == "nl-ams"
        assert kwargs["aws_access_key_id"] == "access"
        assert kwargs["aws_secret_access_key"] == "secret"

        config = kwargs["config"]
        assert config.connect_timeout == 3.0
        assert config.read_timeout == 3.0
        assert config.s3 == {"addressing_style": "path"}
