"""
Unit tests for storage gateway implementations.

Tests MockStorageGateway bookkeeping, S3StorageGateway against a mocked
boto3 client, and the gateway factory.
"""

from unittest.mock import MagicMock, patch

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from app.services import (
    MockStorageGateway,
    MultipartUploadNotFound,
    StorageGateway,
    StorageGatewayError,
    get_storage_gateway,
    reset_gateway,
)
from app.services.s3_storage_gateway import S3StorageGateway


def _client_error(code: str, operation: str = "CompleteMultipartUpload") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, operation)


class TestMockStorageGateway:
    def test_gateway_name_is_mock(self):
        assert MockStorageGateway().gateway_name == "mock"

    @pytest.mark.asyncio
    async def test_full_multipart_flow(self):
        gateway = MockStorageGateway(bucket="media")
        upload_id = await gateway.create_multipart_upload("raw/a.mp4", "video/mp4")

        url = await gateway.presign_part_url("raw/a.mp4", upload_id, 2, 3600)
        location = await gateway.complete_multipart_upload(
            "raw/a.mp4",
            upload_id,
            [{"partNumber": 1, "etag": "a"}, {"partNumber": 2, "etag": "b"}],
        )

        assert upload_id.startswith("mock_")
        assert "partNumber=2" in url
        assert location == "https://mock-storage.local/media/raw/a.mp4"
        assert len(gateway.objects["raw/a.mp4"]) == 2

    @pytest.mark.asyncio
    async def test_rejects_unordered_parts(self):
        gateway = MockStorageGateway()
        upload_id = await gateway.create_multipart_upload("k", "video/mp4")

        with pytest.raises(StorageGatewayError):
            await gateway.complete_multipart_upload(
                "k", upload_id, [{"partNumber": 2, "etag": "b"}, {"partNumber": 1, "etag": "a"}]
            )

    @pytest.mark.asyncio
    async def test_rejects_empty_part_list(self):
        gateway = MockStorageGateway()
        upload_id = await gateway.create_multipart_upload("k", "video/mp4")

        with pytest.raises(StorageGatewayError):
            await gateway.complete_multipart_upload("k", upload_id, [])

    @pytest.mark.asyncio
    async def test_closed_upload_is_not_found(self):
        gateway = MockStorageGateway()
        upload_id = await gateway.create_multipart_upload("k", "video/mp4")
        await gateway.abort_multipart_upload("k", upload_id)

        with pytest.raises(MultipartUploadNotFound):
            await gateway.presign_part_url("k", upload_id, 1, 60)
        with pytest.raises(MultipartUploadNotFound):
            await gateway.abort_multipart_upload("k", upload_id)

    @pytest.mark.asyncio
    async def test_key_mismatch_is_not_found(self):
        gateway = MockStorageGateway()
        upload_id = await gateway.create_multipart_upload("k", "video/mp4")

        with pytest.raises(MultipartUploadNotFound):
            await gateway.complete_multipart_upload("other", upload_id, [{"partNumber": 1, "etag": "a"}])


class TestS3StorageGateway:
    @pytest.fixture
    def s3_client(self):
        return MagicMock()

    @pytest.fixture
    def s3_gateway(self, s3_client):
        return S3StorageGateway(client=s3_client, bucket="media")

    def test_gateway_name_is_s3(self, s3_gateway):
        assert s3_gateway.gateway_name == "s3"

    @pytest.mark.asyncio
    async def test_create_multipart_upload(self, s3_gateway, s3_client):
        s3_client.create_multipart_upload.return_value = {"UploadId": "abc123"}

        upload_id = await s3_gateway.create_multipart_upload("raw/a.mp4", "video/mp4")

        assert upload_id == "abc123"
        s3_client.create_multipart_upload.assert_called_once_with(
            Bucket="media", Key="raw/a.mp4", ContentType="video/mp4"
        )

    @pytest.mark.asyncio
    async def test_create_without_upload_id_fails(self, s3_gateway, s3_client):
        s3_client.create_multipart_upload.return_value = {}

        with pytest.raises(StorageGatewayError):
            await s3_gateway.create_multipart_upload("raw/a.mp4", "video/mp4")

    @pytest.mark.asyncio
    async def test_presign_part_url(self, s3_gateway, s3_client):
        s3_client.generate_presigned_url.return_value = "https://signed"

        url = await s3_gateway.presign_part_url("raw/a.mp4", "abc123", 4, 900)

        assert url == "https://signed"
        s3_client.generate_presigned_url.assert_called_once_with(
            ClientMethod="upload_part",
            Params={"Bucket": "media", "Key": "raw/a.mp4", "UploadId": "abc123", "PartNumber": 4},
            ExpiresIn=900,
        )

    @pytest.mark.asyncio
    async def test_complete_translates_part_keys(self, s3_gateway, s3_client):
        s3_client.complete_multipart_upload.return_value = {"Location": "https://media/raw/a.mp4"}

        location = await s3_gateway.complete_multipart_upload(
            "raw/a.mp4", "abc123", [{"partNumber": 1, "etag": '"e1"'}]
        )

        assert location == "https://media/raw/a.mp4"
        kwargs = s3_client.complete_multipart_upload.call_args.kwargs
        assert kwargs["MultipartUpload"] == {"Parts": [{"PartNumber": 1, "ETag": '"e1"'}]}

    @pytest.mark.asyncio
    async def test_complete_falls_back_to_bucket_key(self, s3_gateway, s3_client):
        s3_client.complete_multipart_upload.return_value = {}

        location = await s3_gateway.complete_multipart_upload(
            "raw/a.mp4", "abc123", [{"partNumber": 1, "etag": "e1"}]
        )

        assert location == "media/raw/a.mp4"

    @pytest.mark.asyncio
    async def test_no_such_upload_maps_to_not_found(self, s3_gateway, s3_client):
        s3_client.complete_multipart_upload.side_effect = _client_error("NoSuchUpload")

        with pytest.raises(MultipartUploadNotFound):
            await s3_gateway.complete_multipart_upload("k", "abc123", [{"partNumber": 1, "etag": "e"}])

    @pytest.mark.asyncio
    async def test_other_client_errors_map_to_gateway_error(self, s3_gateway, s3_client):
        s3_client.complete_multipart_upload.side_effect = _client_error("InvalidPart")

        with pytest.raises(StorageGatewayError) as exc_info:
            await s3_gateway.complete_multipart_upload("k", "abc123", [{"partNumber": 1, "etag": "e"}])

        assert not isinstance(exc_info.value, MultipartUploadNotFound)
        assert "InvalidPart" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_connection_errors_map_to_gateway_error(self, s3_gateway, s3_client):
        s3_client.abort_multipart_upload.side_effect = EndpointConnectionError(
            endpoint_url="https://storage.invalid"
        )

        with pytest.raises(StorageGatewayError):
            await s3_gateway.abort_multipart_upload("k", "abc123")


class TestGatewayFactory:
    def setup_method(self):
        reset_gateway()

    def teardown_method(self):
        reset_gateway()

    def test_returns_mock_gateway_by_default(self):
        gateway = get_storage_gateway()

        assert isinstance(gateway, StorageGateway)
        assert gateway.gateway_name == "mock"

    def test_returns_singleton(self):
        assert get_storage_gateway() is get_storage_gateway()

    def test_reset_creates_new_instance(self):
        first = get_storage_gateway()
        reset_gateway()
        assert get_storage_gateway() is not first

    def test_returns_s3_gateway_when_mock_disabled(self):
        with patch("app.services.gateway_factory.settings") as mock_settings, patch(
            "app.services.s3_storage_gateway.boto3"
        ) as mock_boto3:
            mock_settings.USE_MOCK_STORAGE = False
            gateway = get_storage_gateway()

        assert gateway.gateway_name == "s3"
        mock_boto3.client.assert_called_once()
