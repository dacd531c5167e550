"""
S3StorageGateway - multipart uploads against an S3-compatible bucket.

Works with AWS S3 and S3-compatible providers (Cloudflare R2, MinIO)
through boto3.
"""

import asyncio
import logging
from typing import List

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from app.config import settings

from .storage_gateway import (
    CompletedPart,
    MultipartUploadNotFound,
    StorageGateway,
    StorageGatewayError,
)

logger = logging.getLogger(__name__)

_NOT_FOUND_CODES = {"NoSuchUpload", "NoSuchKey", "404"}


def _translate_error(operation: str, error: Exception) -> StorageGatewayError:
    if isinstance(error, ClientError):
        code = error.response.get("Error", {}).get("Code", "")
        if code in _NOT_FOUND_CODES:
            return MultipartUploadNotFound(f"{operation}: {code}")
        return StorageGatewayError(f"{operation}: {code or error}")
    return StorageGatewayError(f"{operation}: {error}")


class S3StorageGateway(StorageGateway):
    """
    Storage gateway backed by a boto3 S3 client.

    boto3 calls are blocking, so each one runs in a worker thread to keep
    the event loop free.
    """

    def __init__(self, client=None, bucket: str | None = None):
        """
        Initialize S3StorageGateway.

        Args:
            client: Pre-built boto3 S3 client (built from settings when None)
            bucket: Bucket name (settings.STORAGE_BUCKET when None)
        """
        self.bucket = bucket or settings.STORAGE_BUCKET
        self._client = client or boto3.client(
            "s3",
            endpoint_url=settings.STORAGE_ENDPOINT_URL,
            aws_access_key_id=settings.STORAGE_ACCESS_KEY_ID,
            aws_secret_access_key=settings.STORAGE_SECRET_ACCESS_KEY,
            region_name=settings.STORAGE_REGION,
            config=BotoConfig(signature_version="s3v4"),
        )
        logger.info(f"S3 storage gateway initialized for bucket {self.bucket}")

    @property
    def gateway_name(self) -> str:
        return "s3"

    async def create_multipart_upload(self, key: str, content_type: str) -> str:
        try:
            response = await asyncio.to_thread(
                self._client.create_multipart_upload,
                Bucket=self.bucket,
                Key=key,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"create_multipart_upload failed for {key}: {e}")
            raise _translate_error("create_multipart_upload", e)

        upload_id = response.get("UploadId")
        if not upload_id:
            raise StorageGatewayError("create_multipart_upload: no UploadId returned")
        return upload_id

    async def presign_part_url(
        self, key: str, upload_id: str, part_number: int, expires_in: int
    ) -> str:
        try:
            return await asyncio.to_thread(
                self._client.generate_presigned_url,
                ClientMethod="upload_part",
                Params={
                    "Bucket": self.bucket,
                    "Key": key,
                    "UploadId": upload_id,
                    "PartNumber": part_number,
                },
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Presigning part {part_number} of {key} failed: {e}")
            raise _translate_error("generate_presigned_url", e)

    async def complete_multipart_upload(
        self, key: str, upload_id: str, parts: List[CompletedPart]
    ) -> str:
        try:
            response = await asyncio.to_thread(
                self._client.complete_multipart_upload,
                Bucket=self.bucket,
                Key=key,
                UploadId=upload_id,
                MultipartUpload={
                    "Parts": [
                        {"PartNumber": part["partNumber"], "ETag": part["etag"]}
                        for part in parts
                    ]
                },
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"complete_multipart_upload failed for {key}: {e}")
            raise _translate_error("complete_multipart_upload", e)

        return response.get("Location") or f"{self.bucket}/{key}"

    async def abort_multipart_upload(self, key: str, upload_id: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.abort_multipart_upload,
                Bucket=self.bucket,
                Key=key,
                UploadId=upload_id,
            )
        except (ClientError, BotoCoreError) as e:
            logger.error(f"abort_multipart_upload failed for {key}: {e}")
            raise _translate_error("abort_multipart_upload", e)
