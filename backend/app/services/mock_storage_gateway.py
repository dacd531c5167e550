"""
MockStorageGateway - in-memory multipart upload bookkeeping.

Mirrors the S3 multipart contract closely enough for development and
tests without object storage credentials. No bytes are stored; the client
never sends part payloads through this service.
"""

import logging
import uuid
from typing import Dict, List

from .storage_gateway import (
    CompletedPart,
    MultipartUploadNotFound,
    StorageGateway,
    StorageGatewayError,
)

logger = logging.getLogger(__name__)


class MockStorageGateway(StorageGateway):
    """
    Storage gateway that simulates multipart uploads in memory.

    Enforces the same rules the real backend does at completion time:
    parts must arrive in strictly ascending order and the multipart upload
    must still be open.
    """

    def __init__(self, bucket: str = "mock-bucket"):
        self.bucket = bucket
        self.uploads: Dict[str, Dict] = {}
        self.objects: Dict[str, List[CompletedPart]] = {}
        logger.info("[MOCK-STORAGE] MockStorageGateway initialized")

    @property
    def gateway_name(self) -> str:
        return "mock"

    async def create_multipart_upload(self, key: str, content_type: str) -> str:
        return self.open_upload(key, content_type)

    def open_upload(self, key: str, content_type: str) -> str:
        """Register an open multipart upload and return its id."""
        upload_id = f"mock_{uuid.uuid4().hex}"
        self.uploads[upload_id] = {
            "key": key,
            "content_type": content_type,
            "state": "open",
        }
        logger.info(f"[MOCK-STORAGE] Created multipart upload {upload_id} for {key}")
        return upload_id

    async def presign_part_url(
        self, key: str, upload_id: str, part_number: int, expires_in: int
    ) -> str:
        self._get_open_upload(key, upload_id)
        return (
            f"https://mock-storage.local/{self.bucket}/{key}"
            f"?uploadId={upload_id}&partNumber={part_number}&expires={expires_in}"
        )

    async def complete_multipart_upload(
        self, key: str, upload_id: str, parts: List[CompletedPart]
    ) -> str:
        upload = self._get_open_upload(key, upload_id)

        numbers = [part["partNumber"] for part in parts]
        if not numbers:
            raise StorageGatewayError("You must specify at least one part")
        if any(b <= a for a, b in zip(numbers, numbers[1:])):
            raise StorageGatewayError("The list of parts was not in ascending order")

        upload["state"] = "completed"
        self.objects[key] = list(parts)
        logger.info(f"[MOCK-STORAGE] Completed {key} from {len(parts)} parts")
        return f"https://mock-storage.local/{self.bucket}/{key}"

    async def abort_multipart_upload(self, key: str, upload_id: str) -> None:
        upload = self._get_open_upload(key, upload_id)
        upload["state"] = "aborted"
        logger.info(f"[MOCK-STORAGE] Aborted multipart upload {upload_id}")

    def _get_open_upload(self, key: str, upload_id: str) -> Dict:
        upload = self.uploads.get(upload_id)
        if upload is None or upload["key"] != key or upload["state"] != "open":
            raise MultipartUploadNotFound(f"NoSuchUpload: {upload_id}")
        return upload
