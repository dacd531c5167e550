"""
StorageGateway abstraction layer for object storage backends.

Defines the multipart-upload interface the upload workflow consumes,
allowing the API to swap between S3-compatible storage and an in-memory
gateway via configuration.
"""

from abc import ABC, abstractmethod
from typing import List, TypedDict


class CompletedPart(TypedDict):
    """One finalized part as supplied to the completion call."""

    partNumber: int
    etag: str


class StorageGatewayError(Exception):
    """Raised when the storage backend rejects a multipart operation."""

    pass


class MultipartUploadNotFound(StorageGatewayError):
    """The multipart upload does not exist or was already completed/aborted."""

    pass


class StorageGateway(ABC):
    """
    Abstract base class for object storage gateways.

    Implementations:
    - S3StorageGateway: boto3 client against any S3-compatible endpoint
    - MockStorageGateway: in-memory multipart bookkeeping for development and tests
    """

    @abstractmethod
    async def create_multipart_upload(self, key: str, content_type: str) -> str:
        """
        Start a multipart upload for an object.

        Args:
            key: Target storage key
            content_type: MIME type stored with the final object

        Returns:
            str: Storage-side multipart upload id

        Raises:
            StorageGatewayError: If the backend refuses to start the upload
        """
        pass

    @abstractmethod
    async def presign_part_url(
        self, key: str, upload_id: str, part_number: int, expires_in: int
    ) -> str:
        """
        Generate a time-limited URL the client can PUT one part to.

        Args:
            key: Target storage key
            upload_id: Storage-side multipart upload id
            part_number: 1-based part number
            expires_in: URL lifetime in seconds

        Returns:
            str: Presigned URL
        """
        pass

    @abstractmethod
    async def complete_multipart_upload(
        self, key: str, upload_id: str, parts: List[CompletedPart]
    ) -> str:
        """
        Assemble uploaded parts into the final object.

        Args:
            key: Target storage key
            upload_id: Storage-side multipart upload id
            parts: Parts in strictly ascending part-number order

        Returns:
            str: Location of the finalized object

        Raises:
            MultipartUploadNotFound: If the multipart upload is unknown or finished
            StorageGatewayError: If the backend rejects the part list
        """
        pass

    @abstractmethod
    async def abort_multipart_upload(self, key: str, upload_id: str) -> None:
        """
        Abandon a multipart upload and release its stored parts.

        Raises:
            MultipartUploadNotFound: If the multipart upload is unknown or finished
            StorageGatewayError: On any other backend failure
        """
        pass

    @property
    @abstractmethod
    def gateway_name(self) -> str:
        """Return gateway identifier for logs: "s3" or "mock"."""
        pass
