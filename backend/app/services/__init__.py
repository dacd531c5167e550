"""Service layer for business logic and external integrations."""

from .storage_gateway import (
    CompletedPart,
    MultipartUploadNotFound,
    StorageGateway,
    StorageGatewayError,
)
from .mock_storage_gateway import MockStorageGateway
from .gateway_factory import get_storage_gateway, reset_gateway
from .upload_ledger import UploadLedger, UploadProgress
from .chunk_coordinator import ChunkUploadCoordinator
from .completion_coordinator import UploadCompletionCoordinator
from .upload_initiator import UploadInitiator

__all__ = [
    "CompletedPart",
    "MultipartUploadNotFound",
    "StorageGateway",
    "StorageGatewayError",
    "MockStorageGateway",
    "get_storage_gateway",
    "reset_gateway",
    "UploadLedger",
    "UploadProgress",
    "ChunkUploadCoordinator",
    "UploadCompletionCoordinator",
    "UploadInitiator",
]
