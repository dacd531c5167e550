"""
Gateway factory for object storage backend selection.

Returns the appropriate StorageGateway based on USE_MOCK_STORAGE configuration.
"""

import logging

from app.config import settings

from .mock_storage_gateway import MockStorageGateway
from .storage_gateway import StorageGateway

logger = logging.getLogger(__name__)

# Singleton gateway instance
_gateway_instance: StorageGateway | None = None


def get_storage_gateway() -> StorageGateway:
    """
    Get the configured storage gateway instance.

    Uses singleton pattern so the mock gateway keeps its multipart state
    across requests and the S3 client is built once.

    Returns:
        StorageGateway: MockStorageGateway if USE_MOCK_STORAGE=true,
                        S3StorageGateway otherwise
    """
    global _gateway_instance

    if _gateway_instance is not None:
        return _gateway_instance

    if settings.USE_MOCK_STORAGE:
        logger.info("Initializing MockStorageGateway (USE_MOCK_STORAGE=true)")
        _gateway_instance = MockStorageGateway(bucket=settings.STORAGE_BUCKET)
    else:
        from .s3_storage_gateway import S3StorageGateway

        logger.info(f"Initializing S3StorageGateway for bucket {settings.STORAGE_BUCKET}")
        _gateway_instance = S3StorageGateway()

    return _gateway_instance


def reset_gateway() -> None:
    """
    Reset the gateway singleton (for testing purposes).

    Clears the cached gateway instance, allowing a fresh
    gateway to be created on next get_storage_gateway() call.
    """
    global _gateway_instance
    _gateway_instance = None
    logger.info("Storage gateway singleton reset")
