"""
Application configuration using Pydantic Settings.

All environment variables are accessed through this config object.
Never use os.getenv() directly in business logic.
"""

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Database Configuration
    DATABASE_URL: str = Field(
        default="sqlite:///./studio_uploads.db",
        description="SQLAlchemy database URL",
    )

    # Object Storage Configuration (S3-compatible)
    STORAGE_BUCKET: str = Field(
        default="studio-media",
        description="Bucket holding uploaded media",
    )
    STORAGE_ENDPOINT_URL: str | None = Field(
        default=None,
        description="S3-compatible endpoint URL (None for AWS S3)",
    )
    STORAGE_ACCESS_KEY_ID: str | None = Field(
        default=None,
        description="Object storage access key id",
    )
    STORAGE_SECRET_ACCESS_KEY: str | None = Field(
        default=None,
        description="Object storage secret access key",
    )
    STORAGE_REGION: str = Field(
        default="auto",
        description="Object storage region",
    )
    USE_MOCK_STORAGE: bool = Field(
        default=True,
        description="Use the in-memory storage gateway instead of S3",
    )

    # Auth Configuration
    AUTH_JWT_SECRET: str = Field(
        default="change-me",
        description="Shared secret used to verify access tokens",
    )
    AUTH_JWT_ALGORITHM: str = Field(
        default="HS256",
        description="Access token signing algorithm",
    )
    AUTH_JWT_AUDIENCE: str = Field(
        default="authenticated",
        description="Expected access token audience",
    )

    # Application Configuration
    ALLOWED_ORIGINS: List[str] = Field(
        default=["http://localhost:3000"],
        description="CORS allowed origins",
    )
    LOG_LEVEL: str = Field(
        default="INFO",
        description="Root logging level",
    )

    # Lead intake rate limiting
    LEAD_RATE_LIMIT_REQUESTS: int = Field(
        default=5,
        description="Number of lead submissions allowed per window",
    )
    LEAD_RATE_LIMIT_WINDOW: int = Field(
        default=3600,
        description="Rate limit time window in seconds",
    )
    TRUST_PROXY_HEADERS: bool = Field(
        default=False,
        description="Key rate limits on X-Forwarded-For/X-Real-IP (only behind a proxy that sets them)",
    )

    # Chunked upload configuration
    DEFAULT_CHUNK_SIZE: int = Field(
        default=5 * 1024 * 1024,
        description="Default chunk size in bytes (5MB)",
    )
    MIN_CHUNK_SIZE: int = Field(
        default=5 * 1024 * 1024,
        description="Minimum chunk size in bytes (S3 multipart minimum)",
    )
    MAX_CHUNK_SIZE: int = Field(
        default=100 * 1024 * 1024,
        description="Maximum chunk size in bytes (100MB)",
    )
    MAX_UPLOAD_SIZE: int = Field(
        default=5 * 1024 * 1024 * 1024,
        description="Maximum file upload size in bytes (5GB)",
    )
    PRESIGNED_URL_TTL: int = Field(
        default=3600,
        description="Lifetime of presigned part upload URLs in seconds",
    )
    UPLOAD_SESSION_TTL_HOURS: int = Field(
        default=24,
        description="Hours an upload session stays resumable",
    )


# Global settings instance
settings = Settings()
