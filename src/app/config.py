"""Application configuration using Pydantic Settings (ENV ONLY)."""
from functools import lru_cache
from typing import Optional
from urllib.parse import urlparse

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings (loaded from environment variables / .env)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = Field("hopspot-photos")
    ENVIRONMENT: str = Field("development")
    DEBUG: bool = Field(False)
    LOG_LEVEL: str = Field("INFO")
    API_V1_PREFIX: str = Field("/api/v1")

    # Database
    DB_USER: str = Field("postgres")
    DB_PASSWORD: str = Field("postgres")
    DB_HOST: str = Field("localhost")
    DB_PORT: int = Field(5432)
    DB_NAME: str = Field("hopspot")
    DB_POOL_SIZE: int = Field(5)
    DB_MAX_OVERFLOW: int = Field(10)
    DATABASE_URL_OVERRIDE: Optional[str] = Field(None)

    @computed_field
    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return (
            f"postgresql://{self.DB_USER}:{self.DB_PASSWORD}"
            f"@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"
        )

    # Object storage (S3 / MinIO)
    AWS_ACCESS_KEY_ID: str = Field("minioadmin")
    AWS_SECRET_ACCESS_KEY: str = Field("minioadmin")
    S3_BUCKET_NAME: str = Field("hopspot-photos")
    S3_REGION: str = Field("us-east-1")
    S3_ENDPOINT_URL: Optional[str] = Field(None)
    # host[:port] handed out to clients; falls back to the internal endpoint host
    S3_PUBLIC_ENDPOINT: Optional[str] = Field(None)
    S3_PUBLIC_SSL: bool = Field(False)
    S3_ADDRESSING_STYLE: str = Field("path")

    @computed_field
    @property
    def S3_PUBLIC_BASE_URL(self) -> str:
        scheme = "https" if self.S3_PUBLIC_SSL else "http"
        host = self.S3_PUBLIC_ENDPOINT
        if not host and self.S3_ENDPOINT_URL:
            host = urlparse(self.S3_ENDPOINT_URL).netloc
        if not host:
            host = f"s3.{self.S3_REGION}.amazonaws.com"
        return f"{scheme}://{host}"

    # Photos
    PHOTO_PARENT_TYPE: str = Field("benches")
    PHOTO_MAX_PER_PARENT: int = Field(10)
    PHOTO_MAX_FILE_SIZE: int = Field(10 * 1024 * 1024)
    PHOTO_PRESIGNED_URL_EXPIRY: int = Field(3600)

    # Celery / reconciliation
    CELERY_BROKER_URL: str = Field("redis://127.0.0.1:6379/1")
    CELERY_RESULT_BACKEND: str = Field("redis://127.0.0.1:6379/2")
    RECONCILE_INTERVAL_MINUTES: int = Field(60)
    RECONCILE_PENDING_MAX_AGE_MINUTES: int = Field(60)


@lru_cache
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
