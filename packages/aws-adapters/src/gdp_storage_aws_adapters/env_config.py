"""
Build storage adapter instances from environment variables.

Bucket configuration is read once at startup by StorageSettings (pydantic-settings,
prefix S3_, nested delimiter __):

- S3_BUCKETS: JSON object {bucket_id: {bucket_name, endpoint_url, region, ...}}
  or nested variables, e.g. S3_BUCKETS__REPORTS__BUCKET_NAME=reports-prod
- S3_ACCESS_KEY / S3_SECRET_KEY: default credentials for buckets without their own

Example (AWS bucket plus an on-premise S3-compatible appliance):

    S3_BUCKETS='{"default": {"bucket_name": "gdp"},
                 "archive": {"bucket_name": "archive",
                             "endpoint_url": "https://isilon.example.com:9021"}}'
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from gdp_storage_shared import BucketConfig

from .bucket_registry import BucketRegistry
from .s3_storage import S3ObjectStorage


class StorageSettings(BaseSettings):
    """All environment variables used to configure buckets."""

    model_config = SettingsConfigDict(
        env_prefix="S3_",
        env_nested_delimiter="__",
        env_file=None,  # .env is loaded by the app's bootstrap_env()
        extra="ignore",
    )

    buckets: dict[str, BucketConfig] = Field(default_factory=dict)
    access_key: str | None = Field(None, repr=False)
    secret_key: str | None = Field(None, repr=False)


def get_storage_settings() -> StorageSettings:
    """Return validated storage settings from the current environment."""
    return StorageSettings()


def bucket_registry_from_env(settings: StorageSettings | None = None) -> BucketRegistry:
    """Build BucketRegistry from S3_BUCKETS and the default S3_ACCESS_KEY/S3_SECRET_KEY."""
    settings = settings or get_storage_settings()
    return BucketRegistry(
        settings.buckets,
        default_access_key=settings.access_key,
        default_secret_key=settings.secret_key,
    )


def object_storage_from_env(settings: StorageSettings | None = None) -> S3ObjectStorage:
    """Build S3ObjectStorage over a registry configured from the environment."""
    return S3ObjectStorage(bucket_registry_from_env(settings))
