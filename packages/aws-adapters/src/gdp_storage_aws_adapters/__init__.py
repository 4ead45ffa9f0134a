"""boto3 implementations of the gdp-storage interfaces."""

from .bucket_registry import BucketRegistry, build_s3_client
from .env_config import (
    StorageSettings,
    bucket_registry_from_env,
    object_storage_from_env,
)
from .s3_storage import S3ObjectStorage

__all__ = [
    "BucketRegistry",
    "S3ObjectStorage",
    "StorageSettings",
    "bucket_registry_from_env",
    "build_s3_client",
    "object_storage_from_env",
]
