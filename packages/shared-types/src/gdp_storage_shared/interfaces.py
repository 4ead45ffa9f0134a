"""
Backend-agnostic interfaces for the object-storage layer.

Implementations (e.g. boto3 against AWS S3 or an S3a-compatible appliance)
live in separate packages (e.g. aws-adapters). HTTP adapters depend on these
interfaces and receive the implementation through app state.
"""

from pathlib import Path
from typing import Any, BinaryIO, Protocol, runtime_checkable

from .models import BucketConfig, ObjectDescriptor, PresignedUrlGrant


@runtime_checkable
class StorageClientFactory(Protocol):
    """Owns bucket configuration and one shared backend client per bucket."""

    def get_config(self, bucket: str) -> BucketConfig:
        """Return the configuration for a bucket id or backend bucket name."""
        ...

    def resolve_client(self, bucket: str) -> Any:
        """Return the (cached) backend client for a bucket id or backend bucket name."""
        ...

    def object_url(self, bucket: str, key: str) -> str:
        """Return the canonical URL for an object."""
        ...

    def list_bucket_ids(self) -> list[str]:
        """Return every configured bucket identifier; empty list when none."""
        ...

    def close(self) -> None:
        """Release every cached client."""
        ...


@runtime_checkable
class ObjectStorage(Protocol):
    """Bucket-qualified object operations and presigned URLs."""

    def list_buckets(self) -> list[str]:
        """Return configured bucket identifiers."""
        ...

    def close(self) -> None:
        """Release backend clients and pooled connections."""
        ...

    def upload(
        self, bucket: str, key: str, body: bytes, content_type: str | None = None
    ) -> str:
        """Upload bytes; return the canonical object URL."""
        ...

    def upload_file(
        self, bucket: str, key: str, path: str | Path, content_type: str | None = None
    ) -> str:
        """Upload a local file; return the canonical object URL."""
        ...

    def upload_stream(
        self,
        bucket: str,
        key: str,
        stream: BinaryIO,
        content_length: int,
        content_type: str | None = None,
    ) -> str:
        """Upload from a readable stream of known length; return the object URL."""
        ...

    def download(self, bucket: str, key: str) -> bytes:
        """Return the object's content."""
        ...

    def download_to_path(self, bucket: str, key: str, local_path: str | Path) -> Path:
        """Write the object's content to local_path."""
        ...

    def list_objects(self, bucket: str, prefix: str | None = None) -> list[ObjectDescriptor]:
        """List objects (optionally under prefix) in backend order."""
        ...

    def list_keys(self, bucket: str, prefix: str | None = None) -> list[str]:
        """List object keys (optionally under prefix)."""
        ...

    def exists(self, bucket: str, key: str) -> bool:
        """Return True if the object exists, False otherwise."""
        ...

    def delete(self, bucket: str, key: str) -> None:
        """Delete the object; deleting a missing object is not an error."""
        ...

    def get_metadata(self, bucket: str, key: str) -> ObjectDescriptor:
        """Return size, content type, last-modified and user metadata."""
        ...

    def copy(
        self,
        source_bucket: str,
        source_key: str,
        destination_key: str,
        *,
        destination_bucket: str | None = None,
    ) -> None:
        """Copy an object within one bucket (default) or across buckets."""
        ...

    def presign_download(
        self, bucket: str, key: str, *, expires_in_minutes: int | None = None
    ) -> PresignedUrlGrant:
        """Return a GET grant for an existing object."""
        ...

    def presign_upload(
        self,
        bucket: str,
        key: str,
        *,
        content_type: str | None = None,
        expires_in_minutes: int | None = None,
    ) -> PresignedUrlGrant:
        """Return a PUT grant bound to content_type."""
        ...
