"""Pydantic models for bucket configuration, resolved paths, object listings and presign grants."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_REGION = "us-east-1"


class BucketConfig(BaseModel):
    """One configured storage backend (AWS S3 or an S3-compatible endpoint such as Isilon)."""

    model_config = ConfigDict(frozen=True)

    bucket_id: str = Field(
        "", description="Configuration key; filled from the bucket map key when loaded"
    )
    bucket_name: str = Field(..., min_length=1, description="Backend-visible bucket name")
    endpoint_url: str | None = Field(
        None, description="S3-compatible endpoint; None uses AWS endpoint resolution"
    )
    region: str = Field(DEFAULT_REGION, min_length=1)
    access_key: str | None = Field(None, repr=False)
    secret_key: str | None = Field(None, repr=False)
    path_style_access: bool = Field(
        True, description="endpoint/bucket/key instead of bucket.endpoint/key"
    )
    # SigV4 presigned URLs are valid for at most 7 days
    signed_url_duration_minutes: int = Field(60, ge=1, le=7 * 24 * 60)
    connection_timeout_ms: int = Field(30000, ge=1)
    socket_timeout_ms: int = Field(30000, ge=1)
    max_retry_attempts: int = Field(3, ge=0)

    @property
    def has_credentials(self) -> bool:
        return bool(self.access_key) and bool(self.secret_key)


class ResolvedPath(BaseModel):
    """Canonical (bucket, key) pair produced by the path parser."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str
    was_full_path: bool = False


class ObjectDescriptor(BaseModel):
    """A stored object as returned by list and metadata operations."""

    model_config = ConfigDict(frozen=True)

    key: str
    etag: str | None = None
    size: int = Field(0, ge=0, description="Size in bytes")
    last_modified: datetime | None = None
    storage_class: str | None = None
    content_type: str | None = None
    metadata: dict[str, str] = Field(default_factory=dict)
    url: str | None = Field(None, description="Canonical object URL")


class PresignOperation(str, Enum):
    """Operation a presigned URL grants."""

    UPLOAD = "upload"
    DOWNLOAD = "download"


class PresignedUrlGrant(BaseModel):
    """Result of a presign call. Expiry and scope live in the signature itself."""

    model_config = ConfigDict(frozen=True)

    url: str
    operation: PresignOperation
    key: str
    bucket_id: str
    content_type: str | None = Field(None, description="Set for upload grants only")
    expires_in_minutes: int = Field(..., ge=1)
