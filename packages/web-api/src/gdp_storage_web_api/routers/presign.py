"""Presigned download and upload URL routes."""

import logging

from fastapi import APIRouter, Depends, Query
from gdp_storage_shared import (
    InvalidArgumentError,
    ObjectStorage,
    PresignedUrlGrant,
    ResolvedPath,
    content_type_for,
    is_full_path,
    parse_bucket_and_key,
    parse_path,
)
from pydantic import BaseModel, Field

from ..constants import API_PREFIX, KEY_REQUIRED_MESSAGE, MAX_PRESIGN_EXPIRY_MINUTES
from ..deps import get_object_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{API_PREFIX}/presigned-url", tags=["s3"])


class UploadUrlRequest(BaseModel):
    """Request body for POST /api/s3/presigned-url/upload."""

    key: str | None = Field(None, description="Object key, or a full s3a://, s3:// or HTTPS path")
    path: str | None = Field(None, description="Alias for key")
    content_type: str | None = Field(
        None, description="Content type the upload is bound to; inferred from the key when absent"
    )
    bucket: str | None = Field(None, description="Bucket id or name; ignored for full paths")
    expires_in_minutes: int | None = Field(None, ge=1, le=MAX_PRESIGN_EXPIRY_MINUTES)


def resolve_target(key: str | None, path: str | None, bucket: str | None) -> ResolvedPath:
    """
    Resolve request parameters to (bucket, key).

    key wins over path. A full path carries its own bucket; otherwise bucket is required.
    """
    candidate = key if key and key.strip() else path
    if candidate is None or not candidate.strip():
        raise InvalidArgumentError(KEY_REQUIRED_MESSAGE)
    if is_full_path(candidate):
        return parse_path(candidate)
    if bucket is None or not bucket.strip():
        raise InvalidArgumentError(
            "Bucket is required unless the key is a full s3://, s3a:// or HTTPS path"
        )
    return parse_bucket_and_key(bucket, candidate)


@router.get(
    "/download",
    response_model=PresignedUrlGrant,
    response_model_exclude_none=True,
)
def presigned_download_url(
    key: str | None = None,
    path: str | None = None,
    bucket: str | None = None,
    expires_in_minutes: int | None = Query(None, ge=1, le=MAX_PRESIGN_EXPIRY_MINUTES),
    object_storage: ObjectStorage = Depends(get_object_storage),
) -> PresignedUrlGrant:
    """Return a presigned GET URL for an existing object."""
    target = resolve_target(key, path, bucket)
    grant = object_storage.presign_download(
        target.bucket, target.key, expires_in_minutes=expires_in_minutes
    )
    logger.info(
        "bucket=%s key=%s download URL issued full_path=%s",
        grant.bucket_id,
        grant.key,
        target.was_full_path,
    )
    return grant


@router.post(
    "/upload",
    response_model=PresignedUrlGrant,
    response_model_exclude_none=True,
)
def presigned_upload_url(
    body: UploadUrlRequest,
    object_storage: ObjectStorage = Depends(get_object_storage),
) -> PresignedUrlGrant:
    """Return a presigned PUT URL bound to the request's (or inferred) content type."""
    target = resolve_target(body.key, body.path, body.bucket)
    content_type = body.content_type or content_type_for(target.key)
    grant = object_storage.presign_upload(
        target.bucket,
        target.key,
        content_type=content_type,
        expires_in_minutes=body.expires_in_minutes,
    )
    logger.info(
        "bucket=%s key=%s upload URL issued content_type=%s",
        grant.bucket_id,
        grant.key,
        content_type,
    )
    return grant
