"""S3 implementation of ObjectStorage, routed per bucket through a StorageClientFactory."""

from __future__ import annotations

import logging
from contextlib import closing, suppress
from pathlib import Path
from typing import Any, BinaryIO

from botocore.exceptions import BotoCoreError, ClientError
from gdp_storage_shared import (
    DEFAULT_CONTENT_TYPE,
    BucketConfig,
    InvalidArgumentError,
    ObjectDescriptor,
    ObjectNotFoundError,
    PresignedUrlGrant,
    PresignOperation,
    StorageClientFactory,
    StorageError,
    probe_content_type,
    validate_key,
)

logger = logging.getLogger(__name__)

# Keys per backend round-trip when listing; pages are combined into one result
LIST_PAGE_SIZE = 1000
DOWNLOAD_CHUNK_SIZE = 1024 * 1024  # 1 MB
# SigV4 presigned URLs are valid for at most 7 days
MAX_PRESIGN_MINUTES = 7 * 24 * 60

_NOT_FOUND_CODES = frozenset({"404", "NoSuchKey", "NotFound"})
_BACKEND_ERRORS = (ClientError, BotoCoreError)


def _is_not_found(error: ClientError) -> bool:
    return str(error.response.get("Error", {}).get("Code", "")) in _NOT_FOUND_CODES


def _strip_etag(etag: str | None) -> str | None:
    return etag.strip('"') if etag else etag


def _require_bucket(bucket: str | None) -> str:
    if bucket is None or not bucket.strip():
        raise InvalidArgumentError("Bucket is required and cannot be empty")
    return bucket.strip()


class S3ObjectStorage:
    """ObjectStorage implementation using one boto3 S3 client per configured bucket."""

    def __init__(self, registry: StorageClientFactory) -> None:
        self._registry = registry

    @property
    def registry(self) -> StorageClientFactory:
        return self._registry

    def close(self) -> None:
        """Release every backend client held by the registry."""
        self._registry.close()

    def list_buckets(self) -> list[str]:
        """Return configured bucket ids (empty list when none are configured)."""
        return self._registry.list_bucket_ids()

    def _bucket(self, bucket: str) -> tuple[str, BucketConfig, Any]:
        bucket = _require_bucket(bucket)
        config = self._registry.get_config(bucket)
        return bucket, config, self._registry.resolve_client(bucket)

    def _target(self, bucket: str, key: str) -> tuple[str, BucketConfig, Any]:
        """Validate bucket and key, then resolve config and client. No network call."""
        bucket = _require_bucket(bucket)
        validate_key(key)
        return self._bucket(bucket)

    # --- upload ---

    def upload(
        self, bucket: str, key: str, body: bytes, content_type: str | None = None
    ) -> str:
        """Upload bytes to bucket/key and return the object URL."""
        return self._put(bucket, key, body, len(body), content_type)

    def upload_stream(
        self,
        bucket: str,
        key: str,
        stream: BinaryIO,
        content_length: int,
        content_type: str | None = None,
    ) -> str:
        """Upload from a readable stream of known length and return the object URL."""
        if content_length < 0:
            raise InvalidArgumentError(f"content_length must be >= 0, got {content_length}")
        return self._put(bucket, key, stream, content_length, content_type)

    def upload_file(
        self, bucket: str, key: str, path: str | Path, content_type: str | None = None
    ) -> str:
        """Upload a local file; content type is probed from the file when not given."""
        path = Path(path)
        bucket, config, client = self._target(bucket, key)
        content_type = content_type or probe_content_type(path)
        try:
            size = path.stat().st_size
            with path.open("rb") as f:
                client.put_object(
                    Bucket=config.bucket_name,
                    Key=key,
                    Body=f,
                    ContentLength=size,
                    ContentType=content_type,
                )
        except (OSError, *_BACKEND_ERRORS) as e:
            raise StorageError("upload", bucket, key, cause=e) from e
        logger.info(
            "bucket=%s key=%s uploaded from file size=%s content_type=%s",
            bucket,
            key,
            size,
            content_type,
        )
        return self._registry.object_url(bucket, key)

    def _put(
        self,
        bucket: str,
        key: str,
        body: bytes | BinaryIO,
        content_length: int,
        content_type: str | None,
    ) -> str:
        bucket, config, client = self._target(bucket, key)
        content_type = content_type or DEFAULT_CONTENT_TYPE
        try:
            client.put_object(
                Bucket=config.bucket_name,
                Key=key,
                Body=body,
                ContentLength=content_length,
                ContentType=content_type,
            )
        except (OSError, *_BACKEND_ERRORS) as e:
            raise StorageError("upload", bucket, key, cause=e) from e
        logger.info(
            "bucket=%s key=%s uploaded size=%s content_type=%s",
            bucket,
            key,
            content_length,
            content_type,
        )
        return self._registry.object_url(bucket, key)

    # --- download ---

    def open_object(self, bucket: str, key: str) -> Any:
        """
        Return the object's streaming body. The caller must close it
        (e.g. with contextlib.closing).

        Raises:
            ObjectNotFoundError: the key does not exist.
            StorageError: any other backend failure.
        """
        bucket, config, client = self._target(bucket, key)
        try:
            resp = client.get_object(Bucket=config.bucket_name, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                raise ObjectNotFoundError(
                    "download",
                    bucket,
                    key,
                    message=f"File not found: {key} in bucket {bucket}",
                    cause=e,
                ) from e
            raise StorageError("download", bucket, key, cause=e) from e
        except BotoCoreError as e:
            raise StorageError("download", bucket, key, cause=e) from e
        return resp["Body"]

    def download(self, bucket: str, key: str) -> bytes:
        """Download object from bucket/key and return its body as bytes."""
        body = self.open_object(bucket, key)
        try:
            with closing(body):
                return body.read()
        except (OSError, BotoCoreError) as e:
            raise StorageError("download", bucket, key, cause=e) from e

    def download_to_path(self, bucket: str, key: str, local_path: str | Path) -> Path:
        """
        Stream object content into local_path.

        The body is closed on every exit path; a partially written file is
        removed when the transfer fails.
        """
        target = Path(local_path)
        body = self.open_object(bucket, key)
        created = False
        try:
            with closing(body), target.open("wb") as f:
                created = True
                for chunk in body.iter_chunks(DOWNLOAD_CHUNK_SIZE):
                    f.write(chunk)
        except (OSError, BotoCoreError) as e:
            if created:
                with suppress(OSError):
                    target.unlink(missing_ok=True)
            raise StorageError(
                "download",
                bucket,
                key,
                message=f"Failed to save {key} from bucket {bucket} to {target}: {e}",
                cause=e,
            ) from e
        logger.info("bucket=%s key=%s downloaded to %s", bucket, key, target)
        return target

    # --- list ---

    def list_objects(self, bucket: str, prefix: str | None = None) -> list[ObjectDescriptor]:
        """
        List objects in listing order, optionally under prefix.

        Pages of LIST_PAGE_SIZE keys are fetched and combined into one list.
        """
        bucket, config, client = self._bucket(bucket)
        kwargs: dict[str, Any] = {
            "Bucket": config.bucket_name,
            "PaginationConfig": {"PageSize": LIST_PAGE_SIZE},
        }
        if prefix:
            kwargs["Prefix"] = prefix
        objects: list[ObjectDescriptor] = []
        try:
            for page in client.get_paginator("list_objects_v2").paginate(**kwargs):
                for item in page.get("Contents", []):
                    objects.append(
                        ObjectDescriptor(
                            key=item["Key"],
                            etag=_strip_etag(item.get("ETag")),
                            size=item.get("Size", 0),
                            last_modified=item.get("LastModified"),
                            storage_class=item.get("StorageClass"),
                            url=self._registry.object_url(bucket, item["Key"]),
                        )
                    )
        except _BACKEND_ERRORS as e:
            raise StorageError("list objects", bucket, cause=e) from e
        return objects

    def list_keys(self, bucket: str, prefix: str | None = None) -> list[str]:
        """List object keys in bucket, optionally under prefix."""
        return [obj.key for obj in self.list_objects(bucket, prefix)]

    # --- existence / metadata ---

    def _head(self, bucket: str, config: BucketConfig, client: Any, key: str) -> dict | None:
        """Return the HEAD response, or None when the object does not exist."""
        try:
            return client.head_object(Bucket=config.bucket_name, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                return None
            raise StorageError("check existence of", bucket, key, cause=e) from e
        except BotoCoreError as e:
            raise StorageError("check existence of", bucket, key, cause=e) from e

    def exists(self, bucket: str, key: str) -> bool:
        """Return True if the object exists, False otherwise."""
        bucket, config, client = self._target(bucket, key)
        return self._head(bucket, config, client, key) is not None

    def get_metadata(self, bucket: str, key: str) -> ObjectDescriptor:
        """Return size, content type, last-modified and user metadata for an object."""
        bucket, config, client = self._target(bucket, key)
        resp = self._head(bucket, config, client, key)
        if resp is None:
            raise ObjectNotFoundError(
                "read metadata of",
                bucket,
                key,
                message=f"File not found: {key} in bucket {bucket}",
            )
        return ObjectDescriptor(
            key=key,
            etag=_strip_etag(resp.get("ETag")),
            size=resp.get("ContentLength", 0),
            last_modified=resp.get("LastModified"),
            storage_class=resp.get("StorageClass"),
            content_type=resp.get("ContentType"),
            metadata=resp.get("Metadata") or {},
            url=self._registry.object_url(bucket, key),
        )

    def get_size(self, bucket: str, key: str) -> int:
        """Return the object's size in bytes."""
        return self.get_metadata(bucket, key).size

    # --- delete / copy ---

    def delete(self, bucket: str, key: str) -> None:
        """Delete bucket/key. A key that is already absent counts as deleted."""
        bucket, config, client = self._target(bucket, key)
        try:
            client.delete_object(Bucket=config.bucket_name, Key=key)
        except ClientError as e:
            if _is_not_found(e):
                logger.info("bucket=%s key=%s already absent", bucket, key)
                return
            raise StorageError("delete", bucket, key, cause=e) from e
        except BotoCoreError as e:
            raise StorageError("delete", bucket, key, cause=e) from e
        logger.info("bucket=%s key=%s deleted", bucket, key)

    def copy(
        self,
        source_bucket: str,
        source_key: str,
        destination_key: str,
        *,
        destination_bucket: str | None = None,
    ) -> None:
        """
        Copy source_bucket/source_key to destination_bucket/destination_key.

        destination_bucket defaults to source_bucket. The request is issued by
        the source bucket's client.
        """
        if destination_bucket is None:
            destination_bucket = source_bucket
        destination_bucket = _require_bucket(destination_bucket)
        validate_key(destination_key)
        source_bucket, source_config, client = self._target(source_bucket, source_key)
        destination_config = self._registry.get_config(destination_bucket)
        coordinates = (
            f"{source_bucket}/{source_key} to {destination_bucket}/{destination_key}"
        )
        try:
            client.copy_object(
                Bucket=destination_config.bucket_name,
                Key=destination_key,
                CopySource={"Bucket": source_config.bucket_name, "Key": source_key},
            )
        except ClientError as e:
            error_cls = ObjectNotFoundError if _is_not_found(e) else StorageError
            raise error_cls(
                "copy",
                source_bucket,
                source_key,
                message=f"Failed to copy {coordinates}: {e}",
                cause=e,
            ) from e
        except BotoCoreError as e:
            raise StorageError(
                "copy",
                source_bucket,
                source_key,
                message=f"Failed to copy {coordinates}: {e}",
                cause=e,
            ) from e
        logger.info("copied %s", coordinates)

    # --- presigned URLs ---

    @staticmethod
    def _expiry_minutes(config: BucketConfig, expires_in_minutes: int | None) -> int:
        minutes = (
            config.signed_url_duration_minutes
            if expires_in_minutes is None
            else expires_in_minutes
        )
        if not 1 <= minutes <= MAX_PRESIGN_MINUTES:
            raise InvalidArgumentError(
                f"expires_in_minutes must be between 1 and {MAX_PRESIGN_MINUTES}, got {minutes}"
            )
        return minutes

    def presign_download(
        self, bucket: str, key: str, *, expires_in_minutes: int | None = None
    ) -> PresignedUrlGrant:
        """
        Return a presigned GET grant for bucket/key.

        The object must exist: ObjectNotFoundError is raised before any URL is
        signed when it does not.
        """
        bucket, config, client = self._target(bucket, key)
        minutes = self._expiry_minutes(config, expires_in_minutes)
        if self._head(bucket, config, client, key) is None:
            raise ObjectNotFoundError(
                "generate download URL for",
                bucket,
                key,
                message=f"File does not exist: {key} in bucket {bucket}",
            )
        try:
            url = client.generate_presigned_url(
                "get_object",
                Params={"Bucket": config.bucket_name, "Key": key},
                ExpiresIn=minutes * 60,
            )
        except _BACKEND_ERRORS as e:
            raise StorageError("generate download URL for", bucket, key, cause=e) from e
        logger.info(
            "bucket=%s key=%s presigned download expires_in_minutes=%s", bucket, key, minutes
        )
        return PresignedUrlGrant(
            url=url,
            operation=PresignOperation.DOWNLOAD,
            key=key,
            bucket_id=config.bucket_id,
            expires_in_minutes=minutes,
        )

    def presign_upload(
        self,
        bucket: str,
        key: str,
        *,
        content_type: str | None = None,
        expires_in_minutes: int | None = None,
    ) -> PresignedUrlGrant:
        """Return a presigned PUT grant for bucket/key bound to content_type."""
        bucket, config, client = self._target(bucket, key)
        minutes = self._expiry_minutes(config, expires_in_minutes)
        content_type = content_type or DEFAULT_CONTENT_TYPE
        try:
            url = client.generate_presigned_url(
                "put_object",
                Params={
                    "Bucket": config.bucket_name,
                    "Key": key,
                    "ContentType": content_type,
                },
                ExpiresIn=minutes * 60,
            )
        except _BACKEND_ERRORS as e:
            raise StorageError("generate upload URL for", bucket, key, cause=e) from e
        logger.info(
            "bucket=%s key=%s presigned upload content_type=%s expires_in_minutes=%s",
            bucket,
            key,
            content_type,
            minutes,
        )
        return PresignedUrlGrant(
            url=url,
            operation=PresignOperation.UPLOAD,
            key=key,
            bucket_id=config.bucket_id,
            content_type=content_type,
            expires_in_minutes=minutes,
        )
