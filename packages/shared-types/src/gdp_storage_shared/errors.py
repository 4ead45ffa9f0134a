"""
Error taxonomy for the object-storage layer.

InvalidArgumentError: malformed or blank key, path or bucket identifier.
    Raised before any backend call.
ConfigurationError: no matching bucket configuration or missing credentials.
    Indicates a deployment defect; never retried.
StorageError: any backend failure. Carries operation, bucket and key and
    chains the underlying cause.
ObjectNotFoundError: StorageError for operations that require the object
    to exist (download, metadata, presigned download).
"""

from __future__ import annotations


class InvalidArgumentError(ValueError):
    """Blank or malformed key, path or bucket identifier."""


class ConfigurationError(Exception):
    """Bucket configuration is missing or incomplete."""


class UnknownBucketError(ConfigurationError):
    """No bucket is configured under the given identifier or name."""

    def __init__(self, bucket: str) -> None:
        super().__init__(f"No configuration found for bucket: {bucket}")
        self.bucket = bucket


class StorageError(Exception):
    """A storage operation failed. The original exception is chained as __cause__."""

    def __init__(
        self,
        operation: str,
        bucket: str,
        key: str | None = None,
        *,
        message: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        if message is None:
            if key:
                message = f"Failed to {operation} {key} in bucket {bucket}"
            else:
                message = f"Failed to {operation} in bucket {bucket}"
            if cause is not None:
                message = f"{message}: {cause}"
        super().__init__(message)
        self.operation = operation
        self.bucket = bucket
        self.key = key
        if cause is not None:
            self.__cause__ = cause

    @property
    def message(self) -> str:
        return str(self)


class ObjectNotFoundError(StorageError):
    """The object does not exist in the bucket."""
