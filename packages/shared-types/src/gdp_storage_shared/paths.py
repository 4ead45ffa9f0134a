"""
Object path parsing: one place for s3://, s3a:// and HTTPS S3 URL handling.

Accepted shapes, tried in this order:
    s3a://{bucket}/{key} or s3://{bucket}/{key}
    https://[{host-bucket}.]s3[...].amazonaws.com/{bucket}/{key}
    {key} with an explicit bucket
    {key} alone, paired with the default bucket identifier

For HTTPS URLs the bucket is taken from the path, not the host. A full path
always wins over an explicitly supplied bucket.

Parser behaviour: blank input raises InvalidArgumentError. No I/O, no state.
"""

import re

from .errors import InvalidArgumentError
from .models import ResolvedPath

DEFAULT_BUCKET_ID = "default"
S3A_SCHEME = "s3a"

_S3_URI_RE = re.compile(r"^s3a?://([^/]+)/(.*)$", re.DOTALL)
_S3_HTTPS_RE = re.compile(r"^https?://([^/]+\.)?s3[^/]*\.amazonaws\.com/([^/]+)/(.*)$", re.DOTALL)


def _match_full_path(path: str) -> tuple[str, str] | None:
    match = _S3_URI_RE.match(path)
    if match:
        return match.group(1), match.group(2)
    match = _S3_HTTPS_RE.match(path)
    if match:
        return match.group(2), match.group(3)
    return None


def _default_bucket_or_fallback(default_bucket: str | None) -> str:
    if default_bucket and default_bucket.strip():
        return default_bucket.strip()
    return DEFAULT_BUCKET_ID


def is_full_path(candidate: str | None) -> bool:
    """Return True if candidate is an s3://, s3a:// or HTTPS S3 URL. Never raises."""
    if not candidate or not candidate.strip():
        return False
    return _match_full_path(candidate.strip()) is not None


def parse_path(path: str | None, default_bucket: str | None = DEFAULT_BUCKET_ID) -> ResolvedPath:
    """
    Parse a path in any supported shape into a ResolvedPath.

    Args:
        path: s3a://bucket/key, s3://bucket/key, an HTTPS S3 URL, or a bare key.
        default_bucket: Bucket identifier paired with a bare key.

    Returns:
        ResolvedPath; was_full_path is True when bucket came from the path.

    Raises:
        InvalidArgumentError: path is None/blank, or a full path has no key.
    """
    if path is None or not path.strip():
        raise InvalidArgumentError("Path cannot be null or empty")
    trimmed = path.strip()
    full = _match_full_path(trimmed)
    if full is not None:
        bucket, key = full
        if not key:
            raise InvalidArgumentError(f"Path has no object key: {trimmed}")
        return ResolvedPath(bucket=bucket, key=key, was_full_path=True)
    return ResolvedPath(
        bucket=_default_bucket_or_fallback(default_bucket),
        key=trimmed,
        was_full_path=False,
    )


def parse_bucket_and_key(
    bucket: str | None,
    key: str | None,
    default_bucket: str | None = DEFAULT_BUCKET_ID,
) -> ResolvedPath:
    """
    Resolve an explicit bucket and key. If key is itself a full path, the
    bucket embedded in it takes precedence over the bucket argument.

    Raises:
        InvalidArgumentError: key is None/blank.
    """
    if key is None or not key.strip():
        raise InvalidArgumentError("Key cannot be null or empty")
    if is_full_path(key):
        return parse_path(key, default_bucket)
    if bucket is not None and bucket.strip():
        return ResolvedPath(bucket=bucket.strip(), key=key.strip(), was_full_path=False)
    return ResolvedPath(
        bucket=_default_bucket_or_fallback(default_bucket),
        key=key.strip(),
        was_full_path=False,
    )


def to_s3_uri(bucket: str | None, key: str | None) -> str:
    """Build s3a://{bucket}/{key}. Raises InvalidArgumentError on blank parts."""
    if bucket is None or not bucket.strip():
        raise InvalidArgumentError("Bucket name cannot be null or empty")
    if key is None or not key.strip():
        raise InvalidArgumentError("Key cannot be null or empty")
    bucket = bucket.strip()
    if "/" in bucket:
        raise InvalidArgumentError(f"Bucket name cannot contain '/': {bucket}")
    return f"{S3A_SCHEME}://{bucket}/{key.strip()}"
