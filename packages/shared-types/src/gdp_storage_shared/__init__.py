"""Shared types and conventions for the gdp-storage object-storage layer."""

from .errors import (
    ConfigurationError,
    InvalidArgumentError,
    ObjectNotFoundError,
    StorageError,
    UnknownBucketError,
)
from .interfaces import ObjectStorage, StorageClientFactory
from .keys import (
    DEFAULT_CONTENT_TYPE,
    MAX_KEY_LENGTH,
    content_type_for,
    format_file_size,
    generate_unique_key,
    get_file_extension,
    get_filename,
    get_parent_path,
    is_directory,
    is_valid_key,
    probe_content_type,
    sanitize_key,
    validate_key,
)
from .models import (
    BucketConfig,
    ObjectDescriptor,
    PresignedUrlGrant,
    PresignOperation,
    ResolvedPath,
)
from .paths import (
    DEFAULT_BUCKET_ID,
    is_full_path,
    parse_bucket_and_key,
    parse_path,
    to_s3_uri,
)

__version__ = "0.1.0"
__all__ = [
    "DEFAULT_BUCKET_ID",
    "DEFAULT_CONTENT_TYPE",
    "MAX_KEY_LENGTH",
    "BucketConfig",
    "ConfigurationError",
    "InvalidArgumentError",
    "ObjectDescriptor",
    "ObjectNotFoundError",
    "ObjectStorage",
    "PresignOperation",
    "PresignedUrlGrant",
    "ResolvedPath",
    "StorageClientFactory",
    "StorageError",
    "UnknownBucketError",
    "content_type_for",
    "format_file_size",
    "generate_unique_key",
    "get_file_extension",
    "get_filename",
    "get_parent_path",
    "is_directory",
    "is_full_path",
    "is_valid_key",
    "parse_bucket_and_key",
    "parse_path",
    "probe_content_type",
    "sanitize_key",
    "to_s3_uri",
    "validate_key",
]
