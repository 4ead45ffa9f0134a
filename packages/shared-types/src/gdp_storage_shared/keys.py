"""
Object key validation and small key/file helpers.

Allowed key characters: ASCII letters, digits and ! _ . * ' ( ) - /
Maximum key length: 1024 characters.

Validator behaviour: is_valid_key() never raises; validate_key() raises
InvalidArgumentError with the reason. sanitize_key() replaces each disallowed
character with "_" and then truncates, so its output is always valid when
non-empty.
"""

import mimetypes
import re
import time
from pathlib import Path

from .errors import InvalidArgumentError

MAX_KEY_LENGTH = 1024
DEFAULT_CONTENT_TYPE = "application/octet-stream"

_VALID_KEY_RE = re.compile(r"[a-zA-Z0-9!_.*'()\-/]+")
_INVALID_KEY_CHAR_RE = re.compile(r"[^a-zA-Z0-9!_.*'()\-/]")

_SIZE_UNITS = "KMGTPE"

_CONTENT_TYPES = {
    # text / web
    "txt": "text/plain",
    "csv": "text/csv",
    "tsv": "text/tab-separated-values",
    "md": "text/markdown",
    "html": "text/html",
    "htm": "text/html",
    "css": "text/css",
    "js": "application/javascript",
    "json": "application/json",
    "xml": "application/xml",
    "yaml": "application/x-yaml",
    "yml": "application/x-yaml",
    "parquet": "application/vnd.apache.parquet",
    "avro": "application/avro",
    # documents
    "pdf": "application/pdf",
    "doc": "application/msword",
    "docx": "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "xls": "application/vnd.ms-excel",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "ppt": "application/vnd.ms-powerpoint",
    "pptx": "application/vnd.openxmlformats-officedocument.presentationml.presentation",
    # images
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "svg": "image/svg+xml",
    "webp": "image/webp",
    "tif": "image/tiff",
    "tiff": "image/tiff",
    # audio / video
    "mp3": "audio/mpeg",
    "wav": "audio/wav",
    "ogg": "audio/ogg",
    "mp4": "video/mp4",
    "mov": "video/quicktime",
    "webm": "video/webm",
    # archives
    "zip": "application/zip",
    "gz": "application/gzip",
    "tgz": "application/gzip",
    "tar": "application/x-tar",
    "7z": "application/x-7z-compressed",
}


def is_valid_key(key: str | None) -> bool:
    """Return True if key is non-empty, at most 1024 chars, and uses only allowed characters."""
    if not key:
        return False
    if len(key) > MAX_KEY_LENGTH:
        return False
    return _VALID_KEY_RE.fullmatch(key) is not None


def validate_key(key: str | None) -> str:
    """Return key unchanged if valid; otherwise raise InvalidArgumentError explaining why."""
    if not key:
        raise InvalidArgumentError("Object key is required")
    if len(key) > MAX_KEY_LENGTH:
        raise InvalidArgumentError(
            f"Object key exceeds {MAX_KEY_LENGTH} characters (got {len(key)})"
        )
    if _VALID_KEY_RE.fullmatch(key) is None:
        raise InvalidArgumentError(f"Invalid object key format: {key}")
    return key


def sanitize_key(key: str | None) -> str:
    """Replace disallowed characters with '_' and truncate to MAX_KEY_LENGTH."""
    if key is None:
        return ""
    return _INVALID_KEY_CHAR_RE.sub("_", key)[:MAX_KEY_LENGTH]


def generate_unique_key(prefix: str | None, filename: str) -> str:
    """
    Build a collision-resistant key: {prefix}/{epoch_millis}_{filename}.

    Both prefix and filename are sanitized; prefix may be empty.
    """
    timestamp = int(time.time() * 1000)
    safe_name = sanitize_key(filename)
    if prefix:
        return f"{sanitize_key(prefix).rstrip('/')}/{timestamp}_{safe_name}"
    return f"{timestamp}_{safe_name}"


def get_file_extension(filename: str | None) -> str:
    """
    Return the lower-cased extension of the leaf name, without the dot.

    Empty when there is no dot, the name starts with the dot (.bashrc),
    or the dot is the final character.
    """
    if not filename:
        return ""
    leaf = filename.rsplit("/", 1)[-1]
    dot = leaf.rfind(".")
    if 0 < dot < len(leaf) - 1:
        return leaf[dot + 1 :].lower()
    return ""


def content_type_for(filename: str | None) -> str:
    """Map a file name's extension to a MIME type; unknown extensions are octet-stream."""
    return _CONTENT_TYPES.get(get_file_extension(filename), DEFAULT_CONTENT_TYPE)


def probe_content_type(path: str | Path) -> str:
    """Content type for a local file: platform MIME registry first, then the extension table."""
    guessed, _ = mimetypes.guess_type(str(path))
    if guessed:
        return guessed
    return content_type_for(Path(path).name)


def format_file_size(size: int) -> str:
    """Human-readable size with 1024-based units: 512 B, 1.5 KB, 2.0 MB, ..."""
    if size < 1024:
        return f"{size} B"
    value = float(size)
    exp = 0
    while value >= 1024 and exp < len(_SIZE_UNITS):
        value /= 1024
        exp += 1
    return f"{value:.1f} {_SIZE_UNITS[exp - 1]}B"


def is_directory(key: str | None) -> bool:
    """Keys ending with '/' are directory placeholders."""
    return bool(key) and key.endswith("/")


def get_parent_path(key: str | None) -> str:
    """Return the parent prefix including its trailing '/', or '' for top-level keys."""
    if not key:
        return ""
    normalized = key[:-1] if key.endswith("/") else key
    slash = normalized.rfind("/")
    if slash > 0:
        return normalized[: slash + 1]
    return ""


def get_filename(key: str | None) -> str:
    """Return the leaf name of key (a trailing '/' is ignored)."""
    if not key:
        return ""
    normalized = key[:-1] if key.endswith("/") else key
    slash = normalized.rfind("/")
    if 0 <= slash < len(normalized) - 1:
        return normalized[slash + 1 :]
    return normalized
