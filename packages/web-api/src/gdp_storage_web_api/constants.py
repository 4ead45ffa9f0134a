"""Shared constants for web-api (route prefix, presign limits)."""

# All storage routes live under this prefix
API_PREFIX = "/api/s3"

# SigV4 presigned URLs are valid for at most 7 days
MAX_PRESIGN_EXPIRY_MINUTES = 7 * 24 * 60

# Returned with 400 when neither key nor path is supplied
KEY_REQUIRED_MESSAGE = "S3 object key is required"
