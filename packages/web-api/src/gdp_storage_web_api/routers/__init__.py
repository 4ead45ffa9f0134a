"""API routers for web-api (bucket listing, presigned URLs)."""

from .buckets import router as buckets_router
from .presign import router as presign_router

__all__ = ["buckets_router", "presign_router"]
