"""Bucket listing route."""

from fastapi import APIRouter, Depends
from gdp_storage_shared import ObjectStorage

from ..constants import API_PREFIX
from ..deps import get_object_storage

router = APIRouter(prefix=API_PREFIX, tags=["s3"])


@router.get("/buckets", response_model=list[str])
def list_buckets(object_storage: ObjectStorage = Depends(get_object_storage)) -> list[str]:
    """Return configured bucket identifiers (empty list when none are configured)."""
    return object_storage.list_buckets()
