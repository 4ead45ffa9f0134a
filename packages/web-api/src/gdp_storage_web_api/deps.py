"""Dependencies and app state for FastAPI routes."""

from fastapi import Request
from gdp_storage_shared import ObjectStorage


def get_object_storage(request: Request) -> ObjectStorage:
    """Return ObjectStorage from app state or build from env (cached on app state)."""
    storage = getattr(request.app.state, "object_storage", None)
    if storage is not None:
        return storage
    from gdp_storage_aws_adapters.env_config import object_storage_from_env

    storage = object_storage_from_env()
    request.app.state.object_storage = storage
    return storage
