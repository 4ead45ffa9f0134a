"""FastAPI app: bucket listing and presigned URLs over the multi-bucket storage layer."""

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from gdp_storage_shared import (
    ConfigurationError,
    InvalidArgumentError,
    ObjectNotFoundError,
    StorageError,
    UnknownBucketError,
)
from gdp_storage_shared.logging_config import configure_logging

from .config import bootstrap_env, get_settings
from .routers import buckets_router, presign_router

# Load .env from GDP_STORAGE_ENV_FILE if set (local development). Unset in deployed envs.
bootstrap_env()
configure_logging(get_settings().log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build storage from env unless already on app state; close its clients on shutdown."""
    storage = getattr(app.state, "object_storage", None)
    if storage is None:
        from gdp_storage_aws_adapters.env_config import object_storage_from_env

        storage = object_storage_from_env()
        app.state.object_storage = storage
    logger.info("buckets=%s storage ready", storage.list_buckets())
    try:
        yield
    finally:
        storage.close()
        logger.info("storage clients closed")


app = FastAPI(title="GDP Storage API", version="0.1.0", lifespan=lifespan)


def error_response(status_code: int, message: str) -> JSONResponse:
    """Uniform error body: {"error": message, "timestamp": epoch millis}."""
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "timestamp": int(time.time() * 1000)},
    )


@app.exception_handler(InvalidArgumentError)
async def invalid_argument_handler(request: Request, exc: InvalidArgumentError) -> JSONResponse:
    return error_response(400, str(exc))


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    if not errors:
        return error_response(400, "Invalid request")
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part not in ("body", "query"))
    message = first.get("msg", "Invalid request")
    return error_response(400, f"{field}: {message}" if field else message)


@app.exception_handler(UnknownBucketError)
async def unknown_bucket_handler(request: Request, exc: UnknownBucketError) -> JSONResponse:
    return error_response(400, str(exc))


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error("path=%s configuration error: %s", request.url.path, exc)
    return error_response(500, str(exc))


@app.exception_handler(ObjectNotFoundError)
async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    """Missing objects map to 404 rather than the generic 500 used for other storage failures."""
    logger.info("bucket=%s key=%s not found", exc.bucket, exc.key)
    return error_response(404, str(exc))


@app.exception_handler(StorageError)
async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    logger.warning(
        "bucket=%s key=%s operation=%s failed: %s", exc.bucket, exc.key, exc.operation, exc
    )
    return error_response(500, str(exc))


app.include_router(buckets_router)
app.include_router(presign_router)
