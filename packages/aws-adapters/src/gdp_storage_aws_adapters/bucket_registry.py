"""
Bucket registry: one BucketConfig per bucket id and one shared S3 client per bucket.

Clients are built lazily on first use and cached by bucket id. Buckets can be
addressed by their configuration id or by their backend bucket name.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

import boto3
from botocore.config import Config
from gdp_storage_shared import BucketConfig, ConfigurationError, UnknownBucketError
from gdp_storage_shared.paths import DEFAULT_BUCKET_ID

logger = logging.getLogger(__name__)

AWS_URL_TEMPLATE = "https://s3.{region}.amazonaws.com/{bucket}/{key}"

ClientBuilder = Callable[[BucketConfig, str, str], Any]


def build_s3_client(config: BucketConfig, access_key: str, secret_key: str) -> Any:
    """
    Build a boto3 S3 client for one bucket.

    Each client gets its own Session; the boto3 default session is not thread-safe.
    """
    session = boto3.session.Session(
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        region_name=config.region,
    )
    client_config = Config(
        signature_version="s3v4",
        s3={"addressing_style": "path" if config.path_style_access else "virtual"},
        connect_timeout=config.connection_timeout_ms / 1000,
        read_timeout=config.socket_timeout_ms / 1000,
        retries={"max_attempts": config.max_retry_attempts, "mode": "standard"},
    )
    return session.client(
        "s3",
        endpoint_url=config.endpoint_url or None,
        config=client_config,
    )


class BucketRegistry:
    """StorageClientFactory backed by a lock-guarded client cache."""

    def __init__(
        self,
        buckets: Mapping[str, BucketConfig],
        *,
        default_access_key: str | None = None,
        default_secret_key: str | None = None,
        client_builder: ClientBuilder = build_s3_client,
    ) -> None:
        configs: dict[str, BucketConfig] = {}
        name_to_id: dict[str, str] = {}
        for bucket_id, config in buckets.items():
            if not bucket_id or not bucket_id.strip():
                raise ConfigurationError("Bucket id cannot be empty")
            if config.bucket_id != bucket_id:
                config = config.model_copy(update={"bucket_id": bucket_id})
            if config.bucket_name in name_to_id:
                raise ConfigurationError(
                    f"Bucket name {config.bucket_name!r} is configured twice "
                    f"(ids {name_to_id[config.bucket_name]!r} and {bucket_id!r})"
                )
            configs[bucket_id] = config
            name_to_id[config.bucket_name] = bucket_id
        self._configs = configs
        self._name_to_id = name_to_id
        self._default_access_key = default_access_key or None
        self._default_secret_key = default_secret_key or None
        self._client_builder = client_builder
        self._clients: dict[str, Any] = {}
        self._lock = threading.Lock()

    def __enter__(self) -> BucketRegistry:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def get_config(self, bucket: str) -> BucketConfig:
        """Look up by bucket id first, then by backend bucket name."""
        if bucket is None or not bucket.strip():
            raise ConfigurationError("Bucket is required and cannot be empty")
        bucket = bucket.strip()
        config = self._configs.get(bucket)
        if config is not None:
            return config
        bucket_id = self._name_to_id.get(bucket)
        if bucket_id is not None:
            return self._configs[bucket_id]
        raise UnknownBucketError(bucket)

    def resolve_client(self, bucket: str) -> Any:
        """Return the cached client for bucket, building it on first use."""
        config = self.get_config(bucket)
        client = self._clients.get(config.bucket_id)
        if client is not None:
            return client
        with self._lock:
            client = self._clients.get(config.bucket_id)
            if client is None:
                access_key, secret_key = self._credentials_for(config)
                client = self._client_builder(config, access_key, secret_key)
                self._clients[config.bucket_id] = client
                logger.info(
                    "bucket_id=%s bucket=%s client created endpoint=%s path_style=%s",
                    config.bucket_id,
                    config.bucket_name,
                    config.endpoint_url or "aws",
                    config.path_style_access,
                )
        return client

    def _credentials_for(self, config: BucketConfig) -> tuple[str, str]:
        if config.has_credentials:
            return config.access_key, config.secret_key
        if self._default_access_key and self._default_secret_key:
            return self._default_access_key, self._default_secret_key
        raise ConfigurationError(
            f"No valid credentials found for bucket: {config.bucket_id}"
        )

    def list_bucket_ids(self) -> list[str]:
        """Configured bucket ids in configuration order."""
        return list(self._configs)

    def list_bucket_names(self) -> list[str]:
        """Backend bucket names in configuration order."""
        return [config.bucket_name for config in self._configs.values()]

    def resolve_bucket_name(self, bucket_id: str) -> str:
        """
        Return the backend bucket name for a bucket id.

        Unknown ids fall back to the 'default' entry when one is configured;
        otherwise UnknownBucketError is raised.
        """
        config = self._configs.get((bucket_id or "").strip())
        if config is None:
            config = self._fallback_config(bucket_id)
        return config.bucket_name

    def resolve_bucket_id(self, bucket_name: str) -> str:
        """Return the bucket id for a backend bucket name. Same fallback as resolve_bucket_name."""
        bucket_id = self._name_to_id.get((bucket_name or "").strip())
        if bucket_id is None:
            bucket_id = self._fallback_config(bucket_name).bucket_id
        return bucket_id

    def _fallback_config(self, requested: str) -> BucketConfig:
        config = self._configs.get(DEFAULT_BUCKET_ID)
        if config is None:
            raise UnknownBucketError(requested)
        logger.debug("bucket=%s not configured, using %s", requested, DEFAULT_BUCKET_ID)
        return config

    def object_url(self, bucket: str, key: str) -> str:
        """Canonical object URL: {endpoint}/{bucket_name}/{key}, or the AWS regional URL."""
        config = self.get_config(bucket)
        if config.endpoint_url:
            return f"{config.endpoint_url.rstrip('/')}/{config.bucket_name}/{key}"
        return AWS_URL_TEMPLATE.format(
            region=config.region, bucket=config.bucket_name, key=key
        )

    def close(self) -> None:
        """Close every cached client (releases pooled connections)."""
        with self._lock:
            clients = list(self._clients.items())
            self._clients.clear()
        for bucket_id, client in clients:
            close = getattr(client, "close", None)
            if close is None:
                continue
            try:
                close()
            except Exception as e:
                logger.warning("bucket_id=%s client close failed: %s", bucket_id, e)
