"""Pytest fixtures: app with an in-memory ObjectStorage on app.state."""

import pytest
from fastapi.testclient import TestClient
from gdp_storage_shared import (
    DEFAULT_CONTENT_TYPE,
    ObjectNotFoundError,
    PresignedUrlGrant,
    PresignOperation,
    UnknownBucketError,
    validate_key,
)

from gdp_storage_web_api.main import app


@pytest.fixture
def client(app_with_mocks: None) -> TestClient:
    """TestClient for the app (requires app_with_mocks to set app.state)."""
    return TestClient(app)


class MockObjectStorage:
    """ObjectStorage for tests: in-memory objects, fixed bucket ids, records presign calls."""

    def __init__(self) -> None:
        self.buckets: dict[str, str] = {"default": "gdp", "reports": "reports-prod"}
        self.objects: set[tuple[str, str]] = set()
        self.calls: list[tuple] = []
        self.fail_with: Exception | None = None
        self.closed = False

    def _bucket_id(self, bucket: str) -> str:
        if bucket in self.buckets:
            return bucket
        for bucket_id, name in self.buckets.items():
            if name == bucket:
                return bucket_id
        raise UnknownBucketError(bucket)

    def list_buckets(self) -> list[str]:
        return list(self.buckets)

    def close(self) -> None:
        self.closed = True

    def presign_download(
        self, bucket: str, key: str, *, expires_in_minutes: int | None = None
    ) -> PresignedUrlGrant:
        self.calls.append(("download", bucket, key, expires_in_minutes))
        validate_key(key)
        bucket_id = self._bucket_id(bucket)
        if self.fail_with is not None:
            raise self.fail_with
        if (bucket_id, key) not in self.objects:
            raise ObjectNotFoundError(
                "generate download URL for",
                bucket,
                key,
                message=f"File does not exist: {key} in bucket {bucket}",
            )
        minutes = expires_in_minutes or 60
        return PresignedUrlGrant(
            url=f"https://s3.amazonaws.com/{self.buckets[bucket_id]}/{key}?expires={minutes * 60}",
            operation=PresignOperation.DOWNLOAD,
            key=key,
            bucket_id=bucket_id,
            expires_in_minutes=minutes,
        )

    def presign_upload(
        self,
        bucket: str,
        key: str,
        *,
        content_type: str | None = None,
        expires_in_minutes: int | None = None,
    ) -> PresignedUrlGrant:
        self.calls.append(("upload", bucket, key, content_type, expires_in_minutes))
        validate_key(key)
        bucket_id = self._bucket_id(bucket)
        if self.fail_with is not None:
            raise self.fail_with
        minutes = expires_in_minutes or 60
        return PresignedUrlGrant(
            url=f"https://s3.amazonaws.com/{self.buckets[bucket_id]}/{key}?upload=1",
            operation=PresignOperation.UPLOAD,
            key=key,
            bucket_id=bucket_id,
            content_type=content_type or DEFAULT_CONTENT_TYPE,
            expires_in_minutes=minutes,
        )


@pytest.fixture
def mock_object_storage() -> MockObjectStorage:
    return MockObjectStorage()


@pytest.fixture
def app_with_mocks(mock_object_storage: MockObjectStorage):
    """Set app.state so routes use the mock storage; restore afterwards."""
    app.state.object_storage = mock_object_storage
    yield
    app.state.object_storage = None
