"""Tests for presigned download and upload URL routes."""

import pytest
from fastapi.testclient import TestClient
from gdp_storage_shared import ConfigurationError, StorageError

from gdp_storage_web_api.main import app

DOWNLOAD = "/api/s3/presigned-url/download"
UPLOAD = "/api/s3/presigned-url/upload"


def _assert_error(response, status_code: int) -> dict:
    assert response.status_code == status_code
    body = response.json()
    assert set(body) == {"error", "timestamp"}
    assert isinstance(body["timestamp"], int)
    return body


class TestDownloadUrl:
    def test_download_url(self, client: TestClient) -> None:
        app.state.object_storage.objects.add(("default", "test/file.txt"))
        response = client.get(DOWNLOAD, params={"key": "test/file.txt", "bucket": "default"})
        assert response.status_code == 200
        data = response.json()
        assert data == {
            "url": "https://s3.amazonaws.com/gdp/test/file.txt?expires=3600",
            "operation": "download",
            "key": "test/file.txt",
            "bucket_id": "default",
            "expires_in_minutes": 60,
        }

    def test_download_url_full_path_wins_over_bucket(self, client: TestClient) -> None:
        storage = app.state.object_storage
        storage.objects.add(("reports", "2024/jan.csv"))
        response = client.get(
            DOWNLOAD, params={"path": "s3a://reports/2024/jan.csv", "bucket": "default"}
        )
        assert response.status_code == 200
        assert response.json()["bucket_id"] == "reports"
        assert storage.calls[-1] == ("download", "reports", "2024/jan.csv", None)

    def test_download_url_full_path_without_bucket(self, client: TestClient) -> None:
        app.state.object_storage.objects.add(("reports", "a.csv"))
        response = client.get(DOWNLOAD, params={"key": "s3://reports/a.csv"})
        assert response.status_code == 200

    def test_download_url_custom_expiry(self, client: TestClient) -> None:
        app.state.object_storage.objects.add(("default", "a.txt"))
        response = client.get(
            DOWNLOAD, params={"key": "a.txt", "bucket": "default", "expires_in_minutes": 5}
        )
        assert response.status_code == 200
        assert response.json()["expires_in_minutes"] == 5

    def test_missing_key_returns_400(self, client: TestClient) -> None:
        body = _assert_error(client.get(DOWNLOAD, params={"bucket": "default"}), 400)
        assert body["error"] == "S3 object key is required"

    def test_missing_bucket_for_bare_key_returns_400(self, client: TestClient) -> None:
        body = _assert_error(client.get(DOWNLOAD, params={"key": "a.txt"}), 400)
        assert "Bucket is required" in body["error"]
        assert app.state.object_storage.calls == []

    def test_invalid_key_returns_400(self, client: TestClient) -> None:
        _assert_error(client.get(DOWNLOAD, params={"key": "bad key?", "bucket": "default"}), 400)

    def test_unknown_bucket_returns_400(self, client: TestClient) -> None:
        body = _assert_error(client.get(DOWNLOAD, params={"key": "a.txt", "bucket": "nope"}), 400)
        assert body["error"] == "No configuration found for bucket: nope"

    def test_missing_object_returns_404(self, client: TestClient) -> None:
        body = _assert_error(
            client.get(DOWNLOAD, params={"key": "missing.txt", "bucket": "gdp"}), 404
        )
        assert body["error"] == "File does not exist: missing.txt in bucket gdp"

    @pytest.mark.parametrize("minutes", [0, 10081])
    def test_expiry_out_of_range_returns_400(self, client: TestClient, minutes: int) -> None:
        _assert_error(
            client.get(
                DOWNLOAD,
                params={"key": "a.txt", "bucket": "default", "expires_in_minutes": minutes},
            ),
            400,
        )

    def test_backend_failure_returns_500(self, client: TestClient) -> None:
        app.state.object_storage.fail_with = StorageError(
            "generate download URL for", "default", "a.txt", cause=RuntimeError("connection refused")
        )
        body = _assert_error(client.get(DOWNLOAD, params={"key": "a.txt", "bucket": "default"}), 500)
        assert "Failed to generate download URL for a.txt" in body["error"]

    def test_configuration_error_returns_500(self, client: TestClient) -> None:
        app.state.object_storage.fail_with = ConfigurationError(
            "No valid credentials found for bucket: default"
        )
        _assert_error(client.get(DOWNLOAD, params={"key": "a.txt", "bucket": "default"}), 500)


class TestUploadUrl:
    def test_upload_url(self, client: TestClient) -> None:
        response = client.post(
            UPLOAD,
            json={"key": "test/file.txt", "bucket": "reports", "content_type": "text/plain"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["operation"] == "upload"
        assert data["key"] == "test/file.txt"
        assert data["bucket_id"] == "reports"
        assert data["content_type"] == "text/plain"
        assert data["url"].startswith("https://s3.amazonaws.com/reports-prod/test/file.txt")

    def test_upload_url_infers_content_type(self, client: TestClient) -> None:
        response = client.post(UPLOAD, json={"key": "data/report.csv", "bucket": "default"})
        assert response.status_code == 200
        assert response.json()["content_type"] == "text/csv"
        assert app.state.object_storage.calls[-1] == (
            "upload",
            "default",
            "data/report.csv",
            "text/csv",
            None,
        )

    def test_upload_url_unknown_extension(self, client: TestClient) -> None:
        response = client.post(UPLOAD, json={"key": "blob", "bucket": "default"})
        assert response.json()["content_type"] == "application/octet-stream"

    def test_upload_url_with_path(self, client: TestClient) -> None:
        response = client.post(UPLOAD, json={"path": "s3a://reports/2024/jan.csv"})
        assert response.status_code == 200
        assert response.json()["bucket_id"] == "reports"
        assert response.json()["key"] == "2024/jan.csv"

    def test_upload_url_does_not_require_existing_object(self, client: TestClient) -> None:
        response = client.post(UPLOAD, json={"key": "new/object.json", "bucket": "default"})
        assert response.status_code == 200

    def test_missing_key_returns_400(self, client: TestClient) -> None:
        body = _assert_error(client.post(UPLOAD, json={"bucket": "default"}), 400)
        assert body["error"] == "S3 object key is required"

    def test_invalid_expiry_returns_400(self, client: TestClient) -> None:
        body = _assert_error(
            client.post(UPLOAD, json={"key": "a.txt", "bucket": "default", "expires_in_minutes": 0}),
            400,
        )
        assert body["error"].startswith("expires_in_minutes")

    def test_unknown_bucket_returns_400(self, client: TestClient) -> None:
        _assert_error(client.post(UPLOAD, json={"key": "a.txt", "bucket": "nope"}), 400)

    def test_backend_failure_returns_500(self, client: TestClient) -> None:
        app.state.object_storage.fail_with = StorageError(
            "generate upload URL for", "default", "a.txt", cause=RuntimeError("timeout")
        )
        _assert_error(client.post(UPLOAD, json={"key": "a.txt", "bucket": "default"}), 500)
