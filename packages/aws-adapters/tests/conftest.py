"""Pytest fixtures for aws-adapters tests (moto-backed S3 buckets)."""

import os

import pytest
from gdp_storage_shared import BucketConfig
from moto import mock_aws

from gdp_storage_aws_adapters import BucketRegistry, S3ObjectStorage


@pytest.fixture(scope="function")
def aws_credentials():
    """Set fake AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def moto_aws(aws_credentials):
    """Enable moto mock for S3."""
    with mock_aws():
        yield


@pytest.fixture
def s3_buckets(moto_aws):
    """Create the default (gdp) and reports S3 buckets."""
    import boto3

    client = boto3.client("s3", region_name="us-east-1")
    client.create_bucket(Bucket="gdp")
    client.create_bucket(Bucket="reports-prod")
    return "gdp", "reports-prod"


@pytest.fixture
def registry(s3_buckets):
    """Registry with two AWS buckets sharing the registry default credentials."""
    default_name, reports_name = s3_buckets
    reg = BucketRegistry(
        {
            "default": BucketConfig(bucket_name=default_name),
            "reports": BucketConfig(bucket_name=reports_name),
        },
        default_access_key="testing",
        default_secret_key="testing",
    )
    yield reg
    reg.close()


@pytest.fixture
def storage(registry):
    return S3ObjectStorage(registry)
