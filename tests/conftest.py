"""Shared fixtures: mocked S3, a temporary sqlite document store and a test client."""
import boto3
import pytest
from fastapi.testclient import TestClient
from moto import mock_aws

from uploads_api.adapters.storage import LocalBlobStore, S3BlobStore
from uploads_api.config.settings import Settings
from uploads_api.db_layer import DataService, FileService
from uploads_api.main import create_app
from uploads_api.services import IngestionCoordinator, QueryFacade
from tests.consts import TEST_BUCKET_NAME, TEST_PUBLIC_BASE_URL, TEST_REGION
from tests.fixtures.db_client import sqlite_adapter  # noqa: F401
from tests.fixtures.link_fixtures import fake_session


@pytest.fixture
def aws_credentials(monkeypatch):
    """Point boto3 at fake credentials so nothing can reach real AWS."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", TEST_REGION)


@pytest.fixture
def mocked_aws(aws_credentials):
    with mock_aws():
        s3_client = boto3.client("s3", region_name=TEST_REGION)
        s3_client.create_bucket(Bucket=TEST_BUCKET_NAME)
        yield s3_client


@pytest.fixture
def s3_blob_store(mocked_aws) -> S3BlobStore:
    return S3BlobStore(bucket_name=TEST_BUCKET_NAME, s3_client=mocked_aws)


@pytest.fixture
def local_blob_store(tmp_path) -> LocalBlobStore:
    return LocalBlobStore(str(tmp_path / "blobs"), TEST_PUBLIC_BASE_URL)


@pytest.fixture
def file_service(sqlite_adapter) -> FileService:
    return FileService(sqlite_adapter)


@pytest.fixture
def data_service(sqlite_adapter) -> DataService:
    return DataService(sqlite_adapter)


@pytest.fixture
def http_session():
    return fake_session()


@pytest.fixture
def coordinator(local_blob_store, file_service, data_service, http_session) -> IngestionCoordinator:
    return IngestionCoordinator(
        blob_store=local_blob_store,
        file_service=file_service,
        data_service=data_service,
        http_session=http_session,
        fetch_timeout_seconds=5.0,
    )


@pytest.fixture
def query_facade(file_service, data_service) -> QueryFacade:
    return QueryFacade(file_service, data_service, default_page_size=10, max_page_size=100)


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        deployment_mode="local-dev",
        storage_dir=str(tmp_path / "blobs"),
        public_base_url=TEST_PUBLIC_BASE_URL,
        database_path=str(tmp_path / "uploads.db"),
        mongodb_uri=None,
        fetch_timeout_seconds=5.0,
    )


@pytest.fixture
def client(settings, http_session) -> TestClient:
    """Local-dev app: blobs on disk served under /blobs, metadata in sqlite."""
    app = create_app(settings=settings, http_session=http_session)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def s3_client_app(settings, s3_blob_store, sqlite_adapter, http_session) -> TestClient:
    """Same API backed by a mocked S3 bucket."""
    app = create_app(
        settings=settings,
        blob_store=s3_blob_store,
        document_adapter=sqlite_adapter,
        http_session=http_session,
    )
    with TestClient(app) as test_client:
        yield test_client
