"""
Blob store adapters.

A blob store holds opaque bytes under a key and hands back a URL that resolves
to them. There is no retry logic here; failures propagate as
BlobStoreError with the original exception chained.
"""

import logging
import shutil
from pathlib import Path
from typing import BinaryIO, Optional
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from urllib3.exceptions import HTTPError as StreamReadError

from uploads_api.config.settings import Settings
from uploads_api.errors import BlobStoreError

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/octet-stream"
LOCAL_BLOB_ROUTE = "/blobs"


class BlobStore:
    """Base class for blob stores (to be extended by specific implementations)"""

    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        raise NotImplementedError

    def put_stream(self, key: str, stream: BinaryIO, content_type: Optional[str] = None) -> str:
        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError

    def url_for(self, key: str) -> str:
        raise NotImplementedError

    def ping(self) -> None:
        """Raise BlobStoreError if the store is unreachable."""


class S3BlobStore(BlobStore):
    """Stores blobs as objects in a single S3 bucket."""

    def __init__(
        self,
        bucket_name: str,
        s3_client: "S3Client",
        public_base_url: Optional[str] = None,
        endpoint_url: Optional[str] = None,
    ):
        self.bucket_name = bucket_name
        self.s3_client = s3_client
        self.public_base_url = public_base_url
        self.endpoint_url = endpoint_url
        logger.info(f"Using S3 bucket: {bucket_name}")

    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        try:
            self.s3_client.put_object(
                Bucket=self.bucket_name,
                Key=key,
                Body=data,
                ContentType=content_type or DEFAULT_CONTENT_TYPE,
            )
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error uploading {key} to S3: {e}")
            raise BlobStoreError(f"Failed to store blob {key}") from e
        logger.info(f"Uploaded {len(data)} bytes to s3://{self.bucket_name}/{key}")
        return self.url_for(key)

    def put_stream(self, key: str, stream: BinaryIO, content_type: Optional[str] = None) -> str:
        try:
            self.s3_client.upload_fileobj(
                Fileobj=stream,
                Bucket=self.bucket_name,
                Key=key,
                ExtraArgs={"ContentType": content_type or DEFAULT_CONTENT_TYPE},
            )
        except (BotoCoreError, ClientError, OSError, StreamReadError) as e:
            logger.error(f"Error streaming {key} to S3: {e}")
            raise BlobStoreError(f"Failed to store blob {key}") from e
        logger.info(f"Streamed s3://{self.bucket_name}/{key}")
        return self.url_for(key)

    def delete(self, key: str) -> None:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
        except (BotoCoreError, ClientError) as e:
            logger.error(f"Error deleting {key} from S3: {e}")
            raise BlobStoreError(f"Failed to delete blob {key}") from e
        logger.info(f"Deleted s3://{self.bucket_name}/{key}")

    def url_for(self, key: str) -> str:
        quoted_key = quote(key)
        if self.public_base_url:
            return f"{self.public_base_url.rstrip('/')}/{quoted_key}"
        if self.endpoint_url:
            return f"{self.endpoint_url.rstrip('/')}/{self.bucket_name}/{quoted_key}"
        region = self.s3_client.meta.region_name
        return f"https://{self.bucket_name}.s3.{region}.amazonaws.com/{quoted_key}"

    def ping(self) -> None:
        try:
            self.s3_client.head_bucket(Bucket=self.bucket_name)
        except (BotoCoreError, ClientError) as e:
            raise BlobStoreError(f"S3 bucket {self.bucket_name} is unreachable") from e


class LocalBlobStore(BlobStore):
    """Stores blobs as files in a local directory, served by the app under /blobs."""

    def __init__(self, storage_dir: str, public_base_url: str):
        self.storage_dir = Path(storage_dir)
        self.storage_dir.mkdir(parents=True, exist_ok=True)
        self.public_base_url = public_base_url
        logger.info(f"Using local blob directory: {self.storage_dir}")

    def _path_for(self, key: str) -> Path:
        # keys are flat names; anything that could escape storage_dir is refused
        if not key or key in (".", "..") or "/" in key or "\\" in key:
            raise BlobStoreError(f"Invalid blob key: {key!r}")
        return self.storage_dir / key

    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        path = self._path_for(key)
        try:
            path.write_bytes(data)
        except OSError as e:
            logger.error(f"Error writing blob {path}: {e}")
            raise BlobStoreError(f"Failed to store blob {key}") from e
        logger.info(f"Stored {len(data)} bytes at {path}")
        return self.url_for(key)

    def put_stream(self, key: str, stream: BinaryIO, content_type: Optional[str] = None) -> str:
        path = self._path_for(key)
        # the body lands under a hidden name and only becomes visible once complete
        partial = path.with_name(f".{key}.partial")
        try:
            with open(partial, "wb") as f:
                shutil.copyfileobj(stream, f)
            partial.replace(path)
        except (OSError, StreamReadError) as e:
            partial.unlink(missing_ok=True)
            logger.error(f"Error streaming blob {path}: {e}")
            raise BlobStoreError(f"Failed to store blob {key}") from e
        logger.info(f"Streamed blob to {path}")
        return self.url_for(key)

    def delete(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            # same as S3: a missing blob is already deleted
            logger.warning(f"Blob {path} was already gone")
            return
        except OSError as e:
            logger.error(f"Error deleting blob {path}: {e}")
            raise BlobStoreError(f"Failed to delete blob {key}") from e
        logger.info(f"Deleted blob {path}")

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url.rstrip('/')}/{quote(key)}"

    def ping(self) -> None:
        if not self.storage_dir.is_dir():
            raise BlobStoreError(f"Blob directory {self.storage_dir} is missing")


def create_s3_client(settings: Settings) -> "S3Client":
    """Create an S3 client from settings; the endpoint override only applies outside aws-prod."""
    client_kwargs = {"region_name": settings.aws_region}
    if settings.aws_access_key_id:
        client_kwargs["aws_access_key_id"] = settings.aws_access_key_id
    if settings.aws_secret_access_key:
        client_kwargs["aws_secret_access_key"] = settings.aws_secret_access_key
    if settings.aws_endpoint_url and settings.deployment_mode != "aws-prod":
        client_kwargs["endpoint_url"] = settings.aws_endpoint_url
    return boto3.client("s3", **client_kwargs)


def create_blob_store(settings: Settings, s3_client: Optional["S3Client"] = None) -> BlobStore:
    """Build the blob store for the configured deployment mode."""
    if settings.blob_backend == "local":
        public_base_url = settings.public_base_url or f"http://localhost:8000{LOCAL_BLOB_ROUTE}"
        return LocalBlobStore(settings.storage_dir, public_base_url)

    endpoint_url = settings.aws_endpoint_url if settings.deployment_mode != "aws-prod" else None
    return S3BlobStore(
        bucket_name=settings.s3_bucket_name,
        s3_client=s3_client or create_s3_client(settings),
        public_base_url=settings.public_base_url,
        endpoint_url=endpoint_url,
    )
