from __future__ import annotations

import io
import logging
from urllib.parse import urlparse

from minio import Minio
from minio.error import S3Error

from blobber_api.config import S3Config
from blobber_api.providers.base import BlobStoreProvider
from blobber_api.providers.credentials import CredentialsResolver
from blobber_api.providers.errors import (
    BlobNotFoundError,
    BlobOperationError,
    BucketNotFoundError,
    NoValidBlobClientError,
    NoValidBucketError,
)

_logger = logging.getLogger(__name__)

DEFAULT_S3_ENDPOINT = "s3.amazonaws.com"

# HEAD requests carry no body, so MinIO reports them with a synthetic code.
_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchObject", "ResourceNotFound", "NotFound"})


def new_s3_client(config: S3Config, credentials: CredentialsResolver) -> Minio:
    """
    Builds a MinIO client for any S3-compatible endpoint (AWS, R2, MinIO, ...).

    Raises `NoValidCredentialsError` when the resolver cannot produce credentials.
    """
    creds = credentials.resolve()

    endpoint = config.endpoint or DEFAULT_S3_ENDPOINT
    parsed = urlparse(endpoint)
    host = parsed.netloc or parsed.path
    secure = parsed.scheme == "https" if parsed.scheme else config.secure

    client = Minio(
        host,
        access_key=creds.access_key_id,
        secret_key=creds.secret_access_key,
        session_token=creds.session_token or None,
        secure=secure,
        region=config.region or None,
    )
    if config.use_path_style:
        client.disable_virtual_style_endpoint()
    return client


def _is_not_found(exc: S3Error) -> bool:
    return exc.code in _NOT_FOUND_CODES


class S3BlobStoreProvider(BlobStoreProvider):
    """
    S3-compatible implementation of BlobStoreProvider using MinIO.
    """

    def __init__(self, bucket: str, client: Minio | None, logger: logging.Logger | None = None):
        if not bucket:
            raise NoValidBucketError()
        if client is None:
            raise NoValidBlobClientError()
        self._bucket = bucket
        self._client = client
        self._logger = logger or _logger

    @property
    def provider_name(self) -> str:
        return "s3"

    @property
    def bucket(self) -> str:
        return self._bucket

    def _failed(self, operation: str, key: str, exc: Exception) -> BlobOperationError:
        self._logger.error("%s failed (bucket=%s key=%s): %s", operation, self._bucket, key, exc)
        return BlobOperationError(operation, key, str(exc))

    def ping(self) -> None:
        try:
            exists = self._client.bucket_exists(bucket_name=self._bucket)
        except Exception as exc:  # noqa: BLE001
            raise self._failed("bucket_exists", self._bucket, exc) from exc
        if not exists:
            raise BucketNotFoundError(self._bucket)

    def has(self, key: str) -> None:
        self._logger.debug("Has key=%s", key)
        try:
            self._client.stat_object(bucket_name=self._bucket, object_name=key)
        except S3Error as exc:
            if _is_not_found(exc):
                raise BlobNotFoundError(key) from exc
            raise self._failed("stat_object", key, exc) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failed("stat_object", key, exc) from exc

    def get(self, key: str) -> bytes:
        self._logger.debug("Get key=%s", key)
        try:
            resp = self._client.get_object(bucket_name=self._bucket, object_name=key)
        except S3Error as exc:
            if _is_not_found(exc):
                raise BlobNotFoundError(key) from exc
            raise self._failed("get_object", key, exc) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failed("get_object", key, exc) from exc

        try:
            return resp.read()
        except Exception as exc:  # noqa: BLE001
            raise self._failed("read", key, exc) from exc
        finally:
            resp.close()
            resp.release_conn()

    def put(self, key: str, data: bytes) -> None:
        self._logger.debug("Put key=%s size=%d", key, len(data))
        try:
            self._client.put_object(
                bucket_name=self._bucket,
                object_name=key,
                data=io.BytesIO(data),
                length=len(data),
            )
        except Exception as exc:  # noqa: BLE001
            raise self._failed("put_object", key, exc) from exc

    def delete(self, key: str) -> None:
        # S3 deletes are idempotent, so absence has to be probed for.
        self.has(key)
        self._logger.debug("Delete key=%s", key)
        try:
            self._client.remove_object(bucket_name=self._bucket, object_name=key)
        except Exception as exc:  # noqa: BLE001
            raise self._failed("remove_object", key, exc) from exc

    def list(self, prefix: str = "") -> list[str]:
        self._logger.debug("List prefix=%s", prefix)
        keys: list[str] = []
        try:
            # The iterator fetches ListObjectsV2 pages lazily; a failing page raises here.
            for obj in self._client.list_objects(bucket_name=self._bucket, prefix=prefix or None, recursive=True):
                if obj.is_dir:
                    continue
                keys.append(obj.object_name)
        except Exception as exc:  # noqa: BLE001
            raise self._failed("list_objects", prefix, exc) from exc
        return keys
