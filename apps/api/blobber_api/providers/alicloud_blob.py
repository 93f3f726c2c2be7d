from __future__ import annotations

import logging

import oss2
from oss2.exceptions import NoSuchBucket, NoSuchKey

from blobber_api.config import AlicloudConfig
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


def _default_endpoint(region: str) -> str:
    region = region.removeprefix("oss-")
    return f"https://oss-{region}.aliyuncs.com"


def new_alicloud_client(config: AlicloudConfig, credentials: CredentialsResolver) -> oss2.Bucket:
    """
    Builds an OSS bucket handle; oss2 binds the client to a single bucket.
    """
    creds = credentials.resolve()
    if not config.bucket:
        raise NoValidBucketError()
    if not config.endpoint and not config.region:
        raise NoValidBlobClientError("alicloud_config needs an endpoint or a region")

    if creds.session_token:
        auth = oss2.StsAuth(creds.access_key_id, creds.secret_access_key, creds.session_token)
    else:
        auth = oss2.Auth(creds.access_key_id, creds.secret_access_key)

    endpoint = config.endpoint or _default_endpoint(config.region)
    kwargs = {"region": config.region} if config.region else {}
    return oss2.Bucket(auth, endpoint, config.bucket, **kwargs)


class AlicloudBlobStoreProvider(BlobStoreProvider):
    """
    Alicloud OSS implementation of BlobStoreProvider.
    """

    def __init__(self, bucket: str, client: oss2.Bucket | None, logger: logging.Logger | None = None):
        if not bucket:
            raise NoValidBucketError()
        if client is None:
            raise NoValidBlobClientError()
        self._bucket_name = bucket
        self._client = client
        self._logger = logger or _logger

    @property
    def provider_name(self) -> str:
        return "alicloud"

    @property
    def bucket(self) -> str:
        return self._bucket_name

    def _failed(self, operation: str, key: str, exc: Exception) -> BlobOperationError:
        self._logger.error("%s failed (bucket=%s key=%s): %s", operation, self._bucket_name, key, exc)
        return BlobOperationError(operation, key, str(exc))

    def ping(self) -> None:
        try:
            self._client.get_bucket_info()
        except NoSuchBucket as exc:
            raise BucketNotFoundError(self._bucket_name) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failed("get_bucket_info", self._bucket_name, exc) from exc

    def has(self, key: str) -> None:
        self._logger.debug("Has key=%s", key)
        try:
            exists = self._client.object_exists(key)
        except Exception as exc:  # noqa: BLE001
            raise self._failed("object_exists", key, exc) from exc
        if not exists:
            raise BlobNotFoundError(key)

    def get(self, key: str) -> bytes:
        self._logger.debug("Get key=%s", key)
        try:
            result = self._client.get_object(key)
        except NoSuchKey as exc:
            raise BlobNotFoundError(key) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failed("get_object", key, exc) from exc

        try:
            return result.read()
        except Exception as exc:  # noqa: BLE001
            raise self._failed("read", key, exc) from exc
        finally:
            result.close()

    def put(self, key: str, data: bytes) -> None:
        self._logger.debug("Put key=%s size=%d", key, len(data))
        try:
            self._client.put_object(key, data)
        except Exception as exc:  # noqa: BLE001
            raise self._failed("put_object", key, exc) from exc

    def delete(self, key: str) -> None:
        # OSS DeleteObject succeeds for missing keys, so probe first.
        self.has(key)
        self._logger.debug("Delete key=%s", key)
        try:
            self._client.delete_object(key)
        except Exception as exc:  # noqa: BLE001
            raise self._failed("delete_object", key, exc) from exc

    def list(self, prefix: str = "") -> list[str]:
        self._logger.debug("List prefix=%s", prefix)
        keys: list[str] = []
        try:
            # ObjectIterator follows next_marker until the listing is truncated no more.
            for obj in oss2.ObjectIterator(self._client, prefix=prefix):
                if obj.is_prefix():
                    continue
                keys.append(obj.key)
        except Exception as exc:  # noqa: BLE001
            raise self._failed("list_objects", prefix, exc) from exc
        return keys
