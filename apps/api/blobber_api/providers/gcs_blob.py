from __future__ import annotations

import json
import logging

from google.api_core.exceptions import NotFound
from google.auth import api_key
from google.cloud import storage
from google.oauth2 import service_account

from blobber_api.config import GCPConfig
from blobber_api.providers.base import BlobStoreProvider
from blobber_api.providers.credentials import CredentialsResolver
from blobber_api.providers.errors import (
    BlobNotFoundError,
    BlobOperationError,
    BucketNotFoundError,
    NoValidBlobClientError,
    NoValidBucketError,
    NoValidCredentialsError,
)

_logger = logging.getLogger(__name__)


def new_gcs_client(config: GCPConfig, credentials: CredentialsResolver) -> storage.Client:
    """
    Builds a Cloud Storage client from either a service-account JSON document or an API key.
    """
    creds = credentials.resolve()
    if not creds.api_key and not creds.credentials_json:
        raise NoValidCredentialsError("neither an API key nor a credentials document was resolved")

    project = config.project_id or None
    if creds.credentials_json:
        try:
            info = json.loads(creds.credentials_json)
            gcp_credentials = service_account.Credentials.from_service_account_info(info)
        except (ValueError, KeyError) as exc:
            raise NoValidCredentialsError(f"invalid GCP credentials document: {exc}") from exc
        project = project or info.get("project_id")
    else:
        gcp_credentials = api_key.Credentials(creds.api_key)

    client_options = {"api_endpoint": config.endpoint} if config.endpoint else None
    return storage.Client(project=project, credentials=gcp_credentials, client_options=client_options)


class GCSBlobStoreProvider(BlobStoreProvider):
    """
    Google Cloud Storage implementation of BlobStoreProvider.

    Every call is bounded by `timeout` seconds; reads are streamed through a `BlobReader`
    which is closed before returning.
    """

    def __init__(
        self,
        bucket: str,
        client: storage.Client | None,
        logger: logging.Logger | None = None,
        timeout: float = 30.0,
    ):
        if not bucket:
            raise NoValidBucketError()
        if client is None:
            raise NoValidBlobClientError()
        self._bucket_name = bucket
        self._client = client
        self._logger = logger or _logger
        self._timeout = timeout

    @property
    def provider_name(self) -> str:
        return "gcp"

    @property
    def bucket(self) -> str:
        return self._bucket_name

    def _failed(self, operation: str, key: str, exc: Exception) -> BlobOperationError:
        self._logger.error("%s failed (bucket=%s key=%s): %s", operation, self._bucket_name, key, exc)
        return BlobOperationError(operation, key, str(exc))

    def _blob(self, key: str) -> storage.Blob:
        return self._client.bucket(self._bucket_name).blob(key)

    def ping(self) -> None:
        try:
            self._client.get_bucket(self._bucket_name, timeout=self._timeout)
        except NotFound as exc:
            raise BucketNotFoundError(self._bucket_name) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failed("get_bucket", self._bucket_name, exc) from exc

    def has(self, key: str) -> None:
        self._logger.debug("Has key=%s", key)
        try:
            blob = self._client.bucket(self._bucket_name).get_blob(key, timeout=self._timeout)
        except NotFound as exc:
            raise BlobNotFoundError(key) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failed("get_blob", key, exc) from exc
        if blob is None:
            raise BlobNotFoundError(key)

    def get(self, key: str) -> bytes:
        self._logger.debug("Get key=%s", key)
        try:
            with self._blob(key).open("rb", timeout=self._timeout) as reader:
                return reader.read()
        except NotFound as exc:
            raise BlobNotFoundError(key) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failed("read", key, exc) from exc

    def put(self, key: str, data: bytes) -> None:
        self._logger.debug("Put key=%s size=%d", key, len(data))
        try:
            self._blob(key).upload_from_string(data, timeout=self._timeout)
        except Exception as exc:  # noqa: BLE001
            raise self._failed("upload", key, exc) from exc

    def delete(self, key: str) -> None:
        self.has(key)
        self._logger.debug("Delete key=%s", key)
        try:
            self._blob(key).delete(timeout=self._timeout)
        except NotFound as exc:
            # Removed between the probe and the delete.
            raise BlobNotFoundError(key) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failed("delete", key, exc) from exc

    def list(self, prefix: str = "") -> list[str]:
        self._logger.debug("List prefix=%s", prefix)
        try:
            # list_blobs returns a page iterator; iterating it drains every page.
            return [
                blob.name
                for blob in self._client.list_blobs(self._bucket_name, prefix=prefix or None, timeout=self._timeout)
            ]
        except Exception as exc:  # noqa: BLE001
            raise self._failed("list_blobs", prefix, exc) from exc
