from __future__ import annotations

import logging

from azure.core.exceptions import ResourceNotFoundError
from azure.identity import ClientSecretCredential
from azure.storage.blob import BlobServiceClient

from blobber_api.config import AzureConfig
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


def new_azure_client(config: AzureConfig, credentials: CredentialsResolver) -> BlobServiceClient:
    """
    Builds a BlobServiceClient authenticated with a service principal (tenant/client/secret).
    """
    creds = credentials.resolve()
    if not config.endpoint:
        raise NoValidBlobClientError("azure_config.endpoint is not configured")

    # AZURE_TENANT_ID wins over azure_config.tenant_id.
    tenant_id = creds.tenant_id or config.tenant_id
    if not tenant_id:
        raise NoValidCredentialsError("no Azure tenant id in AZURE_TENANT_ID or azure_config.tenant_id")

    credential = ClientSecretCredential(
        tenant_id=tenant_id,
        client_id=creds.client_id,
        client_secret=creds.client_secret,
    )
    return BlobServiceClient(account_url=config.endpoint.rstrip("/"), credential=credential)


def _is_blob_absent(exc: ResourceNotFoundError) -> bool:
    # HEAD responses carry no error code; a missing container is not a missing blob.
    return getattr(exc, "error_code", None) != "ContainerNotFound"


class AzureBlobStoreProvider(BlobStoreProvider):
    """
    Azure Blob Storage implementation of BlobStoreProvider.
    """

    def __init__(self, container: str, client: BlobServiceClient | None, logger: logging.Logger | None = None):
        if not container:
            raise NoValidBucketError("no valid container provided")
        if client is None:
            raise NoValidBlobClientError()
        self._container = container
        self._client = client
        self._logger = logger or _logger

    @property
    def provider_name(self) -> str:
        return "azure"

    @property
    def container(self) -> str:
        return self._container

    def _failed(self, operation: str, key: str, exc: Exception) -> BlobOperationError:
        self._logger.error("%s failed (container=%s key=%s): %s", operation, self._container, key, exc)
        return BlobOperationError(operation, key, str(exc))

    def _container_client(self):
        return self._client.get_container_client(self._container)

    def _blob_client(self, key: str):
        return self._client.get_blob_client(container=self._container, blob=key)

    def ping(self) -> None:
        try:
            self._container_client().get_container_properties()
        except ResourceNotFoundError as exc:
            raise BucketNotFoundError(self._container) from exc
        except Exception as exc:  # noqa: BLE001
            self._logger.error("Failed to ping Azure Blob Store: %s", exc)
            raise self._failed("get_container_properties", self._container, exc) from exc

    def has(self, key: str) -> None:
        self._logger.debug("Has key=%s", key)
        try:
            self._blob_client(key).get_blob_properties()
        except ResourceNotFoundError as exc:
            if _is_blob_absent(exc):
                raise BlobNotFoundError(key) from exc
            raise self._failed("get_blob_properties", key, exc) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failed("get_blob_properties", key, exc) from exc

    def get(self, key: str) -> bytes:
        self._logger.debug("Get key=%s", key)
        try:
            downloader = self._blob_client(key).download_blob()
            return downloader.readall()
        except ResourceNotFoundError as exc:
            if _is_blob_absent(exc):
                raise BlobNotFoundError(key) from exc
            raise self._failed("download_blob", key, exc) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failed("download_blob", key, exc) from exc

    def put(self, key: str, data: bytes) -> None:
        self._logger.debug("Put key=%s size=%d", key, len(data))
        try:
            self._blob_client(key).upload_blob(data, overwrite=True)
        except Exception as exc:  # noqa: BLE001
            raise self._failed("upload_blob", key, exc) from exc

    def delete(self, key: str) -> None:
        # Azure reports BlobNotFound on delete itself, no probe needed.
        self._logger.debug("Delete key=%s", key)
        try:
            self._blob_client(key).delete_blob()
        except ResourceNotFoundError as exc:
            if _is_blob_absent(exc):
                raise BlobNotFoundError(key) from exc
            raise self._failed("delete_blob", key, exc) from exc
        except Exception as exc:  # noqa: BLE001
            raise self._failed("delete_blob", key, exc) from exc

    def list(self, prefix: str = "") -> list[str]:
        self._logger.debug("List prefix=%s", prefix)
        try:
            # ItemPaged follows continuation tokens while iterating.
            return [item.name for item in self._container_client().list_blobs(name_starts_with=prefix or None)]
        except Exception as exc:  # noqa: BLE001
            raise self._failed("list_blobs", prefix, exc) from exc
