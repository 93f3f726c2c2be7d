from types import SimpleNamespace

import pytest
from unittest.mock import MagicMock, patch
from azure.core.exceptions import HttpResponseError, ResourceNotFoundError

from blobber_api.config import AzureConfig
from blobber_api.providers.azure_blob import AzureBlobStoreProvider, new_azure_client
from blobber_api.providers.credentials import Credentials
from blobber_api.providers.errors import (
    BlobNotFoundError,
    BlobOperationError,
    BucketNotFoundError,
    NoValidBlobClientError,
    NoValidBucketError,
    NoValidCredentialsError,
)


@pytest.fixture
def mock_service():
    return MagicMock()


@pytest.fixture
def blob_client(mock_service):
    return mock_service.get_blob_client.return_value


@pytest.fixture
def container_client(mock_service):
    return mock_service.get_container_client.return_value


@pytest.fixture
def provider(mock_service):
    return AzureBlobStoreProvider("test-container", mock_service)


def test_azure_requires_container_and_client(mock_service):
    with pytest.raises(NoValidBucketError):
        AzureBlobStoreProvider("", mock_service)
    with pytest.raises(NoValidBlobClientError):
        AzureBlobStoreProvider("test-container", None)


def test_azure_get(provider, mock_service, blob_client):
    blob_client.download_blob.return_value.readall.return_value = b"payload"

    assert provider.get("a.json") == b"payload"
    mock_service.get_blob_client.assert_called_with(container="test-container", blob="a.json")


def test_azure_get_missing(provider, blob_client):
    blob_client.download_blob.side_effect = ResourceNotFoundError("The specified blob does not exist.")

    with pytest.raises(BlobNotFoundError):
        provider.get("missing.json")


def test_azure_missing_container_is_not_a_missing_blob(provider, blob_client):
    exc = ResourceNotFoundError("The specified container does not exist.")
    exc.error_code = "ContainerNotFound"
    blob_client.download_blob.side_effect = exc

    with pytest.raises(BlobOperationError):
        provider.get("a.json")


def test_azure_get_read_error(provider, blob_client):
    blob_client.download_blob.return_value.readall.side_effect = HttpResponseError("connection aborted")

    with pytest.raises(BlobOperationError):
        provider.get("a.json")


def test_azure_has(provider, blob_client):
    provider.has("a.json")

    blob_client.get_blob_properties.side_effect = ResourceNotFoundError("not found")
    with pytest.raises(BlobNotFoundError):
        provider.has("missing.json")


def test_azure_put_overwrites(provider, blob_client):
    provider.put("a.json", b"data")

    blob_client.upload_blob.assert_called_once_with(b"data", overwrite=True)


def test_azure_delete_uses_native_not_found(provider, blob_client):
    blob_client.delete_blob.side_effect = ResourceNotFoundError("The specified blob does not exist.")

    with pytest.raises(BlobNotFoundError):
        provider.delete("missing.json")


def test_azure_delete_other_error(provider, blob_client):
    blob_client.delete_blob.side_effect = HttpResponseError("server busy")

    with pytest.raises(BlobOperationError):
        provider.delete("a.json")


def test_azure_list(provider, container_client):
    container_client.list_blobs.return_value = iter([SimpleNamespace(name="a.json"), SimpleNamespace(name="a/b.json")])

    assert provider.list("a") == ["a.json", "a/b.json"]
    container_client.list_blobs.assert_called_once_with(name_starts_with="a")


def test_azure_ping(provider, container_client):
    provider.ping()

    container_client.get_container_properties.side_effect = ResourceNotFoundError("no container")
    with pytest.raises(BucketNotFoundError):
        provider.ping()


class _StaticResolver:
    def resolve(self):
        return Credentials(tenant_id="tenant", client_id="client", client_secret="secret")


def test_new_azure_client_strips_trailing_slash():
    config = AzureConfig(endpoint="https://acct.blob.core.windows.net/", container="c")

    with patch("blobber_api.providers.azure_blob.ClientSecretCredential") as cred_cls, patch(
        "blobber_api.providers.azure_blob.BlobServiceClient"
    ) as service_cls:
        new_azure_client(config, _StaticResolver())

    cred_cls.assert_called_once_with(tenant_id="tenant", client_id="client", client_secret="secret")
    service_cls.assert_called_once_with(
        account_url="https://acct.blob.core.windows.net", credential=cred_cls.return_value
    )


def test_new_azure_client_requires_endpoint():
    with pytest.raises(NoValidBlobClientError):
        new_azure_client(AzureConfig(container="c"), _StaticResolver())


def test_new_azure_client_falls_back_to_configured_tenant():
    config = AzureConfig(tenant_id="from-config", endpoint="https://acct.blob.core.windows.net", container="c")
    resolver = MagicMock()
    resolver.resolve.return_value = Credentials(client_id="client", client_secret="secret")

    with patch("blobber_api.providers.azure_blob.ClientSecretCredential") as cred_cls, patch(
        "blobber_api.providers.azure_blob.BlobServiceClient"
    ):
        new_azure_client(config, resolver)

    cred_cls.assert_called_once_with(tenant_id="from-config", client_id="client", client_secret="secret")


def test_new_azure_client_env_tenant_wins_over_config():
    config = AzureConfig(tenant_id="from-config", endpoint="https://acct.blob.core.windows.net", container="c")

    with patch("blobber_api.providers.azure_blob.ClientSecretCredential") as cred_cls, patch(
        "blobber_api.providers.azure_blob.BlobServiceClient"
    ):
        new_azure_client(config, _StaticResolver())

    assert cred_cls.call_args.kwargs["tenant_id"] == "tenant"


def test_new_azure_client_requires_a_tenant():
    config = AzureConfig(endpoint="https://acct.blob.core.windows.net", container="c")
    resolver = MagicMock()
    resolver.resolve.return_value = Credentials(client_id="client", client_secret="secret")

    with pytest.raises(NoValidCredentialsError):
        new_azure_client(config, resolver)
