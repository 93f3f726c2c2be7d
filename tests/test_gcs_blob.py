import json
from types import SimpleNamespace

import pytest
from unittest.mock import MagicMock, patch
from google.api_core.exceptions import Forbidden, NotFound

from blobber_api.config import GCPConfig
from blobber_api.providers.credentials import Credentials
from blobber_api.providers.errors import (
    BlobNotFoundError,
    BlobOperationError,
    BucketNotFoundError,
    NoValidBucketError,
    NoValidCredentialsError,
)
from blobber_api.providers.gcs_blob import GCSBlobStoreProvider, new_gcs_client


@pytest.fixture
def mock_client():
    return MagicMock()


@pytest.fixture
def mock_blob(mock_client):
    return mock_client.bucket.return_value.blob.return_value


@pytest.fixture
def provider(mock_client):
    return GCSBlobStoreProvider("test-bucket", mock_client, timeout=5.0)


def test_gcs_requires_bucket(mock_client):
    with pytest.raises(NoValidBucketError):
        GCSBlobStoreProvider("", mock_client)


def test_gcs_get_streams_and_closes(provider, mock_client, mock_blob):
    reader = mock_blob.open.return_value.__enter__.return_value
    reader.read.return_value = b'{"x":1}'

    assert provider.get("a.json") == b'{"x":1}'

    mock_client.bucket.assert_called_with("test-bucket")
    mock_client.bucket.return_value.blob.assert_called_with("a.json")
    mock_blob.open.assert_called_once_with("rb", timeout=5.0)
    mock_blob.open.return_value.__exit__.assert_called_once()


def test_gcs_get_missing(provider, mock_blob):
    mock_blob.open.return_value.__enter__.return_value.read.side_effect = NotFound("No such object")

    with pytest.raises(BlobNotFoundError):
        provider.get("missing.json")


def test_gcs_get_read_error_closes_reader(provider, mock_blob):
    mock_blob.open.return_value.__enter__.return_value.read.side_effect = ConnectionError("stream dropped")

    with pytest.raises(BlobOperationError):
        provider.get("a.json")

    mock_blob.open.return_value.__exit__.assert_called_once()


def test_gcs_has(provider, mock_client):
    bucket = mock_client.bucket.return_value
    bucket.get_blob.return_value = MagicMock()
    provider.has("a.json")

    bucket.get_blob.return_value = None
    with pytest.raises(BlobNotFoundError):
        provider.has("missing.json")


def test_gcs_has_transport_error_is_not_not_found(provider, mock_client):
    mock_client.bucket.return_value.get_blob.side_effect = Forbidden("denied")

    with pytest.raises(BlobOperationError):
        provider.has("a.json")


def test_gcs_put(provider, mock_blob):
    provider.put("a.json", b"data")

    mock_blob.upload_from_string.assert_called_once_with(b"data", timeout=5.0)


def test_gcs_delete_missing_never_deletes(provider, mock_client, mock_blob):
    mock_client.bucket.return_value.get_blob.return_value = None

    with pytest.raises(BlobNotFoundError):
        provider.delete("missing.json")

    mock_blob.delete.assert_not_called()


def test_gcs_delete_race_maps_to_not_found(provider, mock_blob):
    mock_blob.delete.side_effect = NotFound("gone")

    with pytest.raises(BlobNotFoundError):
        provider.delete("a.json")


def test_gcs_list(provider, mock_client):
    mock_client.list_blobs.return_value = iter([SimpleNamespace(name="a.json"), SimpleNamespace(name="ab.json")])

    assert provider.list("a") == ["a.json", "ab.json"]
    mock_client.list_blobs.assert_called_once_with("test-bucket", prefix="a", timeout=5.0)


def test_gcs_list_failure_mid_drain(provider, mock_client):
    def pages():
        yield SimpleNamespace(name="a.json")
        raise Forbidden("page 2 denied")

    mock_client.list_blobs.return_value = pages()

    with pytest.raises(BlobOperationError):
        provider.list("a")


def test_gcs_ping(provider, mock_client):
    provider.ping()
    mock_client.get_bucket.assert_called_once_with("test-bucket", timeout=5.0)

    mock_client.get_bucket.side_effect = NotFound("no bucket")
    with pytest.raises(BucketNotFoundError):
        provider.ping()


class _StaticResolver:
    def __init__(self, creds):
        self._creds = creds

    def resolve(self):
        return self._creds


def test_new_gcs_client_with_api_key():
    config = GCPConfig(bucket="b", endpoint="http://localhost:4443")

    with patch("blobber_api.providers.gcs_blob.storage.Client") as client_cls:
        new_gcs_client(config, _StaticResolver(Credentials(api_key="k")))

    kwargs = client_cls.call_args.kwargs
    assert kwargs["project"] is None
    assert kwargs["client_options"] == {"api_endpoint": "http://localhost:4443"}
    assert kwargs["credentials"].token == "k"


def test_new_gcs_client_with_service_account_document():
    document = json.dumps({"type": "service_account", "project_id": "proj"}).encode()

    with patch("blobber_api.providers.gcs_blob.service_account.Credentials") as sa_cls, patch(
        "blobber_api.providers.gcs_blob.storage.Client"
    ) as client_cls:
        new_gcs_client(GCPConfig(bucket="b"), _StaticResolver(Credentials(credentials_json=document)))

    sa_cls.from_service_account_info.assert_called_once_with({"type": "service_account", "project_id": "proj"})
    assert client_cls.call_args.kwargs["project"] == "proj"


def test_new_gcs_client_rejects_empty_credentials():
    with pytest.raises(NoValidCredentialsError):
        new_gcs_client(GCPConfig(bucket="b"), _StaticResolver(Credentials()))


def test_new_gcs_client_rejects_malformed_document():
    with pytest.raises(NoValidCredentialsError):
        new_gcs_client(GCPConfig(bucket="b"), _StaticResolver(Credentials(credentials_json=b"not json")))
