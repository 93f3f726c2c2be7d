import pytest
from fastapi.testclient import TestClient

from blobber_api.app import create_app
from blobber_api.providers.base import BlobStoreProvider
from blobber_api.providers.errors import BlobNotFoundError, BlobOperationError, BucketNotFoundError
from blobber_api.secret_store import EnvSecretStore

API_TOKEN = "test-token"
API_TOKEN_ENV_VAR = "BLOBBER_TEST_API_TOKEN"


class InMemoryBlobStore(BlobStoreProvider):
    """Contract-complete store used to drive the HTTP layer without a provider SDK."""

    def __init__(self):
        self.blobs = {}
        self.reachable = True
        self.broken = False

    @property
    def provider_name(self):
        return "memory"

    def _check(self, operation, key):
        if self.broken:
            raise BlobOperationError(operation, key, "connection reset")

    def ping(self):
        if not self.reachable:
            raise BucketNotFoundError("memory")

    def has(self, key):
        self._check("has", key)
        if key not in self.blobs:
            raise BlobNotFoundError(key)

    def get(self, key):
        self._check("get", key)
        if key not in self.blobs:
            raise BlobNotFoundError(key)
        return self.blobs[key]

    def put(self, key, data):
        self._check("put", key)
        self.blobs[key] = bytes(data)

    def delete(self, key):
        self.has(key)
        del self.blobs[key]

    def list(self, prefix=""):
        self._check("list", prefix)
        return sorted(k for k in self.blobs if k.startswith(prefix))


@pytest.fixture
def store():
    return InMemoryBlobStore()


@pytest.fixture
def app(store, monkeypatch):
    monkeypatch.setenv(API_TOKEN_ENV_VAR, API_TOKEN)
    return create_app(store, EnvSecretStore(API_TOKEN_ENV_VAR))


@pytest.fixture
def client(app):
    return TestClient(app)


@pytest.fixture
def auth_headers():
    return {"X-API-Token": API_TOKEN}
