from __future__ import annotations

from fastapi import Request

from .providers.base import BlobStoreProvider
from .secret_store import SecretStore


def get_blob_store(request: Request) -> BlobStoreProvider:
    return request.app.state.blob_store


def get_secret_store(request: Request) -> SecretStore:
    return request.app.state.secret_store
