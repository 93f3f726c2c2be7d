from __future__ import annotations

import logging

from fastapi import HTTPException
from fastapi.responses import JSONResponse

from ..observability.tracing import trace_span
from ..providers.base import BlobStoreProvider
from ..providers.errors import BlobStoreError
from ..responses import success_json

_logger = logging.getLogger(__name__)

APP_TITLE = "Blobber - Blob Storage Service"
APP_VERSION = "0.1.0"


def home(store: BlobStoreProvider) -> dict[str, str]:
    return {"title": APP_TITLE, "version": APP_VERSION, "blob_provider": store.provider_name}


def healthz(store: BlobStoreProvider) -> JSONResponse:
    with trace_span("blob.ping"):
        try:
            store.ping()
        except BlobStoreError as exc:
            _logger.error("Blob store ping failed: %s", exc)
            raise HTTPException(status_code=500, detail="Blob store is unreachable") from exc
    return success_json("Health endpoint is working")


def readyz() -> JSONResponse:
    return success_json("Ready endpoint is working")
