from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException
from fastapi.responses import JSONResponse, Response

from ..api_utils import content_type_from_accept, require_key_or_400
from ..observability.tracing import trace_span
from ..providers.base import BlobStoreProvider
from ..providers.errors import BlobNotFoundError, BlobStoreError
from ..responses import paginated_json, success_json

_logger = logging.getLogger(__name__)


def _set_outcome(span: Any, outcome: str) -> None:
    if span is not None:
        span.set_attribute("blob.outcome", outcome)


def list_blobs(store: BlobStoreProvider, prefix: str | None) -> JSONResponse:
    prefix = (prefix or "").strip()
    _logger.debug("Listing blobs prefix=%s", prefix)
    with trace_span("blob.list", {"blob.prefix": prefix}) as span:
        try:
            keys = store.list(prefix)
        except BlobStoreError as exc:
            _set_outcome(span, "error")
            _logger.error("Failed to list blobs: %s", exc)
            raise HTTPException(status_code=500, detail="Failed to list blobs") from exc
        _set_outcome(span, "ok")
    return paginated_json(keys)


def get_blob(store: BlobStoreProvider, key: str | None, accept: str | None) -> Response:
    key = require_key_or_400(key)
    _logger.debug("Fetching blob key=%s", key)
    with trace_span("blob.get", {"blob.key": key}) as span:
        try:
            data = store.get(key)
        except BlobNotFoundError as exc:
            _set_outcome(span, "not_found")
            raise HTTPException(status_code=404, detail="Blob not found") from exc
        except BlobStoreError as exc:
            _set_outcome(span, "error")
            _logger.error("Failed to fetch blob %s: %s", key, exc)
            raise HTTPException(status_code=500, detail="Failed to fetch blob") from exc
        _set_outcome(span, "ok")
    return Response(content=data, media_type=content_type_from_accept(accept))


def put_blob(store: BlobStoreProvider, key: str | None, data: bytes) -> JSONResponse:
    key = require_key_or_400(key)
    with trace_span("blob.put", {"blob.key": key, "blob.size": len(data)}) as span:
        try:
            store.put(key, data)
        except BlobStoreError as exc:
            _set_outcome(span, "error")
            _logger.error("Failed to store blob %s: %s", key, exc)
            raise HTTPException(status_code=500, detail="Failed to store blob") from exc
        _set_outcome(span, "ok")
    return success_json("Blob stored successfully", status_code=201)


def delete_blob(store: BlobStoreProvider, key: str | None) -> JSONResponse:
    key = require_key_or_400(key)
    _logger.debug("Deleting blob key=%s", key)
    with trace_span("blob.delete", {"blob.key": key}) as span:
        try:
            store.delete(key)
        except BlobNotFoundError as exc:
            _set_outcome(span, "not_found")
            raise HTTPException(status_code=404, detail="Blob not found") from exc
        except BlobStoreError as exc:
            _set_outcome(span, "error")
            _logger.error("Failed to delete blob %s: %s", key, exc)
            raise HTTPException(status_code=500, detail="Failed to delete blob") from exc
        _set_outcome(span, "ok")
    return success_json("Blob deleted successfully")
