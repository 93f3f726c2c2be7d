from __future__ import annotations

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from starlette.requests import ClientDisconnect

from ..auth import require_api_token
from ..dependencies import get_blob_store
from ..providers.base import BlobStoreProvider
from ..services.blobs import delete_blob as service_delete_blob
from ..services.blobs import get_blob as service_get_blob
from ..services.blobs import list_blobs as service_list_blobs
from ..services.blobs import put_blob as service_put_blob


router = APIRouter(tags=["blobs"], dependencies=[Depends(require_api_token)])


@router.get("/blobs")
def list_blobs(prefix: str = "", store: BlobStoreProvider = Depends(get_blob_store)) -> JSONResponse:
    return service_list_blobs(store, prefix)


@router.get("/blobs/{key:path}")
def get_blob(
    key: str,
    accept: str | None = Header(default=None),
    store: BlobStoreProvider = Depends(get_blob_store),
) -> Response:
    return service_get_blob(store, key, accept)


@router.api_route("/blobs/{key:path}", methods=["PUT", "POST"])
async def put_blob(key: str, request: Request, store: BlobStoreProvider = Depends(get_blob_store)) -> JSONResponse:
    try:
        data = await request.body()
    except ClientDisconnect as exc:
        raise HTTPException(status_code=400, detail="Failed to read request body") from exc
    return await run_in_threadpool(service_put_blob, store, key, data)


@router.delete("/blobs/{key:path}")
def delete_blob(key: str, store: BlobStoreProvider = Depends(get_blob_store)) -> JSONResponse:
    return service_delete_blob(store, key)
