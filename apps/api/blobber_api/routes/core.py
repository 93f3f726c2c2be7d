from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..dependencies import get_blob_store
from ..providers.base import BlobStoreProvider
from ..services.core import healthz as service_healthz
from ..services.core import home as service_home
from ..services.core import readyz as service_readyz


router = APIRouter(tags=["core"])


@router.get("/")
def home(store: BlobStoreProvider = Depends(get_blob_store)) -> dict[str, str]:
    return service_home(store)


@router.get("/healthz")
def healthz(store: BlobStoreProvider = Depends(get_blob_store)) -> JSONResponse:
    return service_healthz(store)


@router.get("/readyz")
def readyz() -> JSONResponse:
    return service_readyz()
