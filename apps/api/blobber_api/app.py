from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import DEFAULT_CONFIG_PATH, AppConfig, load_config
from .cors import CORSHeadersMiddleware
from .providers.base import BlobStoreProvider
from .providers.factory import get_blob_store_provider
from .responses import error_json
from .routes.blobs import router as blobs_router
from .routes.core import router as core_router
from .secret_store import SecretStore, get_secret_store
from .services.core import APP_TITLE, APP_VERSION

_logger = logging.getLogger(__name__)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    response = error_json(str(exc.detail), exc.status_code)
    if exc.headers:
        response.headers.update(exc.headers)
    return response


async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_json("Invalid request", 400)


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    _logger.exception("Unhandled error for %s %s", request.method, request.url.path)
    return error_json("Internal server error", 500)


def create_app(blob_store: BlobStoreProvider, secret_store: SecretStore) -> FastAPI:
    """
    Wires the HTTP surface around an already constructed blob store and secret store.
    Both are shared by every request for the lifetime of the app.
    """
    app = FastAPI(title=APP_TITLE, version=APP_VERSION)
    app.state.blob_store = blob_store
    app.state.secret_store = secret_store

    app.add_middleware(CORSHeadersMiddleware)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)

    app.include_router(core_router)
    app.include_router(blobs_router)

    return app


def create_app_from_config(config: AppConfig) -> FastAPI:
    blob_store = get_blob_store_provider(config)
    secret_store = get_secret_store(config.auth)
    _logger.info("Blob store ready (provider=%s)", blob_store.provider_name)
    return create_app(blob_store, secret_store)


def build_app() -> FastAPI:
    """
    Factory for `uvicorn blobber_api.app:build_app --factory`; reads the config path from
    `BLOBBER_CONFIG`.
    """
    return create_app_from_config(load_config(os.environ.get("BLOBBER_CONFIG", DEFAULT_CONFIG_PATH)))
