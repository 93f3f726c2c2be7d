from __future__ import annotations

import logging

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from .responses import error_json

_logger = logging.getLogger(__name__)

ALLOWED_METHODS = ("GET", "POST", "PUT", "DELETE", "OPTIONS")
ALLOWED_HEADERS = ("Origin", "X-Requested-With", "Content-Type", "Accept", "Authorization", "X-API-Token")
MAX_AGE_SECONDS = 86400

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": ", ".join(ALLOWED_METHODS),
    "Access-Control-Allow-Headers": ", ".join(ALLOWED_HEADERS),
    "Access-Control-Max-Age": str(MAX_AGE_SECONDS),
}


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """
    Adds the fixed CORS headers to every response and answers every OPTIONS request
    itself with an empty 204, before routing and before any token check.

    Unhandled errors are rendered here as the 500 envelope so they carry the headers too;
    the app-level handler sits outside this middleware.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.method == "OPTIONS":
            response = Response(status_code=204)
        else:
            try:
                response = await call_next(request)
            except Exception:  # noqa: BLE001
                _logger.exception("Unhandled error for %s %s", request.method, request.url.path)
                response = error_json("Internal server error", 500)
        response.headers.update(CORS_HEADERS)
        return response
