from __future__ import annotations

import logging

from fastapi import Depends, Header, HTTPException

from .dependencies import get_secret_store
from .secret_store import SecretStore, SecretStoreError

_logger = logging.getLogger(__name__)

API_TOKEN_HEADER = "X-API-Token"


def require_api_token(
    x_api_token: str | None = Header(default=None, alias=API_TOKEN_HEADER),
    store: SecretStore = Depends(get_secret_store),
) -> None:
    """
    Gate for the protected routes. Attach with `dependencies=[Depends(require_api_token)]`.
    """
    if not x_api_token:
        raise HTTPException(status_code=401, detail="Missing API token")

    try:
        valid = store.validate_token(x_api_token)
    except SecretStoreError as exc:
        _logger.error("API token validation failed: %s", exc)
        raise HTTPException(status_code=500, detail="Error validating API token") from exc

    if not valid:
        raise HTTPException(status_code=401, detail="Invalid API token")
