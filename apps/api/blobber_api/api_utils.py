from __future__ import annotations

from fastapi import HTTPException

from .responses import CONTENT_TYPE_OCTET_STREAM


def require_key_or_400(value: str | None) -> str:
    # Keys are opaque: whitespace is part of the key.
    if not value:
        raise HTTPException(status_code=400, detail="Key is required")
    return value


def content_type_from_accept(accept: str | None) -> str:
    """
    Uses the caller's Accept header as the response type when it names exactly one
    concrete media type, e.g. `application/json`. Lists, wildcards and absent headers
    fall back to `application/octet-stream`.
    """
    value = (accept or "").strip()
    if not value or "," in value:
        return CONTENT_TYPE_OCTET_STREAM
    media_type = value.split(";", 1)[0].strip()
    if "*" in media_type or "/" not in media_type:
        return CONTENT_TYPE_OCTET_STREAM
    return value
