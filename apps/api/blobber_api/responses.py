from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse
from pydantic import BaseModel


CONTENT_TYPE_JSON = "application/json"
CONTENT_TYPE_OCTET_STREAM = "application/octet-stream"


class StatusResponse(BaseModel):
    success: bool
    error: bool | None = None
    message: str


class Pagination(BaseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int


class PaginatedResponse(BaseModel):
    items: list[Any]
    pagination: Pagination


def success_json(message: str, status_code: int = 200) -> JSONResponse:
    body = StatusResponse(success=True, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def error_json(message: str, status_code: int) -> JSONResponse:
    body = StatusResponse(success=False, error=True, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def single_page(items: list[Any]) -> PaginatedResponse:
    """
    Wraps a fully drained result set as page 1 of 1.
    """
    total = len(items)
    return PaginatedResponse(
        items=items,
        pagination=Pagination(page=1, page_size=total, total_items=total, total_pages=1),
    )


def paginated_json(items: list[Any]) -> JSONResponse:
    return JSONResponse(status_code=200, content=single_page(items).model_dump())
