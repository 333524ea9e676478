"""
api/routes/v1/datasets.py -- JSON list and detail endpoints for both datasets.

Route registration order: each list route is a literal path and each detail
route takes an {record_id} path param; they do not overlap, but list routes are
still registered first for readability.

Every route requires a stored identity (router-level dependency). Upstream
failures are not retried: they become 502 upstream_error with the same
human-readable message the web UI shows.
"""

import re
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request

from api.models import ErrorDetail, PageResponse
from core.listing import DataSource, parse_page_param
from core.models import RECORD_ID_PATTERN
from gate.dependencies import require_identity

# Auth policy: every dataset route requires an identity.
# Router-level dependency enforces it; handlers do not repeat it.
router = APIRouter(dependencies=[Depends(require_identity)])


def _source(request: Request, name: str) -> DataSource:
    return request.app.state.sources[name]


def _upstream_error(message: str) -> HTTPException:
    return HTTPException(
        status_code=502,
        detail=ErrorDetail(code="upstream_error", message=message).model_dump(),
    )


def _list(request: Request, name: str, page: Optional[str]) -> PageResponse:
    result = _source(request, name).page(parse_page_param(page))
    if result.error:
        raise _upstream_error(result.error)
    return PageResponse.from_result(result)


def _detail(request: Request, name: str, record_id: str) -> dict:
    # Input validation at the boundary -- never pass unvalidated ids upstream.
    if not re.fullmatch(RECORD_ID_PATTERN, record_id):
        raise HTTPException(
            status_code=400,
            detail=ErrorDetail(
                code="invalid_id",
                message="Invalid record id.",
                detail=f"{record_id[:50]} is not a valid id.",
            ).model_dump(),
        )
    result = _source(request, name).detail(record_id)
    if result.not_found:
        raise HTTPException(
            status_code=404,
            detail=ErrorDetail(code="not_found", message=result.error).model_dump(),
        )
    if result.error:
        raise _upstream_error(result.error)
    return asdict(result.record)


@router.get("/characters", response_model=PageResponse)
def list_characters(request: Request, page: Optional[str] = None) -> PageResponse:
    """Return one page of characters. ?page= defaults to 1; junk values mean 1."""
    return _list(request, "characters", page)


@router.get("/launches", response_model=PageResponse)
def list_launches(request: Request, page: Optional[str] = None) -> PageResponse:
    """Return one page of launches. total_pages is always null for this dataset."""
    return _list(request, "launches", page)


@router.get("/characters/{record_id}")
def get_character(request: Request, record_id: str) -> dict:
    return _detail(request, "characters", record_id)


@router.get("/launches/{record_id}")
def get_launch(request: Request, record_id: str) -> dict:
    return _detail(request, "launches", record_id)
