"""
API request and response models for Web Team Explorer REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in core/models.py and
gate/models.py, which own the internal domain representation. Route handlers
map between the two.
"""

from dataclasses import asdict
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from core.listing import ListingResult
from gate.models import Identity

# Same bound the gate form enforces.
MAX_FIELD_LENGTH = 100


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class IdentityRequest(BaseModel):
    """Request body for PUT /api/v1/session.

    str_strip_whitespace runs before min_length, so "   " is rejected the same
    way the gate form rejects it.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(min_length=1, max_length=MAX_FIELD_LENGTH)
    job_title: str = Field(min_length=1, max_length=MAX_FIELD_LENGTH)


class IdentityResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str
    job_title: str

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentityResponse":
        return cls(username=identity.username, job_title=identity.job_title)


# ---------------------------------------------------------------------------
# Datasets
# ---------------------------------------------------------------------------


class PageResponse(BaseModel):
    """One page of a dataset.

    total_pages is null for datasets whose upstream gives no total (launches);
    has_next is then always true.
    """

    model_config = ConfigDict(frozen=True)

    page: int
    total_pages: Optional[int]
    has_previous: bool
    has_next: bool
    items: list[dict[str, Any]]

    @classmethod
    def from_result(cls, result: ListingResult) -> "PageResponse":
        """Map a successful ListingResult. Callers handle result.error first."""
        listing = result.listing
        return cls(
            page=result.page,
            total_pages=listing.total_pages if listing else None,
            has_previous=result.has_previous,
            has_next=result.has_next,
            items=[asdict(item) for item in listing.items] if listing else [],
        )


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "ok"
    version: str
