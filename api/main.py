"""
api/main.py -- FastAPI application entry point for Web Team Explorer.

Exposes the session and dataset operations as JSON so scripts and the web UI
share one set of routes and one app.state.

Run with:      uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. log_requests      -- method, path, status, and latency for every request
  2. SessionMiddleware -- signed client-side cookie holding the visitor identity

Starlette wraps each newly registered middleware around the existing stack, so
log_requests (registered last) is the outermost layer.

Lifespan handles startup (response cache, GraphQL clients, purge task) and
shutdown (cancel purge task, close clients and cache) symmetrically.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.sessions import SessionMiddleware

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.datasets import router as datasets_router
from api.routes.v1.session import router as session_router
from cache.store import QueryCache
from core.client import GraphQLClient
from core.config import APP_VERSION, get_settings
from core.listing import DataSource, characters_dataset, launches_dataset

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("webteam.api")

_settings = get_settings()

# ---------------------------------------------------------------------------
# Background purge task
# ---------------------------------------------------------------------------


async def _purge_loop(app: FastAPI) -> None:
    """Purge expired cache entries once per TTL period.

    CancelledError from task.cancel() during shutdown propagates out of
    asyncio.sleep and unwinds the coroutine cleanly.
    """
    while True:
        await asyncio.sleep(max(60, _settings.cache_ttl_seconds))
        removed = app.state.cache.purge_expired()
        if removed:
            logger.info("Purged %d expired cache entries", removed)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Startup order matters:
      1. Cache first -- both clients write through it.
      2. Clients second, one per upstream endpoint.
      3. Purge task last -- references app.state.cache.
    """
    logger.info("Web Team Explorer starting up")
    cache = QueryCache(ttl=_settings.cache_ttl_seconds) if _settings.cache_enabled else None
    app.state.cache = cache
    logger.info("Response cache %s", "enabled" if cache is not None else "disabled")

    characters_client = GraphQLClient(
        _settings.characters_graphql_url, cache=cache, timeout=_settings.request_timeout
    )
    launches_client = GraphQLClient(_settings.launches_graphql_url, cache=cache, timeout=_settings.request_timeout)
    app.state.sources = {
        "characters": DataSource(characters_dataset(), characters_client),
        "launches": DataSource(launches_dataset(_settings.launches_page_size), launches_client),
    }
    logger.info(
        "GraphQL clients ready (characters=%s, launches=%s)",
        _settings.characters_graphql_url,
        _settings.launches_graphql_url,
    )
    app.state.purge_task = asyncio.create_task(_purge_loop(app)) if cache is not None else None

    yield

    # Shutdown
    if app.state.purge_task is not None:
        app.state.purge_task.cancel()
    characters_client.close()
    launches_client.close()
    if cache is not None:
        cache.close()
    logger.info("Web Team Explorer shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Web Team Explorer API",
    description="Identity-gated browser for public GraphQL datasets (characters and launches).",
    version=APP_VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

# The visitor identity lives in this signed cookie and nowhere else. The
# server keeps no copy; clearing the cookie signs the visitor out.
app.add_middleware(
    SessionMiddleware,
    secret_key=_settings.secret_key,
    session_cookie=_settings.session_cookie,
    max_age=_settings.session_max_age,
    same_site="lax",
    https_only=_settings.secure_cookies,
)


# ---------------------------------------------------------------------------
# Request logging middleware
#
# Every request passes through this coroutine before reaching any route
# handler. Wall-clock time is captured around call_next to report latency.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(session_router, prefix="/api/v1", tags=["Session"])
app.include_router(datasets_router, prefix="/api/v1", tags=["Datasets"])
# Web UI router is mounted by asgi.py, not here.
# api/ and web/ are independent layers -- only the top-level asgi.py imports both.


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every error leaves the API as {"error": {code, message, detail}}. HTML routes
# never raise these; they render their errors inline.
# ---------------------------------------------------------------------------


def _envelope(status_code: int, code: str, message: str, detail: str | None = None) -> JSONResponse:
    body = ErrorResponse(error=ErrorDetail(code=code, message=message, detail=detail))
    return JSONResponse(status_code=status_code, content=body.model_dump())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """422 for bad bodies or query params, e.g. a blank username on PUT /session."""
    return _envelope(422, "validation_error", "Request validation failed.", str(exc.errors()))


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Pass structured details through as the error object.

    Routes and gate.dependencies raise HTTPException with a dict detail
    (ErrorDetail.model_dump() or an equivalent literal). A plain string detail
    is wrapped in the envelope.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})
    return _envelope(exc.status_code, f"http_{exc.status_code}", str(exc.detail))


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log the traceback; the client only sees a generic 500."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _envelope(500, "internal_error", "An unexpected error occurred.")


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state. No identity required.
# ---------------------------------------------------------------------------


@app.get("/api/v1/health", include_in_schema=True, tags=["Health"])
async def health() -> HealthResponse:
    """Return API liveness and current version."""
    return HealthResponse(version=APP_VERSION)
