"""
gate/dependencies.py -- FastAPI Depends() helpers for the identity gate.

get_session_context() builds the SessionContext for a request on first use and
caches it on request.state, so a route, its dependencies, and the templates it
renders all share one context per request cycle.

try_get_identity() is the soft variant (returns None when absent).
require_identity() wraps it and raises HTTP 401 for JSON API routes. HTML
routes do not use it: they render the gate form in place instead.

Layer rule: no imports from web/, core/, or cache/.
  gate/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from gate.context import SessionContext
from gate.models import Identity
from gate.store import SessionStore


def get_session_context(request: Request) -> SessionContext:
    """Return the request's SessionContext, creating it from the cookie once.

    Requests that reach the app without SessionMiddleware in front have no
    "session" scope entry; the store then runs in its no-storage mode.
    """
    context = getattr(request.state, "session_context", None)
    if not isinstance(context, SessionContext):
        storage = request.session if "session" in request.scope else None
        context = SessionContext(SessionStore(storage))
        request.state.session_context = context
    return context


def try_get_identity(request: Request) -> Identity | None:
    """Return the visitor Identity, or None. Never raises."""
    return get_session_context(request).current


def require_identity(request: Request) -> Identity:
    """Require an identity. Raises HTTP 401 when none is stored.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: Identity = Depends(require_identity)): ...
    """
    identity = try_get_identity(request)
    if identity is None:
        raise HTTPException(
            status_code=401,
            detail={"code": "identity_required", "message": "Enter a username and job title first."},
        )
    return identity
