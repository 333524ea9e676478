"""
api/routes/v1/session.py -- JSON access to the visitor identity.

Routes:
  GET    /api/v1/session  -- current identity (401 when none is stored)
  PUT    /api/v1/session  -- sign in, or replace the existing identity
  DELETE /api/v1/session  -- sign out; 204 whether or not an identity existed

The identity travels in the same signed session cookie the web UI uses, so a
browser that signed in through the gate form sees the same identity here.
All reads and writes go through SessionContext, never the cookie directly.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from api.models import IdentityRequest, IdentityResponse
from gate.context import SessionContext
from gate.dependencies import get_session_context, require_identity
from gate.models import Identity

router = APIRouter()


@router.get("/session", response_model=IdentityResponse)
def read_session(identity: Identity = Depends(require_identity)) -> IdentityResponse:
    return IdentityResponse.from_identity(identity)


@router.put("/session", response_model=IdentityResponse)
def write_session(
    body: IdentityRequest,
    context: SessionContext = Depends(get_session_context),
) -> IdentityResponse:
    """Sign in when no identity exists; otherwise replace it wholesale."""
    if context.is_present:
        context.update(Identity(username=body.username, job_title=body.job_title))
    else:
        context.sign_in(body.username, body.job_title)
    return IdentityResponse.from_identity(context.current)


@router.delete("/session", status_code=204)
def delete_session(context: SessionContext = Depends(get_session_context)) -> Response:
    context.sign_out()
    return Response(status_code=204)
