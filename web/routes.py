"""
web/routes.py -- Jinja2 template routes for the Web Team Explorer web UI.

These routes serve server-rendered HTML. They share app.state with the API
routes (same GraphQL clients and response cache) but return HTML instead of
JSON. The identity is read through gate.dependencies.get_session_context only.

Route registration order matters. FastAPI resolves same-level paths in order:
  GET /characters/rows and GET /launches/rows must be registered before
  GET /characters/{record_id} and GET /launches/{record_id}, or FastAPI
  captures "rows" as a record id.

Routes:
  GET  /                         -- gate form, or the home page once an identity exists
  POST /gate                     -- sign in / update identity, redirect to ?next
  GET  /profile                  -- gate form in "edit my info" mode
  POST /logout                   -- clear identity, redirect /
  GET  /characters               -- characters page shell (gate when no identity)
  GET  /characters/rows          -- HTMX: table + pagination for one page
  GET  /characters/{record_id}   -- HTMX: detail overlay body
  GET  /launches                 -- launches page shell (gate when no identity)
  GET  /launches/rows            -- HTMX: table + pagination for one page
  GET  /launches/{record_id}     -- HTMX: detail overlay body

List pages render the gate form in place of the table when no identity is
stored; nothing is fetched in that case. HTMX fragment routes answer the same
situation with an HX-Redirect to the full page, which then shows the gate.
"""

import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs, quote, urlsplit

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates

from core.config import APP_VERSION
from core.listing import DataSource, parse_page_param
from core.models import RECORD_ID_PATTERN
from gate.dependencies import get_session_context, try_get_identity
from gate.models import Identity

logger = logging.getLogger("webteam.web")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
# Expose try_get_identity as a Jinja2 global so layout.html can show the
# current visitor without every route handler passing it in explicitly.
templates.env.globals["try_get_identity"] = try_get_identity
templates.env.globals["app_version"] = APP_VERSION
router = APIRouter()

# ---------------------------------------------------------------------------
# Gate helpers
# ---------------------------------------------------------------------------

# Whitelist mapping for ?notice= query params.
# The raw query param is NEVER passed to templates -- only the message from
# this dict is. Prevents reflected XSS via crafted notice query strings.
_NOTICES: dict[str, str] = {
    "welcome": "Welcome! You can now access the application.",
    "updated": "Your information has been updated successfully.",
    "signed_out": "You have been signed out.",
}

_MAX_FIELD_LENGTH = 100

_TITLES = {"characters": "Characters", "launches": "SpaceX Launches"}


def _safe_next(next_url: Optional[str]) -> str:
    """Validate a post-gate redirect target. Only accept relative paths.

    Rejects absolute URLs and protocol-relative URLs (//host) so the gate
    form cannot be used as an open redirect.
    """
    if next_url and next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return "/"


def _with_notice(path: str, notice: str) -> str:
    separator = "&" if "?" in path else "?"
    return f"{path}{separator}notice={notice}"


def _gate_response(
    request: Request,
    next_url: str,
    error: Optional[str] = None,
    form_data: Optional[dict] = None,
) -> HTMLResponse:
    """Render the gate form. Update mode is chosen from the stored identity."""
    identity = try_get_identity(request)
    return templates.TemplateResponse(
        request,
        "gate.html",
        {
            "identity": identity,
            "error": error,
            "form_data": form_data or {},
            "next_url": next_url,
            "notice": _notice(request),
        },
    )


def _notice(request: Request) -> Optional[str]:
    return _NOTICES.get(request.query_params.get("notice", ""), None)


def _fragment_gate_redirect(full_page: str) -> Response:
    """Tell HTMX to load the full page, which renders the gate form."""
    return Response(status_code=200, headers={"HX-Redirect": full_page})


def _current_page(request: Request) -> int:
    """Page of the list an HTMX request was issued from (HX-Current-URL)."""
    query = urlsplit(request.headers.get("HX-Current-URL", "")).query
    values = parse_qs(query).get("page")
    return parse_page_param(values[0] if values else None)


def _source(request: Request, name: str) -> DataSource:
    return request.app.state.sources[name]


# ---------------------------------------------------------------------------
# Jinja2 filters
# ---------------------------------------------------------------------------


def _format_date(value: Optional[str]) -> str:
    """Render an upstream ISO timestamp as e.g. "Mar 24, 2006"."""
    if not value:
        return "Unknown"
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return value
    return f"{parsed.strftime('%b')} {parsed.day}, {parsed.year}"


templates.env.filters["format_date"] = _format_date


# ---------------------------------------------------------------------------
# GET / -- gate or home
# ---------------------------------------------------------------------------


@router.get("/", response_class=HTMLResponse)
def home(request: Request) -> HTMLResponse:
    identity = try_get_identity(request)
    if identity is None:
        return _gate_response(request, next_url="/")
    return templates.TemplateResponse(
        request,
        "home.html",
        {"identity": identity, "notice": _notice(request)},
    )


# ---------------------------------------------------------------------------
# POST /gate -- sign in or update
# ---------------------------------------------------------------------------


@router.post("/gate", response_class=HTMLResponse)
def gate_submit(
    request: Request,
    username: str = Form(default=""),
    job_title: str = Form(default=""),
    next_url: str = Form(default="/", alias="next"),
) -> Response:
    """Validate the gate form and store the identity.

    Blank fields re-render the form with a message and leave any stored
    identity untouched. A visitor who already has an identity is updating it.
    """
    username_clean = username.strip()
    job_title_clean = job_title.strip()
    target = _safe_next(next_url)
    form_data = {"username": username, "job_title": job_title}

    if not username_clean or not job_title_clean:
        return _gate_response(
            request,
            next_url=target,
            error="Please fill in both username and job title.",
            form_data=form_data,
        )
    if len(username_clean) > _MAX_FIELD_LENGTH or len(job_title_clean) > _MAX_FIELD_LENGTH:
        return _gate_response(
            request,
            next_url=target,
            error=f"Username and job title must be {_MAX_FIELD_LENGTH} characters or fewer.",
            form_data=form_data,
        )

    context = get_session_context(request)
    if context.is_present:
        context.update(Identity(username=username_clean, job_title=job_title_clean))
        notice = "updated"
    else:
        context.sign_in(username_clean, job_title_clean)
        notice = "welcome"
    logger.info("Identity stored (%s)", notice)
    return RedirectResponse(_with_notice(target, notice), status_code=303)


# ---------------------------------------------------------------------------
# GET /profile -- edit my info
# ---------------------------------------------------------------------------


@router.get("/profile", response_class=HTMLResponse)
def profile(request: Request) -> HTMLResponse:
    """Gate form pre-filled with the current identity (update mode)."""
    identity = try_get_identity(request)
    form_data = {"username": identity.username, "job_title": identity.job_title} if identity else {}
    return _gate_response(request, next_url="/", form_data=form_data)


# ---------------------------------------------------------------------------
# POST /logout
# ---------------------------------------------------------------------------


@router.post("/logout")
def logout(request: Request) -> RedirectResponse:
    """Clear the stored identity and return to the gate."""
    get_session_context(request).sign_out()
    return RedirectResponse(_with_notice("/", "signed_out"), status_code=303)


# ---------------------------------------------------------------------------
# Generic list view
# ---------------------------------------------------------------------------


def _list_page(request: Request, name: str, page_raw: Optional[str]) -> HTMLResponse:
    """Page shell. The table itself is fetched by HTMX from /{name}/rows."""
    page = parse_page_param(page_raw)
    full_page = f"/{name}?page={page}"
    if try_get_identity(request) is None:
        return _gate_response(request, next_url=full_page)
    return templates.TemplateResponse(
        request,
        "list_page.html",
        {
            "name": name,
            "title": _TITLES[name],
            "page": page,
            "notice": _notice(request),
        },
    )


def _list_rows(request: Request, name: str, page_raw: Optional[str]) -> Response:
    """Fetch one page and render the table fragment (or the error state)."""
    page = parse_page_param(page_raw)
    if try_get_identity(request) is None:
        return _fragment_gate_redirect(f"/{name}?page={page}")
    result = _source(request, name).page(page)
    if result.error:
        logger.info("%s page %d failed: %s", name, page, result.error)
    return templates.TemplateResponse(
        request,
        f"partials/{name}_table.html",
        {"name": name, "result": result},
    )


def _detail(request: Request, name: str, record_id: str) -> Response:
    """Fetch one record and render the overlay body (or an inline error)."""
    if try_get_identity(request) is None:
        return _fragment_gate_redirect(f"/{name}?page={_current_page(request)}")
    if not re.fullmatch(RECORD_ID_PATTERN, record_id):
        return templates.TemplateResponse(
            request,
            "partials/detail_error.html",
            {"error": f"'{record_id[:40]}' is not a valid id."},
        )
    result = _source(request, name).detail(record_id)
    if result.error:
        return templates.TemplateResponse(
            request,
            "partials/detail_error.html",
            {"error": result.error},
        )
    return templates.TemplateResponse(
        request,
        f"partials/{name}_detail.html",
        {"record": result.record},
    )


def _page_url(name: str, page: int) -> str:
    return f"/{name}?page={page}"


def _rows_url(name: str, page: int) -> str:
    return f"/{name}/rows?page={page}"


def _detail_url(name: str, record_id: str) -> str:
    return f"/{name}/{quote(record_id, safe='')}"


templates.env.globals["page_url"] = _page_url
templates.env.globals["rows_url"] = _rows_url
templates.env.globals["detail_url"] = _detail_url


# ---------------------------------------------------------------------------
# Characters (rows registered BEFORE /characters/{record_id})
# ---------------------------------------------------------------------------


@router.get("/characters", response_class=HTMLResponse)
def characters_page(request: Request, page: Optional[str] = None) -> HTMLResponse:
    return _list_page(request, "characters", page)


@router.get("/characters/rows", response_class=HTMLResponse)
def characters_rows(request: Request, page: Optional[str] = None) -> Response:
    return _list_rows(request, "characters", page)


@router.get("/characters/{record_id}", response_class=HTMLResponse)
def character_detail(request: Request, record_id: str) -> Response:
    return _detail(request, "characters", record_id)


# ---------------------------------------------------------------------------
# Launches (rows registered BEFORE /launches/{record_id})
# ---------------------------------------------------------------------------


@router.get("/launches", response_class=HTMLResponse)
def launches_page(request: Request, page: Optional[str] = None) -> HTMLResponse:
    return _list_page(request, "launches", page)


@router.get("/launches/rows", response_class=HTMLResponse)
def launches_rows(request: Request, page: Optional[str] = None) -> Response:
    return _list_rows(request, "launches", page)


@router.get("/launches/{record_id}", response_class=HTMLResponse)
def launch_detail(request: Request, record_id: str) -> Response:
    return _detail(request, "launches", record_id)
