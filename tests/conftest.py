"""
tests/conftest.py -- Shared test fixtures for Web Team Explorer tests.

This module provides:
  - upstream: a pair of MagicMock GraphQL clients (characters, launches)
  - _patch_lifespan(): wires the mocked clients into app.state, bypassing real startup
  - web_client: TestClient with follow_redirects=False for web route tests
  - api_client: TestClient for JSON API tests
  - make_character / make_launch / characters_data / launches_data: payload
    factories shaped like the upstream GraphQL `data` objects

Design: the clients are function-scoped, not module-scoped. The identity lives
in the session cookie held by the TestClient cookie jar, so each test needs a
fresh jar to start from "no identity stored". Mocks are fresh per test so call
counts can be asserted without bleed-over.

The DEBUG env var must be set before any core import so get_settings()
auto-generates SECRET_KEY in dev mode rather than raising ValueError.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator
from contextlib import asynccontextmanager
from types import SimpleNamespace
from typing import Any, Optional
from unittest.mock import MagicMock

# CRITICAL: Set DEBUG before any core import so get_settings() can
# auto-generate SECRET_KEY in dev mode instead of raising ValueError.
os.environ.setdefault("DEBUG", "true")
# Keep the real lifespan (if it ever runs) from writing a cache DB.
os.environ.setdefault("CACHE_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient

from asgi import app
from core.client import GraphQLClient
from core.listing import DataSource, characters_dataset, launches_dataset

# ---------------------------------------------------------------------------
# Upstream mocks
# ---------------------------------------------------------------------------


@pytest.fixture
def upstream() -> SimpleNamespace:
    """Two mocked GraphQL clients. Tests set execute.return_value / side_effect."""
    return SimpleNamespace(
        characters=MagicMock(spec=GraphQLClient),
        launches=MagicMock(spec=GraphQLClient),
    )


def _patch_lifespan(upstream: SimpleNamespace):
    """Return an async context manager that replaces the real lifespan.

    Wires the mocked clients into app.state.sources so route handlers run
    their real loading and rendering code without any network call. No cache
    and no purge task: every request reaches the mock.
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.cache = None
        app.state.sources = {
            "characters": DataSource(characters_dataset(), upstream.characters),
            "launches": DataSource(launches_dataset(page_size=10), upstream.launches),
        }
        app.state.purge_task = None
        yield

    return test_lifespan


@pytest.fixture
def web_client(upstream: SimpleNamespace) -> Generator[TestClient, None, None]:
    """Yield a TestClient for web route tests.

    follow_redirects=False is essential for web route tests: we assert on
    redirect *locations* (e.g. 303 to /?notice=welcome), which are invisible
    once the client follows the redirect and returns the final 200 response.
    """
    app.router.lifespan_context = _patch_lifespan(upstream)
    with TestClient(app, follow_redirects=False, raise_server_exceptions=True) as client:
        yield client


@pytest.fixture
def api_client(upstream: SimpleNamespace) -> Generator[TestClient, None, None]:
    app.router.lifespan_context = _patch_lifespan(upstream)
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client


def sign_in(client: TestClient, username: str = "ana", job_title: str = "eng") -> None:
    """Store an identity in the client's cookie jar through the gate form."""
    resp = client.post("/gate", data={"username": username, "job_title": job_title, "next": "/"})
    assert resp.status_code == 303, f"Gate submit failed: {resp.status_code} {resp.text}"


@pytest.fixture
def signed_in_client(web_client: TestClient) -> TestClient:
    sign_in(web_client)
    return web_client


# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------


@pytest.fixture
def make_character() -> Callable[..., dict[str, Any]]:
    def _make(char_id: int, name: Optional[str] = None, status: str = "Alive", **extra: Any) -> dict[str, Any]:
        record = {
            "id": str(char_id),
            "name": name or f"Character {char_id}",
            "status": status,
            "species": "Human",
            "type": "",
            "gender": "Male",
            "origin": {"name": "Earth (C-137)"},
            "location": {"name": "Citadel of Ricks"},
            "image": f"https://rickandmortyapi.com/api/character/avatar/{char_id}.jpeg",
            "episode": [{"id": "1", "name": "Pilot"}],
            "created": "2017-11-04T18:48:46.250Z",
        }
        record.update(extra)
        return record

    return _make


@pytest.fixture
def characters_data(make_character) -> Callable[..., dict[str, Any]]:
    """Build a GetCharacters `data` object for one page of `size` records."""

    def _data(page: int, pages: int = 42, size: int = 20) -> dict[str, Any]:
        first = (page - 1) * size + 1
        return {
            "characters": {
                "info": {
                    "count": pages * size,
                    "pages": pages,
                    "next": page + 1 if page < pages else None,
                    "prev": page - 1 if page > 1 else None,
                },
                "results": [make_character(i) for i in range(first, first + size)],
            }
        }

    return _data


@pytest.fixture
def make_launch() -> Callable[..., dict[str, Any]]:
    def _make(launch_id: int, success: Optional[bool] = True, **extra: Any) -> dict[str, Any]:
        record = {
            "id": str(launch_id),
            "mission_name": f"Mission {launch_id}",
            "launch_date_utc": "2006-03-24T22:30:00.000Z",
            "launch_success": success,
            "rocket": {"rocket_name": "Falcon 1"},
            "links": {"mission_patch_small": None},
        }
        record.update(extra)
        return record

    return _make


@pytest.fixture
def launches_data(make_launch) -> Callable[..., dict[str, Any]]:
    """Build a GetLaunches `data` object from the limit/offset variables."""

    def _data(limit: int = 10, offset: int = 0) -> dict[str, Any]:
        return {"launches": [make_launch(i) for i in range(offset + 1, offset + limit + 1)]}

    return _data
