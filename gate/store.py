"""
gate/store.py -- Client-side persistence for the visitor Identity.

Pattern: Repository + Data Mapper. SessionStore is the repository over one
fixed key of the client's session storage; _serialize / _deserialize are the
mappers. Views never read the key directly -- they go through SessionContext.

Storage: the Starlette session, a signed cookie held by the browser. The value
under IDENTITY_KEY is a JSON string {"username": ..., "jobTitle": ...}. Reads
and writes are whole-value; there is no partial update.

Degraded mode: when no storage is available (a request rendered without a
session scope) every operation is a no-op and load() returns None. That is
not an error.

Layer rule: no imports from api/, web/, core/, or cache/.
"""

from __future__ import annotations

import json
import logging
from collections.abc import MutableMapping
from typing import Any

from gate.models import Identity

logger = logging.getLogger("webteam.gate")

IDENTITY_KEY = "identity"


# ---------------------------------------------------------------------------
# Mappers
# ---------------------------------------------------------------------------


def _serialize(identity: Identity) -> str:
    return json.dumps({"username": identity.username, "jobTitle": identity.job_title})


def _deserialize(raw: Any) -> Identity:
    """Parse a stored value. Raises ValueError if it is not an Identity."""
    if not isinstance(raw, str):
        raise ValueError("stored identity is not a string")
    payload = json.loads(raw)  # json.JSONDecodeError is a ValueError
    if not isinstance(payload, dict):
        raise ValueError("stored identity is not an object")
    username = payload.get("username")
    job_title = payload.get("jobTitle")
    if not isinstance(username, str) or not isinstance(job_title, str):
        raise ValueError("stored identity is missing fields")
    if not username.strip() or not job_title.strip():
        raise ValueError("stored identity has empty fields")
    return Identity(username=username, job_title=job_title)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class SessionStore:
    """Repository for the single stored Identity.

    Usage:
        store = SessionStore(request.session)
        store.save(Identity(username="ana", job_title="eng"))
        identity = store.load()
        store.clear()
    """

    def __init__(self, storage: MutableMapping[str, Any] | None) -> None:
        self._storage = storage

    @property
    def available(self) -> bool:
        return self._storage is not None

    def load(self) -> Identity | None:
        """Return the stored Identity, or None.

        An unreadable value is purged so the next load starts clean.
        """
        if self._storage is None:
            return None
        raw = self._storage.get(IDENTITY_KEY)
        if raw is None:
            return None
        try:
            return _deserialize(raw)
        except ValueError as e:
            logger.warning("Discarding unreadable stored identity: %s", e)
            self._storage.pop(IDENTITY_KEY, None)
            return None

    def save(self, identity: Identity) -> None:
        """Write the identity, replacing any prior value."""
        if self._storage is None:
            return
        self._storage[IDENTITY_KEY] = _serialize(identity)

    def clear(self) -> None:
        if self._storage is None:
            return
        self._storage.pop(IDENTITY_KEY, None)
