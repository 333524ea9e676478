"""
gate/context.py -- The current visitor identity for one request cycle.

SessionContext is built once per request (see gate/dependencies.py) by loading
from a SessionStore. Every view, template, and API route reads the identity
through it; mutations go through sign_in / update / sign_out, which keep the
in-memory copy and the stored copy in step. Mutations are visible immediately
to everything else handling the same request.

Layer rule: no imports from api/, web/, core/, or cache/.
"""

from __future__ import annotations

import logging

from gate.models import Identity
from gate.store import SessionStore

logger = logging.getLogger("webteam.gate")


class SessionContext:
    def __init__(self, store: SessionStore) -> None:
        self._store = store
        self._current: Identity | None = store.load()

    @property
    def current(self) -> Identity | None:
        return self._current

    @property
    def is_present(self) -> bool:
        return self._current is not None

    def sign_in(self, username: str, job_title: str) -> None:
        """Create and store a new Identity.

        Does nothing when either field is blank. Callers validate first; the
        gate form never gets here with an empty field.
        """
        if not username.strip() or not job_title.strip():
            logger.debug("sign_in ignored: empty field")
            return
        self._replace(Identity(username=username, job_title=job_title))

    def update(self, identity: Identity) -> None:
        """Replace the existing identity wholesale (the "edit my info" flow)."""
        if not identity.username.strip() or not identity.job_title.strip():
            logger.debug("update ignored: empty field")
            return
        self._replace(identity)

    def sign_out(self) -> None:
        self._current = None
        self._store.clear()

    def _replace(self, identity: Identity) -> None:
        self._current = identity
        self._store.save(identity)
