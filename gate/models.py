"""
gate/models.py -- Domain dataclass for the visitor identity.

Pattern: Data class (pure data container, zero logic). Serialization lives in
gate/store.py; mutation rules live in gate/context.py.

Layer rule: no imports from api/, web/, core/, or cache/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """The username + job title pair that gates access to the data pages.

    Zero or one exists per browser. Frozen: an "update" replaces the whole
    record rather than editing a field in place.
    """

    username: str
    job_title: str
