"""
client.py -- GraphQL data client for the public upstream APIs.
Both upstream APIs are free and need no credentials, so no auth headers are sent.
"""

import logging
from typing import Any, Optional

import requests

from cache.store import QueryCache
from core.config import APP_VERSION

logger = logging.getLogger("webteam.client")


class DataFetchError(Exception):
    """A list or detail fetch failed. str(exc) is safe to show to the visitor."""


def _build_session() -> requests.Session:
    # max_redirects=3 replaces the requests default of 30 -- these are known
    # public APIs and 3 hops is generous.
    session = requests.Session()
    session.max_redirects = 3
    session.headers.update(
        {
            "Accept": "application/json",
            "User-Agent": f"webteam-explorer/{APP_VERSION}",
        }
    )
    return session


def _describe(exc: requests.RequestException) -> str:
    """Turn a requests exception into a sentence a visitor can read."""
    if isinstance(exc, requests.Timeout):
        return "The data service did not respond in time."
    if isinstance(exc, requests.ConnectionError):
        return "Could not connect to the data service."
    if isinstance(exc, requests.HTTPError) and exc.response is not None:
        return f"The data service responded with HTTP {exc.response.status_code}."
    return "Failed to fetch data from the data service."


class GraphQLClient:
    """POSTs query documents to one fixed GraphQL endpoint.

    Responses that carry `data` are returned even when `errors` is also
    present (partial results are still rendered); a response with errors and
    no data raises DataFetchError with the first upstream message. Successful
    responses are cached per (endpoint, query, variables) when a QueryCache
    is supplied.
    """

    def __init__(
        self,
        endpoint: str,
        cache: Optional[QueryCache] = None,
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.endpoint = endpoint
        self._cache = cache
        self._timeout = timeout
        self._session = session or _build_session()

    def execute(self, query: str, variables: Optional[dict[str, Any]] = None) -> dict[str, Any]:
        """Run one query and return the response `data` object.

        Raises DataFetchError on transport failure, a non-JSON body, or a
        response that contains only errors. Never retries.
        """
        variables = variables or {}
        key: Optional[str] = None
        if self._cache is not None:
            key = QueryCache.key_for(self.endpoint, query, variables)
            cached = self._cache.get(key)
            if cached is not None:
                return cached

        try:
            resp = self._session.post(
                self.endpoint,
                json={"query": query, "variables": variables},
                timeout=self._timeout,
            )
            resp.raise_for_status()
        except requests.RequestException as e:
            logger.warning("GraphQL request to %s failed: %s", self.endpoint, e)
            raise DataFetchError(_describe(e)) from e

        try:
            body = resp.json()
        except ValueError as e:
            logger.warning("GraphQL response from %s was not JSON", self.endpoint)
            raise DataFetchError("The data service returned an unreadable response.") from e

        if not isinstance(body, dict):
            raise DataFetchError("The data service returned an unreadable response.")

        data = body.get("data")
        errors = body.get("errors") or []
        if not isinstance(errors, list):
            logger.warning("GraphQL response from %s has malformed errors", self.endpoint)
            raise DataFetchError("The data service returned an unreadable response.")
        if errors:
            first = errors[0].get("message") if isinstance(errors[0], dict) else str(errors[0])
            if not data:
                logger.warning("GraphQL errors from %s: %s", self.endpoint, first)
                raise DataFetchError(f"The data service reported an error: {first}")
            logger.warning("GraphQL partial response from %s: %s", self.endpoint, first)
            return data

        if not isinstance(data, dict):
            raise DataFetchError("The data service returned no data.")

        if self._cache is not None and key is not None:
            self._cache.set(key, data)
        return data

    def close(self) -> None:
        self._session.close()
