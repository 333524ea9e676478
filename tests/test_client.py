"""Unit tests for core/client.py -- GraphQLClient against a mocked requests.Session.

No network: the session is a MagicMock whose post() returns a MagicMock
response. raise_for_status and json are configured per test.
"""

from unittest.mock import MagicMock

import pytest
import requests

from cache.store import QueryCache
from core.client import DataFetchError, GraphQLClient

ENDPOINT = "https://example.test/graphql"
QUERY = "query Q($page: Int!) { characters(page: $page) { results { id } } }"


def _response(body=None, status=200, json_error=False):
    resp = MagicMock()
    resp.status_code = status
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(response=resp)
    if json_error:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = body
    return resp


def _client(resp=None, side_effect=None, cache=None):
    session = MagicMock(spec=requests.Session)
    if side_effect is not None:
        session.post.side_effect = side_effect
    else:
        session.post.return_value = resp
    return GraphQLClient(ENDPOINT, cache=cache, timeout=5.0, session=session), session


class TestExecute:
    def test_posts_query_and_variables(self):
        client, session = _client(_response({"data": {"characters": {"results": []}}}))
        data = client.execute(QUERY, {"page": 2})
        assert data == {"characters": {"results": []}}
        session.post.assert_called_once_with(
            ENDPOINT,
            json={"query": QUERY, "variables": {"page": 2}},
            timeout=5.0,
        )

    def test_partial_data_with_errors_is_returned(self, caplog):
        body = {"data": {"characters": {"results": []}}, "errors": [{"message": "field deprecated"}]}
        client, _ = _client(_response(body))
        with caplog.at_level("WARNING", logger="webteam.client"):
            assert client.execute(QUERY, {"page": 1}) == {"characters": {"results": []}}
        assert "field deprecated" in caplog.text

    def test_errors_without_data_raise_first_message(self):
        body = {"data": None, "errors": [{"message": "Bad page"}, {"message": "second"}]}
        client, _ = _client(_response(body))
        with pytest.raises(DataFetchError, match="Bad page"):
            client.execute(QUERY, {"page": 1})

    def test_missing_data_raises(self):
        client, _ = _client(_response({}))
        with pytest.raises(DataFetchError, match="no data"):
            client.execute(QUERY, {"page": 1})

    def test_non_json_body_raises(self):
        client, _ = _client(_response(json_error=True))
        with pytest.raises(DataFetchError, match="unreadable"):
            client.execute(QUERY, {"page": 1})

    @pytest.mark.parametrize("errors", [{"message": "boom"}, "boom"])
    def test_malformed_errors_field_raises(self, errors):
        client, _ = _client(_response({"errors": errors}))
        with pytest.raises(DataFetchError, match="unreadable"):
            client.execute(QUERY, {"page": 1})

    def test_non_object_body_raises(self):
        client, _ = _client(_response(["not", "an", "object"]))
        with pytest.raises(DataFetchError, match="unreadable"):
            client.execute(QUERY, {"page": 1})


class TestTransportErrors:
    @pytest.mark.parametrize(
        "exc,message",
        [
            (requests.Timeout("slow"), "did not respond in time"),
            (requests.ConnectionError("refused"), "Could not connect"),
            (requests.RequestException("other"), "Failed to fetch data"),
        ],
    )
    def test_transport_failure_becomes_readable_error(self, exc, message):
        client, _ = _client(side_effect=exc)
        with pytest.raises(DataFetchError, match=message):
            client.execute(QUERY, {"page": 1})

    def test_http_status_is_reported(self):
        client, _ = _client(_response(status=503))
        with pytest.raises(DataFetchError, match="HTTP 503"):
            client.execute(QUERY, {"page": 1})

    def test_no_retry_on_failure(self):
        client, session = _client(side_effect=requests.ConnectionError("refused"))
        with pytest.raises(DataFetchError):
            client.execute(QUERY, {"page": 1})
        assert session.post.call_count == 1


class TestCaching:
    @pytest.fixture
    def cache(self, tmp_path):
        c = QueryCache(db_path=tmp_path / "cache.db", ttl=60)
        yield c
        c.close()

    def test_second_call_is_served_from_cache(self, cache):
        client, session = _client(_response({"data": {"characters": {"results": []}}}), cache=cache)
        client.execute(QUERY, {"page": 1})
        client.execute(QUERY, {"page": 1})
        assert session.post.call_count == 1

    def test_each_page_is_fetched_separately(self, cache):
        client, session = _client(_response({"data": {"characters": {"results": []}}}), cache=cache)
        client.execute(QUERY, {"page": 1})
        client.execute(QUERY, {"page": 2})
        assert session.post.call_count == 2

    def test_partial_results_are_not_cached(self, cache):
        body = {"data": {"characters": {"results": []}}, "errors": [{"message": "partial"}]}
        client, session = _client(_response(body), cache=cache)
        client.execute(QUERY, {"page": 1})
        client.execute(QUERY, {"page": 1})
        assert session.post.call_count == 2

    def test_failures_are_not_cached(self, cache):
        client, session = _client(side_effect=requests.Timeout("slow"), cache=cache)
        for _ in range(2):
            with pytest.raises(DataFetchError):
                client.execute(QUERY, {"page": 1})
        assert session.post.call_count == 2
