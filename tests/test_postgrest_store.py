import pytest
import requests

from services.discovery.adapters.postgrest import PostgrestStore, parse_content_range
from services.discovery.store import STORE_ROW_CAP, TransientStoreError, eq, gte, in_


class FakeResponse:
    def __init__(self, status=200, payload=None, headers=None):
        self.status_code = status
        self._payload = payload
        self.headers = headers or {}

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class FakeSession:
    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def request(self, method, url, params=None, headers=None, timeout=None):
        self.requests.append({"method": method, "url": url, "params": params, "headers": headers, "timeout": timeout})
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt


def _store(*responses, **kw):
    session = FakeSession(*responses)
    return PostgrestStore("https://example.supabase.co/", "anon-key", session=session, **kw), session


@pytest.mark.parametrize(
    "header,expected",
    [("0-999/2500", 2500), ("*/0", 0), ("*/*", None), (None, None), ("garbage", None), ("0-9/abc", None)],
)
def test_parse_content_range(header, expected):
    assert parse_content_range(header) == expected


def test_count_uses_exact_count_head_request():
    store, session = _store(FakeResponse(headers={"Content-Range": "*/2500"}))
    assert store.count("cached_movies", [eq("media_type", "movie")]) == 2500
    req = session.requests[0]
    assert req["method"] == "HEAD"
    assert req["url"] == "https://example.supabase.co/rest/v1/cached_movies"
    assert req["headers"]["Prefer"] == "count=exact"
    assert req["headers"]["apikey"] == "anon-key"
    assert req["headers"]["Authorization"] == "Bearer anon-key"
    assert ("media_type", "eq.movie") in req["params"]


def test_count_without_total_is_an_error():
    store, _ = _store(FakeResponse(headers={}))
    with pytest.raises(TransientStoreError):
        store.count("cached_movies")


def test_range_query_sends_capped_range_header():
    store, session = _store(FakeResponse(payload=[{"id": 1}]))
    assert store.range_query("cached_movies", 1000, 4999, "id") == [{"id": 1}]
    req = session.requests[0]
    assert req["headers"]["Range"] == f"1000-{1000 + STORE_ROW_CAP - 1}"
    assert req["headers"]["Range-Unit"] == "items"
    assert ("order", "id.asc") in req["params"]


def test_range_query_descending_order():
    store, session = _store(FakeResponse(payload=[]))
    store.range_query("cached_movies", 0, 0, "cached_at", descending=True)
    assert ("order", "cached_at.desc.nullslast") in session.requests[0]["params"]


def test_predicate_query_filter_formatting():
    store, session = _store(FakeResponse(payload=[]))
    store.predicate_query(
        "cached_providers",
        [in_("provider_id", [8, 119]), eq("region", "IN"), gte("vote_count", 100)],
        columns=["tmdb_id", "media_type"],
        start=0,
        end=999,
    )
    params = session.requests[0]["params"]
    assert ("select", "tmdb_id,media_type") in params
    assert ("order", "id.asc") in params
    assert ("provider_id", "in.(8,119)") in params
    assert ("region", "eq.IN") in params
    assert ("vote_count", "gte.100") in params
    assert session.requests[0]["headers"]["Range"] == "0-999"


def test_predicate_query_ordered_by_column():
    store, session = _store(FakeResponse(payload=[]), FakeResponse(payload=[]))
    store.predicate_query("cached_movies", [eq("original_language", "hi")], end=19, order_by="vote_average", descending=True)
    store.predicate_query("cached_movies", [], order_by="title")
    assert ("order", "vote_average.desc.nullslast,id.asc") in session.requests[0]["params"]
    assert session.requests[0]["headers"]["Range"] == "0-19"
    assert ("order", "title.asc,id.asc") in session.requests[1]["params"]


def test_http_error_becomes_transient_error():
    store, _ = _store(FakeResponse(status=503))
    with pytest.raises(TransientStoreError) as exc:
        store.range_query("cached_movies", 0, 999, "id")
    assert exc.value.op == "range"
    assert exc.value.table == "cached_movies"


def test_timeout_becomes_transient_error():
    store, session = _store(requests.Timeout("read timed out"), timeout=2.5)
    with pytest.raises(TransientStoreError):
        store.predicate_query("cached_providers", [eq("region", "IN")])
    assert session.requests[0]["timeout"] == 2.5


def test_bad_payload_becomes_transient_error():
    store, _ = _store(FakeResponse(payload=ValueError("not json")), FakeResponse(payload={"message": "oops"}))
    with pytest.raises(TransientStoreError):
        store.range_query("cached_movies", 0, 9, "id")
    with pytest.raises(TransientStoreError):
        store.range_query("cached_movies", 0, 9, "id")
