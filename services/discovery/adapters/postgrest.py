from __future__ import annotations

import logging
from typing import Any, Dict, List, Sequence

import requests

from ..store import STORE_ROW_CAP, Predicate, TransientStoreError, capped_bounds

logger = logging.getLogger("discovery.store.postgrest")


def _literal(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _filter_params(predicates: Sequence[Predicate]) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    for p in predicates:
        if p.op == "in":
            params.append((p.column, "in.(" + ",".join(_literal(v) for v in p.value) + ")"))
        elif p.op in ("eq", "gte"):
            params.append((p.column, f"{p.op}.{_literal(p.value)}"))
        else:
            raise ValueError(f"unsupported predicate op: {p.op}")
    return params


def parse_content_range(header: str | None) -> int | None:
    """Total from a ``Content-Range`` header such as ``0-999/2500`` or ``*/2500``."""
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1].strip()
    if total == "*":
        return None
    try:
        return int(total)
    except ValueError:
        return None


class PostgrestStore:
    """Store accessor for a PostgREST (Supabase-style) REST endpoint.

    Each call is one HTTP request bounded by ``timeout``; failures surface
    as ``TransientStoreError`` without retrying.
    """

    name = "postgrest"

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        *,
        timeout: float = 10.0,
        row_cap: int = STORE_ROW_CAP,
        session: requests.Session | None = None,
        key_column: str = "id",
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.row_cap = row_cap
        self.session = session or requests.Session()
        self.key_column = key_column

    def _url(self, table: str) -> str:
        return f"{self.base_url}/rest/v1/{table}"

    def _headers(self, extra: Dict[str, str] | None = None) -> Dict[str, str]:
        headers: Dict[str, str] = {"Accept": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
            headers["Authorization"] = f"Bearer {self.api_key}"
        if extra:
            headers.update(extra)
        return headers

    def _request(self, op: str, table: str, method: str, params, headers) -> requests.Response:
        try:
            r = self.session.request(method, self._url(table), params=params, headers=headers, timeout=self.timeout)
            r.raise_for_status()
            return r
        except requests.RequestException as e:
            logger.warning("store %s on %s failed: %s", op, table, e)
            raise TransientStoreError(str(e), table=table, op=op) from e

    def _rows(self, op: str, table: str, r: requests.Response) -> List[Dict[str, Any]]:
        try:
            data = r.json()
        except ValueError as e:
            raise TransientStoreError(f"invalid JSON from store: {e}", table=table, op=op) from e
        if not isinstance(data, list):
            raise TransientStoreError("store returned a non-list payload", table=table, op=op)
        return data

    def count(self, table: str, predicates: Sequence[Predicate] = ()) -> int:
        params = [("select", "*"), *_filter_params(predicates)]
        r = self._request("count", table, "HEAD", params, self._headers({"Prefer": "count=exact"}))
        total = parse_content_range(r.headers.get("Content-Range"))
        if total is None:
            raise TransientStoreError("store did not report an exact count", table=table, op="count")
        return total

    def range_query(self, table: str, start: int, end: int, order_by: str, descending: bool = False):
        if end < start:
            return []
        lo, hi = capped_bounds(start, end, self.row_cap)
        params = [("select", "*"), ("order", f"{order_by}.desc.nullslast" if descending else f"{order_by}.asc")]
        headers = self._headers({"Range-Unit": "items", "Range": f"{lo}-{hi}"})
        r = self._request("range", table, "GET", params, headers)
        return self._rows("range", table, r)

    def predicate_query(
        self, table: str, predicates: Sequence[Predicate], columns=None, start=None, end=None, order_by=None, descending=False
    ):
        lo, hi = capped_bounds(start, end, self.row_cap)
        order = f"{self.key_column}.asc"
        if order_by:
            order = f"{order_by}.desc.nullslast,{order}" if descending else f"{order_by}.asc,{order}"
        params = [("select", ",".join(columns) if columns else "*"), ("order", order), *_filter_params(predicates)]
        headers = self._headers({"Range-Unit": "items", "Range": f"{lo}-{hi}"})
        r = self._request("predicate", table, "GET", params, headers)
        return self._rows("predicate", table, r)
