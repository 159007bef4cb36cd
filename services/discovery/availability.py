from __future__ import annotations

import logging
from typing import Any, Sequence

from .metrics import RESOLVER_FAIL_OPEN, STORE_ERRORS
from .store import PROVIDERS_TABLE, STORE_ROW_CAP, Predicate, RemoteStore, TransientStoreError, eq, in_
from .types import CatalogItem, MediaKind, ProviderAvailability, ProviderMode

logger = logging.getLogger("discovery.availability")


class AvailabilityResolver:
    """Narrows items to those offered by a set of providers in one region.

    ``any`` keeps items on at least one requested provider; ``all`` keeps items
    on every requested provider. When availability cannot be queried the input
    comes back unfiltered (fail open).
    """

    def __init__(self, store: RemoteStore, *, table: str = PROVIDERS_TABLE, row_cap: int = STORE_ROW_CAP):
        self.store = store
        self.table = table
        self.row_cap = row_cap

    def _fetch_all(self, predicates: Sequence[Predicate], columns: Sequence[str]) -> list[dict[str, Any]]:
        # pages until a short page; one request never exceeds the row cap
        rows: list[dict[str, Any]] = []
        start = 0
        while True:
            page = self.store.predicate_query(
                self.table, predicates, columns=columns, start=start, end=start + self.row_cap - 1
            )
            rows.extend(page)
            if len(page) < self.row_cap:
                return rows
            start += self.row_cap

    def _pairs_on_any(self, provider_ids: list[int], region: str) -> set[tuple[int, MediaKind]]:
        rows = self._fetch_all(
            [in_("provider_id", provider_ids), eq("region", region)],
            ["tmdb_id", "media_type"],
        )
        return {ProviderAvailability.from_row(r).key for r in rows}

    def _matched_providers(
        self, items: list[CatalogItem], provider_ids: list[int], region: str
    ) -> dict[tuple[int, MediaKind], set[int]]:
        ids = sorted({i.external_id for i in items})
        chunk = max(1, self.row_cap // len(provider_ids))
        matched: dict[tuple[int, MediaKind], set[int]] = {}
        for at in range(0, len(ids), chunk):
            rows = self._fetch_all(
                [in_("tmdb_id", ids[at : at + chunk]), in_("provider_id", provider_ids), eq("region", region)],
                ["tmdb_id", "media_type", "provider_id"],
            )
            for r in rows:
                offer = ProviderAvailability.from_row(r)
                matched.setdefault(offer.key, set()).add(offer.provider_id)
        return matched

    def filter_by_providers(
        self,
        items: Sequence[CatalogItem],
        provider_ids: Sequence[int],
        mode: ProviderMode,
        region: str,
    ) -> list[CatalogItem]:
        items = list(items)
        wanted = sorted(set(provider_ids))
        if not wanted or not items:
            return items
        try:
            if mode == "all":
                matched = self._matched_providers(items, wanted, region)
                required = set(wanted)
                return [i for i in items if required <= matched.get(i.key, set())]
            pairs = self._pairs_on_any(wanted, region)
            return [i for i in items if i.key in pairs]
        except (TransientStoreError, KeyError, TypeError, ValueError) as e:
            STORE_ERRORS.labels(component="availability", op="predicate").inc()
            RESOLVER_FAIL_OPEN.labels(mode=mode).inc()
            logger.error(
                "provider filter unavailable, returning unfiltered results: %s",
                e,
                extra={"providers": wanted, "mode": mode, "region": region},
            )
            return items
