from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Sequence

from .availability import AvailabilityResolver
from .filters import QUALITY_MIN_RATING, QUALITY_MIN_VOTES, FilterPipeline
from .loader import BulkLoader
from .metrics import FILTER_LATENCY_MS, STORE_ERRORS
from .ranking import effective_sort, rank
from .search import quick_search
from .store import CATALOG_TABLE, PROVIDERS_TABLE, STORE_ROW_CAP, RemoteStore, TransientStoreError, eq, gte, in_
from .types import CatalogItem, CatalogStats, FilterCriteria, LoadReport, MediaKind, parse_timestamp

logger = logging.getLogger("discovery.engine")

CATALOG_MAX_AGE = timedelta(hours=24)

BROWSE_LIMIT = 20
BROWSE_MAX_LIMIT = 100


class DiscoveryEngine:
    """Application-facing entry point: load, filter + rank, search, count.

    Holds no per-request state; the catalog snapshot belongs to the caller.
    """

    def __init__(
        self,
        store: RemoteStore,
        *,
        region: str = "IN",
        batch_size: int = STORE_ROW_CAP,
        loader_workers: int = 1,
    ):
        self.store = store
        self.region = region
        self.loader = BulkLoader(store, batch_size=batch_size, max_workers=loader_workers)
        self.resolver = AvailabilityResolver(store)
        self.pipeline = FilterPipeline(self.resolver, region=region)

    @property
    def last_load_report(self) -> LoadReport:
        return self.loader.last_report

    def load_all(self) -> list[CatalogItem]:
        return self.loader.load_all()

    def apply_filters(self, items: Sequence[CatalogItem], criteria: FilterCriteria) -> list[CatalogItem]:
        start = time.perf_counter()
        results = self.pipeline.apply(items, criteria)
        sort_by, ascending = effective_sort(criteria)
        results = rank(results, sort_by, ascending)
        dur_ms = 1000.0 * (time.perf_counter() - start)
        FILTER_LATENCY_MS.observe(dur_ms)
        logger.info(
            "filtered %s -> %s items in %.1fms",
            len(items),
            len(results),
            dur_ms,
            extra={"active": criteria.active_filters(), "sort": sort_by, "ascending": ascending},
        )
        return results

    def search(self, items: Sequence[CatalogItem], query: str | None) -> Sequence[CatalogItem]:
        return quick_search(items, query)

    def get_filter_result_count(self, criteria: FilterCriteria) -> int:
        return len(self.pipeline.apply(self.load_all(), criteria))

    def catalog_stats(self) -> CatalogStats:
        try:
            newest = self.store.range_query(CATALOG_TABLE, 0, 0, "updated_at", descending=True)
            return CatalogStats(
                total_movies=self.store.count(CATALOG_TABLE, [eq("media_type", "movie")]),
                total_shows=self.store.count(CATALOG_TABLE, [eq("media_type", "tv")]),
                total_providers=self.store.count(PROVIDERS_TABLE),
                last_update=parse_timestamp(newest[0].get("updated_at")) if newest else None,
            )
        except TransientStoreError as e:
            STORE_ERRORS.labels(component="engine", op="stats").inc()
            logger.error("catalog stats unavailable: %s", e)
            return CatalogStats(total_movies=0, total_shows=0, total_providers=0)

    def is_catalog_fresh(self, max_age: timedelta = CATALOG_MAX_AGE) -> bool:
        try:
            newest = self.store.range_query(CATALOG_TABLE, 0, 0, "cached_at", descending=True)
        except TransientStoreError as e:
            STORE_ERRORS.labels(component="engine", op="freshness").inc()
            logger.warning("catalog freshness unknown: %s", e)
            return False
        ts = parse_timestamp(newest[0].get("cached_at")) if newest else None
        if ts is None:
            return False
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return datetime.now(timezone.utc) - ts <= max_age

    # Browse rows: small ranked slices read straight from the store, no snapshot needed.
    # A store failure yields an empty row.

    def _browse_items(self, rows: list[dict]) -> list[CatalogItem]:
        items: list[CatalogItem] = []
        for row in rows:
            try:
                items.append(CatalogItem.from_row(row))
            except (TypeError, ValueError) as e:
                logger.warning("skipping malformed catalog row id=%s: %s", row.get("id"), e)
        return items

    def _browse_failed(self, row: str, e: TransientStoreError) -> list[CatalogItem]:
        STORE_ERRORS.labels(component="engine", op="browse").inc()
        logger.error("browse row %s unavailable: %s", row, e)
        return []

    def popular(self, limit: int = BROWSE_LIMIT) -> list[CatalogItem]:
        limit = max(1, min(limit, BROWSE_MAX_LIMIT))
        try:
            rows = self.store.range_query(CATALOG_TABLE, 0, limit - 1, "popularity", descending=True)
        except TransientStoreError as e:
            return self._browse_failed("popular", e)
        return self._browse_items(rows)

    def by_genre(self, genre_id: int, limit: int = BROWSE_LIMIT) -> list[CatalogItem]:
        """Most popular items tagged with ``genre_id``.

        Genre membership is matched locally, so this walks the popularity
        order one capped page at a time until ``limit`` items are found.
        """
        limit = max(1, min(limit, BROWSE_MAX_LIMIT))
        found: list[CatalogItem] = []
        start = 0
        try:
            while len(found) < limit:
                rows = self.store.range_query(
                    CATALOG_TABLE, start, start + STORE_ROW_CAP - 1, "popularity", descending=True
                )
                found.extend(i for i in self._browse_items(rows) if genre_id in i.genre_ids)
                if len(rows) < STORE_ROW_CAP:
                    break
                start += STORE_ROW_CAP
        except TransientStoreError as e:
            return self._browse_failed("genre", e)
        return found[:limit]

    def by_language(self, code: str, limit: int = BROWSE_LIMIT) -> list[CatalogItem]:
        """Best rated items in ``code`` that pass the rating/vote quality gate."""
        limit = max(1, min(limit, BROWSE_MAX_LIMIT))
        predicates = [
            eq("original_language", code),
            gte("vote_average", QUALITY_MIN_RATING),
            gte("vote_count", QUALITY_MIN_VOTES),
        ]
        try:
            rows = self.store.predicate_query(
                CATALOG_TABLE, predicates, start=0, end=limit - 1, order_by="vote_average", descending=True
            )
        except TransientStoreError as e:
            return self._browse_failed("language", e)
        return self._browse_items(rows)

    def by_provider(self, provider_id: int, region: str | None = None, limit: int = BROWSE_LIMIT) -> list[CatalogItem]:
        """Items offered by ``provider_id`` in ``region``, in offer order."""
        limit = max(1, min(limit, BROWSE_MAX_LIMIT))
        region = region or self.region
        try:
            offers = self.store.predicate_query(
                PROVIDERS_TABLE,
                [eq("provider_id", provider_id), eq("region", region)],
                columns=["tmdb_id", "media_type"],
                start=0,
                end=limit - 1,
            )
            keys = [(int(o["tmdb_id"]), MediaKind.parse(o.get("media_type"))) for o in offers]
            if not keys:
                return []
            rows = self.store.predicate_query(
                CATALOG_TABLE, [in_("tmdb_id", sorted({k[0] for k in keys}))], start=0, end=STORE_ROW_CAP - 1
            )
        except TransientStoreError as e:
            return self._browse_failed("provider", e)
        by_key = {i.key: i for i in self._browse_items(rows)}
        seen: set = set()
        out: list[CatalogItem] = []
        for k in keys:
            if k in by_key and k not in seen:
                seen.add(k)
                out.append(by_key[k])
        return out
