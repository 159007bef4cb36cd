from __future__ import annotations

import logging
import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import Any

from .metrics import LOADER_BATCHES, LOADER_MISSING_ROWS, LOADER_SHORTFALL, STORE_ERRORS
from .store import CATALOG_TABLE, STORE_ROW_CAP, RemoteStore, TransientStoreError
from .types import CatalogItem, DataIntegrityWarning, LoadReport

logger = logging.getLogger("discovery.loader")


def batch_ranges(total: int, batch_size: int) -> list[tuple[int, int]]:
    """Inclusive ``(start, end)`` windows covering ``[0, total)`` with no gap or overlap."""
    if batch_size < 1:
        raise ValueError("batch_size must be positive")
    return [(start, start + batch_size - 1) for start in range(0, max(0, total), batch_size)]


class BulkLoader:
    """Materialises the whole catalog table, one capped range request at a time.

    A failed batch is logged and skipped. When fewer rows come back than the
    store counted, a ``DataIntegrityWarning`` is emitted (never raised) and
    ``last_report`` says how much is missing, so callers can retry.

    The warning goes through the ``warnings`` filters, whose default action
    shows it once per call site; every shortfall is still logged and
    recorded in ``last_report``.
    """

    def __init__(
        self,
        store: RemoteStore,
        *,
        table: str = CATALOG_TABLE,
        batch_size: int = STORE_ROW_CAP,
        order_by: str = "id",
        max_workers: int = 1,
    ):
        self.store = store
        self.table = table
        self.batch_size = max(1, min(batch_size, STORE_ROW_CAP))
        self.order_by = order_by
        self.max_workers = max(1, max_workers)
        self.last_report = LoadReport()

    def _fetch(self, window: tuple[int, int]) -> list[dict[str, Any]] | None:
        start, end = window
        try:
            rows = self.store.range_query(self.table, start, end, self.order_by)
        except TransientStoreError as e:
            logger.error("catalog batch %s-%s failed: %s", start, end, e)
            STORE_ERRORS.labels(component="loader", op="range").inc()
            LOADER_BATCHES.labels(outcome="failed").inc()
            return None
        LOADER_BATCHES.labels(outcome="ok").inc()
        return rows

    def load_all(self) -> list[CatalogItem]:
        report = LoadReport()
        self.last_report = report
        try:
            report.expected = self.store.count(self.table)
        except TransientStoreError as e:
            report.count_failed = True
            STORE_ERRORS.labels(component="loader", op="count").inc()
            logger.error("catalog count failed, nothing loaded: %s", e)
            warnings.warn(DataIntegrityWarning(f"catalog count failed: {e}"), stacklevel=2)
            return []

        windows = batch_ranges(report.expected, self.batch_size)
        report.batches = len(windows)
        logger.info("Loading %s catalog rows in %s batches of %s", report.expected, len(windows), self.batch_size)

        if self.max_workers > 1 and len(windows) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                pages = list(pool.map(self._fetch, windows))
        else:
            pages = [self._fetch(w) for w in windows]

        items: list[CatalogItem] = []
        seen: set = set()
        for window, rows in zip(windows, pages):
            if rows is None:
                report.failed_batches.append(window)
                continue
            for row in rows:
                try:
                    item = CatalogItem.from_row(row)
                except (TypeError, ValueError) as e:
                    report.skipped_rows += 1
                    logger.warning("skipping malformed catalog row id=%s: %s", row.get("id"), e)
                    continue
                if item.key in seen:
                    report.duplicates += 1
                    continue
                seen.add(item.key)
                items.append(item)

        report.retrieved = len(items)
        if report.retrieved < report.expected:
            LOADER_SHORTFALL.inc()
            LOADER_MISSING_ROWS.inc(report.missing)
            logger.warning(
                "catalog load incomplete: %s of %s rows",
                report.retrieved,
                report.expected,
                extra={"failed_batches": report.failed_batches, "duplicates": report.duplicates},
            )
            warnings.warn(
                DataIntegrityWarning(f"loaded {report.retrieved} of {report.expected} catalog rows"),
                stacklevel=2,
            )
        else:
            logger.info("Loaded %s catalog rows", report.retrieved)
        return items
