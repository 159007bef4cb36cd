from __future__ import annotations

import logging
import threading
import time
import warnings
from datetime import timedelta

from services.discovery.engine import DiscoveryEngine
from services.discovery.types import CatalogItem, DataIntegrityWarning, LoadReport

from .db import get_store
from .metrics import CATALOG_LOADS, CATALOG_SNAPSHOT_ITEMS
from .settings import settings

logger = logging.getLogger(__name__)


class CatalogSession:
    """Per-process catalog snapshot, loaded on first use or explicit refresh.

    Loads are serialised; readers always get a complete snapshot list.
    """

    def __init__(self, engine: DiscoveryEngine, max_age: timedelta | None = None):
        self.engine = engine
        self.max_age = max_age
        self._items: list[CatalogItem] | None = None
        self._loaded_at: float | None = None
        self._report = LoadReport()
        self._warnings: list[str] = []
        self._lock = threading.Lock()

    @property
    def report(self) -> LoadReport:
        return self._report

    @property
    def warnings(self) -> list[str]:
        return list(self._warnings)

    def _expired(self) -> bool:
        if self._loaded_at is None or self.max_age is None:
            return False
        return time.monotonic() - self._loaded_at > self.max_age.total_seconds()

    def _load(self) -> list[CatalogItem]:
        # caller holds self._lock
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", DataIntegrityWarning)
            items = self.engine.load_all()
        self._warnings = [str(w.message) for w in caught if issubclass(w.category, DataIntegrityWarning)]
        self._items = items
        self._loaded_at = time.monotonic()
        self._report = report = self.engine.last_load_report
        CATALOG_LOADS.labels(outcome="complete" if report.complete else "partial").inc()
        CATALOG_SNAPSHOT_ITEMS.set(len(items))
        if self._warnings:
            logger.warning("catalog snapshot is partial", extra={"warnings": self._warnings})
        return items

    def refresh(self) -> list[CatalogItem]:
        with self._lock:
            return self._load()

    def items(self) -> list[CatalogItem]:
        with self._lock:
            if self._items is None or self._expired():
                return self._load()
            return self._items


_session: CatalogSession | None = None
_session_lock = threading.Lock()


def get_catalog() -> CatalogSession:
    global _session
    with _session_lock:
        if _session is None:
            engine = DiscoveryEngine(
                get_store(),
                region=settings.region,
                batch_size=settings.loader_batch_size,
                loader_workers=settings.loader_workers,
            )
            _session = CatalogSession(engine, max_age=timedelta(hours=settings.catalog_max_age_hours))
        return _session
