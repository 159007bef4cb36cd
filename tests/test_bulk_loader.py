import logging
import warnings

import pytest

from services.discovery.adapters.memory import MemoryStore
from services.discovery.loader import BulkLoader, batch_ranges
from services.discovery.store import CATALOG_TABLE, STORE_ROW_CAP, TransientStoreError
from services.discovery.types import DataIntegrityWarning


def _rows(n, media_type="movie"):
    return [
        {"id": i + 1, "tmdb_id": 10_000 + i, "media_type": media_type, "title": f"Title {i}", "popularity": float(i)}
        for i in range(n)
    ]


def _store(n):
    return MemoryStore({CATALOG_TABLE: _rows(n)})


def _range_calls(store):
    return [c for c in store.calls if c[0] == "range"]


class FlakyStore(MemoryStore):
    def __init__(self, tables, fail_starts=(), fail_count=False):
        super().__init__(tables)
        self.fail_starts = set(fail_starts)
        self.fail_count = fail_count

    def count(self, table, predicates=()):
        if self.fail_count:
            raise TransientStoreError("count timed out", table=table, op="count")
        return super().count(table, predicates)

    def range_query(self, table, start, end, order_by, descending=False):
        if start in self.fail_starts:
            raise TransientStoreError("batch timed out", table=table, op="range")
        return super().range_query(table, start, end, order_by, descending)


def test_batch_ranges_have_no_gaps_or_overlaps():
    assert batch_ranges(2500, 1000) == [(0, 999), (1000, 1999), (2000, 2999)]
    assert batch_ranges(2000, 1000) == [(0, 999), (1000, 1999)]
    assert batch_ranges(1, 1000) == [(0, 999)]
    assert batch_ranges(0, 1000) == []


def test_batch_ranges_rejects_non_positive_size():
    with pytest.raises(ValueError):
        batch_ranges(10, 0)


def test_2500_rows_load_in_three_batches_without_loss_or_duplication():
    store = _store(2500)
    loader = BulkLoader(store, batch_size=1000)
    with warnings.catch_warnings():
        warnings.simplefilter("error", DataIntegrityWarning)
        items = loader.load_all()
    calls = _range_calls(store)
    assert len(calls) == 3
    assert [(c[2], c[3]) for c in calls] == [(0, 999), (1000, 1999), (2000, 2999)]
    assert len(items) == 2500
    assert len({i.external_id for i in items}) == 2500
    assert loader.last_report.complete
    assert loader.last_report.batches == 3


@pytest.mark.parametrize("total", [999, 1000, 1001, 2000])
def test_total_count_matches_around_batch_boundaries(total):
    items = BulkLoader(_store(total), batch_size=1000).load_all()
    assert len({i.key for i in items}) == total


def test_batch_size_is_clamped_to_store_row_cap():
    store = _store(2500)
    loader = BulkLoader(store, batch_size=5000)
    assert loader.batch_size == STORE_ROW_CAP
    items = loader.load_all()
    assert len(items) == 2500
    assert len(_range_calls(store)) == 3


def test_small_batches_still_cover_everything():
    store = _store(25)
    items = BulkLoader(store, batch_size=10).load_all()
    assert len(_range_calls(store)) == 3
    assert sorted(i.external_id for i in items) == [10_000 + i for i in range(25)]


def test_parallel_batches_give_same_catalog():
    serial = BulkLoader(_store(2500)).load_all()
    parallel = BulkLoader(_store(2500), max_workers=3).load_all()
    assert [i.key for i in parallel] == [i.key for i in serial]


def test_failed_batch_is_skipped_and_shortfall_warned():
    store = FlakyStore({CATALOG_TABLE: _rows(2500)}, fail_starts={1000})
    loader = BulkLoader(store, batch_size=1000)
    with pytest.warns(DataIntegrityWarning, match="1500 of 2500"):
        items = loader.load_all()
    assert len(items) == 1500
    report = loader.last_report
    assert report.failed_batches == [(1000, 1999)]
    assert report.missing == 1000
    assert not report.complete


def test_count_failure_returns_empty_catalog_with_warning():
    store = FlakyStore({CATALOG_TABLE: _rows(10)}, fail_count=True)
    loader = BulkLoader(store)
    with pytest.warns(DataIntegrityWarning):
        items = loader.load_all()
    assert items == []
    assert loader.last_report.count_failed
    assert _range_calls(store) == []


def test_malformed_rows_are_skipped_and_counted():
    rows = _rows(5)
    rows[2]["tmdb_id"] = None
    rows[3]["media_type"] = "podcast"
    loader = BulkLoader(MemoryStore({CATALOG_TABLE: rows}))
    with pytest.warns(DataIntegrityWarning):
        items = loader.load_all()
    assert len(items) == 3
    assert loader.last_report.skipped_rows == 2


def test_same_id_different_kind_are_distinct_items():
    rows = _rows(3) + [
        {"id": 100, "tmdb_id": 10_000, "media_type": "tv", "title": "Same id, show"},
    ]
    items = BulkLoader(MemoryStore({CATALOG_TABLE: rows})).load_all()
    assert len(items) == 4


def test_duplicate_rows_are_dropped():
    rows = _rows(3) + [dict(_rows(1)[0], id=99)]
    loader = BulkLoader(MemoryStore({CATALOG_TABLE: rows}))
    with pytest.warns(DataIntegrityWarning):
        items = loader.load_all()
    assert len(items) == 3
    assert loader.last_report.duplicates == 1


def test_repeated_shortfalls_are_each_logged_and_reported(caplog):
    caplog.set_level(logging.WARNING, logger="discovery.loader")
    loader = BulkLoader(FlakyStore({CATALOG_TABLE: _rows(2500)}, fail_starts=[1000]))
    for _ in range(2):
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", DataIntegrityWarning)
            loader.load_all()
        assert loader.last_report.missing == 1000
    incomplete = [r for r in caplog.records if "catalog load incomplete" in r.getMessage()]
    assert len(incomplete) == 2
