from prometheus_client import Counter, Histogram


STORE_ERRORS = Counter("discovery_store_errors_total", "Failed store requests", ["component", "op"])
LOADER_BATCHES = Counter("discovery_loader_batches_total", "Catalog range requests issued", ["outcome"])
LOADER_SHORTFALL = Counter("discovery_loader_shortfall_total", "Bulk loads that retrieved fewer rows than expected")
LOADER_MISSING_ROWS = Counter("discovery_loader_missing_rows_total", "Catalog rows missing after bulk loads")
RESOLVER_FAIL_OPEN = Counter(
    "discovery_resolver_fail_open_total",
    "Provider filters skipped because availability could not be queried",
    ["mode"],
)
FILTER_LATENCY_MS = Histogram(
    "discovery_filter_latency_ms",
    "Filter + rank time in milliseconds",
    buckets=(1, 5, 10, 25, 50, 100, 200, 400, 800),
)
