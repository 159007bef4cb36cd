from prometheus_client import Counter, Histogram, Gauge, CONTENT_TYPE_LATEST, generate_latest
from starlette.responses import Response
from fastapi import APIRouter


REQUEST_LATENCY_MS = Histogram(
    "discover_request_latency_ms",
    "Latency of /discover requests in milliseconds",
    buckets=(5, 10, 25, 50, 100, 200, 400, 800, 1600, 3200),
)
DISCOVER_SLOW_REQUESTS = Counter("discover_slow_requests_total", "Discover requests exceeding the latency target")
CATALOG_LOADS = Counter("catalog_loads_total", "Catalog snapshot loads", ["outcome"])

CATALOG_SNAPSHOT_ITEMS = Gauge("catalog_snapshot_items", "Items in the in-process catalog snapshot")

# Build info gauge (set once at startup)
BUILD_INFO = Gauge(
    "discover_build_info",
    "Build info tagged with version, sha, env",
    labelnames=["version", "sha", "env"],
)

# Total API errors (incremented on 5xx)
REQUEST_ERRORS = Counter(
    "discover_request_errors_total",
    "Total API errors",
    ["route"],
)


router = APIRouter()


@router.get("/metrics")
async def metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
