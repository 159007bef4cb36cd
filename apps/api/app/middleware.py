import logging
import time
import uuid
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from .metrics import DISCOVER_SLOW_REQUESTS, REQUEST_LATENCY_MS, REQUEST_ERRORS
from .logging_setup import set_request_id
from .settings import settings

logger = logging.getLogger(__name__)


class RequestIdAndTimingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        req_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        set_request_id(req_id)
        start = time.perf_counter()
        status_code = None
        route_label = request.url.path.rsplit("/", 1)[-1] or request.url.path
        try:
            response = await call_next(request)
            status_code = response.status_code
            response.headers["X-Request-ID"] = req_id
            return response
        except Exception:
            # Count unhandled exceptions as 5xx
            REQUEST_ERRORS.labels(route=route_label).inc()
            raise
        finally:
            dur_ms = 1000.0 * (time.perf_counter() - start)
            if request.url.path.startswith("/discover"):
                REQUEST_LATENCY_MS.observe(dur_ms)
                if dur_ms > float(settings.discover_target_ms):
                    logger.warning("discover_slow", extra={"lat_ms": round(dur_ms, 2), "path": request.url.path})
                    DISCOVER_SLOW_REQUESTS.inc()
            if status_code and status_code >= 500:
                REQUEST_ERRORS.labels(route=route_label).inc()
            set_request_id(None)
