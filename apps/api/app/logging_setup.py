import logging
import os
import sys
from contextvars import ContextVar
from pythonjsonlogger import jsonlogger


LOG_FORMAT = os.getenv("LOG_FORMAT", "json").lower()
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
# per-stage filter traces are logged at DEBUG under "discovery.*"
DISCOVERY_LOG_LEVEL = os.getenv("DISCOVERY_LOG_LEVEL", LOG_LEVEL).upper()


class RequestIdFilter(logging.Filter):
    def __init__(self):
        super().__init__()
        self._current: ContextVar[str | None] = ContextVar("request_id", default=None)

    def set(self, request_id: str | None):
        self._current.set(request_id)

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore
        record.request_id = self._current.get()
        return True


request_id_filter = RequestIdFilter()


def configure_logging():
    root = logging.getLogger()
    root.setLevel(LOG_LEVEL)
    for h in list(root.handlers):
        root.removeHandler(h)

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(request_id_filter)
    if LOG_FORMAT == "json":
        fmt = jsonlogger.JsonFormatter("%(levelname)s %(message)s %(asctime)s %(name)s %(request_id)s")
        handler.setFormatter(fmt)
    else:
        fmt = logging.Formatter("%(asctime)s %(levelname)s [%(name)s] [req=%(request_id)s] %(message)s")
        handler.setFormatter(fmt)

    root.addHandler(handler)
    logging.getLogger("discovery").setLevel(DISCOVERY_LOG_LEVEL)


def set_request_id(value: str | None):
    request_id_filter.set(value)
