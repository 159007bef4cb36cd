from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .logging_setup import configure_logging
from .metrics import BUILD_INFO, router as metrics_router
from .middleware import RequestIdAndTimingMiddleware
from .routers import browse, catalog, discover, health, ready
from .settings import settings

configure_logging()

app = FastAPI(title="Catalog Discovery API", version=settings.app_version)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.allow_origins.split(",") if o.strip()],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIdAndTimingMiddleware)

app.include_router(ready.router)
app.include_router(health.router)
app.include_router(metrics_router)
app.include_router(discover.router)
app.include_router(catalog.router)
app.include_router(browse.router)

BUILD_INFO.labels(version=settings.app_version, sha=settings.git_sha or "unknown", env=settings.environment).set(1)
