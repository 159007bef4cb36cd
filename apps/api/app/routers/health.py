from __future__ import annotations
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from pydantic import BaseModel

import logging
from services.discovery.store import CATALOG_TABLE, TransientStoreError

from ..catalog import CatalogSession, get_catalog
from ..settings import settings

router = APIRouter(tags=["health"])
logger = logging.getLogger(__name__)


class Health(BaseModel):
    status: str
    time_utc: str
    checks: dict
    version: str | None = None
    sha: str | None = None


@router.get("/healthz", response_model=Health)
def healthz(catalog: CatalogSession = Depends(get_catalog)):
    checks: dict[str, dict] = {}

    # Store reachability: one exact count of the catalog table
    try:
        total = catalog.engine.store.count(CATALOG_TABLE)
        checks["store"] = {"ok": True, "backend": getattr(catalog.engine.store, "name", "?"), "catalog_rows": total}
    except TransientStoreError as e:
        checks["store"] = {"ok": False, "error": str(e)}

    # Snapshot completeness of the last bulk load (if any)
    report = catalog.report
    checks["snapshot"] = {
        "ok": report.complete,
        "expected": report.expected,
        "retrieved": report.retrieved,
    }

    checks["app"] = {"ok": True}

    overall = "ok" if all(x.get("ok") for x in checks.values()) else "degraded"
    resp = Health(status=overall, time_utc=datetime.now(timezone.utc).isoformat(), checks=checks, version=settings.app_version, sha=settings.git_sha)
    if resp.status != "ok":
        logger.warning("healthz degraded", extra={"checks": checks})
    return resp
