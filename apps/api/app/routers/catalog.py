from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends

from ..catalog import CatalogSession, get_catalog
from ..schemas import CatalogStatsOut, LoadReportOut
from ..settings import settings

router = APIRouter(tags=["catalog"])


def _report_out(catalog: CatalogSession) -> LoadReportOut:
    r = catalog.report
    return LoadReportOut(
        expected=r.expected,
        retrieved=r.retrieved,
        batches=r.batches,
        failed_batches=r.failed_batches,
        duplicates=r.duplicates,
        skipped_rows=r.skipped_rows,
        complete=r.complete,
        warnings=catalog.warnings,
    )


@router.get("/catalog/stats", response_model=CatalogStatsOut)
def catalog_stats(catalog: CatalogSession = Depends(get_catalog)):
    stats = catalog.engine.catalog_stats()
    fresh = catalog.engine.is_catalog_fresh(timedelta(hours=settings.catalog_max_age_hours))
    return CatalogStatsOut(
        total_movies=stats.total_movies,
        total_shows=stats.total_shows,
        total_providers=stats.total_providers,
        last_update=stats.last_update,
        fresh=fresh,
        snapshot_items=len(catalog.items()),
    )


@router.get("/catalog/report", response_model=LoadReportOut)
def catalog_report(catalog: CatalogSession = Depends(get_catalog)):
    catalog.items()
    return _report_out(catalog)


@router.post("/catalog/refresh", response_model=LoadReportOut)
def catalog_refresh(catalog: CatalogSession = Depends(get_catalog)):
    catalog.refresh()
    return _report_out(catalog)
