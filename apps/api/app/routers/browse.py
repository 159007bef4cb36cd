from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from services.discovery.engine import BROWSE_LIMIT, BROWSE_MAX_LIMIT

from ..catalog import CatalogSession, get_catalog
from ..schemas import BrowseRow, CatalogItemOut

router = APIRouter(prefix="/browse", tags=["browse"])


def _row(name: str, items) -> BrowseRow:
    return BrowseRow(row=name, items=[CatalogItemOut.from_item(i) for i in items])


@router.get("/popular", response_model=BrowseRow)
def popular(
    limit: int = Query(default=BROWSE_LIMIT, ge=1, le=BROWSE_MAX_LIMIT),
    catalog: CatalogSession = Depends(get_catalog),
):
    return _row("popular", catalog.engine.popular(limit))


@router.get("/genre/{genre_id}", response_model=BrowseRow)
def by_genre(
    genre_id: int,
    limit: int = Query(default=BROWSE_LIMIT, ge=1, le=BROWSE_MAX_LIMIT),
    catalog: CatalogSession = Depends(get_catalog),
):
    return _row(f"genre:{genre_id}", catalog.engine.by_genre(genre_id, limit))


@router.get("/language/{code}", response_model=BrowseRow)
def by_language(
    code: str,
    limit: int = Query(default=BROWSE_LIMIT, ge=1, le=BROWSE_MAX_LIMIT),
    catalog: CatalogSession = Depends(get_catalog),
):
    return _row(f"language:{code}", catalog.engine.by_language(code, limit))


@router.get("/provider/{provider_id}", response_model=BrowseRow)
def by_provider(
    provider_id: int,
    region: Optional[str] = Query(default=None, min_length=2, max_length=2),
    limit: int = Query(default=BROWSE_LIMIT, ge=1, le=BROWSE_MAX_LIMIT),
    catalog: CatalogSession = Depends(get_catalog),
):
    return _row(f"provider:{provider_id}", catalog.engine.by_provider(provider_id, region, limit))
