from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from services.discovery.options import all_options
from services.discovery.ranking import effective_sort

from ..catalog import CatalogSession, get_catalog
from ..schemas import CatalogItemOut, CountResponse, CriteriaIn, DiscoverRequest, DiscoverResponse

router = APIRouter(tags=["discover"])


@router.post("/discover", response_model=DiscoverResponse)
def discover(req: DiscoverRequest, catalog: CatalogSession = Depends(get_catalog)):
    criteria = req.to_criteria()
    results = catalog.engine.apply_filters(catalog.items(), criteria)
    if req.q:
        results = list(catalog.engine.search(results, req.q))
    total = len(results)
    if req.limit:
        results = results[: req.limit]
    sort_by, ascending = effective_sort(criteria)
    return DiscoverResponse(
        count=total,
        sort_by=sort_by,
        sort_ascending=ascending,
        active_filters=criteria.active_filters(),
        items=[CatalogItemOut.from_item(i) for i in results],
    )


@router.post("/discover/count", response_model=CountResponse)
def discover_count(req: CriteriaIn, catalog: CatalogSession = Depends(get_catalog)):
    return CountResponse(count=catalog.engine.get_filter_result_count(req.to_criteria()))


@router.get("/discover/options")
def discover_options():
    return all_options()


@router.get("/search")
def search(
    q: str = Query(default=""),
    limit: int = Query(default=50, ge=1, le=500),
    catalog: CatalogSession = Depends(get_catalog),
):
    items = catalog.engine.search(catalog.items(), q)
    return {"query": q, "items": [CatalogItemOut.from_item(i) for i in list(items)[:limit]]}
