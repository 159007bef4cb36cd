from __future__ import annotations

import logging
from typing import Callable, Sequence

from .types import CatalogItem, FilterCriteria, SortKey

logger = logging.getLogger("discovery.ranking")


def _release_ordinal(item: CatalogItem) -> int:
    # undated sorts as the earliest possible date
    return item.release_date.toordinal() if item.release_date else 0


SORT_KEYS: dict[str, Callable[[CatalogItem], float]] = {
    "popularity": lambda i: i.popularity,
    "rating": lambda i: i.vote_average,
    "release_date": _release_ordinal,
    "votes": lambda i: i.vote_count,
}


def rank(items: Sequence[CatalogItem], sort_by: SortKey, ascending: bool = False) -> list[CatalogItem]:
    """Stable sort of a copy; descending puts the higher value first."""
    key = SORT_KEYS.get(sort_by)
    if key is None:
        return list(items)
    return sorted(items, key=key, reverse=not ascending)


def language_only(criteria: FilterCriteria) -> bool:
    return criteria.active_filters() == ["languages"]


def effective_sort(criteria: FilterCriteria) -> tuple[SortKey, bool]:
    """Sort actually applied for ``criteria``.

    A language-only query sorted by popularity means "what's recent in this
    language", so it is ranked newest first instead. Any other active filter
    keeps the requested sort.
    """
    if criteria.sort_by == "popularity" and language_only(criteria):
        logger.debug("language-only filter, ranking by release date (newest first)")
        return "release_date", False
    return criteria.sort_by, criteria.sort_ascending
