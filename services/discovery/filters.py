from __future__ import annotations

import logging
from typing import Callable, Sequence

from .availability import AvailabilityResolver
from .types import DEFAULT_YEAR_RANGE, CatalogItem, FilterCriteria, MediaKind

logger = logging.getLogger("discovery.filters")

# Minimum rating/votes of the optional language quality gate
QUALITY_MIN_RATING = 6.0
QUALITY_MIN_VOTES = 100

Stage = Callable[[list[CatalogItem], FilterCriteria], list[CatalogItem]]


def by_content_type(items: list[CatalogItem], c: FilterCriteria) -> list[CatalogItem]:
    if c.content_type == "all":
        return items
    kind = MediaKind.parse(c.content_type)
    return [i for i in items if i.media_kind == kind]


def by_genres(items: list[CatalogItem], c: FilterCriteria) -> list[CatalogItem]:
    if not c.genres:
        return items
    wanted = set(c.genres)
    return [i for i in items if not wanted.isdisjoint(i.genre_ids)]


def by_year_range(items: list[CatalogItem], c: FilterCriteria) -> list[CatalogItem]:
    lo, hi = c.year_range
    if (lo, hi) == DEFAULT_YEAR_RANGE:
        return items
    # undated items fail a non-default range; lo > hi keeps nothing
    return [i for i in items if i.year is not None and lo <= i.year <= hi]


def by_min_rating(items: list[CatalogItem], c: FilterCriteria) -> list[CatalogItem]:
    if c.min_rating <= 0:
        return items
    return [i for i in items if i.vote_average >= c.min_rating]


def by_languages(items: list[CatalogItem], c: FilterCriteria) -> list[CatalogItem]:
    if not c.languages:
        return items
    wanted = set(c.languages)
    return [i for i in items if i.original_language in wanted]


def by_quality_gate(items: list[CatalogItem], c: FilterCriteria) -> list[CatalogItem]:
    if not (c.quality_gate and c.languages):
        return items
    return [i for i in items if i.vote_average >= QUALITY_MIN_RATING and i.vote_count >= QUALITY_MIN_VOTES]


def by_min_vote_count(items: list[CatalogItem], c: FilterCriteria) -> list[CatalogItem]:
    if c.min_vote_count <= 0:
        return items
    return [i for i in items if i.vote_count >= c.min_vote_count]


LOCAL_STAGES: tuple[tuple[str, Stage], ...] = (
    ("content_type", by_content_type),
    ("genres", by_genres),
    ("year_range", by_year_range),
    ("min_rating", by_min_rating),
    ("languages", by_languages),
    ("quality_gate", by_quality_gate),
    ("min_vote_count", by_min_vote_count),
)


class FilterPipeline:
    """Runs the fixed, order-preserving filter stages over a copy of the input.

    The provider stage is the only one that talks to the store and runs last,
    only when providers are selected.
    """

    def __init__(self, resolver: AvailabilityResolver | None = None, *, region: str = "IN"):
        self.resolver = resolver
        self.region = region

    def apply(self, items: Sequence[CatalogItem], criteria: FilterCriteria) -> list[CatalogItem]:
        results = list(items)
        logger.debug("filtering %s items, active=%s", len(results), criteria.active_filters())
        for name, stage in LOCAL_STAGES:
            before = len(results)
            results = stage(results, criteria)
            if len(results) != before:
                logger.debug("after %s: %s items", name, len(results))

        if criteria.providers:
            if self.resolver is None:
                logger.warning("provider filter requested but no resolver configured; skipping")
            else:
                results = self.resolver.filter_by_providers(
                    results, criteria.providers, criteria.provider_mode, self.region
                )
                logger.debug("after providers: %s items", len(results))
        return results
