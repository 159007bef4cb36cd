from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional, Tuple
from pydantic import BaseModel, Field

from services.discovery.types import DEFAULT_YEAR_RANGE, CatalogItem, FilterCriteria


class CriteriaIn(BaseModel):
    content_type: Literal["all", "movie", "show"] = "all"
    genres: List[int] = Field(default_factory=list)
    year_range: Tuple[int, int] = DEFAULT_YEAR_RANGE
    min_rating: float = Field(0.0, ge=0, le=10)
    languages: List[str] = Field(default_factory=list)
    min_vote_count: int = Field(0, ge=0)
    providers: List[int] = Field(default_factory=list)
    provider_mode: Literal["any", "all"] = "any"
    quality_gate: bool = False
    sort_by: Literal["popularity", "rating", "release_date", "votes"] = "popularity"
    sort_ascending: bool = False

    def to_criteria(self) -> FilterCriteria:
        return FilterCriteria(
            content_type=self.content_type,
            genres=list(self.genres),
            year_range=tuple(self.year_range),
            min_rating=self.min_rating,
            languages=list(self.languages),
            min_vote_count=self.min_vote_count,
            providers=list(self.providers),
            provider_mode=self.provider_mode,
            quality_gate=self.quality_gate,
            sort_by=self.sort_by,
            sort_ascending=self.sort_ascending,
        )


class DiscoverRequest(CriteriaIn):
    q: Optional[str] = None
    limit: Optional[int] = Field(default=None, ge=1, le=5000)


class CatalogItemOut(BaseModel):
    tmdb_id: int
    media_type: str
    title: str
    overview: str = ""
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    release_date: Optional[str] = None
    vote_average: float
    vote_count: int
    popularity: float
    genre_ids: List[int] = []
    original_language: str = ""

    @classmethod
    def from_item(cls, item: CatalogItem) -> "CatalogItemOut":
        return cls(**item.to_dict())


class DiscoverResponse(BaseModel):
    count: int
    sort_by: str
    sort_ascending: bool
    active_filters: List[str]
    items: List[CatalogItemOut]


class CountResponse(BaseModel):
    count: int


class LoadReportOut(BaseModel):
    expected: int
    retrieved: int
    batches: int
    failed_batches: List[Tuple[int, int]] = []
    duplicates: int = 0
    skipped_rows: int = 0
    complete: bool
    warnings: List[str] = []


class CatalogStatsOut(BaseModel):
    total_movies: int
    total_shows: int
    total_providers: int
    last_update: Optional[datetime] = None
    fresh: bool
    snapshot_items: Optional[int] = None


class BrowseRow(BaseModel):
    row: str
    items: List[CatalogItemOut]
