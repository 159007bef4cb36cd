from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Literal

ContentType = Literal["all", "movie", "show"]
ProviderMode = Literal["any", "all"]
SortKey = Literal["popularity", "rating", "release_date", "votes"]

DEFAULT_YEAR_RANGE: tuple[int, int] = (1990, 2025)
DEFAULT_SORT: SortKey = "popularity"


class MediaKind(str, enum.Enum):
    movie = "movie"
    show = "tv"

    @classmethod
    def parse(cls, value: Any) -> "MediaKind":
        if isinstance(value, MediaKind):
            return value
        raw = str(value or "").strip().lower()
        if raw == "movie":
            return cls.movie
        if raw in ("tv", "show"):
            return cls.show
        raise ValueError(f"unknown media kind: {value!r}")


class DataIntegrityWarning(UserWarning):
    """Fewer catalog rows were retrieved than the store reported."""


def _parse_date(value: Any) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        return None


def parse_timestamp(value: Any) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None


@dataclass(frozen=True)
class CatalogItem:
    external_id: int
    title: str
    media_kind: MediaKind
    overview: str = ""
    poster_path: str | None = None
    backdrop_path: str | None = None
    release_date: date | None = None
    vote_average: float = 0.0
    vote_count: int = 0
    popularity: float = 0.0
    genre_ids: frozenset[int] = frozenset()
    original_language: str = ""
    cached_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def key(self) -> tuple[int, MediaKind]:
        return (self.external_id, self.media_kind)

    @property
    def year(self) -> int | None:
        return self.release_date.year if self.release_date else None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "CatalogItem":
        """Build an item from a ``cached_movies`` row.

        Raises ``ValueError`` when the row has no usable id or media type.
        """
        raw_id = row.get("tmdb_id")
        if raw_id is None:
            raise ValueError("row has no tmdb_id")
        try:
            external_id = int(raw_id)
        except (TypeError, ValueError):
            raise ValueError(f"bad tmdb_id: {raw_id!r}") from None
        return cls(
            external_id=external_id,
            title=str(row.get("title") or ""),
            media_kind=MediaKind.parse(row.get("media_type")),
            overview=str(row.get("overview") or ""),
            poster_path=row.get("poster_path"),
            backdrop_path=row.get("backdrop_path"),
            release_date=_parse_date(row.get("release_date")),
            vote_average=float(row.get("vote_average") or 0.0),
            vote_count=int(row.get("vote_count") or 0),
            popularity=float(row.get("popularity") or 0.0),
            genre_ids=frozenset(int(g) for g in (row.get("genre_ids") or [])),
            original_language=str(row.get("original_language") or ""),
            cached_at=parse_timestamp(row.get("cached_at")),
            updated_at=parse_timestamp(row.get("updated_at")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "tmdb_id": self.external_id,
            "media_type": self.media_kind.value,
            "title": self.title,
            "overview": self.overview,
            "poster_path": self.poster_path,
            "backdrop_path": self.backdrop_path,
            "release_date": self.release_date.isoformat() if self.release_date else None,
            "vote_average": self.vote_average,
            "vote_count": self.vote_count,
            "popularity": self.popularity,
            "genre_ids": sorted(self.genre_ids),
            "original_language": self.original_language,
        }


@dataclass(frozen=True)
class ProviderAvailability:
    external_id: int
    media_kind: MediaKind
    provider_id: int
    region: str

    @property
    def key(self) -> tuple[int, MediaKind]:
        return (self.external_id, self.media_kind)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "ProviderAvailability":
        return cls(
            external_id=int(row["tmdb_id"]),
            media_kind=MediaKind.parse(row.get("media_type")),
            provider_id=int(row.get("provider_id") or 0),
            region=str(row.get("region") or ""),
        )


def _toggle(values: list, value) -> list:
    return [v for v in values if v != value] if value in values else [*values, value]


@dataclass
class FilterCriteria:
    content_type: ContentType = "all"
    genres: list[int] = field(default_factory=list)
    year_range: tuple[int, int] = DEFAULT_YEAR_RANGE
    min_rating: float = 0.0
    languages: list[str] = field(default_factory=list)
    min_vote_count: int = 0
    providers: list[int] = field(default_factory=list)
    provider_mode: ProviderMode = "any"
    quality_gate: bool = False
    sort_by: SortKey = DEFAULT_SORT
    sort_ascending: bool = False

    def toggle_genre(self, genre_id: int) -> None:
        self.genres = _toggle(self.genres, genre_id)

    def toggle_language(self, code: str) -> None:
        self.languages = _toggle(self.languages, code)

    def toggle_provider(self, provider_id: int) -> None:
        self.providers = _toggle(self.providers, provider_id)

    def reset(self) -> None:
        for name, value in vars(FilterCriteria()).items():
            setattr(self, name, value)

    def active_filters(self) -> list[str]:
        """Names of the filter dimensions that differ from their defaults.

        Sort settings and ``provider_mode`` are not filters on their own.
        """
        active: list[str] = []
        if self.content_type != "all":
            active.append("content_type")
        if self.genres:
            active.append("genres")
        if tuple(self.year_range) != DEFAULT_YEAR_RANGE:
            active.append("year_range")
        if self.min_rating > 0:
            active.append("min_rating")
        if self.languages:
            active.append("languages")
        if self.quality_gate and self.languages:
            active.append("quality_gate")
        if self.min_vote_count > 0:
            active.append("min_vote_count")
        if self.providers:
            active.append("providers")
        return active

    def active_filter_count(self) -> int:
        return len(self.active_filters())

    def has_active_filters(self) -> bool:
        return self.active_filter_count() > 0


@dataclass
class LoadReport:
    expected: int = 0
    retrieved: int = 0
    batches: int = 0
    failed_batches: list[tuple[int, int]] = field(default_factory=list)
    duplicates: int = 0
    skipped_rows: int = 0
    count_failed: bool = False

    @property
    def complete(self) -> bool:
        return not self.count_failed and self.retrieved >= self.expected

    @property
    def missing(self) -> int:
        return max(0, self.expected - self.retrieved)


@dataclass
class CatalogStats:
    total_movies: int
    total_shows: int
    total_providers: int
    last_update: datetime | None = None
