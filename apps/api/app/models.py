from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import JSON, DateTime, UniqueConstraint
from sqlmodel import SQLModel, Field

from .settings import settings

try:
    from sqlalchemy.dialects.postgresql import JSONB
except ImportError:  # pragma: no cover - optional dependency
    JSONB = None

JSONType = JSON if settings.use_sqlite or JSONB is None else JSONB


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CachedMedia(SQLModel, table=True):
    __tablename__ = "cached_movies"
    __table_args__ = (UniqueConstraint("tmdb_id", "media_type", name="uq_cached_movies_item"),)
    id: Optional[int] = Field(default=None, primary_key=True)
    tmdb_id: int = Field(index=True)
    media_type: str = Field(index=True)  # movie|tv
    title: str
    poster_path: Optional[str] = None
    backdrop_path: Optional[str] = None
    overview: str = ""
    release_date: Optional[str] = None
    vote_average: float = 0.0
    vote_count: int = 0
    popularity: float = 0.0
    genre_ids: list = Field(default_factory=list, sa_type=JSONType)
    original_language: str = ""
    cached_at: datetime = Field(default_factory=_utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=_utcnow, sa_type=DateTime(timezone=True))


class CachedProvider(SQLModel, table=True):
    __tablename__ = "cached_providers"
    __table_args__ = (
        UniqueConstraint("tmdb_id", "media_type", "region", "provider_id", name="uq_cached_providers_offer"),
    )
    id: Optional[int] = Field(default=None, primary_key=True)
    tmdb_id: int = Field(index=True)
    media_type: str
    region: str = Field(index=True)
    provider_id: int = Field(index=True)
    provider_name: Optional[str] = None
    logo_path: Optional[str] = None
    display_priority: int = 0
