from __future__ import annotations

from datetime import datetime, timezone

from sqlmodel import Session, select

from .db import init_db, get_engine
from .models import CachedMedia, CachedProvider

DEMO_ITEMS: list[dict] = [
    {"id": 1, "tmdb_id": 603, "media_type": "movie", "title": "The Matrix", "release_date": "1999-03-31",
     "vote_average": 8.2, "vote_count": 26000, "popularity": 95.1, "genre_ids": [28, 878], "original_language": "en"},
    {"id": 2, "tmdb_id": 27205, "media_type": "movie", "title": "Inception", "release_date": "2010-07-15",
     "vote_average": 8.4, "vote_count": 36000, "popularity": 110.4, "genre_ids": [28, 878, 12], "original_language": "en"},
    {"id": 3, "tmdb_id": 1396, "media_type": "tv", "title": "Breaking Bad", "release_date": "2008-01-20",
     "vote_average": 8.9, "vote_count": 14000, "popularity": 210.7, "genre_ids": [18, 80], "original_language": "en"},
    {"id": 4, "tmdb_id": 20453, "media_type": "movie", "title": "3 Idiots", "release_date": "2009-12-23",
     "vote_average": 8.0, "vote_count": 2300, "popularity": 25.3, "genre_ids": [35, 18], "original_language": "hi"},
    {"id": 5, "tmdb_id": 360814, "media_type": "movie", "title": "Dangal", "release_date": "2016-12-21",
     "vote_average": 7.9, "vote_count": 1100, "popularity": 18.2, "genre_ids": [18], "original_language": "hi"},
    {"id": 6, "tmdb_id": 1003596, "media_type": "movie", "title": "Laapataa Ladies", "release_date": "2024-03-01",
     "vote_average": 7.6, "vote_count": 90, "popularity": 12.9, "genre_ids": [35, 18], "original_language": "hi"},
    {"id": 7, "tmdb_id": 579974, "media_type": "movie", "title": "RRR", "release_date": "2022-03-24",
     "vote_average": 7.8, "vote_count": 1600, "popularity": 30.6, "genre_ids": [28, 18], "original_language": "te"},
    {"id": 8, "tmdb_id": 95396, "media_type": "tv", "title": "Severance", "release_date": "2022-02-17",
     "vote_average": 8.4, "vote_count": 2200, "popularity": 60.5, "genre_ids": [18, 9648], "original_language": "en"},
    {"id": 9, "tmdb_id": 93405, "media_type": "tv", "title": "Squid Game", "release_date": "2021-09-17",
     "vote_average": 7.8, "vote_count": 14500, "popularity": 140.2, "genre_ids": [18, 9648], "original_language": "ko"},
    {"id": 10, "tmdb_id": 496243, "media_type": "movie", "title": "Parasite", "release_date": "2019-05-30",
     "vote_average": 8.5, "vote_count": 18000, "popularity": 70.8, "genre_ids": [35, 53, 18], "original_language": "ko"},
    {"id": 11, "tmdb_id": 1061474, "media_type": "movie", "title": "Manjummel Boys", "release_date": None,
     "vote_average": 7.4, "vote_count": 120, "popularity": 9.4, "genre_ids": [53, 18], "original_language": "ml"},
    {"id": 12, "tmdb_id": 66732, "media_type": "tv", "title": "Stranger Things", "release_date": "2016-07-15",
     "vote_average": 8.6, "vote_count": 17000, "popularity": 180.3, "genre_ids": [18, 9648], "original_language": "en"},
]

# (tmdb_id, media_type, region, provider_id, provider_name)
_OFFERS = [
    (603, "movie", "IN", 8, "Netflix"), (603, "movie", "IN", 119, "Prime Video"),
    (27205, "movie", "IN", 119, "Prime Video"),
    (1396, "tv", "IN", 8, "Netflix"),
    (20453, "movie", "IN", 8, "Netflix"), (20453, "movie", "IN", 119, "Prime Video"),
    (360814, "movie", "IN", 8, "Netflix"),
    (1003596, "movie", "IN", 8, "Netflix"),
    (579974, "movie", "IN", 8, "Netflix"), (579974, "movie", "IN", 2336, "JioHotstar"),
    (95396, "tv", "IN", 350, "Apple TV+"), (95396, "tv", "US", 350, "Apple TV+"),
    (93405, "tv", "IN", 8, "Netflix"),
    (496243, "movie", "US", 119, "Prime Video"),
    (66732, "tv", "IN", 8, "Netflix"),
]

DEMO_OFFERS: list[dict] = [
    {"id": n, "tmdb_id": t, "media_type": m, "region": r, "provider_id": p, "provider_name": name}
    for n, (t, m, r, p, name) in enumerate(_OFFERS, start=1)
]


def seed_minimal() -> None:
    init_db()
    engine = get_engine()
    now = datetime.now(timezone.utc)
    with Session(engine) as session:
        for row in DEMO_ITEMS:
            existing = session.exec(
                select(CachedMedia).where(CachedMedia.tmdb_id == row["tmdb_id"], CachedMedia.media_type == row["media_type"])
            ).first()
            if existing is None:
                data = {k: v for k, v in row.items() if k != "id"}
                session.add(CachedMedia(**data, cached_at=now, updated_at=now))
        for row in DEMO_OFFERS:
            existing = session.exec(
                select(CachedProvider).where(
                    CachedProvider.tmdb_id == row["tmdb_id"],
                    CachedProvider.media_type == row["media_type"],
                    CachedProvider.region == row["region"],
                    CachedProvider.provider_id == row["provider_id"],
                )
            ).first()
            if existing is None:
                session.add(CachedProvider(**{k: v for k, v in row.items() if k != "id"}))
        session.commit()


if __name__ == "__main__":
    seed_minimal()
