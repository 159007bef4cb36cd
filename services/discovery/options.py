"""Option tables the filter UI offers for each criteria dimension."""
from __future__ import annotations

import json
import logging
import os

logger = logging.getLogger("discovery.options")

GENRES: dict[int, str] = {
    28: "Action", 35: "Comedy", 18: "Drama", 53: "Thriller", 80: "Crime", 10749: "Romance",
    878: "Sci-Fi", 27: "Horror", 16: "Animation", 10751: "Family", 14: "Fantasy", 36: "History",
    10402: "Music", 9648: "Mystery", 12: "Adventure", 10752: "War",
}

PROVIDERS: dict[int, str] = {
    8: "Netflix",
    119: "Prime Video",
    2336: "JioHotstar",
    350: "Apple TV+",
}

LANGUAGES: dict[str, str] = {
    "en": "English", "hi": "Hindi", "te": "Telugu", "ta": "Tamil", "ml": "Malayalam",
    "kn": "Kannada", "ko": "Korean", "ja": "Japanese", "es": "Spanish", "fr": "French",
}

SORTS: dict[str, str] = {
    "popularity": "Popularity",
    "rating": "Rating",
    "release_date": "Release Date",
    "votes": "Most Voted",
}

RATING_STEPS = (0, 6.5, 7.0, 7.5, 8.0, 8.5, 9.0)
VOTE_COUNT_STEPS = (0, 100, 500, 1000, 5000)
DECADES = ((2020, 2029), (2010, 2019), (2000, 2009), (1990, 1999), (1980, 1989))


def provider_map() -> dict[int, str]:
    """Provider names, extended/overridden by ``PROVIDER_MAP`` (JSON ``{"id": "Name"}``)."""
    base = dict(PROVIDERS)
    raw = os.getenv("PROVIDER_MAP")
    if not raw:
        return base
    try:
        override = json.loads(raw)
    except ValueError as e:
        logger.warning("ignoring malformed PROVIDER_MAP: %s", e)
        return base
    for k, v in override.items():
        try:
            base[int(k)] = str(v)
        except (TypeError, ValueError):
            logger.warning("ignoring PROVIDER_MAP entry %r", k)
    return base


def all_options() -> dict:
    return {
        "genres": [{"id": k, "name": v} for k, v in GENRES.items()],
        "providers": [{"id": k, "name": v} for k, v in provider_map().items()],
        "languages": [{"code": k, "name": v} for k, v in LANGUAGES.items()],
        "sorts": [{"value": k, "label": v} for k, v in SORTS.items()],
        "ratings": list(RATING_STEPS),
        "vote_counts": list(VOTE_COUNT_STEPS),
        "decades": [{"start": s, "end": e} for s, e in DECADES],
    }
