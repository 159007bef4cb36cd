from __future__ import annotations

from typing import Sequence

from .types import CatalogItem

MIN_QUERY_LENGTH = 2


def quick_search(items: Sequence[CatalogItem], query: str | None) -> Sequence[CatalogItem]:
    """Case-insensitive substring match on titles.

    Queries shorter than two characters return ``items`` itself, untouched.
    """
    if not query or len(query) < MIN_QUERY_LENGTH:
        return items
    needle = query.casefold()
    return [i for i in items if needle in i.title.casefold()]
