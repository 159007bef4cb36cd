from datetime import date

import pytest

from services.discovery.filters import LOCAL_STAGES, FilterPipeline
from services.discovery.types import CatalogItem, FilterCriteria, MediaKind


def _item(i, **kw):
    base = dict(
        external_id=i,
        title=f"Title {i}",
        media_kind=MediaKind.movie,
        release_date=date(2000 + (i % 25), 1, 1),
        vote_average=5.0 + (i % 5),
        vote_count=50 * i,
        popularity=float(i),
        genre_ids=frozenset({28} if i % 2 else {18}),
        original_language="en" if i % 3 else "hi",
    )
    base.update(kw)
    return CatalogItem(**base)


def _catalog():
    items = [_item(i) for i in range(1, 31)]
    items.append(_item(40, media_kind=MediaKind.show, genre_ids=frozenset({18, 80})))
    items.append(_item(41, release_date=None))
    return items


CRITERIA = [
    FilterCriteria(content_type="show"),
    FilterCriteria(genres=[28]),
    FilterCriteria(year_range=(2005, 2010)),
    FilterCriteria(min_rating=8.0),
    FilterCriteria(languages=["hi"]),
    FilterCriteria(languages=["hi"], quality_gate=True),
    FilterCriteria(min_vote_count=1000),
    FilterCriteria(content_type="movie", genres=[18, 80], year_range=(2001, 2020), min_rating=6, languages=["en", "hi"]),
]


def test_default_criteria_keeps_everything_in_order():
    items = _catalog()
    assert FilterPipeline().apply(items, FilterCriteria()) == items


@pytest.mark.parametrize("criteria", CRITERIA)
def test_filters_are_idempotent(criteria):
    pipeline = FilterPipeline()
    once = pipeline.apply(_catalog(), criteria)
    assert pipeline.apply(once, criteria) == once


@pytest.mark.parametrize("criteria", CRITERIA)
def test_filters_only_narrow_and_keep_order(criteria):
    items = _catalog()
    out = FilterPipeline().apply(items, criteria)
    assert len(out) <= len(items)
    positions = [items.index(i) for i in out]
    assert positions == sorted(positions)


def test_each_stage_is_a_noop_at_default_and_narrows_otherwise():
    items = _catalog()
    default = FilterCriteria()
    for name, stage in LOCAL_STAGES:
        assert stage(items, default) == items, name
    narrowing = {
        "content_type": FilterCriteria(content_type="show"),
        "genres": FilterCriteria(genres=[80]),
        "year_range": FilterCriteria(year_range=(2010, 2012)),
        "min_rating": FilterCriteria(min_rating=9),
        "languages": FilterCriteria(languages=["hi"]),
        "quality_gate": FilterCriteria(languages=["hi"], quality_gate=True),
        "min_vote_count": FilterCriteria(min_vote_count=1000),
    }
    assert set(narrowing) == {name for name, _ in LOCAL_STAGES}
    for name, stage in LOCAL_STAGES:
        assert len(stage(items, narrowing[name])) < len(items), name


def test_input_list_is_not_mutated():
    items = _catalog()
    snapshot = list(items)
    FilterPipeline().apply(items, FilterCriteria(genres=[28], min_rating=7))
    assert items == snapshot


def test_content_type_matches_media_kind():
    out = FilterPipeline().apply(_catalog(), FilterCriteria(content_type="show"))
    assert [i.external_id for i in out] == [40]
    movies = FilterPipeline().apply(_catalog(), FilterCriteria(content_type="movie"))
    assert all(i.media_kind == MediaKind.movie for i in movies)


def test_genres_match_any_not_all():
    items = [
        _item(1, genre_ids=frozenset({28})),
        _item(2, genre_ids=frozenset({35})),
        _item(3, genre_ids=frozenset({28, 35})),
        _item(4, genre_ids=frozenset()),
    ]
    out = FilterPipeline().apply(items, FilterCriteria(genres=[28, 35]))
    assert [i.external_id for i in out] == [1, 2, 3]


def test_year_range_is_inclusive():
    items = [_item(i, release_date=date(y, 6, 1)) for i, y in enumerate([2004, 2005, 2010, 2011])]
    out = FilterPipeline().apply(items, FilterCriteria(year_range=(2005, 2010)))
    assert [i.year for i in out] == [2005, 2010]


def test_undated_item_excluded_only_when_year_range_changes():
    undated = _item(99, release_date=None)
    pipeline = FilterPipeline()
    assert pipeline.apply([undated], FilterCriteria(year_range=(1990, 2025))) == [undated]
    assert pipeline.apply([undated], FilterCriteria(year_range=(1990, 2024))) == []
    assert pipeline.apply([undated], FilterCriteria(year_range=(1900, 2100))) == []


def test_inverted_year_range_degrades_to_empty():
    assert FilterPipeline().apply(_catalog(), FilterCriteria(year_range=(2020, 2000))) == []


def test_rating_and_vote_floors_are_inclusive():
    items = [_item(1, vote_average=7.0, vote_count=500), _item(2, vote_average=6.9, vote_count=499)]
    assert [i.external_id for i in FilterPipeline().apply(items, FilterCriteria(min_rating=7.0))] == [1]
    assert [i.external_id for i in FilterPipeline().apply(items, FilterCriteria(min_vote_count=500))] == [1]


def test_languages_match_any():
    items = [_item(1, original_language="hi"), _item(2, original_language="ta"), _item(3, original_language="en")]
    out = FilterPipeline().apply(items, FilterCriteria(languages=["hi", "ta"]))
    assert [i.external_id for i in out] == [1, 2]


def test_quality_gate_applies_only_with_languages():
    items = [
        _item(1, original_language="hi", vote_average=7.5, vote_count=150),
        _item(2, original_language="hi", vote_average=7.5, vote_count=20),
        _item(3, original_language="hi", vote_average=5.5, vote_count=900),
    ]
    pipeline = FilterPipeline()
    gated = pipeline.apply(items, FilterCriteria(languages=["hi"], quality_gate=True))
    assert [i.external_id for i in gated] == [1]
    assert pipeline.apply(items, FilterCriteria(quality_gate=True)) == items


def test_provider_stage_skipped_without_providers():
    class Boom:
        def filter_by_providers(self, *a, **kw):
            raise AssertionError("resolver must not be called")

    items = _catalog()
    assert FilterPipeline(Boom()).apply(items, FilterCriteria(min_rating=6)) == [i for i in items if i.vote_average >= 6]


def test_provider_stage_uses_configured_region():
    seen = {}

    class Recorder:
        def filter_by_providers(self, items, provider_ids, mode, region):
            seen.update(ids=list(provider_ids), mode=mode, region=region)
            return items[:1]

    out = FilterPipeline(Recorder(), region="US").apply(_catalog(), FilterCriteria(providers=[8], provider_mode="all"))
    assert len(out) == 1
    assert seen == {"ids": [8], "mode": "all", "region": "US"}
