from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from feedrank.db import to_async_url
from feedrank.normalizer import normalize_record
from feedrank.schemas import FeedRequest, Item, SortMode, ViewerContext


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("algorithm", SortMode.ALGORITHM),
        ("latest", SortMode.LATEST),
        (" Popular ", SortMode.POPULAR),
        ("hot", SortMode.ALGORITHM),
        ("", SortMode.ALGORITHM),
        (None, SortMode.ALGORITHM),
        (42, SortMode.ALGORITHM),
        (SortMode.LATEST, SortMode.LATEST),
    ],
)
def test_sort_mode_parse(raw, expected):
    assert SortMode.parse(raw) is expected


def test_feed_request_defaults_and_validation():
    req = FeedRequest()
    assert req.limit == 20
    assert req.offset == 0
    assert req.sort_mode == SortMode.ALGORITHM
    assert req.filters.tag_id is None

    with pytest.raises(ValidationError):
        FeedRequest(limit=0)
    with pytest.raises(ValidationError):
        FeedRequest(offset=-1)


@pytest.mark.parametrize("score", [None, "abc", -3, float("nan")])
def test_bad_scores_become_zero(score):
    assert Item(id=1, popularity_score=score).popularity_score == 0.0


def test_numeric_string_score_is_accepted():
    assert Item(id=1, popularity_score="12.5").popularity_score == 12.5


def test_created_at_is_normalized_to_utc():
    naive = Item(id=1, created_at=datetime(2026, 1, 1, 8, 0))
    assert naive.created_at == datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc)

    iso = Item(id=2, created_at="2026-01-01T10:00:00+02:00")
    assert iso.created_at == datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc)

    zulu = Item(id=3, created_at="2026-01-01T08:00:00Z")
    assert zulu.created_at == datetime(2026, 1, 1, 8, 0, tzinfo=timezone.utc)

    assert Item(id=4, created_at="yesterday").created_at is None


def test_items_are_immutable():
    item = Item(id=1, popularity_score=3)
    with pytest.raises(ValidationError):
        item.popularity_score = 10


def test_viewer_context():
    anon = ViewerContext.anonymous()
    assert anon.is_anonymous
    assert not anon.has_seen(1)

    viewer = ViewerContext(viewer_id=7).with_viewed([1, 2])
    assert viewer.viewer_id == "7"
    assert viewer.has_seen(2)
    assert not viewer.has_seen(3)
    assert ViewerContext(viewer_id="").is_anonymous


def test_normalize_record_maps_loose_shapes():
    item = normalize_record(
        {
            "id": 9,
            "hot_score": 4.5,
            "created_at": "2026-03-01T00:00:00Z",
            "is_pinned": 1,
            "tags": [{"id": "t1", "name": "News"}, {"tag_id": "t2"}, "t3"],
            "user_id": 42,
            "post_type": "qna",
        }
    )
    assert item.popularity_score == 4.5
    assert item.is_pinned is True
    assert item.tag_ids == frozenset({"t1", "t2", "t3"})
    assert item.owner_id == "42"
    assert item.item_type == "qna"


def test_normalize_record_fills_missing_fields():
    item = normalize_record({"id": 1})
    assert item.popularity_score == 0.0
    assert item.created_at is None
    assert item.is_pinned is False
    assert item.tag_ids == frozenset()


@pytest.mark.parametrize("flag", ["false", "0", 0, False, None, "no"])
def test_normalize_record_reads_falsy_flags_as_unpinned(flag):
    item = normalize_record({"id": 1, "is_pinned": flag, "hot_score": 3})
    assert item.is_pinned is False


@pytest.mark.parametrize("flag", ["true", "1", 1, True])
def test_normalize_record_reads_truthy_flags_as_pinned(flag):
    assert normalize_record({"id": 1, "isPinned": flag}).is_pinned is True


@pytest.mark.parametrize(
    "url, expected",
    [
        ("sqlite+sqlite:///./feed.db", "sqlite+aiosqlite:///./feed.db"),
        ("sqlite:///./feed.db", "sqlite+aiosqlite:///./feed.db"),
        ("postgresql://u:p@h/db", "postgresql+asyncpg://u:p@h/db"),
        ("sqlite+aiosqlite:///x.db", "sqlite+aiosqlite:///x.db"),
    ],
)
def test_to_async_url(url, expected):
    assert to_async_url(url) == expected
