"""Tests for the feed service."""

import asyncio

import pytest

from techpro.adapters.cache import PostListCache
from techpro.application.services import FeedService
from techpro.domain.errors import RemoteUnavailable
from techpro.domain.models import LikeState
from tests.fakes import FakeRowStore, make_post_row


@pytest.fixture
def row_store() -> FakeRowStore:
    """Backend with three posts and a few likes."""
    return FakeRowStore(
        {
            "posts": [
                make_post_row("old", minutes_ago=30),
                make_post_row("new", minutes_ago=0),
                make_post_row("mid", minutes_ago=10),
            ],
            "post_likes": [
                {"post_id": "new", "user_id": "viewer"},
                {"post_id": "new", "user_id": "other"},
                {"post_id": "mid", "user_id": "other"},
            ],
        }
    )


@pytest.mark.asyncio
async def test_load_feed_orders_newest_first_with_like_state(row_store: FakeRowStore) -> None:
    """Given posts and likes, when loading the feed, then entries are newest first with counts."""
    cache = PostListCache()
    service = FeedService(row_store, cache)

    entries = await service.load_feed("viewer")

    assert [e.post_id for e in entries] == ["new", "mid", "old"]
    assert [e.like_state.like_count for e in entries] == [2, 1, 0]
    assert [e.like_state.liked_by_viewer for e in entries] == [True, False, False]
    assert cache.entries() == entries


@pytest.mark.asyncio
async def test_load_feed_without_viewer_marks_nothing_liked(row_store: FakeRowStore) -> None:
    """Given no signed-in viewer, when loading the feed, then counts load but nothing is liked."""
    service = FeedService(row_store, PostListCache())

    entries = await service.load_feed(None)

    assert entries[0].like_state.like_count == 2
    assert not any(e.like_state.liked_by_viewer for e in entries)


@pytest.mark.asyncio
async def test_load_feed_respects_page_size(row_store: FakeRowStore) -> None:
    """Given a page size of two, when loading the feed, then only the two newest posts load."""
    service = FeedService(row_store, PostListCache(), page_size=2)

    entries = await service.load_feed("viewer")

    assert [e.post_id for e in entries] == ["new", "mid"]


@pytest.mark.asyncio
async def test_load_feed_with_no_posts_skips_likes_query() -> None:
    """Given an empty posts table, when loading the feed, then likes are not queried."""
    row_store = FakeRowStore({"posts": []})
    service = FeedService(row_store, PostListCache())

    entries = await service.load_feed("viewer")

    assert entries == []
    assert ("select", "post_likes") not in row_store.calls


@pytest.mark.asyncio
async def test_load_feed_preserves_like_state_of_pending_posts(row_store: FakeRowStore) -> None:
    """Given a post with an unsettled local like, when reloading, then its cached like state is kept."""
    cache = PostListCache()
    service = FeedService(row_store, cache)
    await service.load_feed("viewer")
    cache.set_like_state(LikeState(post_id="old", liked_by_viewer=True, like_count=1))

    await service.load_feed("viewer", preserve_like_state_for={"old"})

    entry = cache.get("old")
    assert entry is not None
    assert entry.like_state == LikeState(post_id="old", liked_by_viewer=True, like_count=1)


@pytest.mark.asyncio
async def test_load_feed_failure_leaves_cache_untouched(row_store: FakeRowStore) -> None:
    """Given a loaded feed, when a reload fails, then the error propagates and the cache is unchanged."""
    cache = PostListCache()
    service = FeedService(row_store, cache)
    await service.load_feed("viewer")
    before = cache.entries()
    row_store.fail_next("select", "posts", RemoteUnavailable("timeout"))

    with pytest.raises(RemoteUnavailable):
        await service.load_feed("viewer")

    assert cache.entries() == before


@pytest.mark.asyncio
async def test_reconcile_like_overwrites_cached_estimate(row_store: FakeRowStore) -> None:
    """Given a wrong local estimate, when reconciling, then the cache mirrors backend values."""
    cache = PostListCache()
    service = FeedService(row_store, cache)
    await service.load_feed("viewer")
    cache.set_like_state(LikeState(post_id="new", liked_by_viewer=False, like_count=9))

    state = await service.reconcile_like("new", "viewer")

    assert state == LikeState(post_id="new", liked_by_viewer=True, like_count=2)
    entry = cache.get("new")
    assert entry is not None
    assert entry.like_state == state


@pytest.mark.asyncio
async def test_fetch_like_state_uses_counts(row_store: FakeRowStore) -> None:
    """Given likes in the backend, when fetching like state, then two count reads are made."""
    service = FeedService(row_store, PostListCache())

    state = await service.fetch_like_state("mid", "viewer")

    assert state == LikeState(post_id="mid", liked_by_viewer=False, like_count=1)
    assert row_store.calls.count(("count", "post_likes")) == 2


@pytest.mark.asyncio
async def test_load_feed_leaves_out_excluded_posts(row_store: FakeRowStore) -> None:
    """Given a post with an unsettled delete, when reloading, then it stays out of the cache."""
    cache = PostListCache()
    service = FeedService(row_store, cache)

    await service.load_feed("viewer", exclude={"mid"})

    assert [e.post_id for e in cache.entries()] == ["new", "old"]


@pytest.mark.asyncio
async def test_older_reconciliation_read_does_not_overwrite_newer(
    row_store: FakeRowStore,
) -> None:
    """Given an older read still in flight, when a newer read settles first, then the older result is not written."""
    cache = PostListCache()
    service = FeedService(row_store, cache)
    await service.load_feed("viewer")
    row_store.hold_next("count", "post_likes").set()
    viewer_count_gate = row_store.hold_next("count", "post_likes")

    older = asyncio.create_task(service.reconcile_like("mid", "viewer"))
    for _ in range(100):
        if row_store.calls.count(("count", "post_likes")) >= 2:
            break
        await asyncio.sleep(0)
    row_store.rows("post_likes").append({"post_id": "mid", "user_id": "viewer"})
    newer = await service.reconcile_like("mid", "viewer")
    viewer_count_gate.set()
    stale = await older

    assert newer == LikeState(post_id="mid", liked_by_viewer=True, like_count=2)
    assert stale.like_count == 1
    entry = cache.get("mid")
    assert entry is not None
    assert entry.like_state == newer
