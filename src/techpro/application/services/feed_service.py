"""Feed loading and authoritative like-state reads."""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Collection
from typing import TYPE_CHECKING

from techpro.domain.models import FeedEntry, LikeState, Post, RowQuery

if TYPE_CHECKING:
    from techpro.domain.contracts import PostListCacheProtocol
    from techpro.domain.ports import RowStore

logger = logging.getLogger(__name__)

POSTS_TABLE = "posts"
LIKES_TABLE = "post_likes"
DEFAULT_FEED_PAGE_SIZE = 50


class FeedService:
    """Loads the post feed into the cache and re-reads like state from the backend."""

    def __init__(
        self,
        row_store: RowStore,
        cache: PostListCacheProtocol,
        page_size: int = DEFAULT_FEED_PAGE_SIZE,
    ) -> None:
        """Initialize the feed service.

        Args:
            row_store: Backend row access.
            cache: The post list cache that receives loaded rows.
            page_size: Maximum number of posts to load, newest first.
        """
        self._row_store = row_store
        self._cache = cache
        self._page_size = page_size
        # Per-post count of reconciliation reads started; only the newest may write
        self._reconcile_generation: Counter[str] = Counter()

    async def load_feed(
        self,
        viewer_id: str | None,
        preserve_like_state_for: Collection[str] = (),
        exclude: Collection[str] = (),
    ) -> list[FeedEntry]:
        """Fetch the newest posts with their like state and commit them to the cache.

        Args:
            viewer_id: The signed-in viewer, or None to load without liked-state.
            preserve_like_state_for: Posts whose cached like state must survive the
                reload because a like mutation on them has not settled yet.
            exclude: Posts left out of the result because a delete of them has not
                settled yet.

        Returns:
            The loaded entries in display order.
        """
        rows = await self._row_store.select(
            RowQuery(
                table=POSTS_TABLE,
                order_by="created_at",
                descending=True,
                limit=self._page_size,
            )
        )
        posts = [Post.model_validate(row) for row in rows]

        like_rows: list[dict] = []
        if posts:
            like_rows = await self._row_store.select(
                RowQuery(
                    table=LIKES_TABLE,
                    columns="post_id,user_id",
                    in_={"post_id": [post.id for post in posts]},
                )
            )

        counts: Counter[str] = Counter(str(row["post_id"]) for row in like_rows)
        liked = {
            str(row["post_id"])
            for row in like_rows
            if viewer_id is not None and str(row.get("user_id")) == viewer_id
        }

        entries: list[FeedEntry] = []
        for post in posts:
            if post.id in exclude:
                continue
            cached = self._cache.get(post.id) if post.id in preserve_like_state_for else None
            like_state = (
                cached.like_state
                if cached is not None
                else LikeState(
                    post_id=post.id,
                    liked_by_viewer=post.id in liked,
                    like_count=counts[post.id],
                )
            )
            entries.append(FeedEntry(post=post, like_state=like_state))
        self._cache.replace_all(entries)
        logger.debug(f"Loaded {len(entries)} posts into the feed cache")
        return entries

    async def fetch_like_state(self, post_id: str, viewer_id: str) -> LikeState:
        """Read the authoritative like count and viewer liked-state for one post."""
        like_count = await self._row_store.count(LIKES_TABLE, {"post_id": post_id})
        viewer_rows = await self._row_store.count(
            LIKES_TABLE, {"post_id": post_id, "user_id": viewer_id}
        )
        return LikeState(
            post_id=post_id,
            liked_by_viewer=viewer_rows > 0,
            like_count=max(like_count, 0),
        )

    async def reconcile_like(self, post_id: str, viewer_id: str) -> LikeState:
        """Overwrite the cached like state of a post with the backend's values.

        A read that finishes after a newer read of the same post was started is
        returned but not written to the cache.
        """
        self._reconcile_generation[post_id] += 1
        generation = self._reconcile_generation[post_id]
        like_state = await self.fetch_like_state(post_id, viewer_id)
        if generation != self._reconcile_generation[post_id]:
            logger.debug(f"Dropping stale like state for post {post_id} (read {generation})")
            return like_state
        if self._cache.set_like_state(like_state):
            logger.debug(
                f"Reconciled post {post_id}: count={like_state.like_count}, "
                f"liked={like_state.liked_by_viewer}"
            )
        return like_state
