"""In-memory post list cache."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from techpro.domain.contracts.post_list_cache import PostListCacheProtocol
from techpro.domain.models.feed_entry import FeedEntry, FeedSnapshot

if TYPE_CHECKING:
    from techpro.domain.models.like_state import LikeState

logger = logging.getLogger(__name__)


class PostListCache(PostListCacheProtocol):
    """Ordered, in-memory list of feed rows.

    Entries are immutable; an update swaps exactly one entry and leaves every
    other entry object in place. Once closed, writes are ignored.
    """

    def __init__(self, entries: list[FeedEntry] | None = None) -> None:
        """Initialize the cache.

        Args:
            entries: Optional initial rows in display order.
        """
        self._entries: list[FeedEntry] = list(entries or [])
        self._closed = False

    @property
    def closed(self) -> bool:
        """Whether the cache was discarded."""
        return self._closed

    def entries(self) -> list[FeedEntry]:
        """Get the cached rows in display order.

        Returns:
            A shallow copy of the row list.
        """
        return list(self._entries)

    def _index_of(self, post_id: str) -> int | None:
        for index, entry in enumerate(self._entries):
            if entry.post_id == post_id:
                return index
        return None

    def get(self, post_id: str) -> FeedEntry | None:
        """Get the cached row for a post."""
        index = self._index_of(post_id)
        return None if index is None else self._entries[index]

    def replace_all(self, entries: list[FeedEntry]) -> None:
        """Replace the whole list with freshly fetched rows."""
        if self._closed:
            logger.debug("Ignoring feed refresh for a closed cache")
            return
        self._entries = list(entries)

    def snapshot(self, post_id: str) -> FeedSnapshot | None:
        """Capture a row and its position."""
        index = self._index_of(post_id)
        if index is None:
            return None
        return FeedSnapshot(entry=self._entries[index], index=index)

    def set_like_state(self, like_state: LikeState) -> bool:
        """Replace the like state of the matching row only.

        Returns:
            True if the post was cached and updated.
        """
        if self._closed:
            return False
        index = self._index_of(like_state.post_id)
        if index is None:
            return False
        current = self._entries[index]
        self._entries[index] = FeedEntry(post=current.post, like_state=like_state)
        return True

    def remove(self, post_id: str) -> FeedSnapshot | None:
        """Remove a row.

        Returns:
            Snapshot for restore(), or None if the post was not cached.
        """
        if self._closed:
            return None
        index = self._index_of(post_id)
        if index is None:
            return None
        entry = self._entries.pop(index)
        return FeedSnapshot(entry=entry, index=index)

    def restore(self, snapshot: FeedSnapshot) -> None:
        """Put a snapshotted row back.

        If the post is still cached its row is overwritten in place; otherwise it
        is reinserted at its saved index, clamped to the current list length.
        """
        if self._closed:
            return
        index = self._index_of(snapshot.entry.post_id)
        if index is not None:
            self._entries[index] = snapshot.entry
            return
        position = min(snapshot.index, len(self._entries))
        self._entries.insert(position, snapshot.entry)

    def close(self) -> None:
        """Discard the cache."""
        self._closed = True
        logger.debug("Post list cache closed")
