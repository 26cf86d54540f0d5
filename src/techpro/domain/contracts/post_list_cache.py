"""Protocol for the local post list cache."""

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from techpro.domain.models.feed_entry import FeedEntry, FeedSnapshot
    from techpro.domain.models.like_state import LikeState


class PostListCacheProtocol(Protocol):
    """Protocol for the owned, ordered cache of feed rows."""

    def entries(self) -> list["FeedEntry"]:
        """Get the cached rows in display order."""
        ...

    def get(self, post_id: str) -> "FeedEntry | None":
        """Get the cached row for a post, or None if it is not cached."""
        ...

    def replace_all(self, entries: list["FeedEntry"]) -> None:
        """Replace the whole list with freshly fetched rows."""
        ...

    def snapshot(self, post_id: str) -> "FeedSnapshot | None":
        """Capture a row and its position so a later change can be undone."""
        ...

    def set_like_state(self, like_state: "LikeState") -> bool:
        """Replace the like state of one row.

        Returns:
            True if the post was cached and updated.
        """
        ...

    def remove(self, post_id: str) -> "FeedSnapshot | None":
        """Remove a row and return the snapshot needed to put it back."""
        ...

    def restore(self, snapshot: "FeedSnapshot") -> None:
        """Put a snapshotted row back in place."""
        ...

    def close(self) -> None:
        """Discard the cache; later writes become no-ops."""
        ...
