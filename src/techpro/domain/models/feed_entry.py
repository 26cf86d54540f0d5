"""Cached feed rows and snapshots of them."""

from pydantic import BaseModel, ConfigDict

from techpro.domain.models.like_state import LikeState
from techpro.domain.models.post import Post


class FeedEntry(BaseModel):
    """One row of the local post list: the post and its like state."""

    model_config = ConfigDict(frozen=True)

    post: Post
    like_state: LikeState

    @property
    def post_id(self) -> str:
        """Identifier of the cached post."""
        return self.post.id


class FeedSnapshot(BaseModel):
    """Saved copy of a feed row and its position, enough to undo a local change."""

    model_config = ConfigDict(frozen=True)

    entry: FeedEntry
    index: int
