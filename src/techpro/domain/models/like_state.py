"""Per-post, per-viewer like state."""

from pydantic import BaseModel, ConfigDict, Field


class LikeState(BaseModel):
    """Like count of a post and whether the current viewer liked it.

    Between a local action and its reconciliation the values are an estimate;
    after reconciliation they mirror the backend.
    """

    model_config = ConfigDict(frozen=True)

    post_id: str
    liked_by_viewer: bool = False
    like_count: int = Field(default=0, ge=0)

    def toggled(self, currently_liked: bool) -> "LikeState":
        """Return the optimistic state after the viewer toggles their like.

        Args:
            currently_liked: What the caller believes the viewer's liked-state is.
                May be stale; the count never drops below zero either way.
        """
        if currently_liked:
            return LikeState(
                post_id=self.post_id,
                liked_by_viewer=False,
                like_count=max(self.like_count - 1, 0),
            )
        return LikeState(
            post_id=self.post_id,
            liked_by_viewer=True,
            like_count=self.like_count + 1,
        )
