"""Domain models for the TechPro client."""

from techpro.domain.models.change_event import ChangeEvent, ChangeType
from techpro.domain.models.feed_entry import FeedEntry, FeedSnapshot
from techpro.domain.models.like_state import LikeState
from techpro.domain.models.pending_mutation import MutationKind, MutationPhase, PendingMutation
from techpro.domain.models.post import Post, Profile
from techpro.domain.models.presence import (
    UNKNOWN_USER_NAME,
    OnlineUser,
    PresenceRecord,
    PresenceStatus,
)
from techpro.domain.models.row_query import RowQuery

__all__ = [
    "UNKNOWN_USER_NAME",
    "ChangeEvent",
    "ChangeType",
    "FeedEntry",
    "FeedSnapshot",
    "LikeState",
    "MutationKind",
    "MutationPhase",
    "OnlineUser",
    "PendingMutation",
    "Post",
    "PresenceRecord",
    "PresenceStatus",
    "Profile",
    "RowQuery",
]
