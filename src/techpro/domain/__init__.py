"""Domain layer - core models, errors and ports."""

from techpro.domain.errors import (
    AuthRequired,
    PartialCleanupFailure,
    PermissionDenied,
    RemoteError,
    RemoteRejected,
    RemoteUnavailable,
    TechProError,
)
from techpro.domain.models import FeedEntry, LikeState, OnlineUser, Post, PresenceRecord
from techpro.domain.ports import BlobStore, ChangeFeed, IdentityProvider, RowStore

__all__ = [
    "AuthRequired",
    "BlobStore",
    "ChangeFeed",
    "FeedEntry",
    "IdentityProvider",
    "LikeState",
    "OnlineUser",
    "PartialCleanupFailure",
    "PermissionDenied",
    "Post",
    "PresenceRecord",
    "RemoteError",
    "RemoteRejected",
    "RemoteUnavailable",
    "RowStore",
    "TechProError",
]
