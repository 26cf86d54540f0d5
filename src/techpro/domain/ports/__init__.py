"""Ports (interfaces) to the external backend."""

from techpro.domain.ports.blob_store import BlobStore
from techpro.domain.ports.change_feed import ChangeCallback, ChangeFeed, Subscription
from techpro.domain.ports.identity_provider import IdentityProvider
from techpro.domain.ports.row_store import RowStore

__all__ = [
    "BlobStore",
    "ChangeCallback",
    "ChangeFeed",
    "IdentityProvider",
    "RowStore",
    "Subscription",
]
