"""Contracts (protocols) for internal collaborators."""

from techpro.domain.contracts.notifier import NotifierProtocol
from techpro.domain.contracts.post_list_cache import PostListCacheProtocol

__all__ = ["NotifierProtocol", "PostListCacheProtocol"]
