"""Cache adapters."""

from techpro.adapters.cache.post_list_cache import PostListCache

__all__ = ["PostListCache"]
