"""Adapters layer - external system integrations."""

from techpro.adapters.cache import PostListCache
from techpro.adapters.config import AppConfig
from techpro.adapters.notifications import LoggingNotifier
from techpro.adapters.supabase import (
    SupabaseAuthClient,
    SupabaseHttpClient,
    SupabaseRealtimeClient,
    SupabaseRestClient,
    SupabaseStorageClient,
)

__all__ = [
    "AppConfig",
    "LoggingNotifier",
    "PostListCache",
    "SupabaseAuthClient",
    "SupabaseHttpClient",
    "SupabaseRealtimeClient",
    "SupabaseRestClient",
    "SupabaseStorageClient",
]
