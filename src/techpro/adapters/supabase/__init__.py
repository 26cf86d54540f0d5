"""Supabase backend adapters."""

from techpro.adapters.supabase.auth_client import SupabaseAuthClient
from techpro.adapters.supabase.http_client import SupabaseHttpClient
from techpro.adapters.supabase.realtime_client import SupabaseRealtimeClient
from techpro.adapters.supabase.rest_client import SupabaseRestClient
from techpro.adapters.supabase.storage_client import SupabaseStorageClient

__all__ = [
    "SupabaseAuthClient",
    "SupabaseHttpClient",
    "SupabaseRealtimeClient",
    "SupabaseRestClient",
    "SupabaseStorageClient",
]
