"""Blob store backed by Supabase Storage."""

import logging
import secrets
import string
import time
from urllib.parse import quote, unquote, urlsplit

from techpro.adapters.supabase.http_client import SupabaseHttpClient
from techpro.domain.ports.blob_store import BlobStore

logger = logging.getLogger(__name__)

STORAGE_PATH = "/storage/v1/object"

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def build_object_path(owner_id: str, filename: str, now_ms: int | None = None) -> str:
    """Build a collision-resistant object path namespaced by owner.

    Format: "{owner_id}/{epoch_ms}-{random}-{filename}".
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(7))
    safe_name = filename.replace("/", "_")
    return f"{owner_id}/{now_ms}-{suffix}-{safe_name}"


class SupabaseStorageClient(BlobStore):
    """Stores post media in one public Supabase Storage bucket."""

    def __init__(self, http: SupabaseHttpClient, bucket: str) -> None:
        """Initialize the storage client.

        Args:
            http: Shared Supabase HTTP client.
            bucket: Public bucket name, e.g. "post-images".
        """
        self._http = http
        self.bucket = bucket
        self._public_prefix = f"{STORAGE_PATH}/public/{bucket}/"

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Upload an object without overwriting, and return its public URL."""
        await self._http.request(
            "POST",
            f"{STORAGE_PATH}/{self.bucket}/{quote(path)}",
            headers={
                "Content-Type": content_type,
                "cache-control": "3600",
                "x-upsert": "false",
            },
            data=data,
        )
        logger.debug(f"Uploaded {len(data)} bytes to {self.bucket}/{path}")
        return self.public_url(path)

    def public_url(self, path: str) -> str:
        """Build the public URL of an object path."""
        return f"{self._http.base_url}{self._public_prefix}{quote(path)}"

    def path_from_url(self, url: str) -> str | None:
        """Recover an object path from a public URL of this bucket.

        Returns:
            The unquoted object path, or None for URLs of other buckets or hosts.
        """
        parts = urlsplit(url)
        if parts.netloc and parts.netloc != urlsplit(self._http.base_url).netloc:
            return None
        url_path = parts.path
        marker = url_path.find(self._public_prefix)
        if marker == -1:
            return None
        path = unquote(url_path[marker + len(self._public_prefix) :])
        return path or None

    async def remove(self, paths: list[str]) -> None:
        """Remove objects by path."""
        if not paths:
            return
        await self._http.request(
            "DELETE",
            f"{STORAGE_PATH}/{self.bucket}",
            json_body={"prefixes": paths},
        )
        logger.debug(f"Removed {len(paths)} object(s) from {self.bucket}")
