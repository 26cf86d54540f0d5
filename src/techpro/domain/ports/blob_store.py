"""Blob store port."""

from typing import Protocol


class BlobStore(Protocol):
    """Port for storing media objects and addressing them by public URL."""

    async def upload(self, path: str, data: bytes, content_type: str) -> str:
        """Upload an object and return its durable public URL."""
        ...

    def public_url(self, path: str) -> str:
        """Build the public URL of an object path."""
        ...

    def path_from_url(self, url: str) -> str | None:
        """Recover the object path from a public URL, or None if it is not ours."""
        ...

    async def remove(self, paths: list[str]) -> None:
        """Remove objects by path."""
        ...
