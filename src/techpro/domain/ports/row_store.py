"""Row store port."""

from typing import Any, Protocol

from techpro.domain.models.row_query import RowQuery


class RowStore(Protocol):
    """Port for reading and mutating rows in named collections.

    Implementations raise RemoteRejected or RemoteUnavailable on failure.
    """

    async def select(self, query: RowQuery) -> list[dict[str, Any]]:
        """Return the rows matching the query."""
        ...

    async def count(self, table: str, eq: dict[str, Any]) -> int:
        """Return the number of rows in the table matching all equality filters."""
        ...

    async def insert(self, table: str, row: dict[str, Any]) -> list[dict[str, Any]]:
        """Insert a row and return the stored representation."""
        ...

    async def upsert(
        self, table: str, row: dict[str, Any], on_conflict: str
    ) -> list[dict[str, Any]]:
        """Insert or update a row keyed by the on_conflict column(s)."""
        ...

    async def delete(self, table: str, eq: dict[str, Any]) -> list[dict[str, Any]]:
        """Delete rows matching all equality filters and return the deleted rows."""
        ...
