"""PostgREST row store adapter.

Translates RowQuery filters into PostgREST query parameters:
https://postgrest.org/en/stable/references/api/tables_views.html
"""

import logging
from typing import Any

from techpro.adapters.supabase.http_client import SupabaseHttpClient
from techpro.domain.errors import RemoteUnavailable
from techpro.domain.models.row_query import RowQuery
from techpro.domain.ports.row_store import RowStore

logger = logging.getLogger(__name__)

REST_PATH = "/rest/v1"

# Characters that force a value to be double-quoted inside an in.(...) list
_RESERVED_LIST_CHARS = set(',()"\\ ')


def format_value(value: Any) -> str:
    """Format a filter value the way PostgREST expects it."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _format_list_item(value: Any) -> str:
    text = format_value(value)
    if any(ch in _RESERVED_LIST_CHARS for ch in text):
        escaped = text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return text


def eq_params(eq: dict[str, Any]) -> dict[str, str]:
    """Build equality filter parameters."""
    return {column: f"eq.{format_value(value)}" for column, value in eq.items()}


def build_query_params(query: RowQuery) -> dict[str, str]:
    """Build PostgREST query parameters for a select.

    A column may carry only one filter operator per request.
    """
    params: dict[str, str] = {"select": query.columns}
    params.update(eq_params(query.eq))
    for column, value in query.neq.items():
        params[column] = f"neq.{format_value(value)}"
    for column, values in query.in_.items():
        items = ",".join(_format_list_item(value) for value in values)
        params[column] = f"in.({items})"
    if query.order_by:
        direction = "desc" if query.descending else "asc"
        params["order"] = f"{query.order_by}.{direction}"
    if query.limit is not None:
        params["limit"] = str(query.limit)
    return params


def parse_content_range_total(content_range: str | None) -> int:
    """Extract the total from a Content-Range header such as "0-24/25" or "*/0"."""
    if not content_range or "/" not in content_range:
        raise RemoteUnavailable(f"Missing row count in Content-Range: {content_range!r}")
    total = content_range.rsplit("/", 1)[1]
    if not total.isdigit():
        raise RemoteUnavailable(f"Row count not available in Content-Range: {content_range!r}")
    return int(total)


class SupabaseRestClient(RowStore):
    """Row store backed by the Supabase PostgREST endpoint."""

    def __init__(self, http: SupabaseHttpClient) -> None:
        """Initialize with the shared Supabase HTTP client."""
        self._http = http

    @staticmethod
    def _rows(body: Any) -> list[dict[str, Any]]:
        if isinstance(body, list):
            return [row for row in body if isinstance(row, dict)]
        if isinstance(body, dict):
            return [body]
        return []

    async def select(self, query: RowQuery) -> list[dict[str, Any]]:
        """Return the rows matching the query."""
        response = await self._http.request(
            "GET", f"{REST_PATH}/{query.table}", params=build_query_params(query)
        )
        rows = self._rows(response.body)
        logger.debug(f"Selected {len(rows)} row(s) from {query.table}")
        return rows

    async def count(self, table: str, eq: dict[str, Any]) -> int:
        """Count matching rows using an exact-count HEAD request."""
        params = {"select": "*", **eq_params(eq)}
        response = await self._http.request(
            "HEAD",
            f"{REST_PATH}/{table}",
            params=params,
            headers={"Prefer": "count=exact"},
        )
        return parse_content_range_total(response.headers.get("content-range"))

    async def insert(self, table: str, row: dict[str, Any]) -> list[dict[str, Any]]:
        """Insert a row and return the stored representation."""
        response = await self._http.request(
            "POST",
            f"{REST_PATH}/{table}",
            headers={"Prefer": "return=representation"},
            json_body=row,
        )
        return self._rows(response.body)

    async def upsert(
        self, table: str, row: dict[str, Any], on_conflict: str
    ) -> list[dict[str, Any]]:
        """Insert or merge a row keyed by the on_conflict column(s)."""
        response = await self._http.request(
            "POST",
            f"{REST_PATH}/{table}",
            params={"on_conflict": on_conflict},
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
            json_body=row,
        )
        return self._rows(response.body)

    async def delete(self, table: str, eq: dict[str, Any]) -> list[dict[str, Any]]:
        """Delete matching rows and return what was deleted."""
        if not eq:
            raise ValueError("Refusing to delete without filters")
        response = await self._http.request(
            "DELETE",
            f"{REST_PATH}/{table}",
            params=eq_params(eq),
            headers={"Prefer": "return=representation"},
        )
        rows = self._rows(response.body)
        logger.debug(f"Deleted {len(rows)} row(s) from {table}")
        return rows
