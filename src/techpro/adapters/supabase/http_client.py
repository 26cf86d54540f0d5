"""Shared HTTP plumbing for the Supabase REST, auth and storage endpoints."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import aiohttp

from techpro.adapters.api_request_logger import log_api_request
from techpro.domain.errors import RemoteError, RemoteRejected, RemoteUnavailable

if TYPE_CHECKING:
    from techpro.adapters.config.app_config import AppConfig

logger = logging.getLogger(__name__)

_TRANSIENT_REASONS = {
    408: "Request timeout",
    429: "Rate limit exceeded",
    502: "Bad gateway (server error)",
    503: "Service unavailable",
    504: "Gateway timeout",
}

_REJECTED_REASONS = {
    400: "Bad request",
    401: "Not authorized",
    403: "Forbidden",
    404: "Not found",
    409: "Conflict",
}


@dataclass(frozen=True)
class HttpResponse:
    """Status, lower-cased headers and decoded body of a completed request."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: Any = None


def _body_message(body: Any) -> str | None:
    """Extract the error message from a PostgREST, GoTrue or Storage error body."""
    if isinstance(body, dict):
        for key in ("message", "msg", "error_description", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    if isinstance(body, str) and body:
        return body[:200]
    return None


def error_from_response(status: int, body: Any) -> RemoteError:
    """Map a failed HTTP response to the error taxonomy.

    Timeouts, throttling and server errors are RemoteUnavailable; every other
    4xx is RemoteRejected.
    """
    if status in _TRANSIENT_REASONS or status >= 500:
        reason = _TRANSIENT_REASONS.get(status, f"HTTP {status}")
        return RemoteUnavailable(reason, status_code=status)

    reason = _body_message(body) or _REJECTED_REASONS.get(status, f"HTTP {status}")
    return RemoteRejected(reason, status_code=status)


class SupabaseHttpClient:
    """Sends authenticated requests to a Supabase project over aiohttp."""

    def __init__(self, session: aiohttp.ClientSession, config: AppConfig) -> None:
        """Initialize the HTTP client.

        Args:
            session: Shared aiohttp session.
            config: Application configuration with URL, key and token.
        """
        self._session = session
        self.base_url = config.supabase_url
        self.anon_key = config.supabase_anon_key
        self.access_token = config.supabase_access_token
        self._timeout = aiohttp.ClientTimeout(total=config.request_timeout_seconds)

    def auth_headers(self) -> dict[str, str]:
        """Headers identifying the project and, if signed in, the user."""
        return {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {self.access_token or self.anon_key}",
        }

    async def request(
        self,
        method: str,
        path: str,
        params: dict[str, str] | None = None,
        headers: dict[str, str] | None = None,
        json_body: Any = None,
        data: bytes | None = None,
    ) -> HttpResponse:
        """Send a request and decode the response.

        Args:
            method: HTTP method.
            path: Path below the project URL, e.g. "/rest/v1/posts".
            params: Query parameters.
            headers: Extra headers merged over the auth headers.
            json_body: JSON request body.
            data: Raw request body (uploads).

        Returns:
            The decoded response for 2xx statuses.

        Raises:
            RemoteRejected: The backend refused the request.
            RemoteUnavailable: Transport failure, timeout or server-side error.
        """
        url = f"{self.base_url}{path}"
        request_headers = {**self.auth_headers(), **(headers or {})}
        log_api_request(
            method,
            url,
            params=params,
            headers=request_headers,
            payload=json_body if data is None else data,
        )

        try:
            async with self._session.request(
                method,
                url,
                params=params,
                headers=request_headers,
                json=json_body,
                data=data,
                timeout=self._timeout,
            ) as response:
                body = await self._read_body(response)
                if response.status >= 400:
                    error = error_from_response(response.status, body)
                    logger.debug(f"{method} {path} failed: {error}")
                    raise error
                return HttpResponse(
                    status=response.status,
                    headers={k.lower(): v for k, v in response.headers.items()},
                    body=body,
                )
        except asyncio.TimeoutError as e:
            raise RemoteUnavailable(f"Timed out after {self._timeout.total}s") from e
        except aiohttp.ClientError as e:
            raise RemoteUnavailable(f"Connection error: {e}") from e

    @staticmethod
    async def _read_body(response: aiohttp.ClientResponse) -> Any:
        if response.method == "HEAD" or response.status == 204:
            return None
        text = await response.text()
        if not text:
            return None
        if "json" in response.headers.get("Content-Type", ""):
            try:
                return json.loads(text)
            except ValueError:
                return text
        return text
