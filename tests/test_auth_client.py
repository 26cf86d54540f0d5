"""Tests for the Supabase auth identity provider."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from techpro.adapters.supabase.auth_client import SupabaseAuthClient
from techpro.adapters.supabase.http_client import HttpResponse
from techpro.domain.errors import RemoteRejected, RemoteUnavailable


def _http(access_token: str | None, **request_kwargs: object) -> MagicMock:
    http = MagicMock()
    http.access_token = access_token
    http.request = AsyncMock(**request_kwargs)
    return http


@pytest.mark.asyncio
async def test_without_token_is_signed_out() -> None:
    """Given no access token, when resolving the user, then None is returned without a request."""
    http = _http(None)

    assert await SupabaseAuthClient(http).current_user_id() is None
    http.request.assert_not_awaited()


@pytest.mark.asyncio
async def test_resolves_and_remembers_user_id() -> None:
    """Given a valid token, when resolving twice, then the user endpoint is called once."""
    http = _http("jwt", return_value=HttpResponse(status=200, body={"id": "u1"}))
    auth = SupabaseAuthClient(http)

    assert await auth.current_user_id() == "u1"
    assert await auth.current_user_id() == "u1"
    http.request.assert_awaited_once_with("GET", "/auth/v1/user")


@pytest.mark.asyncio
async def test_rejected_token_is_signed_out() -> None:
    """Given an expired token, when resolving the user, then None is returned."""
    http = _http("expired", side_effect=RemoteRejected("invalid JWT", 401))

    assert await SupabaseAuthClient(http).current_user_id() is None


@pytest.mark.asyncio
async def test_unreachable_auth_endpoint_propagates() -> None:
    """Given the auth endpoint is down, when resolving the user, then RemoteUnavailable propagates."""
    http = _http("jwt", side_effect=RemoteUnavailable("timeout"))

    with pytest.raises(RemoteUnavailable):
        await SupabaseAuthClient(http).current_user_id()


@pytest.mark.asyncio
async def test_body_without_id_is_signed_out() -> None:
    """Given a user body without id, when resolving the user, then None is returned."""
    http = _http("jwt", return_value=HttpResponse(status=200, body={}))

    assert await SupabaseAuthClient(http).current_user_id() is None
