"""Identity provider backed by the Supabase auth (GoTrue) endpoint."""

import logging

from techpro.adapters.supabase.http_client import SupabaseHttpClient
from techpro.domain.errors import RemoteRejected
from techpro.domain.ports.identity_provider import IdentityProvider

logger = logging.getLogger(__name__)

AUTH_USER_PATH = "/auth/v1/user"


class SupabaseAuthClient(IdentityProvider):
    """Resolves the signed-in user from the configured access token."""

    def __init__(self, http: SupabaseHttpClient) -> None:
        """Initialize with the shared Supabase HTTP client."""
        self._http = http
        self._user_id: str | None = None

    async def current_user_id(self) -> str | None:
        """Get the id of the signed-in user.

        Returns:
            The user id, or None without an access token or when the token is
            rejected. The id is remembered after the first successful lookup.

        Raises:
            RemoteUnavailable: The auth endpoint could not be reached.
        """
        if self._user_id is not None:
            return self._user_id
        if not self._http.access_token:
            return None

        try:
            response = await self._http.request("GET", AUTH_USER_PATH)
        except RemoteRejected as e:
            logger.info(f"Access token rejected, treating session as signed out: {e}")
            return None

        body = response.body if isinstance(response.body, dict) else {}
        user_id = body.get("id")
        if not user_id:
            logger.warning("Auth endpoint returned no user id")
            return None
        self._user_id = str(user_id)
        return self._user_id
