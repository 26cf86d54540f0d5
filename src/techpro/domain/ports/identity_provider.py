"""Identity provider port."""

from typing import Protocol


class IdentityProvider(Protocol):
    """Port for resolving the current authenticated actor."""

    async def current_user_id(self) -> str | None:
        """Get the stable identifier of the signed-in actor, or None when signed out."""
        ...
