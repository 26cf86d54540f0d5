"""Change feed port."""

from collections.abc import Awaitable, Callable
from typing import Protocol

from techpro.domain.models.change_event import ChangeEvent

ChangeCallback = Callable[[ChangeEvent], Awaitable[None]]


class Subscription(Protocol):
    """Disposable handle for a change feed registration."""

    async def unsubscribe(self) -> None:
        """Stop delivering changes to the callback."""
        ...


class ChangeFeed(Protocol):
    """Port for push notifications about row changes."""

    async def subscribe(
        self, table: str, callback: ChangeCallback, event: str = "*"
    ) -> Subscription:
        """Register a callback invoked on every matching row change in the table.

        Args:
            table: Collection to watch.
            callback: Coroutine function called with each change.
            event: "INSERT", "UPDATE", "DELETE" or "*" for all of them.
        """
        ...
