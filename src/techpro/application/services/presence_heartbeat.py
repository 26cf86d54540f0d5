"""Presence heartbeat and online users view."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from techpro.domain.errors import RemoteError
from techpro.domain.models import (
    UNKNOWN_USER_NAME,
    OnlineUser,
    PresenceRecord,
    PresenceStatus,
    RowQuery,
)

if TYPE_CHECKING:
    from techpro.domain.models import ChangeEvent
    from techpro.domain.ports import ChangeFeed, RowStore, Subscription

logger = logging.getLogger(__name__)

PRESENCE_TABLE = "user_presence"
PROFILES_TABLE = "profiles"
DEFAULT_HEARTBEAT_INTERVAL_SECONDS = 30.0

OnlineUsersListener = Callable[[list[OnlineUser]], None]


def _utc_now() -> datetime:
    return datetime.now(UTC)


class PresenceHeartbeat:
    """Keeps the local actor marked online and mirrors who else is online.

    Presence is best-effort: failed upserts are logged and the next scheduled
    beat acts as the retry. The online users view is rebuilt by a full refetch
    on every change notification from the presence table.
    """

    def __init__(
        self,
        row_store: RowStore,
        change_feed: ChangeFeed,
        actor_id: str,
        interval_seconds: float = DEFAULT_HEARTBEAT_INTERVAL_SECONDS,
        on_change: OnlineUsersListener | None = None,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        """Initialize the heartbeat for one actor session.

        Args:
            row_store: Backend row access.
            change_feed: Push notifications for presence table changes.
            actor_id: The signed-in actor this session reports for.
            interval_seconds: Seconds between heartbeats while visible.
            on_change: Optional listener called with every rebuilt online users view.
            clock: Source of last_seen timestamps.
        """
        self._row_store = row_store
        self._change_feed = change_feed
        self.actor_id = actor_id
        self.interval_seconds = interval_seconds
        self._on_change = on_change
        self._clock = clock
        self._task: asyncio.Task | None = None
        self._subscription: Subscription | None = None
        self._online_users: list[OnlineUser] = []
        self._fetch_generation = 0
        self._active = False
        self._discarded = False
        # Bumped on every start; work begun in an older session must not resume it
        self._session = 0
        # Fire-and-forget upserts must stay referenced until they finish
        self._background_tasks: set[asyncio.Task] = set()

    @property
    def online_users(self) -> list[OnlineUser]:
        """Current online users view, excluding the local actor."""
        return list(self._online_users)

    @property
    def is_beating(self) -> bool:
        """Whether the periodic heartbeat task is running."""
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        """Mark the actor online, subscribe to presence changes and start beating."""
        if self._active:
            logger.warning(f"Presence heartbeat for {self.actor_id} already running")
            return
        self._active = True
        self._discarded = False
        self._session += 1
        session = self._session

        await self._set_status(PresenceStatus.ONLINE)
        if not await self._still_current(session):
            return

        subscription: Subscription | None = None
        try:
            subscription = await self._change_feed.subscribe(
                PRESENCE_TABLE, self._on_presence_change
            )
        except RemoteError as e:
            logger.error(f"Failed to subscribe to presence changes: {e}")
        if not self._is_current(session):
            if subscription is not None:
                await self._unsubscribe(subscription)
            logger.debug(f"Presence session for {self.actor_id} ended during start")
            return
        self._subscription = subscription

        await self.refresh_online_users()
        if not self._is_current(session):
            return
        self._start_heartbeat()
        logger.info(f"Started presence heartbeat for {self.actor_id}")

    async def stop(self) -> None:
        """Tear down: stop beating, mark the actor offline and unsubscribe."""
        if not self._active:
            return
        self._active = False
        self._discarded = True

        await self._cancel_heartbeat()
        await self._set_status(PresenceStatus.OFFLINE)

        if self._subscription is not None:
            subscription, self._subscription = self._subscription, None
            await self._unsubscribe(subscription)
        logger.info(f"Stopped presence heartbeat for {self.actor_id}")

    async def beat(self) -> bool:
        """Send one heartbeat (full online upsert with a fresh last_seen).

        Returns:
            True if the upsert succeeded.
        """
        return await self._set_status(PresenceStatus.ONLINE)

    async def on_visibility_hidden(self) -> None:
        """Page hidden: pause the heartbeat and mark the actor offline right away."""
        if not self._active:
            return
        await self._cancel_heartbeat()
        await self._set_status(PresenceStatus.OFFLINE)

    async def on_visibility_visible(self) -> None:
        """Page visible again: mark the actor online and resume the heartbeat."""
        if not self._active:
            return
        session = self._session
        await self._set_status(PresenceStatus.ONLINE)
        if not await self._still_current(session):
            return
        self._start_heartbeat()

    def on_unload(self) -> None:
        """Schedule an offline upsert without waiting for it.

        May not complete if the process or loop goes away first; the actor then
        stays listed online until another write replaces the record.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop on unload, skipping offline upsert")
            return
        task = loop.create_task(self._set_status(PresenceStatus.OFFLINE))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def refresh_online_users(self) -> list[OnlineUser]:
        """Refetch all online actors except the local one and replace the view.

        Results of a fetch that finishes after a newer one started are dropped,
        as are results arriving after teardown.

        Returns:
            The online users view after the refresh.
        """
        self._fetch_generation += 1
        generation = self._fetch_generation

        try:
            presence_rows = await self._row_store.select(
                RowQuery(
                    table=PRESENCE_TABLE,
                    columns="user_id,status,last_seen",
                    eq={"status": PresenceStatus.ONLINE.value},
                    neq={"user_id": self.actor_id},
                )
            )
            records = [PresenceRecord.model_validate(row) for row in presence_rows]

            names: dict[str, str | None] = {}
            if records:
                profile_rows = await self._row_store.select(
                    RowQuery(
                        table=PROFILES_TABLE,
                        columns="id,full_name",
                        in_={"id": [record.user_id for record in records]},
                    )
                )
                names = {str(row["id"]): row.get("full_name") for row in profile_rows}
        except RemoteError as e:
            logger.error(f"Failed to fetch online users: {e}")
            return self.online_users

        if self._discarded or generation != self._fetch_generation:
            logger.debug(f"Dropping stale online users result (generation {generation})")
            return self.online_users

        self._online_users = [
            OnlineUser(
                user_id=record.user_id,
                status=record.status,
                last_seen=record.last_seen,
                full_name=names.get(record.user_id) or UNKNOWN_USER_NAME,
            )
            for record in records
        ]
        logger.debug(f"Online users refreshed: {len(self._online_users)}")
        if self._on_change is not None:
            self._on_change(self.online_users)
        return self.online_users

    async def _on_presence_change(self, event: ChangeEvent) -> None:
        logger.debug(f"Presence change ({event.type.value}), refetching online users")
        await self.refresh_online_users()

    async def _set_status(self, status: PresenceStatus) -> bool:
        record = PresenceRecord(user_id=self.actor_id, status=status, last_seen=self._clock())
        try:
            await self._row_store.upsert(PRESENCE_TABLE, record.to_row(), on_conflict="user_id")
        except RemoteError as e:
            logger.warning(f"Failed to mark {self.actor_id} {status.value}: {e}")
            return False
        return True

    def _is_current(self, session: int) -> bool:
        return self._active and session == self._session

    async def _still_current(self, session: int) -> bool:
        """Check a session after an online upsert.

        If the session was torn down while the upsert was in flight, the actor is
        marked offline again, since that upsert may have landed after stop's.
        """
        if self._is_current(session):
            return True
        if not self._active:
            await self._set_status(PresenceStatus.OFFLINE)
        return False

    async def _unsubscribe(self, subscription: Subscription) -> None:
        try:
            await subscription.unsubscribe()
        except RemoteError as e:
            logger.warning(f"Failed to unsubscribe from presence changes: {e}")

    def _start_heartbeat(self) -> None:
        if self.is_beating:
            return
        self._task = asyncio.create_task(self._heartbeat_loop())

    async def _cancel_heartbeat(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None

    async def _heartbeat_loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.interval_seconds)
                await self.beat()
        except asyncio.CancelledError:
            logger.debug(f"Heartbeat for {self.actor_id} cancelled")
            raise
