"""Change feed backed by Supabase Realtime (Phoenix channels over websocket)."""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
from typing import TYPE_CHECKING, Any

import aiohttp
from pydantic import ValidationError

from techpro.domain.models.change_event import ChangeEvent
from techpro.domain.ports.change_feed import ChangeFeed, Subscription

if TYPE_CHECKING:
    from techpro.adapters.config.app_config import AppConfig
    from techpro.domain.ports.change_feed import ChangeCallback

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "1.0.0"
PHOENIX_TOPIC = "phoenix"


def build_join_message(
    topic: str, schema: str, table: str, event: str, access_token: str, ref: str
) -> dict[str, Any]:
    """Build the phx_join message that subscribes a channel to row changes."""
    return {
        "topic": topic,
        "event": "phx_join",
        "payload": {
            "config": {
                "broadcast": {"self": False},
                "presence": {"key": ""},
                "postgres_changes": [{"event": event, "schema": schema, "table": table}],
            },
            "access_token": access_token,
        },
        "ref": ref,
        "join_ref": ref,
    }


def parse_change_message(message: dict[str, Any], table: str) -> ChangeEvent | None:
    """Extract a row change from an incoming channel message.

    Returns:
        The change, or None for replies, system messages and other tables.
    """
    if message.get("event") != "postgres_changes":
        return None
    payload = message.get("payload")
    data = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(data, dict) or data.get("table") != table:
        return None
    try:
        return ChangeEvent(
            table=table,
            type=data.get("type", ""),
            record=data.get("record") or {},
            old_record=data.get("old_record") or {},
        )
    except ValidationError as e:
        logger.warning(f"Ignoring malformed change message for {table}: {e}")
        return None


class RealtimeSubscription(Subscription):
    """One channel on its own websocket, reconnecting until unsubscribed."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        config: AppConfig,
        table: str,
        callback: ChangeCallback,
        event: str = "*",
        schema: str = "public",
    ) -> None:
        """Initialize the subscription.

        Args:
            session: Shared aiohttp session.
            config: Application configuration (URL, key, token, timings).
            table: Table to watch.
            callback: Coroutine function called with each change.
            event: Change type filter or "*".
            schema: Database schema of the table.
        """
        self._session = session
        self._url = config.realtime_url
        self._api_key = config.supabase_anon_key
        self._access_token = config.supabase_access_token or config.supabase_anon_key
        self._keepalive_seconds = config.realtime_heartbeat_seconds
        self._reconnect_seconds = config.realtime_reconnect_seconds
        self.table = table
        self.event = event
        self.schema = schema
        self.topic = f"realtime:{table}-changes"
        self._callback = callback
        self._refs = itertools.count(1)
        self._ws: aiohttp.ClientWebSocketResponse | None = None
        self._task: asyncio.Task | None = None
        self._closed = False

    def start(self) -> None:
        """Start the connection task."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self._run())

    async def unsubscribe(self) -> None:
        """Leave the channel and close the socket."""
        if self._closed:
            return
        self._closed = True
        ws = self._ws
        if ws is not None and not ws.closed:
            try:
                await ws.send_json(
                    {"topic": self.topic, "event": "phx_leave", "payload": {}, "ref": self._ref()}
                )
            except (aiohttp.ClientError, ConnectionError) as e:
                logger.debug(f"Could not send phx_leave for {self.topic}: {e}")
        if self._task is not None and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        logger.info(f"Unsubscribed from {self.topic}")

    def _ref(self) -> str:
        return str(next(self._refs))

    async def _run(self) -> None:
        while not self._closed:
            try:
                await self._connect_once()
            except asyncio.CancelledError:
                raise
            except (aiohttp.ClientError, asyncio.TimeoutError, ConnectionError) as e:
                logger.warning(f"Realtime connection for {self.topic} failed: {e}")
            if self._closed:
                break
            logger.info(
                f"Reconnecting realtime channel {self.topic} in {self._reconnect_seconds}s"
            )
            await asyncio.sleep(self._reconnect_seconds)

    async def _connect_once(self) -> None:
        async with self._session.ws_connect(
            self._url, params={"apikey": self._api_key, "vsn": PROTOCOL_VERSION}
        ) as ws:
            self._ws = ws
            await ws.send_json(
                build_join_message(
                    self.topic,
                    self.schema,
                    self.table,
                    self.event,
                    self._access_token,
                    self._ref(),
                )
            )
            keepalive = asyncio.create_task(self._keepalive(ws))
            try:
                async for msg in ws:
                    if msg.type == aiohttp.WSMsgType.TEXT:
                        await self._handle_text(msg.data)
                    elif msg.type in (aiohttp.WSMsgType.CLOSED, aiohttp.WSMsgType.ERROR):
                        break
            finally:
                keepalive.cancel()
                self._ws = None

    async def _keepalive(self, ws: aiohttp.ClientWebSocketResponse) -> None:
        while not ws.closed:
            await asyncio.sleep(self._keepalive_seconds)
            await ws.send_json(
                {"topic": PHOENIX_TOPIC, "event": "heartbeat", "payload": {}, "ref": self._ref()}
            )

    async def _handle_text(self, raw: str) -> None:
        try:
            message = json.loads(raw)
        except ValueError:
            logger.warning(f"Ignoring non-JSON realtime frame on {self.topic}")
            return
        if not isinstance(message, dict):
            return

        event = message.get("event")
        if event == "phx_reply" and message.get("topic") == self.topic:
            status = (message.get("payload") or {}).get("status")
            if status == "ok":
                logger.info(f"Joined realtime channel {self.topic}")
            else:
                logger.error(f"Realtime channel {self.topic} join failed: {message.get('payload')}")
            return
        if event in ("phx_error", "phx_close"):
            logger.warning(f"Realtime channel {self.topic} reported {event}")
            return

        change = parse_change_message(message, self.table)
        if change is None:
            return
        try:
            await self._callback(change)
        except Exception as e:
            logger.error(f"Change callback for {self.topic} failed: {e}", exc_info=True)


class SupabaseRealtimeClient(ChangeFeed):
    """Creates realtime subscriptions for row changes."""

    def __init__(
        self, session: aiohttp.ClientSession, config: AppConfig, schema: str = "public"
    ) -> None:
        """Initialize the realtime client.

        Args:
            session: Shared aiohttp session.
            config: Application configuration.
            schema: Database schema of watched tables.
        """
        self._session = session
        self._config = config
        self._schema = schema

    async def subscribe(
        self, table: str, callback: ChangeCallback, event: str = "*"
    ) -> RealtimeSubscription:
        """Start watching a table; changes are delivered to the callback."""
        subscription = RealtimeSubscription(
            self._session,
            self._config,
            table,
            callback,
            event=event,
            schema=self._schema,
        )
        subscription.start()
        logger.info(f"Subscribed to {event} changes on {self._schema}.{table}")
        return subscription
