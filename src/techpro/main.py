"""Command line entry point for the TechPro client."""

import argparse
import asyncio
import logging
import signal
import sys
from dataclasses import dataclass

import aiohttp

from techpro.adapters.cache import PostListCache
from techpro.adapters.config import AppConfig
from techpro.adapters.notifications import LoggingNotifier
from techpro.adapters.supabase import (
    SupabaseAuthClient,
    SupabaseHttpClient,
    SupabaseRealtimeClient,
    SupabaseRestClient,
    SupabaseStorageClient,
)
from techpro.application.services import (
    FeedService,
    OptimisticMutationReconciler,
    PresenceHeartbeat,
)
from techpro.domain.errors import AuthRequired, TechProError
from techpro.domain.models import OnlineUser

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging once for the process."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


@dataclass
class TechProClient:
    """Wired-up adapters and services sharing one aiohttp session."""

    config: AppConfig
    rows: SupabaseRestClient
    identity: SupabaseAuthClient
    storage: SupabaseStorageClient
    realtime: SupabaseRealtimeClient
    cache: PostListCache
    notifier: LoggingNotifier
    feed: FeedService
    reconciler: OptimisticMutationReconciler

    @classmethod
    def create(cls, session: aiohttp.ClientSession, config: AppConfig) -> "TechProClient":
        """Build all components for a session."""
        http = SupabaseHttpClient(session, config)
        rows = SupabaseRestClient(http)
        identity = SupabaseAuthClient(http)
        storage = SupabaseStorageClient(http, config.media_bucket)
        realtime = SupabaseRealtimeClient(session, config)
        cache = PostListCache()
        notifier = LoggingNotifier()
        feed = FeedService(rows, cache, page_size=config.feed_page_size)
        reconciler = OptimisticMutationReconciler(
            row_store=rows,
            identity=identity,
            blob_store=storage,
            cache=cache,
            feed_service=feed,
            notifier=notifier,
        )
        return cls(
            config=config,
            rows=rows,
            identity=identity,
            storage=storage,
            realtime=realtime,
            cache=cache,
            notifier=notifier,
            feed=feed,
            reconciler=reconciler,
        )

    async def require_viewer(self, action: str) -> str:
        """Return the signed-in user id or raise AuthRequired."""
        viewer_id = await self.identity.current_user_id()
        if viewer_id is None:
            raise AuthRequired(action)
        return viewer_id


def _print_feed(client: TechProClient) -> None:
    entries = client.cache.entries()
    if not entries:
        print("No posts yet.")
        return
    for entry in entries:
        marker = "*" if entry.like_state.liked_by_viewer else " "
        preview = entry.post.content.replace("\n", " ")
        if len(preview) > 60:
            preview = preview[:60] + "..."
        print(f"{marker} {entry.post.id}  likes={entry.like_state.like_count:<4} {preview}")


def _print_online_users(users: list[OnlineUser]) -> None:
    names = ", ".join(user.full_name for user in users) or "nobody"
    logger.info(f"Online users ({len(users)}): {names}")


async def run_feed(client: TechProClient) -> int:
    """Load and print the feed."""
    viewer_id = await client.identity.current_user_id()
    await client.feed.load_feed(viewer_id)
    _print_feed(client)
    return 0


async def run_toggle_like(client: TechProClient, post_id: str, like: bool) -> int:
    """Like or unlike a post and print the reconciled state."""
    viewer_id = await client.require_viewer("liking posts")
    await client.feed.load_feed(viewer_id)
    mutation = await client.reconciler.toggle_like(post_id, currently_liked=not like)
    entry = client.cache.get(post_id)
    if entry is not None:
        state = entry.like_state
        print(
            f"{post_id}: {mutation.phase.value}, likes={state.like_count}, "
            f"liked={state.liked_by_viewer}"
        )
    else:
        print(f"{post_id}: {mutation.phase.value}")
    return 0 if mutation.error is None else 1


async def run_delete(client: TechProClient, post_id: str) -> int:
    """Delete one of the viewer's posts."""
    viewer_id = await client.require_viewer("deleting posts")
    await client.feed.load_feed(viewer_id)
    mutation = await client.reconciler.delete_post(post_id)
    print(f"{post_id}: {mutation.phase.value}")
    return 0 if mutation.error is None else 1


async def run_presence(client: TechProClient) -> int:
    """Keep the viewer online until interrupted, logging the online users view."""
    viewer_id = await client.require_viewer("presence")
    heartbeat = PresenceHeartbeat(
        client.rows,
        client.realtime,
        viewer_id,
        interval_seconds=client.config.heartbeat_interval_seconds,
        on_change=_print_online_users,
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop_event.set)
        except (NotImplementedError, RuntimeError):
            # Windows event loops do not support signal handlers
            pass

    await heartbeat.start()
    try:
        await stop_event.wait()
    finally:
        logger.info("Shutting down presence session...")
        await heartbeat.stop()
        client.cache.close()
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="TechPro client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Show the newest posts
  techpro feed

  # Like or unlike a post
  techpro like 6f1c2d3e-...
  techpro unlike 6f1c2d3e-...

  # Delete one of your posts
  techpro delete 6f1c2d3e-...

  # Stay online and watch who else is online
  techpro presence
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    subparsers.add_parser("feed", help="Show the newest posts")

    like_parser = subparsers.add_parser("like", help="Like a post")
    like_parser.add_argument("post_id", help="Post ID")

    unlike_parser = subparsers.add_parser("unlike", help="Remove your like from a post")
    unlike_parser.add_argument("post_id", help="Post ID")

    delete_parser = subparsers.add_parser("delete", help="Delete one of your posts")
    delete_parser.add_argument("post_id", help="Post ID")

    subparsers.add_parser("presence", help="Stay online and watch online users")
    return parser


async def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    config = AppConfig()
    configure_logging(config.log_level)

    async with aiohttp.ClientSession() as session:
        client = TechProClient.create(session, config)
        try:
            if args.command == "feed":
                return await run_feed(client)
            if args.command in ("like", "unlike"):
                return await run_toggle_like(client, args.post_id, like=args.command == "like")
            if args.command == "delete":
                return await run_delete(client, args.post_id)
            if args.command == "presence":
                return await run_presence(client)
        except AuthRequired as e:
            print(f"{e}. Set SUPABASE_ACCESS_TOKEN to a valid session token.", file=sys.stderr)
            return 1
        except TechProError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    parser.print_help()
    return 1


def cli_main() -> None:
    """Synchronous entry point for the console script."""
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    cli_main()
