"""Tests for the command line entry point."""

from pathlib import Path

import pytest

from techpro.adapters.cache import PostListCache
from techpro.adapters.config import AppConfig
from techpro.adapters.notifications import LoggingNotifier
from techpro.application.services import FeedService, OptimisticMutationReconciler
from techpro.main import TechProClient, build_parser, main, run_delete, run_feed, run_toggle_like
from tests.fakes import FakeBlobStore, FakeChangeFeed, FakeIdentity, FakeRowStore, make_post_row


def _client(row_store: FakeRowStore, viewer_id: str | None = "viewer") -> TechProClient:
    identity = FakeIdentity(viewer_id)
    blob_store = FakeBlobStore()
    cache = PostListCache()
    notifier = LoggingNotifier()
    feed = FeedService(row_store, cache)
    return TechProClient(
        config=AppConfig.for_testing(),
        rows=row_store,
        identity=identity,
        storage=blob_store,
        realtime=FakeChangeFeed(),
        cache=cache,
        notifier=notifier,
        feed=feed,
        reconciler=OptimisticMutationReconciler(
            row_store, identity, blob_store, cache, feed, notifier
        ),
    )


@pytest.fixture
def row_store() -> FakeRowStore:
    """Backend with one post by the viewer and one by someone else."""
    return FakeRowStore(
        {
            "posts": [
                make_post_row("mine", user_id="viewer", minutes_ago=1),
                make_post_row("theirs", user_id="author-1", minutes_ago=2),
            ],
            "post_likes": [{"post_id": "theirs", "user_id": "author-1"}],
        }
    )


def test_parser_accepts_commands() -> None:
    """Given like arguments, when parsing, then the command and post id are set."""
    args = build_parser().parse_args(["like", "p1"])

    assert args.command == "like"
    assert args.post_id == "p1"


@pytest.mark.asyncio
async def test_run_feed_prints_posts(
    row_store: FakeRowStore, capsys: pytest.CaptureFixture[str]
) -> None:
    """Given two posts, when running feed, then both are printed newest first."""
    exit_code = await run_feed(_client(row_store))

    out = capsys.readouterr().out.splitlines()
    assert exit_code == 0
    assert "mine" in out[0]
    assert "theirs" in out[1]
    assert "likes=1" in out[1]


@pytest.mark.asyncio
async def test_run_feed_with_no_posts(capsys: pytest.CaptureFixture[str]) -> None:
    """Given no posts, when running feed, then a placeholder is printed."""
    await run_feed(_client(FakeRowStore({"posts": []})))

    assert "No posts yet." in capsys.readouterr().out


@pytest.mark.asyncio
async def test_run_like_prints_reconciled_state(
    row_store: FakeRowStore, capsys: pytest.CaptureFixture[str]
) -> None:
    """Given an unliked post, when running like, then the committed state is printed."""
    exit_code = await run_toggle_like(_client(row_store), "theirs", like=True)

    assert exit_code == 0
    assert "theirs: committed, likes=2, liked=True" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_run_like_twice_reports_rollback(
    row_store: FakeRowStore, capsys: pytest.CaptureFixture[str]
) -> None:
    """Given the viewer already liked, when running like again, then the rolled back state is reported."""
    row_store.rows("post_likes").append({"post_id": "theirs", "user_id": "viewer"})

    exit_code = await run_toggle_like(_client(row_store), "theirs", like=True)

    assert exit_code == 1
    assert "theirs: rolled_back, likes=2, liked=True" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_run_delete(row_store: FakeRowStore, capsys: pytest.CaptureFixture[str]) -> None:
    """Given the viewer's post, when running delete, then it is committed."""
    exit_code = await run_delete(_client(row_store), "mine")

    assert exit_code == 0
    assert "mine: committed" in capsys.readouterr().out
    assert [row["id"] for row in row_store.rows("posts")] == ["theirs"]


@pytest.mark.asyncio
async def test_main_without_command_prints_help(capsys: pytest.CaptureFixture[str]) -> None:
    """Given no command, when running main, then help is printed and the exit code is 1."""
    assert await main([]) == 1
    assert "usage:" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_main_like_without_token_requires_sign_in(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    """Given no access token, when liking, then a sign-in hint is printed and the exit code is 1."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("SUPABASE_ACCESS_TOKEN", raising=False)

    exit_code = await main(["like", "p1"])

    assert exit_code == 1
    assert "Sign in required for liking posts" in capsys.readouterr().err
