"""Optimistic like/unlike and delete-post mutations with reconciliation."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import replace
from typing import TYPE_CHECKING

from techpro.application.services.feed_service import LIKES_TABLE, POSTS_TABLE
from techpro.domain.errors import (
    AuthRequired,
    PartialCleanupFailure,
    PermissionDenied,
    RemoteError,
    RemoteRejected,
    RemoteUnavailable,
)
from techpro.domain.models import (
    MutationKind,
    MutationPhase,
    PendingMutation,
    Post,
    RowQuery,
)

if TYPE_CHECKING:
    from techpro.application.services.feed_service import FeedService
    from techpro.domain.contracts import NotifierProtocol, PostListCacheProtocol
    from techpro.domain.ports import BlobStore, IdentityProvider, RowStore

logger = logging.getLogger(__name__)


def _release(in_flight: Counter[str], post_id: str) -> None:
    in_flight[post_id] -= 1
    if in_flight[post_id] <= 0:
        del in_flight[post_id]


class OptimisticMutationReconciler:
    """Applies like and delete actions locally first, then settles them remotely.

    Every mutation captures its own snapshot of the affected cache row. A failed
    remote call restores that snapshot. For likes, an authoritative re-read after
    every settle is the final word, so the cache converges to backend state no
    matter in which order concurrent responses arrive.
    """

    def __init__(
        self,
        row_store: RowStore,
        identity: IdentityProvider,
        blob_store: BlobStore,
        cache: PostListCacheProtocol,
        feed_service: FeedService,
        notifier: NotifierProtocol,
    ) -> None:
        """Initialize the reconciler.

        Args:
            row_store: Backend row access.
            identity: Resolves the signed-in viewer.
            blob_store: Media storage, used for cleanup after deletes.
            cache: The post list cache; all local edits go through it.
            feed_service: Used for reconciliation reads and feed reloads.
            notifier: Shows transient notices when a primary mutation fails.
        """
        self._row_store = row_store
        self._identity = identity
        self._blob_store = blob_store
        self._cache = cache
        self._feed_service = feed_service
        self._notifier = notifier
        # Posts with unsettled like mutations keep their local like state on reloads
        self._likes_in_flight: Counter[str] = Counter()
        # Posts with unsettled deletes stay hidden on reloads
        self._deletes_in_flight: Counter[str] = Counter()

    async def _require_viewer(self, action: str) -> str:
        viewer_id = await self._identity.current_user_id()
        if viewer_id is None:
            raise AuthRequired(action)
        return viewer_id

    def _log_remote_failure(self, mutation: PendingMutation, error: RemoteError) -> None:
        if isinstance(error, RemoteUnavailable):
            logger.error(
                f"Backend unavailable during {mutation.kind.value} of {mutation.target_id}: {error}"
            )
        else:
            logger.warning(
                f"Backend rejected {mutation.kind.value} of {mutation.target_id}: {error}"
            )

    async def toggle_like(self, post_id: str, currently_liked: bool) -> PendingMutation:
        """Like or unlike a post.

        The cached row flips immediately. The like row is then inserted or deleted
        remotely; on failure the row is restored from this call's snapshot and the
        user is notified. Either way the like state is re-read afterwards.

        Args:
            post_id: The post to toggle.
            currently_liked: The liked-state the caller saw when the user acted.

        Returns:
            The settled mutation (committed or rolled back).

        Raises:
            AuthRequired: No signed-in viewer; nothing was changed.
        """
        viewer_id = await self._require_viewer("liking posts")

        snapshot = self._cache.snapshot(post_id)
        mutation = PendingMutation(
            kind=MutationKind.UNLIKE if currently_liked else MutationKind.LIKE,
            target_id=post_id,
            previous_snapshot=snapshot,
        )
        self._likes_in_flight[post_id] += 1
        try:
            if snapshot is not None:
                self._cache.set_like_state(snapshot.entry.like_state.toggled(currently_liked))
            mutation = replace(mutation, phase=MutationPhase.OPTIMISTIC)
            mutation = await self._send_like(mutation, viewer_id, currently_liked)

            try:
                await self._feed_service.reconcile_like(post_id, viewer_id)
            except RemoteError as e:
                logger.warning(f"Reconciliation read for post {post_id} failed: {e}")
        finally:
            _release(self._likes_in_flight, post_id)

        return mutation

    async def _send_like(
        self, mutation: PendingMutation, viewer_id: str, currently_liked: bool
    ) -> PendingMutation:
        like_key = {"post_id": mutation.target_id, "user_id": viewer_id}
        try:
            if currently_liked:
                await self._row_store.delete(LIKES_TABLE, like_key)
            else:
                await self._row_store.insert(LIKES_TABLE, like_key)
        except RemoteError as e:
            self._log_remote_failure(mutation, e)
            if mutation.previous_snapshot is not None:
                # Like state only; a post deleted meanwhile must stay gone
                self._cache.set_like_state(mutation.previous_snapshot.entry.like_state)
            self._notifier.notify(
                "Like failed" if mutation.kind is MutationKind.LIKE else "Unlike failed",
                "Your change could not be saved. Please try again.",
            )
            return replace(mutation, phase=MutationPhase.ROLLED_BACK, error=str(e))
        return replace(mutation, phase=MutationPhase.COMMITTED)

    async def delete_post(self, post_id: str) -> PendingMutation:
        """Delete one of the viewer's posts.

        The row leaves the cache immediately. The backend row is deleted scoped to
        the viewer as author, then attached media are removed best-effort. If the
        row deletion fails the post goes back to its old position.

        Returns:
            The settled mutation (committed or rolled back).

        Raises:
            AuthRequired: No signed-in viewer; nothing was changed.
            PermissionDenied: The cached post belongs to someone else.
        """
        viewer_id = await self._require_viewer("deleting posts")

        cached = self._cache.get(post_id)
        if cached is not None and cached.post.user_id != viewer_id:
            raise PermissionDenied(f"Post {post_id} belongs to another user")

        snapshot = self._cache.remove(post_id)
        mutation = PendingMutation(
            kind=MutationKind.DELETE_POST,
            target_id=post_id,
            previous_snapshot=snapshot,
            phase=MutationPhase.OPTIMISTIC,
        )
        self._deletes_in_flight[post_id] += 1
        try:
            return await self._send_delete(mutation, viewer_id)
        finally:
            _release(self._deletes_in_flight, post_id)

    async def _send_delete(self, mutation: PendingMutation, viewer_id: str) -> PendingMutation:
        post_id = mutation.target_id
        snapshot = mutation.previous_snapshot
        try:
            media_urls = await self._lookup_media_urls(post_id)
            deleted = await self._row_store.delete(
                POSTS_TABLE, {"id": post_id, "user_id": viewer_id}
            )
            if not deleted:
                # Ownership is enforced by the backend; zero rows means it refused.
                raise RemoteRejected("Post not found or not owned by the viewer")
        except RemoteError as e:
            self._log_remote_failure(mutation, e)
            if snapshot is not None:
                self._cache.restore(snapshot)
            self._notifier.notify("Delete failed", "The post could not be deleted.")
            return replace(mutation, phase=MutationPhase.ROLLED_BACK, error=str(e))

        mutation = replace(mutation, phase=MutationPhase.COMMITTED)
        logger.info(f"Deleted post {post_id}")

        try:
            await self._remove_media(media_urls)
        except PartialCleanupFailure as e:
            logger.warning(
                f"Media cleanup for post {post_id} failed: {e} (orphaned: {e.orphaned})"
            )

        try:
            await self._feed_service.load_feed(
                viewer_id,
                preserve_like_state_for=set(self._likes_in_flight),
                exclude=set(self._deletes_in_flight),
            )
        except RemoteError as e:
            logger.error(f"Feed reload after deleting post {post_id} failed: {e}")

        return mutation

    async def _lookup_media_urls(self, post_id: str) -> list[str]:
        rows = await self._row_store.select(
            RowQuery(table=POSTS_TABLE, eq={"id": post_id}, limit=1)
        )
        if not rows:
            return []
        return Post.model_validate(rows[0]).media_urls()

    async def _remove_media(self, media_urls: list[str]) -> None:
        """Remove stored media objects for the given public URLs.

        Raises:
            PartialCleanupFailure: The blob store refused or was unreachable.
        """
        paths: list[str] = []
        for url in media_urls:
            path = self._blob_store.path_from_url(url)
            if path is None:
                logger.debug(f"Skipping media URL outside the media bucket: {url}")
                continue
            paths.append(path)

        if not paths:
            return

        try:
            await self._blob_store.remove(paths)
        except RemoteError as e:
            raise PartialCleanupFailure(
                f"Could not remove {len(paths)} media object(s)", paths
            ) from e
        logger.debug(f"Removed {len(paths)} media object(s)")
