"""Pending optimistic mutation domain model."""

from dataclasses import dataclass
from enum import Enum

from techpro.domain.models.feed_entry import FeedSnapshot


class MutationKind(str, Enum):
    """Kinds of optimistic mutations."""

    LIKE = "like"
    UNLIKE = "unlike"
    DELETE_POST = "delete_post"


class MutationPhase(str, Enum):
    """Lifecycle: idle -> optimistic -> committed | rolled_back."""

    IDLE = "idle"
    OPTIMISTIC = "optimistic"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass(frozen=True)
class PendingMutation:
    """A local change applied ahead of its remote confirmation."""

    kind: MutationKind
    target_id: str
    previous_snapshot: FeedSnapshot | None
    phase: MutationPhase = MutationPhase.IDLE
    error: str | None = None

    @property
    def settled(self) -> bool:
        """Whether the remote call has completed either way."""
        return self.phase in (MutationPhase.COMMITTED, MutationPhase.ROLLED_BACK)
