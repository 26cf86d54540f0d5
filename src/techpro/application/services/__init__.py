"""Application services (use cases)."""

from techpro.application.services.feed_service import FeedService
from techpro.application.services.mutation_reconciler import OptimisticMutationReconciler
from techpro.application.services.presence_heartbeat import PresenceHeartbeat

__all__ = ["FeedService", "OptimisticMutationReconciler", "PresenceHeartbeat"]
