"""Presence domain models."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict

UNKNOWN_USER_NAME = "Unknown User"


class PresenceStatus(str, Enum):
    """Presence status of an actor."""

    ONLINE = "online"
    OFFLINE = "offline"


class PresenceRecord(BaseModel):
    """Current presence of one actor. Upserted, never deleted; last write wins."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    user_id: str
    status: PresenceStatus
    last_seen: datetime

    def to_row(self) -> dict[str, str]:
        """Serialize for an upsert into the presence table."""
        return {
            "user_id": self.user_id,
            "status": self.status.value,
            "last_seen": self.last_seen.isoformat(),
        }


class OnlineUser(BaseModel):
    """An online actor as shown in the online users list."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    status: PresenceStatus
    last_seen: datetime
    full_name: str = UNKNOWN_USER_NAME
