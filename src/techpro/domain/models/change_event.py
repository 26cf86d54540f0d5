"""Row change notification domain model."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ChangeType(str, Enum):
    """Row-level change types delivered by the change feed."""

    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class ChangeEvent(BaseModel):
    """A single row change in a collection."""

    model_config = ConfigDict(frozen=True)

    table: str
    type: ChangeType
    record: dict[str, Any] = Field(default_factory=dict)
    old_record: dict[str, Any] = Field(default_factory=dict)
