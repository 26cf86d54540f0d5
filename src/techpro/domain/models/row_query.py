"""Row query description passed to the row store."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RowQuery(BaseModel):
    """A filtered read of a named collection."""

    model_config = ConfigDict(frozen=True)

    table: str
    columns: str = "*"
    eq: dict[str, Any] = Field(default_factory=dict)
    neq: dict[str, Any] = Field(default_factory=dict)
    in_: dict[str, list[Any]] = Field(default_factory=dict)
    order_by: str | None = None
    descending: bool = False
    limit: int | None = None
