"""Search request/response models."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .message import SerializedMessage


class SearchRequest(BaseModel):
    """Canonical message search request after normalization."""

    model_config = ConfigDict(frozen=True)

    server_id: str
    query: str = Field("", description="Trimmed search text; empty matches nothing")
    channel_id: Optional[str] = None
    author_id: Optional[str] = None
    limit: int = Field(25, ge=1, le=50)
    cursor: Optional[str] = Field(None, description="Id of the last message of the previous page")


class SearchPage(BaseModel):
    """One page of search results."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"example": {"data": [], "nextCursor": None}},
    )

    data: List[SerializedMessage] = Field(default_factory=list)
    next_cursor: Optional[str] = Field(None, alias="nextCursor")

    @classmethod
    def empty(cls) -> "SearchPage":
        return cls(data=[], next_cursor=None)


__all__ = ["SearchRequest", "SearchPage"]
