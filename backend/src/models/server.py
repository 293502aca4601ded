"""Server membership and channel models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

ChannelKind = Literal["text", "voice"]


class Membership(BaseModel):
    """A user's membership record in a server."""

    id: str
    role: str = Field("member", description="owner, admin or member")
    user_id: str
    server_id: str


class Channel(BaseModel):
    """Channel within a server. Only text channels are searchable."""

    id: str
    name: str
    type: str = Field("text", description="Channel kind (text, voice)")
    position: int = 0
    server_id: str


__all__ = ["ChannelKind", "Membership", "Channel"]
