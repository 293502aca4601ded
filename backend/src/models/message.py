"""Message models: store projections and the caller-facing payload."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Serializes with camelCase keys; accepts either casing on input."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Store projections (read-only rows loaded by MessageStore)
# ---------------------------------------------------------------------------


class AuthorRecord(BaseModel):
    id: str
    username: str
    display_name: str
    avatar_url: Optional[str] = None
    status: str = "offline"


class AttachmentRecord(BaseModel):
    id: str
    filename: str
    stored_as: str
    mime_type: str
    size: int


class ReactionRecord(BaseModel):
    emoji: str
    user_id: str


class EmbedRecord(BaseModel):
    id: str
    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    site_name: Optional[str] = None
    favicon: Optional[str] = None


class WebhookRecord(BaseModel):
    id: str
    name: str
    avatar_url: Optional[str] = None


class ReplyRecord(BaseModel):
    id: str
    content: str
    author_id: str
    author_username: str
    author_display_name: str


class MessageRecord(BaseModel):
    """A message row as stored, with its related rows attached."""

    id: str
    content: str
    type: str = "default"
    channel_id: str
    author_id: str
    created_at: datetime
    edited_at: Optional[datetime] = None
    pinned_at: Optional[datetime] = None
    pinned_by_id: Optional[str] = None
    reply_to_id: Optional[str] = None
    thread_id: Optional[str] = None
    webhook_id: Optional[str] = None
    author: Optional[AuthorRecord] = None
    attachments: List[AttachmentRecord] = Field(default_factory=list)
    reactions: List[ReactionRecord] = Field(default_factory=list)
    embeds: List[EmbedRecord] = Field(default_factory=list)
    reply_to: Optional[ReplyRecord] = None
    mentions: List[str] = Field(default_factory=list)
    webhook: Optional[WebhookRecord] = None


# ---------------------------------------------------------------------------
# Serialized payload (what API callers see)
# ---------------------------------------------------------------------------


class MessageAuthor(_CamelModel):
    id: str
    username: str
    display_name: str
    avatar_url: Optional[str] = None
    status: str = "offline"


class ReplyAuthor(_CamelModel):
    id: str
    username: str
    display_name: str


class ReplyPreview(_CamelModel):
    id: str
    content: str
    author: ReplyAuthor


class AttachmentPayload(_CamelModel):
    id: str
    filename: str
    url: str
    mime_type: str
    size: int


class ReactionSummary(_CamelModel):
    emoji: str
    count: int
    user_ids: List[str]


class EmbedPayload(_CamelModel):
    id: str
    url: str
    title: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    site_name: Optional[str] = None
    favicon: Optional[str] = None


class SerializedMessage(_CamelModel):
    """Message representation returned to API callers."""

    id: str
    content: str
    type: str
    channel_id: str
    author_id: str
    created_at: str = Field(..., description="ISO-8601 UTC timestamp")
    edited_at: Optional[str] = None
    author: Optional[MessageAuthor] = None
    attachments: List[AttachmentPayload] = Field(default_factory=list)
    reactions: List[ReactionSummary] = Field(default_factory=list)
    embeds: List[EmbedPayload] = Field(default_factory=list)
    reply_to: Optional[ReplyPreview] = None
    pinned_at: Optional[str] = None
    pinned_by_id: Optional[str] = None
    mentions: List[str] = Field(default_factory=list)
    thread_id: Optional[str] = None
    webhook_id: Optional[str] = None
    webhook_name: Optional[str] = None
    webhook_avatar_url: Optional[str] = None


__all__ = [
    "AuthorRecord",
    "AttachmentRecord",
    "ReactionRecord",
    "EmbedRecord",
    "ReplyRecord",
    "WebhookRecord",
    "MessageRecord",
    "MessageAuthor",
    "ReplyAuthor",
    "ReplyPreview",
    "AttachmentPayload",
    "ReactionSummary",
    "EmbedPayload",
    "SerializedMessage",
]
