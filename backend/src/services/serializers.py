"""Convert stored messages into the API payload."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Sequence

from ..models.message import (
    AttachmentPayload,
    EmbedPayload,
    MessageAuthor,
    MessageRecord,
    ReactionRecord,
    ReactionSummary,
    ReplyAuthor,
    ReplyPreview,
    SerializedMessage,
)
from .database import format_timestamp


def _iso(value: Optional[datetime]) -> Optional[str]:
    return format_timestamp(value) if value else None


def aggregate_reactions(reactions: Sequence[ReactionRecord]) -> List[ReactionSummary]:
    """Group individual reactions by emoji, keeping first-seen order."""
    grouped: Dict[str, List[str]] = {}
    for reaction in reactions:
        grouped.setdefault(reaction.emoji, []).append(reaction.user_id)
    return [
        ReactionSummary(emoji=emoji, count=len(user_ids), user_ids=user_ids)
        for emoji, user_ids in grouped.items()
    ]


class MessageSerializer:
    """Builds the caller-facing message representation."""

    def __init__(self, uploads_url_prefix: str = "/uploads"):
        self.uploads_url_prefix = uploads_url_prefix.rstrip("/")

    def attachment_url(self, stored_as: str) -> str:
        return f"{self.uploads_url_prefix}/{stored_as}"

    def serialize(self, message: MessageRecord) -> SerializedMessage:
        author = None
        if message.author is not None:
            author = MessageAuthor(
                id=message.author.id,
                username=message.author.username,
                display_name=message.author.display_name,
                avatar_url=message.author.avatar_url,
                status=message.author.status,
            )

        reply_to = None
        if message.reply_to is not None:
            reply_to = ReplyPreview(
                id=message.reply_to.id,
                content=message.reply_to.content,
                author=ReplyAuthor(
                    id=message.reply_to.author_id,
                    username=message.reply_to.author_username,
                    display_name=message.reply_to.author_display_name,
                ),
            )

        return SerializedMessage(
            id=message.id,
            content=message.content,
            type=message.type or "default",
            channel_id=message.channel_id,
            author_id=message.author_id,
            created_at=format_timestamp(message.created_at),
            edited_at=_iso(message.edited_at),
            author=author,
            attachments=[
                AttachmentPayload(
                    id=attachment.id,
                    filename=attachment.filename,
                    url=self.attachment_url(attachment.stored_as),
                    mime_type=attachment.mime_type,
                    size=attachment.size,
                )
                for attachment in message.attachments
            ],
            reactions=aggregate_reactions(message.reactions),
            embeds=[
                EmbedPayload(
                    id=embed.id,
                    url=embed.url,
                    title=embed.title,
                    description=embed.description,
                    image_url=embed.image_url,
                    site_name=embed.site_name,
                    favicon=embed.favicon,
                )
                for embed in message.embeds
            ],
            reply_to=reply_to,
            pinned_at=_iso(message.pinned_at),
            pinned_by_id=message.pinned_by_id,
            mentions=list(message.mentions),
            thread_id=message.thread_id,
            webhook_id=message.webhook_id,
            webhook_name=message.webhook.name if message.webhook else None,
            webhook_avatar_url=message.webhook.avatar_url if message.webhook else None,
        )


__all__ = ["MessageSerializer", "aggregate_reactions"]
