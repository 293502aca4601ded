"""SQLite-backed message store: scoped substring search with keyset paging."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import sqlite3
from typing import Dict, List, Optional, Sequence

from ..models.message import (
    AttachmentRecord,
    AuthorRecord,
    EmbedRecord,
    MessageRecord,
    ReactionRecord,
    ReplyRecord,
    WebhookRecord,
)
from .database import DatabaseService, parse_timestamp

logger = logging.getLogger(__name__)

LIKE_ESCAPE = "\\"


@dataclass(frozen=True)
class MessageFilter:
    """Predicate for a message search: channel scope, content, optional author."""

    channel_ids: Sequence[str]
    contains: str
    author_id: Optional[str] = None


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so the pattern matches ``text`` literally."""
    return (
        text.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )


def _placeholders(count: int) -> str:
    return ", ".join("?" for _ in range(count))


class MessageStore:
    """Read-only message queries used by search."""

    def __init__(self, db_service: DatabaseService | None = None):
        self._db = db_service or DatabaseService()

    def search_messages(
        self,
        message_filter: MessageFilter,
        *,
        limit: int,
        cursor: Optional[str] = None,
        case_sensitive: bool = False,
    ) -> List[MessageRecord]:
        """
        Return up to ``limit`` messages matching the filter, newest first.

        Rows are ordered by ``(created_at DESC, id DESC)``. When ``cursor`` is
        given, only rows strictly after that message in this ordering are
        returned; an unknown cursor yields no rows.
        """
        if not message_filter.channel_ids:
            return []

        params: List[object] = []
        sql = "SELECT m.* FROM messages m"
        if cursor:
            sql += " JOIN messages anchor ON anchor.id = ?"
            params.append(cursor)

        # Scope is bound as one JSON array, whatever the channel count.
        sql += " WHERE m.channel_id IN (SELECT value FROM json_each(?))"
        params.append(json.dumps(list(message_filter.channel_ids)))

        if case_sensitive:
            sql += " AND instr(m.content, ?) > 0"
            params.append(message_filter.contains)
        else:
            # SQLite LIKE folds ASCII case only.
            sql += f" AND m.content LIKE ? ESCAPE '{LIKE_ESCAPE}'"
            params.append(f"%{escape_like(message_filter.contains)}%")

        if message_filter.author_id:
            sql += " AND m.author_id = ?"
            params.append(message_filter.author_id)

        if cursor:
            sql += " AND (m.created_at, m.id) < (anchor.created_at, anchor.id)"

        sql += " ORDER BY m.created_at DESC, m.id DESC LIMIT ?"
        params.append(limit)

        conn = self._db.connect()
        try:
            rows = conn.execute(sql, params).fetchall()
            records = [self._to_record(row) for row in rows]
            if records:
                self._attach_relations(conn, records)
        finally:
            conn.close()

        logger.debug(
            "Message search returned %d rows (channels=%d, cursor=%s)",
            len(records),
            len(message_filter.channel_ids),
            cursor,
        )
        return records

    @staticmethod
    def _to_record(row: sqlite3.Row) -> MessageRecord:
        return MessageRecord(
            id=row["id"],
            content=row["content"],
            type=row["type"],
            channel_id=row["channel_id"],
            author_id=row["author_id"],
            created_at=parse_timestamp(row["created_at"]),
            edited_at=parse_timestamp(row["edited_at"]),
            pinned_at=parse_timestamp(row["pinned_at"]),
            pinned_by_id=row["pinned_by_id"],
            reply_to_id=row["reply_to_id"],
            thread_id=row["thread_id"],
            webhook_id=row["webhook_id"],
        )

    def _attach_relations(self, conn: sqlite3.Connection, records: List[MessageRecord]) -> None:
        """Load authors, attachments, reactions, embeds, replies, mentions and webhooks in batches."""
        message_ids = [record.id for record in records]
        ids_sql = _placeholders(len(message_ids))

        author_ids = sorted({record.author_id for record in records})
        authors: Dict[str, AuthorRecord] = {
            row["id"]: AuthorRecord(
                id=row["id"],
                username=row["username"],
                display_name=row["display_name"],
                avatar_url=row["avatar_url"],
                status=row["status"],
            )
            for row in conn.execute(
                f"""
                SELECT id, username, display_name, avatar_url, status
                FROM users WHERE id IN ({_placeholders(len(author_ids))})
                """,
                author_ids,
            )
        }

        attachments: Dict[str, List[AttachmentRecord]] = {}
        for row in conn.execute(
            f"""
            SELECT id, filename, stored_as, mime_type, size, message_id
            FROM attachments WHERE message_id IN ({ids_sql})
            ORDER BY rowid
            """,
            message_ids,
        ):
            attachments.setdefault(row["message_id"], []).append(
                AttachmentRecord(
                    id=row["id"],
                    filename=row["filename"],
                    stored_as=row["stored_as"],
                    mime_type=row["mime_type"],
                    size=row["size"],
                )
            )

        reactions: Dict[str, List[ReactionRecord]] = {}
        for row in conn.execute(
            f"""
            SELECT emoji, user_id, message_id
            FROM reactions WHERE message_id IN ({ids_sql})
            ORDER BY rowid
            """,
            message_ids,
        ):
            reactions.setdefault(row["message_id"], []).append(
                ReactionRecord(emoji=row["emoji"], user_id=row["user_id"])
            )

        embeds: Dict[str, List[EmbedRecord]] = {}
        for row in conn.execute(
            f"""
            SELECT id, url, title, description, image_url, site_name, favicon, message_id
            FROM embeds WHERE message_id IN ({ids_sql})
            ORDER BY rowid
            """,
            message_ids,
        ):
            embeds.setdefault(row["message_id"], []).append(
                EmbedRecord(
                    id=row["id"],
                    url=row["url"],
                    title=row["title"],
                    description=row["description"],
                    image_url=row["image_url"],
                    site_name=row["site_name"],
                    favicon=row["favicon"],
                )
            )

        mentions: Dict[str, List[str]] = {}
        for row in conn.execute(
            f"SELECT message_id, user_id FROM mentions WHERE message_id IN ({ids_sql}) ORDER BY rowid",
            message_ids,
        ):
            mentions.setdefault(row["message_id"], []).append(row["user_id"])

        reply_ids = sorted({record.reply_to_id for record in records if record.reply_to_id})
        replies: Dict[str, ReplyRecord] = {}
        if reply_ids:
            for row in conn.execute(
                f"""
                SELECT m.id, m.content, u.id AS author_id, u.username, u.display_name
                FROM messages m
                JOIN users u ON u.id = m.author_id
                WHERE m.id IN ({_placeholders(len(reply_ids))})
                """,
                reply_ids,
            ):
                replies[row["id"]] = ReplyRecord(
                    id=row["id"],
                    content=row["content"],
                    author_id=row["author_id"],
                    author_username=row["username"],
                    author_display_name=row["display_name"],
                )

        webhook_ids = sorted({record.webhook_id for record in records if record.webhook_id})
        webhooks: Dict[str, WebhookRecord] = {}
        if webhook_ids:
            for row in conn.execute(
                f"SELECT id, name, avatar_url FROM webhooks WHERE id IN ({_placeholders(len(webhook_ids))})",
                webhook_ids,
            ):
                webhooks[row["id"]] = WebhookRecord(
                    id=row["id"], name=row["name"], avatar_url=row["avatar_url"]
                )

        for record in records:
            record.author = authors.get(record.author_id)
            record.attachments = attachments.get(record.id, [])
            record.reactions = reactions.get(record.id, [])
            record.embeds = embeds.get(record.id, [])
            record.mentions = mentions.get(record.id, [])
            if record.reply_to_id:
                record.reply_to = replies.get(record.reply_to_id)
            if record.webhook_id:
                record.webhook = webhooks.get(record.webhook_id)


__all__ = ["MessageFilter", "MessageStore", "escape_like"]
