"""Seed a demo server so search is usable in local development."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
import logging
import sqlite3
from typing import Optional
import uuid

from .database import DatabaseService, format_timestamp, init_database

logger = logging.getLogger(__name__)

DEMO_SERVER_ID = "demo-server"
DEMO_USER_IDS = ("local-dev", "demo-user")

DEMO_CHANNELS = [
    {"id": "demo-general", "name": "general", "type": "text"},
    {"id": "demo-engineering", "name": "engineering", "type": "text"},
    {"id": "demo-lounge", "name": "Lounge", "type": "voice"},
]

DEMO_MESSAGES = [
    ("demo-general", "demo-user", "Welcome to the demo server! Try searching for 'deploy'."),
    ("demo-engineering", "local-dev", "Starting the deploy of the search service."),
    ("demo-engineering", "demo-user", "Deploy finished, rollback plan is in the pinned notes."),
    ("demo-general", "local-dev", "Anyone up for lunch?"),
    ("demo-engineering", "local-dev", "Next deploy window is Thursday 10:00 UTC."),
    ("demo-general", "demo-user", "Reminder: 100% of tests must pass before merging."),
]


def _new_id() -> str:
    return uuid.uuid4().hex


def create_user(
    conn: sqlite3.Connection,
    username: str,
    *,
    user_id: Optional[str] = None,
    display_name: Optional[str] = None,
    avatar_url: Optional[str] = None,
) -> str:
    user_id = user_id or _new_id()
    conn.execute(
        """
        INSERT INTO users (id, username, display_name, avatar_url, created_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (
            user_id,
            username,
            display_name or username,
            avatar_url,
            format_timestamp(datetime.now(timezone.utc)),
        ),
    )
    return user_id


def create_server(
    conn: sqlite3.Connection, name: str, owner_id: str, *, server_id: Optional[str] = None
) -> str:
    """Create a server and make its owner a member."""
    server_id = server_id or _new_id()
    conn.execute(
        "INSERT INTO servers (id, name, owner_id, created_at) VALUES (?, ?, ?, ?)",
        (server_id, name, owner_id, format_timestamp(datetime.now(timezone.utc))),
    )
    add_member(conn, owner_id, server_id, role="owner")
    return server_id


def add_member(
    conn: sqlite3.Connection, user_id: str, server_id: str, *, role: str = "member"
) -> str:
    member_id = _new_id()
    conn.execute(
        "INSERT INTO members (id, role, user_id, server_id) VALUES (?, ?, ?, ?)",
        (member_id, role, user_id, server_id),
    )
    return member_id


def create_channel(
    conn: sqlite3.Connection,
    server_id: str,
    name: str,
    *,
    kind: str = "text",
    position: int = 0,
    channel_id: Optional[str] = None,
) -> str:
    channel_id = channel_id or _new_id()
    conn.execute(
        "INSERT INTO channels (id, name, type, position, server_id) VALUES (?, ?, ?, ?, ?)",
        (channel_id, name, kind, position, server_id),
    )
    return channel_id


def create_message(
    conn: sqlite3.Connection,
    channel_id: str,
    author_id: str,
    content: str,
    *,
    created_at: datetime,
    message_id: Optional[str] = None,
    reply_to_id: Optional[str] = None,
    thread_id: Optional[str] = None,
    webhook_id: Optional[str] = None,
) -> str:
    message_id = message_id or _new_id()
    conn.execute(
        """
        INSERT INTO messages
            (id, content, channel_id, author_id, reply_to_id, thread_id, webhook_id, created_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            message_id,
            content,
            channel_id,
            author_id,
            reply_to_id,
            thread_id,
            webhook_id,
            format_timestamp(created_at),
        ),
    )
    return message_id


def seed_demo_server(db_service: DatabaseService | None = None) -> int:
    """
    Create the demo server, its channels and a handful of messages.

    Returns the number of messages created (0 if the demo server already exists).
    """
    db_service = db_service or DatabaseService()
    conn = db_service.connect()
    try:
        exists = conn.execute(
            "SELECT 1 FROM servers WHERE id = ?", (DEMO_SERVER_ID,)
        ).fetchone()
        if exists:
            logger.info("Demo server already present; skipping seed")
            return 0

        with conn:
            for user_id in DEMO_USER_IDS:
                if not conn.execute("SELECT 1 FROM users WHERE id = ?", (user_id,)).fetchone():
                    create_user(conn, user_id, user_id=user_id)

            create_server(conn, "Demo Server", DEMO_USER_IDS[0], server_id=DEMO_SERVER_ID)
            for user_id in DEMO_USER_IDS[1:]:
                add_member(conn, user_id, DEMO_SERVER_ID)

            for position, channel in enumerate(DEMO_CHANNELS):
                create_channel(
                    conn,
                    DEMO_SERVER_ID,
                    channel["name"],
                    kind=channel["type"],
                    position=position,
                    channel_id=channel["id"],
                )

            base = datetime.now(timezone.utc) - timedelta(hours=len(DEMO_MESSAGES))
            for offset, (channel_id, author_id, content) in enumerate(DEMO_MESSAGES):
                create_message(
                    conn,
                    channel_id,
                    author_id,
                    content,
                    created_at=base + timedelta(hours=offset),
                )
    finally:
        conn.close()

    logger.info(f"Seeded demo server with {len(DEMO_MESSAGES)} messages")
    return len(DEMO_MESSAGES)


def init_and_seed(db_service: DatabaseService | None = None, *, seed: bool = True) -> None:
    """
    Initialize database schema and optionally seed the demo server.

    Called on application startup.
    """
    db_service = db_service or DatabaseService()
    db_path = init_database(db_service.db_path)
    logger.info(f"Database initialized at: {db_path}")

    if seed:
        seed_demo_server(db_service)


__all__ = [
    "seed_demo_server",
    "init_and_seed",
    "create_user",
    "create_server",
    "add_member",
    "create_channel",
    "create_message",
    "DEMO_SERVER_ID",
]
