from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Dict, List

import pytest

from backend.src.services import config as config_module
from backend.src.services.config import AppConfig
from backend.src.services.database import DatabaseService
from backend.src.services.seed import (
    add_member,
    create_channel,
    create_message,
    create_server,
    create_user,
)

JWT_SECRET = "test-secret-value-0123456789abcdefghij"
BASE_TIME = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@dataclass
class ChatFixture:
    """Ids of the rows created for the deploy scenario."""

    server_id: str
    other_server_id: str
    users: Dict[str, str]
    channels: Dict[str, str]
    messages: Dict[str, List[str]] = field(default_factory=dict)


@pytest.fixture(autouse=True)
def restore_config_cache():
    """Ensure configuration cache is cleared between tests."""
    config_module.reload_config()
    yield
    config_module.reload_config()


@pytest.fixture()
def app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(database_path=tmp_path / "chat.db", jwt_secret_key=JWT_SECRET)


@pytest.fixture()
def db_service(app_config: AppConfig) -> DatabaseService:
    service = DatabaseService(app_config.database_path)
    service.initialize()
    return service


@pytest.fixture()
def chat(db_service: DatabaseService) -> ChatFixture:
    """
    Server S with text channels C1, C2 and voice channel V.

    "deploy" appears in C1 (3 messages), C2 (1) and V (2). A second server
    owned by someone else has a text channel X with its own "deploy" message.
    Messages are one minute apart, oldest first.
    """
    conn = db_service.connect()
    try:
        with conn:
            users = {
                name: create_user(conn, name, user_id=name, display_name=name.title())
                for name in ("alice", "bob", "eve")
            }
            server_id = create_server(conn, "S", users["alice"], server_id="server-s")
            add_member(conn, users["bob"], server_id)
            other_server_id = create_server(conn, "Other", users["eve"], server_id="server-other")

            channels = {
                "C1": create_channel(conn, server_id, "c1", channel_id="c1"),
                "C2": create_channel(conn, server_id, "c2", position=1, channel_id="c2"),
                "V": create_channel(conn, server_id, "v", kind="voice", position=2, channel_id="v"),
                "X": create_channel(conn, other_server_id, "x", channel_id="x"),
            }

            plan = [
                ("C1", "alice", "deploy started"),
                ("C1", "bob", "lunch?"),
                ("V", "alice", "deploy voice note"),
                ("C2", "bob", "the deploy failed"),
                ("C1", "bob", "retrying deploy"),
                ("X", "eve", "deploy elsewhere"),
                ("V", "bob", "deploy again in voice"),
                ("C1", "alice", "Deploy finished"),
            ]
            messages: Dict[str, List[str]] = {}
            for minute, (channel, author, content) in enumerate(plan):
                message_id = create_message(
                    conn,
                    channels[channel],
                    users[author],
                    content,
                    created_at=BASE_TIME + timedelta(minutes=minute),
                    message_id=f"m{minute:02d}",
                )
                messages.setdefault(channel, []).append(message_id)
    finally:
        conn.close()

    return ChatFixture(
        server_id=server_id,
        other_server_id=other_server_id,
        users=users,
        channels=channels,
        messages=messages,
    )
