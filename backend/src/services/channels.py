"""Channel enumeration for a server."""

from __future__ import annotations

from typing import List

from ..models.server import Channel, ChannelKind
from .database import DatabaseService


class ChannelStore:
    """Read-only access to server channels."""

    def __init__(self, db_service: DatabaseService | None = None):
        self._db = db_service or DatabaseService()

    def list_channels(self, server_id: str, kind: ChannelKind = "text") -> List[Channel]:
        """Return the server's channels of the given kind, in display order."""
        conn = self._db.connect()
        try:
            rows = conn.execute(
                """
                SELECT id, name, type, position, server_id
                FROM channels
                WHERE server_id = ? AND type = ?
                ORDER BY position, id
                """,
                (server_id, kind),
            ).fetchall()
        finally:
            conn.close()

        return [
            Channel(
                id=row["id"],
                name=row["name"],
                type=row["type"],
                position=row["position"],
                server_id=row["server_id"],
            )
            for row in rows
        ]


__all__ = ["ChannelStore"]
