"""Membership lookups and the server access guard."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import status

from ..models.server import Membership
from .database import DatabaseService

logger = logging.getLogger(__name__)


class MembershipError(Exception):
    """Raised when a user has no membership in the requested server."""

    def __init__(
        self,
        error: str = "forbidden",
        message: str = "Not a member",
        *,
        status_code: int = status.HTTP_403_FORBIDDEN,
        detail: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.error = error
        self.message = message
        self.status_code = status_code
        self.detail = detail or {}


class MembershipStore:
    """Read-only access to server membership records."""

    def __init__(self, db_service: DatabaseService | None = None):
        self._db = db_service or DatabaseService()

    def find_membership(self, user_id: str, server_id: str) -> Optional[Membership]:
        """Return the unique membership for (user_id, server_id), if any."""
        conn = self._db.connect()
        try:
            row = conn.execute(
                """
                SELECT id, role, user_id, server_id
                FROM members
                WHERE user_id = ? AND server_id = ?
                """,
                (user_id, server_id),
            ).fetchone()
        finally:
            conn.close()

        if row is None:
            return None
        return Membership(
            id=row["id"],
            role=row["role"],
            user_id=row["user_id"],
            server_id=row["server_id"],
        )

    def authorize(self, user_id: str, server_id: str) -> Membership:
        """
        Ensure the user belongs to the server.

        Raises MembershipError when no membership exists. The error carries
        no hint about whether the server itself exists.
        """
        membership = self.find_membership(user_id, server_id)
        if membership is None:
            logger.info(
                "Denied server access",
                extra={"user_id": user_id, "server_id": server_id},
            )
            raise MembershipError()
        return membership


__all__ = ["MembershipError", "MembershipStore"]
